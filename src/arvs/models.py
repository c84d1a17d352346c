"""
MyPocket ARVS - Data Models

Records the engine reads (expenses, budgets, existing insights) and the
drafts it produces. Everything here is plain data; persistence lives in
src.arvs.store.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from settings import settings

ExpenseId = Union[int, str]


def _now() -> datetime:
    return datetime.now(settings.TIMEZONE)


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse an ISO-8601 timestamp (``Z`` suffix accepted) into a datetime."""
    if isinstance(value, datetime):
        return value
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_local(value: datetime) -> datetime:
    """Express a timestamp in the configured user timezone.

    Naive datetimes are taken to already be local wall-clock time.
    """
    if value.tzinfo is None:
        return settings.TIMEZONE.localize(value)
    return value.astimezone(settings.TIMEZONE)


class RecurringType(str, Enum):
    """How often an expense repeats."""
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SourceType(str, Enum):
    """How an expense was captured."""
    MANUAL = "manual"
    VOICE = "voice"
    PHOTO = "photo"


class InsightType(str, Enum):
    """Kinds of advisory records."""
    BUDGET_WARNING = "BUDGET_WARNING"
    SPENDING_SPIKE = "SPENDING_SPIKE"  # reserved, no evaluator emits it yet
    PRICE_INCREASE = "PRICE_INCREASE"


@dataclass
class Expense:
    """A single spending record."""
    id: ExpenseId
    amount: float
    category: str
    created_at: datetime
    description: Optional[str] = None
    recurring_type: Optional[RecurringType] = None
    converted_amount: Optional[float] = None
    currency_code: Optional[str] = None
    user_id: Optional[str] = None
    source_type: SourceType = SourceType.MANUAL

    def __post_init__(self):
        self.created_at = parse_timestamp(self.created_at)
        if self.recurring_type is not None and not isinstance(self.recurring_type, RecurringType):
            self.recurring_type = RecurringType(self.recurring_type)
        if not isinstance(self.source_type, SourceType):
            self.source_type = SourceType(self.source_type)

    @property
    def is_recurring(self) -> bool:
        return self.recurring_type is not None and self.recurring_type != RecurringType.NONE

    @property
    def base_amount(self) -> float:
        """Amount in the base currency; falls back to the raw amount."""
        return self.converted_amount or self.amount

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        return cls(
            id=data["id"],
            amount=float(data["amount"]),
            category=data["category"],
            created_at=data["created_at"],
            description=data.get("description"),
            recurring_type=data.get("recurring_type"),
            converted_amount=data.get("converted_amount"),
            currency_code=data.get("currency_code"),
            user_id=data.get("user_id"),
            source_type=data.get("source_type") or SourceType.MANUAL,
        )


@dataclass
class Budget:
    """Monthly spending ceiling for one category."""
    category: str
    limit: float
    id: str = ""

    def __post_init__(self):
        if not self.id:
            self.id = f"monthly-{self.category}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Budget":
        return cls(
            category=data["category"],
            limit=float(data["limit"]),
            id=data.get("id", ""),
        )


@dataclass
class Insight:
    """A persisted advisory record.

    ``related_category`` carries the deduplication key (for example
    ``BUDGET_80_Food_2024-10``), not a bare category name.
    """
    message: str
    insight_type: InsightType
    user_id: Optional[str] = None
    related_category: Optional[str] = None
    related_expense_id: Optional[ExpenseId] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_now)
    is_read: bool = False

    def __post_init__(self):
        if not isinstance(self.insight_type, InsightType):
            self.insight_type = InsightType(self.insight_type)
        self.created_at = parse_timestamp(self.created_at)

    @property
    def dedupe_key(self) -> Optional[str]:
        return self.related_category

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Insight":
        return cls(
            id=str(data["id"]),
            user_id=data.get("user_id"),
            message=data["message"],
            insight_type=data["insight_type"],
            related_category=data.get("related_category"),
            related_expense_id=data.get("related_expense_id"),
            created_at=data["created_at"],
            is_read=bool(data.get("is_read", False)),
        )


@dataclass(frozen=True)
class InsightDraft:
    """An insight an evaluator wants recorded; not yet persisted."""
    message: str
    insight_type: InsightType
    related_category: str
    related_expense_id: Optional[ExpenseId] = None
    user_id: Optional[str] = None
    source_evaluator: str = ""

    @property
    def dedupe_key(self) -> str:
        return self.related_category

    def for_user(self, user_id: str) -> "InsightDraft":
        return replace(self, user_id=user_id)


@dataclass(frozen=True)
class Snapshot:
    """The immutable view one evaluation cycle works on."""
    expenses: Tuple[Expense, ...]
    budgets: Tuple[Budget, ...]
    insights: Tuple[Insight, ...]
    taken_at: datetime

    @classmethod
    def capture(
        cls,
        expenses: Sequence[Expense],
        budgets: Sequence[Budget],
        insights: Sequence[Insight],
        now: Optional[datetime] = None,
    ) -> "Snapshot":
        return cls(
            expenses=tuple(expenses),
            budgets=tuple(budgets),
            insights=tuple(insights),
            taken_at=to_local(now) if now is not None else _now(),
        )

    def has_insight(self, insight_type: InsightType, key: str) -> bool:
        """True if an insight of this kind already carries the dedup key."""
        return any(
            insight.insight_type == insight_type and insight.related_category == key
            for insight in self.insights
        )


@dataclass
class EvaluatorResult:
    """Result from running an evaluator."""
    evaluator_name: str
    drafts: List[InsightDraft] = field(default_factory=list)
    duration_ms: float = 0.0
