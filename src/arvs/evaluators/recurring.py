"""
MyPocket ARVS - Recurring Price Increase Evaluator

Spots a recurring charge whose newest instance costs more than the one
before it.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from src.arvs.config import ArvsConfig
from src.arvs.evaluators.base import BaseEvaluator, format_amount
from src.arvs.models import (
    Expense,
    ExpenseId,
    Insight,
    InsightDraft,
    InsightType,
    Snapshot,
    to_local,
)

logger = logging.getLogger(__name__)

SeriesKey = Tuple[str, str]


def series_key(expense: Expense) -> SeriesKey:
    """Identify a recurring series by (description, category).

    Unnamed recurring expenses in the same category share one series.
    """
    return (expense.description or "", expense.category)


def price_increase_key(expense_id: ExpenseId) -> str:
    return f"PRICE_INCREASE_{expense_id}"


def group_recurring(expenses: Sequence[Expense]) -> Dict[SeriesKey, List[Expense]]:
    """Group recurring expenses into series, newest first within each."""
    groups: Dict[SeriesKey, List[Expense]] = defaultdict(list)
    for expense in expenses:
        if expense.is_recurring:
            groups[series_key(expense)].append(expense)
    for members in groups.values():
        members.sort(key=lambda e: to_local(e.created_at), reverse=True)
    return dict(groups)


class RecurringPriceIncreaseEvaluator(BaseEvaluator):
    """
    Compares the two most recent charges of every recurring series.

    Only the latest transition is looked at: once a newer charge arrives,
    an older increase is never reported retroactively.
    """

    def __init__(self, config: Optional[ArvsConfig] = None):
        super().__init__("recurring_price_increase", config)

    def evaluate(self, snapshot: Snapshot) -> List[InsightDraft]:
        reported = {
            str(insight.related_expense_id)
            for insight in snapshot.insights
            if insight.insight_type == InsightType.PRICE_INCREASE
        }
        symbol = self.config.currency_symbol

        drafts = []
        for members in group_recurring(snapshot.expenses).values():
            if len(members) < 2:
                continue
            latest, previous = members[0], members[1]
            if latest.amount <= previous.amount:
                continue
            if str(latest.id) in reported:
                continue

            drafts.append(InsightDraft(
                message=(
                    f"The price for your recurring '{latest.category}' expense may have "
                    f"increased from {format_amount(previous.amount, symbol)} to "
                    f"{format_amount(latest.amount, symbol)}."
                ),
                insight_type=InsightType.PRICE_INCREASE,
                related_category=price_increase_key(latest.id),
                related_expense_id=latest.id,
            ))

        return drafts


def check_price_increases(
    expenses: Sequence[Expense],
    existing_insights: Sequence[Insight],
    config: Optional[ArvsConfig] = None,
) -> List[InsightDraft]:
    """Functional form of RecurringPriceIncreaseEvaluator."""
    snapshot = Snapshot.capture(expenses, (), existing_insights)
    return RecurringPriceIncreaseEvaluator(config).evaluate(snapshot)
