"""
MyPocket ARVS - Budget Threshold Evaluator

Warns when the current month's spending in a category nears or passes
that category's budget.
"""

import logging
import math
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from settings import settings
from src.arvs.config import ArvsConfig
from src.arvs.evaluators.base import BaseEvaluator, format_amount
from src.arvs.models import (
    Budget,
    Expense,
    Insight,
    InsightDraft,
    InsightType,
    Snapshot,
    to_local,
)

logger = logging.getLogger(__name__)


def month_key(moment: datetime) -> str:
    return f"{moment.year}-{moment.month}"


def budget_key(level: float, category: str, moment: datetime) -> str:
    """Dedup key for one budget level in one month, e.g. ``BUDGET_80_Food_2024-10``."""
    return f"BUDGET_{format_amount(level)}_{category}_{month_key(moment)}"


def month_start(moment: datetime) -> datetime:
    """First instant of the month containing ``moment`` (local calendar)."""
    local = to_local(moment)
    return settings.TIMEZONE.localize(datetime(local.year, local.month, 1))


def spending_by_category(expenses: Sequence[Expense], since: datetime, until: datetime) -> Dict[str, float]:
    """Sum base-currency amounts per category for expenses in [since, until]."""
    totals: Dict[str, float] = defaultdict(float)
    for expense in expenses:
        created = to_local(expense.created_at)
        if since <= created <= until:
            totals[expense.category] += expense.base_amount
    return dict(totals)


def budget_percentage(spent: float, limit: float) -> float:
    """Percentage of the budget used. A zero (or negative) limit counts as exceeded."""
    if limit <= 0:
        return math.inf
    return spent / limit * 100


class BudgetThresholdEvaluator(BaseEvaluator):
    """
    Checks each budget against this month's spending.

    Levels (configurable under thresholds.budget_percent):
    - critical (100%): "gone over" warning, once per category per month
    - warning (80%): "nearing" warning, once per category per month, and
      never after the critical warning for that month was recorded
    """

    def __init__(self, config: Optional[ArvsConfig] = None):
        super().__init__("budget_threshold", config)

    def evaluate(self, snapshot: Snapshot) -> List[InsightDraft]:
        if not snapshot.budgets:
            return []

        now = to_local(snapshot.taken_at)
        spent_by_category = spending_by_category(snapshot.expenses, month_start(now), now)

        warning = self.config.get_threshold("budget_percent", "warning") or 80
        critical = self.config.get_threshold("budget_percent", "critical") or 100
        symbol = self.config.currency_symbol

        drafts = []
        for budget in snapshot.budgets:
            spent = spent_by_category.get(budget.category, 0)
            percentage = budget_percentage(spent, budget.limit)
            critical_key = budget_key(critical, budget.category, now)
            warning_key = budget_key(warning, budget.category, now)

            if percentage >= critical:
                if snapshot.has_insight(InsightType.BUDGET_WARNING, critical_key):
                    continue
                drafts.append(InsightDraft(
                    message=(
                        f"You've gone over your {format_amount(budget.limit, symbol)} budget "
                        f"for {budget.category}, spending {symbol}{spent:.0f}."
                    ),
                    insight_type=InsightType.BUDGET_WARNING,
                    related_category=critical_key,
                ))
            elif percentage >= warning:
                if (snapshot.has_insight(InsightType.BUDGET_WARNING, warning_key)
                        or snapshot.has_insight(InsightType.BUDGET_WARNING, critical_key)):
                    continue
                drafts.append(InsightDraft(
                    message=(
                        f"You've spent {symbol}{spent:.0f} of your "
                        f"{format_amount(budget.limit, symbol)} budget for {budget.category} "
                        f"(over {format_amount(warning)}%)."
                    ),
                    insight_type=InsightType.BUDGET_WARNING,
                    related_category=warning_key,
                ))

        return drafts


def check_budget_warnings(
    expenses: Sequence[Expense],
    budgets: Sequence[Budget],
    existing_insights: Sequence[Insight],
    now: Optional[datetime] = None,
    config: Optional[ArvsConfig] = None,
) -> List[InsightDraft]:
    """Functional form of BudgetThresholdEvaluator."""
    snapshot = Snapshot.capture(expenses, budgets, existing_insights, now=now)
    return BudgetThresholdEvaluator(config).evaluate(snapshot)
