"""
MyPocket ARVS Insight Engine

Scans a user's expenses and budgets on each data refresh and records
advisory insights, never reporting the same condition twice.
"""

from src.arvs.models import Expense, Budget, Insight, InsightDraft, InsightType, RecurringType, Snapshot
from src.arvs.engine import InsightEngine, run_insight_engine

__all__ = [
    "InsightEngine",
    "run_insight_engine",
    "Expense",
    "Budget",
    "Insight",
    "InsightDraft",
    "InsightType",
    "RecurringType",
    "Snapshot",
]
