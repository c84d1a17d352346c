"""
MyPocket ARVS - Refresh Cycle

Glue between a data refresh and the engine: read the user's records, run the
engine when it makes sense, and re-read insights only when something new was
written.
"""

import logging
from typing import List, Optional

from src.arvs.engine import InsightEngine
from src.arvs.models import Insight
from src.arvs.store import InsightsStore

logger = logging.getLogger(__name__)


def refresh_insights(
    store: InsightsStore,
    user_id: str,
    online: bool = True,
    engine: Optional[InsightEngine] = None,
) -> List[Insight]:
    """Run the insight engine after a data refresh.

    The engine is skipped while offline or when the user has no expenses yet.

    Returns:
        The user's insights, newest first
    """
    expenses = store.list_expenses(user_id)
    budgets = store.list_budgets()
    insights = store.list_insights(user_id)

    if not online or not expenses:
        logger.debug(f"[ARVS] Skipping engine (online={online}, expenses={len(expenses)})")
        return insights

    engine = engine or InsightEngine(store)
    if engine.run(expenses, budgets, insights, user_id):
        return store.list_insights(user_id)
    return insights
