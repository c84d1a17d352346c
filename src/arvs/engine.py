"""
MyPocket ARVS - Main Orchestrator

The InsightEngine runs once per data refresh:
1. Captures an immutable snapshot of expenses, budgets and insights
2. Runs every enabled evaluator against that same snapshot
3. Stamps the owning user on the combined drafts
4. Persists them with a single batch write

It reports whether anything new was recorded so the caller knows to re-read
its insight list. The engine never touches the caller's collections.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Sequence

from src.arvs.config import ArvsConfig
from src.arvs.evaluators import BaseEvaluator, default_evaluators
from src.arvs.models import Budget, Expense, Insight, InsightDraft, Snapshot

logger = logging.getLogger(__name__)


class InsightEngine:
    """
    Orchestrates the evaluators and the insight batch write.

    Args:
        sink: Object with an ``insert_insights(drafts)`` method, or a callable
            taking the drafts. It may return the number of rows written; it
            signals failure by raising or returning False.
        evaluators: Evaluators to run, in order. Defaults to default_evaluators()
        config: Engine configuration. Loaded from file if not provided
    """

    def __init__(
        self,
        sink: Any,
        evaluators: Optional[Sequence[BaseEvaluator]] = None,
        config: Optional[ArvsConfig] = None,
    ):
        self.config = config or ArvsConfig.load()
        self.sink = sink
        self._insert = getattr(sink, "insert_insights", sink)
        self.evaluators: List[BaseEvaluator] = list(
            evaluators if evaluators is not None else default_evaluators(self.config)
        )

    def evaluate(self, snapshot: Snapshot, user_id: str) -> List[InsightDraft]:
        """Run all enabled evaluators and return the user's combined drafts."""
        drafts: List[InsightDraft] = []

        for evaluator in self.evaluators:
            if not evaluator.is_enabled():
                continue

            try:
                result = evaluator.run(snapshot)
            except Exception:
                logger.error(f"[ARVS] Evaluator {evaluator.name} failed, aborting cycle")
                raise

            drafts.extend(draft.for_user(user_id) for draft in result.drafts)

        return drafts

    def run(
        self,
        expenses: Sequence[Expense],
        budgets: Sequence[Budget],
        existing_insights: Sequence[Insight],
        user_id: str,
        now: Optional[datetime] = None,
    ) -> bool:
        """Evaluate one refresh cycle and persist new insights.

        Returns:
            True if new insights were recorded, False otherwise (nothing new,
            or the write failed)
        """
        snapshot = Snapshot.capture(expenses, budgets, existing_insights, now=now)
        drafts = self.evaluate(snapshot, user_id)

        if not drafts:
            logger.debug("[ARVS] No new insights")
            return False

        try:
            written = self._insert(drafts)
        except Exception as e:
            logger.error("[ARVS] Failed to save insights: %s", e, exc_info=True)
            return False

        if written is False:
            logger.error("[ARVS] Failed to save insights: store rejected the batch")
            return False

        count = len(drafts)
        if isinstance(written, int) and not isinstance(written, bool):
            count = written
            if count == 0:
                logger.info("[ARVS] All %d insights were already recorded", len(drafts))
                return False

        logger.info("[ARVS] Recorded %d new insights for user %s", count, user_id)
        return True


def run_insight_engine(
    expenses: Sequence[Expense],
    budgets: Sequence[Budget],
    existing_insights: Sequence[Insight],
    user_id: str,
    sink: Any,
    evaluators: Optional[Sequence[BaseEvaluator]] = None,
    config: Optional[ArvsConfig] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Run one insight-generation cycle. See InsightEngine.run()."""
    engine = InsightEngine(sink, evaluators=evaluators, config=config)
    return engine.run(expenses, budgets, existing_insights, user_id, now=now)
