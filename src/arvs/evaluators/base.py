"""
MyPocket ARVS - Base Evaluator

Abstract base class for all rule evaluators.
"""

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import List, Optional
import logging
import time

from src.arvs.config import ArvsConfig
from src.arvs.models import EvaluatorResult, InsightDraft, Snapshot

logger = logging.getLogger(__name__)


def format_amount(value: float, symbol: str = "") -> str:
    """Render an amount for a message: whole numbers without decimals."""
    if float(value).is_integer():
        return f"{symbol}{int(value)}"
    return f"{symbol}{value:.2f}"


class BaseEvaluator(ABC):
    """
    Abstract base class for insight evaluators.

    An evaluator looks at one immutable snapshot and returns the drafts for
    conditions that have no matching insight yet. Evaluators hold no state
    between cycles and never see each other's output, so they can run in any
    order.
    """

    def __init__(self, name: str, config: Optional[ArvsConfig] = None):
        """Initialize evaluator.

        Args:
            name: Unique name for this evaluator
            config: Engine configuration. Defaults to ArvsConfig.default()
        """
        self.name = name
        self.config = config or ArvsConfig.default()

    @abstractmethod
    def evaluate(self, snapshot: Snapshot) -> List[InsightDraft]:
        """Evaluate the snapshot and return new insight drafts.

        Args:
            snapshot: Expenses, budgets and existing insights for this cycle

        Returns:
            Drafts not yet materialized (may be empty)
        """
        pass

    def run(self, snapshot: Snapshot) -> EvaluatorResult:
        """Run the evaluator and return results with timing.

        Errors from evaluate() are not caught here; a malformed snapshot
        aborts the whole cycle.
        """
        start = time.time()
        drafts = [
            replace(draft, source_evaluator=self.name)
            for draft in self.evaluate(snapshot)
        ]
        result = EvaluatorResult(
            evaluator_name=self.name,
            drafts=drafts,
            duration_ms=(time.time() - start) * 1000,
        )

        if result.drafts:
            logger.debug(f"Evaluator {self.name} produced {len(result.drafts)} drafts")

        return result

    def is_enabled(self) -> bool:
        """Check if this evaluator is enabled in config."""
        return self.config.is_evaluator_enabled(self.name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
