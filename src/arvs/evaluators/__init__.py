"""
MyPocket ARVS - Evaluators

Evaluators turn a snapshot into candidate insights. To add a rule, subclass
BaseEvaluator and append it to default_evaluators().
"""

from typing import List, Optional

from src.arvs.config import ArvsConfig
from src.arvs.evaluators.base import BaseEvaluator
from src.arvs.evaluators.budget import BudgetThresholdEvaluator, check_budget_warnings
from src.arvs.evaluators.recurring import (
    RecurringPriceIncreaseEvaluator,
    check_price_increases,
)


def default_evaluators(config: Optional[ArvsConfig] = None) -> List[BaseEvaluator]:
    """Build the standard evaluator list, in run order."""
    return [
        BudgetThresholdEvaluator(config),
        RecurringPriceIncreaseEvaluator(config),
    ]


__all__ = [
    "BaseEvaluator",
    "BudgetThresholdEvaluator",
    "RecurringPriceIncreaseEvaluator",
    "check_budget_warnings",
    "check_price_increases",
    "default_evaluators",
]
