"""
MyPocket ARVS - Configuration

Loads and validates configuration from config/arvs.json
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional

from settings import settings

logger = logging.getLogger(__name__)


@dataclass
class EvaluatorConfig:
    """Configuration for a single evaluator."""
    enabled: bool = True


@dataclass
class ArvsConfig:
    """Main configuration for the insight engine."""

    # Threshold settings
    thresholds: Dict[str, Any] = field(default_factory=dict)

    # Evaluator settings
    evaluators: Dict[str, EvaluatorConfig] = field(default_factory=dict)

    # Presentation
    currency_symbol: str = "₹"

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "ArvsConfig":
        """Load configuration from JSON file.

        Args:
            config_path: Path to config file. Defaults to settings.ARVS_CONFIG_FILE

        Returns:
            ArvsConfig instance
        """
        if config_path is None:
            config_path = settings.ARVS_CONFIG_FILE

        if not config_path.exists():
            logger.warning(f"Config not found at {config_path}, using defaults")
            return cls.default()

        try:
            with open(config_path) as f:
                data = json.load(f)
            return cls._from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Failed to load config: {e}, using defaults")
            return cls.default()

    @classmethod
    def default(cls) -> "ArvsConfig":
        """Create default configuration."""
        return cls(
            thresholds={
                "budget_percent": {"warning": 80, "critical": 100},
            },
            evaluators={
                "budget_threshold": EvaluatorConfig(enabled=True),
                "recurring_price_increase": EvaluatorConfig(enabled=True),
            },
            currency_symbol=settings.CURRENCY_SYMBOL,
        )

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "ArvsConfig":
        """Create config from dictionary."""
        config = cls.default()

        # Thresholds are merged per name so a partial file keeps the defaults
        for name, value in data.get("thresholds", {}).items():
            current = config.thresholds.get(name)
            if isinstance(current, dict) and isinstance(value, dict):
                config.thresholds[name] = {**current, **value}
            else:
                config.thresholds[name] = value

        for name, ev_data in data.get("evaluators", {}).items():
            config.evaluators[name] = EvaluatorConfig(
                enabled=ev_data.get("enabled", True),
            )

        config.currency_symbol = data.get("currency_symbol", config.currency_symbol)

        return config

    def get_threshold(self, name: str, level: str = "warning") -> Optional[float]:
        """Get a threshold value.

        Args:
            name: Threshold name (e.g., "budget_percent")
            level: "warning" or "critical"

        Returns:
            Threshold value or None
        """
        threshold = self.thresholds.get(name)
        if isinstance(threshold, dict):
            return threshold.get(level)
        return threshold

    def is_evaluator_enabled(self, name: str) -> bool:
        """Check if an evaluator is enabled. Unknown evaluators run by default."""
        evaluator = self.evaluators.get(name)
        return evaluator.enabled if evaluator else True
