"""
MyPocket ARVS Test Configuration

Shared fixtures and configuration for pytest.
"""

import sys
import pytest
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that touch a real SQLite file"
    )


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


# =============================================================================
# Clock & Config Fixtures
# =============================================================================

@pytest.fixture
def now() -> datetime:
    """A fixed mid-month moment in the configured timezone."""
    from settings import settings

    return settings.TIMEZONE.localize(datetime(2024, 10, 15, 12, 0))


@pytest.fixture
def arvs_config():
    """Default engine configuration, independent of any config file."""
    from src.arvs.config import ArvsConfig

    config = ArvsConfig.default()
    config.currency_symbol = "₹"
    return config


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def make_expense(now):
    """Factory for expenses; ids auto-increment, created_at defaults to now."""
    from src.arvs.models import Expense

    counter = {"id": 0}

    def _make(amount, category="Food", days_ago=0, **kwargs):
        counter["id"] += 1
        kwargs.setdefault("id", counter["id"])
        kwargs.setdefault("created_at", now - timedelta(days=days_ago))
        return Expense(amount=amount, category=category, **kwargs)

    return _make


@pytest.fixture
def make_insight(now):
    """Factory for already-recorded insights."""
    from src.arvs.models import Insight

    def _make(insight_type, key, **kwargs):
        kwargs.setdefault("user_id", "user-1")
        kwargs.setdefault("message", "existing")
        kwargs.setdefault("created_at", now)
        return Insight(insight_type=insight_type, related_category=key, **kwargs)

    return _make


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def temp_store(tmp_path: Path):
    """Create a temporary insights database."""
    from src.arvs.store import InsightsStore

    db_path = tmp_path / "test_mypocket.db"
    store = InsightsStore(db_path)
    yield store
    # Cleanup handled by tmp_path fixture


@pytest.fixture
def mock_sink():
    """A sink whose batch write succeeds."""
    mock = MagicMock()
    mock.insert_insights = MagicMock(side_effect=lambda drafts: len(drafts))
    return mock
