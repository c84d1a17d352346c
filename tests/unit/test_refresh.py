"""Tests for the refresh cycle glue, against a real SQLite store."""
import pytest
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from settings import settings
from src.arvs.engine import InsightEngine
from src.arvs.models import Budget, Expense, InsightType, RecurringType
from src.arvs.refresh import refresh_insights


pytestmark = pytest.mark.integration


@pytest.fixture
def populated_store(temp_store):
    """Store with one over-budget category and a price increase."""
    current = datetime.now(settings.TIMEZONE)
    temp_store.save_budgets([Budget("Food", 100)])
    temp_store.add_expense(Expense(id=0, user_id="user-1", amount=150, category="Food", created_at=current))
    temp_store.add_expense(Expense(
        id=0, user_id="user-1", amount=199, category="Music", description="Spotify",
        created_at=current - timedelta(days=40), recurring_type=RecurringType.MONTHLY,
    ))
    temp_store.add_expense(Expense(
        id=0, user_id="user-1", amount=229, category="Music", description="Spotify",
        created_at=current, recurring_type=RecurringType.MONTHLY,
    ))
    return temp_store


class TestRefreshInsights:

    def test_generates_and_rereads(self, populated_store, arvs_config):
        engine = InsightEngine(populated_store, config=arvs_config)

        insights = refresh_insights(populated_store, "user-1", engine=engine)

        assert sorted(i.insight_type.value for i in insights) == ["BUDGET_WARNING", "PRICE_INCREASE"]
        assert all(i.user_id == "user-1" for i in insights)

    def test_second_refresh_adds_nothing(self, populated_store, arvs_config):
        engine = InsightEngine(populated_store, config=arvs_config)
        first = refresh_insights(populated_store, "user-1", engine=engine)

        second = refresh_insights(populated_store, "user-1", engine=engine)

        assert {i.id for i in second} == {i.id for i in first}

    def test_dismissed_insight_comes_back(self, populated_store, arvs_config):
        engine = InsightEngine(populated_store, config=arvs_config)
        insights = refresh_insights(populated_store, "user-1", engine=engine)
        budget_warning = next(i for i in insights if i.insight_type == InsightType.BUDGET_WARNING)

        populated_store.delete_insight(budget_warning.id)
        again = refresh_insights(populated_store, "user-1", engine=engine)

        assert len(again) == 2
        assert budget_warning.id not in {i.id for i in again}

    def test_offline_skips_engine(self, populated_store):
        engine = MagicMock()

        assert refresh_insights(populated_store, "user-1", online=False, engine=engine) == []
        engine.run.assert_not_called()

    def test_user_without_expenses_skips_engine(self, populated_store):
        engine = MagicMock()

        assert refresh_insights(populated_store, "nobody", engine=engine) == []
        engine.run.assert_not_called()

    def test_failed_write_returns_previous_list(self, populated_store):
        engine = MagicMock()
        engine.run.return_value = False

        assert refresh_insights(populated_store, "user-1", engine=engine) == []
        engine.run.assert_called_once()
