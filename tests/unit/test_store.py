"""
Unit tests for the SQLite InsightsStore.
"""
import pytest
from unittest.mock import patch

from src.arvs.models import Budget, Expense, InsightDraft, InsightType, RecurringType
from src.arvs.store import InsightStoreError


def _draft(key, user_id="user-1", insight_type=InsightType.BUDGET_WARNING, **kwargs):
    return InsightDraft(
        message=f"message for {key}",
        insight_type=insight_type,
        related_category=key,
        user_id=user_id,
        **kwargs,
    )


class TestExpenses:
    """Expense persistence."""

    def test_add_and_list_round_trip(self, temp_store, now):
        expense_id = temp_store.add_expense(Expense(
            id=0, user_id="user-1", amount=499.0, category="Entertainment",
            description="Netflix", created_at=now, recurring_type=RecurringType.MONTHLY,
            currency_code="INR",
        ))

        [stored] = temp_store.list_expenses("user-1")

        assert stored.id == expense_id
        assert stored.recurring_type == RecurringType.MONTHLY
        assert stored.is_recurring
        assert stored.created_at == now

    def test_list_is_user_scoped_and_newest_first(self, temp_store, make_expense):
        temp_store.add_expense(make_expense(10, user_id="user-1", days_ago=2))
        temp_store.add_expense(make_expense(20, user_id="user-1"))
        temp_store.add_expense(make_expense(30, user_id="user-2"))

        assert [e.amount for e in temp_store.list_expenses("user-1")] == [20, 10]

    def test_delete_expense(self, temp_store, make_expense):
        expense_id = temp_store.add_expense(make_expense(10, user_id="user-1"))

        assert temp_store.delete_expense(expense_id) is True
        assert temp_store.delete_expense(expense_id) is False
        assert temp_store.list_expenses("user-1") == []


class TestBudgets:
    """Budget persistence."""

    def test_save_budgets_replaces_all(self, temp_store):
        temp_store.save_budgets([Budget("Food", 10000), Budget("Fuel", 2000)])
        temp_store.save_budgets([Budget("Rent", 25000)])

        budgets = temp_store.list_budgets()

        assert [(b.id, b.category, b.limit) for b in budgets] == [("monthly-Rent", "Rent", 25000)]

    def test_set_budget_updates_existing(self, temp_store):
        temp_store.set_budget(Budget("Food", 10000))
        temp_store.set_budget(Budget("Food", 12000))

        assert [(b.category, b.limit) for b in temp_store.list_budgets()] == [("Food", 12000)]


class TestInsights:
    """Insight batch writes and deduplication."""

    def test_insert_batch(self, temp_store):
        written = temp_store.insert_insights([
            _draft("BUDGET_80_Food_2024-10"),
            _draft("PRICE_INCREASE_7", insight_type=InsightType.PRICE_INCREASE, related_expense_id=7),
        ])

        insights = temp_store.list_insights("user-1")

        assert written == 2
        assert {i.dedupe_key for i in insights} == {"BUDGET_80_Food_2024-10", "PRICE_INCREASE_7"}
        assert all(not i.is_read for i in insights)
        price = next(i for i in insights if i.insight_type == InsightType.PRICE_INCREASE)
        assert price.related_expense_id == 7

    def test_duplicate_key_is_ignored(self, temp_store):
        temp_store.insert_insights([_draft("BUDGET_100_Food_2024-10")])

        written = temp_store.insert_insights([
            _draft("BUDGET_100_Food_2024-10"),
            _draft("BUDGET_80_Fuel_2024-10"),
        ])

        assert written == 1
        assert len(temp_store.list_insights("user-1")) == 2

    def test_same_key_for_other_user_or_type_allowed(self, temp_store):
        written = temp_store.insert_insights([
            _draft("K"),
            _draft("K", user_id="user-2"),
            _draft("K", insight_type=InsightType.SPENDING_SPIKE),
        ])

        assert written == 3

    def test_empty_batch(self, temp_store):
        assert temp_store.insert_insights([]) == 0

    def test_draft_without_user_rejects_whole_batch(self, temp_store):
        with pytest.raises(InsightStoreError):
            temp_store.insert_insights([_draft("A"), _draft("B", user_id=None)])

        assert temp_store.list_insights("user-1") == []

    def test_sqlite_error_wrapped(self, temp_store):
        real_conn = temp_store._get_conn

        def failing_conn():
            conn = real_conn()
            conn.execute("DROP TABLE insights")
            return conn

        with patch.object(temp_store, "_get_conn", side_effect=failing_conn):
            with pytest.raises(InsightStoreError):
                temp_store.insert_insights([_draft("A")])

    def test_mark_read(self, temp_store):
        temp_store.insert_insights([_draft("A")])
        [insight] = temp_store.list_insights("user-1")

        assert temp_store.mark_read(insight.id) is True
        assert temp_store.list_insights("user-1")[0].is_read is True
        assert temp_store.mark_read("missing") is False

    def test_delete_reenables_key(self, temp_store):
        temp_store.insert_insights([_draft("A")])
        [insight] = temp_store.list_insights("user-1")

        assert temp_store.delete_insight(insight.id) is True
        assert temp_store.insert_insights([_draft("A")]) == 1
