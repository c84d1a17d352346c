"""
MyPocket ARVS - Data Store

SQLite-based storage for expenses, budgets and insights.
Insights are unique per (user, insight type, dedup key); a batch write
silently skips rows that would break that rule.
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from settings import settings
from src.arvs.models import (
    Budget, Expense, ExpenseId, Insight, InsightDraft, SourceType)

logger = logging.getLogger(__name__)


class InsightStoreError(Exception):
    """Raised when the store cannot complete an operation."""


class InsightsStore:
    """
    SQLite storage for the insight engine.

    Stores:
    - Expenses: Spending records, read by the engine
    - Budgets: Monthly per-category limits (not user scoped)
    - Insights: Generated advisory records
    """

    def __init__(self, db_path: Optional[Path] = None, timeout: Optional[float] = None):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database. Defaults to settings.DATABASE_PATH
            timeout: Seconds to wait on a locked database
        """
        if db_path is None:
            db_path = settings.DATABASE_PATH

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.timeout = timeout if timeout is not None else settings.DB_TIMEOUT_SECONDS

        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Initialize database schema."""
        conn = self._get_conn()
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS expenses (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT,
                    amount REAL NOT NULL,
                    category TEXT NOT NULL,
                    description TEXT,
                    created_at TEXT NOT NULL,
                    source_type TEXT DEFAULT 'manual',
                    recurring_type TEXT,
                    currency_code TEXT,
                    converted_amount REAL
                );
                CREATE INDEX IF NOT EXISTS idx_expenses_user ON expenses(user_id);
                CREATE INDEX IF NOT EXISTS idx_expenses_created ON expenses(created_at);

                CREATE TABLE IF NOT EXISTS budgets (
                    id TEXT PRIMARY KEY,
                    category TEXT UNIQUE NOT NULL,
                    spending_limit REAL NOT NULL
                );

                -- related_category holds the dedup key
                CREATE TABLE IF NOT EXISTS insights (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    message TEXT NOT NULL,
                    insight_type TEXT NOT NULL,
                    related_category TEXT,
                    related_expense_id INTEGER,
                    created_at TEXT NOT NULL,
                    is_read INTEGER DEFAULT 0
                );
                CREATE INDEX IF NOT EXISTS idx_insights_user ON insights(user_id);
                CREATE UNIQUE INDEX IF NOT EXISTS idx_insights_dedupe
                    ON insights(user_id, insight_type, related_category);
            """)
            conn.commit()
            logger.info(f"Insights database initialized at {self.db_path}")
        finally:
            conn.close()

    # =========================================================================
    # Expense Operations
    # =========================================================================

    def add_expense(self, expense: Expense) -> ExpenseId:
        """Save an expense. Returns the stored id.

        Positive integer ids are kept; anything else lets SQLite assign one.
        """
        expense_id = expense.id if isinstance(expense.id, int) and expense.id > 0 else None
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                """INSERT INTO expenses
                   (id, user_id, amount, category, description, created_at,
                    source_type, recurring_type, currency_code, converted_amount)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (expense_id, expense.user_id, expense.amount, expense.category,
                 expense.description, expense.created_at.isoformat(),
                 expense.source_type.value,
                 expense.recurring_type.value if expense.recurring_type else None,
                 expense.currency_code, expense.converted_amount)
            )
            conn.commit()
            return cursor.lastrowid
        except sqlite3.Error as e:
            raise InsightStoreError(f"Failed to save expense: {e}") from e
        finally:
            conn.close()

    def list_expenses(self, user_id: str) -> List[Expense]:
        """Get a user's expenses, newest first."""
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM expenses WHERE user_id = ? ORDER BY created_at DESC",
                (user_id,)
            ).fetchall()
            return [self._row_to_expense(row) for row in rows]
        finally:
            conn.close()

    def delete_expense(self, expense_id: ExpenseId) -> bool:
        """Delete an expense. Returns False if it did not exist."""
        conn = self._get_conn()
        try:
            result = conn.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
            conn.commit()
            return result.rowcount > 0
        finally:
            conn.close()

    def _row_to_expense(self, row: sqlite3.Row) -> Expense:
        """Convert a database row to an Expense object."""
        return Expense(
            id=row["id"],
            user_id=row["user_id"],
            amount=row["amount"],
            category=row["category"],
            description=row["description"],
            created_at=datetime.fromisoformat(row["created_at"]),
            source_type=row["source_type"] or SourceType.MANUAL,
            recurring_type=row["recurring_type"],
            currency_code=row["currency_code"],
            converted_amount=row["converted_amount"],
        )

    # =========================================================================
    # Budget Operations
    # =========================================================================

    def save_budgets(self, budgets: Sequence[Budget]):
        """Replace the full budget list."""
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM budgets")
            conn.executemany(
                "INSERT INTO budgets (id, category, spending_limit) VALUES (?, ?, ?)",
                [(b.id, b.category, b.limit) for b in budgets]
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise InsightStoreError(f"Failed to save budgets: {e}") from e
        finally:
            conn.close()

    def set_budget(self, budget: Budget):
        """Create or update the budget for one category."""
        conn = self._get_conn()
        try:
            conn.execute(
                """INSERT INTO budgets (id, category, spending_limit) VALUES (?, ?, ?)
                   ON CONFLICT(category) DO UPDATE SET spending_limit = excluded.spending_limit""",
                (budget.id, budget.category, budget.limit)
            )
            conn.commit()
        finally:
            conn.close()

    def list_budgets(self) -> List[Budget]:
        """Get all budgets ordered by category."""
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM budgets ORDER BY category").fetchall()
            return [
                Budget(id=row["id"], category=row["category"], limit=row["spending_limit"])
                for row in rows
            ]
        finally:
            conn.close()

    # =========================================================================
    # Insight Operations
    # =========================================================================

    def insert_insights(self, drafts: Sequence[InsightDraft]) -> int:
        """Write a batch of insight drafts in one transaction.

        Drafts whose (user, type, dedup key) already exist are skipped.

        Returns:
            Number of insights actually written

        Raises:
            InsightStoreError: The batch could not be written; nothing was kept
        """
        if not drafts:
            return 0

        now = datetime.now(settings.TIMEZONE).isoformat()
        conn = self._get_conn()
        try:
            written = 0
            for draft in drafts:
                if not draft.user_id:
                    raise InsightStoreError(f"Insight draft without user: {draft.dedupe_key}")
                insight = Insight(
                    message=draft.message,
                    insight_type=draft.insight_type,
                    user_id=draft.user_id,
                    related_category=draft.related_category,
                    related_expense_id=draft.related_expense_id,
                )
                cursor = conn.execute(
                    """INSERT OR IGNORE INTO insights
                       (id, user_id, message, insight_type, related_category,
                        related_expense_id, created_at, is_read)
                       VALUES (?, ?, ?, ?, ?, ?, ?, 0)""",
                    (insight.id, insight.user_id, insight.message,
                     insight.insight_type.value, insight.related_category,
                     insight.related_expense_id, now)
                )
                if cursor.rowcount > 0:
                    written += 1
                else:
                    logger.debug(f"[STORE] Skipped existing insight {draft.dedupe_key}")
            conn.commit()
            return written
        except sqlite3.Error as e:
            conn.rollback()
            raise InsightStoreError(f"Failed to save insights: {e}") from e
        except InsightStoreError:
            conn.rollback()
            raise
        finally:
            conn.close()

    def list_insights(self, user_id: str) -> List[Insight]:
        """Get a user's insights, newest first."""
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM insights WHERE user_id = ? ORDER BY created_at DESC",
                (user_id,)
            ).fetchall()
            return [self._row_to_insight(row) for row in rows]
        finally:
            conn.close()

    def mark_read(self, insight_id: str) -> bool:
        """Mark an insight as read."""
        conn = self._get_conn()
        try:
            result = conn.execute(
                "UPDATE insights SET is_read = 1 WHERE id = ?",
                (insight_id,)
            )
            conn.commit()
            return result.rowcount > 0
        finally:
            conn.close()

    def delete_insight(self, insight_id: str) -> bool:
        """Delete an insight, allowing the same condition to be reported again."""
        conn = self._get_conn()
        try:
            result = conn.execute("DELETE FROM insights WHERE id = ?", (insight_id,))
            conn.commit()
            return result.rowcount > 0
        finally:
            conn.close()

    def _row_to_insight(self, row: sqlite3.Row) -> Insight:
        """Convert a database row to an Insight object."""
        return Insight(
            id=row["id"],
            user_id=row["user_id"],
            message=row["message"],
            insight_type=row["insight_type"],
            related_category=row["related_category"],
            related_expense_id=row["related_expense_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            is_read=bool(row["is_read"]),
        )
