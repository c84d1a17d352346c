"""
MyPocket Insights CLI

Command-line interface for recording expenses and budgets and running
the ARVS insight engine against the local database.

Usage:
    arvs add-expense USER AMOUNT CATEGORY   - Record an expense
    arvs set-budget CATEGORY LIMIT          - Set a monthly budget
    arvs budgets                            - List budgets
    arvs run USER                           - Run the insight engine
    arvs insights USER                      - List insights
    arvs read INSIGHT_ID                    - Mark an insight as read
    arvs dismiss INSIGHT_ID                 - Delete an insight
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from settings import settings
from src.arvs.evaluators.base import format_amount
from src.arvs.models import Budget, Expense, RecurringType
from src.arvs.refresh import refresh_insights
from src.arvs.store import InsightsStore, InsightStoreError

# Initialize Typer app and Rich console
app = typer.Typer(
    name="arvs",
    help="MyPocket ARVS - smart insights for your expenses",
    add_completion=False
)
console = Console()

DB_OPTION = typer.Option(None, "--db", help="SQLite database path")


# =============================================================================
# Helper Functions
# =============================================================================

def get_store(db: Optional[Path]) -> InsightsStore:
    """Open the store at the given path or the configured default."""
    return InsightsStore(db or settings.DATABASE_PATH)


def setup_logging(verbose: bool = False):
    """Configure logging for CLI commands."""
    level = logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level
    )


@app.callback()
def main_callback(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    setup_logging(verbose)


# =============================================================================
# Expense & Budget Commands
# =============================================================================

@app.command("add-expense")
def add_expense(
    user: str = typer.Argument(..., help="Owning user id"),
    amount: float = typer.Argument(..., help="Amount in the expense's currency"),
    category: str = typer.Argument(..., help="Category label"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    recurring: RecurringType = typer.Option(RecurringType.NONE, "--recurring", "-r"),
    converted: Optional[float] = typer.Option(None, "--converted", help="Amount in the base currency"),
    currency: Optional[str] = typer.Option(None, "--currency"),
    date: Optional[str] = typer.Option(None, "--date", help="ISO timestamp, defaults to now"),
    db: Optional[Path] = DB_OPTION,
):
    """Record an expense."""
    created_at = datetime.fromisoformat(date) if date else datetime.now(settings.TIMEZONE)
    expense = Expense(
        id=0,
        user_id=user,
        amount=amount,
        category=category,
        description=description,
        created_at=created_at,
        recurring_type=recurring,
        converted_amount=converted,
        currency_code=currency,
    )
    try:
        expense_id = get_store(db).add_expense(expense)
    except InsightStoreError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Saved expense #{expense_id}[/green]")


@app.command("set-budget")
def set_budget(
    category: str = typer.Argument(..., help="Category label"),
    limit: float = typer.Argument(..., min=0, help="Monthly limit"),
    db: Optional[Path] = DB_OPTION,
):
    """Set the monthly budget for a category."""
    get_store(db).set_budget(Budget(category=category, limit=limit))
    console.print(f"[green]Budget for {category} set to {format_amount(limit, settings.CURRENCY_SYMBOL)}[/green]")


@app.command()
def budgets(db: Optional[Path] = DB_OPTION):
    """List budgets."""
    table = Table(title="Monthly Budgets", style="bold white")
    table.add_column("Category", style="cyan")
    table.add_column("Limit", justify="right")

    for budget in get_store(db).list_budgets():
        table.add_row(budget.category, format_amount(budget.limit, settings.CURRENCY_SYMBOL))

    console.print(table)


# =============================================================================
# Insight Commands
# =============================================================================

@app.command()
def run(
    user: str = typer.Argument(..., help="User id"),
    offline: bool = typer.Option(False, "--offline", help="Simulate an offline refresh"),
    db: Optional[Path] = DB_OPTION,
):
    """Run the insight engine for a user."""
    store = get_store(db)
    before = {i.id for i in store.list_insights(user)}
    insights = refresh_insights(store, user, online=not offline)
    new = [i for i in insights if i.id not in before]

    if not new:
        console.print("[dim]No new insights[/dim]")
        return

    console.print(f"[bold green]{len(new)} new insight(s)[/bold green]")
    for insight in new:
        console.print(f"  [yellow]{insight.insight_type.value}[/yellow] {insight.message}")


@app.command()
def insights(
    user: str = typer.Argument(..., help="User id"),
    unread: bool = typer.Option(False, "--unread", help="Only unread insights"),
    db: Optional[Path] = DB_OPTION,
):
    """List a user's insights, newest first."""
    table = Table(title=f"Insights for {user}", style="bold white")
    table.add_column("ID", style="dim")
    table.add_column("Type", style="magenta")
    table.add_column("Message")
    table.add_column("Created", style="cyan")

    for insight in get_store(db).list_insights(user):
        if unread and insight.is_read:
            continue
        message = insight.message if insight.is_read else f"[bold]{insight.message}[/bold]"
        table.add_row(
            insight.id,
            insight.insight_type.value,
            message,
            insight.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command()
def read(insight_id: str = typer.Argument(...), db: Optional[Path] = DB_OPTION):
    """Mark an insight as read."""
    if not get_store(db).mark_read(insight_id):
        console.print(f"[red]Insight not found: {insight_id}[/red]")
        raise typer.Exit(1)
    console.print("[green]Marked as read[/green]")


@app.command()
def dismiss(insight_id: str = typer.Argument(...), db: Optional[Path] = DB_OPTION):
    """Delete an insight. The same condition may be reported again later."""
    if not get_store(db).delete_insight(insight_id):
        console.print(f"[red]Insight not found: {insight_id}[/red]")
        raise typer.Exit(1)
    console.print("[green]Insight dismissed[/green]")


# =============================================================================
# Version Command
# =============================================================================

@app.command()
def version():
    """Show version."""
    console.print("[bold]MyPocket ARVS 1.0[/bold]")
    console.print("Smart insights engine")


# =============================================================================
# Main Entry Point
# =============================================================================

def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
