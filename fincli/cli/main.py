"""
CLI interface for FinCLI.

Interactive monthly budgeting: record expenses, allocate what is left and
keep versioned reports.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from fincli.config import settings
from fincli.config.loader import AllocationConfig, AppConfig, ConfigStore
from fincli.core.accounting import allocation_warnings, create_accounting, revise_accounting
from fincli.storage.catalog import ExpenseCatalog
from fincli.storage.models import AccountingRecord, Expense, ExpenseWithAmount, parse_tags
from fincli.storage.repository import ReportStore, get_report_store
from fincli.storage.versioning import VersionResolver

app = typer.Typer()
config_app = typer.Typer(help="Inspect or change the allocation percentages.")
app.add_typer(config_app, name="config")
console = Console()
err_console = Console(stderr=True)

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

# Amounts are typed in thousands of tomans
AMOUNT_UNIT = 1000

MAIN_MENU = [
    ("create", "Create a new accounting"),
    ("edit", "Edit past accountings"),
    ("criteria", "Watch the criteria"),
    ("list", "List accountings"),
    ("quit", "Quit"),
]

EDIT_MENU = [
    ("amounts", "Edit expense amounts"),
    ("add", "Add an expense"),
    ("budget", "Change total budget"),
    ("raw", "Edit report text"),
    ("view", "View only"),
]


@dataclass
class AppState:
    """Collaborators shared by every command of one run."""
    config_store: ConfigStore
    config: AppConfig
    catalog: ExpenseCatalog
    store: ReportStore
    resolver: VersionResolver

    @property
    def allocation(self) -> AllocationConfig:
        return self.config.budget_allocation


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _build_state(config_path: Path, catalog_path: Path, reports_dir: Path, data_dir: Path) -> AppState:
    config_store = ConfigStore(config_path)
    config = config_store.load()
    if config_store.warning is not None:
        console.print(f"[yellow]Warning:[/] {config_store.warning}")
    store = get_report_store(reports_dir, data_dir, config.budget_allocation)
    return AppState(
        config_store=config_store,
        config=config,
        catalog=ExpenseCatalog(catalog_path),
        store=store,
        resolver=VersionResolver(store.layout),
    )


def _run_guarded(operation: Callable, *args) -> None:
    """Run one operation; failures are reported and end the process."""
    try:
        operation(*args)
    except typer.Abort:
        raise
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Path = typer.Option(settings.CONFIG_PATH, "--config", help="Allocation config file (YAML)"),
    catalog_path: Path = typer.Option(settings.CATALOG_PATH, "--catalog", help="Predefined expenses file (JSON)"),
    reports_dir: Path = typer.Option(settings.REPORTS_DIR, "--reports-dir", help="Directory for text reports"),
    data_dir: Path = typer.Option(settings.DATA_DIR, "--data-dir", help="Directory for structured reports"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """FinCLI - personal monthly budgeting."""
    _configure_logging(verbose)
    try:
        ctx.obj = _build_state(config_path, catalog_path, reports_dir, data_dir)
    except Exception as e:
        console.print(f"[red]Error initializing storage:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if ctx.invoked_subcommand is None:
        _run_menu(ctx.obj)


def _run_menu(state: AppState) -> None:
    console.print("\n🏦 Welcome to FinCLI - Your Personal Finance Manager\n")
    actions = {
        "create": lambda: _create_accounting(state),
        "edit": lambda: _edit_accounting(state, None),
        "criteria": _show_criteria,
        "list": lambda: _list_reports(state),
    }
    while True:
        action = _choose("What would you like to do?", MAIN_MENU)
        if action == "quit":
            break
        _run_guarded(actions[action])


@app.command()
def create(ctx: typer.Context):
    """Create a new monthly accounting."""
    _run_guarded(_create_accounting, ctx.obj)


@app.command()
def edit(
    ctx: typer.Context,
    identifier: Optional[str] = typer.Argument(None, help="Report to edit, e.g. march-v1.txt")
):
    """Edit a past accounting, saving the result as a new version."""
    _run_guarded(_edit_accounting, ctx.obj, identifier)


@app.command("list")
def list_reports(ctx: typer.Context):
    """List saved accountings."""
    _run_guarded(_list_reports, ctx.obj)


@app.command()
def show(
    ctx: typer.Context,
    identifier: str = typer.Argument(..., help="Report to print, e.g. march-v1.txt")
):
    """Print a saved report."""
    _run_guarded(lambda: _print_report(ctx.obj.store.read_raw(identifier)))


@app.command()
def criteria():
    """Explain the expense priority levels."""
    _show_criteria()


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Show the active allocation percentages."""
    state: AppState = ctx.obj
    table = Table(title=f"Budget allocation ({state.config_store.path})")
    table.add_column("Bucket")
    table.add_column("Percent", justify="right")
    table.add_row("Investments", f"{state.allocation.investments}%")
    table.add_row("Savings", f"{state.allocation.savings}%")
    table.add_row("Daily use", f"{state.allocation.daily_expenses}%")
    console.print(table)
    console.print(f"Version: {state.config.version}")
    console.print(f"Description: {state.config.description}")


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    investments: int = typer.Option(..., "--investments", "-i", help="Percent for investments"),
    savings: int = typer.Option(..., "--savings", "-s", help="Percent for savings"),
    daily_expenses: int = typer.Option(..., "--daily-expenses", "-d", help="Percent for daily use"),
):
    """Save new allocation percentages (must sum to 100)."""
    state: AppState = ctx.obj
    config = AppConfig(
        budget_allocation=AllocationConfig(investments, savings, daily_expenses),
        version=state.config.version,
        description=state.config.description,
    )
    _run_guarded(state.config_store.save, config)
    console.print(f"[green]✓[/] Configuration saved to {state.config_store.path}")


def _choose(message: str, options: Sequence[Tuple[str, str]]) -> str:
    """Numbered selection; returns the value of the chosen option."""
    for index, (_, label) in enumerate(options, start=1):
        console.print(f"  {index}. {escape(label)}")
    choice = _prompt_int(message, minimum=1, maximum=len(options))
    return options[choice - 1][0]


def _prompt_int(
    message: str,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
    allow_blank: bool = False
) -> Optional[int]:
    """Prompt until a whole number in range is entered.

    With ``allow_blank`` an empty answer returns None.
    """
    while True:
        raw = typer.prompt(message, default="" if allow_blank else None, show_default=False)
        raw = str(raw).strip()
        if allow_blank and not raw:
            return None
        try:
            value = int(raw.replace(",", ""))
        except ValueError:
            console.print("[yellow]Please enter a whole number[/]")
            continue
        if minimum is not None and value < minimum:
            console.print(f"[yellow]Please enter a number of at least {minimum}[/]")
        elif maximum is not None and value > maximum:
            console.print(f"[yellow]Please enter a number between {minimum} and {maximum}[/]")
        else:
            return value


def _prompt_text(message: str) -> str:
    while True:
        value = typer.prompt(message).strip()
        if value:
            return value
        console.print("[yellow]Please enter a value[/]")


def _prompt_amount(message: str = "How much is it?") -> int:
    return _prompt_int(message, minimum=0) * AMOUNT_UNIT


def _prompt_new_expense() -> Expense:
    name = _prompt_text("What is the name of the expense?")
    priority = _prompt_int("What is the priority (1-5)?", minimum=1, maximum=5)
    tags = typer.prompt("Enter tags (comma-separated)", default="", show_default=False)
    return Expense(name=name, priority=priority, tags=parse_tags(tags))


def _print_report(content: str) -> None:
    console.print(content, markup=False, highlight=False, soft_wrap=True)


def _report_result(state: AppState, record: AccountingRecord) -> None:
    _print_report(state.store.read_raw(record.filename))
    for message in allocation_warnings(record.total_budget, record.expenses, record.allocation):
        console.print(f"[yellow]Warning:[/] {message}")
    console.print(f"[green]✓[/] Report saved as {escape(record.filename)}")


def _create_accounting(state: AppState) -> None:
    console.print("\n📊 Creating New Accounting\n")

    total_budget = _prompt_int(
        "What is your total budget for this month (in thousands)?", minimum=1
    ) * AMOUNT_UNIT
    console.print(f"Budget set to: {total_budget:,} tomans\n")

    catalog = state.catalog.load()
    expenses: List[ExpenseWithAmount] = []

    for expense in catalog:
        if typer.confirm(f"Do you have {expense.name} this month?"):
            expenses.append(ExpenseWithAmount.from_expense(expense, _prompt_amount()))

    while typer.confirm("Do you have a new expense to add?"):
        new_expense = _prompt_new_expense()
        amount = _prompt_amount()
        catalog = state.catalog.add(catalog, new_expense)
        expenses.append(ExpenseWithAmount.from_expense(new_expense, amount))
        console.print(f"Added new expense: {escape(new_expense.name)}\n")

    base = _prompt_text("What should we name the output file?")
    record = create_accounting(
        base, total_budget, expenses, state.allocation, state.store, state.resolver
    )
    _report_result(state, record)
    console.print("\n✅ Accounting completed successfully!\n")


def _edit_accounting(state: AppState, identifier: Optional[str]) -> None:
    console.print("\n📝 Edit Past Accountings\n")

    if identifier is None:
        reports = state.store.list()
        if not reports:
            console.print("No past accountings found.\n")
            return
        identifier = _choose("Select a report to edit:", [(r, r) for r in reports])

    content = state.store.read_raw(identifier)
    console.print("\n--- Current Report Content ---\n")
    _print_report(content)
    console.print("--- End of Report ---\n")

    action = _choose("What would you like to do?", EDIT_MENU)
    if action == "view":
        return
    if action == "raw":
        _edit_report_text(state, identifier, content)
        return

    record = state.store.load(identifier)
    if record.is_reconstructed:
        console.print(
            "[yellow]No structured copy found; priorities and tags are approximate "
            "and the allocation will be recomputed.[/]"
        )

    total_budget = None
    if record.total_budget <= 0 or action == "budget":
        total_budget = _prompt_int(
            f"New total budget in thousands (currently {record.total_budget:,} tomans)", minimum=1
        ) * AMOUNT_UNIT

    expenses = None
    if action == "amounts":
        expenses = _prompt_amount_changes(record.expenses)
    elif action == "add":
        new_expense = _prompt_new_expense()
        amount = _prompt_amount()
        state.catalog.add(state.catalog.load(), new_expense)
        expenses = [*record.expenses, ExpenseWithAmount.from_expense(new_expense, amount)]

    revised = revise_accounting(
        record, state.allocation, state.store, state.resolver,
        total_budget=total_budget, expenses=expenses,
    )
    _report_result(state, revised)


def _prompt_amount_changes(expenses: Sequence[ExpenseWithAmount]) -> List[ExpenseWithAmount]:
    updated = []
    for expense in expenses:
        value = _prompt_int(
            f"New amount for {expense.name} in thousands (Enter keeps {expense.amount:,})",
            minimum=0,
            allow_blank=True,
        )
        updated.append(expense if value is None else expense.with_amount(value * AMOUNT_UNIT))
    return updated


def _edit_report_text(state: AppState, identifier: str, content: str) -> None:
    new_content = typer.edit(content)
    if new_content is None or new_content == content:
        console.print("No changes made.")
        return
    state.store.update(identifier, new_content)
    console.print("\n✅ Report updated successfully!\n")


def _list_reports(state: AppState) -> None:
    reports = state.store.list()
    if not reports:
        console.print("No past accountings found.")
        return
    table = Table(title="Accountings")
    table.add_column("#", justify="right")
    table.add_column("Report")
    table.add_column("Structured copy")
    for index, name in enumerate(reports, start=1):
        stem = name[:-len(state.store.layout.report_extension)]
        has_data = state.store.layout.data_path(stem).is_file()
        table.add_row(str(index), name, "yes" if has_data else "[yellow]no[/]")
    console.print(table)


def _show_criteria() -> None:
    console.print("\n📋 Expense Priority Criteria\n")

    console.print("Priorities 1 & 2 – Emergency & Essential")
    console.print("---------------------------------------")
    console.print(
        "These costs are non‑negotiable. Failing to pay them jeopardises your life, health,\n"
        "or legal standing (e.g., rent, loan instalments, critical healthcare, staple food,\n"
        "core infrastructure like internet or AI services required for work).\n",
        soft_wrap=True,
    )

    console.print("Priorities 3 to 5 – Discretionary")
    console.print("---------------------------------")
    console.print(
        "While useful or pleasant, these expenditures can be postponed, scaled down,\n"
        "or eliminated without creating immediate risk. Handle them only after securing\n"
        "survival‑critical items and strategic financial goals (investment and savings).\n",
        soft_wrap=True,
    )


if __name__ == "__main__":
    app()
