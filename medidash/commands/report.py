"""Report and months commands for viewing practitioner revenue."""

import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from medidash.config import load_credentials, load_settings
from medidash.dates import available_months, current_month
from medidash.domain.models import AggregatedRow
from medidash.domain.report import SORT_KEYS, calculate_totals, filter_rows, format_currency, sort_rows
from medidash.errors import AuthenticationFailed, DirectoryFetchFailed, InvalidInput
from medidash.workflow import ReportResult, ReportSession

console = Console()


def build_table(result: ReportResult, rows: list[AggregatedRow], query: str | None = None) -> Table:
    """Build the revenue table for display.

    Args:
        result: Full report result (for the title).
        rows: Rows to show, already sorted and filtered.
        query: Active filter text, shown in the title.

    Returns:
        Rich Table with a totals footer.
    """
    title = f"Practitioner Revenue - {result.month_label}"
    if query:
        title += f" (matching '{query}': {len(rows)} of {len(result.rows)})"

    table = Table(title=title, show_footer=True)
    totals = calculate_totals(rows)

    table.add_column("Account", style="dim", footer="Total")
    table.add_column("Doctor", style="cyan", footer=f"{totals.count} practitioners")
    table.add_column("Total Received", justify="right", style="green", footer=format_currency(totals.received))
    table.add_column("Medibill Invoices", justify="right", footer=format_currency(totals.invoiced))

    for row in rows:
        table.add_row(
            row.account_number,
            row.name,
            format_currency(row.received_amount),
            format_currency(row.invoiced_amount),
        )

    return table


def report_command(
    month: str | None = None,
    sort_by: str = "name",
    descending: bool = False,
    query: str | None = None,
) -> None:
    """Fetch and display revenue for a month."""
    if sort_by not in SORT_KEYS:
        console.print(f"[red]Invalid sort column '{sort_by}'. Use one of: {', '.join(SORT_KEYS)}[/red]")
        sys.exit(1)

    selected = month or current_month()

    try:
        session = ReportSession(load_credentials(), load_settings())
        with console.status(f"Fetching revenue data for {selected}..."):
            result = session.run(selected)
    except InvalidInput as e:
        console.print(f"[red]{escape(str(e))}[/red]", style="bold")
        sys.exit(1)
    except AuthenticationFailed as e:
        console.print(f"[red]Medibill authentication failed: {escape(str(e))}[/red]", style="bold")
        sys.exit(1)
    except DirectoryFetchFailed as e:
        console.print(f"[red]Could not fetch practitioners: {escape(str(e))}[/red]", style="bold")
        sys.exit(1)

    if not result.rows:
        console.print(f"[yellow]No practitioners found for {result.month_label}[/yellow]")
        return

    rows = sort_rows(filter_rows(result.rows, query), sort_by, descending)

    if not rows:
        console.print(f"[yellow]No practitioners match '{query}'[/yellow]")
        return

    console.print(build_table(result, rows, query))


def months_command(count: int = 12) -> None:
    """List selectable reporting months."""
    table = Table(title="Reporting Months")
    table.add_column("Month", style="cyan")
    table.add_column("Label")

    for month, label in available_months(count):
        table.add_row(month, label)

    console.print(table)
