"""Pure functions for report calculations and aggregations.

This module contains the functional core for reporting operations:
- No I/O operations (no network, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

Amounts are in currency major units (Amount type), as Medibill reports them.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from medidash.domain.models import (
    AggregatedRow,
    Amount,
    MetricKind,
    MetricOutcome,
    Month,
    MonthlyMetric,
    Practitioner,
    PractitionerId,
    ReportTotals,
)

TEST_ACCOUNT_MARKER = "TEST"

SORT_KEYS = ("name", "account", "invoiced", "received")


def is_test_account(record: dict[str, Any]) -> bool:
    """Check whether a directory record belongs to a test practice.

    Records without a practice name are not treated as test accounts.

    Args:
        record: Raw doctor record from the directory endpoint.

    Returns:
        True if the practice name contains "TEST" (case-insensitive).
    """
    practice_name = record.get("practice_name")
    if not practice_name:
        return False
    return TEST_ACCOUNT_MARKER in str(practice_name).upper()


def parse_practitioner(record: dict[str, Any]) -> Practitioner:
    """Convert a raw directory record to a Practitioner.

    Raises:
        KeyError: If the record has no user_id.
    """
    return Practitioner(
        id=PractitionerId(str(record["user_id"])),
        account_number=str(record.get("account_number") or ""),
        name=str(record.get("doctor_name") or ""),
    )


def parse_practitioners(records: Iterable[dict[str, Any]]) -> list[Practitioner]:
    """Drop test accounts and convert the rest, keeping directory order."""
    return [parse_practitioner(record) for record in records if not is_test_account(record)]


def extract_previous_months(body: Any, kind: MetricKind) -> list[dict[str, Any]]:
    """Pull the previous_months series out of a metric report response.

    Args:
        body: Decoded JSON body.
        kind: Metric kind the body belongs to.

    Returns:
        The list of monthly entries.

    Raises:
        ValueError: If the body is unsuccessful or malformed.
    """
    if not isinstance(body, dict) or body.get("status") != "success":
        raise ValueError(f"Unexpected {kind.value} report: status not success")

    report = body.get(kind.report_key)
    if not isinstance(report, dict) or not isinstance(report.get("previous_months"), list):
        raise ValueError(f"Malformed {kind.value} report data")

    return report["previous_months"]


def find_month_amount(previous_months: Iterable[dict[str, Any]], month: Month, kind: MetricKind) -> Amount:
    """Find the amount for a month in a previous_months series.

    Args:
        previous_months: Monthly entries from the upstream report.
        month: Month in YYYY-MM format.
        kind: Metric kind, selects the amount field.

    Returns:
        The amount for the month, or 0 when the month is absent.
    """
    for entry in previous_months:
        if isinstance(entry, dict) and entry.get("month_year") == month:
            value = entry.get(kind.amount_field)
            return Amount(float(value)) if value is not None else Amount(0.0)
    return Amount(0.0)


def settle_outcome(outcome: MetricOutcome) -> MonthlyMetric:
    """Fold a per-practitioner outcome into a metric, failures become zero."""
    if outcome.failed or outcome.amount is None:
        return MonthlyMetric(practitioner_id=outcome.practitioner_id, amount=Amount(0.0))
    return MonthlyMetric(practitioner_id=outcome.practitioner_id, amount=outcome.amount)


def index_metrics(metrics: Iterable[MonthlyMetric]) -> dict[PractitionerId, Amount]:
    """Index metric amounts by practitioner id."""
    return {metric.practitioner_id: metric.amount for metric in metrics}


def aggregate(
    practitioners: Sequence[Practitioner],
    invoiced: Iterable[MonthlyMetric],
    received: Iterable[MonthlyMetric],
    month_label: str,
) -> list[AggregatedRow]:
    """Join the directory with both metric sets.

    One row per practitioner, in directory order. A practitioner missing from
    either metric set gets 0 for that amount.

    Args:
        practitioners: Directory result.
        invoiced: Invoiced metrics, any order.
        received: Received metrics, any order.
        month_label: Label attached to every row.

    Returns:
        List of AggregatedRow.
    """
    invoiced_by_id = index_metrics(invoiced)
    received_by_id = index_metrics(received)

    return [
        AggregatedRow(
            id=practitioner.id,
            account_number=practitioner.account_number,
            name=practitioner.name,
            invoiced_amount=invoiced_by_id.get(practitioner.id, Amount(0.0)),
            received_amount=received_by_id.get(practitioner.id, Amount(0.0)),
            month_label=month_label,
        )
        for practitioner in practitioners
    ]


def sort_rows(rows: Iterable[AggregatedRow], sort_by: str = "name", descending: bool = False) -> list[AggregatedRow]:
    """Sort rows by a column.

    Args:
        rows: Rows to sort.
        sort_by: One of "name", "account", "invoiced", "received".
        descending: Reverse the order.

    Returns:
        New sorted list.

    Raises:
        ValueError: If sort_by is not a known column.
    """
    if sort_by == "name":
        return sorted(rows, key=lambda r: r.name.casefold(), reverse=descending)
    elif sort_by == "account":
        return sorted(rows, key=lambda r: r.account_number.casefold(), reverse=descending)
    elif sort_by == "invoiced":
        return sorted(rows, key=lambda r: r.invoiced_amount, reverse=descending)
    elif sort_by == "received":
        return sorted(rows, key=lambda r: r.received_amount, reverse=descending)
    raise ValueError(f"Unknown sort column '{sort_by}', expected one of: {', '.join(SORT_KEYS)}")


def filter_rows(rows: Iterable[AggregatedRow], query: str | None) -> list[AggregatedRow]:
    """Keep rows whose name or account number contains the query."""
    if not query:
        return list(rows)
    needle = query.casefold()
    return [r for r in rows if needle in r.name.casefold() or needle in r.account_number.casefold()]


def calculate_totals(rows: Sequence[AggregatedRow]) -> ReportTotals:
    """Sum both amount columns."""
    return ReportTotals(
        invoiced=Amount(sum(r.invoiced_amount for r in rows)),
        received=Amount(sum(r.received_amount for r in rows)),
        count=len(rows),
    )


def format_currency(amount: float) -> str:
    """Format an amount as dollars, e.g. "$1,234.56" or "-$12.00"."""
    if amount < 0:
        return f"-${abs(amount):,.2f}"
    return f"${amount:,.2f}"
