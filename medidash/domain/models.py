"""Domain type definitions for medidash.

- Month: reporting month in YYYY-MM format
- PractitionerId: opaque Medibill user id
- Amount: currency amount in major units, as reported by Medibill
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

PractitionerId = NewType("PractitionerId", str)

Amount = NewType("Amount", float)


class MetricKind(Enum):
    """The two monthly figures reported per practitioner."""

    INVOICED = "invoiced"
    RECEIVED = "received"

    @property
    def path(self) -> str:
        """Upstream report path segment."""
        return _METRIC_UPSTREAM[self][0]

    @property
    def report_key(self) -> str:
        """Key of the report object in the upstream response body."""
        return _METRIC_UPSTREAM[self][1]

    @property
    def amount_field(self) -> str:
        """Amount field inside each previous_months entry."""
        return _METRIC_UPSTREAM[self][2]


_METRIC_UPSTREAM: dict[MetricKind, tuple[str, str, str]] = {
    MetricKind.INVOICED: ("medibill-invoices", "medibill_invoices_report", "total_medibill_invoice"),
    MetricKind.RECEIVED: ("total-received", "total_received_report", "total_received_amount"),
}


@dataclass(frozen=True)
class Practitioner:
    """A billing account for one doctor."""

    id: PractitionerId
    account_number: str
    name: str


@dataclass(frozen=True)
class MonthlyMetric:
    """One metric amount for one practitioner in one month."""

    practitioner_id: PractitionerId
    amount: Amount


@dataclass(frozen=True)
class MetricOutcome:
    """Settled result of a single per-practitioner metric request.

    Exactly one of ``amount`` and ``error`` is set.
    """

    practitioner_id: PractitionerId
    amount: Amount | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class AggregatedRow:
    """A practitioner with both monthly amounts attached."""

    id: PractitionerId
    account_number: str
    name: str
    invoiced_amount: Amount
    received_amount: Amount
    month_label: str


@dataclass(frozen=True)
class ReportTotals:
    """Column totals over a set of rows."""

    invoiced: Amount
    received: Amount
    count: int
