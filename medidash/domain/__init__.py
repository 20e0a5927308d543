"""Domain models and types for medidash.

This package contains the functional core:
- Pure functions with no side effects
- No network or console I/O
- Joining, sorting and filtering of report rows
"""

from medidash.domain.models import AggregatedRow, MetricKind, MonthlyMetric, Month, Practitioner, PractitionerId

__all__ = ["AggregatedRow", "MetricKind", "MonthlyMetric", "Month", "Practitioner", "PractitionerId"]
