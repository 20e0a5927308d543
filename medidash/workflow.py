"""Report workflow: authenticate, fetch, aggregate.

The token is passed explicitly through every step. ReportSession is the
caller-side owner of a token across runs.
"""

import concurrent.futures
import logging
from dataclasses import dataclass

import requests

from medidash.config import Credentials, Settings
from medidash.dates import month_label, parse_month
from medidash.domain.models import AggregatedRow, MetricKind, Month
from medidash.domain.report import aggregate
from medidash.errors import AuthenticationFailed, DirectoryFetchFailed
from medidash.medibill import authenticate, fetch_metric, get_practitioners

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportResult:
    """Aggregated rows for one month."""

    month: Month
    month_label: str
    rows: list[AggregatedRow]


def login(credentials: Credentials, settings: Settings, session: requests.Session | None = None) -> str:
    """Authenticate with configured credentials and settings."""
    return authenticate(
        credentials.email,
        credentials.password,
        base_url=settings.base_url,
        timeout=settings.timeout,
        session=session,
    )


def build_report(
    token: str,
    month: Month,
    settings: Settings,
    session: requests.Session | None = None,
) -> ReportResult:
    """Fetch the directory and both metrics for a month and join them.

    Args:
        token: Bearer token.
        month: Validated month.
        settings: Connection settings.
        session: Optional requests session shared by all calls.

    Returns:
        ReportResult with one row per practitioner.

    Raises:
        DirectoryFetchFailed: If the directory cannot be fetched.
    """
    label = month_label(month)
    practitioners = get_practitioners(token, base_url=settings.base_url, timeout=settings.timeout, session=session)

    if not practitioners:
        logger.info("No practitioners in directory, nothing to report for %s", month)
        return ReportResult(month=month, month_label=label, rows=[])

    ids = [p.id for p in practitioners]
    logger.info("Fetching %s metrics for %d practitioners", month, len(ids))

    with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
        futures = {
            kind: executor.submit(
                fetch_metric,
                kind,
                token,
                ids,
                month,
                base_url=settings.base_url,
                timeout=settings.timeout,
                max_workers=settings.max_workers,
                session=session,
            )
            for kind in MetricKind
        }
        invoiced = futures[MetricKind.INVOICED].result()
        received = futures[MetricKind.RECEIVED].result()

    rows = aggregate(practitioners, invoiced, received, label)
    return ReportResult(month=month, month_label=label, rows=rows)


class ReportSession:
    """Holds a bearer token across report runs.

    The token is acquired on first use and discarded when a run fails with an
    authentication or directory error, so the next run logs in again.
    """

    def __init__(
        self,
        credentials: Credentials,
        settings: Settings,
        http: requests.Session | None = None,
    ) -> None:
        self.credentials = credentials
        self.settings = settings
        self.http = http
        self.token: str | None = None

    def discard_token(self) -> None:
        self.token = None

    def run(self, month_value: str) -> ReportResult:
        """Validate the month and build its report.

        Raises:
            InvalidMonth: If the month token is invalid. No request is made.
            AuthenticationFailed: If login fails.
            DirectoryFetchFailed: If the directory cannot be fetched.
        """
        month = parse_month(month_value)

        try:
            if self.token is None:
                logger.debug("No existing token, authenticating")
                self.token = login(self.credentials, self.settings, self.http)
            else:
                logger.debug("Using existing token")
            return build_report(self.token, month, self.settings, self.http)
        except (AuthenticationFailed, DirectoryFetchFailed):
            self.discard_token()
            raise
