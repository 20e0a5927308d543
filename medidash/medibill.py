"""Medibill API interactions."""

import concurrent.futures
import logging
from collections.abc import Sequence

import requests

from medidash.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from medidash.domain.models import MetricKind, MetricOutcome, Month, MonthlyMetric, Practitioner, PractitionerId
from medidash.domain.report import extract_previous_months, find_month_amount, parse_practitioners, settle_outcome
from medidash.errors import AuthenticationFailed, DirectoryFetchFailed, InvalidCredentialsInput, InvalidInput

logger = logging.getLogger(__name__)


def _auth_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
    }


def _error_message(response: requests.Response, default: str) -> str:
    """Upstream message or error text from a response body, else the default."""
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or default
    return default


def authenticate(
    email: str,
    password: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
    session: requests.Session | None = None,
) -> str:
    """Exchange credentials for a bearer token.

    Args:
        email: Medibill account email.
        password: Medibill account password.
        base_url: API base URL.
        timeout: Request timeout in seconds.
        session: Optional requests session.

    Returns:
        Bearer token.

    Raises:
        InvalidCredentialsInput: If email or password is empty.
        AuthenticationFailed: If the login is not successful.
    """
    if not email or not password:
        raise InvalidCredentialsInput("Email and password are required for authentication.")

    http = session or requests
    try:
        response = http.post(
            f"{base_url}/auth/login",
            json={"email": email, "password": password},
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise AuthenticationFailed(f"Authentication failed: {e}") from e

    if not response.ok:
        raise AuthenticationFailed(
            _error_message(response, f"Authentication failed with status: {response.status_code}")
        )

    try:
        data = response.json()
    except ValueError as e:
        raise AuthenticationFailed("Authentication failed: response is not JSON") from e

    if isinstance(data, dict) and data.get("status") == "success" and data.get("token"):
        return data["token"]

    message = data.get("message") if isinstance(data, dict) else None
    raise AuthenticationFailed(message or "Authentication failed: no token received or status not success.")


def get_practitioners(
    token: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
    session: requests.Session | None = None,
) -> list[Practitioner]:
    """Fetch the practitioner directory, without test accounts.

    Args:
        token: Bearer token.
        base_url: API base URL.
        timeout: Request timeout in seconds.
        session: Optional requests session.

    Returns:
        Practitioners in directory order. May be empty.

    Raises:
        InvalidInput: If the token is empty.
        DirectoryFetchFailed: If the request fails or the body is malformed.
    """
    if not token:
        raise InvalidInput("Authentication token required to fetch practitioners.")

    http = session or requests
    try:
        response = http.get(f"{base_url}/doctors", headers=_auth_headers(token), timeout=timeout)
    except requests.RequestException as e:
        raise DirectoryFetchFailed(f"Failed to fetch doctors: {e}") from e

    if not response.ok:
        raise DirectoryFetchFailed(
            _error_message(response, f"Failed to fetch doctors with status: {response.status_code}")
        )

    try:
        data = response.json()
    except ValueError as e:
        raise DirectoryFetchFailed("Failed to parse doctors data: response is not JSON") from e

    if not isinstance(data, dict) or data.get("status") != "success" or not isinstance(data.get("doctors"), list):
        message = data.get("message") if isinstance(data, dict) else None
        raise DirectoryFetchFailed(message or "Failed to parse doctors data or status not success.")

    try:
        practitioners = parse_practitioners(data["doctors"])
    except (KeyError, TypeError, AttributeError) as e:
        raise DirectoryFetchFailed(f"Malformed doctor record: {e}") from e

    logger.debug("Fetched %d practitioners (%d records before filtering)", len(practitioners), len(data["doctors"]))
    return practitioners


def fetch_metric_outcome(
    kind: MetricKind,
    token: str,
    practitioner_id: PractitionerId,
    month: Month,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
    session: requests.Session | None = None,
) -> MetricOutcome:
    """Fetch one practitioner's metric for a month, capturing any failure.

    Never raises for upstream problems: HTTP errors, network errors and
    malformed bodies come back as an outcome with ``error`` set.
    """
    http = session or requests
    url = f"{base_url}/reports/{kind.path}/{practitioner_id}"

    try:
        response = http.get(url, headers=_auth_headers(token), timeout=timeout)
    except requests.RequestException as e:
        return MetricOutcome(practitioner_id=practitioner_id, error=f"Request failed: {e}")

    if not response.ok:
        default = f"Failed to fetch {kind.value} for doctor {practitioner_id} (status: {response.status_code})"
        return MetricOutcome(practitioner_id=practitioner_id, error=_error_message(response, default))

    try:
        previous_months = extract_previous_months(response.json(), kind)
        amount = find_month_amount(previous_months, month, kind)
    except (ValueError, TypeError) as e:
        return MetricOutcome(practitioner_id=practitioner_id, error=str(e))

    return MetricOutcome(practitioner_id=practitioner_id, amount=amount)


def fetch_metric(
    kind: MetricKind,
    token: str,
    practitioner_ids: Sequence[PractitionerId],
    month: Month,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
    max_workers: int | None = None,
    session: requests.Session | None = None,
) -> list[MonthlyMetric]:
    """Fetch a metric for every practitioner concurrently.

    One request per id; every request runs to completion and a failed one
    degrades to amount 0 with a warning.

    Args:
        kind: Metric to fetch.
        token: Bearer token.
        practitioner_ids: Ids to fetch.
        month: Month in YYYY-MM format.
        base_url: API base URL.
        timeout: Request timeout in seconds.
        max_workers: Concurrency cap. None means one worker per id.
        session: Optional requests session.

    Returns:
        Exactly one MonthlyMetric per id, in request order.
    """
    if not practitioner_ids:
        return []

    workers = max_workers or len(practitioner_ids)
    outcomes: dict[int, MetricOutcome] = {}

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_index: dict[concurrent.futures.Future[MetricOutcome], int] = {
            executor.submit(
                fetch_metric_outcome,
                kind,
                token,
                practitioner_id,
                month,
                base_url=base_url,
                timeout=timeout,
                session=session,
            ): index
            for index, practitioner_id in enumerate(practitioner_ids)
        }

        for future in concurrent.futures.as_completed(future_to_index):
            index = future_to_index[future]
            try:
                outcomes[index] = future.result()
            except Exception as e:
                outcomes[index] = MetricOutcome(practitioner_id=practitioner_ids[index], error=f"Unexpected error: {e}")

    metrics = []
    for index in range(len(practitioner_ids)):
        outcome = outcomes[index]
        if outcome.failed:
            logger.warning("Partial failure for %s: doctor %s - %s", kind.value, outcome.practitioner_id, outcome.error)
        metrics.append(settle_outcome(outcome))

    failed = sum(1 for o in outcomes.values() if o.failed)
    logger.info("Fetched %s for %d practitioners (%d degraded)", kind.value, len(metrics), failed)
    return metrics
