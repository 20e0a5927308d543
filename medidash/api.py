"""HTTP boundary: POST /api/revenue-data."""

import logging
from collections.abc import Callable
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from medidash import __version__
from medidash.config import load_credentials, load_settings
from medidash.dates import parse_month
from medidash.domain.models import AggregatedRow, Month
from medidash.errors import AuthenticationFailed, ConfigError, InvalidMonth
from medidash.workflow import ReportSession

logger = logging.getLogger(__name__)

app = FastAPI(title="Medidash", version=__version__)

AUTH_FAILED_MESSAGE = "Medibill API Authentication failed. Please check server credentials configuration."
CONFIG_MESSAGE = "Server is not configured correctly for Medibill API access."
GENERIC_MESSAGE = "Failed to fetch revenue data due to a server error."


def new_report_session() -> ReportSession:
    """Build a session from server configuration.

    Raises:
        ConfigError: If credentials are not configured.
    """
    return ReportSession(load_credentials(), load_settings())


def get_session_factory() -> Callable[[], ReportSession]:
    return new_report_session


def serialize_row(row: AggregatedRow, month: Month) -> dict[str, Any]:
    """JSON shape consumed by the dashboard table.

    monthYear carries the YYYY-MM token; monthLabel the display form.
    """
    return {
        "userId": row.id,
        "accountNumber": row.account_number,
        "name": row.name,
        "totalMedibillInvoice": row.invoiced_amount,
        "totalReceived": row.received_amount,
        "monthYear": month,
        "monthLabel": row.month_label,
    }


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@app.post("/api/revenue-data")
async def revenue_data(
    request: Request,
    session_factory: Callable[[], ReportSession] = Depends(get_session_factory),
) -> JSONResponse:
    """Aggregated invoiced and received amounts per practitioner for a month."""
    try:
        body = await request.json()
    except ValueError:
        body = None

    selected = body.get("selectedMonthYear") if isinstance(body, dict) else None
    try:
        month = parse_month(selected)
    except InvalidMonth as e:
        return error_response(str(e), 400)

    try:
        session = session_factory()
    except ConfigError:
        logger.error("API_EMAIL or API_PASSWORD are not configured")
        return error_response(CONFIG_MESSAGE, 500)

    try:
        result = await run_in_threadpool(session.run, month)
    except AuthenticationFailed:
        logger.exception("Authentication failed in /api/revenue-data")
        return error_response(AUTH_FAILED_MESSAGE, 500)
    except Exception:
        logger.exception("Error in /api/revenue-data handler")
        return error_response(GENERIC_MESSAGE, 500)

    return JSONResponse({"data": [serialize_row(row, result.month) for row in result.rows]})
