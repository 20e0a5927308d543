"""Shared fixtures: a fake Medibill API behind a mocked requests session."""

from typing import Any
from unittest.mock import Mock

import pytest
import requests

from medidash.config import Credentials, Settings
from medidash.domain.models import MetricKind


def make_response(status_code: int = 200, body: Any = None) -> Mock:
    """Build a stand-in for requests.Response. body=None means a non-JSON body."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    if body is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


def metric_body(kind: MetricKind, months: dict[str, float]) -> dict[str, Any]:
    """Successful metric report body with one previous_months entry per month."""
    return {
        "status": "success",
        kind.report_key: {
            "previous_months": [{"month_year": m, kind.amount_field: amount} for m, amount in months.items()],
        },
    }


class FakeMedibill:
    """Routes mocked session calls to canned Medibill responses."""

    def __init__(self, doctors: list[dict[str, Any]] | None = None, token: str = "tok-123") -> None:
        self.login_response = make_response(200, {"status": "success", "token": token})
        self.doctors_response = make_response(200, {"status": "success", "doctors": doctors or []})
        self.metric_responses: dict[str, Any] = {}

        self.session = Mock(spec=requests.Session)
        self.session.post.side_effect = self._post
        self.session.get.side_effect = self._get

    def set_metric(self, kind: MetricKind, practitioner_id: str, months: dict[str, float]) -> None:
        self.metric_responses[f"{kind.path}/{practitioner_id}"] = make_response(200, metric_body(kind, months))

    def set_metric_response(self, kind: MetricKind, practitioner_id: str, response: Any) -> None:
        """Response or exception for one metric request."""
        self.metric_responses[f"{kind.path}/{practitioner_id}"] = response

    def metric_calls(self, kind: MetricKind) -> list[str]:
        return [c.args[0] for c in self.session.get.call_args_list if f"/reports/{kind.path}/" in c.args[0]]

    def _post(self, url: str, **kwargs: Any) -> Any:
        return self.login_response

    def _get(self, url: str, **kwargs: Any) -> Any:
        if url.endswith("/doctors"):
            return self.doctors_response
        key = url.split("/reports/", 1)[1]
        result = self.metric_responses.get(key)
        if result is None:
            return make_response(404, {"message": f"No report for {key}"})
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(email="reports@example.com", password="secret")


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point config lookups at an empty temp dir and clear credential env vars."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.delenv("API_EMAIL", raising=False)
    monkeypatch.delenv("API_PASSWORD", raising=False)
    monkeypatch.delenv("MEDIBILL_BASE_URL", raising=False)
    return tmp_path / "medidash" / "config.toml"
