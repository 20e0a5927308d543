"""Tests for the medidash command line."""

from unittest.mock import Mock

from typer.testing import CliRunner

from conftest import FakeMedibill
from medidash.cli import app
from medidash.config import save_config
from medidash.dates import available_months
from medidash.domain.models import MetricKind

runner = CliRunner()

DOCTORS = [
    {"user_id": "d1", "account_number": "ACC001", "doctor_name": "Dr Alice", "practice_name": "Alice Practice"},
    {"user_id": "d2", "account_number": "ACC002", "doctor_name": "Dr Bob", "practice_name": "Bob Practice"},
]


def patch_http(monkeypatch, fake: FakeMedibill) -> None:
    """Route the client's module-level requests calls to the fake."""
    monkeypatch.setattr("medidash.medibill.requests.get", fake.session.get)
    monkeypatch.setattr("medidash.medibill.requests.post", fake.session.post)


class TestReportCommand:
    """Tests for medidash report."""

    def test_renders_table(self, isolated_config, monkeypatch) -> None:
        """Should print each practitioner with formatted amounts."""
        monkeypatch.setenv("API_EMAIL", "reports@example.com")
        monkeypatch.setenv("API_PASSWORD", "secret")
        fake = FakeMedibill(DOCTORS)
        fake.set_metric(MetricKind.INVOICED, "d1", {"2025-03": 1234.5})
        fake.set_metric(MetricKind.RECEIVED, "d2", {"2025-03": 99.0})
        patch_http(monkeypatch, fake)

        result = runner.invoke(app, ["report", "--month", "2025-03", "--sort-by", "invoiced", "--desc"])

        assert result.exit_code == 0
        assert "March 2025" in result.output
        assert "Dr Alice" in result.output
        assert "$1,234.50" in result.output
        assert "$99.00" in result.output

    def test_filter_with_no_match(self, isolated_config, monkeypatch) -> None:
        """Should say nothing matched."""
        monkeypatch.setenv("API_EMAIL", "reports@example.com")
        monkeypatch.setenv("API_PASSWORD", "secret")
        patch_http(monkeypatch, FakeMedibill(DOCTORS))

        result = runner.invoke(app, ["report", "--month", "2025-03", "--filter", "zzz"])

        assert result.exit_code == 0
        assert "No practitioners match" in result.output

    def test_invalid_month_exits(self, isolated_config, monkeypatch) -> None:
        """Should exit 1 for an invalid month."""
        monkeypatch.setenv("API_EMAIL", "reports@example.com")
        monkeypatch.setenv("API_PASSWORD", "secret")

        result = runner.invoke(app, ["report", "--month", "2024-13"])

        assert result.exit_code == 1

    def test_missing_credentials_exits(self, isolated_config) -> None:
        """Should exit 1 when credentials are not configured."""
        result = runner.invoke(app, ["report", "--month", "2025-03"])

        assert result.exit_code == 1
        assert "API credentials not set" in result.output

    def test_verbose_after_command(self, isolated_config, monkeypatch) -> None:
        """Should accept --verbose on the report command and enable debug logging."""
        monkeypatch.setenv("API_EMAIL", "reports@example.com")
        monkeypatch.setenv("API_PASSWORD", "secret")
        patch_http(monkeypatch, FakeMedibill(DOCTORS))
        configure = Mock()
        monkeypatch.setattr("medidash.cli.configure_logging", configure)

        result = runner.invoke(app, ["report", "--month", "2025-03", "--verbose"])

        assert result.exit_code == 0
        configure.assert_called_with(True)

    def test_verbose_before_command(self, isolated_config, monkeypatch) -> None:
        """Should still accept --verbose as a global option."""
        monkeypatch.setenv("API_EMAIL", "reports@example.com")
        monkeypatch.setenv("API_PASSWORD", "secret")
        patch_http(monkeypatch, FakeMedibill(DOCTORS))
        configure = Mock()
        monkeypatch.setattr("medidash.cli.configure_logging", configure)

        result = runner.invoke(app, ["--verbose", "report", "--month", "2025-03"])

        assert result.exit_code == 0
        configure.assert_called_with(True)

    def test_negative_max_workers_exits(self, isolated_config, monkeypatch) -> None:
        """Should report a bad [fetch] setting instead of crashing."""
        monkeypatch.setenv("API_EMAIL", "reports@example.com")
        monkeypatch.setenv("API_PASSWORD", "secret")
        isolated_config.parent.mkdir(parents=True)
        save_config({"fetch": {"max_workers": -1}}, isolated_config)
        fake = FakeMedibill(DOCTORS)
        patch_http(monkeypatch, fake)

        result = runner.invoke(app, ["report", "--month", "2025-03"])

        assert result.exit_code == 1
        assert not isinstance(result.exception, ValueError)
        assert "[fetch]" in result.output
        assert "max_workers" in result.output
        fake.session.post.assert_not_called()

    def test_invalid_sort_column_exits(self, isolated_config) -> None:
        """Should reject an unknown sort column."""
        result = runner.invoke(app, ["report", "--sort-by", "balance"])

        assert result.exit_code == 1
        assert "Invalid sort column" in result.output


class TestMonthsAndInit:
    """Tests for medidash months and medidash init."""

    def test_months_lists_requested_count(self) -> None:
        """Should list the current month and the ones before it."""
        result = runner.invoke(app, ["months", "--count", "3"])

        assert result.exit_code == 0
        for month, label in available_months(3):
            assert month in result.output
            assert label in result.output

    def test_init_creates_config_once(self, isolated_config) -> None:
        """Should create the config and refuse to overwrite without --force."""
        first = runner.invoke(app, ["init"])
        second = runner.invoke(app, ["init"])
        forced = runner.invoke(app, ["init", "--force"])

        assert first.exit_code == 0
        assert isolated_config.exists()
        assert second.exit_code == 1
        assert forced.exit_code == 0
