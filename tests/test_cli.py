"""Tests for the payroll command line interface."""

import pytest

from payroll_core.cli import PayrollCli
from payroll_core.config import get_settings


@pytest.fixture
def cli_database(tmp_path, monkeypatch):
    """Point the CLI at a throwaway SQLite file."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestPayrollCli:
    """Test CLI commands against a file database."""

    def test_no_command_prints_help(self, capsys):
        assert PayrollCli().run([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_period_lifecycle(self, cli_database, capsys):
        cli = PayrollCli()

        assert cli.run(["init-db"]) == 0
        assert (
            cli.run(
                [
                    "create-period",
                    "--year", "2024",
                    "--month", "1",
                    "--start", "2024-01-01",
                    "--end", "2024-01-31",
                ]
            )
            == 0
        )
        assert cli.run(["process-period", "--period-id", "1"]) == 0
        assert cli.run(["close-period", "--period-id", "1"]) == 0
        capsys.readouterr()

        assert cli.run(["list-periods"]) == 0
        out = capsys.readouterr().out
        assert "2024-01-01" in out
        assert "closed" in out

    def test_payroll_errors_exit_nonzero(self, cli_database, capsys):
        cli = PayrollCli()
        cli.run(["init-db"])

        assert cli.run(["close-period", "--period-id", "5"]) == 1
        assert "NOT_FOUND" in capsys.readouterr().err

    def test_report_without_records(self, cli_database, capsys):
        cli = PayrollCli()
        cli.run(["init-db"])

        assert cli.run(["report", "--year", "2024", "--month", "1"]) == 0
        assert "No payroll records" in capsys.readouterr().out
