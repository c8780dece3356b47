"""Payroll Command Line Interface.

Provides operational tools for:
- Schema creation
- Period listing, creation and closing
- Bulk processing of a period
- Department payroll reports

Usage:
    python -m payroll_core.cli init-db
    python -m payroll_core.cli create-period --year 2024 --month 1 --start 2024-01-01 --end 2024-01-31
    python -m payroll_core.cli process-period --period-id 1
    python -m payroll_core.cli report --year 2024 --month 1
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import date
from typing import Any, Awaitable, Callable

from payroll_core.config import configure_logging
from payroll_core.database import create_schema, dispose_db, get_session
from payroll_core.services import BulkPayrollService, PeriodService, ReportService
from payroll_core.services.errors import PayrollError


def parse_date(s: str) -> date:
    """Parse ISO date string."""
    return date.fromisoformat(s)


class PayrollCli:
    """Payroll Command Line Interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m payroll_core.cli",
            description="Payroll operational tools",
        )
        parser.add_argument(
            "--log-level",
            type=str,
            default=None,
            help="Logging level (default: LOG_LEVEL from environment)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init-db", help="Create database tables")
        subparsers.add_parser("list-periods", help="List payroll periods")

        create = subparsers.add_parser("create-period", help="Open a new payroll period")
        create.add_argument("--year", type=int, required=True, help="Period year")
        create.add_argument("--month", type=int, required=True, help="Period month (1-12)")
        create.add_argument(
            "--start", type=parse_date, required=True, help="First day (YYYY-MM-DD)"
        )
        create.add_argument(
            "--end", type=parse_date, required=True, help="Last day (YYYY-MM-DD)"
        )

        close = subparsers.add_parser("close-period", help="Close a payroll period")
        close.add_argument("--period-id", type=int, required=True, help="Period to close")

        process = subparsers.add_parser(
            "process-period",
            help="Create records for every employee without one in the period",
        )
        process.add_argument("--period-id", type=int, required=True, help="Period to process")

        report = subparsers.add_parser("report", help="Department payroll summary")
        report.add_argument("--year", type=int, required=True, help="Report year")
        report.add_argument("--month", type=int, required=True, help="Report month (1-12)")
        report.add_argument("--department", type=str, help="Limit to one department")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        configure_logging(parsed.log_level)

        handlers: dict[str, Callable[[argparse.Namespace], Awaitable[int]]] = {
            "init-db": self._cmd_init_db,
            "list-periods": self._cmd_list_periods,
            "create-period": self._cmd_create_period,
            "close-period": self._cmd_close_period,
            "process-period": self._cmd_process_period,
            "report": self._cmd_report,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        return asyncio.run(self._dispatch(handler, parsed))

    async def _dispatch(
        self,
        handler: Callable[[argparse.Namespace], Awaitable[int]],
        args: argparse.Namespace,
    ) -> int:
        try:
            return await handler(args)
        except PayrollError as e:
            print(f"ERROR [{e.code}]: {e.message}", file=sys.stderr)
            return 1
        finally:
            await dispose_db()

    async def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create all tables."""
        await create_schema()
        print("Schema created")
        return 0

    async def _cmd_list_periods(self, args: argparse.Namespace) -> int:
        """List payroll periods, newest first."""
        async with get_session() as session:
            periods = await PeriodService(session).list_periods()
            if not periods:
                print("No payroll periods")
                return 0
            print(f"{'ID':>5}  {'YEAR':>4}  {'MO':>2}  {'START':<10}  {'END':<10}  STATUS")
            for p in periods:
                print(
                    f"{p.id:>5}  {p.year:>4}  {p.month:>2}  "
                    f"{p.period_start.isoformat():<10}  {p.period_end.isoformat():<10}  {p.status}"
                )
        return 0

    async def _cmd_create_period(self, args: argparse.Namespace) -> int:
        """Open a new payroll period."""
        async with get_session() as session:
            period = await PeriodService(session).create_period(
                args.year, args.month, args.start, args.end
            )
        print(f"Created period {period.id}: {period.period_start} .. {period.period_end}")
        return 0

    async def _cmd_close_period(self, args: argparse.Namespace) -> int:
        """Close a payroll period."""
        async with get_session() as session:
            period = await PeriodService(session).close_period(args.period_id)
        print(f"Closed period {period.id}")
        return 0

    async def _cmd_process_period(self, args: argparse.Namespace) -> int:
        """Bulk process a period."""
        async with get_session() as session:
            records = await BulkPayrollService(session).process_period(args.period_id)
        print(f"Created {len(records)} payroll record(s) in period {args.period_id}")
        for record in records:
            print(
                f"  record {record.id}: employee {record.employee_id}  "
                f"gross {record.gross_salary:>15,.2f}  net {record.net_salary:>15,.2f}"
            )
        return 0

    async def _cmd_report(self, args: argparse.Namespace) -> int:
        """Print department totals for a year/month."""
        async with get_session() as session:
            summaries = await ReportService(session).generate_report(
                args.year, args.month, args.department
            )
        if not summaries:
            print("No payroll records for this month")
            return 0

        print(f"Payroll report {args.year}-{args.month:02d}")
        print("=" * 60)
        for s in summaries:
            rows: list[tuple[str, Any]] = [
                ("Employees", s.employee_count),
                ("Gross", f"{s.total_gross_salary:,.2f}"),
                ("Net", f"{s.total_net_salary:,.2f}"),
                ("Allowances", f"{s.total_allowances:,.2f}"),
                ("Deductions", f"{s.total_deductions:,.2f}"),
            ]
            print(f"\n{s.department}")
            for label, value in rows:
                print(f"  {label + ':':<12}{value:>18}")
        return 0


def main() -> int:
    """CLI entry point."""
    cli = PayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
