# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Workshop FinSight.

This module wires together the main building blocks of Workshop FinSight:

- global configuration (snapshot directory, business rules, display),
- snapshot loading (sales, services, inventory, staff, fleet),
- reporting services (financial summary, ledger, movements, rentals),
- view helpers (tabular rendering and CSV export).

The CLI is intentionally thin: it does not implement financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and the configuration file.


High-level pipeline
-------------------

1) Load the TOML configuration (workshop_finsight_config.toml by default)
   using ``load_app_config()``.

2) Configure logging from ``[logging] level`` or ``--log-level``.

3) Load the collection snapshot from ``[data] dir`` (or ``--data-dir``).

4) Determine the reporting period from ``--period`` or
   ``--from-date``/``--to-date`` (current calendar month by default).

5) Run the requested command through ``report_service`` and render the
   result as console tables and/or CSV files.


Commands
--------

summary       Financial summary: income, cost of goods, profit, payroll,
              fixed expenses, commissions and net profit, plus the
              breakdown per operation type. This is the default command.
operations    Operations ledger of the period, newest first.
movements     Stock-depleting inventory movements of the period, with a
              per-item summary.
commissions   Commission gate and per-staff commissions.
debt          Balance of one driver (``--driver ID``): rental debt, days
              owed, deposit and manual debts, plus the current month
              statement.
rentals       Fleet summary and per-driver balances.
compare       Financial summary of the last N calendar months side by side.


Examples
--------

    python -m workshop_finsight.cli summary --period last-month
    python -m workshop_finsight.cli operations --from-date 2025-03-01 --to-date 2025-03-15
    python -m workshop_finsight.cli debt --driver drv-12
    python -m workshop_finsight.cli --display-mode csv --output exports rentals


End of module description.
"""

import argparse
import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .config import AppConfig, load_app_config
from .io import load_snapshot
from .movements import summarize_movements
from .multi_periods import compute_summaries_multi_period
from .periods import Period, determine_period_from_args, period_month
from .rentals import compute_monthly_statement
from .report_service import (
    ReportContext,
    aggregate_financial_summary,
    compute_driver_balance,
    list_inventory_movements,
    list_operations,
    summarize_fleet,
)
from .sources import FinanceDataSource
from .views import (
    breakdown_to_dataframe,
    commissions_to_dataframe,
    driver_balances_to_dataframe,
    movement_summary_to_dataframe,
    movements_to_dataframe,
    operations_to_dataframe,
    summary_to_dataframe,
)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m workshop_finsight.cli",
        description=(
            "Workshop FinSight - Financial reporting engine for workshop & fleet "
            "back offices. Aggregates sales and services into income and profit, "
            "applies payroll, fixed expenses and commissions, and computes "
            "driver rental debts."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of workshop_finsight and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. If omitted, "
            "'workshop_finsight_config.toml' in the current directory is used "
            "when present, built-in defaults otherwise."
        ),
    )
    ap.add_argument(
        "--data-dir",
        dest="data_dir",
        help="Override the snapshot directory defined in the configuration file.",
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the logging level defined in the configuration file.",
    )
    ap.add_argument(
        "--user",
        dest="requested_by",
        help="Name of the user requesting the report (recorded in the logs).",
    )

    # Period selection
    ap.add_argument(
        "--period",
        choices=["month", "mtd", "last-month", "ytd", "today"],
        help=(
            "Predefined reporting period. If not provided, the current "
            "calendar month is used."
        ),
    )
    ap.add_argument(
        "--from-date",
        dest="from_date",
        help=(
            "Custom period start date (YYYY-MM-DD). If provided without "
            "--to-date, the period covers that single day."
        ),
    )
    ap.add_argument(
        "--to-date",
        dest="to_date",
        help=(
            "Custom period end date (YYYY-MM-DD). If provided without "
            "--from-date, the period starts on the first day of that month."
        ),
    )

    # Display options
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, 'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory where CSV files are written when display mode "
            "includes 'csv'. Overrides display.output_dir."
        ),
    )

    # ------------------------------------------------------------------
    # Subcommands
    # ------------------------------------------------------------------
    subparsers = ap.add_subparsers(
        dest="command",
        metavar="command",
        help="Report to produce (default: summary).",
    )

    subparsers.add_parser("summary", help="Financial summary of the period.")
    subparsers.add_parser("operations", help="Operations ledger, newest first.")
    subparsers.add_parser("movements", help="Inventory movements of the period.")
    subparsers.add_parser("commissions", help="Commission gate and per-staff amounts.")

    debt_parser = subparsers.add_parser("debt", help="Balance of one driver.")
    debt_parser.add_argument(
        "--driver",
        dest="driver_id",
        required=True,
        help="Identifier of the driver.",
    )

    subparsers.add_parser("rentals", help="Fleet summary and per-driver balances.")

    compare_parser = subparsers.add_parser(
        "compare", help="Financial summaries of the last N calendar months."
    )
    compare_parser.add_argument(
        "--months",
        type=int,
        default=3,
        help="Number of calendar months to compare, current month included.",
    )

    return ap


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_period(period: Period) -> None:
    print(
        f"Applied period: {period.label} "
        f"({period.start.isoformat()} → {period.end.isoformat()})"
    )


def _render(
    frames: list[tuple[str, str, pd.DataFrame]],
    display_mode: str,
    output_dir: Path,
) -> None:
    """
    Render (title, file_stem, frame) triples to the console and/or CSV.
    """
    if display_mode in {"table", "both"}:
        for title, _, df in frames:
            print()
            print(f"=== {title} ===")
            if df.empty:
                print("(no rows)")
            else:
                print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for _, stem, df in frames:
            path = output_dir / f"{stem}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


def _handle_summary(source, period, context, decimals):
    summary = aggregate_financial_summary(source, period, context)
    if not summary.is_profitable_for_commissions:
        print(
            "Note: net profit before commissions is not positive, "
            "no commissions are paid for this period."
        )
    return [
        ("Financial summary", "financial_summary", summary_to_dataframe(summary, decimals)),
        ("Breakdown by type", "breakdown_by_type", breakdown_to_dataframe(summary, decimals)),
    ]


def _handle_operations(source, period, context, decimals):
    operations = list_operations(source, period, context)
    print(f"Operations in period: {len(operations)}")
    return [("Operations", "operations", operations_to_dataframe(operations, decimals))]


def _handle_movements(source, period, context, decimals):
    movements = list_inventory_movements(source, period, context)
    print(f"Inventory movements in period: {len(movements)}")
    return [
        ("Inventory movements", "inventory_movements", movements_to_dataframe(movements, decimals)),
        (
            "Consumption by item",
            "inventory_consumption",
            movement_summary_to_dataframe(summarize_movements(movements), decimals),
        ),
    ]


def _handle_commissions(source, period, context, decimals):
    result = aggregate_financial_summary(source, period, context).commission
    print(
        f"Net profit before commissions: "
        f"{result.net_profit_before_commissions:.{decimals}f}"
    )
    print(
        "Profitable for commissions: "
        f"{'yes' if result.is_profitable_for_commissions else 'no'}"
    )
    print(f"Total commissions: {result.total_variable_commissions:.{decimals}f}")
    print(f"Net profit: {result.net_profit:.{decimals}f}")
    return [("Commissions", "commissions", commissions_to_dataframe(result, decimals))]


def _handle_debt(source: FinanceDataSource, driver_id: str, context: ReportContext, decimals: int):
    balance = compute_driver_balance(source, driver_id, context)
    if balance is None:
        print(f"Driver {driver_id} not found.")
        return []

    driver = source.get_driver(driver_id)
    vehicle = (
        source.get_vehicle(driver.assigned_vehicle_id)
        if driver is not None and driver.assigned_vehicle_id
        else None
    )

    print(f"Driver {balance.driver_name or balance.driver_id}")
    print(f"  rental debt   : {balance.rental_debt:.{decimals}f}")
    print(f"  days owed     : {balance.days_owed}")
    print(f"  deposit debt  : {balance.deposit_debt:.{decimals}f}")
    print(f"  manual debts  : {balance.manual_debt:.{decimals}f}")
    print(f"  total debt    : {balance.total_debt:.{decimals}f}")

    if driver is not None:
        statement = compute_monthly_statement(
            driver,
            vehicle,
            source.list_payments(driver_id),
            today=context.today,
            tz=context.rules.timezone,
        )
        print()
        print("Current month statement:")
        print(f"  payments      : {statement.payments:.{decimals}f}")
        print(f"  charges       : {statement.charges:.{decimals}f}")
        print(f"  balance       : {statement.balance:.{decimals}f}")
        print(f"  days paid     : {statement.days_paid:.1f}")
        print(f"  days owed     : {statement.days_owed:.1f}")

    return [("Driver balance", "driver_balance", driver_balances_to_dataframe([balance], decimals))]


def _handle_rentals(source, period, context, decimals):
    fleet, balances = summarize_fleet(source, period, context)
    print(f"Collected in period: {fleet.total_collected:.{decimals}f}")
    print(f"Total debt: {fleet.total_debt:.{decimals}f}")
    if fleet.driver_with_most_debt:
        print(
            f"Driver with most debt: {fleet.driver_with_most_debt} "
            f"({fleet.most_debt_amount:.{decimals}f})"
        )
    return [("Driver balances", "driver_balances", driver_balances_to_dataframe(balances, decimals))]


def _last_months(today: date, count: int) -> list[Period]:
    """Calendar months ending with the current one, oldest first."""
    periods: list[Period] = []
    anchor = today.replace(day=1)
    for _ in range(max(1, count)):
        periods.append(period_month(anchor))
        anchor = (anchor - timedelta(days=1)).replace(day=1)
    return list(reversed(periods))


def _handle_compare(source, months, context, decimals):
    periods = _last_months(context.today, months)
    result = compute_summaries_multi_period(source, periods, context)
    measures = result.measures.pivot(index="label", columns="period_label", values="value")
    measures = measures.reindex(
        index=result.measures["label"].drop_duplicates(),
        columns=[p.label for p in periods],
    ).round(decimals)
    measures = measures.reset_index()
    breakdown = result.breakdown.copy()
    breakdown[["income", "profit"]] = breakdown[["income", "profit"]].round(decimals)
    return [
        ("Summary by month", "summary_by_month", measures),
        ("Breakdown by month", "breakdown_by_month", breakdown),
    ]


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the Workshop FinSight CLI.

    Parses command-line arguments, loads the configuration and the
    collection snapshot, runs the requested report and renders it as
    console tables and/or CSV files.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"workshop_finsight version {__version__}")
        return

    # 1) Configuration
    try:
        config: AppConfig = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    # 2) Logging
    _configure_logging(args.log_level or config.log_level)

    # 3) Snapshot
    data_dir = Path(args.data_dir) if args.data_dir else config.data_dir
    try:
        source = load_snapshot(data_dir)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    context = ReportContext.from_config(config, requested_by=args.requested_by)
    decimals = config.display.decimals
    display_mode = args.display_mode or config.display.mode
    output_dir = Path(args.output_dir) if args.output_dir else config.display.output_dir

    command = args.command or "summary"

    # 4) Commands without a reporting period
    if command == "debt":
        frames = _handle_debt(source, args.driver_id, context, decimals)
        _render(frames, display_mode, output_dir)
        return
    if command == "compare":
        frames = _handle_compare(source, args.months, context, decimals)
        _render(frames, display_mode, output_dir)
        return

    # 5) Reporting period
    try:
        period = determine_period_from_args(args, today=context.today)
    except ValueError as exc:
        parser.error(str(exc))
    _print_period(period)

    handlers = {
        "summary": _handle_summary,
        "operations": _handle_operations,
        "movements": _handle_movements,
        "commissions": _handle_commissions,
        "rentals": _handle_rentals,
    }
    frames = handlers[command](source, period, context, decimals)
    _render(frames, display_mode, output_dir)


if __name__ == "__main__":
    main()
