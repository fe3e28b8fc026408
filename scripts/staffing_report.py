#!/usr/bin/env python3
"""
Print staffing leaderboards, capacity and dashboard KPIs from a seed file.

Loads the configuration and a seed dataset, builds the in-memory store,
and renders plain-text tables for one period selection.

Usage:
    python3 scripts/staffing_report.py
    python3 scripts/staffing_report.py --unit month --relative previous --year 2024
    python3 scripts/staffing_report.py --seed my_data.yaml --today 2024-06-15
    python3 scripts/staffing_report.py --section capacity --as-of 2024-06-15
"""

import argparse
import sys
from datetime import date
from pathlib import Path

import yaml

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

SECTIONS = ("leaderboards", "capacity", "dashboard", "all")


def _money(value) -> str:
    return f"{value:,.2f}"


def _print_leaderboards(boards, out) -> None:
    print(f"== {boards.label} ({boards.window}, {boards.weeks_in_window} weeks) ==", file=out)
    print("\nTop earners", file=out)
    print(f"  {'Name':<20} {'Revenue':>14} {'Hours':>8} {'Avg rate':>9} {'Projects':>8}", file=out)
    for r in boards.top_earners:
        print(
            f"  {r.staff_name:<20} {_money(r.total_revenue):>14} "
            f"{r.total_hours:>8} {_money(r.average_hourly_rate):>9} {r.project_count:>8}",
            file=out,
        )
    print("\nMost available", file=out)
    for r in boards.most_available:
        print(f"  {r.staff_name:<20} {r.availability:>3}%", file=out)
    print("\nTop performers", file=out)
    for r in boards.top_performers:
        print(f"  {r.staff_name:<20} {r.utilization_score:>3}", file=out)
    s = boards.summary
    print(
        f"\nTop revenue {_money(s.top_revenue_total)} | hours {s.top_hours_total} | "
        f"billing staff {s.billing_staff_count} | avg rate {_money(s.average_rate)}",
        file=out,
    )


def _print_capacity(records, staff_names, out) -> None:
    print("\n== Capacity ==", file=out)
    for r in records:
        flag = "  !" if r.is_over_committed else ""
        print(
            f"  {staff_names[r.staff_id]:<20} {r.total_allocation:>4}% {r.status.value}{flag}",
            file=out,
        )


def _print_dashboard(metrics, out) -> None:
    print("\n== Dashboard ==", file=out)
    print(f"  Projects       {metrics.total_projects} ({metrics.active_projects} active)", file=out)
    print(f"  Staff          {metrics.total_staff} ({metrics.available_staff} available)", file=out)
    print(f"  Budget         {_money(metrics.total_budget)}", file=out)
    print(f"  Received       {_money(metrics.total_received)}", file=out)
    print(f"  Spent          {_money(metrics.total_spent)}", file=out)
    margin = "n/a" if metrics.gross_margin is None else f"{metrics.gross_margin}%"
    print(f"  Gross profit   {_money(metrics.gross_profit)} ({margin})", file=out)
    print(f"  Utilization    {metrics.average_utilization}%", file=out)
    print(f"  At risk        {', '.join(metrics.projects_at_risk) or '-'}", file=out)
    print(f"  Due soon       {', '.join(metrics.upcoming_deadlines) or '-'}", file=out)


def main(argv: list[str] | None = None, out=None) -> int:
    from staffing_config import build_store, get_active_config, load_seed_data
    from staffing_engines.overlap import PeriodSelection
    from staffing_kernel.domain.clock import DeterministicClock, SystemClock
    from staffing_kernel.exceptions import StaffingKernelError
    from staffing_kernel.logging_config import configure_logging
    from staffing_services import AnalyticsService, AssignmentService, PortfolioService

    parser = argparse.ArgumentParser(description="Staffing analytics report")
    parser.add_argument("--config", type=Path, default=None, help="Configuration YAML")
    parser.add_argument("--seed", type=Path, default=None, help="Seed dataset YAML")
    parser.add_argument("--unit", default="quarter", choices=("month", "quarter", "year"))
    parser.add_argument("--relative", default="current", choices=("current", "previous", "all"))
    parser.add_argument("--year", type=int, default=None, help="Reference year")
    parser.add_argument("--today", type=date.fromisoformat, default=None,
                        help="Pin today's date (YYYY-MM-DD)")
    parser.add_argument("--as-of", type=date.fromisoformat, default=None,
                        help="Capacity as of a date (default: all assignments)")
    parser.add_argument("--section", default="all", choices=SECTIONS)
    args = parser.parse_args(argv)
    out = out or sys.stdout

    try:
        config = get_active_config(args.config)
        configure_logging(level=config.logging.level)
        store = build_store(load_seed_data(args.seed), config)
        clock = DeterministicClock(args.today) if args.today else SystemClock()
        selection = PeriodSelection(args.unit, args.relative, args.year)

        if args.section in ("leaderboards", "all"):
            boards = AnalyticsService(store, clock, config).leaderboards(selection)
            _print_leaderboards(boards, out)
        if args.section in ("capacity", "all"):
            records = AssignmentService(store, clock, config).capacity_report(args.as_of)
            names = {s.id: s.name for s in store.snapshot().staff}
            _print_capacity(records, names, out)
        if args.section in ("dashboard", "all"):
            _print_dashboard(PortfolioService(store, clock, config).dashboard(), out)
    except (StaffingKernelError, FileNotFoundError, KeyError, ValueError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
