# -*- coding: utf-8 -*-
"""
Portfolio Exposure Report
-------------------------
Values a portfolio snapshot and prints exposure analytics in the terminal.

The snapshot is a JSON file holding positions plus already-fetched prices,
custom prices, FX rates and accounts (see utils/snapshot_loader.py). No
network access happens here.

Usage:
    python portfolio_report.py data/portfolio_snapshot.json
    python portfolio_report.py snapshot.json --report exposure
    python portfolio_report.py snapshot.json --report positions --hide-dust
    python portfolio_report.py snapshot.json --json > report.json
    python portfolio_report.py snapshot.json --leverage 3 --debug
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from colorama import init

import config.constants as constants
from core.summary_builder import PortfolioEngine
from ui.display_functions import (
    display_breakdown,
    display_cash_breakdown,
    display_crypto_metrics,
    display_equities_breakdown,
    display_exposure,
    display_full_report,
    display_perp_page,
    display_portfolio_summary,
    display_positions,
)
from utils.helpers import print_error, print_info, print_success, print_warning
from utils.snapshot_loader import SnapshotError, load_snapshot

REPORT_CHOICES = [
    "summary",
    "positions",
    "exposure",
    "allocation",
    "risk",
    "custody",
    "chains",
    "crypto",
    "cash",
    "equities",
    "perps",
    "all",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Portfolio valuation and exposure report",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python portfolio_report.py snapshot.json                    # Full report
  python portfolio_report.py snapshot.json --report exposure  # One section
  python portfolio_report.py snapshot.json --json             # Machine-readable output
        """,
    )
    parser.add_argument(
        "snapshot",
        nargs="?",
        default=constants.DEFAULT_SNAPSHOT_FILE,
        help=f"Snapshot JSON file (default: {constants.DEFAULT_SNAPSHOT_FILE})",
    )
    parser.add_argument("--report", choices=REPORT_CHOICES, default="all", help="Section to display")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON instead of tables")
    parser.add_argument("--hide-dust", action="store_true", help="Hide positions below the dust threshold")
    parser.add_argument(
        "--dust-threshold",
        type=float,
        default=constants.DUST_THRESHOLD,
        help=f"Dust threshold in USD (default: {constants.DUST_THRESHOLD:g})",
    )
    parser.add_argument(
        "--leverage",
        type=float,
        default=constants.ASSUMED_AVG_LEVERAGE,
        help=f"Assumed average perp leverage for margin estimates (default: {constants.ASSUMED_AVG_LEVERAGE:g})",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def render_report(report, report_name: str, engine: PortfolioEngine, hide_dust: bool, dust_threshold: float):
    """Print one section (or all of them) of a built report."""
    if report_name == "all":
        display_full_report(report, engine.category_service, hide_dust, dust_threshold)
    elif report_name == "summary":
        display_portfolio_summary(report.summary)
    elif report_name == "positions":
        display_positions(report.assets, engine.category_service, hide_dust, dust_threshold)
    elif report_name == "exposure":
        display_exposure(report.exposure)
    elif report_name == "allocation":
        display_breakdown("Asset Allocation", report.allocation, "Class")
    elif report_name == "risk":
        display_breakdown("Risk Profile", report.risk_profile, "Risk")
    elif report_name == "custody":
        display_breakdown("Custody", report.custody, "Custody", show_details=False)
    elif report_name == "chains":
        display_breakdown("Chains & Venues", report.chains, "Chain", show_details=False)
    elif report_name == "crypto":
        display_crypto_metrics(report.crypto_metrics)
    elif report_name == "cash":
        display_cash_breakdown(report.cash)
    elif report_name == "equities":
        display_equities_breakdown(report.equities)
    elif report_name == "perps":
        display_perp_page(report.perps)


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, build the report and print it. Returns the exit code."""
    args = build_parser().parse_args(argv)

    if args.debug:
        constants.DEBUG_MODE = True
    logging.basicConfig(
        level=logging.DEBUG if constants.DEBUG_MODE else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.leverage <= 0:
        print_error("--leverage must be positive")
        return 2

    try:
        snapshot = load_snapshot(args.snapshot)
    except SnapshotError as e:
        print_error(str(e))
        return 1

    engine = PortfolioEngine(assumed_avg_leverage=args.leverage)
    report = engine.build_report(
        snapshot.positions,
        snapshot.prices,
        snapshot.custom_prices,
        snapshot.fx_rates,
        snapshot.accounts,
    )

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return 0

    if constants.DEBUG_MODE:
        print_info("Debug mode enabled")
    if not snapshot.positions:
        print_warning(f"No positions in {args.snapshot}")
    else:
        print_success(f"Valued {len(snapshot.positions)} positions from {args.snapshot}")

    render_report(report, args.report, engine, args.hide_dust, args.dust_threshold)
    return 0


def main():
    # Initialize colorama for cross-platform colored terminal output
    init(autoreset=True)
    try:
        exit_code = run()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user. Exiting.")
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
