"""
Command-line entry point: restock plan and portfolio summary from JSON exports.

Usage:
    restock-planner plan records.json [--logs logs.json] [--target-days 90]
    restock-planner summary records.json [--top 4]

records.json holds a list of raw planning records (snake_case or the web
front-end's camelCase); logs.json a list of inventory log dicts. Settings
come from --settings or the default settings file.

Exit codes:
    0 = success
    1 = unreadable or invalid input
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .config import DEFAULT_TARGET_STOCK_DAYS, get_settings_path, load_settings
from .analytics.portfolio import summarize_portfolio
from .domain.models import InventoryLog, ReplenishmentRecord
from .domain.validation import normalize_record
from .utils.logging_config import setup_logging
from .workflows.restock import build_restock_plan, plan_totals

logger = logging.getLogger(__name__)


def _read_json_list(path: Path, what: str) -> List[Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{what} file {path} must hold a JSON list")
    return data


def load_records(path: Path) -> List[ReplenishmentRecord]:
    """Normalize every raw record in the file; records without a SKU are skipped."""
    records = []
    for index, raw in enumerate(_read_json_list(path, "Records")):
        if not isinstance(raw, dict):
            logger.warning("Skipping record #%d: not an object", index)
            continue
        try:
            records.append(normalize_record(raw))
        except ValueError as e:
            logger.warning("Skipping record #%d: %s", index, e)
    return records


def load_logs(path: Path) -> List[InventoryLog]:
    """Parse inventory logs. A malformed log is an error: balances would be wrong."""
    logs = []
    for index, raw in enumerate(_read_json_list(path, "Logs")):
        try:
            logs.append(InventoryLog.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid inventory log #{index}: {e}") from e
    return logs


def _print_plan(args, records, settings) -> None:
    logs = load_logs(Path(args.logs)) if args.logs else None
    plan = build_restock_plan(records, settings, target_stock_days=args.target_days, logs=logs)

    if not plan:
        print("No SKU needs restocking.")
        return

    print(f"{'SKU':<20} {'Stock':>8} {'Days':>7} {'Reorder':>8} {'Cost (CNY)':>12}  Urgent")
    for s in plan:
        days = s.metrics.days_of_supply
        print(
            f"{s.sku:<20} {s.record.quantity:>8} {days:>7.1f} {s.suggested_qty:>8} "
            f"{s.estimated_cost_cny:>12,.2f}  {'yes' if s.is_urgent else 'no'}"
        )
    totals = plan_totals(plan)
    print(f"\n{totals.sku_count} SKU(s), {totals.total_units} unit(s), {totals.total_cost_cny:,.2f} CNY")


def _print_summary(args, records, settings) -> None:
    summary = summarize_portfolio(records, settings, top_n=args.top)
    print(f"Records:          {summary.record_count}")
    print(f"Capital (CNY):    {summary.total_invest_cny:,.2f}")
    print(f"Revenue (USD):    {summary.total_revenue_usd:,.2f}")
    print(f"Profit (USD):     {summary.total_profit_usd:,.2f}")
    print(f"Overall ROI:      {summary.overall_roi:.1f}%")
    print(f"Freight air/sea:  {summary.air_share:.1f}% / {summary.sea_share:.1f}%")
    for status, count in summary.stock_status_counts.items():
        if count:
            print(f"  {status.value:<10} {count}")
    if summary.top_products:
        print("Top products:")
        for p in summary.top_products:
            print(f"  {p.sku:<20} {p.profit_usd:>12,.2f} USD  ROI {p.roi:.1f}%")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="restock-planner",
        description="Replenishment planning from exported records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--settings", type=str, help=f"Settings JSON (default: {get_settings_path()})")
    parser.add_argument("--log-dir", type=str, help="Log directory (default: <planner home>/logs)")
    parser.add_argument("--verbose", action="store_true", help="Echo progress messages to stderr")

    sub = parser.add_subparsers(dest="command", required=True)

    plan = sub.add_parser("plan", help="Reorder suggestions")
    plan.add_argument("records", type=str, help="Records JSON file")
    plan.add_argument("--logs", type=str, help="Inventory logs JSON file (live stock)")
    plan.add_argument("--target-days", type=float, default=DEFAULT_TARGET_STOCK_DAYS,
                      help=f"Coverage goal in days (default: {DEFAULT_TARGET_STOCK_DAYS})")
    plan.set_defaults(handler=_print_plan)

    summary = sub.add_parser("summary", help="Portfolio financial summary")
    summary.add_argument("records", type=str, help="Records JSON file")
    summary.add_argument("--top", type=int, default=4, help="Number of top products (default: 4)")
    summary.set_defaults(handler=_print_summary)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(
        log_dir=args.log_dir,
        console_level=logging.INFO if args.verbose else logging.CRITICAL,
    )

    try:
        settings = load_settings(args.settings)
        records = load_records(Path(args.records))
        logger.info("Loaded %d record(s)", len(records))
        args.handler(args, records, settings)
    except (OSError, json.JSONDecodeError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
