from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict, fields
from pathlib import Path

from trade_analytics.config.app_config import load_app_config
from trade_analytics.filters import filter_trades
from trade_analytics.ingest.journal import IngestResult, load_trades
from trade_analytics.metrics.summary import MetricsSnapshot
from trade_analytics.metrics.weekday import analyze_weekdays, parse_day_mask
from trade_analytics.report import build_performance_report
from trade_analytics.storage import sqlite_reader


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute trade journal performance metrics.")
    parser.add_argument(
        "trades_path",
        type=Path,
        nargs="?",
        default=None,
        help="Path to a journal export (json/csv/tsv). Defaults to [app].trades_path.",
    )
    parser.add_argument("--db", type=Path, default=None, help="Read journals from a SQLite database instead.")
    parser.add_argument("--config", type=Path, default=None, help="Path to app.toml.")
    parser.add_argument("--search", default=None, help="Only include trades matching symbol/setup/notes.")
    parser.add_argument("--date", default=None, help="Only include trades on this day (YYYY-MM-DD).")
    parser.add_argument(
        "--days",
        default=None,
        help="Weekday mask Monday..Sunday, e.g. 1111100. Adds a weekday analysis section.",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON output.")
    parser.add_argument("--out", type=Path, default=None, help="Write output to a file instead of stdout.")
    args = parser.parse_args(argv)

    config = load_app_config(args.config)

    try:
        days = parse_day_mask(args.days, config.analytics.weekday_days) if args.days else None
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    result = _load(args.trades_path or config.app.trades_path, args.db)
    if result is None:
        return 1
    if result.skipped:
        print(f"Skipped {result.skipped} journal rows during normalization.", file=sys.stderr)

    try:
        trades = filter_trades(result.trades, search=args.search, on_date=args.date)
    except ValueError:
        print(f"Invalid --date value: {args.date}", file=sys.stderr)
        return 2

    report = build_performance_report(trades, config.analytics)
    if days is not None:
        report["weekday_analysis"] = asdict(analyze_weekdays(trades, days))

    if args.json or (args.out is not None and args.out.suffix.lower() == ".json"):
        text = json.dumps(report, indent=2, sort_keys=True)
    else:
        text = _format_summary(report["summary"])

    if args.out is None:
        print(text)
    else:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(text + "\n", encoding="utf-8")
    return 0


def _load(trades_path: Path, db_path: Path | None) -> IngestResult | None:
    if db_path is not None:
        if not db_path.exists():
            print(f"Database not found: {db_path}", file=sys.stderr)
            return None
        conn = sqlite_reader.connect(db_path)
        try:
            return sqlite_reader.load_trades(conn)
        finally:
            conn.close()
    if not trades_path.exists():
        print(f"Journal file not found: {trades_path}", file=sys.stderr)
        return None
    try:
        return load_trades(trades_path)
    except ValueError as exc:
        print(f"Cannot read {trades_path}: {exc}", file=sys.stderr)
        return None


def _format_summary(summary: dict) -> str:
    lines = [f"{name} {_format_value(summary[name])}" for name in (item.name for item in fields(MetricsSnapshot))]
    return "\n".join(lines)


def _format_value(value: float | int | None) -> str:
    if value is None:
        return "na"
    if isinstance(value, int):
        return str(value)
    return f"{value:.6g}"


if __name__ == "__main__":
    raise SystemExit(main())
