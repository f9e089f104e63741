from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict, fields
from pathlib import Path

from trade_analytics.config.app_config import load_app_config
from trade_analytics.ingest.journal import load_trades
from trade_analytics.metrics.funded import FundedAccountPlan, FundedAccountRules, plan_funded_account


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Size a funded-account challenge against journal history.")
    parser.add_argument(
        "trades_path",
        type=Path,
        nargs="?",
        default=None,
        help="Path to a journal export (json/csv/tsv). Defaults to [app].trades_path.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to app.toml.")
    parser.add_argument("--account-size", type=float, default=None)
    parser.add_argument("--daily-loss-pct", type=float, default=None)
    parser.add_argument("--max-drawdown-pct", type=float, default=None)
    parser.add_argument("--target-pct", type=float, default=None)
    parser.add_argument("--risk-pct", type=float, default=None)
    parser.add_argument("--setup", default=None, help="Only use trades with this setup.")
    parser.add_argument("--session", default=None, help="Only use trades from this session.")
    parser.add_argument("--json", action="store_true", help="Print JSON output.")
    args = parser.parse_args(argv)

    config = load_app_config(args.config)
    funded = config.funded
    rules = FundedAccountRules(
        account_size=_override(args.account_size, funded.account_size),
        daily_loss_limit_pct=_override(args.daily_loss_pct, funded.daily_loss_limit_pct),
        max_drawdown_pct=_override(args.max_drawdown_pct, funded.max_drawdown_pct),
        target_profit_pct=_override(args.target_pct, funded.target_profit_pct),
        risk_per_trade_pct=_override(args.risk_pct, funded.risk_per_trade_pct),
        setup=args.setup,
        session=args.session,
    )

    trades_path = args.trades_path or config.app.trades_path
    if not trades_path.exists():
        print(f"Journal file not found: {trades_path}", file=sys.stderr)
        return 1
    try:
        result = load_trades(trades_path)
    except ValueError as exc:
        print(f"Cannot read {trades_path}: {exc}", file=sys.stderr)
        return 1
    if result.skipped:
        print(f"Skipped {result.skipped} journal rows during normalization.", file=sys.stderr)

    plan = plan_funded_account(rules, result.trades)
    if plan.sample_trades == 0:
        print("No trades match the selected setup/session.", file=sys.stderr)

    if args.json:
        print(json.dumps(asdict(plan), indent=2, sort_keys=True))
    else:
        print(_format_plan(plan))
    return 0


def _override(value: float | None, default: float) -> float:
    return default if value is None else value


def _format_plan(plan: FundedAccountPlan) -> str:
    lines = []
    for item in fields(plan):
        value = getattr(plan, item.name)
        if value is None:
            text = "na"
        elif isinstance(value, float):
            text = f"{value:.2f}"
        else:
            text = str(value)
        lines.append(f"{item.name} {text}")
    return "\n".join(lines)


if __name__ == "__main__":
    raise SystemExit(main())
