from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException, Request

from trade_analytics.config.app_config import AppConfig, load_app_config
from trade_analytics.filters import filter_trades, sort_recent_first
from trade_analytics.ingest.journal import load_trades
from trade_analytics.metrics.equity import downsample_equity, track_equity
from trade_analytics.metrics.funded import FundedAccountRules, plan_funded_account
from trade_analytics.metrics.rr import achieved_rr, derive_points, planned_rr
from trade_analytics.metrics.weekday import analyze_weekdays, parse_day_mask
from trade_analytics.models import TradeRecord
from trade_analytics.report import BREAKDOWNS, build_breakdown, build_performance_report
from trade_analytics.storage import sqlite_reader

app = FastAPI(title="Trade Analytics")


@app.get("/api/summary")
def summary_api(request: Request) -> dict[str, Any]:
    config = load_app_config()
    state = _load_journal_state(config, request)
    report = build_performance_report(state["trades"], config.analytics)
    report["skipped"] = state["skipped"]
    report["data_note"] = state["data_note"]
    return report


@app.get("/api/trades")
def trades_api(request: Request) -> list[dict[str, Any]]:
    config = load_app_config()
    state = _load_journal_state(config, request)
    return [_trade_to_dict(trade) for trade in sort_recent_first(state["trades"])]


@app.get("/api/breakdowns/{dimension}")
def breakdown_api(request: Request, dimension: str) -> list[dict[str, Any]]:
    if dimension not in BREAKDOWNS:
        raise HTTPException(status_code=404, detail=f"Unknown breakdown: {dimension}.")
    config = load_app_config()
    state = _load_journal_state(config, request)
    return build_breakdown(state["trades"], dimension)


@app.get("/api/equity")
def equity_api(request: Request) -> dict[str, Any]:
    config = load_app_config()
    state = _load_journal_state(config, request)
    equity = track_equity(state["trades"])
    max_points = _int_param(request, "max_points", config.analytics.equity_max_points)
    return {
        "points": [asdict(point) for point in downsample_equity(equity.points, max_points)],
        "max_drawdown": equity.max_drawdown,
        "avg_drawdown": equity.avg_drawdown,
        "max_win_streak": equity.max_win_streak,
        "max_loss_streak": equity.max_loss_streak,
    }


@app.get("/api/weekday")
def weekday_api(request: Request) -> dict[str, Any]:
    config = load_app_config()
    try:
        days = parse_day_mask(request.query_params.get("days"), config.analytics.weekday_days)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    state = _load_journal_state(config, request)
    return asdict(analyze_weekdays(state["trades"], days))


@app.get("/api/funded-plan")
def funded_plan_api(request: Request) -> dict[str, Any]:
    config = load_app_config()
    funded = config.funded
    rules = FundedAccountRules(
        account_size=_float_param(request, "account_size", funded.account_size),
        daily_loss_limit_pct=_float_param(request, "daily_loss_limit_pct", funded.daily_loss_limit_pct),
        max_drawdown_pct=_float_param(request, "max_drawdown_pct", funded.max_drawdown_pct),
        target_profit_pct=_float_param(request, "target_profit_pct", funded.target_profit_pct),
        risk_per_trade_pct=_float_param(request, "risk_per_trade_pct", funded.risk_per_trade_pct),
        setup=request.query_params.get("setup") or None,
        session=request.query_params.get("session") or None,
    )
    state = _load_journal_state(config, request)
    return asdict(plan_funded_account(rules, state["trades"]))


def _load_journal_state(config: AppConfig, request: Request) -> dict[str, Any]:
    db_path = config.app.db_path
    if db_path is not None and db_path.exists():
        conn = sqlite_reader.connect(db_path)
        try:
            result = sqlite_reader.load_trades(
                conn,
                user_id=request.query_params.get("user_id") or None,
                account_id=request.query_params.get("account_id") or None,
            )
        finally:
            conn.close()
    else:
        trades_path = config.app.trades_path
        if not trades_path.exists():
            return {
                "trades": [],
                "skipped": 0,
                "data_note": f"No journal file found. Place an export at {trades_path} or set [app].db_path.",
            }
        try:
            result = load_trades(trades_path)
        except ValueError as exc:
            return {"trades": [], "skipped": 0, "data_note": f"Cannot read {trades_path}: {exc}"}

    try:
        trades = filter_trades(
            result.trades,
            search=request.query_params.get("search"),
            on_date=request.query_params.get("date"),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid date filter; expected YYYY-MM-DD.") from exc
    return {"trades": trades, "skipped": result.skipped, "data_note": None}


def _trade_to_dict(trade: TradeRecord) -> dict[str, Any]:
    payload = asdict(trade)
    for key in ("entry_at", "exit_at", "created_at"):
        value = payload[key]
        payload[key] = value.isoformat() if value is not None else None
    for key in ("direction", "result", "manual_outcome"):
        value = payload[key]
        payload[key] = value.value if value is not None else None
    payload["pnl"] = trade.pnl
    payload["duration_minutes"] = trade.duration_minutes
    payload["planned_rr"] = planned_rr(trade)
    payload["achieved_rr"] = achieved_rr(trade)
    payload["points"] = asdict(derive_points(trade))
    return payload


def _float_param(request: Request, name: str, default: float) -> float:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid number for {name}.") from exc


def _int_param(request: Request, name: str, default: int) -> int:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid integer for {name}.") from exc


def main() -> None:
    import uvicorn

    app_config = load_app_config()
    uvicorn.run(
        "trade_analytics.web.app:app",
        host=app_config.app.host,
        port=app_config.app.port,
        reload=app_config.app.reload,
    )


if __name__ == "__main__":
    main()
