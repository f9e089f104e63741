from __future__ import annotations

from dataclasses import asdict
from typing import Any, Iterable

from trade_analytics.config.app_config import AnalyticsSettings
from trade_analytics.metrics.breakdown import (
    GroupStat,
    combined_breakdown,
    result_distribution,
    session_breakdown,
    setup_breakdown,
    setup_win_rate_ranking,
    symbol_breakdown,
    symbol_strategy_matrix,
    time_of_day_breakdown,
    weekday_breakdown,
)
from trade_analytics.metrics.equity import downsample_equity, track_equity
from trade_analytics.metrics.summary import compute_metrics_snapshot, mistake_costs, rr_efficiency
from trade_analytics.models import TradeRecord

BREAKDOWNS = {
    "session": session_breakdown,
    "setup": setup_breakdown,
    "symbol": symbol_breakdown,
    "combined": combined_breakdown,
    "weekday": weekday_breakdown,
    "time_of_day": time_of_day_breakdown,
}


def build_performance_report(
    trades: Iterable[TradeRecord],
    settings: AnalyticsSettings,
) -> dict[str, Any]:
    trade_list = list(trades)
    equity = track_equity(trade_list)
    breakdowns = {name: _stats_to_dicts(func(trade_list)) for name, func in BREAKDOWNS.items()}

    return {
        "summary": asdict(compute_metrics_snapshot(trade_list)),
        "equity_curve": [asdict(point) for point in downsample_equity(equity.points, settings.equity_max_points)],
        "rr_efficiency": asdict(rr_efficiency(trade_list, settings.rr_series_limit)),
        "result_distribution": asdict(result_distribution(trade_list)),
        "mistake_costs": [asdict(item) for item in mistake_costs(trade_list, settings.mistake_limit)],
        "breakdowns": breakdowns,
        "setup_ranking": _stats_to_dicts(setup_win_rate_ranking(trade_list, settings.setup_ranking_limit)),
        "symbol_strategies": [asdict(item) for item in symbol_strategy_matrix(trade_list)],
        "best_setup": _best_key(setup_breakdown(trade_list)),
        "best_session": _best_key(session_breakdown(trade_list)),
    }


def build_breakdown(trades: Iterable[TradeRecord], dimension: str) -> list[dict[str, Any]]:
    func = BREAKDOWNS.get(dimension)
    if func is None:
        raise KeyError(dimension)
    return _stats_to_dicts(func(list(trades)))


def _stats_to_dicts(stats: list[GroupStat]) -> list[dict[str, Any]]:
    return [asdict(stat) for stat in stats]


def _best_key(stats: list[GroupStat]) -> str | None:
    # Highest P&L among groups that actually traded; first seen wins ties.
    best: GroupStat | None = None
    for stat in stats:
        if stat.trades == 0:
            continue
        if best is None or stat.pnl > best.pnl:
            best = stat
    return best.key if best is not None else None
