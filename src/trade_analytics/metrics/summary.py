from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from trade_analytics.metrics.equity import chronological, track_equity
from trade_analytics.metrics.rr import achieved_rr, planned_rr
from trade_analytics.models import TradeRecord

UNSPECIFIED_LOSS = "Unspecified loss"


@dataclass(frozen=True)
class ExpectancyStats:
    total_trades: int
    wins: int
    losses: int
    win_rate: float
    avg_win: float
    avg_loss: float
    expectancy: float
    projected_gain: float


@dataclass(frozen=True)
class MetricsSnapshot:
    total_trades: int
    wins: int
    losses: int
    breakevens: int
    win_rate: float
    net_pnl: float
    avg_win: float
    avg_loss: float
    avg_rrr: float
    avg_planned_rr: float
    payoff_ratio: float
    consistency_score: int
    expectancy: float
    projected_gain: float
    max_drawdown: float
    avg_drawdown: float
    max_win_streak: int
    max_loss_streak: int


@dataclass(frozen=True)
class RRPoint:
    index: int
    planned: float
    achieved: float


@dataclass(frozen=True)
class RREfficiency:
    points: list[RRPoint]
    avg_planned: float
    avg_achieved: float
    capture_pct: float


@dataclass(frozen=True)
class MistakeCost:
    cost: float
    reason: str
    trade_id: str | None
    symbol: str


def compute_expectancy(trades: Iterable[TradeRecord]) -> ExpectancyStats:
    pnl_values = [trade.pnl for trade in trades]
    total = len(pnl_values)
    win_values = [value for value in pnl_values if value > 0]
    loss_values = [abs(value) for value in pnl_values if value < 0]

    win_rate = len(win_values) / total * 100 if total else 0.0
    avg_win = _mean(win_values)
    avg_loss = _mean(loss_values)
    rate = win_rate / 100
    expectancy = rate * avg_win - (1 - rate) * avg_loss if total else 0.0

    return ExpectancyStats(
        total_trades=total,
        wins=len(win_values),
        losses=len(loss_values),
        win_rate=win_rate,
        avg_win=avg_win,
        avg_loss=avg_loss,
        expectancy=expectancy,
        projected_gain=expectancy * 100,
    )


def consistency_score(wins: int, losses: int, avg_rr: float) -> int:
    """Heuristic 0-100 index of win/loss balance and RR stability."""
    variance = abs(wins - losses) / max(wins + losses, 1) * 100
    rr_value = avg_rr if math.isfinite(avg_rr) else 0.0
    rrr_stability = min(rr_value * 20, 50)
    raw = max(0.0, 100 - variance + (rrr_stability - 20))
    return min(100, _round_half_up(raw))


def compute_metrics_snapshot(trades: Iterable[TradeRecord]) -> MetricsSnapshot:
    trade_list = list(trades)
    stats = compute_expectancy(trade_list)
    equity = track_equity(trade_list)

    achieved = [achieved_rr(trade) for trade in trade_list]
    planned = [value for value in (planned_rr(trade) for trade in trade_list) if value > 0]
    avg_rrr = _mean(achieved)

    payoff_ratio = 0.0
    if stats.avg_loss > 0:
        payoff_ratio = stats.avg_win / stats.avg_loss

    breakevens = stats.total_trades - stats.wins - stats.losses

    return MetricsSnapshot(
        total_trades=stats.total_trades,
        wins=stats.wins,
        losses=stats.losses,
        breakevens=breakevens,
        win_rate=stats.win_rate,
        net_pnl=sum(trade.pnl for trade in trade_list),
        avg_win=stats.avg_win,
        avg_loss=stats.avg_loss,
        avg_rrr=avg_rrr,
        avg_planned_rr=_mean(planned),
        payoff_ratio=payoff_ratio,
        consistency_score=consistency_score(stats.wins, stats.losses, avg_rrr) if trade_list else 0,
        expectancy=stats.expectancy,
        projected_gain=stats.projected_gain,
        max_drawdown=equity.max_drawdown,
        avg_drawdown=equity.avg_drawdown,
        max_win_streak=equity.max_win_streak,
        max_loss_streak=equity.max_loss_streak,
    )


def rr_efficiency(trades: Iterable[TradeRecord], limit: int | None = None) -> RREfficiency:
    points: list[RRPoint] = []
    for trade in chronological(trades):
        target = planned_rr(trade)
        if target <= 0:
            continue
        points.append(RRPoint(index=len(points) + 1, planned=target, achieved=achieved_rr(trade)))

    avg_planned = _mean([point.planned for point in points])
    avg_achieved = _mean([point.achieved for point in points])
    capture_pct = avg_achieved / avg_planned * 100 if avg_planned else 0.0
    if limit is not None and limit > 0:
        points = points[-limit:]
    return RREfficiency(
        points=points,
        avg_planned=avg_planned,
        avg_achieved=avg_achieved,
        capture_pct=capture_pct,
    )


def mistake_costs(trades: Iterable[TradeRecord], limit: int | None = 5) -> list[MistakeCost]:
    costs = [
        MistakeCost(
            cost=abs(trade.pnl),
            reason=(trade.loss_reason or "").strip() or UNSPECIFIED_LOSS,
            trade_id=trade.trade_id,
            symbol=trade.symbol,
        )
        for trade in trades
        if trade.is_loss
    ]
    costs.sort(key=lambda item: item.cost, reverse=True)
    if limit is not None and limit >= 0:
        return costs[:limit]
    return costs


def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
