"""Performance restricted to a selection of weekdays.

The day mask is a 7-value sequence indexed Monday=0 ... Sunday=6. Trades whose
entry/exit/creation time is unknown cannot be placed on a weekday and are left
out of every figure here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from trade_analytics.metrics.breakdown import (
    GroupStat,
    combined_breakdown,
    session_breakdown,
    setup_breakdown,
    symbol_breakdown,
    weekday_breakdown,
    weekday_index,
)
from trade_analytics.metrics.summary import compute_expectancy, consistency_score
from trade_analytics.models import TradeRecord

WEEKDAYS_ONLY: tuple[bool, ...] = (True, True, True, True, True, False, False)


@dataclass(frozen=True)
class WeekdayAnalysis:
    days: tuple[bool, ...]
    total_trades: int
    win_rate: float
    net_pnl: float
    avg_win: float
    avg_loss: float
    avg_rrr: float
    consistency_score: int
    best_day: GroupStat | None
    worst_day: GroupStat | None
    by_day: list[GroupStat] = field(default_factory=list)
    sessions: list[GroupStat] = field(default_factory=list)
    symbols: list[GroupStat] = field(default_factory=list)
    setups: list[GroupStat] = field(default_factory=list)
    combined: list[GroupStat] = field(default_factory=list)


def parse_day_mask(value: str | Sequence[bool] | None, default: Sequence[bool] = WEEKDAYS_ONLY) -> tuple[bool, ...]:
    """Accept a 7-char "1111100" string or a sequence of booleans."""
    if value is None:
        return tuple(bool(item) for item in default)
    if isinstance(value, str):
        text = value.strip()
        if len(text) != 7 or any(char not in "01" for char in text):
            raise ValueError(f"Invalid day mask: {value!r}")
        return tuple(char == "1" for char in text)
    mask = tuple(bool(item) for item in value)
    if len(mask) != 7:
        raise ValueError(f"Day mask needs 7 entries, got {len(mask)}")
    return mask


def select_days(trades: Iterable[TradeRecord], days: Sequence[bool]) -> list[TradeRecord]:
    selected = []
    for trade in trades:
        idx = weekday_index(trade)
        if idx is None:
            continue
        if idx < len(days) and days[idx]:
            selected.append(trade)
    return selected


def analyze_weekdays(trades: Iterable[TradeRecord], days: Sequence[bool] = WEEKDAYS_ONLY) -> WeekdayAnalysis:
    mask = parse_day_mask(days)
    selected = select_days(trades, mask)
    if not selected:
        return WeekdayAnalysis(
            days=mask,
            total_trades=0,
            win_rate=0.0,
            net_pnl=0.0,
            avg_win=0.0,
            avg_loss=0.0,
            avg_rrr=0.0,
            consistency_score=0,
            best_day=None,
            worst_day=None,
        )

    stats = compute_expectancy(selected)
    # Payoff ratio: average win over average loss.
    avg_rrr = stats.avg_win / stats.avg_loss if stats.avg_loss > 0 else 0.0

    by_day = weekday_breakdown(selected, mask)
    ranked = sorted(by_day, key=lambda stat: stat.pnl, reverse=True)
    best_day = ranked[0] if ranked else None
    worst_day = ranked[-1] if len(ranked) > 1 else None

    return WeekdayAnalysis(
        days=mask,
        total_trades=stats.total_trades,
        win_rate=stats.win_rate,
        net_pnl=sum(trade.pnl for trade in selected),
        avg_win=stats.avg_win,
        avg_loss=stats.avg_loss,
        avg_rrr=avg_rrr,
        consistency_score=consistency_score(stats.wins, stats.losses, avg_rrr),
        best_day=best_day,
        worst_day=worst_day,
        by_day=by_day,
        sessions=session_breakdown(selected),
        symbols=symbol_breakdown(selected),
        setups=setup_breakdown(selected),
        combined=combined_breakdown(selected),
    )
