from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from trade_analytics.metrics.rr import achieved_rr
from trade_analytics.models import NO_SESSION, SESSIONS, TradeRecord, TradeResult

UNKNOWN_LABEL = "Unknown"
WEEKDAYS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
ALL_DAYS: tuple[bool, ...] = (True,) * 7
TIME_OF_DAY_BUCKETS: tuple[str, ...] = ("Morning (8-12)", "Afternoon (12-6)", "Evening (6+)")

_CANONICAL_SESSIONS = {name.lower(): name for name in SESSIONS}

KeyFn = Callable[[TradeRecord], str]


@dataclass(frozen=True)
class GroupStat:
    key: str
    trades: int
    wins: int
    losses: int
    win_rate: float
    pnl: float
    avg_rr: float


@dataclass(frozen=True)
class ResultDistribution:
    profit: int
    loss: int
    breakeven: int
    manual: int
    total: int


@dataclass(frozen=True)
class SymbolStrategies:
    symbol: str
    strategies: list[GroupStat] = field(default_factory=list)


@dataclass
class _GroupAccumulator:
    trades: int = 0
    wins: int = 0
    losses: int = 0
    pnl: float = 0.0
    total_rr: float = 0.0

    def record(self, trade: TradeRecord) -> None:
        self.trades += 1
        self.pnl += trade.pnl
        self.total_rr += achieved_rr(trade)
        if trade.is_win:
            self.wins += 1
        elif trade.is_loss:
            self.losses += 1

    def to_stat(self, key: str) -> GroupStat:
        win_rate = self.wins / self.trades * 100 if self.trades else 0.0
        avg_rr = self.total_rr / self.trades if self.trades else 0.0
        return GroupStat(
            key=key,
            trades=self.trades,
            wins=self.wins,
            losses=self.losses,
            win_rate=win_rate,
            pnl=self.pnl,
            avg_rr=avg_rr,
        )


def group_trades(
    trades: Iterable[TradeRecord],
    key_fn: KeyFn,
    *,
    seed: Sequence[str] = (),
) -> list[GroupStat]:
    """One GroupStat per distinct key, in seed order then discovery order."""
    buckets: dict[str, _GroupAccumulator] = {key: _GroupAccumulator() for key in seed}
    for trade in trades:
        key = key_fn(trade)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = _GroupAccumulator()
        bucket.record(trade)
    return [bucket.to_stat(key) for key, bucket in buckets.items()]


def session_key(trade: TradeRecord) -> str:
    label = " ".join((trade.session or "").split())
    if not label:
        return NO_SESSION
    return _CANONICAL_SESSIONS.get(label.lower(), label)


def setup_key(trade: TradeRecord) -> str:
    return (trade.setup or "").strip() or UNKNOWN_LABEL


def symbol_key(trade: TradeRecord) -> str:
    return (trade.symbol or "").strip().upper() or UNKNOWN_LABEL


def combined_key(trade: TradeRecord) -> str:
    return f"{symbol_key(trade)}|{setup_key(trade)}|{session_key(trade)}"


def weekday_index(trade: TradeRecord) -> int | None:
    timestamp = trade.weekday_timestamp
    if timestamp is None:
        return None
    return timestamp.weekday()


def session_breakdown(trades: Iterable[TradeRecord]) -> list[GroupStat]:
    return group_trades(trades, session_key, seed=SESSIONS)


def setup_breakdown(trades: Iterable[TradeRecord]) -> list[GroupStat]:
    return _by_abs_pnl(group_trades(trades, setup_key))


def symbol_breakdown(trades: Iterable[TradeRecord]) -> list[GroupStat]:
    return _by_abs_pnl(group_trades(trades, symbol_key))


def combined_breakdown(trades: Iterable[TradeRecord]) -> list[GroupStat]:
    return _by_abs_pnl(group_trades(trades, combined_key))


def weekday_breakdown(
    trades: Iterable[TradeRecord],
    days: Sequence[bool] = ALL_DAYS,
) -> list[GroupStat]:
    dated = [trade for trade in trades if weekday_index(trade) is not None]
    stats = group_trades(
        dated,
        lambda trade: WEEKDAYS[weekday_index(trade)],
        seed=WEEKDAYS,
    )
    return [stat for idx, stat in enumerate(stats) if _day_enabled(days, idx)]


def time_of_day_breakdown(trades: Iterable[TradeRecord]) -> list[GroupStat]:
    dated = [trade for trade in trades if trade.timestamp is not None]
    stats = group_trades(dated, _time_of_day_key, seed=TIME_OF_DAY_BUCKETS)
    return [stat for stat in stats if stat.trades]


def result_distribution(trades: Iterable[TradeRecord]) -> ResultDistribution:
    profit = loss = breakeven = manual = total = 0
    for trade in trades:
        total += 1
        if trade.result is TradeResult.MANUAL:
            manual += 1
        elif trade.is_win:
            profit += 1
        elif trade.is_loss:
            loss += 1
        else:
            breakeven += 1
    return ResultDistribution(profit=profit, loss=loss, breakeven=breakeven, manual=manual, total=total)


def setup_win_rate_ranking(trades: Iterable[TradeRecord], limit: int | None = 8) -> list[GroupStat]:
    ranked = sorted(group_trades(trades, setup_key), key=lambda stat: stat.win_rate, reverse=True)
    if limit is not None and limit >= 0:
        return ranked[:limit]
    return ranked


def symbol_strategy_matrix(trades: Iterable[TradeRecord]) -> list[SymbolStrategies]:
    by_symbol: dict[str, list[TradeRecord]] = {}
    for trade in trades:
        by_symbol.setdefault(symbol_key(trade), []).append(trade)
    return [
        SymbolStrategies(symbol=symbol, strategies=group_trades(items, setup_key))
        for symbol, items in by_symbol.items()
    ]


def _by_abs_pnl(stats: list[GroupStat]) -> list[GroupStat]:
    return sorted(stats, key=lambda stat: abs(stat.pnl), reverse=True)


def _day_enabled(days: Sequence[bool], idx: int) -> bool:
    if idx >= len(days):
        return False
    return bool(days[idx])


def _time_of_day_key(trade: TradeRecord) -> str:
    hour = trade.timestamp.hour
    if hour < 12:
        return TIME_OF_DAY_BUCKETS[0]
    if hour < 18:
        return TIME_OF_DAY_BUCKETS[1]
    return TIME_OF_DAY_BUCKETS[2]
