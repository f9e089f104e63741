from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timezone
from typing import Iterable

from trade_analytics.models import TradeRecord

STREAK_NONE = "none"
STREAK_WIN = "win"
STREAK_LOSS = "loss"

DEFAULT_MAX_POINTS = 20


@dataclass(frozen=True)
class EquityPoint:
    index: int
    cumulative_pnl: float
    timestamp_iso: str | None = None


@dataclass(frozen=True)
class EquityResult:
    points: list[EquityPoint]
    max_drawdown: float
    avg_drawdown: float
    max_win_streak: int
    max_loss_streak: int


@dataclass
class _EquityState:
    cumulative: float = 0.0
    peak_equity: float = 0.0
    max_drawdown: float = 0.0
    drawdown_sum: float = 0.0
    drawdown_samples: int = 0
    streak_type: str = STREAK_NONE
    streak_length: int = 0
    max_win_streak: int = 0
    max_loss_streak: int = 0

    def apply(self, pnl: float) -> None:
        self.cumulative += pnl
        self.peak_equity = max(self.peak_equity, self.cumulative)
        drawdown = self.peak_equity - self.cumulative
        if drawdown > 0:
            self.drawdown_sum += drawdown
            self.drawdown_samples += 1
        self.max_drawdown = max(self.max_drawdown, drawdown)
        self._update_streak(pnl)

    def close_streak(self) -> None:
        if self.streak_type == STREAK_WIN:
            self.max_win_streak = max(self.max_win_streak, self.streak_length)
        elif self.streak_type == STREAK_LOSS:
            self.max_loss_streak = max(self.max_loss_streak, self.streak_length)

    def _update_streak(self, pnl: float) -> None:
        if pnl > 0:
            outcome = STREAK_WIN
        elif pnl < 0:
            outcome = STREAK_LOSS
        else:
            # Flat trades leave the running streak untouched.
            return
        if outcome == self.streak_type:
            self.streak_length += 1
            return
        self.close_streak()
        self.streak_type = outcome
        self.streak_length = 1


def chronological(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    """Trades ascending by entry (or creation) time; undated trades keep input order at the end."""
    trade_list = list(trades)
    dated = [trade for trade in trade_list if trade.timestamp is not None]
    undated = [trade for trade in trade_list if trade.timestamp is None]
    dated.sort(key=trade_time_key)
    return dated + undated


def track_equity(trades: Iterable[TradeRecord]) -> EquityResult:
    state = _EquityState()
    points: list[EquityPoint] = []
    for idx, trade in enumerate(chronological(trades)):
        state.apply(trade.pnl)
        timestamp = trade.timestamp
        points.append(
            EquityPoint(
                index=idx,
                cumulative_pnl=state.cumulative,
                timestamp_iso=timestamp.isoformat() if timestamp is not None else None,
            )
        )
    state.close_streak()
    avg_drawdown = state.drawdown_sum / state.drawdown_samples if state.drawdown_samples else 0.0
    return EquityResult(
        points=points,
        max_drawdown=state.max_drawdown,
        avg_drawdown=avg_drawdown,
        max_win_streak=state.max_win_streak,
        max_loss_streak=state.max_loss_streak,
    )


def downsample_equity(points: list[EquityPoint], max_points: int | None = DEFAULT_MAX_POINTS) -> list[EquityPoint]:
    if max_points is None or max_points <= 0 or len(points) <= max_points:
        return points
    stride = math.ceil(len(points) / max_points)
    return points[::stride]


def trade_time_key(trade: TradeRecord) -> float:
    timestamp = trade.timestamp
    if timestamp.tzinfo is None:
        # Naive timestamps are treated as UTC so they order against aware ones.
        return timestamp.replace(tzinfo=timezone.utc).timestamp()
    return timestamp.timestamp()

