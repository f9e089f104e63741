from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

SESSIONS: tuple[str, ...] = (
    "No Session",
    "London",
    "Asia",
    "New York",
    "London Killzone",
    "Asia Killzone",
    "New York Killzone",
)
NO_SESSION = SESSIONS[0]


class Direction(str, Enum):
    BUY = "Buy"
    SELL = "Sell"


class TradeResult(str, Enum):
    TP = "TP"
    SL = "SL"
    BREAKEVEN = "BREAKEVEN"
    MANUAL = "MANUAL"


class ManualOutcome(str, Enum):
    PROFIT = "Profit"
    LOSS = "Loss"


@dataclass(frozen=True)
class TradeRecord:
    symbol: str
    direction: Direction | None
    result: TradeResult
    realized_amount: float = 0.0
    entry_at: datetime | None = None
    exit_at: datetime | None = None
    created_at: datetime | None = None
    entry_price: float | None = None
    exit_price: float | None = None
    stop_loss_price: float | None = None
    target_price: float | None = None
    stop_loss_points: float | None = None
    target_points: float | None = None
    risk_amount: float | None = None
    profit_target: float | None = None
    manual_outcome: ManualOutcome | None = None
    manual_amount: float | None = None
    session: str | None = None
    setup: str | None = None
    trade_id: str | None = None
    account_id: str | None = None
    execution_type: str | None = None
    loss_reason: str | None = None
    notes: str | None = None
    rule_followed: bool = False

    @property
    def duration_minutes(self) -> float | None:
        if self.entry_at is None or self.exit_at is None:
            return None
        return max(0.0, (self.exit_at - self.entry_at).total_seconds() / 60.0)

    @property
    def timestamp(self) -> datetime | None:
        """Primary ordering time: entry, falling back to creation."""
        return self.entry_at or self.created_at

    @property
    def weekday_timestamp(self) -> datetime | None:
        return self.entry_at or self.exit_at or self.created_at

    @property
    def pnl(self) -> float:
        """Realized amount, with missing or non-finite values read as 0."""
        value = self.realized_amount
        if value is None or not math.isfinite(value):
            return 0.0
        return value

    @property
    def is_win(self) -> bool:
        return self.pnl > 0

    @property
    def is_loss(self) -> bool:
        return self.pnl < 0


def expected_realized_amount(
    result: TradeResult,
    *,
    profit_target: float | None = None,
    risk_amount: float | None = None,
    manual_outcome: ManualOutcome | None = None,
    manual_amount: float | None = None,
) -> float:
    """Signed dollar outcome implied by a trade's result.

    TP books the planned profit target, SL loses the planned risk, breakeven
    is flat and a manual exit books its own amount signed by the outcome.
    """
    if result is TradeResult.TP:
        return abs(profit_target or 0.0)
    if result is TradeResult.SL:
        return -abs(risk_amount or 0.0)
    if result is TradeResult.MANUAL:
        amount = abs(manual_amount or 0.0)
        return amount if manual_outcome is ManualOutcome.PROFIT else -amount
    return 0.0
