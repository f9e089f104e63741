from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from trade_analytics.metrics.pips import points_between, price_distance
from trade_analytics.models import Direction, TradeRecord, TradeResult

RR_FLOOR = -10.0
RR_CEILING = 50.0
STOPPED_OUT_RR = -1.0


@dataclass(frozen=True)
class TradePoints:
    stop_loss_points: float | None
    target_points: float | None
    source: str | None


def normalize_rr(rr: float, max_rr: float = RR_CEILING) -> float:
    if rr is None or not math.isfinite(rr):
        return 0.0
    return min(max(rr, RR_FLOOR), max_rr)


def safe_rr(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return normalize_rr(number)


def rr_from_points(risk_points: float | None, reward_points: float | None) -> float:
    if not risk_points or risk_points <= 0:
        return 0.0
    return normalize_rr((reward_points or 0.0) / risk_points)


def rr_from_prices(entry: float | None, tp: float | None, sl: float | None) -> float:
    entry, tp, sl = _price(entry), _price(tp), _price(sl)
    if entry is None or tp is None or sl is None:
        return 0.0
    if entry == tp or entry == sl:
        return 0.0
    reward = price_distance(tp, entry)
    risk = price_distance(entry, sl)
    if risk == 0:
        return 0.0
    return normalize_rr(float(reward / risk))


def rr_from_amount(realized_amount: float | None, risk_amount: float | None) -> float:
    if not risk_amount:
        return 0.0
    return normalize_rr((realized_amount or 0.0) / risk_amount)


def planned_rr(trade: TradeRecord) -> float:
    if _has_prices(trade):
        return rr_from_prices(trade.entry_price, trade.target_price, trade.stop_loss_price)
    return rr_from_points(trade.stop_loss_points, trade.target_points)


def achieved_rr(trade: TradeRecord) -> float:
    result = trade.result
    if result is TradeResult.MANUAL:
        return rr_from_amount(trade.pnl, trade.risk_amount)
    if result is TradeResult.TP:
        if _has_prices(trade):
            return rr_from_prices(trade.entry_price, trade.target_price, trade.stop_loss_price)
        return rr_from_points(trade.stop_loss_points, trade.target_points)
    if result is TradeResult.SL:
        return _stopped_out_rr(trade)
    return 0.0


def derive_points(trade: TradeRecord) -> TradePoints:
    """Stop/target distances in points, rounded the way journal rows store them."""
    entry = _price(trade.entry_price)
    if entry is not None:
        stop_points = None
        target_points = None
        stop = _price(trade.stop_loss_price)
        target = _price(trade.target_price)
        if stop is not None:
            stop_points = rounded_points(entry, stop, trade.symbol)
        if target is not None:
            target_points = rounded_points(entry, target, trade.symbol)
        if stop_points is not None or target_points is not None:
            return TradePoints(
                stop_loss_points=stop_points if stop_points is not None else trade.stop_loss_points,
                target_points=target_points if target_points is not None else trade.target_points,
                source="prices",
            )
    if trade.stop_loss_points is not None or trade.target_points is not None:
        return TradePoints(
            stop_loss_points=trade.stop_loss_points,
            target_points=trade.target_points,
            source="stored",
        )
    return TradePoints(stop_loss_points=None, target_points=None, source=None)


def rounded_points(entry: float, price: float, symbol: str | None) -> float | None:
    """Whole points between two prices, or None when the distance overflows."""
    points = points_between(entry, price, symbol)
    if not math.isfinite(points):
        return None
    return float(round(points))


def _stopped_out_rr(trade: TradeRecord) -> float:
    entry = _price(trade.entry_price)
    stop = _price(trade.stop_loss_price)
    exit_price = _price(trade.exit_price)
    if entry is None or stop is None or exit_price is None:
        return STOPPED_OUT_RR
    risk = price_distance(entry, stop)
    if risk == 0:
        return STOPPED_OUT_RR
    moved = float(price_distance(entry, exit_price) / risk)
    if trade.direction is Direction.BUY and exit_price > entry:
        return normalize_rr(moved)
    if trade.direction is Direction.SELL and exit_price < entry:
        return normalize_rr(moved)
    return normalize_rr(-moved)


def _has_prices(trade: TradeRecord) -> bool:
    prices = (trade.entry_price, trade.target_price, trade.stop_loss_price)
    return all(_price(value) is not None for value in prices)


def _price(value: float | None) -> float | None:
    # Zero and non-finite quotes count as missing.
    if not value or not math.isfinite(value):
        return None
    return value
