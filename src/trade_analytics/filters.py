from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from trade_analytics.metrics.equity import trade_time_key
from trade_analytics.models import TradeRecord


def filter_trades(
    trades: Iterable[TradeRecord],
    *,
    search: str | None = None,
    on_date: date | str | None = None,
) -> list[TradeRecord]:
    needle = (search or "").strip().lower()
    day = _parse_day(on_date)
    selected = []
    for trade in trades:
        if day is not None:
            timestamp = trade.timestamp
            if timestamp is None or timestamp.date() != day:
                continue
        if needle and not _matches(trade, needle):
            continue
        selected.append(trade)
    return selected


def sort_recent_first(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    trade_list = list(trades)
    dated = [trade for trade in trade_list if trade.timestamp is not None]
    undated = [trade for trade in trade_list if trade.timestamp is None]
    dated.sort(key=trade_time_key, reverse=True)
    return dated + undated


def _matches(trade: TradeRecord, needle: str) -> bool:
    haystack = (trade.symbol or "", trade.setup or "", trade.notes or "")
    return any(needle in value.lower() for value in haystack)


def _parse_day(value: date | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())

