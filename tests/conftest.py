"""Shared fixtures for the trade analytics test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from trade_analytics.models import Direction, TradeRecord, TradeResult

BASE_TIME = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)  # a Monday


def build_trade(**overrides) -> TradeRecord:
    defaults = dict(
        symbol="EURUSD",
        direction=Direction.BUY,
        result=TradeResult.TP,
        realized_amount=0.0,
        entry_at=BASE_TIME,
    )
    defaults.update(overrides)
    return TradeRecord(**defaults)


@pytest.fixture
def make_trade():
    return build_trade


@pytest.fixture
def pnl_series():
    """Trades one hour apart carrying the given realized amounts."""

    def _series(*amounts: float, **overrides) -> list[TradeRecord]:
        trades = []
        for idx, amount in enumerate(amounts):
            if amount > 0:
                result = TradeResult.TP
            elif amount < 0:
                result = TradeResult.SL
            else:
                result = TradeResult.BREAKEVEN
            fields = dict(
                result=result,
                realized_amount=amount,
                entry_at=BASE_TIME + timedelta(hours=idx),
                trade_id=f"t{idx}",
            )
            fields.update(overrides)
            trades.append(build_trade(**fields))
        return trades

    return _series
