from __future__ import annotations

from datetime import datetime, timezone

import pytest

from trade_analytics.metrics.weekday import WEEKDAYS_ONLY, analyze_weekdays, parse_day_mask, select_days
from trade_analytics.models import TradeResult


def _on(day: int, amount: float, **extra):
    result = TradeResult.TP if amount > 0 else TradeResult.SL
    return dict(entry_at=datetime(2024, 3, day, 10, 0, tzinfo=timezone.utc), realized_amount=amount, result=result, **extra)


class TestDayMask:
    def test_string_mask(self):
        assert parse_day_mask("1010000") == (True, False, True, False, False, False, False)

    def test_default_when_missing(self):
        assert parse_day_mask(None) == WEEKDAYS_ONLY

    def test_sequence_mask(self):
        assert parse_day_mask([1, 1, 1, 1, 1, 1, 1]) == (True,) * 7

    @pytest.mark.parametrize("value", ["11111", "11111002", "abcdefg", [True, False]])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            parse_day_mask(value)


class TestAnalyzeWeekdays:
    def test_weekend_excluded_by_default(self, make_trade):
        trades = [
            make_trade(**_on(4, 100)),  # Monday
            make_trade(**_on(5, -40)),  # Tuesday
            make_trade(**_on(9, 500)),  # Saturday
        ]
        analysis = analyze_weekdays(trades)
        assert analysis.total_trades == 2
        assert analysis.net_pnl == 60
        assert analysis.win_rate == 50
        assert [stat.key for stat in analysis.by_day] == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
        assert analysis.best_day.key == "Monday"
        assert analysis.worst_day.key == "Tuesday"

    def test_uses_payoff_ratio_for_rr(self, make_trade):
        trades = [make_trade(**_on(4, 100)), make_trade(**_on(5, -50))]
        analysis = analyze_weekdays(trades, "1111111")
        assert analysis.avg_rrr == 2.0
        assert analysis.consistency_score == 100

    def test_no_matching_days(self, make_trade):
        analysis = analyze_weekdays([make_trade(**_on(4, 100))], "0000011")
        assert analysis.total_trades == 0
        assert analysis.best_day is None
        assert analysis.consistency_score == 0

    def test_undated_trades_ignored(self, make_trade):
        trades = [make_trade(entry_at=None, realized_amount=10)]
        assert select_days(trades, (True,) * 7) == []

    def test_breakdowns_only_cover_selected_days(self, make_trade):
        trades = [
            make_trade(**_on(4, 100, session="London", setup="Breakout")),
            make_trade(**_on(10, -20, session="Asia", setup="Range")),  # Sunday
        ]
        analysis = analyze_weekdays(trades)
        sessions = {stat.key: stat.trades for stat in analysis.sessions}
        assert sessions["London"] == 1
        assert sessions["Asia"] == 0
        assert [stat.key for stat in analysis.setups] == ["Breakout"]
        assert analysis.combined[0].key == "EURUSD|Breakout|London"
