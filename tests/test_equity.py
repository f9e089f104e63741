from __future__ import annotations

from datetime import datetime, timedelta, timezone

from trade_analytics.metrics.equity import (
    EquityPoint,
    chronological,
    downsample_equity,
    track_equity,
)


class TestTrackEquity:
    def test_mixed_sequence(self, pnl_series):
        result = track_equity(pnl_series(100, -50, -30, 80))
        assert [point.cumulative_pnl for point in result.points] == [100, 50, 20, 100]
        assert result.max_drawdown == 80
        assert result.avg_drawdown == (50 + 80) / 2
        assert result.max_win_streak == 1
        assert result.max_loss_streak == 2

    def test_never_below_start_has_no_drawdown(self, pnl_series):
        result = track_equity(pnl_series(10, 20, 5))
        assert result.max_drawdown == 0
        assert result.avg_drawdown == 0
        assert result.max_win_streak == 3

    def test_final_streak_is_counted(self, pnl_series):
        result = track_equity(pnl_series(10, -1, -1, -1))
        assert result.max_loss_streak == 3

    def test_flat_trades_do_not_break_streak(self, pnl_series):
        result = track_equity(pnl_series(10, 0, 10, 10))
        assert result.max_win_streak == 3

    def test_empty(self):
        result = track_equity([])
        assert result.points == []
        assert (result.max_drawdown, result.max_win_streak, result.max_loss_streak) == (0, 0, 0)

    def test_streaks_bounded_by_trade_count(self, pnl_series):
        trades = pnl_series(5, -5, 5, 5, -5, -5, -5)
        result = track_equity(trades)
        assert 0 <= result.max_win_streak <= len(trades)
        assert 0 <= result.max_loss_streak <= len(trades)
        assert result.max_drawdown >= 0


class TestOrdering:
    def test_sorted_by_entry_time(self, make_trade):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        late = make_trade(trade_id="late", entry_at=base + timedelta(days=2), realized_amount=-50)
        early = make_trade(trade_id="early", entry_at=base, realized_amount=100)
        assert [trade.trade_id for trade in chronological([late, early])] == ["early", "late"]

    def test_undated_trades_go_last_in_input_order(self, make_trade):
        dated = make_trade(trade_id="dated")
        first = make_trade(trade_id="u1", entry_at=None)
        second = make_trade(trade_id="u2", entry_at=None)
        ordered = chronological([first, dated, second])
        assert [trade.trade_id for trade in ordered] == ["dated", "u1", "u2"]

    def test_naive_and_aware_timestamps_mix(self, make_trade):
        naive = make_trade(trade_id="naive", entry_at=datetime(2024, 1, 1, 8, 0))
        aware = make_trade(trade_id="aware", entry_at=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))
        assert [trade.trade_id for trade in chronological([aware, naive])] == ["naive", "aware"]

    def test_creation_time_used_without_entry(self, make_trade):
        created = make_trade(entry_at=None, created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        point = track_equity([created]).points[0]
        assert point.timestamp_iso == "2024-01-01T00:00:00+00:00"


class TestDownsample:
    def test_short_series_untouched(self):
        points = [EquityPoint(index=idx, cumulative_pnl=float(idx)) for idx in range(5)]
        assert downsample_equity(points, 20) == points

    def test_long_series_thinned(self):
        points = [EquityPoint(index=idx, cumulative_pnl=float(idx)) for idx in range(45)]
        thinned = downsample_equity(points, 20)
        assert len(thinned) <= 20
        assert thinned[0] == points[0]
        assert [point.index for point in thinned][:3] == [0, 3, 6]
