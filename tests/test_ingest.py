from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from trade_analytics.ingest.journal import load_trades, load_trades_payload, normalize_trade
from trade_analytics.models import Direction, ManualOutcome, TradeResult


class TestNormalizeTrade:
    def test_full_row(self):
        trade = normalize_trade(
            {
                "id": "j-1",
                "symbol": "eurusd",
                "direction": "Buy",
                "result": "TP",
                "entry_price": "1.1000",
                "stop_loss_price": "1.0980",
                "target_price": "1.1050",
                "profit_target": "250",
                "risk_amount": "100",
                "session": "London",
                "setup": ["Breakout", "Retest"],
                "entry_at": "2024-03-04T09:30:00Z",
                "rule_followed": "true",
            }
        )
        assert trade.symbol == "EURUSD"
        assert trade.direction is Direction.BUY
        assert trade.result is TradeResult.TP
        assert trade.stop_loss_points == 20
        assert trade.target_points == 50
        assert trade.realized_amount == 250
        assert trade.setup == "Breakout, Retest"
        assert trade.entry_at == datetime(2024, 3, 4, 9, 30, tzinfo=timezone.utc)
        assert trade.rule_followed is True

    def test_realized_amount_derived_per_result(self):
        sl = normalize_trade({"symbol": "EURUSD", "result": "SL", "risk_amount": 80})
        manual = normalize_trade(
            {"symbol": "EURUSD", "result": "MANUAL", "manual_outcome": "Loss", "manual_amount": 30}
        )
        breakeven = normalize_trade({"symbol": "EURUSD", "result": "BE"})
        assert sl.realized_amount == -80
        assert manual.manual_outcome is ManualOutcome.LOSS
        assert manual.realized_amount == -30
        assert breakeven.result is TradeResult.BREAKEVEN
        assert breakeven.realized_amount == 0

    def test_stored_realized_amount_wins(self):
        trade = normalize_trade({"symbol": "EURUSD", "result": "TP", "profit_target": 250, "realized_amount": 190})
        assert trade.realized_amount == 190

    def test_unparsable_numbers_become_zero(self):
        trade = normalize_trade({"symbol": "EURUSD", "result": "TP", "realized_amount": "n/a", "risk_amount": "?"})
        assert trade.realized_amount == 0.0
        assert trade.risk_amount == 0.0

    def test_overflowing_price_leaves_points_unset(self):
        trade = normalize_trade(
            {"symbol": "EURUSD", "result": "SL", "entry_price": 1.1, "stop_loss_price": "1e308", "risk_amount": 10}
        )
        assert trade.stop_loss_points is None
        assert trade.realized_amount == -10

    def test_epoch_and_naive_timestamps(self):
        trade = normalize_trade(
            {"symbol": "EURUSD", "result": "TP", "entry_at": 1709544600000, "exit_at": "2024-03-04T10:00:00"}
        )
        assert trade.entry_at == datetime(2024, 3, 4, 9, 30, tzinfo=timezone.utc)
        assert trade.exit_at.tzinfo is timezone.utc
        assert trade.duration_minutes == 30

    def test_bad_timestamp_is_none(self):
        trade = normalize_trade({"symbol": "EURUSD", "result": "TP", "entry_at": "yesterday"})
        assert trade.entry_at is None

    @pytest.mark.parametrize("row", [{"symbol": "EURUSD"}, {"symbol": "EURUSD", "result": "WIN"}, ["not", "a", "row"]])
    def test_invalid_rows_raise(self, row):
        with pytest.raises(ValueError):
            normalize_trade(row)


class TestLoadTrades:
    def test_json_file_counts_skipped(self, tmp_path):
        path = tmp_path / "journals.json"
        path.write_text(
            json.dumps(
                {
                    "data": [
                        {"symbol": "EURUSD", "result": "TP", "profit_target": 100},
                        {"symbol": "GBPUSD", "result": "unknown"},
                        {"symbol": "USDJPY", "result": "SL", "risk_amount": 50},
                    ]
                }
            ),
            encoding="utf-8",
        )
        result = load_trades(path)
        assert [trade.symbol for trade in result.trades] == ["EURUSD", "USDJPY"]
        assert result.skipped == 1

    def test_csv_file(self, tmp_path):
        path = tmp_path / "journals.csv"
        path.write_text(
            "symbol,result,realized_amount,session\nEURUSD,TP,120,London\nXAUUSD,SL,-60,\n",
            encoding="utf-8",
        )
        result = load_trades(path)
        assert [trade.pnl for trade in result.trades] == [120, -60]
        assert result.trades[1].session is None

    def test_tsv_file(self, tmp_path):
        path = tmp_path / "journals.tsv"
        path.write_text("symbol\tresult\trealized_amount\nEURUSD\tTP\t10\n", encoding="utf-8")
        assert load_trades(path).trades[0].pnl == 10

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "journals.xml"
        path.write_text("<x/>", encoding="utf-8")
        with pytest.raises(ValueError):
            load_trades(path)

    def test_unsupported_payload(self):
        with pytest.raises(ValueError):
            load_trades_payload({"rows": []})
