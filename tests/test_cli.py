from __future__ import annotations

import json

import pytest

from trade_analytics import funded_plan, metrics_summary

ROWS = [
    {"id": "1", "symbol": "EURUSD", "result": "TP", "realized_amount": 100, "entry_at": "2024-03-04T09:00:00Z",
     "setup": "Breakout", "session": "London", "stop_loss_points": 10, "target_points": 20},
    {"id": "2", "symbol": "EURUSD", "result": "SL", "realized_amount": -50, "entry_at": "2024-03-05T09:00:00Z",
     "setup": "Breakout", "session": "London", "loss_reason": "Early entry"},
    {"id": "3", "symbol": "XAUUSD", "result": "SL", "realized_amount": -30, "entry_at": "2024-03-06T15:00:00Z",
     "setup": "Range", "session": "New York"},
    {"id": "4", "symbol": "XAUUSD", "result": "TP", "realized_amount": 80, "entry_at": "2024-03-09T10:00:00Z",
     "setup": "Range", "session": "New York"},
    {"id": "5", "symbol": "GBPUSD", "result": "nonsense"},
]


@pytest.fixture
def journal_file(tmp_path):
    path = tmp_path / "journals.json"
    path.write_text(json.dumps(ROWS), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "app.toml"
    path.write_text("[funded]\naccount_size = 10000\n", encoding="utf-8")
    return path


class TestMetricsSummary:
    def test_json_output(self, journal_file, config_file, capsys):
        code = metrics_summary.main([str(journal_file), "--config", str(config_file), "--json"])
        captured = capsys.readouterr()
        assert code == 0
        payload = json.loads(captured.out)
        assert payload["summary"]["total_trades"] == 4
        assert payload["summary"]["net_pnl"] == 100
        assert payload["mistake_costs"][0]["reason"] == "Early entry"
        assert "Skipped 1 journal rows" in captured.err

    def test_text_output(self, journal_file, config_file, capsys):
        assert metrics_summary.main([str(journal_file), "--config", str(config_file)]) == 0
        out = capsys.readouterr().out
        assert "total_trades 4" in out
        assert "max_loss_streak 2" in out

    def test_filters_and_weekday_section(self, journal_file, config_file, tmp_path):
        out_path = tmp_path / "out" / "metrics.json"
        code = metrics_summary.main(
            [str(journal_file), "--config", str(config_file), "--search", "xau", "--days", "1111111", "--out", str(out_path)]
        )
        assert code == 0
        payload = json.loads(out_path.read_text(encoding="utf-8"))
        assert payload["summary"]["total_trades"] == 2
        assert payload["weekday_analysis"]["total_trades"] == 2

    def test_missing_file(self, tmp_path, config_file, capsys):
        assert metrics_summary.main([str(tmp_path / "nope.json"), "--config", str(config_file)]) == 1
        assert "not found" in capsys.readouterr().err

    def test_bad_day_mask(self, journal_file, config_file):
        assert metrics_summary.main([str(journal_file), "--config", str(config_file), "--days", "11"]) == 2


class TestFundedPlan:
    def test_json_output(self, journal_file, config_file, capsys):
        code = funded_plan.main([str(journal_file), "--config", str(config_file), "--risk-pct", "2", "--json"])
        payload = json.loads(capsys.readouterr().out)
        assert code == 0
        assert payload["account_size"] == 10000
        assert payload["risk_per_trade"] == 200
        assert payload["sample_trades"] == 4

    def test_setup_filter(self, journal_file, config_file, capsys):
        assert funded_plan.main([str(journal_file), "--config", str(config_file), "--setup", "Range"]) == 0
        assert "sample_trades 2" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, config_file):
        assert funded_plan.main([str(tmp_path / "nope.json"), "--config", str(config_file)]) == 1
