from __future__ import annotations

import csv
import json
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

from trade_analytics.metrics.rr import rounded_points
from trade_analytics.models import (
    Direction,
    ManualOutcome,
    TradeRecord,
    TradeResult,
    expected_realized_amount,
)

_RESULT_ALIASES = {
    "TP": TradeResult.TP,
    "TAKE PROFIT": TradeResult.TP,
    "TAKE_PROFIT": TradeResult.TP,
    "SL": TradeResult.SL,
    "STOP LOSS": TradeResult.SL,
    "STOP_LOSS": TradeResult.SL,
    "BREAKEVEN": TradeResult.BREAKEVEN,
    "BE": TradeResult.BREAKEVEN,
    "MANUAL": TradeResult.MANUAL,
}


@dataclass(frozen=True)
class IngestResult:
    trades: list[TradeRecord]
    skipped: int = 0


def load_trades(path: str | Path) -> IngestResult:
    source_path = Path(path)
    suffix = source_path.suffix.lower()
    if suffix == ".json":
        return _load_trades_json(source_path)
    if suffix in {".csv", ".tsv"}:
        return _load_trades_csv(source_path, delimiter="\t" if suffix == ".tsv" else ",")
    raise ValueError(f"Unsupported file type: {source_path.suffix}")


def load_trades_payload(payload: Any) -> IngestResult:
    records = _extract_records(payload)
    trades, skipped = normalize_records(records)
    return IngestResult(trades=trades, skipped=skipped)


def normalize_records(records: Iterable[Any]) -> tuple[list[TradeRecord], int]:
    trades: list[TradeRecord] = []
    skipped = 0
    for raw in records:
        try:
            trades.append(normalize_trade(raw))
        except ValueError:
            skipped += 1
    return trades, skipped


def normalize_trade(raw: Any) -> TradeRecord:
    if not isinstance(raw, Mapping):
        raise ValueError("Journal row is not a mapping")
    result = _normalize_result(_pick(raw, "result", "outcome"))
    symbol = str(_pick(raw, "symbol", "instrument", "title") or "").strip().upper()

    entry_price = _to_float(_pick(raw, "entry_price", "entryPrice"))
    stop_loss_price = _to_float(_pick(raw, "stop_loss_price", "stopLossPrice", "sl_price"))
    target_price = _to_float(_pick(raw, "target_price", "targetPrice", "tp_price"))
    stop_loss_points = _to_float(_pick(raw, "stop_loss_points", "stopLossPoints"))
    target_points = _to_float(_pick(raw, "target_points", "targetPoints"))
    if stop_loss_points is None and entry_price and stop_loss_price:
        stop_loss_points = rounded_points(entry_price, stop_loss_price, symbol)
    if target_points is None and entry_price and target_price:
        target_points = rounded_points(entry_price, target_price, symbol)

    risk_amount = _to_float(_pick(raw, "risk_amount", "riskAmount"))
    profit_target = _to_float(_pick(raw, "profit_target", "profitTarget"))
    manual_outcome = _normalize_manual_outcome(_pick(raw, "manual_outcome", "manualOutcome"))
    manual_amount = _to_float(_pick(raw, "manual_amount", "manualAmount"))

    realized_amount = _to_float(_pick(raw, "realized_amount", "realizedAmount", "pnl"))
    if realized_amount is None:
        realized_amount = expected_realized_amount(
            result,
            profit_target=profit_target,
            risk_amount=risk_amount,
            manual_outcome=manual_outcome,
            manual_amount=manual_amount,
        )

    return TradeRecord(
        symbol=symbol,
        direction=_normalize_direction(_pick(raw, "direction", "side")),
        result=result,
        realized_amount=realized_amount,
        entry_at=_parse_timestamp(_pick(raw, "entry_at", "entryAt")),
        exit_at=_parse_timestamp(_pick(raw, "exit_at", "exitAt")),
        created_at=_parse_timestamp(_pick(raw, "created_at", "createdAt")),
        entry_price=entry_price,
        exit_price=_to_float(_pick(raw, "exit_price", "exitPrice")),
        stop_loss_price=stop_loss_price,
        target_price=target_price,
        stop_loss_points=stop_loss_points,
        target_points=target_points,
        risk_amount=risk_amount,
        profit_target=profit_target,
        manual_outcome=manual_outcome,
        manual_amount=manual_amount,
        session=_text(_pick(raw, "session")),
        setup=_setup_text(_pick(raw, "setup", "setup_name")),
        trade_id=_text(_pick(raw, "id", "trade_id", "journal_id")),
        account_id=_text(_pick(raw, "account_id", "accountId")),
        execution_type=_text(_pick(raw, "execution_type", "executionType")),
        loss_reason=_text(_pick(raw, "loss_reason", "exit_reason", "lossReason")),
        notes=_text(_pick(raw, "notes")),
        rule_followed=_to_bool(_pick(raw, "rule_followed", "ruleFollowed")),
    )


def _load_trades_json(path: Path) -> IngestResult:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return load_trades_payload(payload)


def _load_trades_csv(path: Path, delimiter: str) -> IngestResult:
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle, delimiter=delimiter)
        trades, skipped = normalize_records(reader)
    return IngestResult(trades=trades, skipped=skipped)


def _extract_records(payload: Any) -> Iterable[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("data", "journals", "trades", "result"):
            if key in payload and isinstance(payload[key], list):
                return payload[key]
    raise ValueError("Unsupported JSON format for journal payload")


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] not in (None, ""):
            return raw[key]
    return None


def _normalize_result(value: Any) -> TradeResult:
    if value is None:
        raise ValueError("Missing result")
    text = str(value).strip().upper()
    result = _RESULT_ALIASES.get(text)
    if result is None:
        raise ValueError(f"Unknown result: {value}")
    return result


def _normalize_direction(value: Any) -> Direction | None:
    if value is None:
        return None
    text = str(value).strip().upper()
    if text in {"BUY", "B", "LONG"}:
        return Direction.BUY
    if text in {"SELL", "S", "SHORT"}:
        return Direction.SELL
    return None


def _normalize_manual_outcome(value: Any) -> ManualOutcome | None:
    if value is None:
        return None
    text = str(value).strip().upper()
    if text in {"PROFIT", "WIN"}:
        return ManualOutcome.PROFIT
    if text in {"LOSS", "LOSE"}:
        return ManualOutcome.LOSS
    return None


def _to_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(str(value).strip().replace(",", "")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def _to_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "t", "yes", "y"}


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _setup_text(value: Any) -> str | None:
    if isinstance(value, (list, tuple)):
        return _text(", ".join(str(item) for item in value if item not in (None, "")))
    return _text(value)


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        return _timestamp_from_number(float(value))

    text = str(value).strip()
    try:
        numeric = float(text)
        return _timestamp_from_number(numeric)
    except ValueError:
        pass

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _timestamp_from_number(value: float) -> datetime | None:
    if not math.isfinite(value):
        return None
    seconds = value / 1000.0 if value > 1e12 else value
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
