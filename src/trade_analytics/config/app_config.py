from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from trade_analytics.metrics.weekday import WEEKDAYS_ONLY, parse_day_mask

CONFIG_ENV_VAR = "TRADE_ANALYTICS_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/app.toml")


@dataclass(frozen=True)
class AppSettings:
    host: str
    port: int
    reload: bool
    trades_path: Path
    db_path: Path | None


@dataclass(frozen=True)
class AnalyticsSettings:
    equity_max_points: int
    rr_series_limit: int
    mistake_limit: int
    setup_ranking_limit: int
    weekday_days: tuple[bool, ...]


@dataclass(frozen=True)
class FundedSettings:
    account_size: float
    daily_loss_limit_pct: float
    max_drawdown_pct: float
    target_profit_pct: float
    risk_per_trade_pct: float


@dataclass(frozen=True)
class AppConfig:
    app: AppSettings
    analytics: AnalyticsSettings
    funded: FundedSettings


def resolve_config_path(path: Path | None = None, env: Mapping[str, str] | None = None) -> Path:
    if path is not None:
        return path
    env = os.environ if env is None else env
    override = (env.get(CONFIG_ENV_VAR) or "").strip()
    return Path(override) if override else DEFAULT_CONFIG_PATH


def load_app_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    config_path = resolve_config_path(path, env)
    raw: Mapping[str, Any] = {}
    if config_path.exists():
        raw = tomllib.loads(config_path.read_text(encoding="utf-8"))

    app_raw = _section(raw, "app")
    analytics_raw = _section(raw, "analytics")
    funded_raw = _section(raw, "funded")

    app = AppSettings(
        host=str(app_raw.get("host", "127.0.0.1")),
        port=_int(app_raw.get("port"), 8000),
        reload=bool(app_raw.get("reload", False)),
        trades_path=Path(app_raw.get("trades_path", "data/journals.json")),
        db_path=_path_or_none(app_raw.get("db_path")),
    )

    analytics = AnalyticsSettings(
        equity_max_points=_int(analytics_raw.get("equity_max_points"), 20),
        rr_series_limit=_int(analytics_raw.get("rr_series_limit"), 20),
        mistake_limit=_int(analytics_raw.get("mistake_limit"), 5),
        setup_ranking_limit=_int(analytics_raw.get("setup_ranking_limit"), 8),
        weekday_days=_day_mask(analytics_raw.get("weekday_days")),
    )

    funded = FundedSettings(
        account_size=_float(funded_raw.get("account_size"), 100_000.0),
        daily_loss_limit_pct=_float(funded_raw.get("daily_loss_limit_pct"), 5.0),
        max_drawdown_pct=_float(funded_raw.get("max_drawdown_pct"), 10.0),
        target_profit_pct=_float(funded_raw.get("target_profit_pct"), 8.0),
        risk_per_trade_pct=_float(funded_raw.get("risk_per_trade_pct"), 1.0),
    )

    return AppConfig(app=app, analytics=analytics, funded=funded)


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if isinstance(value, Mapping):
        return value
    return {}


def _int(value: Any, default: int) -> int:
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _float(value: Any, default: float) -> float:
    if value in (None, ""):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _path_or_none(value: Any) -> Path | None:
    if value in (None, ""):
        return None
    return Path(str(value))


def _day_mask(value: Any) -> tuple[bool, ...]:
    if not isinstance(value, (str, list)):
        return WEEKDAYS_ONLY
    try:
        return parse_day_mask(value)
    except ValueError:
        return WEEKDAYS_ONLY
