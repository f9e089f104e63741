from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from trade_analytics.metrics.breakdown import session_key, setup_key
from trade_analytics.metrics.equity import track_equity
from trade_analytics.metrics.rr import achieved_rr
from trade_analytics.metrics.summary import compute_expectancy
from trade_analytics.models import TradeRecord


@dataclass(frozen=True)
class FundedAccountRules:
    account_size: float
    daily_loss_limit_pct: float
    max_drawdown_pct: float
    target_profit_pct: float
    risk_per_trade_pct: float
    setup: str | None = None
    session: str | None = None


@dataclass(frozen=True)
class FundedAccountPlan:
    account_size: float
    daily_loss_limit: float
    max_drawdown_limit: float
    profit_target: float
    risk_per_trade: float
    max_losses_per_day: int
    losses_to_breach_drawdown: int
    sample_trades: int
    win_rate: float
    avg_achieved_rr: float
    max_loss_streak: int
    expected_gain_per_trade: float
    trades_to_target: int | None
    breaches_daily_limit: bool
    breaches_max_drawdown: bool


def plan_funded_account(rules: FundedAccountRules, trades: Iterable[TradeRecord]) -> FundedAccountPlan:
    """Translate prop-firm percentages into dollar limits checked against history.

    The trade history is narrowed to the rules' setup and session when given;
    historical win rate, achieved RR and loss streak of that sample drive the
    projection of how many trades the target needs and whether the worst
    observed losing run would breach the account limits.
    """
    account_size = max(_num(rules.account_size), 0.0)
    daily_loss_limit = account_size * _pct(rules.daily_loss_limit_pct) / 100
    max_drawdown_limit = account_size * _pct(rules.max_drawdown_pct) / 100
    profit_target = account_size * _pct(rules.target_profit_pct) / 100
    risk_per_trade = account_size * _pct(rules.risk_per_trade_pct) / 100

    sample = filter_for_rules(trades, rules)
    stats = compute_expectancy(sample)
    equity = track_equity(sample)
    rr_values = [achieved_rr(trade) for trade in sample]
    avg_rr = sum(rr_values) / len(rr_values) if rr_values else 0.0

    expected_gain = risk_per_trade * avg_rr
    trades_to_target = None
    if expected_gain > 0 and profit_target > 0:
        trades_to_target = math.ceil(profit_target / expected_gain)

    max_losses_per_day = _whole_losses(daily_loss_limit, risk_per_trade)
    losses_to_breach = _whole_losses(max_drawdown_limit, risk_per_trade)
    streak_loss = equity.max_loss_streak * risk_per_trade

    return FundedAccountPlan(
        account_size=account_size,
        daily_loss_limit=daily_loss_limit,
        max_drawdown_limit=max_drawdown_limit,
        profit_target=profit_target,
        risk_per_trade=risk_per_trade,
        max_losses_per_day=max_losses_per_day,
        losses_to_breach_drawdown=losses_to_breach,
        sample_trades=stats.total_trades,
        win_rate=stats.win_rate,
        avg_achieved_rr=avg_rr,
        max_loss_streak=equity.max_loss_streak,
        expected_gain_per_trade=expected_gain,
        trades_to_target=trades_to_target,
        breaches_daily_limit=daily_loss_limit > 0 and streak_loss >= daily_loss_limit,
        breaches_max_drawdown=max_drawdown_limit > 0 and streak_loss >= max_drawdown_limit,
    )


def filter_for_rules(trades: Iterable[TradeRecord], rules: FundedAccountRules) -> list[TradeRecord]:
    setup = (rules.setup or "").strip().lower()
    session = (rules.session or "").strip().lower()
    selected = []
    for trade in trades:
        if setup and setup_key(trade).lower() != setup:
            continue
        if session and session_key(trade).lower() != session:
            continue
        selected.append(trade)
    return selected


def _whole_losses(limit: float, risk: float) -> int:
    if risk <= 0:
        return 0
    return int(limit // risk)


def _num(value: float | None) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _pct(value: float | None) -> float:
    return max(_num(value), 0.0)
