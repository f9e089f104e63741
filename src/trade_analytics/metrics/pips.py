from __future__ import annotations

from decimal import Decimal, InvalidOperation

FOREX_PIP_SIZE = 0.0001
JPY_PIP_SIZE = 0.01

METALS_ENERGY: frozenset[str] = frozenset(
    {"XAUUSD", "GOLD", "XAGUSD", "SILVER", "USOIL", "WTIUSD", "BRENT", "NATGAS", "NGAS"}
)
INDICES: frozenset[str] = frozenset(
    {
        "SPX500",
        "US500",
        "SP500",
        "NASDAQ100",
        "NDX",
        "DAX",
        "STOXX50",
        "FTSE100",
        "NIKKEI",
        "ASX200",
        "CAC40",
        "IBEX35",
        "SMI",
    }
)
CRYPTO: frozenset[str] = frozenset(
    {"BTCUSD", "BTC", "ETHUSD", "ETH", "XRPUSD", "XRP", "LTCUSD", "LTC", "BCHUSD", "BCH", "ADAUSD", "ADA"}
)
# Matched as substrings: corn, wheat, soybeans, soy oil, soy meal, gold, silver,
# platinum, palladium, crude, nat gas, cocoa, coffee, sugar, cotton.
FUTURES_CODES: tuple[str, ...] = (
    "ZC",
    "ZW",
    "ZS",
    "ZL",
    "ZM",
    "GC",
    "SI",
    "PL",
    "PA",
    "CL",
    "NG",
    "CC",
    "KC",
    "SB",
    "CT",
)


def pip_size(symbol: str | None) -> float:
    sym = (symbol or "").strip().upper()
    if "JPY" in sym:
        return JPY_PIP_SIZE
    if sym in METALS_ENERGY:
        return 0.01
    if sym in INDICES:
        return 1.0
    if sym in CRYPTO:
        return 0.01
    if any(code in sym for code in FUTURES_CODES):
        return 0.01
    return FOREX_PIP_SIZE


def points_between(price_a: float, price_b: float, symbol: str | None) -> float:
    distance = price_distance(price_a, price_b)
    return float(distance / _decimal(pip_size(symbol)))


def price_distance(price_a: float, price_b: float) -> Decimal:
    """Absolute distance between two quoted prices, exact in decimal terms."""
    return abs(_decimal(price_a) - _decimal(price_b))


def price_from_points(points: float, symbol: str | None) -> float:
    return points * pip_size(symbol)


def _decimal(value: float) -> Decimal:
    # Quotes are decimal; going through str() keeps 1.1 - 1.098 at exactly 0.002.
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal(0)
