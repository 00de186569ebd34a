"""Fill pricing and player trade impact."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from mktsim.config import ExecutionParams

Side = Literal["buy", "sell"]

SLIPPAGE_FLOOR = 0.01
LIQUIDITY_FLOOR = 0.2
VOLATILITY_OFFSET = 0.4


@dataclass(frozen=True)
class TradeFill:
    t: float
    side: str
    size: float
    price: float
    slippage: float


def side_direction(side: str) -> int:
    """Return +1 for buys and -1 for sells."""

    if side == "buy":
        return 1
    if side == "sell":
        return -1
    raise ValueError(f"side must be 'buy' or 'sell', got '{side}'")


def estimate_slippage(size: float, liquidity: float, volatility: float) -> float:
    """Distance paid beyond half the spread.

    Grows linearly with size and volatility and inversely with liquidity, and
    never drops below one cent.
    """

    if size < 0:
        raise ValueError(f"size must be non-negative, received {size}")
    return max(
        SLIPPAGE_FLOOR,
        (size / 1000) * (1 / max(LIQUIDITY_FLOOR, liquidity)) * (VOLATILITY_OFFSET + volatility),
    )


def fill_price(
    mid: float,
    spread: float,
    size: float,
    liquidity: float,
    volatility: float,
    side: str,
) -> float:
    """Execution price for a market order of ``size`` against ``mid``.

    Examples:
        >>> round(fill_price(100.0, 0.2, 500, 1.0, 1.0, "buy"), 6)
        100.8
    """

    direction = side_direction(side)
    return mid + direction * (spread / 2 + estimate_slippage(size, liquidity, volatility))


def apply_trade_impact(
    price: float,
    velocity: float,
    side: str,
    size: float,
    params: ExecutionParams,
    price_floor: float = 1.0,
) -> tuple[float, float]:
    """Return ``(price, velocity)`` after a player fill pushes the market."""

    direction = side_direction(side)
    velocity = velocity + direction * min(1.5, size / 1000) * params.velocity_kick
    price = max(price_floor, price + direction * min(1.8, size / 800) * params.price_kick)
    return price, velocity


__all__ = [
    "Side",
    "TradeFill",
    "side_direction",
    "estimate_slippage",
    "fill_price",
    "apply_trade_impact",
]
