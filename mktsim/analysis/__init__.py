"""Analytics utilities for mktsim."""

from .metrics import drawdown, price_distribution, quantiles, regime_occupancy

__all__ = [
    "drawdown",
    "price_distribution",
    "quantiles",
    "regime_occupancy",
]
