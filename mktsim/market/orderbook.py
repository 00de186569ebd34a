"""Synthetic order-book ladder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from numpy.random import Generator

from mktsim.config import BookParams
from mktsim.utils.rng import uniform


@dataclass(frozen=True)
class OrderBookLevel:
    price: float
    size: int


@dataclass(frozen=True)
class OrderBook:
    """Bid/ask ladder around ``mid``; both sides ordered nearest-to-mid first."""

    bids: Tuple[OrderBookLevel, ...]
    asks: Tuple[OrderBookLevel, ...]
    spread: float
    mid: float

    @property
    def best_bid(self) -> float:
        return self.bids[0].price if self.bids else float("nan")

    @property
    def best_ask(self) -> float:
        return self.asks[0].price if self.asks else float("nan")

    @property
    def total_bid_size(self) -> int:
        return sum(level.size for level in self.bids)

    @property
    def total_ask_size(self) -> int:
        return sum(level.size for level in self.asks)


def _level_size(depth_base: float, params: BookParams, rng: Generator) -> int:
    low, high = params.size_jitter
    return max(params.min_size, int(round(depth_base + uniform(rng, low, high))))


def synthesize_order_book(
    mid: float,
    spread: float,
    vol_multiplier: float,
    rng: Generator,
    params: BookParams | None = None,
) -> OrderBook:
    """Build a symmetric ladder from the current mid, spread and regime.

    Higher volatility widens the level step and thins the depth. Nothing is
    carried over between calls.
    """

    params = params or BookParams()
    step = params.step_base + params.step_vol_slope * vol_multiplier
    depth_base = params.depth_numerator / (vol_multiplier + params.depth_vol_offset)
    bids: List[OrderBookLevel] = []
    asks: List[OrderBookLevel] = []
    for i in range(params.levels):
        offset = spread / 2 + i * step
        bids.append(OrderBookLevel(price=mid - offset, size=_level_size(depth_base, params, rng)))
        asks.append(OrderBookLevel(price=mid + offset, size=_level_size(depth_base, params, rng)))
    return OrderBook(bids=tuple(bids), asks=tuple(asks), spread=spread, mid=mid)


__all__ = ["OrderBookLevel", "OrderBook", "synthesize_order_book"]
