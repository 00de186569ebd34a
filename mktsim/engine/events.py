"""Immutable payloads emitted by the market engine.

Every event carries a ``type`` discriminator (``"tick"``, ``"bar"``,
``"news"`` or ``"snapshot"``) so subscribers can dispatch on a single field.
Payloads are frozen dataclasses built fresh for each emission; nothing in them
refers back into engine-owned state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

from mktsim.engine.news import NewsImpulse
from mktsim.engine.presence import OnlineCounts
from mktsim.engine.regime import VolatilityRegime
from mktsim.market.bars import Bar
from mktsim.market.orderbook import OrderBook


@dataclass(frozen=True)
class MarketTickEvent:
    type: ClassVar[str] = "tick"

    t: float
    price: float
    velocity: float
    regime: VolatilityRegime
    spread: float
    liquidity: float
    order_book: OrderBook
    bar: Optional[Bar]
    online: OnlineCounts
    news: Optional[NewsImpulse] = None


@dataclass(frozen=True)
class BarEvent:
    """A bar that has just been closed and archived."""

    type: ClassVar[str] = "bar"

    bar: Bar


@dataclass(frozen=True)
class NewsEvent:
    type: ClassVar[str] = "news"

    impulse: NewsImpulse


@dataclass(frozen=True)
class SnapshotEvent:
    """Current state plus archived bars, sent on start and on subscribe."""

    type: ClassVar[str] = "snapshot"

    tick: MarketTickEvent
    bars: Tuple[Bar, ...]


EngineEvent = Union[MarketTickEvent, BarEvent, NewsEvent, SnapshotEvent]


__all__ = ["MarketTickEvent", "BarEvent", "NewsEvent", "SnapshotEvent", "EngineEvent"]
