"""Simulation state definitions."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Tuple

from mktsim.engine.news import NewsImpulse, NewsModel
from mktsim.engine.regime import RegimeStateMachine, VolatilityRegime
from mktsim.market.bars import Bar, BarAggregator
from mktsim.market.execution import TradeFill


@dataclass
class MarketState:
    """Container for mutable market state owned by one engine."""

    price: float
    regime_machine: RegimeStateMachine
    news_model: NewsModel
    aggregator: BarAggregator
    velocity: float = 0.0
    spread: float = 0.1
    liquidity: float = 1.0
    t: Optional[float] = None
    tick_count: int = 0
    trade_tape: Deque[TradeFill] = field(default_factory=lambda: deque(maxlen=50))

    @property
    def regime(self) -> VolatilityRegime:
        return self.regime_machine.regime

    @property
    def regime_expiry(self) -> float:
        return self.regime_machine.expiry

    @property
    def vol_multiplier(self) -> float:
        return self.regime_machine.multiplier

    @property
    def current_bar(self) -> Optional[Bar]:
        return self.aggregator.current

    @property
    def bar_history(self) -> Tuple[Bar, ...]:
        return self.aggregator.bars()

    @property
    def pending_news(self) -> List[NewsImpulse]:
        return list(self.news_model.pending)

    def record_trade(self, fill: TradeFill) -> None:
        self.trade_tape.append(fill)


__all__ = ["MarketState"]
