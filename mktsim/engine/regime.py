"""Volatility regime state machine."""

from __future__ import annotations

import logging
from enum import Enum

from numpy.random import Generator

from mktsim.config import RegimeParams
from mktsim.utils.rng import uniform

logger = logging.getLogger(__name__)


class VolatilityRegime(str, Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"


class RegimeStateMachine:
    """Discrete low/mid/high regime with randomized dwell time.

    The regime only changes once ``now`` reaches ``expiry``; the next regime is
    a weighted draw and may repeat the current one.
    """

    def __init__(self, params: RegimeParams, rng: Generator, now: float = 0.0) -> None:
        self.params = params
        self.rng = rng
        self.regime = VolatilityRegime(params.initial_regime)
        self.expiry = now + params.initial_dwell_ms

    @property
    def multiplier(self) -> float:
        return self.params.multipliers[self.regime.value]

    def _choose(self) -> VolatilityRegime:
        draw = float(self.rng.random())
        cumulative = 0.0
        for regime in VolatilityRegime:
            cumulative += self.params.weights[regime.value]
            if draw < cumulative:
                return regime
        return VolatilityRegime.HIGH

    def _dwell(self, regime: VolatilityRegime) -> float:
        if regime is VolatilityRegime.HIGH:
            low, high = self.params.high_dwell_ms
        else:
            low, high = self.params.calm_dwell_ms
        return uniform(self.rng, low, high)

    def refresh(self, now: float) -> bool:
        """Rotate the regime if its dwell time has elapsed.

        Returns True when a new regime (possibly the same one) was drawn.
        """

        if now < self.expiry:
            return False
        previous = self.regime
        self.regime = self._choose()
        self.expiry = now + self._dwell(self.regime)
        logger.debug("Regime %s -> %s until %.0f", previous.value, self.regime.value, self.expiry)
        return True


__all__ = ["VolatilityRegime", "RegimeStateMachine"]
