"""Decaying news impulses that perturb price drift."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from numpy.random import Generator

from mktsim.config import NewsParams
from mktsim.utils.rng import uniform

logger = logging.getLogger(__name__)

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True)
class NewsImpulse:
    id: str
    t: float
    headline: str
    sentiment: float
    impact: float
    decay_ms: float

    def contribution_at(self, age_ms: float) -> float:
        """Signed drift contribution ``age_ms`` after spawn; zero once expired."""

        if age_ms > self.decay_ms:
            return 0.0
        return self.sentiment * self.impact * math.exp(-age_ms / self.decay_ms)

    def expired(self, now: float) -> bool:
        return now - self.t > self.decay_ms


def _token(rng: Generator, length: int = 5) -> str:
    digits = rng.integers(0, len(_ID_ALPHABET), size=length)
    return "".join(_ID_ALPHABET[int(d)] for d in digits)


class NewsModel:
    """Spawn at most ``max_active`` impulses and sum their decayed effect."""

    def __init__(self, params: NewsParams, rng: Generator) -> None:
        self.params = params
        self.rng = rng
        self.pending: List[NewsImpulse] = []

    def maybe_spawn(self, now: float) -> Optional[NewsImpulse]:
        """Possibly create a new impulse at ``now``.

        Nothing is drawn while the active set is full.
        """

        if len(self.pending) >= self.params.max_active:
            return None
        if float(self.rng.random()) > self.params.spawn_probability:
            return None
        p = self.params
        sentiment = uniform(self.rng, *p.sentiment_range)
        impact = uniform(self.rng, *p.impact_range)
        headlines = p.bullish_headlines if sentiment >= 0 else p.bearish_headlines
        headline = headlines[int(self.rng.integers(0, len(headlines)))]
        item = NewsImpulse(
            id=f"{int(now)}-{_token(self.rng)}",
            t=now,
            headline=headline,
            sentiment=sentiment,
            impact=impact,
            decay_ms=uniform(self.rng, *p.decay_ms_range),
        )
        self.pending.append(item)
        logger.debug("News spawned %s (sentiment %.2f, impact %.2f)", item.headline, sentiment, impact)
        return item

    def contribution(self, now: float) -> float:
        """Drop expired impulses, then sum the rest at ``now``."""

        self.pending = [item for item in self.pending if not item.expired(now)]
        if not self.pending:
            return 0.0
        return float(np.sum([item.contribution_at(now - item.t) for item in self.pending]))

    @property
    def current(self) -> Optional[NewsImpulse]:
        return self.pending[0] if self.pending else None


__all__ = ["NewsImpulse", "NewsModel"]
