"""Synthetic online counters."""

from __future__ import annotations

import math
from dataclasses import dataclass

from numpy.random import Generator

from mktsim.config import PresenceParams
from mktsim.utils.rng import uniform


@dataclass(frozen=True)
class OnlineCounts:
    wall_st: int
    retail: int


def online_counts(now: float, rng: Generator, params: PresenceParams | None = None) -> OnlineCounts:
    """Slow sinusoidal crowd sizes with a little jitter."""

    params = params or PresenceParams()
    wall = params.wall_st_base + math.sin(now / params.wall_st_period_ms) * params.wall_st_swing
    wall_st = max(params.wall_st_floor, int(round(wall + uniform(rng, -40, 80))))
    retail_base = params.retail_base + math.sin(now / params.retail_period_ms) * params.retail_swing
    retail = max(params.retail_floor, int(round(retail_base + uniform(rng, -8, 18))))
    return OnlineCounts(wall_st=wall_st, retail=retail)


__all__ = ["OnlineCounts", "online_counts"]
