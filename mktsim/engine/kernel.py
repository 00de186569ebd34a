"""Momentum price kernel advanced once per tick."""

from __future__ import annotations

from dataclasses import dataclass

from numpy.random import Generator

from mktsim.config import KernelParams
from mktsim.utils.rng import uniform


@dataclass(frozen=True)
class KernelStep:
    price: float
    velocity: float
    spread: float
    liquidity: float


def liquidity_score(vol_multiplier: float, jitter: float, params: KernelParams) -> float:
    return max(params.liquidity_floor, params.liquidity_base - params.liquidity_vol_slope * vol_multiplier + jitter)


def spread_width(vol_multiplier: float, liquidity: float, params: KernelParams) -> float:
    return params.spread_base * (params.spread_offset + params.spread_vol_slope * vol_multiplier) / liquidity


class PriceKernel:
    """Exponentially smoothed velocity driving a floored price.

    ``velocity`` keeps ``momentum`` of its previous value each tick, which
    gives the series trend persistence; drift, noise and the news term are
    added on top and scaled by the regime multiplier where relevant.
    """

    def __init__(self, params: KernelParams, rng: Generator) -> None:
        self.params = params
        self.rng = rng

    def step(self, price: float, velocity: float, vol_multiplier: float, news: float, news_coefficient: float) -> KernelStep:
        p = self.params
        liquidity = liquidity_score(vol_multiplier, uniform(self.rng, -p.liquidity_jitter, p.liquidity_jitter), p)
        spread = spread_width(vol_multiplier, liquidity, p)
        drift = uniform(self.rng, -p.drift_range, p.drift_range) * (p.drift_offset + p.drift_vol_slope * vol_multiplier)
        noise = uniform(self.rng, -p.noise_range, p.noise_range) * vol_multiplier
        velocity = p.momentum * velocity + drift + noise + news_coefficient * news
        price = max(p.price_floor, price + velocity)
        return KernelStep(price=price, velocity=velocity, spread=spread, liquidity=liquidity)


__all__ = ["KernelStep", "PriceKernel", "liquidity_score", "spread_width"]
