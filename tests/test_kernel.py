import numpy as np
import pytest

from mktsim.config import KernelParams
from mktsim.engine.kernel import PriceKernel, liquidity_score, spread_width


def _quiet_params(**updates) -> KernelParams:
    base = {"drift_range": 0.0, "noise_range": 0.0, "liquidity_jitter": 0.0}
    base.update(updates)
    return KernelParams(**base)


def test_liquidity_and_spread_reference_values() -> None:
    params = KernelParams()
    assert liquidity_score(1.0, 0.0, params) == pytest.approx(1.1)
    assert spread_width(1.0, 1.0, params) == pytest.approx(0.08 * 1.7)
    assert spread_width(1.8, 0.86, params) == pytest.approx(0.08 * (1.1 + 1.08) / 0.86)


def test_liquidity_floor() -> None:
    params = KernelParams(liquidity_base=0.5)
    assert liquidity_score(1.8, -0.1, params) == pytest.approx(0.4)


def test_higher_regime_widens_spread() -> None:
    params = KernelParams()
    calm = spread_width(0.6, liquidity_score(0.6, 0.0, params), params)
    wild = spread_width(1.8, liquidity_score(1.8, 0.0, params), params)
    assert wild > calm


def test_velocity_is_smoothed_momentum_plus_news() -> None:
    kernel = PriceKernel(_quiet_params(), np.random.default_rng(0))
    step = kernel.step(price=100.0, velocity=1.0, vol_multiplier=1.0, news=2.0, news_coefficient=0.08)
    assert step.velocity == pytest.approx(0.88 + 0.16)
    assert step.price == pytest.approx(101.04)
    assert step.liquidity == pytest.approx(1.1)
    assert step.spread == pytest.approx(0.08 * 1.7 / 1.1)


def test_price_never_drops_below_one() -> None:
    kernel = PriceKernel(_quiet_params(), np.random.default_rng(0))
    step = kernel.step(price=1.2, velocity=-5.0, vol_multiplier=1.0, news=0.0, news_coefficient=0.08)
    assert step.price == 1.0
    assert step.velocity < 0


def test_noise_scales_with_regime() -> None:
    params = KernelParams(momentum=0.0)
    calm = PriceKernel(params, np.random.default_rng(4))
    wild = PriceKernel(params, np.random.default_rng(4))
    calm_moves = [abs(calm.step(100.0, 0.0, 0.6, 0.0, 0.08).velocity) for _ in range(500)]
    wild_moves = [abs(wild.step(100.0, 0.0, 1.8, 0.0, 0.08).velocity) for _ in range(500)]
    assert np.mean(wild_moves) > np.mean(calm_moves)
    assert max(wild_moves) <= 0.04 * (0.7 + 0.4 * 1.8) + 0.08 * 1.8
