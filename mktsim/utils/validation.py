"""Validation helpers."""

from __future__ import annotations

from typing import Sequence, Tuple

from mktsim.config import Config


def assert_fraction(value: float, name: str) -> None:
    """Ensure value lies within [0, 1]."""

    if not 0 <= value <= 1:
        raise ValueError(f"{name} must lie in [0, 1], received {value}")


def assert_range(bounds: Tuple[float, float], name: str, positive: bool = False) -> None:
    """Ensure ``bounds`` is an ordered (low, high) pair."""

    low, high = bounds
    if low > high:
        raise ValueError(f"{name} lower bound {low} exceeds upper bound {high}")
    if positive and low <= 0:
        raise ValueError(f"{name} must be strictly positive, received {bounds}")


def assert_multiples(values: Sequence[int], base: int, name: str) -> None:
    """Ensure every value is a positive multiple of ``base``."""

    for value in values:
        if value <= 0 or value % base != 0:
            raise ValueError(f"{name} entries must be positive multiples of {base}, received {value}")


def validate_config(config: Config) -> None:
    """Run cross-field checks that pydantic constraints cannot express.

    ``model_copy(update=...)`` skips field validation, so the scalar bounds the
    engine relies on are checked again here.
    """

    if config.engine.tick_ms <= 0:
        raise ValueError(f"engine.tick_ms must be positive, received {config.engine.tick_ms}")
    if config.engine.bar_ms <= 0:
        raise ValueError(f"engine.bar_ms must be positive, received {config.engine.bar_ms}")
    if config.engine.initial_price < config.kernel.price_floor:
        raise ValueError("engine.initial_price must not start below kernel.price_floor")
    assert_multiples(config.engine.timeframes_ms, config.engine.bar_ms, "engine.timeframes_ms")

    weights = config.regime.weights
    for name, weight in weights.items():
        assert_fraction(weight, f"regime.weights.{name}")
    if not 0.99 <= sum(weights.values()) <= 1.01:
        raise ValueError("Regime weights must sum to 1 within tolerance")
    for name, multiplier in config.regime.multipliers.items():
        if multiplier <= 0:
            raise ValueError(f"regime.multipliers.{name} must be positive")
    assert_range(config.regime.high_dwell_ms, "regime.high_dwell_ms", positive=True)
    assert_range(config.regime.calm_dwell_ms, "regime.calm_dwell_ms", positive=True)

    assert_fraction(config.news.spawn_probability, "news.spawn_probability")
    assert_range(config.news.sentiment_range, "news.sentiment_range")
    if config.news.sentiment_range[0] < -1 or config.news.sentiment_range[1] > 1:
        raise ValueError("news.sentiment_range must stay within [-1, 1]")
    assert_range(config.news.impact_range, "news.impact_range", positive=True)
    assert_range(config.news.decay_ms_range, "news.decay_ms_range", positive=True)
    if not config.news.bullish_headlines or not config.news.bearish_headlines:
        raise ValueError("news headline sets cannot be empty")

    assert_range(config.book.size_jitter, "book.size_jitter")


__all__ = ["assert_fraction", "assert_range", "assert_multiples", "validate_config"]
