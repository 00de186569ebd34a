"""Session statistics for simulated tick tables."""

from __future__ import annotations

from typing import Dict, Iterable, Sequence

import numpy as np
import pandas as pd


def quantiles(values: Sequence[float], qs: Iterable[float] = (0.1, 0.5, 0.9)) -> Dict[str, float]:
    """Linearly interpolated quantiles keyed ``p10``, ``p50`` and so on."""

    samples = np.asarray(values, dtype=float)
    if samples.size == 0:
        raise ValueError("values cannot be empty")
    probs = np.asarray(list(qs), dtype=float)
    if ((probs < 0.0) | (probs > 1.0)).any():
        raise ValueError("quantile probabilities must be in [0,1]")
    points = np.quantile(samples, probs)
    return {f"p{int(round(q * 100))}": float(v) for q, v in zip(probs, points)}


def drawdown(series: Sequence[float]) -> float:
    """Deepest fall from a running peak, as a non-positive fraction."""

    prices = np.asarray(series, dtype=float)
    if prices.size == 0:
        return 0.0
    peaks = np.maximum.accumulate(prices)
    return float(min(0.0, np.min(prices / peaks - 1.0)))


def price_distribution(ticks: pd.DataFrame) -> pd.Series:
    """Summary of the price path plus spread and liquidity percentiles."""

    price = ticks["price"]
    summary: Dict[str, float] = {
        "mean_price": price.mean(),
        "std_price": price.std(),
        "max_price": price.max(),
        "min_price": price.min(),
        "max_drawdown": drawdown(price.tolist()),
        "mean_spread": ticks["spread"].mean(),
        "mean_liquidity": ticks["liquidity"].mean(),
    }
    for column in ("spread", "liquidity"):
        for key, value in quantiles(ticks[column].tolist()).items():
            summary[f"{column}_{key}"] = value
    return pd.Series(summary)


def regime_occupancy(ticks: pd.DataFrame) -> pd.Series:
    """Share of ticks spent in each volatility regime."""

    shares = ticks["regime"].value_counts(normalize=True)
    return shares.reindex(["low", "mid", "high"], fill_value=0.0)


__all__ = ["quantiles", "drawdown", "price_distribution", "regime_occupancy"]
