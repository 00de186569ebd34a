import numpy as np
import pandas as pd
import pytest

from mktsim.analysis import drawdown, price_distribution, quantiles, regime_occupancy


def _ticks() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "price": [100.0, 110.0, 99.0, 105.0, 120.0],
            "spread": [0.1, 0.2, 0.1, 0.2, 0.1],
            "liquidity": [1.0, 0.9, 1.1, 1.0, 1.0],
            "regime": ["mid", "mid", "high", "high", "mid"],
        }
    )


def test_quantiles_interpolate() -> None:
    q = quantiles([1, 2, 3, 4, 5], qs=(0.0, 0.5, 0.9))
    assert q == {"p0": 1.0, "p50": 3.0, "p90": pytest.approx(4.6)}
    with pytest.raises(ValueError):
        quantiles([])
    with pytest.raises(ValueError):
        quantiles([1.0], qs=(1.5,))


def test_drawdown() -> None:
    assert drawdown([100, 110, 99, 105, 120]) == pytest.approx(99 / 110 - 1)
    assert drawdown([1, 2, 3]) == 0.0
    assert drawdown([]) == 0.0


def test_price_distribution() -> None:
    stats = price_distribution(_ticks())
    assert stats["max_price"] == 120.0
    assert stats["min_price"] == 99.0
    assert stats["max_drawdown"] == pytest.approx(99 / 110 - 1)
    assert stats["mean_spread"] == pytest.approx(0.14)
    assert np.isfinite(stats["std_price"])
    assert stats["spread_p50"] == pytest.approx(0.1)
    assert stats["spread_p90"] == pytest.approx(0.2)
    assert stats["liquidity_p10"] == pytest.approx(0.94)


def test_regime_occupancy_covers_all_regimes() -> None:
    shares = regime_occupancy(_ticks())
    assert list(shares.index) == ["low", "mid", "high"]
    assert shares["low"] == 0.0
    assert shares["mid"] == pytest.approx(0.6)
    assert shares.sum() == pytest.approx(1.0)
