from collections import Counter

import numpy as np
import pytest

from mktsim.config import RegimeParams
from mktsim.engine.regime import RegimeStateMachine, VolatilityRegime


def test_starts_mid_and_holds_until_expiry() -> None:
    machine = RegimeStateMachine(RegimeParams(), np.random.default_rng(0), now=1_000.0)
    assert machine.regime is VolatilityRegime.MID
    assert machine.multiplier == 1.0
    assert machine.expiry == 61_000.0
    assert machine.refresh(60_999.0) is False
    assert machine.regime is VolatilityRegime.MID


def test_multipliers() -> None:
    machine = RegimeStateMachine(RegimeParams(), np.random.default_rng(0))
    expected = {VolatilityRegime.LOW: 0.6, VolatilityRegime.MID: 1.0, VolatilityRegime.HIGH: 1.8}
    for regime, value in expected.items():
        machine.regime = regime
        assert machine.multiplier == value


def test_weighted_draw_frequencies() -> None:
    machine = RegimeStateMachine(RegimeParams(), np.random.default_rng(12))
    counts: Counter = Counter()
    now = 0.0
    for _ in range(20_000):
        now = machine.expiry
        assert machine.refresh(now) is True
        counts[machine.regime] += 1
    total = sum(counts.values())
    assert counts[VolatilityRegime.LOW] / total == pytest.approx(0.20, abs=0.02)
    assert counts[VolatilityRegime.MID] / total == pytest.approx(0.55, abs=0.02)
    assert counts[VolatilityRegime.HIGH] / total == pytest.approx(0.25, abs=0.02)


def test_dwell_time_depends_on_regime() -> None:
    machine = RegimeStateMachine(RegimeParams(), np.random.default_rng(3))
    for _ in range(2_000):
        now = machine.expiry
        machine.refresh(now)
        dwell = machine.expiry - now
        if machine.regime is VolatilityRegime.HIGH:
            assert 20_000 <= dwell <= 50_000
        else:
            assert 45_000 <= dwell <= 120_000


def test_degenerate_weights_pin_the_regime() -> None:
    params = RegimeParams(weights={"low": 0.0, "mid": 0.0, "high": 1.0})
    machine = RegimeStateMachine(params, np.random.default_rng(0))
    for _ in range(20):
        machine.refresh(machine.expiry)
        assert machine.regime is VolatilityRegime.HIGH


def test_unknown_regime_keys_rejected() -> None:
    with pytest.raises(ValueError):
        RegimeParams(weights={"low": 0.5, "high": 0.5})
