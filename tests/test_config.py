from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from mktsim.config import Config, load_config
from mktsim.utils.validation import validate_config

CONFIG_DIR = Path(__file__).resolve().parent.parent / "configs"


@pytest.mark.parametrize("name", ["base", "calm", "turbulent"])
def test_shipped_scenarios_validate(name: str) -> None:
    cfg = load_config(CONFIG_DIR / f"{name}.yaml")
    validate_config(cfg)
    assert cfg.meta.name == name


def test_defaults_match_reference_model() -> None:
    cfg = Config()
    assert cfg.engine.tick_ms == 200
    assert cfg.engine.bar_ms == 1000
    assert cfg.regime.weights == {"low": 0.20, "mid": 0.55, "high": 0.25}
    assert cfg.regime.multipliers == {"low": 0.6, "mid": 1.0, "high": 1.8}
    assert cfg.news.spawn_probability == 0.035
    assert cfg.news.max_active == 1
    assert cfg.kernel.momentum == 0.88
    assert cfg.book.levels == 10


def test_partial_yaml_merges_over_defaults(tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text(yaml.safe_dump({"news": {"max_active": 2}, "engine": {"seed": 3}}), encoding="utf-8")
    cfg = load_config(path, overrides={"engine": {"tick_ms": 50}})
    assert cfg.news.max_active == 2
    assert cfg.news.spawn_probability == 0.035
    assert cfg.engine.seed == 3
    assert cfg.engine.tick_ms == 50
    assert cfg.engine.bar_ms == 1000


def test_non_mapping_yaml_rejected(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"engine": {"tick_ms": 0}},
        {"engine": {"bar_ms": -1000}},
        {"news": {"spawn_probability": 1.5}},
        {"kernel": {"momentum": 1.0}},
        {"regime": {"initial_regime": "extreme"}},
    ],
)
def test_field_constraints(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        load_config(overrides=overrides)


@pytest.mark.parametrize(
    "overrides",
    [
        {"regime": {"weights": {"low": 0.5, "mid": 0.5, "high": 0.5}}},
        {"regime": {"high_dwell_ms": [50_000, 20_000]}},
        {"news": {"decay_ms_range": [0, 10_000]}},
        {"news": {"sentiment_range": [-2.0, 1.0]}},
        {"news": {"bearish_headlines": []}},
        {"engine": {"timeframes_ms": [1000, 2500]}},
        {"engine": {"initial_price": 1.0}, "kernel": {"price_floor": 2.0}},
    ],
)
def test_cross_field_checks(overrides: dict) -> None:
    cfg = load_config(overrides=overrides)
    with pytest.raises(ValueError):
        validate_config(cfg)
