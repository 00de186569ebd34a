"""Configuration models and loaders for mktsim."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator


class MetaParams(BaseModel):
    name: str = "base"
    description: str | None = None
    version: str | None = None


class EngineParams(BaseModel):
    """Loop cadence, starting point and bar bookkeeping."""

    tick_ms: float = Field(200.0, gt=0, description="Wall-clock interval between ticks")
    bar_ms: int = Field(1000, gt=0, description="Base OHLC bucket width")
    initial_price: float = Field(100.0, ge=1.0, description="Opening mid price")
    seed: Optional[int] = Field(None, ge=0, description="Root seed; None draws OS entropy")
    bar_history_limit: Optional[int] = Field(3600, ge=1, description="Closed bars retained; None keeps all")
    timeframes_ms: List[int] = Field(default_factory=lambda: [1000, 5000, 10000])


class RegimeParams(BaseModel):
    """Volatility regime weights, dwell times and multipliers."""

    weights: Dict[str, float] = Field(default_factory=lambda: {"low": 0.20, "mid": 0.55, "high": 0.25})
    multipliers: Dict[str, float] = Field(default_factory=lambda: {"low": 0.6, "mid": 1.0, "high": 1.8})
    high_dwell_ms: Tuple[float, float] = (20_000.0, 50_000.0)
    calm_dwell_ms: Tuple[float, float] = (45_000.0, 120_000.0)
    initial_regime: str = "mid"
    initial_dwell_ms: float = Field(60_000.0, gt=0)

    @model_validator(mode="after")
    def validate_keys(self) -> "RegimeParams":
        expected = {"low", "mid", "high"}
        if set(self.weights) != expected or set(self.multipliers) != expected:
            raise ValueError("Regime weights and multipliers must cover exactly low, mid and high")
        if self.initial_regime not in expected:
            raise ValueError(f"Unknown initial regime {self.initial_regime!r}")
        return self


class NewsParams(BaseModel):
    """News impulse spawning and decay."""

    spawn_probability: float = Field(0.035, ge=0, le=1)
    max_active: int = Field(1, ge=1, description="Spawn only while fewer impulses are active")
    sentiment_range: Tuple[float, float] = (-1.0, 1.0)
    impact_range: Tuple[float, float] = (0.6, 2.2)
    decay_ms_range: Tuple[float, float] = (20_000.0, 60_000.0)
    velocity_coefficient: float = Field(0.08, ge=0)
    bullish_headlines: List[str] = Field(
        default_factory=lambda: [
            "Macro bid wave hits futures",
            "Liquidity loosens after CPI beat",
            "Risk-on surge from mega caps",
        ]
    )
    bearish_headlines: List[str] = Field(
        default_factory=lambda: [
            "Risk-off shock on tape",
            "Macro dump on rate scare",
            "Liquidity dries as sell program hits",
        ]
    )


class KernelParams(BaseModel):
    """Coefficients of the momentum price process."""

    momentum: float = Field(0.88, ge=0, lt=1)
    liquidity_base: float = 1.4
    liquidity_vol_slope: float = 0.3
    liquidity_jitter: float = Field(0.1, ge=0)
    liquidity_floor: float = Field(0.4, gt=0)
    spread_base: float = Field(0.08, gt=0)
    spread_offset: float = Field(1.1, gt=0)
    spread_vol_slope: float = Field(0.6, ge=0)
    drift_range: float = Field(0.04, ge=0)
    drift_offset: float = 0.7
    drift_vol_slope: float = 0.4
    noise_range: float = Field(0.08, ge=0)
    price_floor: float = Field(1.0, gt=0)


class BookParams(BaseModel):
    """Synthetic ladder shape."""

    levels: int = Field(10, ge=1)
    step_base: float = Field(0.15, gt=0)
    step_vol_slope: float = Field(0.12, ge=0)
    depth_numerator: float = Field(80.0, gt=0)
    depth_vol_offset: float = Field(0.4, gt=0)
    size_jitter: Tuple[float, float] = (-20.0, 40.0)
    min_size: int = Field(5, ge=1)


class ExecutionParams(BaseModel):
    """Player order handling."""

    player_impact: bool = Field(True, description="Nudge price and velocity after player fills")
    velocity_kick: float = Field(0.08, ge=0)
    price_kick: float = Field(0.04, ge=0)
    trade_tape_limit: int = Field(50, ge=1)


class PresenceParams(BaseModel):
    """Synthetic online counters shown next to the tape."""

    wall_st_base: float = 900.0
    wall_st_swing: float = 120.0
    wall_st_period_ms: float = Field(120_000.0, gt=0)
    wall_st_floor: int = Field(200, ge=0)
    retail_base: float = 60.0
    retail_swing: float = 22.0
    retail_period_ms: float = Field(48_000.0, gt=0)
    retail_floor: int = Field(30, ge=0)


class Config(BaseModel):
    """Top-level configuration model."""

    meta: MetaParams = Field(default_factory=MetaParams)
    engine: EngineParams = Field(default_factory=EngineParams)
    regime: RegimeParams = Field(default_factory=RegimeParams)
    news: NewsParams = Field(default_factory=NewsParams)
    kernel: KernelParams = Field(default_factory=KernelParams)
    book: BookParams = Field(default_factory=BookParams)
    execution: ExecutionParams = Field(default_factory=ExecutionParams)
    presence: PresenceParams = Field(default_factory=PresenceParams)


def _deep_update(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in overrides.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_update(merged[key], value)
        else:
            merged[key] = value
    return merged


def default_config_dict() -> Dict[str, Any]:
    """Return the default configuration as a dictionary."""

    return Config().model_dump()


def load_config(path: str | Path | None = None, overrides: Optional[Dict[str, Any]] = None) -> Config:
    """Load configuration from YAML and merge with defaults."""

    base_dict = default_config_dict()
    if path is not None:
        with Path(path).open("r", encoding="utf-8") as handle:
            user_data = yaml.safe_load(handle) or {}
        if not isinstance(user_data, dict):
            raise ValueError(f"Config YAML {path} must map to an object")
        base_dict = _deep_update(base_dict, user_data)
    if overrides:
        base_dict = _deep_update(base_dict, overrides)
    return Config.model_validate(base_dict)


__all__ = [
    "Config",
    "MetaParams",
    "EngineParams",
    "RegimeParams",
    "NewsParams",
    "KernelParams",
    "BookParams",
    "ExecutionParams",
    "PresenceParams",
    "ValidationError",
    "load_config",
    "default_config_dict",
]
