"""Input/output helpers for mktsim."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import yaml

from mktsim.config import Config


def ensure_directory(path: Path) -> None:
    """Create directory if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)


def timestamped_dir(base: Path, prefix: str) -> Path:
    """Return a directory path suffixed with the current timestamp."""

    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    path = base / prefix / stamp
    ensure_directory(path)
    return path


def save_table(df: pd.DataFrame, out_dir: Path, name: str) -> None:
    """Persist a dataframe as CSV and Parquet."""

    ensure_directory(out_dir)
    df.to_csv(out_dir / f"{name}.csv", index=False)
    df.to_parquet(out_dir / f"{name}.parquet", index=False)


def write_config_snapshot(config: Config, out_dir: Path, filename: str = "config_snapshot.yaml") -> None:
    """Persist configuration as YAML for reproducibility."""

    ensure_directory(out_dir)
    with (out_dir / filename).open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config.model_dump(mode="json"), handle, sort_keys=False)


__all__ = ["ensure_directory", "timestamped_dir", "save_table", "write_config_snapshot"]
