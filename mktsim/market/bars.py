"""OHLC bar aggregation and timeframe resampling."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, replace
from typing import Deque, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

BAR_COLUMNS = ["t", "o", "h", "l", "c"]


@dataclass(frozen=True)
class Bar:
    """OHLC bar keyed by the start of its time bucket (ms)."""

    t: float
    o: float
    h: float
    l: float
    c: float

    def update(self, price: float) -> "Bar":
        return replace(self, h=max(self.h, price), l=min(self.l, price), c=price)


def bucket_start(t: float, width_ms: float) -> float:
    """Return the start of the ``width_ms`` bucket containing ``t``."""

    return math.floor(t / width_ms) * width_ms


class BarAggregator:
    """Bucket a tick stream into fixed-width bars.

    The open bar is replaced (never mutated) on every tick, so any bar handed
    out earlier stays valid as an immutable snapshot.
    """

    def __init__(self, width_ms: int = 1000, history_limit: Optional[int] = None) -> None:
        if width_ms <= 0:
            raise ValueError("Bar width must be positive")
        self.width_ms = width_ms
        self.current: Optional[Bar] = None
        self.history: Deque[Bar] = deque(maxlen=history_limit)

    def update(self, t: float, price: float) -> Optional[Bar]:
        """Fold a tick into the open bar; return the bar closed by it, if any."""

        bucket = bucket_start(t, self.width_ms)
        if self.current is None:
            self.current = Bar(t=bucket, o=price, h=price, l=price, c=price)
            return None
        if bucket > self.current.t:
            closed = self.current
            self.history.append(closed)
            self.current = Bar(t=bucket, o=price, h=price, l=price, c=price)
            return closed
        self.current = self.current.update(price)
        return None

    def bars(self, include_open: bool = False) -> Tuple[Bar, ...]:
        out = tuple(self.history)
        if include_open and self.current is not None:
            out = out + (self.current,)
        return out


def resample_bars(bars: Iterable[Bar], width_ms: int, base_ms: Optional[int] = None) -> List[Bar]:
    """Re-bucket a bar series into coarser ``width_ms`` bars.

    Open comes from the first bar of each bucket, close from the last, high and
    low from the extremes. Resampling an already resampled series at the same
    width returns it unchanged.

    Raises:
        ValueError: If ``width_ms`` is not positive or not a multiple of
            ``base_ms`` when one is given.
    """

    if width_ms <= 0:
        raise ValueError(f"width_ms must be positive, received {width_ms}")
    if base_ms is not None and (base_ms <= 0 or width_ms % base_ms != 0):
        raise ValueError(f"width_ms {width_ms} must be a multiple of the base width {base_ms}")
    out: List[Bar] = []
    current: Optional[Bar] = None
    for bar in sorted(bars, key=lambda b: b.t):
        bucket = bucket_start(bar.t, width_ms)
        if current is None or bucket != current.t:
            if current is not None:
                out.append(current)
            current = Bar(t=bucket, o=bar.o, h=bar.h, l=bar.l, c=bar.c)
        else:
            current = replace(current, h=max(current.h, bar.h), l=min(current.l, bar.l), c=bar.c)
    if current is not None:
        out.append(current)
    return out


def bars_to_frame(bars: Sequence[Bar]) -> pd.DataFrame:
    """Return bars as a DataFrame with columns ``t, o, h, l, c``."""

    return pd.DataFrame([(b.t, b.o, b.h, b.l, b.c) for b in bars], columns=BAR_COLUMNS)


def resample_frame(frame: pd.DataFrame, width_ms: int) -> pd.DataFrame:
    """DataFrame counterpart of :func:`resample_bars`."""

    if width_ms <= 0:
        raise ValueError(f"width_ms must be positive, received {width_ms}")
    if frame.empty:
        return pd.DataFrame(columns=BAR_COLUMNS)
    ordered = frame.sort_values("t", kind="stable").copy()
    ordered["bucket"] = (ordered["t"] // width_ms) * width_ms
    out = (
        ordered.groupby("bucket", as_index=False, sort=True)
        .agg(o=("o", "first"), h=("h", "max"), l=("l", "min"), c=("c", "last"))
        .rename(columns={"bucket": "t"})
    )
    return out[BAR_COLUMNS].reset_index(drop=True)


__all__ = [
    "Bar",
    "BarAggregator",
    "bucket_start",
    "resample_bars",
    "bars_to_frame",
    "resample_frame",
    "BAR_COLUMNS",
]
