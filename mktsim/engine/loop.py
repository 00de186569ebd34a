"""Engine loop owning market state and emitting the event stream."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

import pandas as pd
from numpy.random import Generator

from mktsim.config import Config
from mktsim.engine.broadcast import Broadcaster
from mktsim.engine.events import BarEvent, EngineEvent, MarketTickEvent, NewsEvent, SnapshotEvent
from mktsim.engine.kernel import PriceKernel
from mktsim.engine.news import NewsModel
from mktsim.engine.presence import online_counts
from mktsim.engine.regime import RegimeStateMachine
from mktsim.engine.state import MarketState
from mktsim.market.bars import BarAggregator, bars_to_frame
from mktsim.market.execution import TradeFill, apply_trade_impact, estimate_slippage, fill_price, side_direction
from mktsim.market.orderbook import synthesize_order_book
from mktsim.utils.rng import RNGManager
from mktsim.utils.validation import validate_config

logger = logging.getLogger(__name__)


def wall_clock_ms() -> float:
    return time.time() * 1000.0


@dataclass
class SessionResults:
    ticks: pd.DataFrame
    bars: pd.DataFrame


class MarketEngine:
    """Synthetic market driven on a fixed cadence.

    One engine owns one :class:`MarketState`. ``step`` advances it by a single
    tick and publishes the resulting events; ``start`` runs ``step`` on a
    background thread every ``engine.tick_ms`` until ``terminate``.
    """

    def __init__(
        self,
        config: Config | None = None,
        clock: Callable[[], float] | None = None,
        rng: RNGManager | None = None,
    ) -> None:
        self.config = config or Config()
        validate_config(self.config)
        self.clock = clock or wall_clock_ms
        self.rng = rng or RNGManager(self.config.engine.seed)
        cfg = self.config
        now = self.clock()
        self._origin = now
        self.state = MarketState(
            price=cfg.engine.initial_price,
            regime_machine=RegimeStateMachine(cfg.regime, self.rng.generator("regime"), now=now),
            news_model=NewsModel(cfg.news, self.rng.generator("news")),
            aggregator=BarAggregator(cfg.engine.bar_ms, cfg.engine.bar_history_limit),
            trade_tape=deque(maxlen=cfg.execution.trade_tape_limit),
        )
        self.state.aggregator.update(now, self.state.price)
        self.kernel = PriceKernel(cfg.kernel, self.rng.generator("kernel"))
        self._book_rng = self.rng.generator("book")
        self._presence_rng = self.rng.generator("presence")
        self._opening_rng = self.rng.generator("opening")
        self._broadcaster: Broadcaster[EngineEvent] = Broadcaster()
        self._lock = threading.RLock()
        # held for a whole emission; taken before _lock, never after
        self._emit_lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_tick: Optional[MarketTickEvent] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    @property
    def last_tick(self) -> Optional[MarketTickEvent]:
        return self._last_tick

    @property
    def trade_tape(self) -> List[TradeFill]:
        with self._lock:
            return list(self.state.trade_tape)

    def subscribe(self, callback: Callable[[EngineEvent], None]) -> Callable[[], None]:
        """Register ``callback`` for every event; returns an unsubscribe function.

        While the engine is running the new subscriber immediately receives a
        snapshot of the current state. Snapshot and registration wait for any
        in-flight emission, so the subscriber never sees an event that the
        snapshot already contains.
        """

        with self._emit_lock:
            snap = self.snapshot() if self.running else None
            unsubscribe = self._broadcaster.subscribe(callback)
            if snap is not None:
                try:
                    callback(snap)
                except Exception:
                    logger.exception("Subscriber %r failed on snapshot", callback)
        return unsubscribe

    def step(self, now: float | None = None) -> MarketTickEvent:
        """Advance the market by one tick and publish its events."""

        with self._emit_lock:
            events = self._advance(now)
            self._broadcaster.publish_many(events)
        return events[-1]

    def _advance(self, now: float | None) -> List[EngineEvent]:
        cfg = self.config
        events: List[EngineEvent] = []
        with self._lock:
            now = self.clock() if now is None else now
            st = self.state
            st.regime_machine.refresh(now)
            spawned = st.news_model.maybe_spawn(now)
            if spawned is not None:
                events.append(NewsEvent(impulse=spawned))
            vol = st.vol_multiplier
            news = st.news_model.contribution(now)
            result = self.kernel.step(st.price, st.velocity, vol, news, cfg.news.velocity_coefficient)
            st.price = result.price
            st.velocity = result.velocity
            st.spread = result.spread
            st.liquidity = result.liquidity
            st.t = now
            st.tick_count += 1
            closed = st.aggregator.update(now, st.price)
            if closed is not None:
                events.append(BarEvent(bar=closed))
            tick = self._tick_event(now, vol, self._book_rng, self._presence_rng)
            self._last_tick = tick
        events.append(tick)
        return events

    def _tick_event(self, now: float, vol: float, book_rng: Generator, presence_rng: Generator) -> MarketTickEvent:
        st = self.state
        return MarketTickEvent(
            t=now,
            price=st.price,
            velocity=st.velocity,
            regime=st.regime,
            spread=st.spread,
            liquidity=st.liquidity,
            order_book=synthesize_order_book(st.price, st.spread, vol, book_rng, self.config.book),
            bar=st.current_bar,
            online=online_counts(now, presence_rng, self.config.presence),
            news=st.news_model.current,
        )

    def snapshot(self) -> SnapshotEvent:
        """Current state plus the archived bars.

        Before the first tick the book is built with a neutral multiplier of
        1.0 around the opening spread and liquidity, drawing from its own
        stream so the tick series does not depend on when snapshots are taken.
        """

        with self._lock:
            tick = self._last_tick
            if tick is None:
                tick = self._tick_event(self.clock(), 1.0, self._opening_rng, self._opening_rng)
            return SnapshotEvent(tick=tick, bars=self.state.aggregator.bars())

    def start(self) -> None:
        """Publish a snapshot and begin ticking on a background thread."""

        if self.running:
            logger.warning("Market engine already running")
            return
        self._stop.clear()
        with self._emit_lock:
            self._broadcaster.publish(self.snapshot())
        self._thread = threading.Thread(target=self._run_loop, name="mktsim-engine", daemon=True)
        self._thread.start()
        logger.info("Market engine started (tick %.0f ms)", self.config.engine.tick_ms)

    def terminate(self, timeout: float = 5.0) -> None:
        """Stop the timer and release every subscription."""

        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._thread = None
        self._broadcaster.clear()
        logger.info("Market engine terminated after %d ticks", self.state.tick_count)

    def _run_loop(self) -> None:
        interval = self.config.engine.tick_ms / 1000.0
        deadline = time.monotonic() + interval
        while not self._stop.wait(max(0.0, deadline - time.monotonic())):
            try:
                self.step()
            except Exception:
                logger.exception("Tick failed")
            deadline += interval
            # fell behind: skip missed ticks rather than bursting
            if deadline < time.monotonic():
                deadline = time.monotonic() + interval

    def submit_order(self, side: str, size: float, now: float | None = None) -> TradeFill:
        """Price a player market order against the current state.

        With ``execution.player_impact`` enabled the fill also nudges price and
        velocity in the trade direction.
        """

        side_direction(side)
        if size <= 0:
            raise ValueError(f"size must be positive, received {size}")
        cfg = self.config
        with self._lock:
            st = self.state
            now = self.clock() if now is None else now
            vol = st.vol_multiplier
            fill = TradeFill(
                t=now,
                side=side,
                size=size,
                price=fill_price(st.price, st.spread, size, st.liquidity, vol, side),
                slippage=estimate_slippage(size, st.liquidity, vol),
            )
            st.record_trade(fill)
            if cfg.execution.player_impact:
                st.price, st.velocity = apply_trade_impact(
                    st.price, st.velocity, side, size, cfg.execution, cfg.kernel.price_floor
                )
        logger.debug("Filled %s %.0f at %.4f", side, size, fill.price)
        return fill

    def apply_external_delta(self, delta: Mapping[str, Any]) -> None:
        """Accept a server reconciliation message; the local simulation ignores it."""

        logger.debug("Ignoring external delta with keys %s", sorted(delta))

    def simulate(self, ticks: int) -> SessionResults:
        """Run ``ticks`` steps in virtual time, one ``tick_ms`` apart.

        Time continues from the last tick (or from construction time), so the
        same seed and clock always reproduce the same session.
        """

        if ticks <= 0:
            raise ValueError("ticks must be positive")
        interval = self.config.engine.tick_ms
        start = self.state.t if self.state.t is not None else self._origin
        records: List[Dict[str, Any]] = []
        for i in range(1, ticks + 1):
            tick = self.step(start + i * interval)
            book = tick.order_book
            records.append(
                {
                    "t": tick.t,
                    "price": tick.price,
                    "velocity": tick.velocity,
                    "regime": tick.regime.value,
                    "spread": tick.spread,
                    "liquidity": tick.liquidity,
                    "best_bid": book.best_bid,
                    "best_ask": book.best_ask,
                    "bid_depth": book.total_bid_size,
                    "ask_depth": book.total_ask_size,
                    "wall_st": tick.online.wall_st,
                    "retail": tick.online.retail,
                    "news_id": tick.news.id if tick.news is not None else None,
                }
            )
        bars = bars_to_frame(self.state.aggregator.bars(include_open=True))
        return SessionResults(ticks=pd.DataFrame(records), bars=bars)


__all__ = ["MarketEngine", "SessionResults", "wall_clock_ms"]
