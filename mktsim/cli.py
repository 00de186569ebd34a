"""Command line interface for mktsim."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from mktsim.analysis import price_distribution, regime_occupancy
from mktsim.config import Config, load_config
from mktsim.engine.events import EngineEvent
from mktsim.engine.loop import MarketEngine
from mktsim.market.bars import resample_frame
from mktsim.market.execution import estimate_slippage, fill_price
from mktsim.utils.io import save_table, timestamped_dir, write_config_snapshot
from mktsim.utils.logging import get_logger, setup_logging
from mktsim.utils.validation import validate_config

app = typer.Typer(help="Synthetic market engine CLI")
console = Console()


def _logging(level: str) -> None:
    try:
        setup_logging(level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


def _load(config: Optional[Path], seed: Optional[int] = None) -> Config:
    cfg = load_config(config)
    if seed is not None:
        cfg = cfg.model_copy(update={"engine": cfg.engine.model_copy(update={"seed": seed})})
    validate_config(cfg)
    return cfg


@app.command()
def simulate(
    config: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Configuration YAML"),
    ticks: int = typer.Option(3000, min=1, help="Number of ticks to simulate"),
    seed: Optional[int] = typer.Option(None, min=0, help="Override engine.seed"),
    timeframe: Optional[int] = typer.Option(
        None, min=1, help="Bar width (ms) for the printed table; defaults to engine.timeframes_ms"
    ),
    rows: int = typer.Option(10, min=1, help="Bars to print"),
    out: Optional[Path] = typer.Option(None, help="Directory for tick/bar tables"),
    log_level: str = typer.Option("WARNING", help="Logging level"),
) -> None:
    """Run a session in virtual time and summarise it."""

    _logging(log_level)
    cfg = _load(config, seed)
    if timeframe is not None and timeframe % cfg.engine.bar_ms != 0:
        raise typer.BadParameter(f"timeframe must be a multiple of {cfg.engine.bar_ms} ms")
    timeframes = [timeframe] if timeframe is not None else cfg.engine.timeframes_ms
    engine = MarketEngine(cfg, clock=lambda: 0.0)
    result = engine.simulate(ticks)

    summary = price_distribution(result.ticks)
    occupancy = regime_occupancy(result.ticks)
    table = Table(title=f"Session {cfg.meta.name} ({ticks} ticks)")
    table.add_column("metric")
    table.add_column("value", justify="right")
    for key, value in summary.items():
        table.add_row(str(key), f"{value:,.4f}")
    for regime, share in occupancy.items():
        table.add_row(f"regime_{regime}", f"{share:.1%}")
    console.print(table)

    for width in timeframes:
        bars = resample_frame(result.bars, width)
        bar_table = Table(title=f"Last {rows} bars @ {width} ms")
        for column in bars.columns:
            bar_table.add_column(column, justify="right")
        for row in bars.tail(rows).itertuples(index=False):
            bar_table.add_row(f"{row.t:.0f}", f"{row.o:.2f}", f"{row.h:.2f}", f"{row.l:.2f}", f"{row.c:.2f}")
        console.print(bar_table)

    if out is not None:
        out_dir = timestamped_dir(out, cfg.meta.name)
        save_table(result.ticks, out_dir, "ticks")
        save_table(result.bars, out_dir, "bars")
        write_config_snapshot(cfg, out_dir)
        console.print(f"Saved tables to {out_dir}")


@app.command()
def stream(
    config: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Configuration YAML"),
    seconds: float = typer.Option(5.0, min=0.1, help="How long to run"),
    seed: Optional[int] = typer.Option(None, min=0, help="Override engine.seed"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Run the engine in real time and print its event stream."""

    _logging(log_level)
    logger = get_logger("mktsim.cli")
    engine = MarketEngine(_load(config, seed))

    def show(event: EngineEvent) -> None:
        if event.type == "tick":
            console.print(
                f"[dim]{event.t:.0f}[/dim] {event.price:10.4f} "
                f"spread {event.spread:.4f} liq {event.liquidity:.2f} [{event.regime.value}]"
            )
        elif event.type == "bar":
            bar = event.bar
            console.print(f"[bold]bar[/bold] o={bar.o:.2f} h={bar.h:.2f} l={bar.l:.2f} c={bar.c:.2f}")
        elif event.type == "news":
            console.print(f"[bold magenta]NEWS[/bold magenta] {event.impulse.headline} ({event.impulse.sentiment:+.2f})")
        elif event.type == "snapshot":
            console.print(f"[bold cyan]snapshot[/bold cyan] price {event.tick.price:.4f}, {len(event.bars)} bars")

    engine.subscribe(show)
    engine.start()
    try:
        time.sleep(seconds)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        engine.terminate()


@app.command()
def quote(
    mid: float = typer.Option(..., help="Mid price"),
    spread: float = typer.Option(..., min=0.0, help="Current spread"),
    size: float = typer.Option(..., min=0.0, help="Order size"),
    liquidity: float = typer.Option(1.0, help="Liquidity score"),
    volatility: float = typer.Option(1.0, help="Volatility multiplier"),
    side: str = typer.Option("buy", help="buy or sell"),
) -> None:
    """Price a market order with the slippage model."""

    try:
        price = fill_price(mid, spread, size, liquidity, volatility, side)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    slippage = estimate_slippage(size, liquidity, volatility)
    console.print(f"{side} {size:g} @ [bold]{price:.4f}[/bold] (slippage {slippage:.4f})")


@app.command()
def validate(config: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Validate configuration without running the engine."""

    cfg = load_config(config)
    validate_config(cfg)
    console.print("Configuration validated successfully")


if __name__ == "__main__":
    app()
