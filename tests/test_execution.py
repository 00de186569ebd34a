import pytest

from mktsim.config import ExecutionParams
from mktsim.market.execution import apply_trade_impact, estimate_slippage, fill_price, side_direction


def test_buy_fill_reference_case() -> None:
    """Half spread plus 0.5 * 1 * 1.4 of slippage above mid."""
    assert estimate_slippage(500, liquidity=1.0, volatility=1.0) == pytest.approx(0.7)
    price = fill_price(mid=100.0, spread=0.2, size=500, liquidity=1.0, volatility=1.0, side="buy")
    assert price == pytest.approx(100.8)


def test_sell_fill_mirrors_buy() -> None:
    price = fill_price(mid=100.0, spread=0.2, size=500, liquidity=1.0, volatility=1.0, side="sell")
    assert price == pytest.approx(99.2)


def test_slippage_floor_for_tiny_orders() -> None:
    assert estimate_slippage(0.0, liquidity=1.4, volatility=0.6) == pytest.approx(0.01)
    assert estimate_slippage(1.0, liquidity=1.4, volatility=0.6) == pytest.approx(0.01)
    assert fill_price(50.0, 0.1, 1.0, 1.4, 0.6, "buy") == pytest.approx(50.06)


def test_liquidity_is_floored_at_point_two() -> None:
    thin = estimate_slippage(1000, liquidity=0.05, volatility=0.6)
    floor = estimate_slippage(1000, liquidity=0.2, volatility=0.6)
    assert thin == pytest.approx(floor)
    assert floor == pytest.approx(5.0)


def test_each_driver_widens_the_fill() -> None:
    base = fill_price(100.0, 0.2, 500, 1.0, 1.0, "buy")
    assert fill_price(100.0, 0.2, 1500, 1.0, 1.0, "buy") > base
    assert fill_price(100.0, 0.2, 500, 0.5, 1.0, "buy") > base
    assert fill_price(100.0, 0.2, 500, 1.0, 1.8, "buy") > base


def test_invalid_inputs_raise() -> None:
    with pytest.raises(ValueError):
        side_direction("hold")
    with pytest.raises(ValueError):
        fill_price(100.0, 0.2, 10, 1.0, 1.0, "BUY")
    with pytest.raises(ValueError):
        estimate_slippage(-1, 1.0, 1.0)


def test_trade_impact_pushes_in_trade_direction() -> None:
    params = ExecutionParams()
    price, velocity = apply_trade_impact(100.0, 0.0, "buy", 800, params)
    assert price == pytest.approx(100.04)
    assert velocity == pytest.approx(0.064)
    price, velocity = apply_trade_impact(100.0, 0.0, "sell", 10_000, params)
    assert price == pytest.approx(100.0 - 1.8 * 0.04)
    assert velocity == pytest.approx(-1.5 * 0.08)
    price, _ = apply_trade_impact(1.01, 0.0, "sell", 10_000, params)
    assert price == 1.0
