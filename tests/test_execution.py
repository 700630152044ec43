from __future__ import annotations

import pytest

from signal_backtester.config.settings import BacktestConfig
from signal_backtester.core.engine import Backtest
from signal_backtester.core.models import Action, Position, Trade
from signal_backtester.data.series import TimeSeries
from signal_backtester.execution.simulated_broker import SimulatedBroker, trade_side
from signal_backtester.strategy.adapters import ScriptedStrategy


def test_fill_uses_first_unseen_observation() -> None:
    series = TimeSeries([100.0, 101.0, 102.0])
    broker = SimulatedBroker()

    fill = broker.execute(Trade(Action.LONG, 1), series, Position.FLAT)

    assert fill.price == pytest.approx(101.0)
    assert fill.cost == 0.0
    assert fill.slippage == 0.0


@pytest.mark.parametrize(
    "order, position, side, expected",
    [
        (Action.LONG, Position.FLAT, "buy", 100.1),
        (Action.SHORT, Position.FLAT, "sell", 99.9),
        (Action.SELL, Position.LONG, "sell", 99.9),
        (Action.SELL, Position.SHORT, "buy", 100.1),
    ],
)
def test_slippage_is_adverse(order: Action, position: Position, side: str, expected: float) -> None:
    series = TimeSeries([100.0])
    broker = SimulatedBroker(slippage_bps=10.0, commission_per_fill=1.5)

    fill = broker.execute(Trade(order, 0), series, position)

    assert trade_side(Trade(order, 0), position) == side
    assert fill.price == pytest.approx(expected)
    assert fill.slippage == pytest.approx(0.1)
    assert fill.cost == pytest.approx(1.5)


def test_broker_rejects_out_of_range_step() -> None:
    with pytest.raises(ValueError):
        SimulatedBroker().execute(Trade(Action.LONG, 3), TimeSeries([1.0, 2.0]), Position.FLAT)


def test_broker_rejects_negative_parameters() -> None:
    with pytest.raises(ValueError):
        SimulatedBroker(slippage_bps=-1.0)
    with pytest.raises(ValueError):
        SimulatedBroker(commission_per_fill=-0.5)


@pytest.mark.parametrize("kwargs", [{"slippage_bps": float("nan")}, {"commission_per_fill": float("inf")}])
def test_broker_rejects_non_finite_parameters(kwargs: dict) -> None:
    with pytest.raises(ValueError, match="finitos"):
        SimulatedBroker(**kwargs)


def test_engine_records_one_fill_per_trade() -> None:
    strategy = ScriptedStrategy(entries={1: "long"}, exits={3: "sell"})
    config = BacktestConfig(slippage_bps=0.0, commission_per_fill=0.25)

    status = Backtest.from_config(strategy, [10.0, 11.0, 12.0, 14.0], config).run()

    assert [f.trade for f in status.fills] == list(status.trades)
    assert [f.price for f in status.fills] == [pytest.approx(11.0), pytest.approx(14.0)]
    assert all(f.cost == pytest.approx(0.25) for f in status.fills)


def test_no_broker_means_no_fills() -> None:
    status = Backtest(ScriptedStrategy(entries={0: "long"}), [1.0, 2.0]).run()

    assert len(status.trades) == 1
    assert status.fills == ()
