from __future__ import annotations

from importlib.metadata import EntryPoint, EntryPoints

import pytest

from signal_backtester import registries

from signal_backtester.core.engine import Backtest
from signal_backtester.execution.simulated_broker import SimulatedBroker
from signal_backtester.registries import Registry, broker_registry, load_plugin_entrypoints, strategy_registry
from signal_backtester.strategy.adapters import NullStrategy, ScriptedStrategy


def test_builtin_factories_are_registered() -> None:
    assert {"null", "scripted", "callable"} <= set(strategy_registry.names())
    assert isinstance(strategy_registry.create("NULL"), NullStrategy)
    assert isinstance(broker_registry.create("simulated", slippage_bps=1.0), SimulatedBroker)


def test_registered_strategy_runs_in_engine() -> None:
    strategy = strategy_registry.create("scripted", signals={0: "long"})
    status = Backtest(strategy, [1.0, 2.0]).run()

    assert isinstance(strategy, ScriptedStrategy)
    assert len(status.signals) == 1


def test_register_decorator_and_unknown_name() -> None:
    registry: Registry[object] = Registry("estrategia")

    @registry.register()
    class MyStrategy(NullStrategy):
        pass

    assert list(registry.names()) == ["mystrategy"]
    assert registry.get("MyStrategy") is MyStrategy
    with pytest.raises(KeyError, match="mystrategy"):
        registry.get("other")


def test_load_entrypoints_with_empty_group() -> None:
    registry: Registry[object] = Registry("broker")
    registry.load_entrypoints("signal_backtester.tests.no_such_group")

    assert list(registry.names()) == []


def test_duplicate_name_is_rejected_unless_replaced() -> None:
    registry: Registry[object] = Registry("broker")
    registry.add("paper", SimulatedBroker)
    registry.add("PAPER", SimulatedBroker)

    with pytest.raises(ValueError, match="paper"):
        registry.add("paper", NullStrategy)

    registry.add("paper", NullStrategy, replace=True)
    assert "Paper" in registry
    assert 42 not in registry
    assert len(registry) == 1
    assert registry.get("paper") is NullStrategy


def test_plugins_are_loaded_from_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    plugins = EntryPoints(
        [
            EntryPoint("paper", "signal_backtester.execution.simulated_broker:SimulatedBroker", "signal_backtester.brokers"),
            EntryPoint("simulated", "signal_backtester.strategy.adapters:NullStrategy", "signal_backtester.brokers"),
        ]
    )
    monkeypatch.setattr(registries, "entry_points", lambda: plugins)
    monkeypatch.setattr(broker_registry, "_factories", dict(broker_registry._factories))
    monkeypatch.setattr(strategy_registry, "_factories", dict(strategy_registry._factories))

    loaded = load_plugin_entrypoints()

    assert loaded == {"strategies": 0, "brokers": 1}
    assert broker_registry.get("paper") is SimulatedBroker
    assert broker_registry.get("simulated") is SimulatedBroker
    assert {"null", "scripted", "callable"} <= set(strategy_registry.names())
