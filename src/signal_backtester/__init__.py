"""Step-by-step strategy backtester with strict no look-ahead replay."""

from signal_backtester.config.settings import BacktestConfig, configure_logging
from signal_backtester.core.engine import Backtest
from signal_backtester.core.errors import BacktestError, ConfigurationError, ExecutionError, StrategyExecutionError
from signal_backtester.core.models import Action, Fill, Position, Signal, Status, StepContext, Trade
from signal_backtester.data.array_loader import ArrayLoader
from signal_backtester.data.interfaces import DataLoader
from signal_backtester.data.series import TimeSeries
from signal_backtester.execution.simulated_broker import SimulatedBroker
from signal_backtester.strategy.adapters import CallableStrategy, NullStrategy, ScriptedStrategy
from signal_backtester.strategy.interfaces import Strategy

__all__ = [
    "Action",
    "ArrayLoader",
    "Backtest",
    "BacktestConfig",
    "BacktestError",
    "CallableStrategy",
    "ConfigurationError",
    "DataLoader",
    "ExecutionError",
    "Fill",
    "NullStrategy",
    "Position",
    "ScriptedStrategy",
    "Signal",
    "SimulatedBroker",
    "Status",
    "StepContext",
    "Strategy",
    "StrategyExecutionError",
    "TimeSeries",
    "Trade",
    "configure_logging",
]
