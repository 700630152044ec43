from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np

from signal_backtester.config.settings import BacktestConfig, build_broker
from signal_backtester.core.errors import ConfigurationError, ExecutionError, StrategyExecutionError
from signal_backtester.core.models import ALLOWED_ACTIONS, Action, Signal, Status, StatusRecorder, Trade
from signal_backtester.core.timeline import Timeline
from signal_backtester.data.array_loader import as_time_series
from signal_backtester.data.series import TimeSeries
from signal_backtester.execution.interfaces import Broker
from signal_backtester.strategy.interfaces import OPERATIONS, Strategy, missing_operations
from signal_backtester.utils.timing import timed_step

logger = logging.getLogger(__name__)


@dataclass
class Backtest:
    """Deterministic step-by-step replay of a strategy over a series.

    Attributes
    ----------
    strategy: Strategy
        Object exposing ``signaler``, ``entryer``, ``exiter`` and ``stopper``.
        Held by reference; a stateful strategy must not be shared by
        concurrent runs.
    series: Any
        :class:`TimeSeries`, :class:`DataLoader`, numpy array, ``pd.Series``
        or numeric sequence. Loaders are resolved at each :meth:`run`.
    broker: Broker | None
        When given, every recorded trade is executed and its fill stored.
    config: BacktestConfig
        Run settings (``strict_positions``).
    cancel: Any
        Callable returning ``bool`` or object with ``is_set()`` (e.g.
        ``threading.Event``), checked once before every step.

    Every call to :meth:`run` starts from a fresh status and calls
    ``strategy.reset()``, so repeated runs never append to an older log.
    """

    strategy: Strategy
    series: Any
    broker: Broker | None = None
    config: BacktestConfig = field(default_factory=BacktestConfig)
    cancel: Any = None
    status: Status | None = field(default=None, init=False)
    timings: Dict[str, float] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        if self.strategy is None:
            raise ConfigurationError("Backtest requiere una estrategia")
        missing = missing_operations(self.strategy)
        if missing:
            raise ConfigurationError(
                f"{type(self.strategy).__name__} no implementa el contrato de estrategia: falta {', '.join(missing)}"
            )
        if self.series is None:
            raise ConfigurationError("Backtest requiere una serie de observaciones")
        if self.config is None:
            self.config = BacktestConfig()
        if self.cancel is not None and not (callable(self.cancel) or hasattr(self.cancel, "is_set")):
            raise ConfigurationError("cancel debe ser invocable o exponer is_set()")

    @classmethod
    def from_config(cls, strategy: Strategy, series: Any, config: BacktestConfig, cancel: Any = None) -> "Backtest":
        """Backtest with a :class:`SimulatedBroker` built from ``config``."""

        return cls(strategy=strategy, series=series, broker=build_broker(config), config=config, cancel=cancel)

    def run(self) -> Status:
        """Run the whole series and return the resulting :class:`Status`.

        Raises
        ------
        StrategyExecutionError
            If a strategy operation raises or returns a token outside its
            contract. The failing step is rolled back and the error carries
            the completed steps as ``partial_status``.
        ExecutionError
            If the broker fails to fill a trade. Handled like a strategy
            failure: the step is rolled back and ``partial_status`` is set.
        """

        self.status = None
        series = as_time_series(self.series)
        recorder = StatusRecorder()
        timings: Dict[str, float] = {}
        cancelled = False

        reset = getattr(self.strategy, "reset", None)
        if callable(reset):
            reset()
        if self.broker is not None:
            self.broker.reset()

        logger.info("Backtest iniciado: %s sobre %d observaciones", type(self.strategy).__name__, len(series))

        with timed_step(timings, "run"):
            for step, prefix in Timeline(series).iter_prefixes():
                if self._cancel_requested():
                    cancelled = True
                    logger.warning("Backtest cancelado en el paso %d; se devuelve el estado parcial", step)
                    break

                checkpoint = recorder.checkpoint()
                try:
                    self._run_step(step, prefix, series, recorder, timings)
                except (StrategyExecutionError, ExecutionError) as exc:
                    recorder.rollback(checkpoint)
                    exc.partial_status = recorder.snapshot()
                    self.timings = timings
                    logger.error("Backtest abortado: %s", exc)
                    raise

        status = recorder.snapshot(cancelled=cancelled)
        self.status = status
        self.timings = timings
        logger.info(
            "Backtest finalizado: %d pasos, %d señales, %d trades en %.3fs",
            status.step,
            len(status.signals),
            len(status.trades),
            timings["run"],
        )
        return status

    def _cancel_requested(self) -> bool:
        if self.cancel is None:
            return False
        if hasattr(self.cancel, "is_set"):
            return bool(self.cancel.is_set())
        return bool(self.cancel())

    def _run_step(
        self,
        step: int,
        prefix: np.ndarray,
        series: TimeSeries,
        recorder: StatusRecorder,
        timings: Dict[str, float],
    ) -> None:
        for operation in OPERATIONS:
            action = self._call(operation, step, prefix, recorder, timings)
            if action is Action.NONE:
                continue

            if operation == "signaler":
                recorder.append_signal(Signal(action=action, step=step))
                logger.debug("paso %d: señal %s", step, action.value)
                continue

            position = recorder.position
            if self.config.strict_positions and not position.accepts(action):
                raise StrategyExecutionError(
                    step,
                    operation,
                    f"'{action.value}' no es válido con posición {position.value}",
                    value=action,
                )

            trade = Trade(order=action, step=step, source=operation)
            recorder.append_trade(trade)
            logger.debug("paso %d: trade %s (%s)", step, action.value, operation)

            if self.broker is not None:
                try:
                    fill = self.broker.execute(trade, series, position)
                except Exception as exc:
                    raise ExecutionError(step, operation, f"{type(exc).__name__}: {exc}") from exc
                recorder.append_fill(fill)

        recorder.advance()

    def _call(
        self,
        operation: str,
        step: int,
        prefix: np.ndarray,
        recorder: StatusRecorder,
        timings: Dict[str, float],
    ) -> Action:
        fn = getattr(self.strategy, operation)
        try:
            with timed_step(timings, operation, accumulate=True):
                raw = fn(prefix, recorder.context(step))
        except Exception as exc:
            raise StrategyExecutionError(step, operation, f"{type(exc).__name__}: {exc}") from exc

        try:
            action = Action.parse(raw)
        except ValueError as exc:
            raise StrategyExecutionError(step, operation, f"token de acción no reconocido {raw!r}", value=raw) from exc

        if action not in ALLOWED_ACTIONS[operation]:
            raise StrategyExecutionError(
                step,
                operation,
                f"'{action.value}' no está permitido para {operation}",
                value=raw,
            )
        return action
