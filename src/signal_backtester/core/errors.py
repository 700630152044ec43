from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from signal_backtester.core.models import Status


class BacktestError(Exception):
    """Base de todos los errores propios del motor."""


class ConfigurationError(BacktestError, ValueError):
    """Backtest mal configurado: se detecta antes de entrar en el bucle."""


class StrategyExecutionError(BacktestError):
    """A strategy operation failed or broke its contract at a given step.

    Attributes
    ----------
    step: int
        Step at which the failing operation was called.
    operation: str
        One of ``"signaler"``, ``"entryer"``, ``"exiter"`` or ``"stopper"``.
    value: Any
        Offending token when the operation returned something invalid;
        ``None`` when the operation raised.
    partial_status: Status | None
        Every step completed before ``step``. The failing step is rolled back
        as a whole, so this status never holds a malformed entry.
    """

    def __init__(
        self,
        step: int,
        operation: str,
        reason: str,
        *,
        value: Any = None,
        partial_status: "Status | None" = None,
    ) -> None:
        super().__init__(f"{operation} failed at step {step}: {reason}")
        self.step = step
        self.operation = operation
        self.reason = reason
        self.value = value
        self.partial_status = partial_status


class ExecutionError(BacktestError):
    """The broker could not fill a trade recorded at ``step``.

    Carries the same ``step``, ``operation`` and ``partial_status`` fields as
    :class:`StrategyExecutionError`; ``operation`` names the strategy
    operation that emitted the trade.
    """

    def __init__(
        self,
        step: int,
        operation: str,
        reason: str,
        *,
        partial_status: "Status | None" = None,
    ) -> None:
        super().__init__(f"fill of {operation} trade failed at step {step}: {reason}")
        self.step = step
        self.operation = operation
        self.reason = reason
        self.partial_status = partial_status
