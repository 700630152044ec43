from __future__ import annotations

from typing import Callable, Mapping

import numpy as np

from signal_backtester.core.models import Action, StepContext
from signal_backtester.strategy.interfaces import ActionLike, Strategy

Operation = Callable[[np.ndarray, StepContext], ActionLike]


class NullStrategy(Strategy):
    """Estrategia que nunca actúa. Útil para medir el propio bucle."""

    def signaler(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return Action.NONE

    def entryer(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return Action.NONE

    def exiter(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return Action.NONE

    def stopper(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return Action.NONE


class CallableStrategy(Strategy):
    """Adaptador de funciones sueltas al contrato :class:`Strategy`.

    Cada función recibe ``(history, context)``; las que no se indiquen se
    comportan como "sin acción".
    """

    def __init__(
        self,
        signaler: Operation | None = None,
        entryer: Operation | None = None,
        exiter: Operation | None = None,
        stopper: Operation | None = None,
    ) -> None:
        self._signaler = signaler
        self._entryer = entryer
        self._exiter = exiter
        self._stopper = stopper

    @staticmethod
    def _call(fn: Operation | None, history: np.ndarray, context: StepContext) -> ActionLike:
        if fn is None:
            return Action.NONE
        return fn(history, context)

    def signaler(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return self._call(self._signaler, history, context)

    def entryer(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return self._call(self._entryer, history, context)

    def exiter(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return self._call(self._exiter, history, context)

    def stopper(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return self._call(self._stopper, history, context)


class ScriptedStrategy(Strategy):
    """Replays fixed ``{step: action}`` scripts, one per operation.

    The script is keyed by the length of the received prefix, which equals
    the current step, so the strategy never needs anything beyond the data it
    is handed. Steps absent from a script return ``NONE``.
    """

    def __init__(
        self,
        signals: Mapping[int, ActionLike] | None = None,
        entries: Mapping[int, ActionLike] | None = None,
        exits: Mapping[int, ActionLike] | None = None,
        stops: Mapping[int, ActionLike] | None = None,
    ) -> None:
        self.signals = dict(signals or {})
        self.entries = dict(entries or {})
        self.exits = dict(exits or {})
        self.stops = dict(stops or {})

    def signaler(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return self.signals.get(len(history), Action.NONE)

    def entryer(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return self.entries.get(len(history), Action.NONE)

    def exiter(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return self.exits.get(len(history), Action.NONE)

    def stopper(self, history: np.ndarray, context: StepContext) -> ActionLike:
        return self.stops.get(len(history), Action.NONE)
