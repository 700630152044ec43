from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Union

import numpy as np

from signal_backtester.core.models import Action, StepContext

ActionLike = Union[Action, str, None]

OPERATIONS = ("signaler", "entryer", "exiter", "stopper")


class Strategy(ABC):
    """Contrato de estrategia que opera paso a paso.

    Cada operación recibe el prefijo cronológico ``series[0:step]`` (vista de
    solo lectura) y el :class:`StepContext` con la posición y los últimos
    eventos registrados. Ninguna operación puede consultar datos posteriores
    ni modificar el estado del motor; el estado interno (buffers de
    indicadores, etc.) es privado de la implementación.

    El motor llama a las operaciones siempre en el mismo orden: signaler,
    entryer, exiter, stopper. Devolver ``Action.NONE``, ``None`` o ``""``
    significa "sin acción"; un error debe propagarse como excepción.
    """

    def reset(self) -> None:  # pragma: no cover - hook opcional
        """Hook opcional: limpia el estado interno antes de cada run."""

    @abstractmethod
    def signaler(self, history: np.ndarray, context: StepContext) -> ActionLike:  # pragma: no cover - contrato
        """Emite una señal LONG, SHORT, SELL o NONE. Solo informativa."""
        raise NotImplementedError

    @abstractmethod
    def entryer(self, history: np.ndarray, context: StepContext) -> ActionLike:  # pragma: no cover - contrato
        """Abre posición (LONG/SHORT) o devuelve NONE."""
        raise NotImplementedError

    @abstractmethod
    def exiter(self, history: np.ndarray, context: StepContext) -> ActionLike:  # pragma: no cover - contrato
        """Cierra posición (SELL) por señal o regla fija, o devuelve NONE."""
        raise NotImplementedError

    @abstractmethod
    def stopper(self, history: np.ndarray, context: StepContext) -> ActionLike:  # pragma: no cover - contrato
        """Corta pérdidas (SELL) o devuelve NONE. Se evalúa en todos los pasos."""
        raise NotImplementedError


def missing_operations(candidate: object) -> list[str]:
    """Operations of the contract that ``candidate`` does not expose as callables."""

    return [name for name in OPERATIONS if not callable(getattr(candidate, name, None))]
