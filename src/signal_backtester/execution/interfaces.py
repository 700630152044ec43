from __future__ import annotations

from abc import ABC, abstractmethod

from signal_backtester.core.models import Fill, Position, Trade
from signal_backtester.data.series import TimeSeries


class Broker(ABC):
    """Contrato mínimo para brokers simulados.

    Reciben cada trade en el mismo orden en que el motor lo registra, junto
    con la posición previa al trade, y devuelven exactamente un fill.
    """

    def reset(self) -> None:  # pragma: no cover - hook opcional
        """Hook opcional: limpia el estado interno antes de cada run."""

    @abstractmethod
    def execute(self, trade: Trade, series: TimeSeries, position: Position) -> Fill:  # pragma: no cover
        """Ejecuta un trade y devuelve el fill resultante."""
        raise NotImplementedError
