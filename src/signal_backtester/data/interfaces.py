from __future__ import annotations

from abc import ABC, abstractmethod

from signal_backtester.data.series import TimeSeries


class DataLoader(ABC):
    """Contrato para fuentes de observaciones.

    Deben devolver un :class:`TimeSeries` finito y ordenado. Cómo se obtienen
    los datos (fichero, red, base de datos) queda fuera del motor; el loader
    es responsable de cualquier normalización previa.
    """

    @abstractmethod
    def load(self) -> TimeSeries:  # pragma: no cover - contrato
        """Carga la serie completa en memoria."""
        raise NotImplementedError
