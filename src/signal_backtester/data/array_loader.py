from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd

from signal_backtester.data.interfaces import DataLoader
from signal_backtester.data.series import TimeSeries


class ArrayLoader(DataLoader):
    """Loader en memoria para arrays, secuencias y ``pd.Series``.

    Sirve como fuente determinista para tests y para aplicaciones que ya
    tienen los datos cargados; no lee ficheros ni red.
    """

    def __init__(self, values: Sequence[float] | np.ndarray | pd.Series, index: Sequence[Any] | None = None) -> None:
        self.values = values
        self.index = index

    def load(self) -> TimeSeries:
        if isinstance(self.values, pd.Series) and self.index is None:
            return TimeSeries.from_pandas(self.values)
        return TimeSeries(self.values, index=self.index)


def as_time_series(source: Any) -> TimeSeries:
    """Convierte cualquier fuente aceptada por el motor en un :class:`TimeSeries`."""

    if isinstance(source, TimeSeries):
        return source
    if isinstance(source, DataLoader):
        loaded = source.load()
        if not isinstance(loaded, TimeSeries):
            raise TypeError(f"{type(source).__name__}.load() debe devolver un TimeSeries")
        return loaded
    if isinstance(source, pd.Series):
        return TimeSeries.from_pandas(source)
    return TimeSeries(source)
