from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd


@dataclass(frozen=True, init=False, eq=False)
class TimeSeries:
    """Read-only 1-D series of observations consumed by the engine.

    The container enforces finite float values and, when an ``index`` is
    given, non-decreasing timestamps. Storage is flagged non-writeable, and
    every prefix handed to a strategy is a read-only copy detached from it.
    """

    values: np.ndarray
    index: np.ndarray | None

    def __init__(self, values: Any, index: Any = None) -> None:
        arr = np.array(values, dtype=np.float64)
        if arr.ndim != 1:
            raise ValueError("Las observaciones deben ser un array 1D")
        if not np.all(np.isfinite(arr)):
            raise ValueError("La serie contiene valores NaN o infinitos")
        arr.setflags(write=False)

        idx = None
        if index is not None:
            idx = np.array(index)
            if idx.ndim != 1 or idx.shape[0] != arr.shape[0]:
                raise ValueError("El índice debe ser 1D y del mismo tamaño que los valores")
            if idx.shape[0] > 1 and not np.all(idx[1:] >= idx[:-1]):
                raise ValueError("El índice debe estar ordenado de forma creciente")
            idx.setflags(write=False)

        object.__setattr__(self, "values", arr)
        object.__setattr__(self, "index", idx)

    def __len__(self) -> int:
        return int(self.values.shape[0])

    @property
    def size(self) -> int:
        return len(self)

    def prefix(self, step: int) -> np.ndarray:
        """Observations strictly before ``step`` (``values[0:step]``).

        Se devuelve una copia de sólo lectura: una vista expondría el buffer
        completo, con las observaciones futuras, a través de ``.base``.
        """

        if step < 0 or step > len(self):
            raise IndexError(f"step {step} fuera de rango para una serie de {len(self)} valores")
        history = self.values[:step].copy()
        history.setflags(write=False)
        return history

    def value_at(self, step: int) -> float:
        if step < 0 or step >= len(self):
            raise IndexError(f"step {step} fuera de rango para una serie de {len(self)} valores")
        return float(self.values[step])

    @classmethod
    def from_pandas(cls, series: pd.Series) -> "TimeSeries":
        clean = series.sort_index()
        index = clean.index.to_numpy() if not isinstance(clean.index, pd.RangeIndex) else None
        return cls(clean.to_numpy(dtype=np.float64), index=index)

    def to_pandas(self) -> pd.Series:
        index = self.index if self.index is not None else pd.RangeIndex(len(self))
        return pd.Series(np.array(self.values), index=index, name="value")
