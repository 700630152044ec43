from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

# Permite importar el paquete sin instalación previa
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from signal_backtester.data.series import TimeSeries  # noqa: E402


@pytest.fixture()
def sample_series() -> TimeSeries:
    values = np.array([100.0, 101.0, 102.5, 101.5, 99.0, 98.5, 100.5, 103.0])
    return TimeSeries(values)
