from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Tuple

import numpy as np

from signal_backtester.data.series import TimeSeries


@dataclass
class Timeline:
    """Lightweight iterator over a :class:`TimeSeries`.

    The timeline isolates sequencing from strategies and brokers: each step is
    paired with the strict prefix of observations before it, which is the only
    data a strategy may see at that step.
    """

    series: TimeSeries

    def __len__(self) -> int:
        return len(self.series)

    def iter_steps(self) -> Iterator[int]:
        for step in range(len(self.series)):
            yield step

    def iter_prefixes(self) -> Iterator[Tuple[int, np.ndarray]]:
        for step in self.iter_steps():
            yield step, self.series.prefix(step)


def is_chronological(records: Iterable[Any]) -> bool:
    """Check that records carrying a ``step`` attribute never go back in time."""

    last_step = -1
    for record in records:
        if record.step < last_step:
            return False
        last_step = record.step
    return True
