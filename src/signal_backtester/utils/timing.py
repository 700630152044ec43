from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Dict, Iterator


@contextmanager
def timed_step(timings: Dict[str, float], key: str, accumulate: bool = False) -> Iterator[None]:
    """Record the wall time of the block under ``timings[key]``.

    With ``accumulate=True`` the elapsed time is added to any previous value,
    which lets the engine total the time spent in each strategy operation
    across all steps.
    """

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        timings[key] = timings.get(key, 0.0) + elapsed if accumulate else elapsed
