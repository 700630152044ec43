from __future__ import annotations

import time

from signal_backtester.utils.timing import timed_step


def _fake_perf_counter(step: float = 0.25):
    counter = 100.0

    def fake_perf_counter():
        nonlocal counter
        counter += step
        return counter

    return fake_perf_counter


def test_timed_step_records_elapsed_time(monkeypatch):
    timings: dict[str, float] = {}
    monkeypatch.setattr(time, "perf_counter", _fake_perf_counter())

    with timed_step(timings, "sample"):
        pass

    assert timings["sample"] == 0.25


def test_timed_step_accumulates(monkeypatch):
    timings: dict[str, float] = {"sample": 1.0}
    monkeypatch.setattr(time, "perf_counter", _fake_perf_counter())

    with timed_step(timings, "sample", accumulate=True):
        pass
    with timed_step(timings, "sample", accumulate=True):
        pass

    assert timings["sample"] == 1.5


def test_timed_step_records_on_error(monkeypatch):
    timings: dict[str, float] = {}
    monkeypatch.setattr(time, "perf_counter", _fake_perf_counter())

    try:
        with timed_step(timings, "boom"):
            raise RuntimeError("fail")
    except RuntimeError:
        pass

    assert "boom" in timings
