from __future__ import annotations

import dataclasses

import pytest

from signal_backtester.core.models import (
    Action,
    Fill,
    Position,
    Signal,
    Status,
    StatusRecorder,
    Trade,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (Action.SELL, Action.SELL),
        ("long", Action.LONG),
        (" Short ", Action.SHORT),
        ("SELL", Action.SELL),
        ("", Action.NONE),
        ("none", Action.NONE),
        (None, Action.NONE),
    ],
)
def test_action_parse_normalizes_tokens(raw, expected) -> None:
    assert Action.parse(raw) is expected


@pytest.mark.parametrize("raw", ["buy", 1, 0.5, object()])
def test_action_parse_rejects_unknown_tokens(raw) -> None:
    with pytest.raises(ValueError):
        Action.parse(raw)


def test_signal_and_trade_are_immutable() -> None:
    signal = Signal(Action.LONG, 3)
    trade = Trade(Action.SELL, 4, "stopper")

    with pytest.raises(dataclasses.FrozenInstanceError):
        signal.step = 5  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        trade.order = Action.LONG  # type: ignore[misc]


def test_records_serialize_to_plain_dicts() -> None:
    trade = Trade(Action.SHORT, 2, "entryer")

    assert Signal(Action.LONG, 1).to_dict() == {"action": "long", "step": 1}
    assert Trade.from_dict(trade.to_dict()) == trade
    assert Signal.from_dict({"action": "SELL", "step": "7"}) == Signal(Action.SELL, 7)
    assert Fill(trade, price=10.5, cost=1.0).to_dict() == {
        "order": "short",
        "step": 2,
        "source": "entryer",
        "price": 10.5,
        "cost": 1.0,
        "slippage": 0.0,
    }


@pytest.mark.parametrize(
    "position, order, expected",
    [
        (Position.FLAT, Action.LONG, Position.LONG),
        (Position.FLAT, Action.SHORT, Position.SHORT),
        (Position.LONG, Action.SELL, Position.FLAT),
        (Position.SHORT, Action.SELL, Position.FLAT),
        (Position.FLAT, Action.SELL, Position.FLAT),
        (Position.LONG, Action.SHORT, Position.LONG),
    ],
)
def test_position_transitions(position: Position, order: Action, expected: Position) -> None:
    assert position.after(order) is expected
    assert position.accepts(order) is (expected is not position)


def test_recorder_rollback_restores_checkpoint() -> None:
    recorder = StatusRecorder()
    recorder.append_trade(Trade(Action.LONG, 0))
    recorder.advance()
    checkpoint = recorder.checkpoint()

    recorder.append_signal(Signal(Action.SELL, 1))
    recorder.append_trade(Trade(Action.SELL, 1, "exiter"))
    assert recorder.position is Position.FLAT

    recorder.rollback(checkpoint)

    assert recorder.step == 1
    assert recorder.signals == []
    assert recorder.trades == [Trade(Action.LONG, 0)]
    assert recorder.position is Position.LONG


def test_recorder_context_reflects_latest_events() -> None:
    recorder = StatusRecorder()
    assert recorder.context(0).last_signal is None

    recorder.append_signal(Signal(Action.LONG, 0))
    context = recorder.context(0)

    assert context.last_signal == Signal(Action.LONG, 0)
    assert context.last_trade is None
    assert context.position is Position.FLAT


def test_snapshot_is_detached_from_recorder() -> None:
    recorder = StatusRecorder()
    recorder.append_signal(Signal(Action.LONG, 0))
    snapshot = recorder.snapshot()

    recorder.append_signal(Signal(Action.SELL, 1))

    assert snapshot.signals == (Signal(Action.LONG, 0),)
    assert isinstance(snapshot, Status)
    assert snapshot.to_dict()["signals"] == [{"action": "long", "step": 0}]
