from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Tuple


class Action(str, Enum):
    """Action token emitted by a strategy operation."""

    LONG = "long"
    SHORT = "short"
    SELL = "sell"
    NONE = "none"

    @classmethod
    def parse(cls, value: Any) -> "Action":
        """Normaliza la salida de una estrategia a un :class:`Action`.

        ``None``, ``""`` y ``"none"`` significan "sin acción". Cualquier otro
        valor que no sea un token conocido lanza ``ValueError``.
        """

        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        if isinstance(value, str):
            key = value.strip().lower()
            if not key:
                return cls.NONE
            for member in cls:
                if member.value == key:
                    return member
        raise ValueError(f"Unrecognized action token: {value!r}")


SIGNALER_ACTIONS: FrozenSet[Action] = frozenset({Action.LONG, Action.SHORT, Action.SELL, Action.NONE})
ENTRYER_ACTIONS: FrozenSet[Action] = frozenset({Action.LONG, Action.SHORT, Action.NONE})
EXITER_ACTIONS: FrozenSet[Action] = frozenset({Action.SELL, Action.NONE})
STOPPER_ACTIONS: FrozenSet[Action] = frozenset({Action.SELL, Action.NONE})

ALLOWED_ACTIONS: Dict[str, FrozenSet[Action]] = {
    "signaler": SIGNALER_ACTIONS,
    "entryer": ENTRYER_ACTIONS,
    "exiter": EXITER_ACTIONS,
    "stopper": STOPPER_ACTIONS,
}


class Position(str, Enum):
    """Exposure held between steps. Trades always move a full unit."""

    FLAT = "flat"
    LONG = "long"
    SHORT = "short"

    def after(self, order: Action) -> "Position":
        """Position resulting from ``order``; invalid combinations leave it unchanged."""

        if self is Position.FLAT and order is Action.LONG:
            return Position.LONG
        if self is Position.FLAT and order is Action.SHORT:
            return Position.SHORT
        if self is not Position.FLAT and order is Action.SELL:
            return Position.FLAT
        return self

    def accepts(self, order: Action) -> bool:
        return self.after(order) is not self


@dataclass(frozen=True)
class Signal:
    """Advisory intent emitted by the signaler at ``step``."""

    action: Action
    step: int

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action.value, "step": int(self.step)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Signal":
        return cls(action=Action.parse(data["action"]), step=int(data["step"]))


@dataclass(frozen=True)
class Trade:
    """Executed full-position order.

    Attributes
    ----------
    order: Action
        ``LONG``/``SHORT`` for entries, ``SELL`` for exits and stops.
    step: int
        Step whose prefix produced the decision.
    source: str
        Operation that produced it: ``"entryer"``, ``"exiter"`` or ``"stopper"``.
    """

    order: Action
    step: int
    source: str = "entryer"

    def to_dict(self) -> Dict[str, Any]:
        return {"order": self.order.value, "step": int(self.step), "source": self.source}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Trade":
        return cls(
            order=Action.parse(data["order"]),
            step=int(data["step"]),
            source=str(data.get("source", "entryer")),
        )


@dataclass(frozen=True)
class Fill:
    """Execution result produced by a broker for a recorded trade."""

    trade: Trade
    price: float
    cost: float = 0.0
    slippage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.trade.to_dict(),
            "price": float(self.price),
            "cost": float(self.cost),
            "slippage": float(self.slippage),
        }


@dataclass(frozen=True)
class StepContext:
    """Engine state visible to a strategy operation.

    Built right before each call, so the entryer sees the signal appended in
    the same step, the exiter sees the same-step entry and so on.
    """

    step: int
    position: Position = Position.FLAT
    last_signal: Signal | None = None
    last_trade: Trade | None = None


@dataclass(frozen=True)
class Status:
    """Immutable result of one backtest run.

    Attributes
    ----------
    step: int
        Number of steps completed (cursor into the series).
    signals: tuple[Signal, ...]
        Signal log in chronological order.
    trades: tuple[Trade, ...]
        Trade log in chronological order; one step may hold entry, exit and
        stop events, in that order.
    fills: tuple[Fill, ...]
        Broker fills, one per trade. Empty when no broker is attached.
    position: Position
        Exposure after the last completed step.
    cancelled: bool
        ``True`` when the run stopped early on a cancellation request.
    """

    step: int = 0
    signals: Tuple[Signal, ...] = ()
    trades: Tuple[Trade, ...] = ()
    fills: Tuple[Fill, ...] = ()
    position: Position = Position.FLAT
    cancelled: bool = False

    @classmethod
    def empty(cls) -> "Status":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": int(self.step),
            "signals": [s.to_dict() for s in self.signals],
            "trades": [t.to_dict() for t in self.trades],
            "fills": [f.to_dict() for f in self.fills],
            "position": self.position.value,
            "cancelled": bool(self.cancelled),
        }


@dataclass
class StatusRecorder:
    """Mutable rolling state owned by a single run.

    The engine appends to it while stepping and hands out immutable
    :class:`Status` snapshots. ``checkpoint``/``rollback`` give step-level
    atomicity when a strategy operation fails halfway through a step.
    """

    step: int = 0
    signals: List[Signal] = field(default_factory=list)
    trades: List[Trade] = field(default_factory=list)
    fills: List[Fill] = field(default_factory=list)
    position: Position = Position.FLAT

    def append_signal(self, signal: Signal) -> None:
        self.signals.append(signal)

    def append_trade(self, trade: Trade) -> None:
        self.trades.append(trade)
        self.position = self.position.after(trade.order)

    def append_fill(self, fill: Fill) -> None:
        self.fills.append(fill)

    def advance(self) -> None:
        self.step += 1

    def context(self, step: int) -> StepContext:
        return StepContext(
            step=step,
            position=self.position,
            last_signal=self.signals[-1] if self.signals else None,
            last_trade=self.trades[-1] if self.trades else None,
        )

    def checkpoint(self) -> Tuple[int, int, int, int, Position]:
        return (self.step, len(self.signals), len(self.trades), len(self.fills), self.position)

    def rollback(self, checkpoint: Tuple[int, int, int, int, Position]) -> None:
        step, n_signals, n_trades, n_fills, position = checkpoint
        self.step = step
        del self.signals[n_signals:]
        del self.trades[n_trades:]
        del self.fills[n_fills:]
        self.position = position

    def snapshot(self, cancelled: bool = False) -> Status:
        return Status(
            step=self.step,
            signals=tuple(self.signals),
            trades=tuple(self.trades),
            fills=tuple(self.fills),
            position=self.position,
            cancelled=cancelled,
        )
