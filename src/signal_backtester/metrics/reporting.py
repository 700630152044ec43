from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from signal_backtester.core.models import Action, Fill, Position, Status

SIGNAL_COLUMNS = ["step", "action"]
TRADE_COLUMNS = ["step", "order", "source"]
FILL_COLUMNS = ["step", "order", "source", "price", "cost", "slippage"]


@dataclass(frozen=True)
class RoundTrip:
    """Entry fill paired with the sell fill that closed it."""

    direction: Position
    entry: Fill
    exit: Fill

    @property
    def gross_pnl(self) -> float:
        if self.direction is Position.LONG:
            return self.exit.price - self.entry.price
        return self.entry.price - self.exit.price

    @property
    def net_pnl(self) -> float:
        return self.gross_pnl - self.entry.cost - self.exit.cost

    @property
    def bars_held(self) -> int:
        return self.exit.trade.step - self.entry.trade.step


def signal_count(status: Status) -> int:
    return len(status.signals)


def trade_count(status: Status) -> int:
    return len(status.trades)


def action_counts(status: Status) -> Dict[str, Dict[str, int]]:
    signals = Counter(s.action.value for s in status.signals)
    trades = Counter(t.order.value for t in status.trades)
    return {"signals": dict(signals), "trades": dict(trades)}


def round_trips(status: Status) -> List[RoundTrip]:
    """Pair entry fills with the next closing fill.

    Follows the engine's position rules: an entry only opens while flat and a
    sell only closes an open position; any other fill is left unpaired.
    """

    trips: List[RoundTrip] = []
    position = Position.FLAT
    open_fill: Fill | None = None
    for fill in status.fills:
        new_position = position.after(fill.trade.order)
        if new_position is position:
            continue
        if fill.trade.order is Action.SELL and open_fill is not None:
            trips.append(RoundTrip(direction=position, entry=open_fill, exit=fill))
            open_fill = None
        else:
            open_fill = fill
        position = new_position
    return trips


def realized_pnl(status: Status) -> float:
    """Net P&L per unit over closed round trips."""

    return float(sum(trip.net_pnl for trip in round_trips(status)))


def signals_to_frame(status: Status) -> pd.DataFrame:
    rows = [{"step": s.step, "action": s.action.value} for s in status.signals]
    return pd.DataFrame(rows, columns=SIGNAL_COLUMNS)


def trades_to_frame(status: Status) -> pd.DataFrame:
    rows = [{"step": t.step, "order": t.order.value, "source": t.source} for t in status.trades]
    return pd.DataFrame(rows, columns=TRADE_COLUMNS)


def fills_to_frame(status: Status) -> pd.DataFrame:
    return pd.DataFrame([f.to_dict() for f in status.fills], columns=FILL_COLUMNS)


def summarize(status: Status) -> Dict[str, Any]:
    """Resumen serializable a JSON del log de un run."""

    trips = round_trips(status)
    pnl = np.array([trip.net_pnl for trip in trips], dtype=np.float64)
    winrate = float(np.mean(pnl > 0.0)) if pnl.size else 0.0
    return {
        "steps": int(status.step),
        "cancelled": bool(status.cancelled),
        "final_position": status.position.value,
        "signals": signal_count(status),
        "trades": trade_count(status),
        "fills": len(status.fills),
        "round_trips": len(trips),
        "realized_pnl": float(pnl.sum()) if pnl.size else 0.0,
        "winrate": winrate,
        "by_action": action_counts(status),
    }
