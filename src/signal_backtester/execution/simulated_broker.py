from __future__ import annotations

import math

from signal_backtester.core.models import Action, Fill, Position, Trade
from signal_backtester.data.series import TimeSeries
from signal_backtester.execution.interfaces import Broker


def trade_side(trade: Trade, position: Position) -> str:
    """Market side (``"buy"``/``"sell"``) of ``trade`` given the prior position."""

    if trade.order is Action.LONG:
        return "buy"
    if trade.order is Action.SHORT:
        return "sell"
    if trade.order is Action.SELL and position is Position.SHORT:
        return "buy"
    return "sell"


class SimulatedBroker(Broker):
    """Broker simple de posición completa con slippage y comisión fija.

    Los fills usan la observación ``series[trade.step]``: la primera que la
    estrategia no vio al decidir. El slippage se aplica en contra (las compras
    llenan más caro, las ventas más barato) y la comisión es fija por fill.
    """

    def __init__(self, slippage_bps: float = 0.0, commission_per_fill: float = 0.0) -> None:
        if not (math.isfinite(slippage_bps) and math.isfinite(commission_per_fill)):
            raise ValueError("slippage_bps y commission_per_fill deben ser finitos")
        if slippage_bps < 0:
            raise ValueError("slippage_bps no puede ser negativo")
        if commission_per_fill < 0:
            raise ValueError("commission_per_fill no puede ser negativa")
        self.slippage_bps = slippage_bps
        self.commission_per_fill = commission_per_fill

    def execute(self, trade: Trade, series: TimeSeries, position: Position) -> Fill:
        if trade.step < 0 or trade.step >= len(series):
            raise ValueError(f"step {trade.step} fuera de rango para el dataset")

        reference = series.value_at(trade.step)
        impact = reference * self.slippage_bps / 10_000.0
        side = trade_side(trade, position)
        price = reference + impact if side == "buy" else reference - impact

        return Fill(
            trade=trade,
            price=price,
            cost=self.commission_per_fill,
            slippage=impact,
        )
