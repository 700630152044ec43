"""Named factories for strategies and brokers.

``BacktestConfig.broker`` is resolved through :data:`broker_registry`, so a
broker registered here (directly or as a plugin) can be selected from YAML.
"""

from __future__ import annotations

from importlib.metadata import entry_points
from typing import Callable, Dict, Generic, List, TypeVar

from signal_backtester.execution.interfaces import Broker
from signal_backtester.execution.simulated_broker import SimulatedBroker
from signal_backtester.strategy.adapters import CallableStrategy, NullStrategy, ScriptedStrategy
from signal_backtester.strategy.interfaces import Strategy

T = TypeVar("T")

ENTRYPOINT_GROUPS = {
    "strategies": "signal_backtester.strategies",
    "brokers": "signal_backtester.brokers",
}


class Registry(Generic[T]):
    """Fábricas indexadas por nombre, sin distinguir mayúsculas.

    Un nombre sólo puede apuntar a una fábrica: registrar otra distinta con el
    mismo nombre falla salvo que se pida ``replace=True``.
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._factories: Dict[str, Callable[..., T]] = {}

    @staticmethod
    def _key(name: str) -> str:
        return name.strip().lower()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def add(self, name: str, factory: Callable[..., T], *, replace: bool = False) -> None:
        key = self._key(name)
        if not key:
            raise ValueError(f"El nombre de {self.kind} no puede estar vacío")
        current = self._factories.get(key)
        if current is not None and current is not factory and not replace:
            raise ValueError(f"Ya existe {self.kind} registrado como '{key}'")
        self._factories[key] = factory

    def register(self, name: str | None = None, *, replace: bool = False) -> Callable[[Callable[..., T]], Callable[..., T]]:
        """Decorador; sin ``name`` usa el ``__name__`` de la fábrica."""

        def decorator(factory: Callable[..., T]) -> Callable[..., T]:
            self.add(name or factory.__name__, factory, replace=replace)
            return factory

        return decorator

    def get(self, name: str) -> Callable[..., T]:
        try:
            return self._factories[self._key(name)]
        except KeyError:
            available = ", ".join(self.names()) or "<vacío>"
            raise KeyError(f"No se encontró {self.kind} con nombre '{name}'. Disponible: {available}") from None

    def create(self, name: str, *args, **kwargs) -> T:
        return self.get(name)(*args, **kwargs)

    def names(self) -> List[str]:
        return sorted(self._factories)

    def load_entrypoints(self, group: str) -> int:
        """Registra los plugins del grupo ``group``; los nombres ya usados se respetan.

        Devuelve cuántas fábricas nuevas se añadieron.
        """

        added = 0
        for ep in entry_points().select(group=group):
            if ep.name in self:
                continue
            self.add(ep.name, ep.load())
            added += 1
        return added


strategy_registry: Registry[Strategy] = Registry("estrategia")
broker_registry: Registry[Broker] = Registry("broker")

strategy_registry.add("null", NullStrategy)
strategy_registry.add("scripted", ScriptedStrategy)
strategy_registry.add("callable", CallableStrategy)
broker_registry.add("simulated", SimulatedBroker)


def load_plugin_entrypoints() -> Dict[str, int]:
    """Carga los plugins de estrategias y brokers declarados como entry points."""

    return {
        "strategies": strategy_registry.load_entrypoints(ENTRYPOINT_GROUPS["strategies"]),
        "brokers": broker_registry.load_entrypoints(ENTRYPOINT_GROUPS["brokers"]),
    }
