"""Configuration for backtest runs, loadable from YAML."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from signal_backtester.core.errors import ConfigurationError
from signal_backtester.execution.interfaces import Broker
from signal_backtester.registries import broker_registry

LOG_FORMAT = "[%(levelname)s] %(message)s"
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class BacktestConfig:
    """Settings for a backtest run.

    Attributes
    ----------
    strict_positions : bool
        Treat an entry while already in a position, or a sell while flat, as
        a contract violation of the strategy.
    slippage_bps : float
        Adverse slippage applied by the simulated broker, in basis points.
    commission_per_fill : float
        Flat commission charged per simulated fill.
    log_level : str
        Level used by :func:`configure_logging`.
    broker : str
        Name of the broker in :data:`~signal_backtester.registries.broker_registry`
        built by :func:`build_broker`.
    """

    strict_positions: bool = False
    slippage_bps: float = 0.0
    commission_per_fill: float = 0.0
    log_level: str = "INFO"
    broker: str = "simulated"

    def __post_init__(self) -> None:
        if not isinstance(self.strict_positions, bool):
            raise ConfigurationError("strict_positions debe ser booleano")
        try:
            self.slippage_bps = float(self.slippage_bps)
            self.commission_per_fill = float(self.commission_per_fill)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Valor numérico inválido en la configuración: {exc}") from exc
        if not (math.isfinite(self.slippage_bps) and math.isfinite(self.commission_per_fill)):
            raise ConfigurationError("slippage_bps y commission_per_fill deben ser finitos")
        if self.slippage_bps < 0:
            raise ConfigurationError("slippage_bps no puede ser negativo")
        if self.commission_per_fill < 0:
            raise ConfigurationError("commission_per_fill no puede ser negativa")
        self.log_level = str(self.log_level).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"log_level inválido: '{self.log_level}'")
        if not isinstance(self.broker, str) or not self.broker.strip():
            raise ConfigurationError("broker debe ser un nombre no vacío")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "BacktestConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(payload) - known
        if unknown:
            raise ConfigurationError(f"Claves desconocidas en la configuración: {', '.join(sorted(unknown))}")
        return cls(**dict(payload))

    @classmethod
    def from_yaml(cls, path: str | Path, section: Optional[str] = None) -> "BacktestConfig":
        """Build a :class:`BacktestConfig` from a YAML file.

        Parameters
        ----------
        path : str | Path
            Path to the YAML file.
        section : str, optional
            Top-level key holding the settings. When omitted the whole
            document is used.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        ConfigurationError
            If the document is malformed or holds unknown/invalid values.
        """

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Backtest configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            try:
                payload = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"YAML inválido en {config_path}: {exc}") from exc

        if section is not None:
            if not isinstance(payload, Mapping) or section not in payload:
                raise ConfigurationError(f"Sección '{section}' no encontrada en {config_path}")
            payload = payload[section] or {}

        if not isinstance(payload, Mapping):
            raise ConfigurationError(f"La configuración en {config_path} debe ser un mapping")
        return cls.from_mapping(payload)


def build_broker(config: BacktestConfig) -> Broker:
    """Instancia ``config.broker`` desde el registro con los parámetros de ejecución."""

    if config.broker not in broker_registry:
        available = ", ".join(broker_registry.names())
        raise ConfigurationError(f"Broker desconocido '{config.broker}'. Disponible: {available}")
    return broker_registry.create(
        config.broker,
        slippage_bps=config.slippage_bps,
        commission_per_fill=config.commission_per_fill,
    )


def configure_logging(level: BacktestConfig | str = "INFO") -> None:
    """Logging de consola para aplicaciones; la librería nunca lo llama.

    Acepta un nivel o una :class:`BacktestConfig`, de la que se toma ``log_level``.
    """

    if isinstance(level, BacktestConfig):
        level = level.log_level
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
