from __future__ import annotations

from dataclasses import asdict, dataclass, fields
import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationConfig:
    fuel_ticks: int = 10000              # ticks in one fuel cycle
    timeout_ticks: int = 50000           # absolute run-until limit
    base_max_heat: int = 10000           # core capacity before plating
    cooldown_check_interval: int = 8     # committed ticks between no-heat-loss checks
    residual_heat_threshold: int = 100   # stagnant total heat below this counts as cooled
    min_cycle_percent: int = 10          # share of a fuel cycle separating mark III/IV from V
    fuel_cell_max_usage: int = 10000     # fuel cell stops pulsing once usage exceeds this
    eu_per_pulse: int = 5

    @property
    def min_cycle_ticks(self) -> int:
        return self.fuel_ticks * self.min_cycle_percent // 100

    def reached_min_cycle(self, ticks: int) -> bool:
        return ticks * 100 // self.fuel_ticks >= self.min_cycle_percent


DEFAULT_CONFIG = SimulationConfig()


def load_config(path: Optional[Path] = None) -> SimulationConfig:
    """Read a config from JSON; a missing or unreadable file yields the defaults."""
    if path is None or not path.exists():
        return DEFAULT_CONFIG
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        logger.warning("Could not read simulation config %s, using defaults", path)
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        return DEFAULT_CONFIG
    known = {f.name for f in fields(SimulationConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
    try:
        return SimulationConfig(**{key: int(value) for key, value in data.items() if key in known})
    except (TypeError, ValueError):
        logger.warning("Invalid value in simulation config %s, using defaults", path)
        return DEFAULT_CONFIG


def save_config(config: SimulationConfig, path: Path) -> None:
    path.write_text(json.dumps(asdict(config), indent=2), encoding="utf-8")
