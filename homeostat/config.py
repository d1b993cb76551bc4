"""
homeostat/config.py

Configuration for the whole agent.

Each component keeps its own dataclass next to its code. This module
gathers them and reads them from YAML, one section per component:

    sensors:     {min_dist: 80, max_dist: 500}
    damage:      {neighbor_model: symmetric}
    physiology:  {energy_decay: 0.004}
    behavior:    {groom_target: tegument}
    controller:  {period_ms: 100, report_interval: 3}
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import numpy as np
import yaml

from homeostat.core.behavior import BehaviorConfig
from homeostat.core.damage import DamageConfig
from homeostat.core.physiology import Need, PhysiologyConfig
from homeostat.core.sensors import SensorConfig

logger = logging.getLogger(__name__)

# Callables cannot come from a file
_CODE_ONLY_FIELDS = {"can_eat", "can_groom"}


@dataclass
class ControllerConfig:
    """Configuration for the control loop."""
    period_ms: float = 100.0              # Fixed control period
    max_cycles: Optional[int] = None      # None = run until a need runs dry
    report_interval: int = 3              # Cycles between console reports (0 = off)
    record_history: bool = True
    history_limit: int = 1000             # Max cycle records kept in memory

    def __post_init__(self):
        if self.period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {self.period_ms}")


@dataclass
class HomeostatConfig:
    """All component configurations."""
    sensors: SensorConfig = field(default_factory=SensorConfig)
    damage: DamageConfig = field(default_factory=DamageConfig)
    physiology: PhysiologyConfig = field(default_factory=PhysiologyConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)
    controller: ControllerConfig = field(default_factory=ControllerConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "HomeostatConfig":
        data = data or {}
        sections = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(sections)
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")

        kwargs = {}
        for name, section in data.items():
            section_cls = sections[name].default_factory
            kwargs[name] = _build_section(section_cls, section or {})
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for f in fields(self):
            section = getattr(self, f.name)
            values = {}
            for sf in fields(section):
                if sf.name in _CODE_ONLY_FIELDS:
                    continue
                value = getattr(section, sf.name)
                if isinstance(value, Need):
                    value = value.value
                elif isinstance(value, np.ndarray):
                    value = value.tolist()
                elif isinstance(value, tuple):
                    value = list(value)
                values[sf.name] = value
            result[f.name] = values
        return result


def _build_section(section_cls, values: Dict[str, Any]):
    allowed = {f.name for f in fields(section_cls)} - _CODE_ONLY_FIELDS
    unknown = set(values) - allowed
    if unknown:
        raise ValueError(
            f"Unknown keys for {section_cls.__name__}: {sorted(unknown)}"
        )
    values = dict(values)
    if "avoid_range" in values:
        values["avoid_range"] = tuple(values["avoid_range"])
    return section_cls(**values)


def load_config(path: Union[str, Path]) -> HomeostatConfig:
    """Load a HomeostatConfig from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    config = HomeostatConfig.from_dict(data)
    logger.info(f"Configuration loaded from {path}")
    return config


def save_config(config: HomeostatConfig, path: Union[str, Path]) -> None:
    with open(path, "w") as f:
        yaml.safe_dump(config.to_dict(), f, sort_keys=False)
