"""
observations/report.py

Watch the body decide.

One record per cycle: what the body felt, what it wanted, what it did.
The console report renders the same numbers as tables, scaled to
percent, for a human watching the robot run.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, Tuple
import json

import numpy as np

from homeostat.core.physiology import Need

if TYPE_CHECKING:
    from homeostat.core.agent import HomeostaticAgent
    from homeostat.core.arbitration import ArbitrationResult
    from homeostat.core.behavior import VelocityCommand

RULE = "*" * 62


@dataclass
class CycleRecord:
    """Diagnostic snapshot of one control cycle."""
    cycle_index: int
    variables: Tuple[float, float, float]
    deficits: Tuple[float, float, float]
    cues: Tuple[float, float, float]
    motivations: Tuple[float, float, float]
    arbitration: str
    behavior: str
    velocity: Tuple[float, float]
    damage: bool
    damage_magnitude: float = 0.0
    actuation_fault: Optional[str] = None

    @classmethod
    def from_agent(
        cls,
        cycle_index: int,
        agent: HomeostaticAgent,
        arbitration: ArbitrationResult,
        behavior: str,
        command: VelocityCommand,
        actuation_fault: Optional[str] = None,
    ) -> "CycleRecord":
        needs = [agent.physiology[need] for need in Need]
        signal = agent.last_damage
        return cls(
            cycle_index=cycle_index,
            variables=tuple(n.variable for n in needs),
            deficits=tuple(n.deficit for n in needs),
            cues=tuple(n.cue for n in needs),
            motivations=tuple(n.motivation for n in needs),
            arbitration=arbitration.value,
            behavior=behavior,
            velocity=command.as_tuple(),
            damage=bool(signal is not None and signal.damaged),
            damage_magnitude=signal.magnitude if signal is not None else 0.0,
            actuation_fault=actuation_fault,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle_index": self.cycle_index,
            "variables": list(self.variables),
            "deficits": list(self.deficits),
            "cues": list(self.cues),
            "motivations": list(self.motivations),
            "arbitration": self.arbitration,
            "behavior": self.behavior,
            "velocity": list(self.velocity),
            "damage": self.damage,
            "damage_magnitude": self.damage_magnitude,
            "actuation_fault": self.actuation_fault,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CycleRecord":
        return cls(
            cycle_index=d["cycle_index"],
            variables=tuple(d["variables"]),
            deficits=tuple(d["deficits"]),
            cues=tuple(d["cues"]),
            motivations=tuple(d["motivations"]),
            arbitration=d["arbitration"],
            behavior=d.get("behavior", ""),
            velocity=tuple(d["velocity"]),
            damage=d["damage"],
            damage_magnitude=d.get("damage_magnitude", 0.0),
            actuation_fault=d.get("actuation_fault"),
        )


def _percent_row(label: str, values: Sequence[float]) -> str:
    return " | ".join(f"{label}= {v * 100.0:.2f}" for v in values)


def _table(title: str, values: np.ndarray, fmt: str) -> str:
    cells = " ".join(format(float(v), fmt) for v in values)
    return f"{title.center(62, '*')}\n{RULE}\n\t\t{cells}\n{RULE}"


def format_needs(record: CycleRecord) -> str:
    """Variables, deficits, cues and motivations in percent."""
    lines = [
        " MODEL UPDATE ".center(62, "*"),
        RULE,
        _percent_row("var", record.variables),
        RULE,
        _percent_row("def", record.deficits),
        RULE,
        _percent_row("cue", record.cues),
        RULE,
        _percent_row("mot", record.motivations),
        RULE,
    ]
    return "\n".join(lines)


def format_sensors(agent: HomeostaticAgent) -> str:
    """History, current, diff, speed and circular speed tables."""
    window = agent.sensors
    detector = agent.detector
    return "\n".join([
        _table(" HIST VALUES ", window.previous, ".0f"),
        _table(" SENSOR VALUES ", window.current, ".0f"),
        _table(" DIFF VALUES ", window.diff(), ".0f"),
        _table(" SPEED VALUES ", detector.speed, ".2f"),
        _table(" CIRC SPEED VALUES ", detector.circ_speed, ".2f"),
    ])


def format_report(record: CycleRecord, agent: HomeostaticAgent) -> str:
    header = (
        f"cycle {record.cycle_index}: {record.arbitration} -> {record.behavior} "
        f"{record.velocity[0]:+.2f}/{record.velocity[1]:+.2f}"
        f"{'  [DAMAGE]' if record.damage else ''}"
    )
    return "\n".join([header, format_needs(record), format_sensors(agent)])
