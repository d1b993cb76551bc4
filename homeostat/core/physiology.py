"""
core/physiology.py

Three needs compete for one body.

Energy drains with every cycle. Tegument wears slowly.
Integrity does not decay on its own; it is only eroded by damage.

Each need carries four numbers:
    variable    how satisfied it is (1.0 = fully)
    deficit     1.0 - variable, never clamped
    cue         how loudly the world calls for it
    motivation  deficit + deficit * cue

Inspired by:
- Cannon's homeostasis
- Motivation as deficit x incentive cue (Toates)
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class Need(Enum):
    """The three internal needs, in arbitration order."""
    ENERGY = "energy"
    TEGUMENT = "tegument"
    INTEGRITY = "integrity"


@dataclass
class NeedState:
    """One need at this moment."""
    variable: float = 1.0
    deficit: float = 0.0
    cue: float = 0.0
    motivation: float = 0.0


@dataclass
class PhysiologyConfig:
    """
    Decay rates and constant cues.

    Integrity has no passive decay by default; its cue is sensor-derived.
    """
    initial_level: float = 1.0
    energy_decay: float = 0.004
    tegument_decay: float = 0.0015
    integrity_decay: float = 0.0
    energy_cue: float = 0.06
    tegument_cue: float = 0.055


class PhysiologicalState:
    """
    The internal milieu: Energy, Tegument and Integrity.

    Created once per run with every variable at initial_level,
    mutated every cycle, never reset.
    """

    def __init__(self, config: Optional[PhysiologyConfig] = None):
        self.config = config or PhysiologyConfig()
        self.needs: Dict[Need, NeedState] = {
            need: NeedState(variable=self.config.initial_level) for need in Need
        }

    def __getitem__(self, need: Need) -> NeedState:
        return self.needs[need]

    # ==================== Update Steps ====================

    def decay(self) -> None:
        """Passive cost of being alive for one cycle."""
        self.needs[Need.ENERGY].variable -= self.config.energy_decay
        self.needs[Need.TEGUMENT].variable -= self.config.tegument_decay
        if self.config.integrity_decay:
            self.needs[Need.INTEGRITY].variable -= self.config.integrity_decay

    def compute_deficit(self) -> None:
        for state in self.needs.values():
            state.deficit = 1.0 - state.variable

    def compute_cues(self, integrity_cue: float) -> None:
        self.needs[Need.ENERGY].cue = self.config.energy_cue
        self.needs[Need.TEGUMENT].cue = self.config.tegument_cue
        self.needs[Need.INTEGRITY].cue = integrity_cue

    def compute_motivations(self) -> None:
        for state in self.needs.values():
            state.motivation = state.deficit + state.deficit * state.cue

    def recompute(self, integrity_cue: float) -> None:
        """
        Deficits, cues and motivations for all three needs together.

        Idempotent: reads only the current variables.
        """
        self.compute_deficit()
        self.compute_cues(integrity_cue)
        self.compute_motivations()

    # ==================== Mutations ====================

    def reward(self, need: Need, amount: float) -> None:
        """Satisfy a need (eating, grooming)."""
        self.needs[need].variable += amount

    def erode(self, need: Need, amount: float) -> None:
        self.needs[need].variable -= amount

    # ==================== Queries ====================

    def is_alive(self) -> bool:
        return all(state.variable > 0 for state in self.needs.values())

    def depleted(self) -> Tuple[Need, ...]:
        """Needs whose variable has reached the death threshold."""
        return tuple(need for need, state in self.needs.items() if state.variable <= 0)

    def motivations(self) -> Tuple[float, float, float]:
        return (
            self.needs[Need.ENERGY].motivation,
            self.needs[Need.TEGUMENT].motivation,
            self.needs[Need.INTEGRITY].motivation,
        )

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        """Plain copy of every need's four values."""
        return {
            need.value: {
                "variable": state.variable,
                "deficit": state.deficit,
                "cue": state.cue,
                "motivation": state.motivation,
            }
            for need, state in self.needs.items()
        }

    def __repr__(self) -> str:
        return (
            f"PhysiologicalState("
            f"energy={self.needs[Need.ENERGY].variable:.3f}, "
            f"tegument={self.needs[Need.TEGUMENT].variable:.3f}, "
            f"integrity={self.needs[Need.INTEGRITY].variable:.3f})"
        )
