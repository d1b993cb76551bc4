"""
core/arbitration.py

Winner takes all.

Only a need that is strictly more urgent than every other one gets
the body. A tie is not a decision: the body stops.
"""

from __future__ import annotations
from enum import Enum
from typing import Optional

from .physiology import Need


class ArbitrationResult(Enum):
    """Outcome of one arbitration. NONE means no strict winner."""
    ENERGY = "energy"
    TEGUMENT = "tegument"
    INTEGRITY = "integrity"
    NONE = "none"

    @property
    def need(self) -> Optional[Need]:
        if self is ArbitrationResult.NONE:
            return None
        return Need(self.value)


def select(m_energy: float, m_tegument: float, m_integrity: float) -> ArbitrationResult:
    """Pick the need with the strictly greatest motivation, or NONE."""
    if m_energy > m_tegument and m_energy > m_integrity:
        return ArbitrationResult.ENERGY
    if m_tegument > m_energy and m_tegument > m_integrity:
        return ArbitrationResult.TEGUMENT
    if m_integrity > m_energy and m_integrity > m_tegument:
        return ArbitrationResult.INTEGRITY
    return ArbitrationResult.NONE
