"""
core/damage.py

Pain without nociceptors.

The body has no touch sensors, only proximity. Damage is inferred
from how the proximity field changes:

1. Speed: a channel whose reading jumps faster than a threshold
   means something hit us.
2. Spread: a reading that hands over from one channel to its neighbour
   means something is scraping around the body. Neighbouring spreads
   reinforce each other.

Both heuristics run every cycle, whatever the other one found.
Speeds are expressed in scaled units per millisecond of control period.

Inspired by:
- Looming detection in locusts (LGMD)
- Nociceptive sensitization
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Optional
import logging
import math

import numpy as np

from .sensors import SensorConfig

logger = logging.getLogger(__name__)

NEIGHBOR_MODELS = ("symmetric", "legacy")


@dataclass
class DamageConfig:
    """
    Thresholds for both damage heuristics.

    neighbor_model:
        "symmetric"  a spread needs both channels of a pair to move and the
                     reading to hand over in either direction; cleared
                     every cycle, so a static scene never hurts.
        "legacy"     compares current[i] with previous[i-1] for i in 1..6
                     only, circular speeds persist across cycles, and all
                     seven slots are induced every cycle, zero or not.
    """
    body_radius: float = 6.0                 # cm
    change_ratio: float = 0.05               # of the sensor span
    mean_speed_threshold: float = 0.05 / 8   # normalized mean speed
    channel_speed_threshold: float = 0.05
    spread_tolerance: float = 0.5
    damage_scale: float = 0.01               # variable lost per unit magnitude
    neighbor_model: str = "symmetric"

    def __post_init__(self):
        if self.neighbor_model not in NEIGHBOR_MODELS:
            raise ValueError(
                f"Unknown neighbor model: {self.neighbor_model} "
                f"(expected one of {NEIGHBOR_MODELS})"
            )


@dataclass
class DamageSignal:
    """What one damage check found."""
    speed: np.ndarray                 # (channels,)
    circ_speed: np.ndarray            # (channels - 1,)
    speed_damage: bool = False
    spread_damage: bool = False
    magnitude: float = 0.0            # Sum of magnitudes induced this check
    events: list = field(default_factory=list)

    @property
    def damaged(self) -> bool:
        return self.speed_damage or self.spread_damage


class DamageDetector:
    """
    Temporal (speed) and spatial (spread) damage heuristics.

    Keeps the smoothed speed table and the circular speed table
    between cycles. Damage is handed to an induce callback with its
    magnitude; what that does to the body is the caller's business.
    """

    def __init__(
        self,
        config: Optional[DamageConfig] = None,
        sensor_config: Optional[SensorConfig] = None,
        period_ms: float = 100.0,
    ):
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        self.config = config or DamageConfig()
        self.sensor_config = sensor_config or SensorConfig()
        self.period = float(period_ms)

        n = self.sensor_config.num_channels
        self.speed = np.zeros(n, dtype=np.float64)
        self.circ_speed = np.zeros(n - 1, dtype=np.float64)

    @property
    def circ_step(self) -> float:
        """Speed of a stimulus travelling half-way around the body in one period."""
        return math.pi * self.config.body_radius / self.period

    @property
    def change_threshold(self) -> float:
        return self.config.change_ratio * self.sensor_config.span

    # ==================== Heuristics ====================

    def speed_damage(
        self,
        current: np.ndarray,
        previous: np.ndarray,
        induce: Callable[[float], None],
    ) -> bool:
        """
        Temporal heuristic: sudden per-channel changes.

        The speed of a moving channel is the mean of its previous speed
        and the new one; a still channel resets to zero.
        """
        diff = current - previous
        moving = np.abs(diff) > self.change_threshold
        self.speed = np.where(moving, (self.speed + diff / self.period) / 2.0, 0.0)

        max_speed = self.sensor_config.max_dist / self.period
        mean = float(self.speed.mean()) / max_speed
        if mean <= self.config.mean_speed_threshold:
            return False

        for i in np.flatnonzero(self.speed > self.config.channel_speed_threshold):
            induce(float(self.speed[i]))
        return True

    def circ_damage(
        self,
        current: np.ndarray,
        previous: np.ndarray,
        induce: Callable[[float], None],
    ) -> bool:
        """
        Spatial heuristic: readings spreading around the body.

        Adjacent slots with similar circular speeds are doubled in
        place, left to right, so a spreading contact grows louder.
        """
        if self.config.neighbor_model == "legacy":
            self._legacy_spread(current, previous)
        else:
            self._symmetric_spread(current, previous)

        tolerance = self.config.spread_tolerance
        circ = self.circ_speed
        for i in range(1, len(circ)):
            if abs(circ[i] - circ[i - 1]) < tolerance * circ[i]:
                circ[i - 1] *= 2
                circ[i] *= 2

        # Legacy induces every slot, zeros included, each one asking for feedback.
        legacy = self.config.neighbor_model == "legacy"
        induced = False
        for magnitude in circ:
            if magnitude > 0:
                induced = True
            if magnitude > 0 or legacy:
                induce(float(magnitude))
        return induced

    def _legacy_spread(self, current: np.ndarray, previous: np.ndarray) -> None:
        # Channel 0 is never a target and the last channel never a source.
        tolerance = self.config.spread_tolerance
        for i in range(1, len(self.circ_speed)):
            if abs(current[i] - previous[i - 1]) < tolerance * current[i]:
                self.circ_speed[i] = self.circ_step

    def _symmetric_spread(self, current: np.ndarray, previous: np.ndarray) -> None:
        tolerance = self.config.spread_tolerance
        moved = np.abs(current - previous) > self.change_threshold
        self.circ_speed[:] = 0.0
        for k in range(len(self.circ_speed)):
            if not (moved[k] and moved[k + 1]):
                continue
            forward = abs(current[k + 1] - previous[k]) < tolerance * current[k + 1]
            backward = abs(current[k] - previous[k + 1]) < tolerance * current[k]
            if forward or backward:
                self.circ_speed[k] = self.circ_step

    # ==================== Combined Check ====================

    def check(
        self,
        current: np.ndarray,
        previous: np.ndarray,
        induce: Callable[[float], None],
    ) -> DamageSignal:
        """
        Run both heuristics and report what they found.

        The spread heuristic runs first; neither short-circuits the other.
        """
        events = []

        def record(magnitude: float) -> None:
            events.append(magnitude)
            induce(magnitude)

        spread = self.circ_damage(current, previous, record)
        speed = self.speed_damage(current, previous, record)

        signal = DamageSignal(
            speed=self.speed.copy(),
            circ_speed=self.circ_speed.copy(),
            speed_damage=speed,
            spread_damage=spread,
            magnitude=float(sum(events)),
            events=events,
        )
        if signal.damaged:
            logger.debug(
                f"Damage detected: speed={speed}, spread={spread}, "
                f"magnitude={signal.magnitude:.4f}"
            )
        return signal

    def __repr__(self) -> str:
        return (
            f"DamageDetector(model={self.config.neighbor_model}, "
            f"speed={np.round(self.speed, 3).tolist()}, "
            f"circ_speed={np.round(self.circ_speed, 3).tolist()})"
        )
