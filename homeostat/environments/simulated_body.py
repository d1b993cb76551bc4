"""
environments/simulated_body.py

A body without hardware.

Eight proximity channels around a still robot, a pair of wheels that
remember every command, a feedback panel that counts, a battery that
slowly drains. Contacts can be scripted for a given read or left to
chance.

Inspired by:
- Hardware-in-the-loop test benches
- Khepera-style IR ring (8 channels, 10-bit readings)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging
import threading
import time

import numpy as np

from homeostat.services.collaborators import (
    ActuationError,
    Actuator,
    BatteryStatus,
    FeedbackSink,
    ProximitySensor,
    Telemetry,
)

logger = logging.getLogger(__name__)


@dataclass
class BodyConfig:
    """Configuration for the simulated body."""
    num_channels: int = 8
    baseline: float = 300.0             # Raw reading of the empty arena
    noise: float = 0.0                  # Gaussian noise on every reading
    raw_max: int = 1023                 # 10-bit IR converter
    contact_probability: float = 0.0    # Chance per read of a random contact
    contact_value: float = 900.0        # Raw reading of a touching object
    seed: Optional[int] = None


class SimulatedBody(ProximitySensor, Actuator):
    """
    Proximity ring and wheels in one simulated body.

    Every set_velocity and stop is recorded. Faults can be injected
    to exercise the actuation error path.
    """

    def __init__(self, config: Optional[BodyConfig] = None):
        self.config = config or BodyConfig()
        self.rng = np.random.default_rng(self.config.seed)

        # read index -> {channel: raw value}
        self.scripted: Dict[int, Dict[int, float]] = {}
        self.reads = 0

        self.commands: List[Tuple[float, float]] = []
        self.stop_calls = 0
        self.failures_pending = 0

    # ==================== Sensing ====================

    def script_contact(self, read_index: int, channel: int, value: float) -> None:
        """Force a raw value on a channel for one read (0-based)."""
        self.scripted.setdefault(read_index, {})[channel] = value

    def read_proximity(self) -> List[int]:
        n = self.config.num_channels
        raw = np.full(n, self.config.baseline, dtype=np.float64)

        if self.config.noise > 0:
            raw += self.rng.normal(0.0, self.config.noise, size=n)

        if self.config.contact_probability > 0 and self.rng.random() < self.config.contact_probability:
            channel = int(self.rng.integers(n))
            raw[channel] = self.config.contact_value
            logger.debug(f"Random contact on channel {channel}")

        for channel, value in self.scripted.pop(self.reads, {}).items():
            raw[channel] = value

        self.reads += 1
        return np.clip(np.round(raw), 0, self.config.raw_max).astype(int).tolist()

    # ==================== Actuation ====================

    def fail_next(self, count: int = 1) -> None:
        """Make the next `count` velocity commands fail."""
        self.failures_pending += count

    def set_velocity(self, left: float, right: float) -> None:
        if self.failures_pending > 0:
            self.failures_pending -= 1
            raise ActuationError(f"Simulated fault on set_velocity({left:.2f}, {right:.2f})")
        self.commands.append((left, right))

    def stop(self) -> None:
        self.stop_calls += 1
        self.commands.append((0.0, 0.0))

    @property
    def last_command(self) -> Optional[Tuple[float, float]]:
        return self.commands[-1] if self.commands else None


class LoggingFeedback(FeedbackSink):
    """
    Feedback panel that logs and counts.

    animation_seconds makes signal_damage_event block like a real LED
    animation would.
    """

    def __init__(self, animation_seconds: float = 0.0):
        self.animation_seconds = animation_seconds
        self._lock = threading.Lock()
        self.damage_events = 0
        self.terminations = 0

    def signal_damage_event(self) -> None:
        with self._lock:
            self.damage_events += 1
        logger.info("Damage feedback")
        if self.animation_seconds > 0:
            time.sleep(self.animation_seconds)

    def signal_termination(self) -> None:
        with self._lock:
            self.terminations += 1
        logger.info("Termination feedback")


class SimulatedBattery(Telemetry):
    """Battery that loses a little charge per reading."""

    def __init__(self, charge_percent: float = 100.0, drain_per_read: float = 0.1):
        self.charge_percent = charge_percent
        self.drain_per_read = drain_per_read

    def read_battery(self) -> BatteryStatus:
        status = BatteryStatus(
            charge_percent=self.charge_percent,
            current_ma=-250.0,
            temperature_c=28.5,
            voltage_mv=3600.0 + 6.0 * self.charge_percent,
            charger_plugged=False,
        )
        self.charge_percent = max(0.0, self.charge_percent - self.drain_per_read)
        return status
