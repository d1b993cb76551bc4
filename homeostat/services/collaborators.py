"""
homeostat/services/collaborators.py

The world outside the decision core.

Sensing, actuation, feedback and telemetry are somebody else's job.
The core talks to them through these interfaces only; real hardware
drivers and the simulated body both implement them.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence


class ActuationError(RuntimeError):
    """The actuator could not apply a velocity command."""


@dataclass
class BatteryStatus:
    """One battery telemetry reading."""
    charge_percent: float
    current_ma: float
    temperature_c: float
    voltage_mv: float
    charger_plugged: bool = False

    def to_dict(self) -> dict:
        return {
            "charge_percent": self.charge_percent,
            "current_ma": self.current_ma,
            "temperature_c": self.temperature_c,
            "voltage_mv": self.voltage_mv,
            "charger_plugged": self.charger_plugged,
        }


class ProximitySensor(ABC):
    """Source of raw proximity readings."""

    @abstractmethod
    def read_proximity(self) -> Sequence[int]:
        """Return one raw reading per proximity channel."""
        pass


class Actuator(ABC):
    """Differential-drive wheels."""

    @abstractmethod
    def set_velocity(self, left: float, right: float) -> None:
        """
        Apply wheel speeds in [-1, 1].

        Raises ActuationError if the command could not be applied.
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Bring both wheels to zero velocity."""
        pass


class FeedbackSink(ABC):
    """
    Outward signs of inner events (LEDs, sound).

    Both calls are fire-and-forget from the core's point of view.
    """

    @abstractmethod
    def signal_damage_event(self) -> None:
        pass

    @abstractmethod
    def signal_termination(self) -> None:
        pass


class Telemetry(ABC):
    """Optional read-only battery telemetry."""

    @abstractmethod
    def read_battery(self) -> BatteryStatus:
        pass
