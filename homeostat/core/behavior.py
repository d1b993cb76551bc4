"""
core/behavior.py

From need to wheels.

Each winning need owns a behavioural group:
- Energy    seek food, eat when food is reachable
- Tegument  seek a grooming spot, groom when one is reachable
- Integrity avoid whatever is close
- no winner stop

Eligibility for eating and grooming is a policy hook. Nothing in
the body can sense food or grooming spots yet, so by default
neither is ever eligible.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple
import logging

import numpy as np

from .arbitration import ArbitrationResult
from .physiology import Need

if TYPE_CHECKING:
    from .agent import HomeostaticAgent

logger = logging.getLogger(__name__)


def never(agent: HomeostaticAgent) -> bool:
    """Default eligibility predicate."""
    return False


@dataclass
class VelocityCommand:
    """Wheel speeds, each clipped to [-1, 1]."""
    left: float = 0.0
    right: float = 0.0

    def __post_init__(self):
        self.left = float(np.clip(self.left, -1.0, 1.0))
        self.right = float(np.clip(self.right, -1.0, 1.0))

    def as_tuple(self) -> Tuple[float, float]:
        return (self.left, self.right)

    @property
    def is_stop(self) -> bool:
        return self.left == 0.0 and self.right == 0.0


@dataclass
class BehaviorOutcome:
    """
    What the dispatcher decided.

    motor_pattern is played before command, each step held for its
    duration in seconds.
    """
    behavior: str
    command: VelocityCommand
    motor_pattern: List[Tuple[VelocityCommand, float]] = field(default_factory=list)
    rewarded: Optional[Need] = None


@dataclass
class BehaviorConfig:
    """
    Behavioural group parameters and policy hooks.

    groom_target defaults to ENERGY: grooming has always fed the energy
    variable. Set it to TEGUMENT to make grooming restore the tegument.
    avoid_weights is an (n_channels, 2) matrix of per-sensor
    (left, right) wheel weights; all zero until an avoidance policy
    is tuned.
    """
    approach_speed: float = 0.8
    reward_amount: float = 0.05
    groom_target: Need = Need.ENERGY
    groom_turn_speed: float = 1.0
    groom_phase_periods: float = 2.0
    avoid_range: Tuple[float, float] = (0.0, 1023.0)
    avoid_weights: Optional[np.ndarray] = None
    can_eat: Callable[[HomeostaticAgent], bool] = never
    can_groom: Callable[[HomeostaticAgent], bool] = never

    def __post_init__(self):
        if isinstance(self.groom_target, str):
            self.groom_target = Need(self.groom_target)
        if self.avoid_range[1] <= self.avoid_range[0]:
            raise ValueError(f"Invalid avoid_range: {self.avoid_range}")
        if self.avoid_weights is not None:
            self.avoid_weights = np.asarray(self.avoid_weights, dtype=np.float64)


class BehaviorDispatcher:
    """
    Maps an arbitration result to a velocity command.

    Always returns an outcome; failing to actuate it is the
    actuator's problem, not ours.
    """

    def __init__(
        self,
        config: Optional[BehaviorConfig] = None,
        period_ms: float = 100.0,
        num_channels: int = 8,
    ):
        self.config = config or BehaviorConfig()
        self.period_s = period_ms / 1000.0
        self.num_channels = num_channels

        if self.config.avoid_weights is None:
            self.avoid_weights = np.zeros((num_channels, 2))
        else:
            self.avoid_weights = self.config.avoid_weights
        if self.avoid_weights.shape != (num_channels, 2):
            raise ValueError(
                f"avoid_weights must have shape ({num_channels}, 2), "
                f"got {self.avoid_weights.shape}"
            )

    def dispatch(
        self,
        result: ArbitrationResult,
        agent: HomeostaticAgent,
    ) -> BehaviorOutcome:
        if result is ArbitrationResult.ENERGY:
            return self.energy_behavioral_group(agent)
        if result is ArbitrationResult.TEGUMENT:
            return self.tegument_behavioral_group(agent)
        if result is ArbitrationResult.INTEGRITY:
            return self.integrity_behavioral_group(agent)
        return BehaviorOutcome(behavior="stop", command=VelocityCommand(0.0, 0.0))

    # ==================== Behavioural Groups ====================

    def energy_behavioral_group(self, agent: HomeostaticAgent) -> BehaviorOutcome:
        rewarded = None
        if self.config.can_eat(agent):
            rewarded = self.eat(agent)
        return BehaviorOutcome(
            behavior="seek_food",
            command=self._approach(),
            rewarded=rewarded,
        )

    def tegument_behavioral_group(self, agent: HomeostaticAgent) -> BehaviorOutcome:
        rewarded = None
        pattern: List[Tuple[VelocityCommand, float]] = []
        if self.config.can_groom(agent):
            rewarded = self.groom(agent)
            pattern = self.groom_pattern()
        return BehaviorOutcome(
            behavior="seek_grooming_spot",
            command=self._approach(),
            motor_pattern=pattern,
            rewarded=rewarded,
        )

    def integrity_behavioral_group(self, agent: HomeostaticAgent) -> BehaviorOutcome:
        return BehaviorOutcome(
            behavior="avoid",
            command=self.avoid(agent.sensors.current),
        )

    # ==================== Behaviours ====================

    def eat(self, agent: HomeostaticAgent) -> Need:
        agent.physiology.reward(Need.ENERGY, self.config.reward_amount)
        logger.info("Eating")
        return Need.ENERGY

    def groom(self, agent: HomeostaticAgent) -> Need:
        target = self.config.groom_target
        agent.physiology.reward(target, self.config.reward_amount)
        logger.info(f"Grooming (rewarding {target.value})")
        return target

    def groom_pattern(self) -> List[Tuple[VelocityCommand, float]]:
        """Two-phase alternating-wheel rub."""
        s = self.config.groom_turn_speed
        hold = self.config.groom_phase_periods * self.period_s
        return [
            (VelocityCommand(-s, s), hold),
            (VelocityCommand(s, -s), hold),
        ]

    def avoid(self, frame: np.ndarray) -> VelocityCommand:
        """
        Braitenberg-style avoidance.

        Readings are normalized with the fixed avoid_range, weighted per
        wheel and averaged over channels.
        """
        lo, hi = self.config.avoid_range
        normalized = (np.asarray(frame, dtype=np.float64) - lo) / (hi - lo)
        left, right = normalized @ self.avoid_weights / self.num_channels
        return VelocityCommand(left, right)

    def _approach(self) -> VelocityCommand:
        speed = self.config.approach_speed
        return VelocityCommand(speed, speed)
