"""
core/agent.py

An agent is a body that must keep itself going.

It owns everything it is: its needs, its senses, its sense of hurt.
Nothing lives in globals; the control loop is handed one agent and
drives it, cycle after cycle, until a need runs dry.

Inspired by:
- Ashby's homeostat
- Two-resource problem (TRP) models of action selection
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Optional, Sequence
import logging

from .damage import DamageConfig, DamageDetector, DamageSignal
from .feedback import FeedbackGuard
from .physiology import Need, PhysiologicalState, PhysiologyConfig
from .sensors import SensorConfig, SensorWindow

if TYPE_CHECKING:
    from homeostat.config import HomeostatConfig
    from homeostat.services.collaborators import FeedbackSink

logger = logging.getLogger(__name__)


class HomeostaticAgent:
    """
    The agent state passed through the control loop.

    Full update (loopstart=True):
        decay -> refresh sensors -> damage check -> deficits -> cues -> motivations
    Partial update (loopstart=False):
        deficits -> cues -> motivations, from the current variables only
    """

    def __init__(
        self,
        sensor_config: Optional[SensorConfig] = None,
        physiology_config: Optional[PhysiologyConfig] = None,
        damage_config: Optional[DamageConfig] = None,
        period_ms: float = 100.0,
        feedback: Optional[FeedbackSink] = None,
    ):
        self.sensors = SensorWindow(sensor_config)
        self.physiology = PhysiologicalState(physiology_config)
        self.detector = DamageDetector(damage_config, self.sensors.config, period_ms)
        self.feedback = feedback
        self.feedback_guard = FeedbackGuard()

        self.last_damage: Optional[DamageSignal] = None
        self.damage_events = 0

    @classmethod
    def from_config(
        cls,
        config: HomeostatConfig,
        feedback: Optional[FeedbackSink] = None,
    ) -> HomeostaticAgent:
        return cls(
            sensor_config=config.sensors,
            physiology_config=config.physiology,
            damage_config=config.damage,
            period_ms=config.controller.period_ms,
            feedback=feedback,
        )

    # ==================== Core Loop ====================

    def prime(self, raw: Sequence[float]) -> None:
        """
        Seed both sensor frames with a first reading.

        Without this the first cycle would compare against an empty
        frame and read the whole world as a sudden blow.
        """
        self.sensors.refresh(raw)
        self.sensors.snapshot_previous()
        self.update_vars(loopstart=False)

    def update_vars(
        self,
        loopstart: bool,
        raw: Optional[Sequence[float]] = None,
    ) -> Optional[DamageSignal]:
        """
        Update the physiological state.

        Returns the damage signal on a full update, None otherwise.
        """
        signal = None
        if loopstart:
            if raw is None:
                raise ValueError("A full update needs a proximity reading")
            self.physiology.decay()
            self.sensors.refresh(raw)
            signal = self.check_damage()
        self.physiology.recompute(self.sensors.mean_normalized())
        return signal

    def check_damage(self) -> DamageSignal:
        """Run both damage heuristics against the two sensor frames."""
        signal = self.detector.check(
            self.sensors.current,
            self.sensors.previous,
            self.induce_damage,
        )
        self.last_damage = signal
        return signal

    def induce_damage(self, magnitude: float) -> None:
        """
        Erode integrity, refresh motivations, ask for feedback.

        Feedback is skipped if the previous one is still running.
        """
        self.physiology.erode(Need.INTEGRITY, magnitude * self.detector.config.damage_scale)
        self.damage_events += 1
        self.update_vars(loopstart=False)

        if self.feedback is not None:
            self.feedback_guard.try_spawn(self.feedback.signal_damage_event)

    def end_cycle(self) -> None:
        """Archive the sensor frame for the next cycle's comparison."""
        self.sensors.snapshot_previous()

    # ==================== Utilities ====================

    def is_alive(self) -> bool:
        return self.physiology.is_alive()

    def __repr__(self) -> str:
        return (
            f"HomeostaticAgent({self.physiology!r}, "
            f"damage_events={self.damage_events})"
        )
