"""
Core components of the homeostatic agent.

- sensors: Proximity frames (current and previous)
- damage: Speed and spread damage heuristics
- feedback: One damage feedback task at a time
- physiology: Needs, deficits, cues, motivations
- arbitration: Winner-take-all selection
- behavior: Behavioural groups and velocity commands
- agent: The HomeostaticAgent that owns all of the above
"""

from .agent import HomeostaticAgent
from .arbitration import ArbitrationResult, select
from .behavior import BehaviorConfig, BehaviorDispatcher, BehaviorOutcome, VelocityCommand
from .damage import DamageConfig, DamageDetector, DamageSignal
from .feedback import FeedbackGuard
from .physiology import Need, NeedState, PhysiologicalState, PhysiologyConfig
from .sensors import SensorConfig, SensorWindow

__all__ = [
    "HomeostaticAgent",
    "ArbitrationResult",
    "select",
    "BehaviorConfig",
    "BehaviorDispatcher",
    "BehaviorOutcome",
    "VelocityCommand",
    "DamageConfig",
    "DamageDetector",
    "DamageSignal",
    "FeedbackGuard",
    "Need",
    "NeedState",
    "PhysiologicalState",
    "PhysiologyConfig",
    "SensorConfig",
    "SensorWindow",
]
