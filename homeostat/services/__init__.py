"""
homeostat/services/

The control loop and the collaborators it drives.

Architecture:
- Collaborators: abstract sensing, actuation, feedback and telemetry
- Controller: the fixed-period loop that senses, arbitrates and acts

Hardware drivers implement the collaborator interfaces; the simulated
body in homeostat.environments implements them for tests and the CLI.
"""

from .collaborators import (
    ActuationError,
    Actuator,
    BatteryStatus,
    FeedbackSink,
    ProximitySensor,
    Telemetry,
)
from .controller import ControlLoop, LoopState, run_controller

__all__ = [
    "ActuationError",
    "Actuator",
    "BatteryStatus",
    "FeedbackSink",
    "ProximitySensor",
    "Telemetry",
    "ControlLoop",
    "LoopState",
    "run_controller",
]
