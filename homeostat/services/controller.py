"""
homeostat/services/controller.py

The control loop.

One fixed-period tick, over and over:
1. Refresh the physiological state (decay, sense, detect damage)
2. Arbitrate among motivations (winner takes all)
3. Dispatch the winning behavioural group
4. Emit the velocity command
5. Archive the sensor frame
6. Sleep one period

The loop ends when any need runs dry, when max_cycles is reached,
or when stop() is called. Every exit leaves the wheels at zero.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from enum import Enum
from typing import Any, Callable

from homeostat.config import ControllerConfig, HomeostatConfig, load_config
from homeostat.core.agent import HomeostaticAgent
from homeostat.core.arbitration import select
from homeostat.core.behavior import BehaviorDispatcher, VelocityCommand
from homeostat.observations.report import CycleRecord, format_report

from .collaborators import ActuationError, Actuator, FeedbackSink, ProximitySensor

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """Lifecycle of the control loop."""
    IDLE = "idle"
    RUNNING = "running"
    TERMINATED = "terminated"


class ControlLoop:
    """
    Fixed-period homeostatic control loop.

    Owns the agent; the sensing, actuation and feedback collaborators
    are handed in.
    """

    def __init__(
        self,
        sensor: ProximitySensor,
        actuator: Actuator,
        feedback: FeedbackSink,
        config: HomeostatConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or HomeostatConfig()
        self.sensor = sensor
        self.actuator = actuator
        self.feedback = feedback
        self._sleep = sleep

        self.agent = HomeostaticAgent.from_config(self.config, feedback=feedback)
        self.dispatcher = BehaviorDispatcher(
            self.config.behavior,
            period_ms=self.config.controller.period_ms,
            num_channels=self.config.sensors.num_channels,
        )

        # State tracking
        self.state = LoopState.IDLE
        self.cycle = 0
        self.actuation_faults = 0
        self.history: deque[CycleRecord] = deque(
            maxlen=self.config.controller.history_limit
        )
        self.termination_reason: str | None = None

        self.running = False
        self.start_time: float | None = None
        self._halted = False

        logger.info(
            f"Control loop initialized: period={self.config.controller.period_ms}ms, "
            f"neighbor_model={self.config.damage.neighbor_model}"
        )

    @property
    def controller_config(self) -> ControllerConfig:
        return self.config.controller

    # ==================== Cycle ====================

    def tick(self) -> CycleRecord:
        """
        Execute one control cycle.

        Returns the cycle's diagnostic record.
        """
        self.cycle += 1

        raw = self.sensor.read_proximity()
        self.agent.update_vars(loopstart=True, raw=raw)

        result = select(*self.agent.physiology.motivations())
        outcome = self.dispatcher.dispatch(result, self.agent)

        for command, duration in outcome.motor_pattern:
            self._emit(command)
            self._sleep(duration)
        fault = self._emit(outcome.command)

        record = CycleRecord.from_agent(
            self.cycle,
            self.agent,
            result,
            outcome.behavior,
            outcome.command,
            actuation_fault=fault,
        )
        self._record(record)

        self.agent.end_cycle()
        self._sleep(self.controller_config.period_ms / 1000.0)
        return record

    def _emit(self, command: VelocityCommand) -> str | None:
        """Send a command to the wheels. Faults are counted, never raised."""
        try:
            self.actuator.set_velocity(command.left, command.right)
            return None
        except ActuationError as e:
            self.actuation_faults += 1
            logger.warning(f"Actuation fault on cycle {self.cycle}: {e}")
            return str(e)

    def _record(self, record: CycleRecord) -> None:
        if self.controller_config.record_history:
            self.history.append(record)

        logger.debug(record.to_json())

        interval = self.controller_config.report_interval
        if interval and self.cycle % interval == 0:
            logger.info("\n" + format_report(record, self.agent))

    # ==================== Lifecycle ====================

    def run(self, max_cycles: int | None = None) -> dict[str, Any]:
        """
        Run until a need runs dry, max_cycles is reached, or stop().

        Returns final statistics.
        """
        if max_cycles is None:
            max_cycles = self.controller_config.max_cycles
        self.running = True
        self.state = LoopState.RUNNING
        self.start_time = time.time()
        self._halted = False
        reason = "stopped"

        logger.info("Starting control loop")

        try:
            self.agent.prime(self.sensor.read_proximity())

            while self.running:
                if not self.agent.is_alive():
                    reason = "homeostatic_death"
                    break
                if max_cycles is not None and self.cycle >= max_cycles:
                    reason = "max_cycles"
                    break
                self.tick()

        except KeyboardInterrupt:
            logger.info("Control loop interrupted by user")

        finally:
            self.running = False
            self.state = LoopState.TERMINATED
            self.halt()

        # A depleted need wins over whatever else ended the loop
        if not self.agent.is_alive():
            reason = "homeostatic_death"
        self.termination_reason = reason
        if reason == "homeostatic_death":
            depleted = [need.value for need in self.agent.physiology.depleted()]
            logger.info(f"Homeostatic death after {self.cycle} cycles: {depleted} depleted")
            self.feedback.signal_termination()

        summary = self.get_status()
        logger.info(
            f"Control loop terminated ({reason}): {self.cycle} cycles, "
            f"{self.actuation_faults} actuation faults"
        )
        return summary

    def halt(self) -> None:
        """Stop the wheels once, whatever happens."""
        if self._halted:
            return
        self._halted = True
        try:
            self.actuator.stop()
        except ActuationError as e:
            self.actuation_faults += 1
            logger.warning(f"Failed to stop actuator: {e}")

    def stop(self) -> None:
        """Stop the loop gracefully after the current cycle."""
        self.running = False
        logger.info("Stopping control loop...")

    def get_status(self) -> dict[str, Any]:
        """Current loop status."""
        elapsed = 0.0
        if self.start_time:
            elapsed = time.time() - self.start_time

        return {
            "state": self.state.value,
            "cycles": self.cycle,
            "reason": self.termination_reason,
            "variables": {
                need: values["variable"]
                for need, values in self.agent.physiology.snapshot().items()
            },
            "damage_events": self.agent.damage_events,
            "feedback_dropped": self.agent.feedback_guard.dropped,
            "actuation_faults": self.actuation_faults,
            "elapsed_time": elapsed,
        }


def run_controller(config: HomeostatConfig | None = None) -> None:
    """
    Run the control loop on the simulated body.

    This is the entry point for the homeostat-run command.
    """
    import argparse
    import signal

    from homeostat.environments.simulated_body import (
        BodyConfig,
        LoggingFeedback,
        SimulatedBattery,
        SimulatedBody,
    )

    parser = argparse.ArgumentParser(description="Homeostatic control loop")
    parser.add_argument("--config", default=None, help="YAML configuration file")
    parser.add_argument("--period-ms", type=float, default=None)
    parser.add_argument("--max-cycles", type=int, default=None)
    parser.add_argument("--neighbor-model", default=None, choices=["symmetric", "legacy"])
    parser.add_argument("--contact-probability", type=float, default=0.05)
    parser.add_argument("--noise", type=float, default=2.0)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--animation-seconds", type=float, default=0.8)
    parser.add_argument("--log-level", default="INFO")

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if config is None:
        config = load_config(args.config) if args.config else HomeostatConfig()
    if args.period_ms is not None:
        config.controller.period_ms = args.period_ms
    if args.max_cycles is not None:
        config.controller.max_cycles = args.max_cycles
    if args.neighbor_model is not None:
        config.damage.neighbor_model = args.neighbor_model

    body = SimulatedBody(BodyConfig(
        num_channels=config.sensors.num_channels,
        noise=args.noise,
        contact_probability=args.contact_probability,
        seed=args.seed,
    ))
    feedback = LoggingFeedback(animation_seconds=args.animation_seconds)

    battery = SimulatedBattery().read_battery()
    logger.info(
        f"Battery charge: {battery.charge_percent:.0f}% | "
        f"current: {battery.current_ma:.0f} mA | "
        f"temperature: {battery.temperature_c:.1f} C | "
        f"voltage: {battery.voltage_mv:.0f} mV | "
        f"charger: {'plugged' if battery.charger_plugged else 'unplugged'}"
    )

    loop = ControlLoop(body, body, feedback, config)

    # Handle signals for graceful shutdown
    def signal_handler(sig, frame):
        logger.info("Received shutdown signal")
        loop.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    summary = loop.run()
    logger.info(f"Final variables: {summary['variables']}")


if __name__ == "__main__":
    run_controller()
