"""
Tests for environments/simulated_body.py

The hardware-free body used by the CLI and the loop tests.
"""

import pytest

from homeostat.environments.simulated_body import (
    BodyConfig,
    LoggingFeedback,
    SimulatedBattery,
    SimulatedBody,
)
from homeostat.services.collaborators import ActuationError


class TestBodyConfig:
    """Tests for BodyConfig dataclass."""

    def test_default_config(self):
        """Default body is a quiet 8-channel ring."""
        config = BodyConfig()
        assert config.num_channels == 8
        assert config.baseline == 300.0
        assert config.noise == 0.0
        assert config.contact_probability == 0.0


class TestSimulatedBody:
    """Tests for SimulatedBody."""

    def test_still_world(self):
        """Without noise every read is the baseline."""
        body = SimulatedBody()
        assert body.read_proximity() == [300] * 8
        assert body.read_proximity() == [300] * 8
        assert body.reads == 2

    def test_scripted_contact_lasts_one_read(self):
        """Scripted contact applies to one read only."""
        body = SimulatedBody()
        body.script_contact(1, 3, 500)
        assert body.read_proximity()[3] == 300
        assert body.read_proximity()[3] == 500
        assert body.read_proximity()[3] == 300

    def test_readings_clipped(self):
        """Readings are clipped to the 10-bit range."""
        body = SimulatedBody()
        body.script_contact(0, 0, 5000)
        body.script_contact(0, 1, -20)
        raw = body.read_proximity()
        assert raw[0] == 1023
        assert raw[1] == 0

    def test_seeded_noise_is_reproducible(self):
        """Same seed, same readings."""
        first = SimulatedBody(BodyConfig(noise=5.0, seed=7))
        second = SimulatedBody(BodyConfig(noise=5.0, seed=7))
        assert first.read_proximity() == second.read_proximity()

    def test_certain_contact(self):
        """Certain contact touches exactly one channel."""
        body = SimulatedBody(BodyConfig(contact_probability=1.0, seed=3))
        raw = body.read_proximity()
        assert raw.count(900) == 1

    def test_commands_recorded(self):
        """Velocity and stop commands are recorded."""
        body = SimulatedBody()
        body.set_velocity(0.8, 0.8)
        body.stop()
        assert body.commands == [(0.8, 0.8), (0.0, 0.0)]
        assert body.stop_calls == 1
        assert body.last_command == (0.0, 0.0)

    def test_injected_faults(self):
        """Injected faults raise ActuationError once each."""
        body = SimulatedBody()
        body.fail_next()
        with pytest.raises(ActuationError):
            body.set_velocity(0.5, 0.5)
        body.set_velocity(0.5, 0.5)
        assert body.commands == [(0.5, 0.5)]

    def test_no_command_yet(self):
        """No command before the first one."""
        assert SimulatedBody().last_command is None


class TestLoggingFeedback:

    def test_counts(self):
        """Feedback calls are counted."""
        feedback = LoggingFeedback()
        feedback.signal_damage_event()
        feedback.signal_damage_event()
        feedback.signal_termination()
        assert feedback.damage_events == 2
        assert feedback.terminations == 1


class TestSimulatedBattery:

    def test_drains(self):
        """Each read drains the battery."""
        battery = SimulatedBattery(charge_percent=50.0, drain_per_read=1.0)
        assert battery.read_battery().charge_percent == 50.0
        assert battery.read_battery().charge_percent == 49.0

    def test_never_negative(self):
        """Charge never drops below zero."""
        battery = SimulatedBattery(charge_percent=0.5, drain_per_read=1.0)
        battery.read_battery()
        assert battery.read_battery().charge_percent == 0.0
