"""
Tests for core/behavior.py

Behavioural groups, policy hooks, and velocity commands.
"""

import numpy as np
import pytest

from homeostat.core.agent import HomeostaticAgent
from homeostat.core.arbitration import ArbitrationResult
from homeostat.core.behavior import (
    BehaviorConfig,
    BehaviorDispatcher,
    VelocityCommand,
)
from homeostat.core.physiology import Need


def always(agent):
    return True


@pytest.fixture
def agent():
    agent = HomeostaticAgent()
    agent.prime([300] * 8)
    return agent


class TestVelocityCommand:

    def test_defaults_to_stop(self):
        """Default command is a stop."""
        command = VelocityCommand()
        assert command.as_tuple() == (0.0, 0.0)
        assert command.is_stop

    def test_clipped_to_unit_range(self):
        """Wheel speeds are clipped to [-1, 1]."""
        command = VelocityCommand(2.5, -3.0)
        assert command.as_tuple() == (1.0, -1.0)


class TestBehaviorConfig:

    def test_default_config(self):
        """Default behaviour parameters and hooks."""
        config = BehaviorConfig()
        assert config.approach_speed == 0.8
        assert config.reward_amount == 0.05
        assert config.groom_target is Need.ENERGY
        assert config.avoid_range == (0.0, 1023.0)
        assert config.can_eat(None) is False
        assert config.can_groom(None) is False

    def test_groom_target_from_string(self):
        """Groom target accepts a need name."""
        assert BehaviorConfig(groom_target="tegument").groom_target is Need.TEGUMENT

    def test_invalid_avoid_range(self):
        """Empty avoid range is rejected."""
        with pytest.raises(ValueError):
            BehaviorConfig(avoid_range=(10.0, 10.0))


class TestBehaviorDispatcher:
    """Tests for BehaviorDispatcher."""

    def test_energy_seeks_food(self, agent):
        """Energy wins: approach, no reward."""
        outcome = BehaviorDispatcher().dispatch(ArbitrationResult.ENERGY, agent)
        assert outcome.behavior == "seek_food"
        assert outcome.command.as_tuple() == (0.8, 0.8)
        assert outcome.rewarded is None
        assert agent.physiology[Need.ENERGY].variable == 1.0

    def test_eating_when_eligible(self, agent):
        """Eating rewards energy when food is reachable."""
        agent.physiology[Need.ENERGY].variable = 0.5
        dispatcher = BehaviorDispatcher(BehaviorConfig(can_eat=always))
        outcome = dispatcher.dispatch(ArbitrationResult.ENERGY, agent)
        assert outcome.rewarded is Need.ENERGY
        assert outcome.command.as_tuple() == (0.8, 0.8)
        assert agent.physiology[Need.ENERGY].variable == pytest.approx(0.55)

    def test_tegument_seeks_grooming_spot(self, agent):
        """Tegument wins: approach, no grooming pattern."""
        outcome = BehaviorDispatcher().dispatch(ArbitrationResult.TEGUMENT, agent)
        assert outcome.behavior == "seek_grooming_spot"
        assert outcome.command.as_tuple() == (0.8, 0.8)
        assert outcome.motor_pattern == []

    def test_grooming_feeds_energy_by_default(self, agent):
        """Grooming rewards energy and plays the rub pattern."""
        agent.physiology[Need.ENERGY].variable = 0.5
        agent.physiology[Need.TEGUMENT].variable = 0.5
        dispatcher = BehaviorDispatcher(BehaviorConfig(can_groom=always), period_ms=100.0)
        outcome = dispatcher.dispatch(ArbitrationResult.TEGUMENT, agent)

        assert outcome.rewarded is Need.ENERGY
        assert agent.physiology[Need.ENERGY].variable == pytest.approx(0.55)
        assert agent.physiology[Need.TEGUMENT].variable == 0.5

        steps = [(command.as_tuple(), duration) for command, duration in outcome.motor_pattern]
        assert steps == [((-1.0, 1.0), pytest.approx(0.2)), ((1.0, -1.0), pytest.approx(0.2))]

    def test_grooming_target_configurable(self, agent):
        """Grooming can restore tegument instead."""
        agent.physiology[Need.TEGUMENT].variable = 0.5
        config = BehaviorConfig(can_groom=always, groom_target=Need.TEGUMENT)
        BehaviorDispatcher(config).dispatch(ArbitrationResult.TEGUMENT, agent)
        assert agent.physiology[Need.TEGUMENT].variable == pytest.approx(0.55)
        assert agent.physiology[Need.ENERGY].variable == 1.0

    def test_integrity_avoids_with_zero_weights(self, agent):
        """Untuned avoidance stops the wheels."""
        outcome = BehaviorDispatcher().dispatch(ArbitrationResult.INTEGRITY, agent)
        assert outcome.behavior == "avoid"
        assert outcome.command.is_stop

    def test_avoidance_weights(self, agent):
        """Avoidance weighs normalized readings per wheel."""
        weights = np.zeros((8, 2))
        weights[:, 0] = 1.0
        dispatcher = BehaviorDispatcher(BehaviorConfig(avoid_weights=weights))
        command = dispatcher.dispatch(ArbitrationResult.INTEGRITY, agent).command
        assert command.left == pytest.approx(110.0 / 1023.0)
        assert command.right == 0.0

    def test_avoidance_does_not_accumulate(self, agent):
        """Avoidance is computed fresh each call."""
        weights = np.ones((8, 2))
        dispatcher = BehaviorDispatcher(BehaviorConfig(avoid_weights=weights))
        first = dispatcher.avoid(agent.sensors.current)
        second = dispatcher.avoid(agent.sensors.current)
        assert first == second

    def test_wrong_weight_shape(self):
        """Weight matrix must match the channel count."""
        with pytest.raises(ValueError):
            BehaviorDispatcher(BehaviorConfig(avoid_weights=np.zeros((7, 2))))

    def test_no_winner_stops(self, agent):
        """No winner means stop."""
        outcome = BehaviorDispatcher().dispatch(ArbitrationResult.NONE, agent)
        assert outcome.behavior == "stop"
        assert outcome.command.is_stop
