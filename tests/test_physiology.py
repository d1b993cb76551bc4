"""
Tests for core/physiology.py and core/arbitration.py

Needs, deficits, cues, motivations, and winner-take-all.
"""

import pytest

from homeostat.core.arbitration import ArbitrationResult, select
from homeostat.core.physiology import (
    Need,
    NeedState,
    PhysiologicalState,
    PhysiologyConfig,
)


class TestPhysiologyConfig:
    """Tests for PhysiologyConfig dataclass."""

    def test_default_config(self):
        """Default decay rates and cues."""
        config = PhysiologyConfig()
        assert config.energy_decay == 0.004
        assert config.tegument_decay == 0.0015
        assert config.integrity_decay == 0.0
        assert config.energy_cue == 0.06
        assert config.tegument_cue == 0.055


class TestPhysiologicalState:
    """Tests for the three-need state."""

    def test_all_needs_start_full(self):
        """Every variable starts at 1.0."""
        state = PhysiologicalState()
        for need in Need:
            assert state[need].variable == 1.0

    def test_decay(self):
        """One decay step costs energy and tegument, not integrity."""
        state = PhysiologicalState()
        state.decay()
        assert state[Need.ENERGY].variable == pytest.approx(0.996)
        assert state[Need.TEGUMENT].variable == pytest.approx(0.9985)
        assert state[Need.INTEGRITY].variable == 1.0

    @pytest.mark.parametrize("variable", [1.0, 0.5, 0.0, -0.25, 1.5])
    def test_deficit_unclamped(self, variable):
        """Deficit is exactly 1 - variable."""
        state = PhysiologicalState()
        for need in Need:
            state[need].variable = variable
        state.compute_deficit()
        for need in Need:
            assert state[need].deficit == 1.0 - variable

    def test_deficit_may_exceed_one(self):
        """A negative variable gives a deficit above one."""
        state = PhysiologicalState()
        state[Need.ENERGY].variable = -0.5
        state.compute_deficit()
        assert state[Need.ENERGY].deficit == pytest.approx(1.5)

    def test_cues(self):
        """Constant cues for energy and tegument, given cue for integrity."""
        state = PhysiologicalState()
        state.compute_cues(integrity_cue=0.3)
        assert state[Need.ENERGY].cue == 0.06
        assert state[Need.TEGUMENT].cue == 0.055
        assert state[Need.INTEGRITY].cue == 0.3

    def test_motivation_formula(self):
        """Motivation is deficit + deficit * cue."""
        state = PhysiologicalState()
        state[Need.ENERGY].variable = 0.8
        state.recompute(integrity_cue=0.5)
        energy = state[Need.ENERGY]
        assert energy.motivation == pytest.approx(0.2 + 0.2 * 0.06)

    def test_recompute_is_idempotent(self):
        """Recomputing twice changes nothing."""
        state = PhysiologicalState()
        state[Need.TEGUMENT].variable = 0.7
        state.recompute(0.2)
        first = state.snapshot()
        state.recompute(0.2)
        assert state.snapshot() == first

    def test_reward(self):
        """Reward raises the variable."""
        state = PhysiologicalState()
        state[Need.ENERGY].variable = 0.5
        state.reward(Need.ENERGY, 0.05)
        assert state[Need.ENERGY].variable == pytest.approx(0.55)

    def test_is_alive(self):
        """Any variable at zero means death."""
        state = PhysiologicalState()
        assert state.is_alive()
        state[Need.TEGUMENT].variable = 0.0
        assert not state.is_alive()
        assert state.depleted() == (Need.TEGUMENT,)

    def test_motivations_order(self):
        """Motivations come back in energy, tegument, integrity order."""
        state = PhysiologicalState()
        state.needs[Need.ENERGY] = NeedState(motivation=3.0)
        state.needs[Need.TEGUMENT] = NeedState(motivation=2.0)
        state.needs[Need.INTEGRITY] = NeedState(motivation=1.0)
        assert state.motivations() == (3.0, 2.0, 1.0)


class TestSelect:
    """Winner-take-all arbitration."""

    @pytest.mark.parametrize("motivations,expected", [
        ((2, 1, 1), ArbitrationResult.ENERGY),
        ((1, 2, 1), ArbitrationResult.TEGUMENT),
        ((1, 1, 2), ArbitrationResult.INTEGRITY),
        ((0.3, 0.2, 0.1), ArbitrationResult.ENERGY),
    ])
    def test_strict_winner(self, motivations, expected):
        """The strictly greatest motivation wins."""
        assert select(*motivations) is expected

    @pytest.mark.parametrize("motivations", [
        (1, 1, 1),
        (2, 2, 1),
        (1, 2, 2),
        (2, 1, 2),
        (0, 0, 0),
    ])
    def test_tie_for_max_is_none(self, motivations):
        """A tie for the maximum yields no winner."""
        assert select(*motivations) is ArbitrationResult.NONE

    def test_tie_below_max_still_wins(self):
        """Ties among the losers do not matter."""
        assert select(0.5, 0.1, 0.1) is ArbitrationResult.ENERGY

    def test_result_maps_to_need(self):
        """Each result names its need; NONE names none."""
        assert ArbitrationResult.ENERGY.need is Need.ENERGY
        assert ArbitrationResult.INTEGRITY.need is Need.INTEGRITY
        assert ArbitrationResult.NONE.need is None
