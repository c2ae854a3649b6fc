"""
Tests for victory evaluation.

Tests:
- Winner determination by score
- Clinician diagnostic success
- Patient conditions and their precedence
- Resource depletion
- Score components
"""

import pytest

from ..cases import clue_library
from ..engine_core.state import Clue, LogKind, Role
from ..engine_core.victory import DRAW, VictoryEvaluator, determine_winner
from .conftest import FixedRandom, give


def add_clues(state, count):
    for template in clue_library()["physical_exam"] + clue_library()["history"]:
        if len(state.discovered_clues) >= count:
            return
        state.discovered_clues.append(Clue(
            id=template.id,
            category=template.category,
            description=template.description,
            reliability=template.reliability,
            confidence=template.reliability,
            discovered_turn=1,
        ))


def log_teaching_moments(state, count, actor=Role.CLINICIAN, prompted_by=None):
    for i in range(count):
        state.append_log(actor, LogKind.CARD_PLAYED, {
            "card_type": "communication",
            "educational_impact": {"teaching_moment": f"moment {i}", "prompted_by": prompted_by},
        })


@pytest.fixture
def evaluator(config):
    return VictoryEvaluator(config)


class TestDetermineWinner:
    """Score comparison at the turn limit."""

    def test_higher_score_wins(self):
        assert determine_winner(60, 40) == "clinician"
        assert determine_winner(40, 60) == "patient"

    def test_tie_is_draw(self):
        assert determine_winner(50, 50) == DRAW


class TestClinicianVictory:
    """Diagnostic success needs both confidence and clues."""

    def test_diagnostic_success(self, blank_state, evaluator):
        blank_state.adjust(Role.CLINICIAN, "diagnostic_confidence", 85)
        add_clues(blank_state, 5)

        progress = evaluator.evaluate(blank_state)

        assert progress.game_over
        assert progress.winner == "clinician"
        assert progress.reason == "diagnostic_success"
        assert progress.conditions["diagnostic_success"].achieved

    def test_confidence_without_clues(self, blank_state, evaluator):
        """High confidence alone is not enough."""
        blank_state.adjust(Role.CLINICIAN, "diagnostic_confidence", 100)
        add_clues(blank_state, 4)

        progress = evaluator.evaluate(blank_state)

        assert not progress.game_over
        assert progress.conditions["diagnostic_success"].progress == pytest.approx(80.0)

    def test_clues_without_confidence(self, blank_state, evaluator):
        blank_state.adjust(Role.CLINICIAN, "diagnostic_confidence", 84)
        add_clues(blank_state, 6)
        assert not evaluator.evaluate(blank_state).game_over


class TestPatientVictory:
    """Patient conditions reward good teaching behavior."""

    def test_educational_catalyst(self, blank_state, evaluator):
        """Three patient-prompted teaching moments end the match for the patient."""
        log_teaching_moments(blank_state, 3, prompted_by="patient")

        progress = evaluator.evaluate(blank_state)

        assert progress.game_over
        assert progress.winner == "patient"
        assert progress.reason == "educational_catalyst"

    def test_patient_condition_beats_diagnosis(self, blank_state, evaluator):
        """A patient condition is checked before the clinician's."""
        log_teaching_moments(blank_state, 3, prompted_by="patient")
        blank_state.adjust(Role.CLINICIAN, "diagnostic_confidence", 90)
        add_clues(blank_state, 5)

        progress = evaluator.evaluate(blank_state)

        assert progress.winner == "patient"

    def test_clinician_teaching_moments_do_not_end_match(self, blank_state, evaluator):
        """Moments the clinician sets up alone raise their learning score only."""
        log_teaching_moments(blank_state, 4)

        progress = evaluator.evaluate(blank_state)

        assert not progress.game_over
        assert progress.conditions["educational_catalyst"].progress == 0.0
        assert evaluator.learning_score(blank_state) == 100.0

    def test_assessment_then_treatments_keep_match_going(self, blank_state, catalog, make_engine):
        """Routine clinician progress is not a patient win."""
        give(blank_state, Role.CLINICIAN, catalog, "pt_rom_assessment")
        give(blank_state, Role.CLINICIAN, catalog, "pt_therapeutic_exercise", copy=1)
        give(blank_state, Role.CLINICIAN, catalog, "pt_therapeutic_exercise", copy=2)
        engine = make_engine(blank_state, rng=FixedRandom(0.99))

        for instance_id in ("pt_rom_assessment_1", "pt_therapeutic_exercise_1", "pt_therapeutic_exercise_2"):
            assert engine.play_card("clinician", instance_id).success

        assert not engine.state.is_over
        assert engine.state.outcome is None

    def test_turn_limit_beats_everything(self, blank_state, evaluator):
        """At the turn limit the scores decide."""
        blank_state.turn_number = blank_state.max_turns
        blank_state.adjust(Role.CLINICIAN, "diagnostic_confidence", 90)
        add_clues(blank_state, 5)

        progress = evaluator.evaluate(blank_state)

        assert progress.reason == "max_turns_reached"
        assert progress.winner == determine_winner(progress.clinician_score, progress.patient_score)

    def test_authentic_representation_not_reached_by_default(self, blank_state, evaluator):
        """Perfect deflection timing still falls short of full realism."""
        progress = evaluator.evaluate(blank_state)
        condition = progress.conditions["authentic_representation"]
        assert condition.progress == pytest.approx(94.0)
        assert not condition.achieved

    def test_stacked_deflections(self, blank_state, evaluator):
        """A second deflection in the same turn is inappropriate."""
        for _ in range(2):
            blank_state.append_log(Role.PATIENT, LogKind.CARD_PLAYED, {"card_type": "deflection"})
        assert evaluator.deflection_appropriateness(blank_state) == 0.5

    def test_collaborative_improvement(self, blank_state, evaluator):
        """Improvement compares the first and last three clinician plays."""
        outcomes = [False, False, True, True, True, True]
        for success in outcomes:
            blank_state.append_log(Role.CLINICIAN, LogKind.CARD_PLAYED, {
                "card_type": "assessment", "success": success,
            })
        assert evaluator.improvement(blank_state) == pytest.approx(2.0)
        progress = evaluator.evaluate(blank_state)
        assert progress.conditions["collaborative_achievement"].achieved

    def test_too_few_plays_no_improvement(self, blank_state, evaluator):
        log_teaching_moments(blank_state, 2)
        assert evaluator.improvement(blank_state) == 0.0


class TestDepletion:
    """Running a required resource dry loses the match."""

    def test_rapport_depleted(self, blank_state, evaluator):
        blank_state.adjust(Role.CLINICIAN, "rapport", -5)

        progress = evaluator.evaluate(blank_state)

        assert progress.game_over
        assert progress.winner == "patient"
        assert progress.reason == "clinician_rapport_depleted"

    def test_outcome_carries_scores(self, blank_state, evaluator):
        blank_state.adjust(Role.CLINICIAN, "rapport", -5)
        outcome = evaluator.evaluate(blank_state).outcome()
        assert outcome.winner == "patient"
        assert outcome.clinician_score == evaluator.clinician_score(blank_state)


class TestScores:
    """Score components on a fresh match."""

    def test_opening_scores(self, blank_state, evaluator):
        """Rapport and efficiency carry the clinician; realism carries the patient."""
        progress = evaluator.evaluate(blank_state)
        assert progress.clinician_score == 35
        assert progress.patient_score == 38

    def test_efficiency_decays_after_optimal(self, blank_state, evaluator):
        assert evaluator.efficiency(blank_state) == 100.0
        blank_state.turn_number = 8
        assert evaluator.efficiency(blank_state) < 100.0

    def test_learning_score_capped(self, blank_state, evaluator):
        log_teaching_moments(blank_state, 6)
        assert evaluator.learning_score(blank_state) == 100.0
