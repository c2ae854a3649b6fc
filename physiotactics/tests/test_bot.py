"""
Tests for the opponent bot.

Tests:
- Card scoring (affordability, deficiencies, urgency)
- Personality strategy rolls
- Play selection and passing
- Predictions for the non-active role
"""

import random

import pytest

from ..bots import (
    CardScorer,
    FirstLegalPolicy,
    OpponentBot,
    PERSONALITIES,
    RandomPolicy,
    get_personality,
)
from ..bots.personality import INTERMEDIATE, STRATEGY_TYPES
from ..content import PATIENT_CARD_TYPES
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.state import Role
from ..engine_core.validation import Validator
from .conftest import give


@pytest.fixture
def scorer(config):
    return CardScorer(config)


class TestCardScorer:
    """Tests for CardScorer."""

    def test_unaffordable_scores_zero(self, blank_state, catalog, scorer):
        instance = give(blank_state, Role.PATIENT, catalog, "patient_dr_google")
        blank_state.adjust(Role.PATIENT, "deflection", -8)

        score = scorer.score_card(blank_state, instance, Role.PATIENT)

        assert score.probability == 0.0
        assert not score.affordable

    def test_affordable_bonus(self, blank_state, catalog, scorer):
        """Paying a cost that can be met adds the affordability bonus."""
        instance = give(blank_state, Role.CLINICIAN, catalog, "pt_pain_scale_reality")
        score = scorer.score_card(blank_state, instance, Role.CLINICIAN)
        assert score.probability == pytest.approx(0.7)
        assert score.reasons == ["affordable"]

    def test_low_rapport_favors_communication(self, blank_state, catalog, scorer):
        blank_state.adjust(Role.CLINICIAN, "rapport", -3)
        instance = give(blank_state, Role.CLINICIAN, catalog, "pt_active_listening")

        score = scorer.score_card(blank_state, instance, Role.CLINICIAN)

        assert "addresses deficiency" in score.reasons
        assert score.probability == pytest.approx(0.8)

    def test_patient_deflects_when_clinician_closes_in(self, blank_state, catalog, scorer):
        instance = give(blank_state, Role.PATIENT, catalog, "patient_previous_provider")
        before = scorer.score_card(blank_state, instance, Role.PATIENT).probability

        blank_state.adjust(Role.CLINICIAN, "diagnostic_confidence", 50)
        after = scorer.score_card(blank_state, instance, Role.PATIENT)

        assert "addresses deficiency" in after.reasons
        assert after.probability > before

    def test_urgency_late_in_match(self, blank_state, catalog, scorer):
        blank_state.turn_number = blank_state.max_turns - 1
        instance = give(blank_state, Role.CLINICIAN, catalog, "pt_rom_assessment")
        assert "urgent" in scorer.score_card(blank_state, instance, Role.CLINICIAN).reasons

    def test_score_hand_sorted(self, blank_state, catalog, scorer):
        give(blank_state, Role.CLINICIAN, catalog, "pt_active_listening")
        give(blank_state, Role.CLINICIAN, catalog, "pt_rom_assessment")
        scores = scorer.score_hand(blank_state, Role.CLINICIAN)
        assert [s.probability for s in scores] == sorted((s.probability for s in scores), reverse=True)

    def test_predictions_ignore_turn_ownership(self, blank_state, catalog, scorer):
        """The waiting role's playable cards still get a probability."""
        give(blank_state, Role.PATIENT, catalog, "patient_previous_provider")
        give(blank_state, Role.PATIENT, catalog, "patient_miracle_cure")
        blank_state.adjust(Role.PATIENT, "deflection", -7)

        predictions = {p.card_id: p for p in scorer.predict_plays(blank_state, Role.PATIENT)}

        assert predictions["patient_previous_provider"].probability > 0
        assert predictions["patient_miracle_cure"].probability == 0.0


class TestPersonality:
    """Strategy rolls and lookups."""

    @pytest.mark.parametrize("roll,expected", [
        (0.1, "deflect"),
        (0.5, "cooperate"),
        (0.9, "emotional"),
    ])
    def test_pick_strategy(self, roll, expected):
        assert INTERMEDIATE.pick_strategy(roll) == expected

    def test_every_difficulty_has_personality(self):
        for difficulty in ("beginner", "intermediate", "advanced", "expert"):
            assert get_personality(difficulty) is PERSONALITIES[difficulty]

    def test_unknown_difficulty_defaults(self):
        assert get_personality("impossible") is INTERMEDIATE

    def test_cooperating_patient_boosts_no_patient_type(self):
        """Cooperation favors alliance-building cards, none of which the patient holds."""
        assert not STRATEGY_TYPES["cooperate"] & PATIENT_CARD_TYPES
        assert STRATEGY_TYPES["deflect"] <= PATIENT_CARD_TYPES
        assert STRATEGY_TYPES["emotional"] <= PATIENT_CARD_TYPES


class TestOpponentBot:
    """Tests for OpponentBot.select_play."""

    def _patient_turn(self, blank_state, catalog):
        blank_state.active_role = Role.PATIENT
        for card_id in ("patient_dr_google", "patient_previous_provider", "patient_time_constraint"):
            give(blank_state, Role.PATIENT, catalog, card_id)
        return blank_state

    def test_passes_without_plays(self, blank_state, config):
        bot = OpponentBot(role=Role.PATIENT, config=config, rng=random.Random(0))
        decision = bot.select_play(blank_state, [])
        assert decision.is_pass
        assert decision.strategy in ("deflect", "cooperate", "emotional")

    def test_picks_a_legal_play(self, blank_state, catalog, config):
        state = self._patient_turn(blank_state, catalog)
        plays = ActionGenerator(Validator(config)).legal_plays(state, Role.PATIENT)
        bot = OpponentBot(role=Role.PATIENT, config=config, rng=random.Random(4))

        decision = bot.select_play(state, plays)

        assert not decision.is_pass
        assert decision.action in plays
        assert 0 < decision.confidence <= 1
        assert set(decision.scores) == {a.payload.card_instance_id for a in plays}

    def test_seeded_choice_repeats(self, blank_state, catalog, config):
        state = self._patient_turn(blank_state, catalog)
        plays = ActionGenerator(Validator(config)).legal_plays(state, Role.PATIENT)

        def choose(seed):
            bot = OpponentBot(role=Role.PATIENT, config=config, rng=random.Random(seed))
            return bot.select_play(state, plays).action.payload.card_instance_id

        assert choose(7) == choose(7)

    def test_decision_serializes(self, blank_state, config):
        bot = OpponentBot(role=Role.PATIENT, config=config, rng=random.Random(0))
        data = bot.select_play(blank_state, []).to_dict()
        assert data["pass"] is True
        assert data["action"] is None


class TestSimplePolicies:
    """Deterministic and random baselines."""

    def test_first_legal(self, blank_state, catalog, config):
        give(blank_state, Role.CLINICIAN, catalog, "pt_rom_assessment")
        plays = ActionGenerator(Validator(config)).legal_plays(blank_state, Role.CLINICIAN)
        decision = FirstLegalPolicy().select_play(blank_state, plays)
        assert decision.action is plays[0]

    def test_random_policy_passes_when_empty(self, blank_state):
        assert RandomPolicy(seed=1).select_play(blank_state, []).is_pass
