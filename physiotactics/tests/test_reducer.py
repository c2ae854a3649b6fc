"""
Tests for the reducer and clue generation.

Tests:
- Full assessment play through the engine
- Dispatch covers every effect type
- Clue confidence, exhaustion and category fallback
- Pending information reduction
"""

import random

import pytest

from ..cases import MODIFIERS, clue_library
from ..content import ClueDefinition
from ..engine_core.effect_resolver import Effect, EffectType
from ..engine_core.modifiers import apply_modifiers
from ..engine_core.reducer import Reducer, clue_confidence
from ..engine_core.state import Clue, LogKind, Phase, Role
from .conftest import give


@pytest.fixture
def reducer(config):
    return Reducer(config, clue_library(), MODIFIERS, random.Random(0))


def known_clue(template: ClueDefinition) -> Clue:
    return Clue(
        id=template.id,
        category=template.category,
        description=template.description,
        reliability=template.reliability,
        confidence=template.reliability,
        discovered_turn=1,
    )


class TestAssessmentPlay:
    """End-to-end effect of a basic assessment."""

    def test_rom_assessment(self, blank_state, catalog, make_engine):
        """Cost paid, one clue found, confidence raised, card leaves the hand."""
        give(blank_state, Role.CLINICIAN, catalog, "pt_rom_assessment")
        engine = make_engine(blank_state)

        result = engine.play_card("clinician", "pt_rom_assessment_1")

        assert result.success
        state = engine.state
        clinician = state.pool(Role.CLINICIAN)
        assert clinician["energy"] == 8
        assert clinician["diagnostic_confidence"] == 10
        assert len(state.discovered_clues) == 1

        clue = state.discovered_clues[0]
        assert clue.category == "physical_exam"
        assert clue.confidence == round(clue_confidence(clue.reliability, 7, 5), 4)
        assert clue.discovered_turn == 1

        assert state.hand(Role.CLINICIAN) == []
        assert state.cards_played_this_turn == ["pt_rom_assessment"]
        assert state.last_card_played.card_id == "pt_rom_assessment"
        played = state.entries(LogKind.CARD_PLAYED)[-1]
        assert played.actor == "clinician"
        assert played.payload["card_type"] == "assessment"
        assert engine.version == 1

    def test_last_play_survives_turn_change(self, blank_state, catalog, make_engine):
        """The last play stays visible after the turn passes, for combo checks."""
        give(blank_state, Role.CLINICIAN, catalog, "pt_rom_assessment")
        engine = make_engine(blank_state)
        engine.play_card("clinician", "pt_rom_assessment_1")

        assert engine.end_turn("clinician").success

        last = engine.state.last_card_played
        assert (last.card_id, last.role, last.turn) == ("pt_rom_assessment", Role.CLINICIAN, 1)
        assert engine.state.cards_played_this_turn == []
        assert engine.state.to_dict()["last_card_played"] == {
            "card_id": "pt_rom_assessment",
            "card_type": "assessment",
            "role": "clinician",
            "turn": 1,
        }

    def test_phase_moves_to_diagnosis(self, blank_state, catalog, make_engine, config):
        """Reaching the clue threshold opens the diagnosis phase."""
        for template in clue_library()["history"][:config.diagnosis_clue_threshold - 1]:
            blank_state.discovered_clues.append(known_clue(template))
        give(blank_state, Role.CLINICIAN, catalog, "pt_rom_assessment")
        engine = make_engine(blank_state)

        engine.play_card("clinician", "pt_rom_assessment_1")

        assert engine.state.phase == Phase.DIAGNOSIS
        assert engine.state.entries(LogKind.PHASE_CHANGE)


class TestReducerDispatch:
    """One handler per effect type."""

    def test_all_effect_types_handled(self, reducer):
        assert reducer.handled_types == frozenset(EffectType)

    def test_resource_change_clamps(self, reducer, blank_state):
        """Resource effects go through the bounded pool."""
        effect = Effect(EffectType.RESOURCE_CHANGE, role=Role.CLINICIAN, resource="rapport", change=50)
        state = reducer.apply_chained_effects(blank_state, [effect], Role.CLINICIAN)
        assert state.pool(Role.CLINICIAN)["rapport"] == 10
        assert blank_state.pool(Role.CLINICIAN)["rapport"] == 5

    def test_cooperation_bonus(self, reducer, blank_state):
        """Good weather adds to cooperation gains only."""
        state = apply_modifiers(blank_state, [MODIFIERS["perfect_weather"]])
        state.adjust(Role.PATIENT, "cooperation", -4)
        gain = Effect(EffectType.RESOURCE_CHANGE, role=Role.PATIENT, resource="cooperation", change=1)
        loss = Effect(EffectType.RESOURCE_CHANGE, role=Role.PATIENT, resource="cooperation", change=-1)

        state = reducer.apply_chained_effects(state, [gain], Role.CLINICIAN)
        assert state.pool(Role.PATIENT)["cooperation"] == 5
        state = reducer.apply_chained_effects(state, [loss], Role.CLINICIAN)
        assert state.pool(Role.PATIENT)["cooperation"] == 4

    def test_no_chained_effects_returns_same_state(self, reducer, blank_state):
        assert reducer.apply_chained_effects(blank_state, [], Role.CLINICIAN) is blank_state


class TestClueGeneration:
    """Tests for generate_clue."""

    def test_confidence_formula(self):
        """Cooperation and rapport shift reliability; result is clamped."""
        assert clue_confidence(0.8, 5, 5) == pytest.approx(0.8)
        assert clue_confidence(0.8, 7, 5) == pytest.approx(0.9)
        assert clue_confidence(0.8, 5, 0) == pytest.approx(0.65)
        assert clue_confidence(0.95, 10, 10) == 1.0
        assert clue_confidence(0.1, 0, 0) == 0.1

    def test_category_pool(self, reducer, blank_state):
        clue = reducer.generate_clue(blank_state, "history")
        assert clue.category == "history"
        assert clue.id in {c.id for c in clue_library()["history"]}

    def test_skips_discovered(self, reducer, blank_state):
        """Already known clues are never drawn again."""
        pool = clue_library()["special_test"]
        blank_state.discovered_clues.append(known_clue(pool[0]))
        for _ in range(5):
            assert reducer.generate_clue(blank_state, "special_test").id == pool[1].id

    def test_exhausted_pool(self, reducer, blank_state):
        """Nothing left in the pool yields None."""
        for template in clue_library()["functional"]:
            blank_state.discovered_clues.append(known_clue(template))
        assert reducer.generate_clue(blank_state, "functional") is None

    def test_unknown_category_falls_back(self, reducer, blank_state):
        clue = reducer.generate_clue(blank_state, "telepathy")
        assert clue.category == "physical_exam"

    def test_information_reduction_consumed(self, reducer, blank_state):
        """A pending reduction lowers one clue and is then cleared."""
        blank_state.information_reduction = 0.5
        clue = reducer.generate_clue(blank_state, "history")
        expected = max(0.1, clue_confidence(clue.reliability, 7, 5) * 0.5)
        assert clue.confidence == round(expected, 4)
        assert blank_state.information_reduction == 0.0

        clue = reducer.generate_clue(blank_state, "history")
        assert clue.confidence == round(clue_confidence(clue.reliability, 7, 5), 4)

    def test_reveal_stops_when_exhausted(self, reducer, blank_state):
        """Asking for more clues than remain reveals what is left."""
        effect = Effect(EffectType.REVEAL_CLUES, count=5, category="screening")
        state = reducer.apply_chained_effects(blank_state, [effect], Role.CLINICIAN)
        assert len(state.discovered_clues) == 2
