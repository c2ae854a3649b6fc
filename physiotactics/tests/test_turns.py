"""
Tests for end-of-turn sequencing.

Tests:
- Turn numbering and role switching
- Regeneration and its modifiers
- Drawing up to the hand floor
- Skipped turns
- Reaching the turn limit
"""

from ..cases import MODIFIERS
from ..engine_core.modifiers import apply_modifiers
from ..engine_core.state import CardInstance, LogKind, Phase, Role
from ..engine_core.victory import determine_winner
from .conftest import give


class TestTurnOrder:
    """Tests for role switching."""

    def test_turn_number_advances_on_return(self, blank_state, make_engine):
        """The turn number only increases when the first role acts again."""
        engine = make_engine(blank_state)

        engine.end_turn("clinician")
        assert engine.state.active_role == Role.PATIENT
        assert engine.state.turn_number == 1

        engine.end_turn("patient")
        assert engine.state.active_role == Role.CLINICIAN
        assert engine.state.turn_number == 2

    def test_plays_cleared(self, blank_state, catalog, make_engine):
        """Per-turn play tracking resets for the next role."""
        give(blank_state, Role.CLINICIAN, catalog, "pt_active_listening")
        engine = make_engine(blank_state)
        engine.play_card("clinician", "pt_active_listening_1")
        assert engine.state.cards_played_this_turn

        engine.end_turn("clinician")
        assert engine.state.cards_played_this_turn == []

    def test_turn_change_logged(self, blank_state, make_engine):
        engine = make_engine(blank_state)
        engine.end_turn("clinician")
        entry = engine.state.entries(LogKind.TURN_CHANGE)[-1]
        assert entry.payload["from"] == "clinician"
        assert entry.payload["to"] == "patient"

    def test_pass_ends_turn(self, blank_state, make_engine):
        """A pass is logged and hands over the turn."""
        engine = make_engine(blank_state)
        result = engine.pass_turn("clinician", "nothing to play")
        assert result.success
        assert engine.state.active_role == Role.PATIENT
        assert engine.state.entries(LogKind.PASS)[0].payload["reason"] == "nothing to play"


class TestRegeneration:
    """Primary resource regeneration at the start of a turn."""

    def test_base_regeneration(self, blank_state, make_engine):
        """Each role regains 2 of its primary resource."""
        engine = make_engine(blank_state)
        engine.end_turn("clinician")
        assert engine.state.pool(Role.PATIENT)["deflection"] == 10
        engine.end_turn("patient")
        assert engine.state.pool(Role.CLINICIAN)["energy"] == 12

    def test_regeneration_floor(self, blank_state, make_engine):
        """Stacked regeneration penalties never drop below 1."""
        running = MODIFIERS["running_on_empty"]
        state = apply_modifiers(blank_state, [running, running])
        engine = make_engine(state)
        engine.end_turn("clinician")
        engine.end_turn("patient")
        assert engine.state.pool(Role.CLINICIAN)["energy"] == 11

    def test_energy_penalty_spares_patient(self, blank_state, make_engine):
        """Energy regeneration modifiers do not touch deflection."""
        state = apply_modifiers(blank_state, [MODIFIERS["running_on_empty"]])
        engine = make_engine(state)
        engine.end_turn("clinician")
        assert engine.state.pool(Role.PATIENT)["deflection"] == 10

    def test_regeneration_clamped(self, blank_state, make_engine):
        """Regeneration stops at the resource maximum."""
        blank_state.adjust(Role.PATIENT, "deflection", 7)
        engine = make_engine(blank_state)
        engine.end_turn("clinician")
        assert engine.state.pool(Role.PATIENT)["deflection"] == 15

    def test_periodic_loss(self, blank_state, make_engine):
        """Double booking costs energy at the start of every third turn."""
        state = apply_modifiers(blank_state, [MODIFIERS["double_booked"]])
        state.turn_number = 2
        state.active_role = Role.PATIENT
        engine = make_engine(state)

        engine.end_turn("patient")

        assert engine.state.turn_number == 3
        assert engine.state.pool(Role.CLINICIAN)["energy"] == 11
        assert engine.state.entries(LogKind.TURN_CHANGE)[-1].payload["periodic_loss"] == 1


class TestDrawing:
    """Drawing back toward the hand floor."""

    def test_draw_below_floor(self, blank_state, catalog, make_engine):
        """A short hand draws the top card of the pool."""
        card = catalog.get_card("pt_rom_assessment")
        blank_state.draw_pools[Role.PATIENT] = [
            CardInstance(instance_id="patient_dr_google_1", definition=catalog.get_card("patient_dr_google")),
        ]
        blank_state.draw_pools[Role.CLINICIAN] = [
            CardInstance(instance_id="pt_rom_assessment_1", definition=card),
            CardInstance(instance_id="pt_rom_assessment_2", definition=card),
        ]
        engine = make_engine(blank_state)

        engine.end_turn("clinician")
        assert [c.instance_id for c in engine.state.hand(Role.PATIENT)] == ["patient_dr_google_1"]
        assert engine.state.draw_pools[Role.PATIENT] == []

        engine.end_turn("patient")
        assert [c.instance_id for c in engine.state.hand(Role.CLINICIAN)] == ["pt_rom_assessment_1"]
        assert len(engine.state.draw_pools[Role.CLINICIAN]) == 1

    def test_no_draw_at_floor(self, blank_state, catalog, make_engine, config):
        """A hand at the floor does not draw."""
        for copy in range(1, config.hand_size_floor + 1):
            give(blank_state, Role.PATIENT, catalog, "patient_dr_google", copy)
        blank_state.draw_pools[Role.PATIENT] = [
            CardInstance(instance_id="patient_dr_google_9", definition=catalog.get_card("patient_dr_google")),
        ]
        engine = make_engine(blank_state)
        engine.end_turn("clinician")
        assert len(engine.state.hand(Role.PATIENT)) == config.hand_size_floor

    def test_empty_pool(self, blank_state, make_engine):
        """An empty pool is not an error."""
        engine = make_engine(blank_state)
        assert engine.end_turn("clinician").success
        assert engine.state.hand(Role.PATIENT) == []


class TestSkippedTurns:
    """Pending skips from modifiers."""

    def test_fire_drill(self, blank_state, make_engine):
        """The clinician's next turn is skipped and the patient goes again."""
        state = apply_modifiers(blank_state, [MODIFIERS["fire_drill"]])
        engine = make_engine(state)

        engine.end_turn("clinician")
        assert engine.state.active_role == Role.PATIENT
        engine.end_turn("patient")

        assert engine.state.active_role == Role.PATIENT
        assert engine.state.turn_number == 2
        assert engine.state.pending_skips[Role.CLINICIAN] == 0
        skipped = engine.state.entries(LogKind.TURN_SKIPPED)
        assert [e.actor for e in skipped] == ["clinician"]


class TestTurnLimit:
    """The match ends when the turn limit is reached."""

    def test_max_turns(self, blank_state, catalog, make_engine, config):
        """Reaching the last turn scores the match."""
        blank_state.turn_number = config.max_turns - 1
        blank_state.active_role = Role.PATIENT
        give(blank_state, Role.CLINICIAN, catalog, "pt_active_listening")
        engine = make_engine(blank_state)

        engine.end_turn("patient")

        state = engine.state
        assert state.turn_number == config.max_turns
        assert state.phase == Phase.SCORING
        assert state.outcome.reason == "max_turns_reached"
        assert state.outcome.winner == determine_winner(
            state.outcome.clinician_score, state.outcome.patient_score,
        )
        assert state.entries(LogKind.MATCH_ENDED)

        result = engine.play_card("clinician", "pt_active_listening_1")
        assert result.error_code == "MATCH_OVER"
        assert engine.end_turn("clinician").error_code == "MATCH_OVER"
