"""
Tests for match setup and the engine entry point.

Tests:
- Dealing hands and draw pools
- Modifier selection and logging
- Seeded determinism
- Snapshots and listeners
"""

import pytest

from ..cases import CASES, create_engine, setup_match
from ..config import MatchConfig
from ..engine_core.state import LogKind, Phase, Role


class TestSetupMatch:
    """Tests for setup_match."""

    def test_hands_and_pools(self, config):
        state = setup_match("ankle_sprain", config, seed=3)
        for role in Role:
            assert len(state.hand(role)) == config.starting_hand_size
            assert len(state.draw_pools[role]) == config.deck_size // 2

    def test_instance_ids_unique(self, config):
        """Copies of a card get distinct instance ids."""
        state = setup_match("lower_back_pain", config, seed=3)
        for role in Role:
            ids = [c.instance_id for c in state.hand(role) + state.draw_pools[role]]
            assert len(ids) == len(set(ids))

    def test_roles_get_their_own_cards(self, config):
        state = setup_match("ankle_sprain", config, seed=5)
        assert all(c.definition.is_clinician_card for c in state.draw_pools[Role.CLINICIAN])
        assert not any(c.definition.is_clinician_card for c in state.draw_pools[Role.PATIENT])

    def test_starts_in_investigation(self, config):
        state = setup_match("ankle_sprain", config, seed=1)
        assert state.phase == Phase.INVESTIGATION
        assert state.active_role == Role.CLINICIAN
        assert state.turn_number == 1

    def test_match_started_logged_first(self, config):
        state = setup_match("ankle_sprain", config, modifier_ids=["fire_drill"], seed=1)
        first = state.log[0]
        assert first.kind == LogKind.MATCH_STARTED
        assert first.payload["modifiers"] == ["fire_drill"]
        assert state.log[1].kind == LogKind.MODIFIER_APPLIED

    def test_explicit_modifiers_win_over_set(self, config):
        state = setup_match(
            "ankle_sprain", config, modifier_ids=["perfect_weather"], modifier_set="hard", seed=1,
        )
        assert [m.modifier.id for m in state.active_modifiers] == ["perfect_weather"]

    def test_unknown_case(self, config):
        with pytest.raises(ValueError):
            setup_match("broken_heart", config)

    def test_unknown_modifier(self, config):
        with pytest.raises(ValueError):
            setup_match("ankle_sprain", config, modifier_ids=["free_lunch"])

    def test_beginner_excludes_advanced_cards(self):
        config = MatchConfig.for_difficulty("beginner")
        state = setup_match("ankle_sprain", config, seed=2)
        ids = {c.card_id for c in state.hand(Role.CLINICIAN) + state.draw_pools[Role.CLINICIAN]}
        assert "pt_motivational_interviewing" not in ids

    def test_every_case_sets_up(self, config):
        for case_id in CASES:
            assert setup_match(case_id, config, seed=0).case_id == case_id


class TestCreateEngine:
    """Tests for create_engine and the engine surface."""

    def test_seeded_engines_match(self):
        """The same seed deals the same match."""
        a = create_engine("ankle_sprain", difficulty="advanced", modifier_set="medium", seed=42)
        b = create_engine("ankle_sprain", difficulty="advanced", modifier_set="medium", seed=42)
        assert a.state.checksum() == b.state.checksum()
        assert [c.instance_id for c in a.state.hand(Role.CLINICIAN)] == \
            [c.instance_id for c in b.state.hand(Role.CLINICIAN)]
        assert [m.modifier.id for m in a.state.active_modifiers] == \
            [m.modifier.id for m in b.state.active_modifiers]

    def test_difficulty_sets_turns(self):
        assert create_engine("ankle_sprain", difficulty="expert", seed=1).state.max_turns == 5
        assert create_engine("ankle_sprain", difficulty="beginner", max_turns=12, seed=1).state.max_turns == 12

    def test_legal_plays_validate(self):
        """Every generated play passes validation."""
        engine = create_engine("lower_back_pain", seed=9)
        plays = engine.legal_plays("clinician")
        for action in plays:
            result = engine.validator.validate(
                engine.state, action.payload.card_instance_id, Role.CLINICIAN, action.payload.target_id,
            )
            assert result.is_valid
        assert engine.legal_plays("patient") == []

    def test_snapshot(self):
        engine = create_engine("ankle_sprain", seed=1)
        snapshot = engine.snapshot()
        assert snapshot["version"] == 0
        assert snapshot["checksum"] == engine.state.checksum()
        assert snapshot["state"]["case_id"] == "ankle_sprain"

    def test_listener_receives_commits(self):
        """Listeners see each committed version; rejections are silent."""
        engine = create_engine("ankle_sprain", seed=1)
        received = []
        engine.add_listener(received.append)

        engine.end_turn("patient")
        assert received == []

        engine.end_turn("clinician")
        assert [s["version"] for s in received] == [1]
        assert received[0]["checksum"] == engine.state.checksum()

        engine.remove_listener(received.append)
        engine.end_turn("patient")
        assert len(received) == 1

    def test_failing_listener_does_not_block_commit(self):
        engine = create_engine("ankle_sprain", seed=1)

        def broken(snapshot):
            raise RuntimeError("observer down")

        engine.add_listener(broken)
        assert engine.end_turn("clinician").success
        assert engine.version == 1
