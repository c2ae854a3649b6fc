"""
Tests for match configuration and state.

Tests:
- Config bands and validation
- Resource clamping
- Serialization and checksum
"""

import pytest

from ..config import MatchConfig, ResourceRange
from ..content import CardType
from ..engine_core.state import LogKind, MatchState, ResourcePool, Role
from .conftest import give


class TestMatchConfig:
    """Tests for MatchConfig."""

    def test_difficulty_default_turns(self):
        """Each difficulty resolves its default turn count."""
        assert MatchConfig.for_difficulty("beginner").max_turns == 10
        assert MatchConfig.for_difficulty("intermediate").max_turns == 8
        assert MatchConfig.for_difficulty("advanced").max_turns == 6
        assert MatchConfig.for_difficulty("expert").max_turns == 5

    def test_max_turns_must_fit_band(self):
        """An explicit turn count outside the band is rejected."""
        assert MatchConfig.for_difficulty("advanced", max_turns=8).max_turns == 8
        with pytest.raises(ValueError):
            MatchConfig.for_difficulty("advanced", max_turns=9)

    def test_unknown_difficulty(self):
        """Unknown difficulty raises at construction."""
        with pytest.raises(ValueError):
            MatchConfig.for_difficulty("impossible")

    def test_range_min_above_max(self):
        """A range with min > max is rejected."""
        with pytest.raises(ValueError):
            ResourceRange(min=5, max=1, default=3)

    def test_deck_size_by_difficulty(self):
        """Deck size grows with difficulty."""
        sizes = [MatchConfig.for_difficulty(d).deck_size
                 for d in ("beginner", "intermediate", "advanced", "expert")]
        assert sizes == [25, 30, 35, 40]


class TestResourcePool:
    """Tests for bounded resource pools."""

    def test_clamps_to_max(self, config):
        """Gains above the max are clamped."""
        pool = ResourcePool.from_config(config.role("clinician"))
        assert pool.with_delta("energy", 100)["energy"] == 15

    def test_clamps_to_min(self, config):
        """Losses below the min are clamped."""
        pool = ResourcePool.from_config(config.role("clinician"))
        assert pool.with_delta("rapport", -100)["rapport"] == 0
        assert pool.with_delta("rapport", -100).at_floor("rapport")

    def test_unknown_resource_is_ignored(self, config):
        """Changing an undeclared resource leaves the pool as is."""
        pool = ResourcePool.from_config(config.role("patient"))
        assert pool.with_delta("energy", 3) is pool

    def test_original_unchanged(self, config):
        """with_delta returns a new pool."""
        pool = ResourcePool.from_config(config.role("clinician"))
        pool.with_delta("energy", -4)
        assert pool["energy"] == 10

    def test_defaults(self, blank_state):
        """New states start at configured defaults."""
        assert blank_state.pool(Role.CLINICIAN).to_dict() == {
            "energy": 10, "rapport": 5, "diagnostic_confidence": 0,
        }
        assert blank_state.pool(Role.PATIENT).to_dict() == {
            "cooperation": 7, "deflection": 8, "emotional": 6,
        }


class TestMatchState:
    """Tests for MatchState helpers."""

    def test_clone_is_independent(self, blank_state, catalog):
        """Mutating a clone leaves the original alone."""
        give(blank_state, Role.CLINICIAN, catalog, "pt_rom_assessment")
        clone = blank_state.clone()
        clone.hands[Role.CLINICIAN].clear()
        clone.adjust(Role.CLINICIAN, "energy", -5)
        assert len(blank_state.hand(Role.CLINICIAN)) == 1
        assert blank_state.pool(Role.CLINICIAN)["energy"] == 10

    def test_plays_of_type_counts_log(self, blank_state):
        """Card-type counts come from CARD_PLAYED entries."""
        blank_state.append_log(Role.CLINICIAN, LogKind.CARD_PLAYED, {"card_type": "treatment"})
        blank_state.append_log(Role.CLINICIAN, LogKind.TURN_CHANGE, {})
        assert blank_state.plays_of_type(CardType.TREATMENT) == 1
        assert blank_state.plays_of_type(CardType.TREATMENT, Role.PATIENT) == 0

    def test_checksum_stable(self, config):
        """Equal structures give equal checksums."""
        a = MatchState.new("a", "ankle_sprain", config)
        b = MatchState.new("b", "lower_back_pain", config)
        assert a.checksum() == b.checksum()
        assert len(a.checksum()) == 16

    def test_checksum_tracks_resources(self, blank_state):
        """A resource change changes the checksum."""
        before = blank_state.checksum()
        blank_state.adjust(Role.PATIENT, "deflection", -1)
        assert blank_state.checksum() != before

    def test_to_dict_public_hand(self, blank_state, catalog):
        """Public card form carries only id, name and type."""
        instance = give(blank_state, Role.PATIENT, catalog, "patient_dr_google")
        assert instance.to_dict(public=True) == {
            "id": "patient_dr_google_1",
            "name": "WebMD Consultation",
            "type": "deflection",
        }
