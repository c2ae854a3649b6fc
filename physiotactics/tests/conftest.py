"""
Pytest fixtures for PhysioTactics tests.
"""

import random

import pytest

from ..cases import MODIFIERS, build_catalog, clue_library
from ..config import MatchConfig
from ..content import CardCatalog
from ..engine_core.engine import MatchEngine
from ..engine_core.state import CardInstance, MatchState, Phase, Role


class FixedRandom(random.Random):
    """Random whose random() always returns the same value."""

    def __init__(self, value: float, seed: int = 0):
        super().__init__(seed)
        self.value = value

    def random(self):
        return self.value


def give(state: MatchState, role: Role, catalog: CardCatalog, card_id: str, copy: int = 1) -> CardInstance:
    """Put a copy of a catalog card in a role's hand."""
    instance = CardInstance(instance_id=f"{card_id}_{copy}", definition=catalog.get_card(card_id))
    state.hands[role].append(instance)
    return instance


@pytest.fixture
def config() -> MatchConfig:
    """Intermediate difficulty, 8 turns."""
    return MatchConfig.for_difficulty("intermediate")


@pytest.fixture
def catalog() -> CardCatalog:
    return build_catalog()


@pytest.fixture
def blank_state(config: MatchConfig) -> MatchState:
    """Investigation phase, default pools, empty hands, clinician to act."""
    state = MatchState.new("test_match", "ankle_sprain", config)
    state.phase = Phase.INVESTIGATION
    return state


@pytest.fixture
def make_engine(config: MatchConfig):
    """Factory for an engine over a prepared state."""
    def _make(state: MatchState, seed: int = 1, rng: random.Random | None = None) -> MatchEngine:
        return MatchEngine(
            state,
            config,
            clue_library(),
            modifier_library=MODIFIERS,
            seed=seed,
            rng=rng,
        )
    return _make
