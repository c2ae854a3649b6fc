"""
Match Setup - Builds the initial state and engine for a case.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import random
import uuid

from ..config import MatchConfig
from ..content import CardCatalog, CardDefinition, ensure_valid
from ..engine_core.engine import MatchEngine
from ..engine_core.modifiers import Modifier, apply_modifiers
from ..engine_core.state import CardInstance, LogKind, MatchState, Phase, Role
from .cards import build_catalog
from .clues import clue_library
from .modifiers import MODIFIERS, get_modifiers_by_ids, get_random_modifiers

logger = logging.getLogger(__name__)

MAX_COPIES = 3


@dataclass(frozen=True)
class CaseDefinition:
    id: str
    name: str
    description: str
    recommended_difficulty: str


CASES: dict[str, CaseDefinition] = {
    "ankle_sprain": CaseDefinition(
        id="ankle_sprain",
        name="Lateral Ankle Sprain",
        description="A recreational athlete rolled their ankle during a game two days ago.",
        recommended_difficulty="beginner",
    ),
    "lower_back_pain": CaseDefinition(
        id="lower_back_pain",
        name="Chronic Lower Back Pain",
        description="An office worker with recurring back pain and a long treatment history.",
        recommended_difficulty="intermediate",
    ),
}


def build_deck(cards: list[CardDefinition], size: int, rng: random.Random) -> list[CardInstance]:
    """
    Shuffled deck of up to `size` cards with at most MAX_COPIES of each.

    Instance ids are "<card_id>_<copy>", unique within the deck.
    """
    copies: list[CardInstance] = []
    for copy in range(1, MAX_COPIES + 1):
        for card in cards:
            copies.append(CardInstance(instance_id=f"{card.id}_{copy}", definition=card))
    rng.shuffle(copies)
    return copies[:size]


def setup_match(
    case_id: str,
    config: MatchConfig,
    modifier_ids: list[str] | None = None,
    modifier_set: str | None = None,
    seed: int | None = None,
    catalog: CardCatalog | None = None,
    match_id: str | None = None,
    rng: random.Random | None = None,
) -> MatchState:
    """
    Initial state: pools at defaults, shuffled decks, dealt hands, modifiers applied.

    Explicit modifier_ids take precedence over a random draw from modifier_set.
    Raises ValueError for an unknown case or modifier.
    """
    if case_id not in CASES:
        raise ValueError(f"Unknown case: {case_id}")
    rng = rng or random.Random(seed)
    catalog = ensure_valid(catalog or build_catalog())

    state = MatchState.new(match_id or str(uuid.uuid4())[:8], case_id, config)
    advanced = config.difficulty != "beginner"
    per_role = config.deck_size // 2 + config.starting_hand_size

    for role in Role:
        pool = catalog.pool_for(role.value, case_id, include_advanced=advanced)
        deck = build_deck(pool, per_role, rng)
        state.hands[role] = deck[:config.starting_hand_size]
        state.draw_pools[role] = deck[config.starting_hand_size:]

    if modifier_ids:
        modifiers = get_modifiers_by_ids(modifier_ids)
    elif modifier_set:
        modifiers = get_random_modifiers(modifier_set, rng)
    else:
        modifiers = []

    state.append_log("system", LogKind.MATCH_STARTED, {
        "case_id": case_id,
        "difficulty": config.difficulty,
        "modifiers": [m.id for m in modifiers],
    })
    state = apply_modifiers(state, modifiers)
    state.phase = Phase.INVESTIGATION
    logger.info(
        "Match %s set up: case=%s difficulty=%s modifiers=%s",
        state.match_id, case_id, config.difficulty, [m.id for m in modifiers],
    )
    return state


def create_engine(
    case_id: str,
    difficulty: str = "intermediate",
    max_turns: int | None = None,
    modifier_ids: list[str] | None = None,
    modifier_set: str | None = None,
    seed: int | None = None,
    modifier_library: dict[str, Modifier] | None = None,
    match_id: str | None = None,
    **config_overrides,
) -> MatchEngine:
    """Config, initial state and engine in one call, sharing one seeded RNG."""
    config = MatchConfig.for_difficulty(difficulty, max_turns=max_turns, **config_overrides)
    rng = random.Random(seed)
    state = setup_match(
        case_id,
        config,
        modifier_ids=modifier_ids,
        modifier_set=modifier_set,
        match_id=match_id,
        rng=rng,
    )
    return MatchEngine(
        state,
        config,
        clue_library(),
        modifier_library=modifier_library or MODIFIERS,
        rng=rng,
    )
