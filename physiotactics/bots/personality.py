"""
Patient Personalities - How the simulated patient plays at each difficulty.

Personalities adjust:
- Scoring weights (what the patient values)
- Strategy odds (deflect, cooperate or go emotional this turn)
- Selection breadth (how many top cards are in the running)
- Thinking delay (presentation only)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..config import THINKING_DELAYS
from ..content.cards import CardType
from .evaluator import ScoringWeights


# Card types each strategy favors. Cooperating favors alliance-building
# cards, so a cooperating patient boosts none of its obstructive ones.
STRATEGY_TYPES: dict[str, frozenset[CardType]] = {
    "deflect": frozenset({CardType.DEFLECTION}),
    "cooperate": frozenset({CardType.COMMUNICATION, CardType.TREATMENT}),
    "emotional": frozenset({CardType.EMOTIONAL_STATE, CardType.COMPLEXITY}),
}


@dataclass
class Personality:
    name: str
    description: str = ""
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    deflection_likelihood: float = 0.6
    cooperate_threshold: float = 0.7
    strategy_multiplier: float = 1.5

    top_n: int = 3
    thinking_delay_ms: int = 1500
    type_preferences: dict[CardType, float] = field(default_factory=dict)

    def pick_strategy(self, roll: float) -> str:
        """
        Map a uniform roll to a strategy.

        Below deflection_likelihood * 0.5 the patient deflects, below
        cooperate_threshold they cooperate, otherwise they get emotional.
        """
        if roll < self.deflection_likelihood * 0.5:
            return "deflect"
        if roll < self.cooperate_threshold:
            return "cooperate"
        return "emotional"


BEGINNER = Personality(
    name="Cooperative Patient",
    description="Mostly forthcoming, occasional pushback",
    deflection_likelihood=0.3,
    top_n=4,
    thinking_delay_ms=THINKING_DELAYS["beginner"],
    type_preferences={CardType.DEFLECTION: 0.7},
)

INTERMEDIATE = Personality(
    name="Guarded Patient",
    description="Balanced mix of deflection and emotional cues",
    deflection_likelihood=0.6,
    top_n=3,
    thinking_delay_ms=THINKING_DELAYS["intermediate"],
)

ADVANCED = Personality(
    name="Resistant Patient",
    description="Deflects readily and raises the emotional stakes",
    deflection_likelihood=0.8,
    top_n=2,
    thinking_delay_ms=THINKING_DELAYS["advanced"],
    type_preferences={CardType.DEFLECTION: 1.3, CardType.EMOTIONAL_STATE: 1.2},
)

EXPERT = Personality(
    name="Complex Patient",
    description="Layers complexity on top of resistance",
    deflection_likelihood=0.8,
    top_n=2,
    thinking_delay_ms=THINKING_DELAYS["expert"],
    type_preferences={CardType.COMPLEXITY: 1.3, CardType.DEFLECTION: 1.2},
)

PERSONALITIES: dict[str, Personality] = {
    "beginner": BEGINNER,
    "intermediate": INTERMEDIATE,
    "advanced": ADVANCED,
    "expert": EXPERT,
}


def get_personality(difficulty: str) -> Personality:
    return PERSONALITIES.get(difficulty, INTERMEDIATE)
