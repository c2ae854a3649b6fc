"""
Match Configuration - Numeric parameters supplied at match initialization.

Nothing in the engine hard-codes a resource range, turn count, hand size or
victory threshold. Those values live here and are handed to the engine when a
match is created, so a caller can run differently tuned matches side by side.

Role keys are the plain role values ("clinician", "patient") so this module
has no dependency on the engine.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import os


DEFAULT_DIFFICULTY = os.getenv("PHYSIO_DEFAULT_DIFFICULTY", "intermediate")


@dataclass(frozen=True)
class ResourceRange:
    """Declared [min, max] range and starting value for one named resource."""
    min: int
    max: int
    default: int

    def __post_init__(self):
        if self.min > self.max:
            raise ValueError(f"Resource range min {self.min} exceeds max {self.max}")
        if not self.min <= self.default <= self.max:
            raise ValueError(
                f"Resource default {self.default} outside [{self.min}, {self.max}]"
            )

    def clamp(self, value: int) -> int:
        return max(self.min, min(self.max, value))


@dataclass(frozen=True)
class TurnBand:
    """Allowed turn counts for a difficulty."""
    min: int
    max: int
    default: int


@dataclass
class RoleConfig:
    """Resource layout and regeneration for one role."""
    resources: dict[str, ResourceRange]
    primary_resource: str
    base_regeneration: int = 2

    def __post_init__(self):
        if self.primary_resource not in self.resources:
            raise ValueError(
                f"Primary resource '{self.primary_resource}' is not a declared resource"
            )


@dataclass
class VictoryConfig:
    """
    Thresholds and point values for victory evaluation.

    Clinician wins outright when diagnostic accuracy and clue count both reach
    their thresholds. Patient conditions each carry a point value; the sum is
    compared against the clinician's computed score when the match ends.
    """
    diagnostic_accuracy: int = 85
    min_clues: int = 5

    # Patient conditions
    learning_moments_required: int = 3
    educational_catalyst_points: int = 50
    authentic_representation_points: int = 40
    collaborative_achievement_points: int = 35
    behavior_consistency: float = 0.85
    improvement_target: float = 0.15

    # Clinician score weights (sum to 1.0)
    accuracy_weight: float = 0.4
    communication_weight: float = 0.3
    efficiency_weight: float = 0.2
    learning_weight: float = 0.1
    optimal_turn_ratio: float = 0.7

    # (role, resource) pairs whose depletion to the floor ends the match
    depletion_conditions: tuple[tuple[str, str], ...] = (("clinician", "rapport"),)


DIFFICULTY_TURN_BANDS: dict[str, TurnBand] = {
    "beginner": TurnBand(min=8, max=12, default=10),
    "intermediate": TurnBand(min=6, max=10, default=8),
    "advanced": TurnBand(min=5, max=8, default=6),
    "expert": TurnBand(min=4, max=6, default=5),
}

DECK_SIZES: dict[str, int] = {
    "beginner": 25,
    "intermediate": 30,
    "advanced": 35,
    "expert": 40,
}

# Opponent "thinking" delay in milliseconds; presentation only
THINKING_DELAYS: dict[str, int] = {
    "beginner": 1000,
    "intermediate": 1500,
    "advanced": 2000,
    "expert": 2000,
}


def default_roles() -> dict[str, RoleConfig]:
    """Resource layout used when the caller does not supply one."""
    return {
        "clinician": RoleConfig(
            resources={
                "energy": ResourceRange(min=0, max=15, default=10),
                "rapport": ResourceRange(min=0, max=10, default=5),
                "diagnostic_confidence": ResourceRange(min=0, max=100, default=0),
            },
            primary_resource="energy",
            base_regeneration=2,
        ),
        "patient": RoleConfig(
            resources={
                "cooperation": ResourceRange(min=0, max=10, default=7),
                "deflection": ResourceRange(min=0, max=15, default=8),
                "emotional": ResourceRange(min=0, max=12, default=6),
            },
            primary_resource="deflection",
            base_regeneration=2,
        ),
    }


@dataclass
class MatchConfig:
    """
    Complete configuration for one match.

    Usage:
        config = MatchConfig.for_difficulty("advanced")
        config = MatchConfig.for_difficulty("beginner", max_turns=12, hand_size_floor=4)
    """
    difficulty: str = "intermediate"
    max_turns: int = 8
    roles: dict[str, RoleConfig] = field(default_factory=default_roles)

    # Hands
    hand_size_floor: int = 5
    starting_hand_size: int = 5
    max_hand_size: int = 10

    # Turn machine
    minimum_regeneration: int = 1
    diagnosis_clue_threshold: int = 3

    # Decision engine
    urgency_window: int = 3

    # Advisory response window for counter opportunities, in seconds
    counter_response_window: int = 10

    victory: VictoryConfig = field(default_factory=VictoryConfig)

    def __post_init__(self):
        if self.difficulty not in DIFFICULTY_TURN_BANDS:
            raise ValueError(f"Unknown difficulty: {self.difficulty}")
        if self.max_turns < 1:
            raise ValueError("max_turns must be >= 1")
        if self.hand_size_floor < 0 or self.starting_hand_size > self.max_hand_size:
            raise ValueError("Invalid hand size bounds")
        if set(self.roles) != {"clinician", "patient"}:
            raise ValueError("Configuration must define exactly the clinician and patient roles")

    @classmethod
    def for_difficulty(
        cls,
        difficulty: str = DEFAULT_DIFFICULTY,
        max_turns: int | None = None,
        **overrides,
    ) -> MatchConfig:
        """
        Build a config whose turn count comes from the difficulty's band.

        An explicit max_turns must fall inside the band.
        """
        band = DIFFICULTY_TURN_BANDS.get(difficulty)
        if band is None:
            raise ValueError(f"Unknown difficulty: {difficulty}")

        if max_turns is None:
            max_turns = band.default
        elif not band.min <= max_turns <= band.max:
            raise ValueError(
                f"max_turns {max_turns} outside {difficulty} band [{band.min}, {band.max}]"
            )

        return cls(difficulty=difficulty, max_turns=max_turns, **overrides)

    def role(self, role: str) -> RoleConfig:
        return self.roles[role]

    def resource_range(self, role: str, resource: str) -> ResourceRange:
        return self.roles[role].resources[resource]

    @property
    def deck_size(self) -> int:
        return DECK_SIZES[self.difficulty]

    @property
    def thinking_delay_ms(self) -> int:
        return THINKING_DELAYS[self.difficulty]
