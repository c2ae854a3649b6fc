"""
Modifier Library - Authored modifiers and the difficulty sets they are drawn from.
"""

from __future__ import annotations
from dataclasses import dataclass
import random

from ..engine_core.modifiers import Modifier


RAW_MODIFIERS = [
    {
        "id": "running_on_empty",
        "name": "Running on Empty",
        "description": "Start each turn with -1 energy regeneration",
        "flavor_text": "The 7am coffee isn't working anymore",
        "difficulty": "easy",
        "duration": "permanent",
        "effect": {"type": "energy_regeneration", "value": -1},
    },
    {
        "id": "double_booked",
        "name": "Double Booked",
        "description": "Every 3rd turn, lose 1 additional energy",
        "flavor_text": "Someone forgot to check the schedule",
        "difficulty": "easy",
        "duration": "permanent",
        "effect": {"type": "periodic_energy_loss", "value": -1, "interval": 3},
    },
    {
        "id": "new_grad_nerves",
        "name": "New Grad Nerves",
        "description": "Start with -2 rapport, first assessment costs +1 energy",
        "flavor_text": "Should I know this already?",
        "difficulty": "medium",
        "duration": "permanent",
        "effect": {"type": "multiple", "effects": [
            {"type": "starting_rapport", "value": -2},
            {"type": "first_assessment_cost", "value": 1},
        ]},
    },
    {
        "id": "patient_from_hell",
        "name": "Patient from Hell",
        "description": "Patient starts with +3 deflection, +2 emotional",
        "flavor_text": "Good luck with this one",
        "difficulty": "medium",
        "duration": "permanent",
        "effect": {"type": "multiple", "effects": [
            {"type": "starting_deflection", "value": 3},
            {"type": "starting_emotional", "value": 2},
        ]},
    },
    {
        "id": "documentation_nightmare",
        "name": "Documentation Nightmare",
        "description": "Every card played requires 1 additional energy",
        "flavor_text": "Chart by everything",
        "difficulty": "hard",
        "duration": "permanent",
        "effect": {"type": "card_cost", "value": 1},
    },
    {
        "id": "insurance_denied",
        "name": "Insurance Denied",
        "description": "Treatment cards cost +2 energy, limited to 2 per game",
        "flavor_text": "Prior authorization required for everything",
        "difficulty": "hard",
        "duration": "permanent",
        "effect": {"type": "multiple", "effects": [
            {"type": "card_cost", "value": 2, "target": "treatment"},
            {"type": "treatment_limit", "value": 2},
        ]},
    },
    {
        "id": "equipment_malfunction",
        "name": "Equipment Malfunction",
        "description": "Assessment cards have a 50% chance to fail for 3 turns",
        "flavor_text": "The ultrasound machine is making weird noises",
        "difficulty": "medium",
        "duration": 3,
        "effect": {"type": "assessment_failure_chance", "value": 0.5},
    },
    {
        "id": "supply_shortage",
        "name": "Supply Shortage",
        "description": "Treatment cards cost +1 energy for 4 turns",
        "flavor_text": "We're out of everything except hope",
        "difficulty": "easy",
        "duration": 4,
        "effect": {"type": "card_cost", "value": 1, "target": "treatment"},
    },
    {
        "id": "fire_drill",
        "name": "Fire Drill",
        "description": "Skip the next turn, lose 2 rapport",
        "flavor_text": "Not now, really?",
        "difficulty": "medium",
        "duration": 1,
        "effect": {"type": "multiple", "effects": [
            {"type": "skip_turn", "value": 1},
            {"type": "rapport_loss", "value": -2},
        ]},
    },
    {
        "id": "mentor_visit",
        "name": "Mentor Visit",
        "description": "Assessment cards reveal an additional clue for 2 turns",
        "flavor_text": "Finally, someone who knows what they're doing",
        "difficulty": "bonus",
        "duration": 2,
        "effect": {"type": "assessment_bonus", "value": 1},
    },
    {
        "id": "perfect_weather",
        "name": "Perfect Weather",
        "description": "Patient cooperation gains +1 for 3 turns",
        "flavor_text": "Even the weather is cooperating today",
        "difficulty": "bonus",
        "duration": 3,
        "effect": {"type": "cooperation_bonus", "value": 1},
    },
]

MODIFIERS: dict[str, Modifier] = {
    data["id"]: Modifier.from_dict(data) for data in RAW_MODIFIERS
}


@dataclass(frozen=True)
class ModifierSet:
    name: str
    description: str
    count: int
    pool: tuple[str, ...]


MODIFIER_SETS: dict[str, ModifierSet] = {
    "easy": ModifierSet(
        name="Rookie Challenges",
        description="Perfect for new therapists",
        count=1,
        pool=("running_on_empty", "double_booked", "supply_shortage"),
    ),
    "medium": ModifierSet(
        name="Seasoned Professional",
        description="Real-world complications",
        count=2,
        pool=("running_on_empty", "double_booked", "new_grad_nerves",
              "patient_from_hell", "equipment_malfunction", "fire_drill"),
    ),
    "hard": ModifierSet(
        name="Nightmare Shift",
        description="Everything that can go wrong, will",
        count=3,
        pool=("documentation_nightmare", "insurance_denied", "patient_from_hell",
              "equipment_malfunction", "fire_drill", "new_grad_nerves"),
    ),
    "mixed": ModifierSet(
        name="Real World",
        description="Challenges with occasional bright spots",
        count=2,
        pool=("running_on_empty", "patient_from_hell", "equipment_malfunction",
              "mentor_visit", "perfect_weather"),
    ),
}


def get_modifier(modifier_id: str) -> Modifier:
    modifier = MODIFIERS.get(modifier_id)
    if modifier is None:
        raise ValueError(f"Unknown modifier: {modifier_id}")
    return modifier


def get_modifiers_by_ids(modifier_ids: list[str]) -> list[Modifier]:
    """Resolve ids in order. Unknown ids raise ValueError."""
    return [get_modifier(modifier_id) for modifier_id in modifier_ids]


def get_random_modifiers(set_name: str, rng: random.Random) -> list[Modifier]:
    """Draw `count` distinct modifiers from a difficulty set."""
    modifier_set = MODIFIER_SETS.get(set_name)
    if modifier_set is None:
        raise ValueError(f"Unknown modifier set: {set_name}")
    count = min(modifier_set.count, len(modifier_set.pool))
    return [MODIFIERS[m] for m in rng.sample(list(modifier_set.pool), count)]
