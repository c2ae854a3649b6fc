"""
Card Definitions - Authored card data, independent of any match.

A CardDefinition is immutable content. Runtime copies in hands and draw
pools are CardInstance objects (see engine_core.state) that reference a
definition.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CardType(Enum):
    """Closed set of card types. Every engine dispatch table is keyed on this."""
    # Clinician
    ASSESSMENT = "assessment"
    COMMUNICATION = "communication"
    TREATMENT = "treatment"
    CLINICAL_REASONING = "clinical_reasoning"
    HISTORY_TAKING = "history_taking"
    # Patient
    DEFLECTION = "deflection"
    EMOTIONAL_STATE = "emotional_state"
    COMPLEXITY = "complexity"


CLINICIAN_CARD_TYPES = frozenset({
    CardType.ASSESSMENT,
    CardType.COMMUNICATION,
    CardType.TREATMENT,
    CardType.CLINICAL_REASONING,
    CardType.HISTORY_TAKING,
})

PATIENT_CARD_TYPES = frozenset({
    CardType.DEFLECTION,
    CardType.EMOTIONAL_STATE,
    CardType.COMPLEXITY,
})


class TargetKind(Enum):
    """What a targeted card may point at."""
    ACTIVE_EFFECT = "active_effect"
    COMPLEXITY = "complexity"
    CLUE = "clue"


# Legacy boolean flags mapped onto the counters set
LEGACY_COUNTER_FLAGS = {
    "counters_emotional": "emotional_state",
    "counters_deflection": "deflection",
    "counters_resistance": "deflection",
    "counters_misinformation": "deflection",
}

@dataclass(frozen=True)
class TriggeredChange:
    """Resource change fired when an active effect's trigger matches."""
    role: str
    resource: str
    delta: int


@dataclass(frozen=True)
class CardDefinition:
    """
    Immutable card content.

    Costs are declared per resource. Only the energy cost is subject to
    modifier adjustments; deflection and emotional costs are paid as declared.
    """
    id: str
    name: str
    card_type: CardType
    card_text: str = ""
    flavor_text: str = ""
    rarity: str = "common"

    energy_cost: int = 0
    deflection_cost: int = 0
    emotional_cost: int = 0

    # Clinician payloads
    clues_revealed: int = 0
    assessment_category: str | None = None
    confidence_boost: int = 0
    rapport_change: int = 0
    cooperation_change: int = 0
    requires_clues: int = 0
    requires_assessment: bool = False

    # Patient payloads
    information_reduction: float = 0.0
    adds_complexity: bool = False
    complexity_type: str | None = None
    emotion_type: str | None = None
    intensity: str = "moderate"
    requires_response: str | None = None
    response_timeout: int = 30
    triggers: frozenset[str] = frozenset()
    triggered_change: TriggeredChange | None = None

    # Interaction
    counters: frozenset[str] = frozenset()
    requires_target: bool = False
    target_kind: TargetKind | None = None
    phase_restrictions: frozenset[str] = frozenset()
    once_per_turn: bool = False
    grants_modifier: str | None = None

    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def costs(self) -> dict[str, int]:
        """Declared non-zero costs keyed by resource name."""
        costs = {
            "energy": self.energy_cost,
            "deflection": self.deflection_cost,
            "emotional": self.emotional_cost,
        }
        return {k: v for k, v in costs.items() if v}

    @property
    def is_clinician_card(self) -> bool:
        return self.card_type in CLINICIAN_CARD_TYPES

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CardDefinition:
        """
        Build a definition from authored data.

        Legacy boolean counter flags are folded into the counters set.
        Unknown keys are kept in `extra`.
        """
        data = dict(data)
        card_type = CardType(data.pop("type", None) or data.pop("card_type"))

        counters = set(data.pop("counters", []) or [])
        for flag, counter in LEGACY_COUNTER_FLAGS.items():
            if data.pop(flag, False):
                counters.add(counter)

        target_kind = data.pop("target_kind", None)
        triggered = data.pop("triggered_change", None)

        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        known = cls.__dataclass_fields__
        for key, value in data.items():
            if key in known and key not in ("extra", "card_type"):
                kwargs[key] = value
            else:
                extra[key] = value

        for key in ("triggers", "phase_restrictions"):
            if key in kwargs:
                kwargs[key] = frozenset(kwargs[key])

        return cls(
            card_type=card_type,
            counters=frozenset(counters),
            target_kind=TargetKind(target_kind) if target_kind else None,
            triggered_change=TriggeredChange(**triggered) if triggered else None,
            extra=extra,
            **kwargs,
        )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.card_type.value,
            "card_text": self.card_text,
            "rarity": self.rarity,
            "costs": self.costs,
            "counters": sorted(self.counters),
            "requires_target": self.requires_target,
            "target_kind": self.target_kind.value if self.target_kind else None,
        }
        if self.flavor_text:
            data["flavor_text"] = self.flavor_text
        return data


@dataclass(frozen=True)
class ClueDefinition:
    """A clue that can be discovered by assessment or history taking."""
    id: str
    category: str
    description: str
    reliability: float
