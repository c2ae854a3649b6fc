"""
Interaction Engine - Turns a validated card play into typed effects.

compute_interactions() runs against the pre-play state and produces the
primary effects plus educational annotations. process_chained_effects()
runs against the post-primary state and produces reactions: triggers on
active effects and counter opportunities for the opposing role.

Nothing here mutates state; the Reducer applies what this module computes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import random

from ..config import MatchConfig
from ..content.cards import CardDefinition, CardType, TargetKind
from .modifiers import adjustments_of
from .state import MatchState, Role
from .validation import required_costs


DEFAULT_CONFIDENCE_BOOST = 10
DEFAULT_INFORMATION_REDUCTION = 0.5


class EffectType(Enum):
    RESOURCE_CHANGE = "resource_change"
    REVEAL_CLUES = "reveal_clues"
    DIAGNOSTIC_PROGRESS = "diagnostic_progress"
    EMOTIONAL_STATE_CHANGE = "emotional_state_change"
    ADD_COMPLEXITY = "add_complexity"
    ASSESSMENT_FAILED = "assessment_failed"
    INFORMATION_REDUCTION = "information_reduction"
    COUNTER_EFFECTS = "counter_effects"
    RESPONSE_REQUIREMENT = "response_requirement"
    GRANT_MODIFIER = "grant_modifier"
    TRIGGERED_EFFECT = "triggered_effect"
    COUNTER_OPPORTUNITY = "counter_opportunity"


@dataclass(frozen=True)
class Effect:
    """
    One typed effect. Only the fields relevant to effect_type are set.
    """
    effect_type: EffectType
    description: str = ""
    role: Role | None = None
    resource: str | None = None
    change: int = 0
    count: int = 0
    category: str | None = None
    amount: int = 0
    emotion: str | None = None
    intensity: str | None = None
    complexity_type: str | None = None
    reduction: float = 0.0
    target_id: str | None = None
    modifier_id: str | None = None
    source: str | None = None
    trigger: str | None = None
    inner: Effect | None = None
    window: int | None = None
    card: CardDefinition | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.effect_type.value}
        if self.description:
            data["description"] = self.description
        if self.role is not None:
            data["role"] = self.role.value
        for key in ("resource", "category", "emotion", "intensity", "complexity_type",
                    "target_id", "modifier_id", "source", "trigger", "window"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        for key in ("change", "count", "amount", "reduction"):
            value = getattr(self, key)
            if value:
                data[key] = value
        if self.inner is not None:
            data["inner"] = self.inner.to_dict()
        return data


@dataclass
class EducationalImpact:
    competency_targeted: str
    learning_objective: str
    difficulty_level: str
    clinical_relevance: str = "high"
    teaching_moment: str | None = None
    # Role whose play set up the moment; only patient-prompted moments count for the patient.
    prompted_by: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "competency_targeted": self.competency_targeted,
            "learning_objective": self.learning_objective,
            "difficulty_level": self.difficulty_level,
            "clinical_relevance": self.clinical_relevance,
            "teaching_moment": self.teaching_moment,
            "prompted_by": self.prompted_by,
        }


@dataclass
class Interactions:
    primary: list[Effect] = field(default_factory=list)
    secondary: list[Effect] = field(default_factory=list)
    counterable: frozenset[str] = frozenset()
    educational_impact: EducationalImpact | None = None
    assessment_failed: bool = False


COMPETENCY_MAP: dict[CardType, str] = {
    CardType.ASSESSMENT: "diagnostic_accuracy",
    CardType.COMMUNICATION: "therapeutic_communication",
    CardType.CLINICAL_REASONING: "clinical_reasoning",
    CardType.HISTORY_TAKING: "information_gathering",
    CardType.TREATMENT: "treatment_planning",
    CardType.DEFLECTION: "patient_realism",
    CardType.EMOTIONAL_STATE: "patient_realism",
    CardType.COMPLEXITY: "patient_realism",
}

LEARNING_OBJECTIVES: dict[str, str] = {
    "diagnostic_accuracy": "Select assessments that discriminate between hypotheses",
    "therapeutic_communication": "Respond to the patient's concerns before pressing on",
    "clinical_reasoning": "Synthesize findings into a working diagnosis",
    "information_gathering": "Elicit a complete and accurate history",
    "treatment_planning": "Ground treatment in assessment findings",
    "patient_realism": "Recognize authentic patient behavior",
}


def _assessment_effects(engine: InteractionEngine, state: MatchState, card: CardDefinition,
                        role: Role, target_id: str | None) -> list[Effect]:
    adj = adjustments_of(state)
    return [
        Effect(
            EffectType.REVEAL_CLUES,
            description=f"Reveal clues via {card.name}",
            count=(card.clues_revealed or 1) + adj.assessment_bonus,
            category=card.assessment_category or "physical_exam",
        ),
        Effect(
            EffectType.DIAGNOSTIC_PROGRESS,
            description="Diagnostic confidence increases",
            amount=card.confidence_boost or DEFAULT_CONFIDENCE_BOOST,
        ),
    ]


def _history_effects(engine: InteractionEngine, state: MatchState, card: CardDefinition,
                     role: Role, target_id: str | None) -> list[Effect]:
    effects = [Effect(
        EffectType.REVEAL_CLUES,
        description=f"History reveals clues via {card.name}",
        count=card.clues_revealed or 1,
        category=card.assessment_category or "history",
    )]
    if card.confidence_boost:
        effects.append(Effect(
            EffectType.DIAGNOSTIC_PROGRESS,
            description="Diagnostic confidence increases",
            amount=card.confidence_boost,
        ))
    return effects


def _reasoning_effects(engine: InteractionEngine, state: MatchState, card: CardDefinition,
                       role: Role, target_id: str | None) -> list[Effect]:
    return [Effect(
        EffectType.DIAGNOSTIC_PROGRESS,
        description="Clinical reasoning sharpens the hypothesis",
        amount=card.confidence_boost or DEFAULT_CONFIDENCE_BOOST,
    )]


def _communication_effects(engine: InteractionEngine, state: MatchState, card: CardDefinition,
                           role: Role, target_id: str | None) -> list[Effect]:
    effects = [Effect(
        EffectType.RESOURCE_CHANGE,
        description="Rapport improves",
        role=Role.CLINICIAN,
        resource="rapport",
        change=card.rapport_change or 1,
    )]
    if CardType.EMOTIONAL_STATE.value in card.counters or card.target_kind == TargetKind.ACTIVE_EFFECT:
        effects.append(Effect(
            EffectType.COUNTER_EFFECTS,
            description="Addresses the patient's emotional state",
            target_id=target_id,
        ))
    return effects


def _treatment_effects(engine: InteractionEngine, state: MatchState, card: CardDefinition,
                       role: Role, target_id: str | None) -> list[Effect]:
    if card.cooperation_change:
        return []
    return [Effect(
        EffectType.RESOURCE_CHANGE,
        description="Treatment builds cooperation",
        role=Role.PATIENT,
        resource="cooperation",
        change=1,
    )]


def _deflection_effects(engine: InteractionEngine, state: MatchState, card: CardDefinition,
                        role: Role, target_id: str | None) -> list[Effect]:
    effects = [Effect(
        EffectType.INFORMATION_REDUCTION,
        description="Next finding is less reliable",
        reduction=card.information_reduction or DEFAULT_INFORMATION_REDUCTION,
    )]
    if card.adds_complexity:
        effects.append(Effect(
            EffectType.ADD_COMPLEXITY,
            description="Case complexity increases",
            complexity_type=card.complexity_type or "deflection",
        ))
    return effects


def _emotional_effects(engine: InteractionEngine, state: MatchState, card: CardDefinition,
                       role: Role, target_id: str | None) -> list[Effect]:
    effects = [Effect(
        EffectType.EMOTIONAL_STATE_CHANGE,
        description=f"Patient becomes {card.emotion_type or 'distressed'}",
        emotion=card.emotion_type or "distressed",
        intensity=card.intensity,
        card=card,
    )]
    if card.requires_response:
        effects.append(Effect(
            EffectType.RESPONSE_REQUIREMENT,
            description=f"Requires a {card.requires_response} response",
            category=card.requires_response,
            window=card.response_timeout,
        ))
    return effects


def _complexity_effects(engine: InteractionEngine, state: MatchState, card: CardDefinition,
                        role: Role, target_id: str | None) -> list[Effect]:
    return [Effect(
        EffectType.ADD_COMPLEXITY,
        description=card.card_text or "Case complexity increases",
        complexity_type=card.complexity_type or "general",
    )]


TYPE_HANDLERS: dict[CardType, Callable[..., list[Effect]]] = {
    CardType.ASSESSMENT: _assessment_effects,
    CardType.HISTORY_TAKING: _history_effects,
    CardType.CLINICAL_REASONING: _reasoning_effects,
    CardType.COMMUNICATION: _communication_effects,
    CardType.TREATMENT: _treatment_effects,
    CardType.DEFLECTION: _deflection_effects,
    CardType.EMOTIONAL_STATE: _emotional_effects,
    CardType.COMPLEXITY: _complexity_effects,
}


@dataclass
class InteractionEngine:
    config: MatchConfig
    rng: random.Random = field(default_factory=random.Random)

    def compute_interactions(
        self,
        state: MatchState,
        card: CardDefinition,
        role: Role,
        target_id: str | None = None,
    ) -> Interactions:
        primary = self._cost_effects(state, card, role)
        interactions = Interactions(
            educational_impact=self.educational_impact(state, card, role),
        )

        if card.card_type == CardType.ASSESSMENT:
            chance = adjustments_of(state).failure_chance
            if chance > 0 and self.rng.random() < chance:
                primary.append(Effect(
                    EffectType.ASSESSMENT_FAILED,
                    description=f"{card.name} failed: equipment unavailable",
                    role=role,
                    card=card,
                ))
                interactions.primary = primary
                interactions.assessment_failed = True
                interactions.counterable = frozenset({card.card_type.value})
                return interactions

        if card.rapport_change and card.card_type != CardType.COMMUNICATION:
            primary.append(Effect(
                EffectType.RESOURCE_CHANGE,
                description="Rapport changes",
                role=Role.CLINICIAN,
                resource="rapport",
                change=card.rapport_change,
            ))
        if card.cooperation_change:
            primary.append(Effect(
                EffectType.RESOURCE_CHANGE,
                description="Cooperation changes",
                role=Role.PATIENT,
                resource="cooperation",
                change=card.cooperation_change,
            ))

        primary.extend(TYPE_HANDLERS[card.card_type](self, state, card, role, target_id))

        if card.grants_modifier:
            primary.append(Effect(
                EffectType.GRANT_MODIFIER,
                description=f"Activates {card.grants_modifier}",
                modifier_id=card.grants_modifier,
            ))

        interactions.primary = primary
        interactions.counterable = frozenset(
            {card.card_type.value}
            | {e.effect_type.value for e in primary if e.effect_type != EffectType.RESOURCE_CHANGE}
        )
        return interactions

    def _cost_effects(self, state: MatchState, card: CardDefinition, role: Role) -> list[Effect]:
        return [
            Effect(
                EffectType.RESOURCE_CHANGE,
                description=f"Spend {int(cost)} {resource}",
                role=role,
                resource=resource,
                change=-int(cost),
            )
            for resource, cost in required_costs(state, card, role).items()
        ]

    def process_chained_effects(
        self,
        state: MatchState,
        interactions: Interactions,
        role: Role,
    ) -> list[Effect]:
        """Reactions to the primary effects, evaluated on the post-primary state."""
        chained: list[Effect] = []
        fired = {e.effect_type.value for e in interactions.primary}

        for active in state.all_active_effects():
            if active.triggered_change is None:
                continue
            for trigger in sorted(active.triggers & fired):
                change = active.triggered_change
                chained.append(Effect(
                    EffectType.TRIGGERED_EFFECT,
                    description=f"{active.name} reacts to {trigger}",
                    source=active.id,
                    trigger=trigger,
                    inner=Effect(
                        EffectType.RESOURCE_CHANGE,
                        role=Role(change.role),
                        resource=change.resource,
                        change=change.delta,
                    ),
                ))

        opponent = role.opponent
        for instance in state.hand(opponent):
            if instance.definition.counters & interactions.counterable:
                chained.append(Effect(
                    EffectType.COUNTER_OPPORTUNITY,
                    description=f"{instance.name} can answer this play",
                    role=opponent,
                    source=instance.instance_id,
                    window=self.config.counter_response_window,
                ))
        return chained

    def educational_impact(self, state: MatchState, card: CardDefinition, role: Role) -> EducationalImpact:
        competency = COMPETENCY_MAP[card.card_type]
        return EducationalImpact(
            competency_targeted=competency,
            learning_objective=LEARNING_OBJECTIVES[competency],
            difficulty_level=state.difficulty,
            teaching_moment=self._teaching_moment(state, card),
            prompted_by=self._prompted_by(state, card),
        )

    def _teaching_moment(self, state: MatchState, card: CardDefinition) -> str | None:
        card_type = card.card_type
        if card_type == CardType.ASSESSMENT and state.plays_of_type(CardType.ASSESSMENT) == 0:
            return "First assessment - foundation of clinical reasoning"
        if card_type == CardType.COMMUNICATION and state.active_effects.get(Role.PATIENT):
            return "Responding to emotional cues builds the therapeutic alliance"
        if (card_type == CardType.CLINICAL_REASONING
                and len(state.discovered_clues) >= self.config.diagnosis_clue_threshold):
            return "Synthesizing findings into a working hypothesis"
        if card_type == CardType.TREATMENT and state.plays_of_type(CardType.ASSESSMENT) > 0:
            return "Treatment grounded in assessment findings"
        return None

    def _prompted_by(self, state: MatchState, card: CardDefinition) -> str | None:
        if card.card_type == CardType.COMMUNICATION and state.active_effects.get(Role.PATIENT):
            return Role.PATIENT.value
        return None
