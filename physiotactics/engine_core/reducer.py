"""
Reducer - Applies computed effects to a cloned state.

The reducer never decides whether a play is legal (see validation) and never
decides what a card does (see effect_resolver). It takes a list of typed
effects and writes them into a clone through one handler per EffectType.
"""

from __future__ import annotations
from typing import Callable
import logging
import random

from ..config import MatchConfig
from ..content.cards import CardType, ClueDefinition
from .effect_resolver import Effect, EffectType, Interactions
from .modifiers import Modifier, activate_modifier, adjustments_of
from .state import (
    ActiveEffect,
    CardInstance,
    Clue,
    Complexity,
    LastPlay,
    LogKind,
    MatchState,
    Role,
)
from .turns import update_phase

logger = logging.getLogger(__name__)


MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 1.0
EMOTIONAL_EFFECT_DURATION = 3


def clue_confidence(reliability: float, cooperation: int, rapport: int) -> float:
    confidence = reliability + 0.05 * (cooperation - 5) + 0.03 * (rapport - 5)
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))


class Reducer:
    """
    Usage:
        reducer = Reducer(config, clue_library, modifier_library, rng)
        new_state = reducer.apply_card_effects(state, card, Role.CLINICIAN, interactions)
        new_state = reducer.apply_chained_effects(new_state, chained, Role.CLINICIAN)
    """

    def __init__(
        self,
        config: MatchConfig,
        clue_library: dict[str, list[ClueDefinition]],
        modifier_library: dict[str, Modifier] | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config
        self.clue_library = clue_library
        self.modifier_library = modifier_library or {}
        self.rng = rng or random.Random()

        self._handlers: dict[EffectType, Callable[[MatchState, Effect], None]] = {
            EffectType.RESOURCE_CHANGE: self._apply_resource_change,
            EffectType.REVEAL_CLUES: self._apply_reveal_clues,
            EffectType.DIAGNOSTIC_PROGRESS: self._apply_diagnostic_progress,
            EffectType.EMOTIONAL_STATE_CHANGE: self._apply_emotional_state,
            EffectType.ADD_COMPLEXITY: self._apply_complexity,
            EffectType.ASSESSMENT_FAILED: self._apply_assessment_failed,
            EffectType.INFORMATION_REDUCTION: self._apply_information_reduction,
            EffectType.COUNTER_EFFECTS: self._apply_counter_effects,
            EffectType.RESPONSE_REQUIREMENT: self._apply_response_requirement,
            EffectType.GRANT_MODIFIER: self._apply_grant_modifier,
            EffectType.TRIGGERED_EFFECT: self._apply_triggered,
            EffectType.COUNTER_OPPORTUNITY: self._apply_nothing,
        }

    @property
    def handled_types(self) -> frozenset[EffectType]:
        return frozenset(self._handlers)

    def apply_card_effects(
        self,
        state: MatchState,
        instance: CardInstance,
        role: Role,
        interactions: Interactions,
        target_id: str | None = None,
    ) -> MatchState:
        new_state = state.clone()
        hand = new_state.hands[role]
        new_state.hands[role] = [c for c in hand if c.instance_id != instance.instance_id]

        for effect in interactions.primary:
            self._apply(new_state, effect)

        impact = interactions.educational_impact
        new_state.append_log(role, LogKind.CARD_PLAYED, {
            "card_id": instance.card_id,
            "instance_id": instance.instance_id,
            "card_name": instance.name,
            "card_type": instance.card_type.value,
            "target_id": target_id,
            "success": not interactions.assessment_failed,
            "educational_impact": impact.to_dict() if impact else None,
        }, effects=tuple(e.to_dict() for e in interactions.primary))

        new_state.cards_played_this_turn.append(instance.card_id)
        new_state.last_card_played = LastPlay(
            card_id=instance.card_id,
            card_type=instance.card_type,
            role=role,
            turn=new_state.turn_number,
        )
        update_phase(new_state, self.config)
        return new_state

    def apply_chained_effects(self, state: MatchState, chained: list[Effect], role: Role) -> MatchState:
        if not chained:
            return state
        new_state = state.clone()
        for effect in chained:
            self._apply(new_state, effect)
        new_state.append_log(role, LogKind.CHAINED_EFFECT, {
            "count": len(chained),
        }, effects=tuple(e.to_dict() for e in chained))
        update_phase(new_state, self.config)
        return new_state

    def _apply(self, state: MatchState, effect: Effect) -> None:
        self._handlers[effect.effect_type](state, effect)

    # Handlers mutate the clone they are given

    def _apply_resource_change(self, state: MatchState, effect: Effect) -> None:
        change = effect.change
        if effect.resource == "cooperation" and change > 0:
            change += adjustments_of(state).cooperation_bonus
        state.adjust(effect.role, effect.resource, change)

    def _apply_reveal_clues(self, state: MatchState, effect: Effect) -> None:
        for _ in range(effect.count):
            clue = self.generate_clue(state, effect.category or "physical_exam")
            if clue is None:
                break
            state.discovered_clues.append(clue)

    def _apply_diagnostic_progress(self, state: MatchState, effect: Effect) -> None:
        state.adjust(Role.CLINICIAN, "diagnostic_confidence", effect.amount)

    def _apply_emotional_state(self, state: MatchState, effect: Effect) -> None:
        card = effect.card
        effects = state.active_effects.setdefault(Role.PATIENT, [])
        effects.append(ActiveEffect(
            id=f"effect_{len(state.log)}_{len(effects)}",
            name=card.name if card else (effect.emotion or "emotional state"),
            owner=Role.PATIENT,
            source_card_id=card.id if card else "",
            kind=CardType.EMOTIONAL_STATE.value,
            description=effect.description,
            intensity=effect.intensity or "moderate",
            remaining_turns=EMOTIONAL_EFFECT_DURATION,
            triggers=card.triggers if card else frozenset(),
            triggered_change=card.triggered_change if card else None,
        ))

    def _apply_complexity(self, state: MatchState, effect: Effect) -> None:
        state.complexity.append(Complexity(
            id=f"complexity_{len(state.complexity) + 1}",
            complexity_type=effect.complexity_type or "general",
            description=effect.description,
        ))

    def _apply_assessment_failed(self, state: MatchState, effect: Effect) -> None:
        state.append_log(effect.role or "system", LogKind.ASSESSMENT_FAILED, {
            "card_id": effect.card.id if effect.card else None,
            "reason": effect.description,
        })

    def _apply_information_reduction(self, state: MatchState, effect: Effect) -> None:
        state.information_reduction = max(state.information_reduction, effect.reduction)

    def _apply_counter_effects(self, state: MatchState, effect: Effect) -> None:
        if effect.target_id:
            for role in Role:
                state.active_effects[role] = [
                    e for e in state.active_effects.get(role, []) if e.id != effect.target_id
                ]
            return
        state.active_effects[Role.PATIENT] = [
            e for e in state.active_effects.get(Role.PATIENT, [])
            if e.kind != CardType.EMOTIONAL_STATE.value
        ]

    def _apply_response_requirement(self, state: MatchState, effect: Effect) -> None:
        effects = state.active_effects.get(Role.PATIENT, [])
        if effects:
            effects[-1].required_response = effect.category

    def _apply_grant_modifier(self, state: MatchState, effect: Effect) -> None:
        modifier = self.modifier_library.get(effect.modifier_id)
        if modifier is None:
            logger.warning("Card granted unknown modifier %s", effect.modifier_id)
            return
        activate_modifier(state, modifier)

    def _apply_triggered(self, state: MatchState, effect: Effect) -> None:
        if effect.inner is not None:
            self._handlers[effect.inner.effect_type](state, effect.inner)

    def _apply_nothing(self, state: MatchState, effect: Effect) -> None:
        pass

    def generate_clue(self, state: MatchState, category: str) -> Clue | None:
        """
        Draw an undiscovered clue from the category's pool.

        Unknown categories fall back to physical_exam. Returns None when the
        pool is exhausted. A pending information reduction lowers this clue's
        confidence and is then consumed.
        """
        pool = self.clue_library.get(category)
        if pool is None:
            pool = self.clue_library.get("physical_exam", [])
        known = {c.id for c in state.discovered_clues}
        available = [c for c in pool if c.id not in known]
        if not available:
            return None

        template = self.rng.choice(available)
        clinician = state.pool(Role.CLINICIAN)
        patient = state.pool(Role.PATIENT)
        confidence = clue_confidence(
            template.reliability,
            patient.get("cooperation"),
            clinician.get("rapport"),
        )
        if state.information_reduction > 0:
            confidence = max(MIN_CONFIDENCE, confidence * (1 - state.information_reduction))
            state.information_reduction = 0.0

        return Clue(
            id=template.id,
            category=template.category,
            description=template.description,
            reliability=template.reliability,
            confidence=round(confidence, 4),
            discovered_turn=state.turn_number,
        )
