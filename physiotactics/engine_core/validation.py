"""
Play Validation - Decides whether a card play is legal against a state.

Checks run in a fixed order and the first failure wins:
1. turn ownership
2. hand membership
3. resource sufficiency (modifier-adjusted)
4. targeting
5. timing and prerequisites

Validation never mutates the state it is given.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import math

from ..config import MatchConfig
from ..content.cards import CardDefinition, CardType, TargetKind
from .modifiers import adjustments_of
from .state import MatchState, Role


class RejectionCode(Enum):
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    INSUFFICIENT_RESOURCES = "INSUFFICIENT_RESOURCES"
    TARGET_REQUIRED = "TARGET_REQUIRED"
    INVALID_TARGET = "INVALID_TARGET"
    WRONG_PHASE = "WRONG_PHASE"
    ALREADY_PLAYED_THIS_TURN = "ALREADY_PLAYED_THIS_TURN"
    PREREQUISITE_NOT_MET = "PREREQUISITE_NOT_MET"
    MATCH_OVER = "MATCH_OVER"


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    reason: str | None = None
    code: RejectionCode | None = None
    suggestions: tuple[str, ...] = ()

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def rejected(cls, code: RejectionCode, reason: str, *suggestions: str) -> ValidationResult:
        return cls(is_valid=False, reason=reason, code=code, suggestions=tuple(suggestions))


def modified_energy_cost(state: MatchState, card: CardDefinition) -> float:
    """
    Energy cost after modifiers, never below zero.

    Returns math.inf when a treatment limit is already used up.
    """
    adj = adjustments_of(state)
    card_type = card.card_type
    if card_type == CardType.TREATMENT and adj.treatment_limit is not None:
        if state.plays_of_type(CardType.TREATMENT) >= adj.treatment_limit:
            return math.inf

    first_assessment = (
        card_type == CardType.ASSESSMENT
        and state.plays_of_type(CardType.ASSESSMENT) == 0
    )
    cost = card.energy_cost + adj.cost_delta(card_type.value, first_assessment)
    return max(0, cost)


def required_costs(state: MatchState, card: CardDefinition, role: Role) -> dict[str, float]:
    """Every resource the play would spend, keyed by resource name."""
    costs: dict[str, float] = {}
    if state.pool(role).has("energy"):
        energy = modified_energy_cost(state, card)
        if energy:
            costs["energy"] = energy
    if card.deflection_cost:
        costs["deflection"] = card.deflection_cost
    if card.emotional_cost:
        costs["emotional"] = card.emotional_cost
    return costs


def is_valid_target(state: MatchState, card: CardDefinition, target_id: str) -> bool:
    if card.target_kind == TargetKind.ACTIVE_EFFECT:
        return any(e.id == target_id for e in state.all_active_effects())
    if card.target_kind == TargetKind.COMPLEXITY:
        return any(c.id == target_id for c in state.complexity)
    if card.target_kind == TargetKind.CLUE:
        return any(c.id == target_id for c in state.discovered_clues)
    return True


def legal_targets(state: MatchState, card: CardDefinition) -> list[str]:
    if card.target_kind == TargetKind.ACTIVE_EFFECT:
        return [e.id for e in state.all_active_effects()]
    if card.target_kind == TargetKind.COMPLEXITY:
        return [c.id for c in state.complexity]
    if card.target_kind == TargetKind.CLUE:
        return [c.id for c in state.discovered_clues]
    return []


@dataclass
class Validator:
    config: MatchConfig

    def validate(
        self,
        state: MatchState,
        card_instance_id: str,
        role: Role,
        target_id: str | None = None,
    ) -> ValidationResult:
        if state.is_over:
            return ValidationResult.rejected(RejectionCode.MATCH_OVER, "The match has ended")

        if state.active_role != role:
            return ValidationResult.rejected(
                RejectionCode.NOT_YOUR_TURN,
                "Not your turn",
                f"Wait for the {state.active_role.value} to end their turn",
            )

        instance = state.find_in_hand(role, card_instance_id)
        if instance is None:
            return ValidationResult.rejected(
                RejectionCode.CARD_NOT_FOUND,
                "Card not in hand",
                "Choose a card from your current hand",
            )
        card = instance.definition

        result = self._check_resources(state, card, role)
        if not result.is_valid:
            return result

        result = self._check_target(state, card, target_id)
        if not result.is_valid:
            return result

        return self._check_timing(state, card)

    def _check_resources(self, state: MatchState, card: CardDefinition, role: Role) -> ValidationResult:
        pool = state.pool(role)
        for resource, cost in required_costs(state, card, role).items():
            if cost == math.inf:
                return ValidationResult.rejected(
                    RejectionCode.INSUFFICIENT_RESOURCES,
                    "Insufficient energy: treatment limit reached",
                    "Play a different card type",
                )
            available = pool.get(resource)
            if available < cost:
                return ValidationResult.rejected(
                    RejectionCode.INSUFFICIENT_RESOURCES,
                    f"Insufficient {resource}: need {int(cost)}, have {available}",
                    "End your turn to regenerate resources",
                    "Play a cheaper card",
                )
        return ValidationResult.ok()

    def _check_target(self, state: MatchState, card: CardDefinition,
                      target_id: str | None) -> ValidationResult:
        if card.requires_target and not target_id:
            return ValidationResult.rejected(
                RejectionCode.TARGET_REQUIRED,
                "Card requires a target",
                "Select a target for this card",
            )
        if target_id and card.target_kind is not None:
            if not is_valid_target(state, card, target_id):
                return ValidationResult.rejected(
                    RejectionCode.INVALID_TARGET,
                    "Invalid target",
                    f"Target must be a current {card.target_kind.value}",
                )
        return ValidationResult.ok()

    def _check_timing(self, state: MatchState, card: CardDefinition) -> ValidationResult:
        if card.phase_restrictions and state.phase.value not in card.phase_restrictions:
            return ValidationResult.rejected(
                RejectionCode.WRONG_PHASE,
                f"Cannot play during the {state.phase.value} phase",
            )
        if card.once_per_turn and card.id in state.cards_played_this_turn:
            return ValidationResult.rejected(
                RejectionCode.ALREADY_PLAYED_THIS_TURN,
                "Card already played this turn",
            )
        if card.requires_clues and len(state.discovered_clues) < card.requires_clues:
            return ValidationResult.rejected(
                RejectionCode.PREREQUISITE_NOT_MET,
                f"Requires {card.requires_clues} discovered clues",
                "Gather more clues with assessment or history taking",
            )
        if card.requires_assessment and state.plays_of_type(CardType.ASSESSMENT) == 0:
            return ValidationResult.rejected(
                RejectionCode.PREREQUISITE_NOT_MET,
                "Requires a completed assessment",
                "Assess the patient before treating",
            )
        return ValidationResult.ok()

    def validate_turn_action(self, state: MatchState, role: Role) -> ValidationResult:
        """Ownership check for end-turn and pass."""
        if state.is_over:
            return ValidationResult.rejected(RejectionCode.MATCH_OVER, "The match has ended")
        if state.active_role != role:
            return ValidationResult.rejected(RejectionCode.NOT_YOUR_TURN, "Not your turn")
        return ValidationResult.ok()
