"""
Modifiers - Match-scoped rule changes with an optional duration.

A modifier carries one or more ModifierEffects. When a modifier becomes
active its effects are either folded once into the resource pools (one-shot
kinds) or summed into an Adjustments side-table that the validator, the
interaction engine and the turn machine read (derived kinds). The side-table
is recomputed from the active list whenever it changes, so an expired
modifier stops contributing on the next read.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging

from .state import MatchState, Role, LogKind

logger = logging.getLogger(__name__)


PERMANENT = "permanent"
ALL_CARDS = "all"


class ModifierKind(Enum):
    # Derived: summed into Adjustments
    CARD_COST = "card_cost"
    FIRST_ASSESSMENT_COST = "first_assessment_cost"
    TREATMENT_LIMIT = "treatment_limit"
    ENERGY_REGENERATION = "energy_regeneration"
    PERIODIC_ENERGY_LOSS = "periodic_energy_loss"
    ASSESSMENT_FAILURE_CHANCE = "assessment_failure_chance"
    ASSESSMENT_BONUS = "assessment_bonus"
    COOPERATION_BONUS = "cooperation_bonus"
    # One-shot: applied to pools when the modifier activates
    STARTING_RAPPORT = "starting_rapport"
    STARTING_DEFLECTION = "starting_deflection"
    STARTING_EMOTIONAL = "starting_emotional"
    RAPPORT_LOSS = "rapport_loss"
    SKIP_TURN = "skip_turn"


@dataclass(frozen=True)
class ModifierEffect:
    kind: ModifierKind
    magnitude: float
    target: str = ALL_CARDS  # card type for cost kinds, resource for regeneration
    interval: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModifierEffect:
        return cls(
            kind=ModifierKind(data["type"]),
            magnitude=data.get("value", 0),
            target=data.get("target", ALL_CARDS),
            interval=data.get("interval", 0),
        )

    def to_dict(self) -> dict[str, Any]:
        data = {"type": self.kind.value, "value": self.magnitude}
        if self.target != ALL_CARDS:
            data["target"] = self.target
        if self.interval:
            data["interval"] = self.interval
        return data


@dataclass(frozen=True)
class Modifier:
    """
    Authored modifier content.

    duration is a turn count or PERMANENT. A composite modifier simply has
    more than one effect; all of them share the duration.
    """
    id: str
    name: str
    difficulty: str
    effects: tuple[ModifierEffect, ...]
    duration: int | str = PERMANENT
    description: str = ""
    flavor_text: str = ""

    @property
    def is_permanent(self) -> bool:
        return self.duration == PERMANENT

    @property
    def is_composite(self) -> bool:
        return len(self.effects) > 1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Modifier:
        effect = data["effect"]
        if effect.get("type") == "multiple":
            raw_effects = effect["effects"]
        else:
            raw_effects = [effect]
        duration = data.get("duration", effect.get("duration", PERMANENT))
        return cls(
            id=data["id"],
            name=data["name"],
            difficulty=data.get("difficulty", "medium"),
            effects=tuple(ModifierEffect.from_dict(e) for e in raw_effects),
            duration=duration,
            description=data.get("description", ""),
            flavor_text=data.get("flavor_text", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "difficulty": self.difficulty,
            "description": self.description,
            "flavor_text": self.flavor_text,
            "duration": self.duration,
            "effects": [e.to_dict() for e in self.effects],
        }


@dataclass
class ActiveModifier:
    modifier: Modifier
    remaining: int | None  # None while permanent

    @classmethod
    def activate(cls, modifier: Modifier) -> ActiveModifier:
        remaining = None if modifier.is_permanent else int(modifier.duration)
        return cls(modifier=modifier, remaining=remaining)

    def to_dict(self) -> dict[str, Any]:
        data = self.modifier.to_dict()
        data["remaining"] = self.remaining
        return data


@dataclass
class Adjustments:
    """Summed derived effects of every active modifier."""
    card_cost: dict[str, int] = field(default_factory=dict)
    first_assessment_cost: int = 0
    treatment_limit: int | None = None
    regeneration: dict[str, int] = field(default_factory=dict)
    periodic_losses: list[tuple[int, int]] = field(default_factory=list)
    assessment_failure_chance: float = 0.0
    assessment_bonus: int = 0
    cooperation_bonus: int = 0

    def cost_delta(self, card_type: str, first_assessment: bool = False) -> int:
        delta = self.card_cost.get(ALL_CARDS, 0) + self.card_cost.get(card_type, 0)
        if first_assessment:
            delta += self.first_assessment_cost
        return delta

    def regeneration_delta(self, resource: str) -> int:
        return self.regeneration.get(resource, 0)

    @property
    def failure_chance(self) -> float:
        return max(0.0, min(1.0, self.assessment_failure_chance))


def _derive_card_cost(adj: Adjustments, effect: ModifierEffect) -> None:
    adj.card_cost[effect.target] = adj.card_cost.get(effect.target, 0) + int(effect.magnitude)


def _derive_first_assessment_cost(adj: Adjustments, effect: ModifierEffect) -> None:
    adj.first_assessment_cost += int(effect.magnitude)


def _derive_treatment_limit(adj: Adjustments, effect: ModifierEffect) -> None:
    adj.treatment_limit = (adj.treatment_limit or 0) + int(effect.magnitude)


def _derive_energy_regeneration(adj: Adjustments, effect: ModifierEffect) -> None:
    resource = "energy" if effect.target == ALL_CARDS else effect.target
    adj.regeneration[resource] = adj.regeneration.get(resource, 0) + int(effect.magnitude)


def _derive_periodic_energy_loss(adj: Adjustments, effect: ModifierEffect) -> None:
    adj.periodic_losses.append((effect.interval, abs(int(effect.magnitude))))


def _derive_failure_chance(adj: Adjustments, effect: ModifierEffect) -> None:
    adj.assessment_failure_chance += float(effect.magnitude)


def _derive_assessment_bonus(adj: Adjustments, effect: ModifierEffect) -> None:
    adj.assessment_bonus += int(effect.magnitude)


def _derive_cooperation_bonus(adj: Adjustments, effect: ModifierEffect) -> None:
    adj.cooperation_bonus += int(effect.magnitude)


DERIVED_HANDLERS: dict[ModifierKind, Callable[[Adjustments, ModifierEffect], None]] = {
    ModifierKind.CARD_COST: _derive_card_cost,
    ModifierKind.FIRST_ASSESSMENT_COST: _derive_first_assessment_cost,
    ModifierKind.TREATMENT_LIMIT: _derive_treatment_limit,
    ModifierKind.ENERGY_REGENERATION: _derive_energy_regeneration,
    ModifierKind.PERIODIC_ENERGY_LOSS: _derive_periodic_energy_loss,
    ModifierKind.ASSESSMENT_FAILURE_CHANCE: _derive_failure_chance,
    ModifierKind.ASSESSMENT_BONUS: _derive_assessment_bonus,
    ModifierKind.COOPERATION_BONUS: _derive_cooperation_bonus,
}


def _fold_skip(state: MatchState, effect: ModifierEffect) -> None:
    state.pending_skips[Role.CLINICIAN] = (
        state.pending_skips.get(Role.CLINICIAN, 0) + int(effect.magnitude)
    )


# kind -> (role, resource) for one-shot pool changes
POOL_FOLDS: dict[ModifierKind, tuple[Role, str]] = {
    ModifierKind.STARTING_RAPPORT: (Role.CLINICIAN, "rapport"),
    ModifierKind.RAPPORT_LOSS: (Role.CLINICIAN, "rapport"),
    ModifierKind.STARTING_DEFLECTION: (Role.PATIENT, "deflection"),
    ModifierKind.STARTING_EMOTIONAL: (Role.PATIENT, "emotional"),
}


def _pool_fold(role: Role, resource: str) -> Callable[[MatchState, ModifierEffect], None]:
    def fold(state: MatchState, effect: ModifierEffect) -> None:
        state.adjust(role, resource, int(effect.magnitude))
    return fold


ONE_SHOT_HANDLERS: dict[ModifierKind, Callable[[MatchState, ModifierEffect], None]] = {
    kind: _pool_fold(role, resource) for kind, (role, resource) in POOL_FOLDS.items()
}
ONE_SHOT_HANDLERS[ModifierKind.SKIP_TURN] = _fold_skip


def derive_adjustments(active: list[ActiveModifier]) -> Adjustments:
    adj = Adjustments()
    for active_modifier in active:
        for effect in active_modifier.modifier.effects:
            handler = DERIVED_HANDLERS.get(effect.kind)
            if handler is not None:
                handler(adj, effect)
    return adj


def adjustments_of(state: MatchState) -> Adjustments:
    """Current side-table, deriving it if the state was built without one."""
    if state.adjustments is None:
        return derive_adjustments(state.active_modifiers)
    return state.adjustments


def activate_modifier(state: MatchState, modifier: Modifier) -> None:
    """Activate on a state the caller already owns (a clone)."""
    for effect in modifier.effects:
        handler = ONE_SHOT_HANDLERS.get(effect.kind)
        if handler is not None:
            handler(state, effect)
    state.active_modifiers.append(ActiveModifier.activate(modifier))
    state.adjustments = derive_adjustments(state.active_modifiers)
    state.append_log("system", LogKind.MODIFIER_APPLIED, {
        "modifier_id": modifier.id,
        "name": modifier.name,
        "duration": modifier.duration,
    })
    logger.debug("Modifier %s active in match %s", modifier.id, state.match_id)


def apply_modifiers(state: MatchState, modifiers: list[Modifier]) -> MatchState:
    new_state = state.clone()
    for modifier in modifiers:
        activate_modifier(new_state, modifier)
    new_state.adjustments = derive_adjustments(new_state.active_modifiers)
    return new_state


def tick(state: MatchState) -> MatchState:
    """
    Decrement every finite duration by one; drop modifiers that reach zero.

    A modifier with duration N is therefore in force for N ticks' worth of
    turns: it is still present after N-1 ticks and gone after the Nth.
    """
    new_state = state.clone()
    remaining: list[ActiveModifier] = []
    for active in new_state.active_modifiers:
        if active.remaining is None:
            remaining.append(active)
            continue
        active.remaining -= 1
        if active.remaining > 0:
            remaining.append(active)
        else:
            new_state.append_log("system", LogKind.MODIFIER_EXPIRED, {
                "modifier_id": active.modifier.id,
                "name": active.modifier.name,
            })
    new_state.active_modifiers = remaining
    new_state.adjustments = derive_adjustments(remaining)
    return new_state
