"""
Action System - Actions, payloads, and results.

Every state change requested from outside the engine (human player, opponent
bot, sync hub) is an Action. The engine answers each one with an ActionResult
that either carries the new state or a typed rejection.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    PLAY_CARD = "play_card"
    COUNTER = "counter_card"
    END_TURN = "end_turn"
    PASS = "pass"


@dataclass
class ActionPayload:
    role: str | None = None
    card_instance_id: str | None = None
    target_id: str | None = None
    reason: str | None = None
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class Action:
    action_type: ActionType
    payload: ActionPayload
    timestamp: float | None = None
    action_id: str | None = None

    @classmethod
    def play_card(cls, role: str, card_instance_id: str, target_id: str | None = None) -> Action:
        return cls(
            action_type=ActionType.PLAY_CARD,
            payload=ActionPayload(role=role, card_instance_id=card_instance_id, target_id=target_id),
        )

    @classmethod
    def counter(cls, role: str, card_instance_id: str, target_id: str | None = None) -> Action:
        """
        Play a card named in a counter opportunity.

        The response window is advisory: the counter still goes through the
        normal checks, so it is only legal on the countering role's own turn.
        """
        return cls(
            action_type=ActionType.COUNTER,
            payload=ActionPayload(role=role, card_instance_id=card_instance_id, target_id=target_id),
        )

    @classmethod
    def end_turn(cls, role: str) -> Action:
        return cls(action_type=ActionType.END_TURN, payload=ActionPayload(role=role))

    @classmethod
    def pass_turn(cls, role: str, reason: str = "") -> Action:
        return cls(action_type=ActionType.PASS, payload=ActionPayload(role=role, reason=reason))

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "role": self.payload.role,
            "card_instance_id": self.payload.card_instance_id,
            "target_id": self.payload.target_id,
            "reason": self.payload.reason,
        }


@dataclass
class ActionResult:
    """
    Result of applying an action.

    On rejection, new_state is None and the live state is untouched.
    """
    success: bool
    new_state: Any | None = None  # MatchState
    error: str | None = None
    error_code: str | None = None
    suggestions: list[str] = field(default_factory=list)

    # For UI/presentation
    state_changes: list[str] = field(default_factory=list)
    effects: list[dict[str, Any]] = field(default_factory=list)
    chained_effects: list[dict[str, Any]] = field(default_factory=list)
    educational_impact: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        suggestions: list[str] | None = None,
    ) -> ActionResult:
        return cls(success=False, error=error, error_code=error_code, suggestions=suggestions or [])

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        effects: list[dict[str, Any]] | None = None,
        chained_effects: list[dict[str, Any]] | None = None,
        educational_impact: dict[str, Any] | None = None,
    ) -> ActionResult:
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            effects=effects or [],
            chained_effects=chained_effects or [],
            educational_impact=educational_impact,
        )
