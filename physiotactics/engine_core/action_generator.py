"""
Action Generator - Enumerates the legal actions for a role.

Used by:
1. The opponent bot to pick a play
2. The API to show which cards are playable
3. Tests (every generated play must pass validation)
"""

from __future__ import annotations
from dataclasses import dataclass

from .action import Action
from .state import MatchState, Role
from .validation import Validator, legal_targets


@dataclass
class ActionGenerator:
    validator: Validator

    def legal_plays(self, state: MatchState, role: Role) -> list[Action]:
        """Every card play that would pass validation right now."""
        plays: list[Action] = []
        if state.is_over or state.active_role != role:
            return plays

        for instance in state.hand(role):
            card = instance.definition
            if card.target_kind is not None:
                targets = legal_targets(state, card)
                if not card.requires_target:
                    targets = [None] + targets
            else:
                targets = [None]

            for target_id in targets:
                result = self.validator.validate(state, instance.instance_id, role, target_id)
                if result.is_valid:
                    plays.append(Action.play_card(role.value, instance.instance_id, target_id))
        return plays

    def generate(self, state: MatchState, role: Role) -> list[Action]:
        """Legal plays plus end-turn."""
        if state.is_over or state.active_role != role:
            return []
        return self.legal_plays(state, role) + [Action.end_turn(role.value)]
