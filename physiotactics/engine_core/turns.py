"""
Turn Machine - End-of-turn sequencing, phase progression and match end.
"""

from __future__ import annotations
import logging

from ..config import MatchConfig
from . import modifiers
from .state import LogKind, MatchState, Phase, Role
from .victory import VictoryEvaluator, VictoryProgress

logger = logging.getLogger(__name__)


def update_phase(state: MatchState, config: MatchConfig) -> None:
    """Move investigation to diagnosis once enough clues are known. In place."""
    if (state.phase == Phase.INVESTIGATION
            and len(state.discovered_clues) >= config.diagnosis_clue_threshold):
        state.phase = Phase.DIAGNOSIS
        state.append_log("system", LogKind.PHASE_CHANGE, {
            "from": Phase.INVESTIGATION.value,
            "to": Phase.DIAGNOSIS.value,
        })


def finish_if_over(state: MatchState, progress: VictoryProgress) -> None:
    """Record the latest progress and enter the terminal phase if the match ended."""
    state.victory = progress
    if not progress.game_over or state.is_over:
        return
    state.outcome = progress.outcome()
    state.phase = Phase.SCORING
    state.append_log("system", LogKind.MATCH_ENDED, state.outcome.to_dict())
    logger.info(
        "Match %s ended: %s (%s) clinician=%d patient=%d",
        state.match_id, state.outcome.winner, state.outcome.reason,
        state.outcome.clinician_score, state.outcome.patient_score,
    )


class TurnMachine:
    def __init__(self, config: MatchConfig, evaluator: VictoryEvaluator):
        self.config = config
        self.evaluator = evaluator

    def end_turn(self, state: MatchState) -> MatchState:
        """
        Close the active role's turn and open the next one.

        Order: tick modifiers and active effects, switch role, bump the turn
        number on return to the first role, consume pending skips, regenerate,
        clear per-turn plays, draw up to the floor, log, evaluate victory.
        """
        new_state = modifiers.tick(state)
        self._tick_active_effects(new_state)
        previous = new_state.active_role

        self._switch(new_state)
        while new_state.pending_skips.get(new_state.active_role, 0) > 0 and not self._at_limit(new_state):
            skipped = new_state.active_role
            new_state.pending_skips[skipped] -= 1
            new_state.append_log(skipped, LogKind.TURN_SKIPPED, {"turn": new_state.turn_number})
            self._switch(new_state)

        role = new_state.active_role
        regenerated = self._regenerate(new_state, role)
        lost = self._periodic_loss(new_state, role)

        new_state.cards_played_this_turn = []
        drew = self._draw(new_state, role)

        new_state.append_log("system", LogKind.TURN_CHANGE, {
            "from": previous.value,
            "to": role.value,
            "turn": new_state.turn_number,
            "regenerated": regenerated,
            "periodic_loss": lost,
            "drew": drew,
        })

        finish_if_over(new_state, self.evaluator.evaluate(new_state))
        return new_state

    def _switch(self, state: MatchState) -> None:
        state.active_role = state.active_role.opponent
        if state.active_role == state.first_role:
            state.turn_number += 1

    def _at_limit(self, state: MatchState) -> bool:
        return state.turn_number >= state.max_turns

    def _tick_active_effects(self, state: MatchState) -> None:
        for role in Role:
            kept = []
            for effect in state.active_effects.get(role, []):
                if effect.remaining_turns is None:
                    kept.append(effect)
                    continue
                effect.remaining_turns -= 1
                if effect.remaining_turns > 0:
                    kept.append(effect)
            state.active_effects[role] = kept

    def _regenerate(self, state: MatchState, role: Role) -> int:
        role_config = self.config.role(role.value)
        resource = role_config.primary_resource
        adj = modifiers.adjustments_of(state)
        amount = max(
            self.config.minimum_regeneration,
            role_config.base_regeneration + adj.regeneration_delta(resource),
        )
        before = state.pool(role).get(resource)
        state.adjust(role, resource, amount)
        return state.pool(role).get(resource) - before

    def _periodic_loss(self, state: MatchState, role: Role) -> int:
        """Interval-based energy loss, applied when a new turn number begins."""
        if role != state.first_role or not state.pool(role).has("energy"):
            return 0
        before = state.pool(role).get("energy")
        for interval, magnitude in modifiers.adjustments_of(state).periodic_losses:
            if interval > 0 and state.turn_number % interval == 0:
                state.adjust(role, "energy", -magnitude)
        return before - state.pool(role).get("energy")

    def _draw(self, state: MatchState, role: Role) -> str | None:
        hand = state.hands.setdefault(role, [])
        pool = state.draw_pools.get(role, [])
        if len(hand) >= self.config.hand_size_floor or not pool:
            return None
        if len(hand) >= self.config.max_hand_size:
            return None
        card = pool.pop(0)
        hand.append(card)
        return card.instance_id
