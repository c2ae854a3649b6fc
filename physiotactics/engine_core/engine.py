"""
Match Engine - The single entry point that owns one match's state.

Every action runs under the match's lock:
validate -> compute interactions -> apply primary effects -> compute and
apply chained effects -> evaluate victory -> commit. Intermediate states
are private clones; the live state is replaced only on success, so a
rejected or failed action leaves it exactly as it was.
"""

from __future__ import annotations
from typing import Any, Callable
import logging
import random
import threading

from ..config import MatchConfig
from ..content.cards import ClueDefinition
from .action import Action, ActionResult, ActionType
from .action_generator import ActionGenerator
from .effect_resolver import InteractionEngine
from .modifiers import Modifier
from .reducer import Reducer
from .state import LogKind, MatchState, Role
from .turns import TurnMachine, finish_if_over
from .validation import Validator
from .victory import VictoryEvaluator

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[dict[str, Any]], None]


class MatchEngine:
    """
    Usage:
        engine = MatchEngine(state, config, clue_library, seed=7)
        result = engine.play_card("clinician", "pt_rom_assessment_1")
        if result.success:
            engine.end_turn("clinician")
    """

    def __init__(
        self,
        state: MatchState,
        config: MatchConfig,
        clue_library: dict[str, list[ClueDefinition]],
        modifier_library: dict[str, Modifier] | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config
        self.rng = rng or random.Random(seed)
        self.validator = Validator(config)
        self.interactions = InteractionEngine(config, self.rng)
        self.reducer = Reducer(config, clue_library, modifier_library, self.rng)
        self.evaluator = VictoryEvaluator(config)
        self.turns = TurnMachine(config, self.evaluator)
        self.generator = ActionGenerator(self.validator)

        self._lock = threading.RLock()
        self._listeners: list[SnapshotListener] = []
        self._version = 0

        if state.victory is None:
            state = state.clone()
            finish_if_over(state, self.evaluator.evaluate(state))
        self._state = state

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def version(self) -> int:
        return self._version

    def add_listener(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def apply(self, action: Action) -> ActionResult:
        handlers = {
            ActionType.PLAY_CARD: self._handle_play,
            ActionType.COUNTER: self._handle_play,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.PASS: self._handle_pass,
        }
        handler = handlers.get(action.action_type)
        if handler is None:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )

        try:
            role = Role(action.payload.role)
        except ValueError:
            return ActionResult.failure(f"Unknown role: {action.payload.role}", error_code="INVALID_ROLE")

        with self._lock:
            try:
                result = handler(role, action)
            except Exception as e:
                logger.exception("Action %s failed in match %s", action.action_type.value, self._state.match_id)
                return ActionResult.failure(str(e), error_code="HANDLER_ERROR")
            if result.success:
                self._commit(result.new_state)
            return result

    def play_card(self, role: str, card_instance_id: str, target_id: str | None = None) -> ActionResult:
        return self.apply(Action.play_card(role, card_instance_id, target_id))

    def end_turn(self, role: str) -> ActionResult:
        return self.apply(Action.end_turn(role))

    def pass_turn(self, role: str, reason: str = "") -> ActionResult:
        return self.apply(Action.pass_turn(role, reason))

    def legal_plays(self, role: str) -> list[Action]:
        with self._lock:
            return self.generator.legal_plays(self._state, Role(role))

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "version": self._version,
                "checksum": self._state.checksum(),
                "state": self._state.to_dict(),
            }

    def _handle_play(self, role: Role, action: Action) -> ActionResult:
        state = self._state
        payload = action.payload
        validation = self.validator.validate(state, payload.card_instance_id, role, payload.target_id)
        if not validation.is_valid:
            logger.info(
                "Rejected %s play in match %s: %s",
                role.value, state.match_id, validation.code.value,
            )
            return ActionResult.failure(
                validation.reason,
                error_code=validation.code.value,
                suggestions=list(validation.suggestions),
            )

        instance = state.find_in_hand(role, payload.card_instance_id)
        interactions = self.interactions.compute_interactions(
            state, instance.definition, role, payload.target_id,
        )
        new_state = self.reducer.apply_card_effects(
            state, instance, role, interactions, payload.target_id,
        )
        chained = self.interactions.process_chained_effects(new_state, interactions, role)
        interactions.secondary = chained
        new_state = self.reducer.apply_chained_effects(new_state, chained, role)
        finish_if_over(new_state, self.evaluator.evaluate(new_state))

        logger.debug("%s played %s in match %s", role.value, instance.card_id, state.match_id)
        impact = interactions.educational_impact
        return ActionResult.success_with_state(
            new_state,
            changes=[e.description for e in interactions.primary if e.description],
            effects=[e.to_dict() for e in interactions.primary],
            chained_effects=[e.to_dict() for e in chained],
            educational_impact=impact.to_dict() if impact else None,
        )

    def _handle_end_turn(self, role: Role, action: Action) -> ActionResult:
        validation = self.validator.validate_turn_action(self._state, role)
        if not validation.is_valid:
            return ActionResult.failure(validation.reason, error_code=validation.code.value)
        new_state = self.turns.end_turn(self._state)
        logger.debug(
            "Turn passed to %s (turn %d) in match %s",
            new_state.active_role.value, new_state.turn_number, new_state.match_id,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{new_state.active_role.value} to act, turn {new_state.turn_number}"],
        )

    def _handle_pass(self, role: Role, action: Action) -> ActionResult:
        """Explicit no-play: log the pass, then end the turn."""
        validation = self.validator.validate_turn_action(self._state, role)
        if not validation.is_valid:
            return ActionResult.failure(validation.reason, error_code=validation.code.value)
        state = self._state.clone()
        state.append_log(role, LogKind.PASS, {"reason": action.payload.reason or ""})
        new_state = self.turns.end_turn(state)
        return ActionResult.success_with_state(new_state, changes=[f"{role.value} passed"])

    def _commit(self, new_state: MatchState) -> None:
        self._state = new_state
        self._version += 1
        if not self._listeners:
            return
        snapshot = {
            "version": self._version,
            "checksum": new_state.checksum(),
            "state": new_state.to_dict(),
        }
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed for match %s", new_state.match_id)
