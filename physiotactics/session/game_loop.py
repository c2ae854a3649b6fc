"""
Game Loop - Drives a session between human actions and opponent turns.

The loop:
1. Human plays cards and ends their turn
2. The opponent bot plays (or passes) and ends its turn
3. Repeat until the match ends

The opponent's thinking delay is reported, never slept on; the turn
ownership check in the engine is what keeps a human action from landing
during the opponent's turn.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TYPE_CHECKING
import logging

from ..engine_core.action import ActionResult

if TYPE_CHECKING:
    from .manager import Session

logger = logging.getLogger(__name__)


class LoopState(Enum):
    WAITING_HUMAN_ACTION = "waiting_human_action"
    RUNNING_OPPONENT = "running_opponent"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    success: bool
    loop_state: LoopState
    opponent_actions: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    thinking_delay_ms: int = 0
    winner: str | None = None


class GameLoop:
    """
    Usage:
        loop = GameLoop(session)
        loop.play_card("pt_rom_assessment_1")
        result = loop.end_turn()   # runs the opponent's turn too
    """

    def __init__(self, session: Session, plays_per_turn: int = 1):
        self.session = session
        self.plays_per_turn = plays_per_turn

    @property
    def engine(self):
        return self.session.engine

    def play_card(self, card_instance_id: str, target_id: str | None = None) -> ActionResult:
        return self.engine.play_card(self.session.human_role.value, card_instance_id, target_id)

    def end_turn(self) -> TurnResult:
        """End the human's turn, then let the opponent act if the match continues."""
        result = self.engine.end_turn(self.session.human_role.value)
        if not result.success:
            return TurnResult(
                success=False,
                loop_state=self._loop_state(),
                errors=[result.error or "End turn rejected"],
            )
        if self.engine.state.is_over:
            return self._finish()
        return self.run_opponent_turn()

    def run_opponent_turn(self) -> TurnResult:
        """
        Let the bot play up to plays_per_turn cards, then end its turn.

        A pass ends the turn immediately.
        """
        from .manager import SessionState

        session = self.session
        role = session.opponent_role
        if self.engine.state.active_role != role or self.engine.state.is_over:
            return TurnResult(
                success=False,
                loop_state=self._loop_state(),
                errors=["Not the opponent's turn"],
            )

        session.state = SessionState.OPPONENT_TURN
        actions: list[dict[str, Any]] = []
        passed = False

        for _ in range(self.plays_per_turn):
            decision = session.bot.select_play(self.engine.state, self.engine.legal_plays(role.value))
            if decision.is_pass:
                self.engine.pass_turn(role.value, decision.explanation)
                actions.append(decision.to_dict())
                passed = True
                break
            result = self.engine.apply(decision.action)
            entry = decision.to_dict()
            entry["success"] = result.success
            entry["effects"] = result.effects
            actions.append(entry)
            if not result.success:
                logger.warning("Opponent play rejected: %s", result.error)
                break
            if self.engine.state.is_over:
                break

        state = self.engine.state
        if not passed and not state.is_over and state.active_role == role:
            self.engine.end_turn(role.value)

        if self.engine.state.is_over:
            result = self._finish()
            result.opponent_actions = actions
            return result

        session.state = SessionState.ACTIVE
        return TurnResult(
            success=True,
            loop_state=self._loop_state(),
            opponent_actions=actions,
            thinking_delay_ms=session.bot.personality.thinking_delay_ms,
        )

    def _finish(self) -> TurnResult:
        from .manager import SessionState

        self.session.state = SessionState.GAME_OVER
        outcome = self.engine.state.outcome
        return TurnResult(
            success=True,
            loop_state=LoopState.GAME_OVER,
            winner=outcome.winner if outcome else None,
        )

    def _loop_state(self) -> LoopState:
        state = self.engine.state
        if state.is_over:
            return LoopState.GAME_OVER
        if state.active_role == self.session.human_role:
            return LoopState.WAITING_HUMAN_ACTION
        return LoopState.RUNNING_OPPONENT
