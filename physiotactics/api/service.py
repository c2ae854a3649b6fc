"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session and engine calls
2. Manages sessions and their game loops
3. Formats responses

This layer is framework-agnostic; errors come back as ErrorResponse values
rather than exceptions.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    CreateMatchRequest,
    PlayCardRequest,
    # Responses
    CaseInfo,
    CaseListResponse,
    ErrorResponse,
    LegalPlay,
    MatchResponse,
    ModifierListResponse,
    PlayResponse,
    SnapshotResponse,
    TurnResponse,
    # Enums
    ErrorCode,
    SessionStatus,
)
from ..cases import CASES, MODIFIERS, MODIFIER_SETS
from ..session import GameLoop, Session, SessionManager, TurnResult


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()
        match = service.create_match(CreateMatchRequest(case_id="ankle_sprain"))
        service.play_card(match.session_id, PlayCardRequest(card_instance_id="..."))
        service.end_turn(match.session_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    def create_match(self, request: CreateMatchRequest) -> MatchResponse | ErrorResponse:
        if request.case_id not in CASES:
            return ErrorResponse(
                error=f"Unknown case: {request.case_id}",
                error_code=ErrorCode.INVALID_CASE,
                details={"valid_cases": sorted(CASES)},
            )
        unknown = [m for m in request.modifier_ids or [] if m not in MODIFIERS]
        if unknown or (request.modifier_set and request.modifier_set not in MODIFIER_SETS):
            return ErrorResponse(
                error=f"Unknown modifier(s): {unknown or [request.modifier_set]}",
                error_code=ErrorCode.INVALID_MODIFIER,
            )

        try:
            session = self.session_manager.create_session(
                case_id=request.case_id,
                difficulty=request.difficulty,
                human_role=request.human_role,
                max_turns=request.max_turns,
                modifier_ids=request.modifier_ids,
                modifier_set=request.modifier_set,
                seed=request.random_seed,
            )
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.VALIDATION_ERROR)

        self._game_loops[session.session_id] = GameLoop(session)
        return self._match_response(session)

    def get_match(self, session_id: str) -> MatchResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._match_response(session)

    def play_card(self, session_id: str, request: PlayCardRequest) -> PlayResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        result = self._loop(session).play_card(request.card_instance_id, request.target_id)
        if not result.success:
            return ErrorResponse(
                error=result.error or "Play rejected",
                error_code=ErrorCode.ACTION_REJECTED,
                rejection_code=result.error_code,
                suggestions=result.suggestions,
            )

        return PlayResponse(
            session_id=session_id,
            state_changes=result.state_changes,
            effects=result.effects,
            chained_effects=result.chained_effects,
            educational_impact=result.educational_impact,
            match=self._match_response(session),
        )

    def end_turn(self, session_id: str) -> TurnResponse | ErrorResponse:
        """End the human's turn; the opponent's turn runs right after."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        if not session.is_human_turn() or session.engine.state.is_over:
            return self._turn_rejected(session)
        return self._turn_response(session, self._loop(session).end_turn())

    def run_opponent_turn(self, session_id: str) -> TurnResponse | ErrorResponse:
        """Run a pending opponent turn, e.g. when the human plays second."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        result = self._loop(session).run_opponent_turn()
        if not result.success:
            return ErrorResponse(
                error=result.errors[0] if result.errors else "Not the opponent's turn",
                error_code=ErrorCode.ACTION_REJECTED,
                rejection_code="NOT_YOUR_TURN",
            )
        return self._turn_response(session, result)

    def get_snapshot(self, session_id: str) -> SnapshotResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        snapshot = session.engine.snapshot()
        return SnapshotResponse(session_id=session_id, **snapshot)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        self._game_loops.pop(session_id, None)
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def list_cases(self) -> CaseListResponse:
        return CaseListResponse(cases=[
            CaseInfo(
                id=case.id,
                name=case.name,
                description=case.description,
                recommended_difficulty=case.recommended_difficulty,
            )
            for case in CASES.values()
        ])

    def list_modifiers(self) -> ModifierListResponse:
        return ModifierListResponse(
            modifiers=[m.to_dict() for m in MODIFIERS.values()],
            sets={
                key: {
                    "name": s.name,
                    "description": s.description,
                    "count": s.count,
                    "pool": list(s.pool),
                }
                for key, s in MODIFIER_SETS.items()
            },
        )

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _loop(self, session: Session) -> GameLoop:
        loop = self._game_loops.get(session.session_id)
        if loop is None:
            loop = self._game_loops[session.session_id] = GameLoop(session)
        return loop

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _turn_rejected(self, session: Session) -> ErrorResponse:
        if session.engine.state.is_over:
            return ErrorResponse(
                error="Match is over",
                error_code=ErrorCode.ACTION_REJECTED,
                rejection_code="MATCH_OVER",
            )
        return ErrorResponse(
            error=f"It is {session.engine.state.active_role.value}'s turn",
            error_code=ErrorCode.ACTION_REJECTED,
            rejection_code="NOT_YOUR_TURN",
        )

    def _status(self, session: Session) -> SessionStatus:
        if session.engine.state.is_over:
            return SessionStatus.GAME_OVER
        if session.is_human_turn():
            return SessionStatus.YOUR_TURN
        return SessionStatus.OPPONENT_TURN

    def _match_response(self, session: Session) -> MatchResponse:
        engine = session.engine
        state = engine.state
        status = self._status(session)

        legal_plays = []
        if status == SessionStatus.YOUR_TURN:
            legal_plays = [
                LegalPlay(
                    action_type=a.action_type.value,
                    card_instance_id=a.payload.card_instance_id,
                    target_id=a.payload.target_id,
                )
                for a in engine.legal_plays(session.human_role.value)
            ]

        predicted = []
        if status != SessionStatus.GAME_OVER:
            predicted = [
                s.to_dict() for s in session.bot.scorer.predict_plays(state, session.opponent_role)
            ]

        return MatchResponse(
            session_id=session.session_id,
            status=status,
            human_role=session.human_role.value,
            case_id=state.case_id,
            difficulty=state.difficulty,
            version=engine.version,
            state=state.to_dict(),
            legal_plays=legal_plays,
            predicted_opponent_plays=predicted,
        )

    def _turn_response(self, session: Session, result: TurnResult) -> TurnResponse:
        return TurnResponse(
            session_id=session.session_id,
            success=result.success,
            opponent_actions=result.opponent_actions,
            thinking_delay_ms=result.thinking_delay_ms,
            winner=result.winner,
            errors=result.errors,
            match=self._match_response(session),
        )
