"""
FastAPI Application - REST API for a clinician-vs-patient match.

Endpoints:
    POST   /api/v1/matches                     Create match session
    GET    /api/v1/matches                     List active sessions
    GET    /api/v1/matches/{id}                Match state, victory progress, legal plays
    DELETE /api/v1/matches/{id}                End session
    POST   /api/v1/matches/{id}/play           Play a card from the human's hand
    POST   /api/v1/matches/{id}/end-turn       End the human's turn (opponent then acts)
    POST   /api/v1/matches/{id}/opponent-turn  Run a pending opponent turn
    GET    /api/v1/matches/{id}/snapshot       Persistence payload with checksum
    GET    /api/v1/cases                       Available clinical cases
    GET    /api/v1/modifiers                   Modifier library and sets
    WS     /api/v1/matches/{id}/ws             Real-time state updates and actions

Rejected plays come back as 409 with the engine's rejection code and
remediation suggestions; the match state is unchanged.
"""

from typing import Union
import json
import logging
import os

# Environment configuration
PHYSIO_ENV = os.getenv("PHYSIO_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, WebSocket, WebSocketDisconnect
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .. import __version__
    from ..engine_core.action import ActionType
    from ..sync import SyncHub, build_sync_packet, translate_inbound
    from .service import APIService
    from .schemas import (
        # Request models
        CreateMatchRequest,
        PlayCardRequest,
        # Response models
        CaseListResponse,
        EndSessionResponse,
        ErrorResponse,
        HealthResponse,
        MatchResponse,
        ModifierListResponse,
        PlayResponse,
        SessionListResponse,
        SnapshotResponse,
        TurnResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="PhysioTactics Engine API",
        description="""
Clinician vs. simulated patient card game, played against a heuristic opponent.

## Turn Flow

1. `POST /matches` creates a match; the human plays `human_role`
2. `POST /play` plays a card from the human's hand
3. `POST /end-turn` ends the human's turn; the opponent acts before the response returns
4. Repeat until `status` is `game_over`

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `ACTION_REJECTED` | Engine rejected the play; see `rejection_code` and `suggestions` |
| `INVALID_CASE` | Unknown case id |
| `INVALID_MODIFIER` | Unknown modifier or modifier set |
| `VALIDATION_ERROR` | Malformed request |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()
    hub = SyncHub()

    STATUS_CODES = {
        ErrorCode.SESSION_NOT_FOUND: 404,
        ErrorCode.ACTION_REJECTED: 409,
        ErrorCode.INTERNAL_ERROR: 500,
    }

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=STATUS_CODES.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    async def broadcast_session(session_id: str, action=None) -> None:
        session = api_service.session_manager.get_session(session_id)
        if session is None:
            return
        engine = session.engine
        await hub.broadcast(engine.state, engine.state.active_role, engine.version, action)

    # =========================================================================
    # Match Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches",
        response_model=MatchResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Create a new match",
    )
    async def create_match(body: CreateMatchRequest) -> Union[MatchResponse, JSONResponse]:
        """
        Create a match for a case and difficulty.

        If the human plays the patient, call `/opponent-turn` to let the
        clinician bot open the match.
        """
        response = api_service.create_match(body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/matches",
        response_model=SessionListResponse,
        tags=["Matches"],
        summary="List active sessions",
    )
    async def list_matches() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/matches/{session_id}",
        response_model=MatchResponse,
        responses={404: {"model": ErrorResponse, "description": "Session not found"}},
        tags=["Matches"],
        summary="Get match state",
    )
    async def get_match(session_id: str) -> Union[MatchResponse, JSONResponse]:
        response = api_service.get_match(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.delete(
        "/api/v1/matches/{session_id}",
        response_model=EndSessionResponse,
        responses={404: {"model": ErrorResponse, "description": "Session not found"}},
        tags=["Matches"],
        summary="End a match session",
    )
    async def end_match(session_id: str) -> Union[EndSessionResponse, JSONResponse]:
        if not api_service.end_session(session_id):
            return make_error_response(ErrorResponse(
                error=f"Session {session_id} not found",
                error_code=ErrorCode.SESSION_NOT_FOUND,
            ))
        hub.drop_match(session_id)
        return EndSessionResponse(success=True, session_id=session_id)

    @app.get(
        "/api/v1/matches/{session_id}/snapshot",
        response_model=SnapshotResponse,
        responses={404: {"model": ErrorResponse, "description": "Session not found"}},
        tags=["Matches"],
        summary="Persistence snapshot",
    )
    async def get_snapshot(session_id: str) -> Union[SnapshotResponse, JSONResponse]:
        response = api_service.get_snapshot(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches/{session_id}/play",
        response_model=PlayResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Play rejected"},
        },
        tags=["Game Loop"],
        summary="Play a card",
    )
    async def play_card(session_id: str, body: PlayCardRequest) -> Union[PlayResponse, JSONResponse]:
        """
        Play a card from the human's hand.

        **Request Body:**
        ```json
        {"card_instance_id": "pt_rom_assessment_1", "target_id": null}
        ```
        """
        response = api_service.play_card(session_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        await broadcast_session(session_id)
        return response

    @app.post(
        "/api/v1/matches/{session_id}/end-turn",
        response_model=TurnResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Not the human's turn"},
        },
        tags=["Game Loop"],
        summary="End the human's turn",
    )
    async def end_turn(session_id: str) -> Union[TurnResponse, JSONResponse]:
        response = api_service.end_turn(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        await broadcast_session(session_id)
        return response

    @app.post(
        "/api/v1/matches/{session_id}/opponent-turn",
        response_model=TurnResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Not the opponent's turn"},
        },
        tags=["Game Loop"],
        summary="Run the opponent's turn",
    )
    async def opponent_turn(session_id: str) -> Union[TurnResponse, JSONResponse]:
        response = api_service.run_opponent_turn(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        await broadcast_session(session_id)
        return response

    # =========================================================================
    # Content Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/cases",
        response_model=CaseListResponse,
        tags=["Content"],
        summary="List clinical cases",
    )
    async def list_cases() -> CaseListResponse:
        return api_service.list_cases()

    @app.get(
        "/api/v1/modifiers",
        response_model=ModifierListResponse,
        tags=["Content"],
        summary="List modifiers and modifier sets",
    )
    async def list_modifiers() -> ModifierListResponse:
        return api_service.list_modifiers()

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/matches/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Match state changed (version, checksum, payload)
        - action_result: Outcome of an action sent on this socket
        - conflict: Action lost a conflict against a near-simultaneous one
        - error: Error occurred
        - pong: Reply to ping

        Messages from client:
        - ping: Keep-alive
        - play_card / counter_card / end_turn / pass: Human actions
        """
        await websocket.accept()

        session = api_service.session_manager.get_session(session_id)
        if session is None:
            await websocket.send_json({
                "type": "error",
                "payload": {"message": f"Session {session_id} not found"},
            })
            await websocket.close()
            return

        hub.register(session_id, websocket)

        try:
            engine = session.engine
            await websocket.send_json(
                build_sync_packet(engine.state, engine.state.active_role, engine.version)
            )

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue

                if not isinstance(message, dict):
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Messages must be JSON objects"},
                    })
                    continue

                if message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})
                    continue

                action = translate_inbound(message)
                if action is None:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": f"Unsupported or malformed message: {message.get('type')}"},
                    })
                    continue

                if action.payload.role != session.human_role.value:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Only the human role may act over this connection"},
                    })
                    continue

                conflict = hub.admit(session_id, action, action.timestamp)
                if conflict is not None:
                    await websocket.send_json({"type": "conflict", "payload": conflict.to_dict()})
                    continue

                result = engine.apply(action)
                await websocket.send_json({
                    "type": "action_result",
                    "payload": {
                        "success": result.success,
                        "error": result.error,
                        "error_code": result.error_code,
                        "suggestions": result.suggestions,
                        "effects": result.effects,
                        "chained_effects": result.chained_effects,
                    },
                })
                if not result.success:
                    continue

                await hub.broadcast(engine.state, action.payload.role, engine.version, action)
                if action.action_type in (ActionType.END_TURN, ActionType.PASS):
                    turn = api_service.run_opponent_turn(session_id)
                    if not isinstance(turn, ErrorResponse):
                        await broadcast_session(session_id)

        except WebSocketDisconnect:
            logger.debug("WebSocket closed for session %s", session_id)
        finally:
            hub.unregister(session_id, websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="physiotactics-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "PhysioTactics Engine API",
            "version": __version__,
            "environment": PHYSIO_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn physiotactics.api.app:app
app = create_app()
