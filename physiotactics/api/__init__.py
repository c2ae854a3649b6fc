"""
API Module - HTTP and WebSocket interface.

Exposes match sessions over REST for a presentation client:
1. Creates a match for a case and difficulty
2. Plays the human's cards and ends their turn
3. Runs the opponent bot's turn
4. Streams state updates to observers

All state is session-scoped and in memory.
"""

from .schemas import (
    # Requests
    CreateMatchRequest,
    PlayCardRequest,
    # Responses
    MatchResponse,
    PlayResponse,
    TurnResponse,
    SnapshotResponse,
    ErrorResponse,
    # Enums
    ErrorCode,
    SessionStatus,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateMatchRequest",
    "PlayCardRequest",
    # Responses
    "MatchResponse",
    "PlayResponse",
    "TurnResponse",
    "SnapshotResponse",
    "ErrorResponse",
    # Enums
    "ErrorCode",
    "SessionStatus",
    # Service
    "APIService",
    "create_app",
]
