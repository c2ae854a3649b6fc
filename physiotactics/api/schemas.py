"""
Pydantic Schemas for API - Request/response models for OpenAPI.

Error Codes:
- SESSION_NOT_FOUND: Match session does not exist or has ended
- ACTION_REJECTED: The engine rejected the play (see rejection_code)
- INVALID_CASE: Unknown case id
- INVALID_MODIFIER: Unknown modifier id or modifier set
- VALIDATION_ERROR: Malformed request
- INTERNAL_ERROR: Unexpected failure
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    YOUR_TURN = "your_turn"
    OPPONENT_TURN = "opponent_turn"
    GAME_OVER = "game_over"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    ACTION_REJECTED = "ACTION_REJECTED"
    INVALID_CASE = "INVALID_CASE"
    INVALID_MODIFIER = "INVALID_MODIFIER"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Request Models
# =============================================================================

class CreateMatchRequest(BaseModel):
    """Request to start a new match against the opponent bot."""
    case_id: str = Field("ankle_sprain", description="Clinical case to play")
    difficulty: str = Field("intermediate", description="beginner, intermediate, advanced or expert")
    human_role: str = Field("clinician", description="clinician or patient")
    max_turns: Optional[int] = Field(None, ge=1, description="Override the difficulty's turn limit")
    modifier_ids: Optional[list[str]] = Field(None, description="Explicit modifiers to apply")
    modifier_set: Optional[str] = Field(None, description="Draw modifiers from a set: easy, medium, hard, mixed")
    random_seed: Optional[int] = Field(None, description="Seed for reproducible matches")


class PlayCardRequest(BaseModel):
    """Play a card from the human's hand."""
    card_instance_id: str = Field(..., description="Instance id of the card in hand")
    target_id: Optional[str] = Field(None, description="Active effect, complexity or clue id")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    rejection_code: Optional[str] = Field(None, description="Engine rejection code for ACTION_REJECTED")
    suggestions: list[str] = Field(default_factory=list)
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class LegalPlay(BaseModel):
    action_type: str
    card_instance_id: Optional[str] = None
    target_id: Optional[str] = None


class MatchResponse(BaseModel):
    """Session status plus the full match state."""
    session_id: str
    status: SessionStatus
    human_role: str
    case_id: str
    difficulty: str
    version: int
    state: dict[str, Any]
    legal_plays: list[LegalPlay] = Field(default_factory=list)
    predicted_opponent_plays: list[dict[str, Any]] = Field(default_factory=list)


class PlayResponse(BaseModel):
    """Result of a successful play."""
    session_id: str
    success: bool = True
    state_changes: list[str] = Field(default_factory=list)
    effects: list[dict[str, Any]] = Field(default_factory=list)
    chained_effects: list[dict[str, Any]] = Field(default_factory=list)
    educational_impact: Optional[dict[str, Any]] = None
    match: MatchResponse


class TurnResponse(BaseModel):
    """Result of ending a turn or running the opponent's turn."""
    session_id: str
    success: bool
    opponent_actions: list[dict[str, Any]] = Field(default_factory=list)
    thinking_delay_ms: int = 0
    winner: Optional[str] = None
    errors: list[str] = Field(default_factory=list)
    match: MatchResponse


class SnapshotResponse(BaseModel):
    """Persistence payload for a match."""
    session_id: str
    version: int
    checksum: str
    state: dict[str, Any]


class CaseInfo(BaseModel):
    id: str
    name: str
    description: str
    recommended_difficulty: str


class CaseListResponse(BaseModel):
    cases: list[CaseInfo]


class ModifierListResponse(BaseModel):
    modifiers: list[dict[str, Any]]
    sets: dict[str, dict[str, Any]]


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
