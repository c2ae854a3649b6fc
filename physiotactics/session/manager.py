"""
Session Manager - Creates and tracks in-memory match sessions.

A session pairs one MatchEngine with the human's role and a bot for the
other role. Sessions live in memory only; ending a session discards the
match. Each session owns its engine exclusively, so no lock ever spans two
matches.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import random
import time
import uuid

from ..bots import OpponentBot, get_personality
from ..cases import create_engine
from ..engine_core.engine import MatchEngine
from ..engine_core.state import Role

logger = logging.getLogger(__name__)


class SessionState(Enum):
    ACTIVE = "active"
    OPPONENT_TURN = "opponent_turn"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


@dataclass
class Session:
    session_id: str
    engine: MatchEngine
    human_role: Role
    bot: OpponentBot
    created_at: float
    state: SessionState = SessionState.ACTIVE
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def opponent_role(self) -> Role:
        return self.human_role.opponent

    def is_active(self) -> bool:
        return self.state in {SessionState.ACTIVE, SessionState.OPPONENT_TURN}

    def is_human_turn(self) -> bool:
        return self.engine.state.active_role == self.human_role


class SessionManager:
    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        case_id: str,
        difficulty: str = "intermediate",
        human_role: str = "clinician",
        max_turns: int | None = None,
        modifier_ids: list[str] | None = None,
        modifier_set: str | None = None,
        seed: int | None = None,
    ) -> Session:
        """
        Create a new match session.

        Raises ValueError for an unknown case, difficulty, modifier or role.
        """
        role = Role(human_role)
        session_id = str(uuid.uuid4())
        # Sync channels are keyed by match id, which must equal the session id.
        engine = create_engine(
            case_id,
            difficulty=difficulty,
            max_turns=max_turns,
            modifier_ids=modifier_ids,
            modifier_set=modifier_set,
            seed=seed,
            match_id=session_id,
        )
        bot = OpponentBot(
            role=role.opponent,
            config=engine.config,
            personality=get_personality(difficulty),
            rng=random.Random(None if seed is None else seed + 1),
        )
        session = Session(
            session_id=session_id,
            engine=engine,
            human_role=role,
            bot=bot,
            created_at=time.time(),
            metadata={"case_id": case_id, "difficulty": difficulty},
        )
        self._sessions[session_id] = session
        logger.info("Created session %s for case %s (%s)", session_id, case_id, difficulty)
        return session

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        if reason == "completed":
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """Drop finished sessions older than max_age_seconds."""
        now = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.created_at > max_age_seconds and not session.is_active()
        ]
        for sid in stale:
            self.end_session(sid, reason="stale")
        return len(stale)
