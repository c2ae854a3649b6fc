"""
Session - In-memory match sessions and the human/opponent turn loop.
"""

from .manager import Session, SessionManager, SessionState
from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "Session",
    "SessionManager",
    "SessionState",
    "GameLoop",
    "LoopState",
    "TurnResult",
]
