"""
Conflict Resolution - Orders near-simultaneous action attempts for observers.

Policy: when two attempts are more than WINDOW_SECONDS apart, the earlier
one wins. Inside the window the action-type priority decides
(counter > play > end turn), falling back to the earlier timestamp.

This is advisory. The engine's turn-ownership check stays authoritative.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Any
import time
import uuid

from ..engine_core.action import ActionType


WINDOW_SECONDS = 0.1
QUEUE_LENGTH = 10
CONFLICT_LOOKBACK = 3

PRIORITY: dict[ActionType, int] = {
    ActionType.COUNTER: 10,
    ActionType.PLAY_CARD: 5,
    ActionType.PASS: 1,
    ActionType.END_TURN: 1,
}


@dataclass
class SyncAction:
    action_type: ActionType
    role: str
    timestamp: float = field(default_factory=time.time)
    card_instance_id: str | None = None
    target_id: str | None = None
    action_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def priority(self) -> int:
        return PRIORITY.get(self.action_type, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "role": self.role,
            "timestamp": self.timestamp,
            "card_instance_id": self.card_instance_id,
            "target_id": self.target_id,
            "action_id": self.action_id,
        }


@dataclass
class Resolution:
    accepted: SyncAction
    rejected: SyncAction
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "accepted": self.accepted.to_dict(),
            "rejected": self.rejected.to_dict(),
            "reason": self.reason,
        }


_PLAY_TYPES = {ActionType.PLAY_CARD, ActionType.COUNTER}


def actions_conflict(a: SyncAction, b: SyncAction) -> bool:
    """Two plays by the same role, or two plays at the same target."""
    if a.action_type not in _PLAY_TYPES or b.action_type not in _PLAY_TYPES:
        return False
    if a.role == b.role:
        return True
    return bool(a.target_id) and a.target_id == b.target_id


def resolve(a: SyncAction, b: SyncAction) -> Resolution:
    earlier, later = (a, b) if a.timestamp <= b.timestamp else (b, a)
    if later.timestamp - earlier.timestamp > WINDOW_SECONDS:
        return Resolution(accepted=earlier, rejected=later, reason="earlier_timestamp")
    if a.priority != b.priority:
        winner, loser = (a, b) if a.priority > b.priority else (b, a)
        return Resolution(accepted=winner, rejected=loser, reason="action_priority")
    return Resolution(accepted=earlier, rejected=later, reason="earlier_timestamp")


class SyncQueue:
    """Recent accepted actions for one match."""

    def __init__(self, maxlen: int = QUEUE_LENGTH):
        self._actions: deque[SyncAction] = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._actions)

    def submit(self, action: SyncAction) -> Resolution | None:
        """
        Record an action, checking it against the last few accepted ones.

        Returns the Resolution when a conflict was found. A losing incoming
        action is not recorded; a winning one replaces the one it beat.
        """
        for previous in list(self._actions)[-CONFLICT_LOOKBACK:]:
            if not actions_conflict(action, previous):
                continue
            resolution = resolve(previous, action)
            if resolution.accepted is action:
                self._actions.remove(previous)
                self._actions.append(action)
            return resolution
        self._actions.append(action)
        return None

    def recent(self) -> list[SyncAction]:
        return list(self._actions)
