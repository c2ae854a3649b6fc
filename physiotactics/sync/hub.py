"""
Sync Hub - Fans committed match states out to connected observers.

Connections are anything with an async send_json (a Starlette WebSocket in
the API). Inbound messages are translated to engine Actions; the engine
stays the only authority on whether they apply.

Inbound messages:
- {"type": "ping"}
- {"type": "play_card", "role": ..., "card_instance_id": ..., "target_id": ...}
- {"type": "counter_card", ...same fields as play_card}
- {"type": "end_turn", "role": ...}
- {"type": "pass", "role": ..., "reason": ...}
"""

from __future__ import annotations
from typing import Any, Protocol
import logging

from ..engine_core.action import Action, ActionType
from ..engine_core.state import MatchState, Role
from .conflicts import Resolution, SyncAction, SyncQueue
from .payload import build_sync_packet

logger = logging.getLogger(__name__)


class Connection(Protocol):
    async def send_json(self, data: Any) -> None: ...


class SyncHub:
    def __init__(self):
        self._connections: dict[str, list[Connection]] = {}
        self._queues: dict[str, SyncQueue] = {}

    def register(self, match_id: str, connection: Connection) -> None:
        self._connections.setdefault(match_id, []).append(connection)

    def unregister(self, match_id: str, connection: Connection) -> None:
        connections = self._connections.get(match_id)
        if connections and connection in connections:
            connections.remove(connection)
        if not connections:
            self._connections.pop(match_id, None)

    def connection_count(self, match_id: str) -> int:
        return len(self._connections.get(match_id, []))

    def drop_match(self, match_id: str) -> None:
        self._connections.pop(match_id, None)
        self._queues.pop(match_id, None)

    async def send(self, match_id: str, message: dict[str, Any]) -> int:
        """Send a message to every connection of a match; dead ones are dropped."""
        connections = self._connections.get(match_id, [])
        dead = []
        delivered = 0
        for connection in list(connections):
            try:
                await connection.send_json(message)
                delivered += 1
            except Exception:
                dead.append(connection)
        for connection in dead:
            logger.debug("Dropping dead connection for match %s", match_id)
            self.unregister(match_id, connection)
        return delivered

    async def broadcast(
        self,
        state: MatchState,
        acting_role: Role | str,
        version: int,
        action: Action | None = None,
    ) -> int:
        packet = build_sync_packet(
            state, acting_role, version, action.to_dict() if action else None,
        )
        return await self.send(state.match_id, packet)

    def admit(self, match_id: str, action: Action, timestamp: float | None = None) -> Resolution | None:
        """
        Track an inbound action for conflict detection.

        Returns the Resolution only when the incoming action lost a conflict.
        """
        sync_action = SyncAction(
            action_type=action.action_type,
            role=action.payload.role or "",
            card_instance_id=action.payload.card_instance_id,
            target_id=action.payload.target_id,
        )
        if timestamp is not None:
            sync_action.timestamp = timestamp
        if action.action_id:
            sync_action.action_id = action.action_id
        queue = self._queues.setdefault(match_id, SyncQueue())
        resolution = queue.submit(sync_action)
        if resolution is not None:
            logger.info(
                "Conflict in match %s: accepted %s over %s (%s)",
                match_id,
                resolution.accepted.action_id,
                resolution.rejected.action_id,
                resolution.reason,
            )
        if resolution is not None and resolution.rejected is sync_action:
            return resolution
        return None


def translate_inbound(message: dict[str, Any]) -> Action | None:
    """
    Turn a client message into an Action.

    Returns None for anything that is not an action (pings, unknown types,
    missing fields, a non-numeric timestamp).
    """
    if not isinstance(message, dict):
        return None
    timestamp = message.get("timestamp")
    if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, (int, float))):
        return None

    try:
        action_type = ActionType(message.get("type"))
    except ValueError:
        return None

    role = message.get("role")
    if not role:
        return None

    if action_type in (ActionType.PLAY_CARD, ActionType.COUNTER):
        card_instance_id = message.get("card_instance_id")
        if not card_instance_id:
            return None
        factory = Action.play_card if action_type == ActionType.PLAY_CARD else Action.counter
        action = factory(role, card_instance_id, message.get("target_id"))
    elif action_type == ActionType.END_TURN:
        action = Action.end_turn(role)
    else:
        action = Action.pass_turn(role, message.get("reason", ""))

    action.action_id = message.get("action_id")
    action.timestamp = None if timestamp is None else float(timestamp)
    return action
