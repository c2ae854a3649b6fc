"""
Broadcast Payload - Reduced state for observers.

Hands are cut down to id, name and type so an observer never sees card
payloads. Only the last LOG_TAIL log entries are sent.
"""

from __future__ import annotations
from typing import Any
import time

from ..engine_core.state import MatchState, Role


LOG_TAIL = 10


def build_broadcast_payload(state: MatchState, acting_role: Role | str) -> dict[str, Any]:
    role = acting_role.value if isinstance(acting_role, Role) else acting_role
    return {
        "id": state.match_id,
        "turn": state.turn_number,
        "current_player": state.active_role.value,
        "acting_role": role,
        "phase": state.phase.value,
        "resources": {r.value: pool.to_dict() for r, pool in state.resources.items()},
        "clues": [c.to_dict() for c in state.discovered_clues],
        "active_effects": [e.to_dict() for e in state.all_active_effects()],
        "log": [e.to_dict() for e in state.log[-LOG_TAIL:]],
        "hands": {
            r.value: [c.to_dict(public=True) for c in cards]
            for r, cards in state.hands.items()
        },
        "outcome": state.outcome.to_dict() if state.outcome else None,
    }


def build_sync_packet(
    state: MatchState,
    acting_role: Role | str,
    version: int,
    action: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Wire packet carrying the payload plus divergence-check fields."""
    return {
        "type": "state_update",
        "match_id": state.match_id,
        "version": version,
        "checksum": state.checksum(),
        "timestamp": time.time(),
        "action": action,
        "payload": build_broadcast_payload(state, acting_role),
    }
