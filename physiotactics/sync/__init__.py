"""
Sync - Observer payloads, conflict ordering and connection fan-out.
"""

from .payload import LOG_TAIL, build_broadcast_payload, build_sync_packet
from .conflicts import (
    PRIORITY,
    WINDOW_SECONDS,
    Resolution,
    SyncAction,
    SyncQueue,
    actions_conflict,
    resolve,
)
from .hub import SyncHub, translate_inbound

__all__ = [
    "LOG_TAIL",
    "build_broadcast_payload",
    "build_sync_packet",
    "PRIORITY",
    "WINDOW_SECONDS",
    "Resolution",
    "SyncAction",
    "SyncQueue",
    "actions_conflict",
    "resolve",
    "SyncHub",
    "translate_inbound",
]
