"""
Clue Library - Discoverable findings grouped by assessment category.
"""

from __future__ import annotations

from ..content import ClueDefinition


def _pool(category: str, entries: list[tuple[str, str, float]]) -> list[ClueDefinition]:
    return [
        ClueDefinition(id=clue_id, category=category, description=text, reliability=reliability)
        for clue_id, text, reliability in entries
    ]


CLUE_LIBRARY: dict[str, list[ClueDefinition]] = {
    "physical_exam": _pool("physical_exam", [
        ("pe_1", "Swelling noted in lateral ankle", 0.9),
        ("pe_2", "Tenderness over ATFL", 0.85),
        ("pe_3", "Limited dorsiflexion ROM", 0.8),
    ]),
    "history": _pool("history", [
        ("h_1", "Pain began immediately after injury", 0.95),
        ("h_2", 'Heard a "pop" when injury occurred', 0.7),
        ("h_3", "Unable to bear weight initially", 0.8),
    ]),
    "special_test": _pool("special_test", [
        ("st_1", "No bony tenderness at the malleoli", 0.9),
        ("st_2", "Positive anterior drawer test", 0.75),
    ]),
    "functional": _pool("functional", [
        ("fn_1", "Able to take four steps with a limp", 0.85),
        ("fn_2", "Single-leg stance limited to 5 seconds", 0.7),
    ]),
    "screening": _pool("screening", [
        ("sc_1", "No bowel or bladder changes reported", 0.95),
        ("sc_2", "No night pain or unexplained weight loss", 0.9),
    ]),
    "movement": _pool("movement", [
        ("mv_1", "Pain reproduced with lumbar flexion", 0.8),
        ("mv_2", "Guarded movement during sit-to-stand", 0.75),
    ]),
}


def clue_library() -> dict[str, list[ClueDefinition]]:
    """A copy callers may extend without touching the shared library."""
    return {category: list(pool) for category, pool in CLUE_LIBRARY.items()}
