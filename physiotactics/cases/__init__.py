"""
Cases - Authored cards, clues, modifiers and match setup for each clinical case.
"""

from .cards import build_catalog
from .clues import CLUE_LIBRARY, clue_library
from .modifiers import (
    MODIFIERS,
    MODIFIER_SETS,
    get_modifier,
    get_modifiers_by_ids,
    get_random_modifiers,
)
from .setup import CASES, CaseDefinition, setup_match, create_engine

__all__ = [
    "build_catalog",
    "CLUE_LIBRARY",
    "clue_library",
    "MODIFIERS",
    "MODIFIER_SETS",
    "get_modifier",
    "get_modifiers_by_ids",
    "get_random_modifiers",
    "CASES",
    "CaseDefinition",
    "setup_match",
    "create_engine",
]
