"""
Content - Card and clue definitions, catalogs and authoring checks.
"""

from .cards import (
    CardType,
    CardDefinition,
    ClueDefinition,
    TargetKind,
    TriggeredChange,
    CLINICIAN_CARD_TYPES,
    PATIENT_CARD_TYPES,
)
from .catalog import CardCatalog
from .validation import ContentValidationError, ContentReport, validate_catalog, ensure_valid

__all__ = [
    "CardType",
    "CardDefinition",
    "ClueDefinition",
    "TargetKind",
    "TriggeredChange",
    "CLINICIAN_CARD_TYPES",
    "PATIENT_CARD_TYPES",
    "CardCatalog",
    "ContentValidationError",
    "ContentReport",
    "validate_catalog",
    "ensure_valid",
]
