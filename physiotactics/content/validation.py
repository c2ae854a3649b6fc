"""
Content Validation - Catches authoring mistakes before a match starts.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .cards import CardType, CLINICIAN_CARD_TYPES, PATIENT_CARD_TYPES, TargetKind
from .catalog import CardCatalog


KNOWN_PHASES = frozenset({"setup", "investigation", "diagnosis", "scoring"})
KNOWN_COUNTERS = frozenset(t.value for t in CardType) | frozenset({
    "reveal_clues",
    "information_reduction",
    "emotional_state_change",
    "add_complexity",
    "diagnostic_progress",
})


class ContentValidationError(ValueError):
    """Raised when authored content is malformed."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Invalid content: " + "; ".join(errors))


@dataclass
class ContentReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_catalog(catalog: CardCatalog) -> ContentReport:
    """Check every card for cost sanity, role consistency and references."""
    report = ContentReport()

    for card_id, card in catalog.cards.items():
        if card.id != card_id:
            report.errors.append(f"{card_id}: registered under a different id ({card.id})")

        for resource, cost in (
            ("energy", card.energy_cost),
            ("deflection", card.deflection_cost),
            ("emotional", card.emotional_cost),
        ):
            if cost < 0:
                report.errors.append(f"{card_id}: negative {resource} cost")

        role = catalog.role_of(card_id)
        if role == "clinician" and card.card_type not in CLINICIAN_CARD_TYPES:
            report.errors.append(f"{card_id}: {card.card_type.value} card in clinician pool")
        if role == "patient" and card.card_type not in PATIENT_CARD_TYPES:
            report.errors.append(f"{card_id}: {card.card_type.value} card in patient pool")
        if role == "clinician" and (card.deflection_cost or card.emotional_cost):
            report.errors.append(f"{card_id}: clinician card costs patient resources")
        if role == "patient" and card.energy_cost:
            report.errors.append(f"{card_id}: patient card costs energy")

        if card.requires_target and card.target_kind is None:
            report.errors.append(f"{card_id}: requires a target but declares no target kind")
        if card.target_kind is not None and not isinstance(card.target_kind, TargetKind):
            report.errors.append(f"{card_id}: unknown target kind")

        unknown_phases = card.phase_restrictions - KNOWN_PHASES
        if unknown_phases:
            report.errors.append(f"{card_id}: unknown phases {sorted(unknown_phases)}")

        unknown_counters = card.counters - KNOWN_COUNTERS
        if unknown_counters:
            report.warnings.append(f"{card_id}: counters never match {sorted(unknown_counters)}")

        if not 0.0 <= card.information_reduction <= 1.0:
            report.errors.append(f"{card_id}: information_reduction outside [0, 1]")

        if card.triggered_change is not None and not card.triggers:
            report.warnings.append(f"{card_id}: triggered_change without triggers")

    return report


def ensure_valid(catalog: CardCatalog) -> CardCatalog:
    """Raise ContentValidationError if the catalog has errors."""
    report = validate_catalog(catalog)
    if not report.is_valid:
        raise ContentValidationError(report.errors)
    return catalog
