"""
Card Catalog - Lookup and pooling of card definitions.

Cards are grouped three ways:
- role pools: the core cards each role always draws from
- case pools: extra cards per case, per role
- advanced pools: extra cards per role for non-beginner matches
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .cards import CardDefinition


@dataclass
class CardCatalog:
    cards: dict[str, CardDefinition] = field(default_factory=dict)
    role_pools: dict[str, list[str]] = field(default_factory=dict)
    case_pools: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    advanced_pools: dict[str, list[str]] = field(default_factory=dict)

    def add(self, card: CardDefinition, role: str, case_id: str | None = None,
            advanced: bool = False) -> None:
        """Register a card under exactly one pool."""
        if card.id in self.cards:
            raise ValueError(f"Duplicate card id: {card.id}")
        self.cards[card.id] = card
        if case_id is not None:
            self.case_pools.setdefault(case_id, {}).setdefault(role, []).append(card.id)
        elif advanced:
            self.advanced_pools.setdefault(role, []).append(card.id)
        else:
            self.role_pools.setdefault(role, []).append(card.id)

    def get_card(self, card_id: str) -> CardDefinition | None:
        return self.cards.get(card_id)

    def pool_for(
        self,
        role: str,
        case_id: str | None = None,
        include_advanced: bool = False,
    ) -> list[CardDefinition]:
        """Cards available to a role for a case, in catalog order."""
        ids = list(self.role_pools.get(role, []))
        if case_id is not None:
            ids.extend(self.case_pools.get(case_id, {}).get(role, []))
        if include_advanced:
            ids.extend(self.advanced_pools.get(role, []))
        return [self.cards[card_id] for card_id in ids]

    def role_of(self, card_id: str) -> str | None:
        """Which role's pool a card belongs to."""
        pools = [self.role_pools, self.advanced_pools]
        pools.extend(self.case_pools.values())
        for pool in pools:
            for role, ids in pool.items():
                if card_id in ids:
                    return role
        return None

    @property
    def case_ids(self) -> list[str]:
        return list(self.case_pools)
