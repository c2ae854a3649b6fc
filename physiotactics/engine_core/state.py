"""
Match State - The complete state of one clinician vs. patient match.

Design principles:
- Immutable-friendly: the engine clones once per action and commits the clone
- Bounded: every resource write goes through ResourcePool, which clamps
- Serializable: to_dict() feeds snapshots, the HTTP API and sync packets
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
from copy import deepcopy
from enum import Enum
import hashlib
import json
import time

from ..config import MatchConfig, ResourceRange, RoleConfig
from ..content.cards import CardDefinition, CardType


class Role(Enum):
    CLINICIAN = "clinician"
    PATIENT = "patient"

    @property
    def opponent(self) -> Role:
        return Role.PATIENT if self is Role.CLINICIAN else Role.CLINICIAN


class Phase(Enum):
    SETUP = "setup"
    INVESTIGATION = "investigation"
    DIAGNOSIS = "diagnosis"
    SCORING = "scoring"


@dataclass
class ResourcePool:
    """
    Named integer resources with declared ranges.

    with_delta/with_value are the only way values change and both clamp, so a
    pool can never hold a value outside its declared range.
    """
    values: dict[str, int]
    ranges: dict[str, ResourceRange]

    @classmethod
    def from_config(cls, role_config: RoleConfig) -> ResourcePool:
        return cls(
            values={name: r.default for name, r in role_config.resources.items()},
            ranges=dict(role_config.resources),
        )

    def __getitem__(self, name: str) -> int:
        return self.values[name]

    def get(self, name: str, default: int = 0) -> int:
        return self.values.get(name, default)

    def has(self, name: str) -> bool:
        return name in self.values

    def with_delta(self, name: str, delta: int) -> ResourcePool:
        if name not in self.values:
            return self
        return self.with_value(name, self.values[name] + delta)

    def with_value(self, name: str, value: int) -> ResourcePool:
        if name not in self.values:
            return self
        values = dict(self.values)
        values[name] = self.ranges[name].clamp(int(value))
        return ResourcePool(values=values, ranges=self.ranges)

    def at_floor(self, name: str) -> bool:
        return self.has(name) and self.values[name] <= self.ranges[name].min

    def maximum(self, name: str) -> int:
        return self.ranges[name].max

    def to_dict(self) -> dict[str, int]:
        return dict(self.values)


@dataclass
class CardInstance:
    """
    A card in a hand or draw pool.

    Two copies of the same definition have different instance ids.
    """
    instance_id: str
    definition: CardDefinition

    @property
    def card_id(self) -> str:
        return self.definition.id

    @property
    def card_type(self) -> CardType:
        return self.definition.card_type

    @property
    def name(self) -> str:
        return self.definition.name

    def __hash__(self):
        return hash(self.instance_id)

    def __eq__(self, other):
        if not isinstance(other, CardInstance):
            return False
        return self.instance_id == other.instance_id

    def to_dict(self, public: bool = False) -> dict[str, Any]:
        if public:
            return {
                "id": self.instance_id,
                "name": self.name,
                "type": self.card_type.value,
            }
        data = self.definition.to_dict()
        data["card_id"] = data.pop("id")
        data["instance_id"] = self.instance_id
        return data


@dataclass(frozen=True)
class Clue:
    """A discovered clue. Confidence is fixed at discovery time."""
    id: str
    category: str
    description: str
    reliability: float
    confidence: float
    discovered_turn: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "description": self.description,
            "reliability": self.reliability,
            "confidence": self.confidence,
            "discovered_turn": self.discovered_turn,
        }


class LogKind(Enum):
    MATCH_STARTED = "match_started"
    CARD_PLAYED = "card_played"
    CHAINED_EFFECT = "chained_effect"
    ASSESSMENT_FAILED = "assessment_failed"
    TURN_CHANGE = "turn_change"
    TURN_SKIPPED = "turn_skipped"
    PASS = "pass"
    MODIFIER_APPLIED = "modifier_applied"
    MODIFIER_EXPIRED = "modifier_expired"
    PHASE_CHANGE = "phase_change"
    MATCH_ENDED = "match_ended"


@dataclass(frozen=True)
class LogEntry:
    """One append-only log record."""
    actor: str
    kind: LogKind
    turn: int
    payload: dict[str, Any] = field(default_factory=dict)
    effects: tuple[dict[str, Any], ...] = ()
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "actor": self.actor,
            "kind": self.kind.value,
            "turn": self.turn,
            "payload": dict(self.payload),
            "effects": list(self.effects),
            "timestamp": self.timestamp,
        }


@dataclass
class ActiveEffect:
    """A lingering effect such as a patient's emotional state."""
    id: str
    name: str
    owner: Role
    source_card_id: str
    kind: str
    description: str = ""
    intensity: str = "moderate"
    remaining_turns: int | None = 3
    triggers: frozenset[str] = frozenset()
    triggered_change: Any = None  # content.cards.TriggeredChange
    required_response: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "owner": self.owner.value,
            "source_card_id": self.source_card_id,
            "kind": self.kind,
            "description": self.description,
            "intensity": self.intensity,
            "remaining_turns": self.remaining_turns,
            "triggers": sorted(self.triggers),
            "required_response": self.required_response,
        }


@dataclass
class Complexity:
    id: str
    complexity_type: str
    description: str = ""
    source_card_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "complexity_type": self.complexity_type,
            "description": self.description,
            "source_card_id": self.source_card_id,
        }


@dataclass
class LastPlay:
    card_id: str
    card_type: CardType
    role: Role
    turn: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "card_type": self.card_type.value,
            "role": self.role.value,
            "turn": self.turn,
        }


@dataclass
class MatchOutcome:
    winner: str  # "clinician", "patient" or "draw"
    reason: str
    clinician_score: int
    patient_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "winner": self.winner,
            "reason": self.reason,
            "clinician_score": self.clinician_score,
            "patient_score": self.patient_score,
        }


@dataclass
class MatchState:
    """
    Complete match state.

    Mutation happens only on a clone taken by the engine at the start of an
    action; the live state is replaced wholesale on commit.
    """
    match_id: str
    case_id: str
    difficulty: str
    max_turns: int

    turn_number: int = 1
    active_role: Role = Role.CLINICIAN
    first_role: Role = Role.CLINICIAN
    phase: Phase = Phase.SETUP

    resources: dict[Role, ResourcePool] = field(default_factory=dict)
    hands: dict[Role, list[CardInstance]] = field(default_factory=dict)
    draw_pools: dict[Role, list[CardInstance]] = field(default_factory=dict)
    active_effects: dict[Role, list[ActiveEffect]] = field(default_factory=dict)

    discovered_clues: list[Clue] = field(default_factory=list)
    complexity: list[Complexity] = field(default_factory=list)

    # engine_core.modifiers.ActiveModifier / Adjustments
    active_modifiers: list[Any] = field(default_factory=list)
    adjustments: Any = None

    cards_played_this_turn: list[str] = field(default_factory=list)
    last_card_played: LastPlay | None = None
    pending_skips: dict[Role, int] = field(default_factory=dict)
    information_reduction: float = 0.0

    log: list[LogEntry] = field(default_factory=list)
    victory: Any = None  # engine_core.victory.VictoryProgress
    outcome: MatchOutcome | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(cls, match_id: str, case_id: str, config: MatchConfig) -> MatchState:
        """Empty state with pools at their configured defaults."""
        return cls(
            match_id=match_id,
            case_id=case_id,
            difficulty=config.difficulty,
            max_turns=config.max_turns,
            resources={
                role: ResourcePool.from_config(config.role(role.value)) for role in Role
            },
            hands={role: [] for role in Role},
            draw_pools={role: [] for role in Role},
            active_effects={role: [] for role in Role},
            pending_skips={role: 0 for role in Role},
        )

    @property
    def is_over(self) -> bool:
        return self.outcome is not None

    def pool(self, role: Role) -> ResourcePool:
        return self.resources[role]

    def hand(self, role: Role) -> list[CardInstance]:
        return self.hands.get(role, [])

    def find_in_hand(self, role: Role, instance_id: str) -> CardInstance | None:
        for card in self.hand(role):
            if card.instance_id == instance_id:
                return card
        return None

    def all_active_effects(self) -> list[ActiveEffect]:
        return [e for role in Role for e in self.active_effects.get(role, [])]

    def plays_of_type(self, card_type: CardType, role: Role | None = None) -> int:
        """Count cards of a type played so far this match."""
        count = 0
        for entry in self.log:
            if entry.kind != LogKind.CARD_PLAYED:
                continue
            if entry.payload.get("card_type") != card_type.value:
                continue
            if role is not None and entry.actor != role.value:
                continue
            count += 1
        return count

    def entries(self, kind: LogKind) -> list[LogEntry]:
        return [e for e in self.log if e.kind == kind]

    def adjust(self, role: Role, resource: str, delta: int) -> None:
        """In-place clamped change; only used on a clone owned by the caller."""
        self.resources[role] = self.resources[role].with_delta(resource, delta)

    def append_log(self, actor: Role | str, kind: LogKind,
                   payload: dict[str, Any] | None = None,
                   effects: tuple[dict[str, Any], ...] = ()) -> LogEntry:
        entry = LogEntry(
            actor=actor.value if isinstance(actor, Role) else actor,
            kind=kind,
            turn=self.turn_number,
            payload=payload or {},
            effects=effects,
        )
        self.log.append(entry)
        return entry

    def clone(self) -> MatchState:
        """Deep copy for safe mutation."""
        return deepcopy(self)

    def checksum(self) -> str:
        """Divergence check over turn, active role, both pools and clue count."""
        structure = {
            "turn": self.turn_number,
            "active_role": self.active_role.value,
            "resources": {
                role.value: pool.to_dict() for role, pool in self.resources.items()
            },
            "clues": len(self.discovered_clues),
        }
        encoded = json.dumps(structure, sort_keys=True).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()[:16]

    def to_dict(self, log_limit: int | None = None) -> dict[str, Any]:
        log = self.log if log_limit is None else self.log[-log_limit:]
        return {
            "match_id": self.match_id,
            "case_id": self.case_id,
            "difficulty": self.difficulty,
            "turn_number": self.turn_number,
            "max_turns": self.max_turns,
            "active_role": self.active_role.value,
            "phase": self.phase.value,
            "resources": {
                role.value: pool.to_dict() for role, pool in self.resources.items()
            },
            "hands": {
                role.value: [c.to_dict() for c in cards] for role, cards in self.hands.items()
            },
            "draw_pool_sizes": {
                role.value: len(cards) for role, cards in self.draw_pools.items()
            },
            "discovered_clues": [c.to_dict() for c in self.discovered_clues],
            "active_effects": [e.to_dict() for e in self.all_active_effects()],
            "complexity": [c.to_dict() for c in self.complexity],
            "active_modifiers": [m.to_dict() for m in self.active_modifiers],
            "cards_played_this_turn": list(self.cards_played_this_turn),
            "last_card_played": self.last_card_played.to_dict() if self.last_card_played else None,
            "log": [e.to_dict() for e in log],
            "victory": self.victory.to_dict() if self.victory is not None else None,
            "outcome": self.outcome.to_dict() if self.outcome is not None else None,
        }
