"""
Engine Core - Rules engine for one clinician vs. patient match.

This module contains:
- MatchState: complete match state with bounded resource pools
- Validator: ordered legality checks for card plays
- InteractionEngine: primary, chained and counter effects of a play
- Reducer: applies effects to a cloned state
- TurnMachine: end-of-turn sequencing
- VictoryEvaluator: condition progress, scores and winner
- MatchEngine: the lock-guarded entry point tying these together
"""

from .state import (
    Role,
    Phase,
    ResourcePool,
    CardInstance,
    Clue,
    LogKind,
    LogEntry,
    ActiveEffect,
    Complexity,
    MatchOutcome,
    MatchState,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .modifiers import (
    Modifier,
    ModifierEffect,
    ModifierKind,
    ActiveModifier,
    Adjustments,
    apply_modifiers,
    tick,
)
from .validation import Validator, ValidationResult, RejectionCode, modified_energy_cost
from .effect_resolver import InteractionEngine, Interactions, Effect, EffectType, EducationalImpact
from .reducer import Reducer
from .turns import TurnMachine
from .victory import VictoryEvaluator, VictoryProgress, determine_winner
from .action_generator import ActionGenerator
from .engine import MatchEngine

__all__ = [
    "Role",
    "Phase",
    "ResourcePool",
    "CardInstance",
    "Clue",
    "LogKind",
    "LogEntry",
    "ActiveEffect",
    "Complexity",
    "MatchOutcome",
    "MatchState",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Modifier",
    "ModifierEffect",
    "ModifierKind",
    "ActiveModifier",
    "Adjustments",
    "apply_modifiers",
    "tick",
    "Validator",
    "ValidationResult",
    "RejectionCode",
    "modified_energy_cost",
    "InteractionEngine",
    "Interactions",
    "Effect",
    "EffectType",
    "EducationalImpact",
    "Reducer",
    "TurnMachine",
    "VictoryEvaluator",
    "VictoryProgress",
    "determine_winner",
    "ActionGenerator",
    "MatchEngine",
]
