"""
Opponent Policy - Interface for choosing a play for the non-human role.

Policies choose from pre-validated candidates (see ActionGenerator); they
never need to re-check legality. A decision whose action is None is an
explicit pass.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import random

from ..engine_core.action import Action
from ..engine_core.state import MatchState


@dataclass
class BotDecision:
    action: Action | None
    explanation: str = ""
    confidence: float = 0.5
    scores: dict[str, float] = field(default_factory=dict)
    strategy: str | None = None

    @property
    def is_pass(self) -> bool:
        return self.action is None

    def to_dict(self) -> dict:
        return {
            "action": self.action.to_dict() if self.action else None,
            "explanation": self.explanation,
            "confidence": round(self.confidence, 3),
            "scores": {k: round(v, 3) for k, v in self.scores.items()},
            "strategy": self.strategy,
            "pass": self.is_pass,
        }


class OpponentPolicy(ABC):
    @abstractmethod
    def select_play(self, state: MatchState, legal_plays: list[Action]) -> BotDecision:
        """Pick one of legal_plays, or return a pass decision."""

    def get_name(self) -> str:
        return self.__class__.__name__


class RandomPolicy(OpponentPolicy):
    """Uniform choice over legal plays. Useful for fuzzing the engine."""

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_play(self, state: MatchState, legal_plays: list[Action]) -> BotDecision:
        if not legal_plays:
            return BotDecision(action=None, explanation="No playable cards")
        return BotDecision(action=self.rng.choice(legal_plays), explanation="Random play")


class FirstLegalPolicy(OpponentPolicy):
    """Always the first legal play. Deterministic, for tests."""

    def select_play(self, state: MatchState, legal_plays: list[Action]) -> BotDecision:
        if not legal_plays:
            return BotDecision(action=None, explanation="No playable cards")
        return BotDecision(action=legal_plays[0], explanation="First legal play", confidence=1.0)
