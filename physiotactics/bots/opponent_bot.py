"""
Opponent Bot - Heuristic player for the non-human role.

Each turn the bot:
1. Rolls a strategy from its personality (deflect, cooperate, emotional)
2. Scores every legal play with the CardScorer
3. Multiplies in personality and strategy preferences
4. Picks from the top-N with weighted randomness
5. Passes explicitly when nothing is playable
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import random

from ..config import MatchConfig
from ..engine_core.action import Action
from ..engine_core.state import MatchState, Role
from .evaluator import CardScorer
from .personality import INTERMEDIATE, STRATEGY_TYPES, Personality
from .policy import BotDecision, OpponentPolicy

logger = logging.getLogger(__name__)


@dataclass
class OpponentBot(OpponentPolicy):
    """
    Usage:
        bot = OpponentBot(role=Role.PATIENT, config=config, personality=ADVANCED)
        decision = bot.select_play(state, engine.legal_plays("patient"))
        if decision.is_pass:
            engine.pass_turn("patient")
    """
    role: Role
    config: MatchConfig
    personality: Personality = None  # type: ignore
    scorer: CardScorer = None  # type: ignore
    rng: random.Random = None  # type: ignore

    def __post_init__(self):
        if self.personality is None:
            self.personality = INTERMEDIATE
        if self.scorer is None:
            self.scorer = CardScorer(self.config, self.personality.weights)
        if self.rng is None:
            self.rng = random.Random()

    def select_play(self, state: MatchState, legal_plays: list[Action]) -> BotDecision:
        strategy = self.personality.pick_strategy(self.rng.random())
        if not legal_plays:
            return BotDecision(action=None, explanation="No playable cards, passing", strategy=strategy)

        favored = STRATEGY_TYPES[strategy]
        scored: list[tuple[Action, float]] = []
        scores: dict[str, float] = {}
        for action in legal_plays:
            instance = state.find_in_hand(self.role, action.payload.card_instance_id)
            if instance is None:
                continue
            card_score = self.scorer.score_card(state, instance, self.role)
            if card_score.probability <= 0:
                continue
            value = card_score.probability
            value *= self.personality.type_preferences.get(instance.card_type, 1.0)
            if instance.card_type in favored:
                value *= self.personality.strategy_multiplier
            scored.append((action, value))
            scores[instance.instance_id] = value

        if not scored:
            return BotDecision(
                action=None,
                explanation="Nothing worth playing, passing",
                scores=scores,
                strategy=strategy,
            )

        scored.sort(key=lambda pair: pair[1], reverse=True)
        top = scored[:max(1, self.personality.top_n)]
        action, value = self.rng.choices(top, weights=[v for _, v in top], k=1)[0]

        instance = state.find_in_hand(self.role, action.payload.card_instance_id)
        logger.debug(
            "%s bot chose %s (strategy=%s, score=%.2f)",
            self.role.value, instance.card_id, strategy, value,
        )
        return BotDecision(
            action=action,
            explanation=f"{self.personality.name} plays {instance.name} ({strategy})",
            confidence=value / sum(v for _, v in top),
            scores=scores,
            strategy=strategy,
        )

    def get_name(self) -> str:
        return f"{self.personality.name} ({self.role.value})"
