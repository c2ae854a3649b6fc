"""
Bots - Heuristic opponents for the non-human role.
"""

from .policy import OpponentPolicy, BotDecision, RandomPolicy, FirstLegalPolicy
from .evaluator import CardScorer, CardScore, ScoringWeights
from .personality import Personality, PERSONALITIES, get_personality
from .opponent_bot import OpponentBot

__all__ = [
    "OpponentPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "CardScorer",
    "CardScore",
    "ScoringWeights",
    "Personality",
    "PERSONALITIES",
    "get_personality",
    "OpponentBot",
]
