"""
Card Scorer - Play probability for each card in a hand.

probability = base
            + affordability bonus (or 0 overall when unaffordable)
            + strategic bonus when the card addresses a state deficiency
            + urgency bonus for assessment/reasoning late in the match
"""

from __future__ import annotations
from dataclasses import dataclass

from ..config import MatchConfig
from ..content.cards import CardType
from ..engine_core.state import CardInstance, MatchState, Role
from ..engine_core.validation import RejectionCode, Validator, required_costs


@dataclass
class ScoringWeights:
    base_probability: float = 0.5
    affordability_bonus: float = 0.2
    strategic_bonus: float = 0.3
    urgency_bonus: float = 0.2

    # Deficiency thresholds
    low_rapport: int = 3
    few_clues: int = 3
    low_cooperation: int = 3


@dataclass
class CardScore:
    instance_id: str
    card_id: str
    card_type: CardType
    probability: float
    affordable: bool
    reasons: list[str]

    def to_dict(self) -> dict:
        return {
            "instance_id": self.instance_id,
            "card_id": self.card_id,
            "card_type": self.card_type.value,
            "probability": round(self.probability, 3),
            "affordable": self.affordable,
            "reasons": list(self.reasons),
        }


class CardScorer:
    """
    Usage:
        scorer = CardScorer(config)
        scores = scorer.score_hand(state, Role.PATIENT)
    """

    def __init__(self, config: MatchConfig, weights: ScoringWeights | None = None):
        self.config = config
        self.weights = weights or ScoringWeights()
        self.validator = Validator(config)

    def score_hand(self, state: MatchState, role: Role) -> list[CardScore]:
        """Scores for every card in the hand, best first."""
        scores = [self.score_card(state, card, role) for card in state.hand(role)]
        scores.sort(key=lambda s: s.probability, reverse=True)
        return scores

    def score_card(self, state: MatchState, instance: CardInstance, role: Role) -> CardScore:
        w = self.weights
        card = instance.definition
        reasons: list[str] = []

        if not self._affordable(state, instance, role):
            return CardScore(instance.instance_id, card.id, card.card_type, 0.0, False, ["unaffordable"])

        probability = w.base_probability
        if required_costs(state, card, role):
            probability += w.affordability_bonus
            reasons.append("affordable")

        if self._addresses_deficiency(state, card.card_type, role):
            probability += w.strategic_bonus
            reasons.append("addresses deficiency")

        turns_left = state.max_turns - state.turn_number
        if (turns_left < self.config.urgency_window
                and card.card_type in (CardType.ASSESSMENT, CardType.CLINICAL_REASONING)):
            probability += w.urgency_bonus
            reasons.append("urgent")

        return CardScore(instance.instance_id, card.id, card.card_type, probability, True, reasons)

    def _affordable(self, state: MatchState, instance: CardInstance, role: Role) -> bool:
        pool = state.pool(role)
        for resource, cost in required_costs(state, instance.definition, role).items():
            if pool.get(resource) < cost:
                return False
        return True

    def _addresses_deficiency(self, state: MatchState, card_type: CardType, role: Role) -> bool:
        w = self.weights
        if role == Role.CLINICIAN:
            rapport = state.pool(Role.CLINICIAN).get("rapport")
            if card_type == CardType.COMMUNICATION and rapport < w.low_rapport:
                return True
            if card_type == CardType.ASSESSMENT and len(state.discovered_clues) < w.few_clues:
                return True
            return False

        # Patient: push back while the clinician is closing in, open up when
        # cooperation has bottomed out.
        clinician = state.pool(Role.CLINICIAN)
        confidence = clinician.get("diagnostic_confidence")
        if card_type == CardType.DEFLECTION and confidence >= self.config.victory.diagnostic_accuracy // 2:
            return True
        cooperation = state.pool(Role.PATIENT).get("cooperation")
        if card_type == CardType.EMOTIONAL_STATE and cooperation < w.low_cooperation:
            return True
        return False

    def predict_plays(self, state: MatchState, role: Role) -> list[CardScore]:
        """
        Likely plays for the role at its next turn, for presentation.

        Cards that fail validation for any reason other than turn ownership
        are reported as zero-probability.
        """
        predictions = []
        for instance in state.hand(role):
            score = self.score_card(state, instance, role)
            result = self.validator.validate(state, instance.instance_id, role)
            if not result.is_valid and result.code not in (
                RejectionCode.NOT_YOUR_TURN, RejectionCode.TARGET_REQUIRED,
            ):
                score.probability = 0.0
                score.reasons = [result.reason or "not playable"]
            predictions.append(score)
        predictions.sort(key=lambda s: s.probability, reverse=True)
        return predictions
