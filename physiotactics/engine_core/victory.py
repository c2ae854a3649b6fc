"""
Victory Evaluation - Per-condition progress, role scores and end detection.

The clinician wins outright with a confident diagnosis backed by enough
clues. The patient has three conditions, each worth points, which reward
being a good teaching patient rather than an obstructive one. Only teaching
moments the patient set up count toward the educational catalyst. When the
turn limit is reached the scores are compared.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ..config import MatchConfig
from ..content.cards import CardType
from .state import LogKind, MatchState, MatchOutcome, Role


DRAW = "draw"


@dataclass
class ConditionProgress:
    name: str
    role: Role
    progress: float  # 0..100
    points: int = 0
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def achieved(self) -> bool:
        return self.progress >= 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "role": self.role.value,
            "progress": round(self.progress, 2),
            "points": self.points,
            "achieved": self.achieved,
            "details": self.details,
        }


@dataclass
class VictoryProgress:
    conditions: dict[str, ConditionProgress]
    clinician_score: int
    patient_score: int
    game_over: bool = False
    winner: str | None = None
    reason: str | None = None

    def outcome(self) -> MatchOutcome | None:
        if not self.game_over:
            return None
        return MatchOutcome(
            winner=self.winner or DRAW,
            reason=self.reason or "",
            clinician_score=self.clinician_score,
            patient_score=self.patient_score,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "conditions": {k: v.to_dict() for k, v in self.conditions.items()},
            "clinician_score": self.clinician_score,
            "patient_score": self.patient_score,
            "game_over": self.game_over,
            "winner": self.winner,
            "reason": self.reason,
        }


def determine_winner(clinician_score: float, patient_score: float) -> str:
    """Strictly greater score wins; equal scores are a draw."""
    if clinician_score > patient_score:
        return Role.CLINICIAN.value
    if patient_score > clinician_score:
        return Role.PATIENT.value
    return DRAW


class VictoryEvaluator:
    def __init__(self, config: MatchConfig):
        self.config = config
        self.victory = config.victory

    def evaluate(self, state: MatchState) -> VictoryProgress:
        conditions = {
            "diagnostic_success": self._diagnostic_success(state),
            "educational_catalyst": self._educational_catalyst(state),
            "authentic_representation": self._authentic_representation(state),
            "collaborative_achievement": self._collaborative_achievement(state),
        }
        progress = VictoryProgress(
            conditions=conditions,
            clinician_score=self.clinician_score(state),
            patient_score=self.patient_score(conditions),
        )
        self._detect_end(state, progress)
        return progress

    def _detect_end(self, state: MatchState, progress: VictoryProgress) -> None:
        if state.turn_number >= state.max_turns:
            progress.game_over = True
            progress.reason = "max_turns_reached"
            progress.winner = determine_winner(progress.clinician_score, progress.patient_score)
            return

        for condition in progress.conditions.values():
            if condition.role == Role.PATIENT and condition.achieved:
                progress.game_over = True
                progress.reason = condition.name
                progress.winner = Role.PATIENT.value
                return

        clinician = progress.conditions["diagnostic_success"]
        if clinician.achieved:
            progress.game_over = True
            progress.reason = clinician.name
            progress.winner = Role.CLINICIAN.value
            return

        for role_value, resource in self.victory.depletion_conditions:
            role = Role(role_value)
            if state.pool(role).at_floor(resource):
                progress.game_over = True
                progress.reason = f"{role_value}_{resource}_depleted"
                progress.winner = role.opponent.value
                return

    # Clinician

    def _diagnostic_success(self, state: MatchState) -> ConditionProgress:
        accuracy = state.pool(Role.CLINICIAN).get("diagnostic_confidence")
        clues = len(state.discovered_clues)
        fraction = min(
            accuracy / self.victory.diagnostic_accuracy,
            clues / self.victory.min_clues,
        )
        return ConditionProgress(
            name="diagnostic_success",
            role=Role.CLINICIAN,
            progress=min(100.0, fraction * 100),
            details={"accuracy": accuracy, "clues": clues},
        )

    def clinician_score(self, state: MatchState) -> int:
        pool = state.pool(Role.CLINICIAN)
        accuracy = pool.get("diagnostic_confidence")
        communication = pool.get("rapport") / pool.maximum("rapport") * 100
        score = (
            accuracy * self.victory.accuracy_weight
            + communication * self.victory.communication_weight
            + self.efficiency(state) * self.victory.efficiency_weight
            + self.learning_score(state) * self.victory.learning_weight
        )
        return round(score)

    def efficiency(self, state: MatchState) -> float:
        optimal = state.max_turns * self.victory.optimal_turn_ratio
        if state.turn_number <= optimal:
            return 100.0
        excess = state.turn_number - optimal
        return max(0.0, 100 - (excess / optimal) * 50)

    def learning_score(self, state: MatchState) -> float:
        return min(100.0, len(self.learning_moments(state)) * 25)

    # Patient

    def learning_moments(self, state: MatchState, prompted_by: Role | None = None) -> list[str]:
        """Teaching moments in the log, optionally only those a given role set up."""
        moments = []
        for entry in state.entries(LogKind.CARD_PLAYED):
            impact = entry.payload.get("educational_impact") or {}
            if not impact.get("teaching_moment"):
                continue
            if prompted_by is not None and impact.get("prompted_by") != prompted_by.value:
                continue
            moments.append(impact["teaching_moment"])
        return moments

    def _educational_catalyst(self, state: MatchState) -> ConditionProgress:
        count = len(self.learning_moments(state, prompted_by=Role.PATIENT))
        required = self.victory.learning_moments_required
        return ConditionProgress(
            name="educational_catalyst",
            role=Role.PATIENT,
            progress=min(100.0, count / required * 100),
            points=self.victory.educational_catalyst_points,
            details={"learning_moments": count},
        )

    def _authentic_representation(self, state: MatchState) -> ConditionProgress:
        appropriateness = self.deflection_appropriateness(state)
        realism = (appropriateness * 0.6 + self.victory.behavior_consistency * 0.4) * 100
        return ConditionProgress(
            name="authentic_representation",
            role=Role.PATIENT,
            progress=min(100.0, realism),
            points=self.victory.authentic_representation_points,
            details={"deflection_appropriateness": appropriateness},
        )

    def deflection_appropriateness(self, state: MatchState) -> float:
        """Share of deflections that were not stacked on an earlier one in the same turn."""
        turns_seen: set[int] = set()
        total = 0
        appropriate = 0
        for entry in state.entries(LogKind.CARD_PLAYED):
            if entry.payload.get("card_type") != CardType.DEFLECTION.value:
                continue
            total += 1
            if entry.turn not in turns_seen:
                appropriate += 1
            turns_seen.add(entry.turn)
        if total == 0:
            return 1.0
        return appropriate / total

    def _collaborative_achievement(self, state: MatchState) -> ConditionProgress:
        improvement = self.improvement(state)
        return ConditionProgress(
            name="collaborative_achievement",
            role=Role.PATIENT,
            progress=min(100.0, improvement / self.victory.improvement_target * 100),
            points=self.victory.collaborative_achievement_points,
            details={"improvement": round(improvement, 3)},
        )

    def improvement(self, state: MatchState) -> float:
        """Relative gain in clinician play success between the first and last three plays."""
        plays = [
            e for e in state.entries(LogKind.CARD_PLAYED)
            if e.actor == Role.CLINICIAN.value
        ]
        if len(plays) < 6:
            return 0.0
        early = sum(1 for e in plays[:3] if e.payload.get("success", True)) / 3
        late = sum(1 for e in plays[-3:] if e.payload.get("success", True)) / 3
        if early == 0:
            return late
        return max(0.0, (late - early) / early)

    def patient_score(self, conditions: dict[str, ConditionProgress]) -> int:
        total = sum(
            c.progress / 100 * c.points
            for c in conditions.values()
            if c.role == Role.PATIENT
        )
        return round(total)
