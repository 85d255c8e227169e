"""
Composite urgency scoring.

Factors are independent and summed before clamping to 100:
- average symptom severity x 10
- +30 if a ranked disease is tagged CRITICAL or SEVERE
- +40 if a ranked disease requires immediate attention
- +3 per symptom, at most +20
- +15 if any symptom started more than ``persistent_symptom_days`` ago
"""

from collections.abc import Sequence
from datetime import datetime, timedelta

import structlog

from dss.config import UrgencyConfig
from dss.domain.clock import as_utc, utc_now
from dss.domain.models import (
    DiseaseMatchScore,
    DiseaseSeverity,
    Symptom,
    UrgencyAssessment,
    UrgencyLevel,
)

logger = structlog.get_logger(__name__)

MAX_URGENCY = 100.0
# Used when no symptom carries a severity
DEFAULT_SEVERITY = 5.0
SEVERE_DISEASE_TAGS = frozenset({DiseaseSeverity.CRITICAL, DiseaseSeverity.SEVERE})


class UrgencyScorer:
    """Scores how soon a user should seek care, from symptoms and ranked diseases."""

    def __init__(self, config: UrgencyConfig | None = None) -> None:
        self.config = config or UrgencyConfig()
        self.logger = logger.bind(component="urgency_scorer")

    def assess(
        self,
        symptoms: Sequence[Symptom],
        diseases: Sequence[DiseaseMatchScore],
        now: datetime | None = None,
    ) -> UrgencyAssessment:
        now = as_utc(now) if now else utc_now()
        score = 0.0
        factors: list[str] = []

        severities = [s.severity for s in symptoms if s.severity is not None]
        average_severity = sum(severities) / len(severities) if severities else DEFAULT_SEVERITY
        score += average_severity * 10
        factors.append(f"Average symptom severity {average_severity:.1f}/10")

        if any(d.severity in SEVERE_DISEASE_TAGS for d in diseases):
            score += 30
            factors.append("Possible severe condition")

        if any(d.requires_immediate_attention for d in diseases):
            score += 40
            factors.append("Possible condition requiring immediate attention")

        score += min(3 * len(symptoms), 20)
        factors.append(f"{len(symptoms)} active symptom(s)")

        persistence_cutoff = now - timedelta(days=self.config.persistent_symptom_days)
        if any(as_utc(s.start_date) < persistence_cutoff for s in symptoms):
            score += 15
            factors.append(
                f"Symptoms persisting over {self.config.persistent_symptom_days} days"
            )

        score = min(score, MAX_URGENCY)
        level = self.classify(score)

        self.logger.debug("urgency_scored", score=score, level=level.value)
        return UrgencyAssessment(score=score, level=level, factors=factors)

    def score(
        self,
        symptoms: Sequence[Symptom],
        diseases: Sequence[DiseaseMatchScore],
        now: datetime | None = None,
    ) -> float:
        return self.assess(symptoms, diseases, now).score

    @staticmethod
    def classify(score: float) -> UrgencyLevel:
        if score > 70:
            return UrgencyLevel.HIGH
        if score > 40:
            return UrgencyLevel.MODERATE
        return UrgencyLevel.LOW
