"""
Symptom analysis orchestration.

Pipeline:
1. Keep active symptoms only; none left -> canonical "no symptoms" result
2. Fetch candidate diseases from the knowledge base
3. No candidate shares a symptom with the user -> canonical "no match" result
4. Rank diseases, score urgency, build recommendations and an insight

The service holds configuration only; every call works on its own data.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta

import structlog

from dss.config import AppConfig, InsightConfig, MatcherConfig, UrgencyConfig
from dss.domain.clock import as_utc, utc_now
from dss.domain.models import (
    DiseaseMatchScore,
    Insight,
    InsightType,
    RuleSeverity,
    Symptom,
    SymptomAnalysisResult,
    UrgencyLevel,
)
from dss.services.knowledge_base import DiseaseKnowledgeBase
from dss.services.symptom_matcher import SymptomDiseaseMatcher, normalize_symptom_names
from dss.services.urgency import UrgencyScorer

logger = structlog.get_logger(__name__)

HIGH_URGENCY_ADVICE = (
    "SEE A DOCTOR NOW:\n"
    "- Your symptoms need urgent medical evaluation\n"
    "- Book an appointment WITHIN 24-48 HOURS\n"
    "- If symptoms get worse, go to the emergency room immediately"
)
MODERATE_URGENCY_ADVICE = (
    "RECOMMENDED:\n"
    "- Book a doctor's appointment within 1-2 weeks\n"
    "- Track your symptoms daily\n"
    "- Rest well and drink plenty of water\n"
    "- If symptoms get worse, see a doctor sooner"
)
LOW_URGENCY_ADVICE = (
    "SUGGESTIONS:\n"
    "- Monitor your symptoms for a few days\n"
    "- Rest and take care of yourself\n"
    "- If there is no improvement after 3-5 days, see a doctor\n"
    "- Note down any changes"
)


def actionable_advice(urgency_score: float) -> str:
    """Advice text tiered by urgency score."""
    if urgency_score > 70:
        return HIGH_URGENCY_ADVICE
    if urgency_score > 40:
        return MODERATE_URGENCY_ADVICE
    return LOW_URGENCY_ADVICE


class SymptomAnalysisService:
    """
    Turns a user's symptoms into ranked conditions, urgency and an insight.

    Design principles:
    - Knowledge base injected through a Protocol (easy to fake in tests)
    - Two distinguishable "nothing found" results: no symptoms vs. no match
    - Clock injectable for deterministic results
    """

    def __init__(
        self,
        matcher_config: MatcherConfig | None = None,
        urgency_config: UrgencyConfig | None = None,
        insight_config: InsightConfig | None = None,
    ) -> None:
        self.matcher = SymptomDiseaseMatcher(matcher_config)
        self.urgency_scorer = UrgencyScorer(urgency_config)
        self.urgency_config = urgency_config or UrgencyConfig()
        self.insight_config = insight_config or InsightConfig()
        self.logger = logger.bind(component="symptom_analysis_service")

    @classmethod
    def from_config(cls, config: AppConfig) -> "SymptomAnalysisService":
        return cls(config.matcher, config.urgency, config.insight)

    def analyze(
        self,
        symptoms: Sequence[Symptom],
        knowledge_base: DiseaseKnowledgeBase,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> SymptomAnalysisResult:
        """Analyze the user's active symptoms against the knowledge base."""
        now = as_utc(now) if now else utc_now()
        log = self.logger.bind(user_id=user_id)

        active_symptoms = [s for s in symptoms if s.is_active]
        if not active_symptoms:
            log.info("no_active_symptoms")
            return SymptomAnalysisResult.no_symptoms()

        symptom_names = [s.name for s in active_symptoms]
        candidates = knowledge_base.find_relevant(symptom_names)
        relevant = self.matcher.relevant_candidates(
            normalize_symptom_names(symptom_names), candidates
        )
        if not relevant:
            log.info("no_matching_diseases", symptom_count=len(active_symptoms))
            return SymptomAnalysisResult.no_match(self.urgency_config.no_match_score)

        ranked = self.matcher.rank(active_symptoms, relevant)
        urgency = self.urgency_scorer.assess(active_symptoms, ranked, now)

        result = SymptomAnalysisResult(
            ranked_diseases=ranked,
            urgency_score=urgency.score,
            urgency_level=urgency.level,
            recommendations=self._build_recommendations(ranked, urgency.score),
            note=self._build_note(len(active_symptoms), ranked, urgency.level, urgency.score),
            insight=self.build_insight(ranked, urgency.score, now),
        )

        log.info(
            "symptom_analysis_completed",
            symptom_count=len(active_symptoms),
            ranked_count=len(ranked),
            urgency_score=urgency.score,
            urgency_level=urgency.level.value,
        )
        return result

    def build_insight(
        self,
        diseases: Sequence[DiseaseMatchScore],
        urgency_score: float,
        now: datetime | None = None,
    ) -> Insight | None:
        """Insight summarising the top matches; None when nothing was ranked."""
        if not diseases:
            return None

        now = as_utc(now) if now else utc_now()

        if urgency_score > 70:
            title = "Symptoms need attention now"
            insight_type, severity, priority = InsightType.WARNING, RuleSeverity.CRITICAL, 1
        elif urgency_score > 40:
            title = "Analysis of your symptoms"
            insight_type, severity, priority = InsightType.RECOMMENDATION, RuleSeverity.WARNING, 2
        else:
            title = "Information about your symptoms"
            insight_type, severity, priority = InsightType.TIP, RuleSeverity.INFO, 3

        lines = ["Based on your symptoms, possible conditions are:", ""]
        for position, disease in enumerate(diseases[:3], 1):
            lines.append(
                f"{position}. {disease.disease_name} ({disease.match_score * 100:.0f}% match)"
            )

        return Insight(
            insight_type=insight_type,
            title=title,
            message="\n".join(lines),
            actionable_advice=actionable_advice(urgency_score),
            priority=priority,
            severity=severity,
            generated_at=now,
            expires_at=now + timedelta(days=self.insight_config.ttl_days),
        )

    def _build_recommendations(
        self, diseases: Sequence[DiseaseMatchScore], urgency_score: float
    ) -> list[str]:
        recommendations = [actionable_advice(urgency_score)]
        if diseases:
            recommendations.extend(diseases[0].recommendations)
        return recommendations

    def _build_note(
        self,
        symptom_count: int,
        diseases: Sequence[DiseaseMatchScore],
        level: UrgencyLevel,
        urgency_score: float,
    ) -> str:
        return (
            f"Analyzed {symptom_count} symptom(s) against {len(diseases)} possible condition(s). "
            f"Urgency: {level.value} ({urgency_score:.0f}/100)"
        )
