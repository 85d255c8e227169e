"""
Weighted symptom-disease matching.

Algorithm:
- Each disease scores matched pattern weight / total pattern weight
- A matched critical symptom adds a bonus share of its weight, so scores can exceed 1.0
- A missing critical symptom vetoes the disease (score 0)
- Diseases scoring above the threshold are ranked, best first, and truncated

The matcher does not trust upstream pre-filtering: diseases sharing no symptom with the
user are dropped here, so a filtered and an unfiltered candidate set rank identically.
"""

from collections.abc import Iterable, Sequence

import structlog

from dss.config import MatcherConfig
from dss.domain.models import DiseaseMatchScore, DiseasePattern, Symptom

logger = structlog.get_logger(__name__)


def normalize_symptom_name(name: str) -> str:
    return name.strip().casefold()


def normalize_symptom_names(names: Iterable[str]) -> set[str]:
    """Normalized set of symptom names for O(1) membership tests."""
    return {normalize_symptom_name(name) for name in names}


def shares_symptom(disease: DiseasePattern, symptom_names: set[str]) -> bool:
    """Whether any of the disease's pattern symptoms is in ``symptom_names`` (normalized)."""
    return any(
        normalize_symptom_name(pattern.symptom_name) in symptom_names
        for pattern in disease.symptom_patterns
    )


class SymptomDiseaseMatcher:
    """Scores and ranks candidate diseases against a user's active symptoms."""

    def __init__(self, config: MatcherConfig | None = None) -> None:
        self.config = config or MatcherConfig()
        self.logger = logger.bind(component="symptom_disease_matcher")

    def relevant_candidates(
        self, symptom_names: set[str], candidates: Sequence[DiseasePattern]
    ) -> list[DiseasePattern]:
        """Candidates sharing at least one symptom with the user."""
        return [disease for disease in candidates if shares_symptom(disease, symptom_names)]

    def score_disease(self, symptom_names: set[str], disease: DiseasePattern) -> float:
        """
        Weighted match score of one disease.

        ``symptom_names`` must already be normalized. Returns 0.0 for a disease with no
        pattern weight or with any critical symptom missing.
        """
        total_weight = sum(pattern.weight for pattern in disease.symptom_patterns)
        if total_weight == 0:
            return 0.0

        matched_weight = 0.0
        for pattern in disease.symptom_patterns:
            if normalize_symptom_name(pattern.symptom_name) in symptom_names:
                matched_weight += pattern.weight
                if pattern.is_critical:
                    matched_weight += pattern.weight * self.config.critical_match_bonus
            elif pattern.is_critical:
                return 0.0

        score = matched_weight / total_weight
        if self.config.clamp_match_scores:
            score = min(score, 1.0)
        return score

    def rank(
        self, symptoms: Sequence[Symptom], candidates: Sequence[DiseasePattern]
    ) -> list[DiseaseMatchScore]:
        """
        Rank candidate diseases for the given symptoms.

        Returns at most ``max_ranked_diseases`` entries scoring above ``min_match_score``,
        ordered by score descending (ties by disease name). When several candidates share
        a disease name only the best-scoring one is kept.
        """
        symptom_names = normalize_symptom_names(symptom.name for symptom in symptoms)
        relevant = self.relevant_candidates(symptom_names, candidates)

        best_by_name: dict[str, DiseaseMatchScore] = {}
        for disease in relevant:
            score = self.score_disease(symptom_names, disease)
            if score <= self.config.min_match_score:
                continue
            current = best_by_name.get(disease.disease_name)
            if current is None or score > current.match_score:
                best_by_name[disease.disease_name] = DiseaseMatchScore.from_pattern(disease, score)

        ranked = sorted(best_by_name.values(), key=lambda d: (-d.match_score, d.disease_name))
        ranked = ranked[: self.config.max_ranked_diseases]

        self.logger.info(
            "diseases_ranked",
            symptom_count=len(symptom_names),
            candidate_count=len(candidates),
            relevant_count=len(relevant),
            ranked_count=len(ranked),
        )
        return ranked
