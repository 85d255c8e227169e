"""
Tests for weighted symptom-disease matching.

Covers:
- Exact score formula, including critical bonus above 1.0
- Critical-symptom veto
- Threshold, truncation and ordering of the ranking
- Property: pre-filtered and unfiltered candidate sets rank identically
"""

from __future__ import annotations

from builders import make_symptom, pattern
from hypothesis import given, settings
from hypothesis import strategies as st

from dss.config import MatcherConfig
from dss.domain.models import DiseasePattern
from dss.services.knowledge_base import InMemoryDiseaseKnowledgeBase
from dss.services.symptom_matcher import (
    SymptomDiseaseMatcher,
    normalize_symptom_name,
    normalize_symptom_names,
)

SYMPTOM_POOL = ["fever", "cough", "headache", "nausea", "rash", "fatigue", "dizziness"]


def disease(name: str, *patterns) -> DiseasePattern:
    return DiseasePattern(disease_name=name, symptom_patterns=list(patterns))


class TestScoreDisease:
    def test_critical_bonus_can_exceed_one(self, migraine: DiseasePattern) -> None:
        matcher = SymptomDiseaseMatcher()

        score = matcher.score_disease({"headache", "nausea"}, migraine)

        # (50 + 25 + 30) / 100
        assert score == 1.05

    def test_clamped_when_configured(self, migraine: DiseasePattern) -> None:
        matcher = SymptomDiseaseMatcher(MatcherConfig(clamp_match_scores=True))

        assert matcher.score_disease({"headache", "nausea"}, migraine) == 1.0

    def test_missing_critical_symptom_vetoes(self, meningitis: DiseasePattern) -> None:
        matcher = SymptomDiseaseMatcher()

        assert matcher.score_disease({"fever", "headache"}, meningitis) == 0.0

    def test_zero_total_weight_scores_zero(self) -> None:
        matcher = SymptomDiseaseMatcher()
        weightless = disease("Unknown", pattern("fever", 0), pattern("cough", 0))

        assert matcher.score_disease({"fever", "cough"}, weightless) == 0.0

    def test_partial_non_critical_match(self, tension_headache: DiseasePattern) -> None:
        matcher = SymptomDiseaseMatcher()

        assert matcher.score_disease({"headache"}, tension_headache) == 0.6


class TestRank:
    def test_ranks_best_first_and_drops_vetoed(
        self,
        migraine: DiseasePattern,
        tension_headache: DiseasePattern,
        meningitis: DiseasePattern,
    ) -> None:
        symptoms = [make_symptom("Headache"), make_symptom(" NAUSEA ")]

        ranked = SymptomDiseaseMatcher().rank(symptoms, [tension_headache, meningitis, migraine])

        assert [d.disease_name for d in ranked] == ["Migraine", "Tension headache"]
        assert ranked[0].match_score == 1.05
        assert ranked[0].icd_code == "G43"

    def test_score_at_threshold_is_excluded(self) -> None:
        borderline = disease("Borderline", pattern("fever", 30), pattern("cough", 70))

        ranked = SymptomDiseaseMatcher().rank([make_symptom("fever")], [borderline])

        assert ranked == []

    def test_truncates_to_max_ranked(self) -> None:
        candidates = [disease(f"Disease {i}", pattern("fever", 100)) for i in range(8)]

        ranked = SymptomDiseaseMatcher().rank([make_symptom("fever")], candidates)

        assert len(ranked) == 5
        # Ties are ordered by name
        assert [d.disease_name for d in ranked] == [f"Disease {i}" for i in range(5)]

    def test_duplicate_disease_names_keep_best_score(self) -> None:
        weak = disease("Flu", pattern("fever", 40), pattern("cough", 60))
        strong = disease("Flu", pattern("fever", 80), pattern("cough", 20))

        ranked = SymptomDiseaseMatcher().rank([make_symptom("fever")], [weak, strong])

        assert len(ranked) == 1
        assert ranked[0].match_score == 0.8

    def test_unrelated_candidates_are_ignored(self, gastritis: DiseasePattern) -> None:
        ranked = SymptomDiseaseMatcher().rank([make_symptom("fever")], [gastritis])

        assert ranked == []


def test_normalization_is_case_and_whitespace_insensitive() -> None:
    assert normalize_symptom_name("  Sore Throat ") == "sore throat"
    assert normalize_symptom_names(["Fever", "fever ", "FEVER"]) == {"fever"}


@st.composite
def disease_patterns(draw, index: int) -> DiseasePattern:
    names = draw(st.lists(st.sampled_from(SYMPTOM_POOL), min_size=1, max_size=4, unique=True))
    patterns = [
        pattern(name, draw(st.integers(0, 100)), draw(st.booleans())) for name in names
    ]
    return disease(f"disease-{index}", *patterns)


@st.composite
def knowledge_bases(draw) -> list[DiseasePattern]:
    count = draw(st.integers(0, 12))
    return [draw(disease_patterns(i)) for i in range(count)]


symptom_name_sets = st.lists(st.sampled_from(SYMPTOM_POOL), min_size=1, max_size=5, unique=True)


@settings(max_examples=100)
@given(patterns=knowledge_bases(), names=symptom_name_sets)
def test_prefiltered_and_full_candidates_rank_identically(
    patterns: list[DiseasePattern], names: list[str]
) -> None:
    kb = InMemoryDiseaseKnowledgeBase(patterns)
    symptoms = [make_symptom(name) for name in names]
    matcher = SymptomDiseaseMatcher()

    filtered = matcher.rank(symptoms, kb.find_relevant(names))
    unfiltered = matcher.rank(symptoms, kb.all_patterns())

    assert filtered == unfiltered


@settings(max_examples=100)
@given(patterns=knowledge_bases(), names=symptom_name_sets)
def test_ranking_is_bounded_ordered_and_above_threshold(
    patterns: list[DiseasePattern], names: list[str]
) -> None:
    config = MatcherConfig()
    ranked = SymptomDiseaseMatcher(config).rank([make_symptom(n) for n in names], patterns)

    assert len(ranked) <= config.max_ranked_diseases
    assert all(d.match_score > config.min_match_score for d in ranked)
    scores = [d.match_score for d in ranked]
    assert scores == sorted(scores, reverse=True)
    assert len({d.disease_name for d in ranked}) == len(ranked)


@given(patterns=knowledge_bases(), names=symptom_name_sets)
def test_disease_missing_a_critical_symptom_is_never_ranked(
    patterns: list[DiseasePattern], names: list[str]
) -> None:
    matcher = SymptomDiseaseMatcher()
    user_names = normalize_symptom_names(names)

    ranked_names = {d.disease_name for d in matcher.rank([make_symptom(n) for n in names], patterns)}

    for candidate in patterns:
        missing_critical = any(
            p.is_critical and normalize_symptom_name(p.symptom_name) not in user_names
            for p in candidate.symptom_patterns
        )
        if missing_critical:
            assert matcher.score_disease(user_names, candidate) == 0.0
            assert candidate.disease_name not in ranked_names
