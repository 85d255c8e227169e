"""
Disease knowledge base access.

The analysis service only depends on the DiseaseKnowledgeBase protocol; storage-backed
implementations live in the surrounding service. The in-memory implementation below is
used for tests, demos and small embedded deployments.
"""

from collections.abc import Iterable, Sequence
from typing import Protocol

import structlog

from dss.domain.models import DiseasePattern
from dss.services.symptom_matcher import normalize_symptom_name, normalize_symptom_names

logger = structlog.get_logger(__name__)


class DiseaseKnowledgeBase(Protocol):
    """
    Protocol for looking up disease patterns.

    ``find_relevant`` may pre-filter to diseases sharing a symptom with the query;
    returning a superset (up to ``all_patterns()``) must not change analysis results.
    """

    def find_relevant(self, symptom_names: Sequence[str]) -> list[DiseasePattern]: ...

    def all_patterns(self) -> list[DiseasePattern]: ...


class InMemoryDiseaseKnowledgeBase:
    """Knowledge base held in memory, indexed by normalized symptom name."""

    def __init__(self, patterns: Iterable[DiseasePattern] = ()) -> None:
        self._patterns: list[DiseasePattern] = []
        self._index: dict[str, list[int]] = {}
        self.logger = logger.bind(component="in_memory_knowledge_base")
        for pattern in patterns:
            self.add(pattern)

    def add(self, pattern: DiseasePattern) -> None:
        position = len(self._patterns)
        self._patterns.append(pattern)
        for name in {normalize_symptom_name(p.symptom_name) for p in pattern.symptom_patterns}:
            self._index.setdefault(name, []).append(position)

    def find_relevant(self, symptom_names: Sequence[str]) -> list[DiseasePattern]:
        positions: set[int] = set()
        for name in normalize_symptom_names(symptom_names):
            positions.update(self._index.get(name, ()))

        self.logger.debug(
            "relevant_patterns_found", query_size=len(symptom_names), found=len(positions)
        )
        return [self._patterns[i] for i in sorted(positions)]

    def all_patterns(self) -> list[DiseasePattern]:
        return list(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)
