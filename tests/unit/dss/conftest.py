"""Shared fixtures for decision-support tests."""

from __future__ import annotations

from datetime import datetime

import pytest
from builders import NOW, pattern

from dss.domain.models import DiseasePattern, DiseaseSeverity


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def migraine() -> DiseasePattern:
    return DiseasePattern(
        disease_name="Migraine",
        disease_name_en="Migraine",
        icd_code="G43",
        category="NEUROLOGICAL",
        severity=DiseaseSeverity.MODERATE,
        recommendations=["Rest in a dark, quiet room", "Keep a headache diary"],
        symptom_patterns=[
            pattern("Headache", 50, critical=True),
            pattern("Nausea", 30),
            pattern("Light sensitivity", 20),
        ],
    )


@pytest.fixture
def tension_headache() -> DiseasePattern:
    return DiseasePattern(
        disease_name="Tension headache",
        icd_code="G44.2",
        category="NEUROLOGICAL",
        severity=DiseaseSeverity.MILD,
        recommendations=["Manage stress"],
        symptom_patterns=[pattern("headache", 60), pattern("fatigue", 40)],
    )


@pytest.fixture
def meningitis() -> DiseasePattern:
    return DiseasePattern(
        disease_name="Meningitis",
        icd_code="G03",
        category="NEUROLOGICAL",
        severity=DiseaseSeverity.CRITICAL,
        requires_immediate_attention=True,
        recommendations=["Go to the emergency room"],
        symptom_patterns=[
            pattern("fever", 40, critical=True),
            pattern("stiff neck", 40, critical=True),
            pattern("headache", 20),
        ],
    )


@pytest.fixture
def gastritis() -> DiseasePattern:
    return DiseasePattern(
        disease_name="Gastritis",
        icd_code="K29",
        category="DIGESTIVE",
        severity=DiseaseSeverity.MILD,
        symptom_patterns=[pattern("abdominal pain", 60), pattern("bloating", 40)],
    )
