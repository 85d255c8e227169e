"""Builders for decision-support test data."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from dss.domain.models import HealthMetric, MetricType, Symptom, SymptomPattern

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def make_symptom(
    name: str,
    severity: int | None = 5,
    days_ago: float = 1,
    ended: bool = False,
) -> Symptom:
    return Symptom(
        name=name,
        severity=severity,
        start_date=NOW - timedelta(days=days_ago),
        end_date=NOW if ended else None,
    )


def make_metric(
    metric_type: MetricType,
    days_ago: float,
    value: float | None = None,
    systolic: float | None = None,
    diastolic: float | None = None,
) -> HealthMetric:
    return HealthMetric(
        metric_type=metric_type,
        value=value,
        systolic=systolic,
        diastolic=diastolic,
        measured_at=NOW - timedelta(days=days_ago),
    )


def pattern(name: str, weight: int, critical: bool = False) -> SymptomPattern:
    return SymptomPattern(symptom_name=name, weight=weight, is_critical=critical)
