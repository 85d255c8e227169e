"""Tests for the BMI, hypertension and blood sugar rules."""

from __future__ import annotations

import pytest
from builders import make_metric

from dss.domain.models import HealthProfile, MetricType, RuleSeverity
from dss.services.health_rules import (
    BloodSugarRule,
    BMIRule,
    PersistentHypertensionRule,
    evaluate_health_rules,
    recent_readings,
)


def bp(days_ago: float, systolic: float | None, diastolic: float | None):
    return make_metric(
        MetricType.BLOOD_PRESSURE, days_ago, systolic=systolic, diastolic=diastolic
    )


def sugar(days_ago: float, value: float):
    return make_metric(MetricType.BLOOD_SUGAR, days_ago, value=value)


class TestBMIRule:
    @pytest.mark.parametrize(
        ("bmi", "severity"),
        [
            (15.9, RuleSeverity.CRITICAL),
            (16.0, RuleSeverity.WARNING),
            (18.4, RuleSeverity.WARNING),
            (25.0, RuleSeverity.WARNING),
            (29.9, RuleSeverity.WARNING),
            (30.0, RuleSeverity.WARNING),
            (34.9, RuleSeverity.WARNING),
            (35.0, RuleSeverity.CRITICAL),
        ],
    )
    def test_fires_with_expected_severity(self, bmi: float, severity: RuleSeverity) -> None:
        outcome = BMIRule().evaluate(bmi)

        assert outcome.fired
        assert outcome.severity == severity
        assert f"{bmi:.1f}" in outcome.recommendation

    @pytest.mark.parametrize("bmi", [18.5, 20.0, 24.9, None])
    def test_normal_or_missing_bmi_does_not_fire(self, bmi: float | None) -> None:
        assert not BMIRule().evaluate(bmi).fired


class TestPersistentHypertensionRule:
    def test_two_high_readings_do_not_fire(self) -> None:
        metrics = [bp(1, 150, 95), bp(2, 160, 100)]

        assert not PersistentHypertensionRule().evaluate(metrics).fired

    def test_three_high_readings_fire_critical_with_averages(self) -> None:
        metrics = [bp(1, 150, 95), bp(2, 145, 92), bp(3, 160, 100)]

        outcome = PersistentHypertensionRule().evaluate(metrics)

        assert outcome.fired
        assert outcome.severity == RuleSeverity.CRITICAL
        assert "Average: 152/96 mmHg" in outcome.recommendation

    def test_diastolic_alone_counts_as_high(self) -> None:
        metrics = [bp(1, 130, 90), bp(2, 125, 95), bp(3, 120, 92)]

        assert PersistentHypertensionRule().evaluate(metrics).fired

    def test_one_normal_reading_in_latest_three_prevents_firing(self) -> None:
        metrics = [bp(1, 150, 95), bp(2, 120, 80), bp(3, 160, 100), bp(4, 170, 105)]

        assert not PersistentHypertensionRule().evaluate(metrics).fired

    def test_only_latest_three_are_considered(self) -> None:
        metrics = [bp(10, 110, 70), bp(1, 150, 95), bp(3, 160, 100), bp(2, 145, 92)]

        assert PersistentHypertensionRule().evaluate(metrics).fired

    def test_readings_missing_a_value_are_skipped(self) -> None:
        metrics = [bp(1, 150, None), bp(2, 145, 92), bp(3, 160, 100)]

        assert not PersistentHypertensionRule().evaluate(metrics).fired


class TestBloodSugarRule:
    def test_single_reading_does_not_fire(self) -> None:
        assert not BloodSugarRule().evaluate([sugar(1, 250)]).fired

    def test_very_high_average_is_critical(self) -> None:
        outcome = BloodSugarRule().evaluate([sugar(1, 210), sugar(2, 190)])

        assert outcome.severity == RuleSeverity.CRITICAL
        assert "Average: 200 mg/dL" in outcome.recommendation

    def test_high_average_warns_about_diabetes(self) -> None:
        outcome = BloodSugarRule().evaluate([sugar(1, 130), sugar(2, 125), sugar(3, 140)])

        assert outcome.severity == RuleSeverity.WARNING
        assert "High blood sugar - diabetes risk" in outcome.recommendation
        assert "Average: 132 mg/dL" in outcome.recommendation

    def test_pre_diabetic_average_warns(self) -> None:
        outcome = BloodSugarRule().evaluate([sugar(1, 105), sugar(2, 110)])

        assert outcome.severity == RuleSeverity.WARNING
        assert outcome.recommendation.startswith("Pre-diabetes")

    def test_normal_average_does_not_fire(self) -> None:
        assert not BloodSugarRule().evaluate([sugar(1, 90), sugar(2, 95)]).fired

    def test_only_three_most_recent_readings_are_averaged(self) -> None:
        metrics = [sugar(30, 300), sugar(1, 90), sugar(2, 95), sugar(3, 92)]

        assert not BloodSugarRule().evaluate(metrics).fired


def test_recent_readings_are_newest_first_and_filtered() -> None:
    metrics = [
        sugar(3, 100),
        sugar(1, 110),
        make_metric(MetricType.WEIGHT, 0, value=80),
        make_metric(MetricType.BLOOD_SUGAR, 0, value=None),
        sugar(2, 120),
    ]

    readings = recent_readings(metrics, MetricType.BLOOD_SUGAR, limit=2)

    assert [m.value for m in readings] == [110, 120]


def test_evaluate_health_rules_merges_profile_and_metric_rules() -> None:
    profile = HealthProfile(bmi=32.0)
    metrics = [bp(1, 150, 95), bp(2, 145, 92), bp(3, 160, 100), sugar(1, 105), sugar(2, 110)]

    result = evaluate_health_rules(profile, metrics)

    assert result.fired_rule_names == [
        "BMI_EVALUATION",
        "PERSISTENT_HYPERTENSION",
        "BLOOD_SUGAR_EVALUATION",
    ]
    assert result.highest_severity == RuleSeverity.CRITICAL


def test_evaluate_health_rules_without_profile_or_data() -> None:
    result = evaluate_health_rules(None, [])

    assert not result.has_results()
    assert result.highest_severity == RuleSeverity.INFO
