"""
Threshold rules over profile attributes and metric history.

Each rule is a stateless object satisfying the Rule protocol: its ``evaluate`` method
returns a fresh RuleOutcome, so one instance can be shared across concurrent requests.
"""

from collections.abc import Callable, Sequence

from dss.domain.clock import as_utc
from dss.domain.models import HealthMetric, HealthProfile, MetricType, RuleSeverity
from dss.services.rule_engine import Rule, RuleEngine, RuleOutcome, RuleResult


def recent_readings(
    metrics: Sequence[HealthMetric],
    metric_type: MetricType,
    limit: int | None = None,
    has_data: Callable[[HealthMetric], bool] | None = None,
) -> list[HealthMetric]:
    """Most recent readings of ``metric_type`` first, skipping readings without data."""
    has_data = has_data or (lambda m: m.value is not None)
    readings = sorted(
        (m for m in metrics if m.metric_type == metric_type and has_data(m)),
        key=lambda m: as_utc(m.measured_at),
        reverse=True,
    )
    return readings if limit is None else readings[:limit]


def _has_blood_pressure(metric: HealthMetric) -> bool:
    return metric.systolic is not None and metric.diastolic is not None


class BMIRule:
    """Flags under- and overweight BMI values."""

    name = "BMI_EVALUATION"

    def evaluate(self, bmi: float | None) -> RuleOutcome:
        if bmi is None:
            return RuleOutcome.not_fired()

        if bmi < 16.0:
            return RuleOutcome.fire(
                RuleSeverity.CRITICAL,
                f"WARNING: very low BMI ({bmi:.1f})\n"
                "Risk of severe malnutrition.\n"
                "Recommendations:\n"
                "1. See a nutritionist IMMEDIATELY\n"
                "2. Increase calorie intake\n"
                "3. Get a general health check-up",
            )
        if bmi < 18.5:
            return RuleOutcome.fire(
                RuleSeverity.WARNING,
                f"Low BMI ({bmi:.1f}) - underweight\n"
                "Recommendations:\n"
                "1. Increase calorie intake\n"
                "2. Eat several small meals a day\n"
                "3. Do strength training to build muscle",
            )
        if bmi >= 30.0:
            severe = bmi >= 35.0
            return RuleOutcome.fire(
                RuleSeverity.CRITICAL if severe else RuleSeverity.WARNING,
                ("WARNING: " if severe else "")
                + f"High BMI ({bmi:.1f}) - obesity\n"
                "Recommendations:\n"
                "1. See a doctor for a safe weight-loss plan\n"
                "2. Reduce calorie intake\n"
                "3. Increase physical activity (at least 150 minutes/week)\n"
                "4. Check cardiovascular risk factors",
            )
        if bmi >= 25.0:
            return RuleOutcome.fire(
                RuleSeverity.WARNING,
                f"Slightly high BMI ({bmi:.1f}) - overweight\n"
                "Recommendations:\n"
                "1. Lose 5-10% of body weight\n"
                "2. Eat more vegetables, less processed food\n"
                "3. Exercise regularly\n"
                "4. Track your weight weekly",
            )

        return RuleOutcome.not_fired()


class PersistentHypertensionRule:
    """Fires when the three most recent blood pressure readings are all high."""

    name = "PERSISTENT_HYPERTENSION"
    required_readings = 3

    def evaluate(self, metrics: Sequence[HealthMetric]) -> RuleOutcome:
        readings = recent_readings(
            metrics, MetricType.BLOOD_PRESSURE, self.required_readings, _has_blood_pressure
        )
        if len(readings) < self.required_readings:
            return RuleOutcome.not_fired()

        if not all(m.systolic >= 140 or m.diastolic >= 90 for m in readings):  # type: ignore[operator]
            return RuleOutcome.not_fired()

        avg_systolic = sum(m.systolic for m in readings) / len(readings)  # type: ignore[misc]
        avg_diastolic = sum(m.diastolic for m in readings) / len(readings)  # type: ignore[misc]

        return RuleOutcome.fire(
            RuleSeverity.CRITICAL,
            "WARNING: blood pressure high in each of the last 3 readings\n"
            f"Average: {avg_systolic:.0f}/{avg_diastolic:.0f} mmHg\n"
            "Recommendations:\n"
            "1. See a cardiologist within 1-2 weeks\n"
            "2. Reduce salt intake (< 5g/day)\n"
            "3. Increase physical activity\n"
            "4. Reduce stress and get enough sleep\n"
            "5. Limit alcohol\n"
            "6. Monitor blood pressure daily",
        )


class BloodSugarRule:
    """Grades the average of recent blood sugar readings (mg/dL)."""

    name = "BLOOD_SUGAR_EVALUATION"
    max_readings = 3
    min_readings = 2

    def evaluate(self, metrics: Sequence[HealthMetric]) -> RuleOutcome:
        readings = recent_readings(metrics, MetricType.BLOOD_SUGAR, self.max_readings)
        if len(readings) < self.min_readings:
            return RuleOutcome.not_fired()

        average = sum(m.value for m in readings) / len(readings)  # type: ignore[misc]

        if average >= 200:
            return RuleOutcome.fire(
                RuleSeverity.CRITICAL,
                "WARNING: very high blood sugar\n"
                f"Average: {average:.0f} mg/dL\n"
                "Recommendations:\n"
                "1. SEE A DOCTOR IMMEDIATELY\n"
                "2. Get tested for diabetes\n"
                "3. Medication may be required\n"
                "4. Monitor blood sugar daily",
            )
        if average >= 126:
            return RuleOutcome.fire(
                RuleSeverity.WARNING,
                "High blood sugar - diabetes risk\n"
                f"Average: {average:.0f} mg/dL\n"
                "Recommendations:\n"
                "1. See a doctor to test for diabetes\n"
                "2. Cut sugar and refined carbohydrates\n"
                "3. Increase physical activity\n"
                "4. Lose weight if overweight\n"
                "5. Monitor blood sugar regularly",
            )
        if average >= 100:
            return RuleOutcome.fire(
                RuleSeverity.WARNING,
                "Pre-diabetes\n"
                f"Average: {average:.0f} mg/dL\n"
                "Recommendations:\n"
                "1. Change lifestyle now to prevent diabetes\n"
                "2. Lose 5-10% of body weight\n"
                "3. Exercise 30 minutes a day\n"
                "4. Eat more greens, less sugar\n"
                "5. Re-test in 3-6 months",
            )

        return RuleOutcome.not_fired()


def evaluate_health_rules(
    profile: HealthProfile | None,
    metrics: Sequence[HealthMetric],
    engine: RuleEngine | None = None,
) -> RuleResult:
    """Run the BMI rule on the profile and the metric rules on the history, merged."""
    engine = engine or RuleEngine()

    profile_rules: list[Rule[float | None]] = [BMIRule()]
    metric_rules: list[Rule[Sequence[HealthMetric]]] = [
        PersistentHypertensionRule(),
        BloodSugarRule(),
    ]

    profile_result = engine.evaluate(profile.bmi if profile else None, profile_rules)
    metric_result = engine.evaluate(metrics, metric_rules)
    return profile_result.merge(metric_result)
