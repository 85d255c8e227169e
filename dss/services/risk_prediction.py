"""
Point-based health risk prediction.

Three independent scorers share one pattern: accumulate integer risk points from
weighted factors, classify the total with fixed cutoffs, and attach a confidence score
reflecting how much data backed the prediction.

- Cardiovascular: age, BMI, systolic pressure, smoking, exercise, chronic disease
- Type 2 diabetes: age, BMI, blood sugar, family history, exercise
- Weight trend: first-to-last change over chronologically sorted weight readings
"""

import unicodedata
from collections.abc import Sequence
from datetime import datetime

import structlog

from dss.config import AppConfig, RiskConfig
from dss.domain.clock import add_months, as_utc, utc_now
from dss.domain.models import (
    ExerciseFrequency,
    HealthMetric,
    HealthProfile,
    MetricType,
    PredictionType,
    RiskLevel,
    RiskPrediction,
    SmokingStatus,
    TrendDirection,
)
from dss.services.health_rules import recent_readings

logger = structlog.get_logger(__name__)

CARDIOVASCULAR_ALGORITHM = "Cardiovascular-Risk-Score-v1"
DIABETES_ALGORITHM = "Diabetes-Risk-Score-v1"
WEIGHT_TREND_ALGORITHM = "Weight-Trend-Analysis-v1"

RECENT_READINGS = 3
MIN_WEIGHT_READINGS = 3
# Family history is free text; entries may be recorded in English or Vietnamese
DIABETES_HISTORY_KEYWORDS = ("diabetes", "diabetic", "tiểu đường")
# Cardiovascular credits any active level; the diabetes score credits ACTIVE only
ACTIVE_LEVELS = frozenset({ExerciseFrequency.ACTIVE, ExerciseFrequency.VERY_ACTIVE})

_LEVEL_LABELS = {
    RiskLevel.VERY_HIGH: "VERY HIGH",
    RiskLevel.HIGH: "HIGH",
    RiskLevel.MODERATE: "MODERATE",
    RiskLevel.LOW: "LOW",
}


def classify_risk(points: int) -> RiskLevel:
    """Map a risk point total to its level."""
    if points >= 60:
        return RiskLevel.VERY_HIGH
    if points >= 40:
        return RiskLevel.HIGH
    if points >= 20:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def calculate_confidence(data_points: int, profile: HealthProfile | None) -> float:
    """
    Confidence (0-100) in a prediction given how much data supported it.

    Base 50, +5 per data point up to +25, +10 with a known BMI and +5 each for known
    smoking status, exercise frequency and family history.
    """
    confidence = 50.0 + min(data_points * 5, 25)
    if profile is not None:
        if profile.bmi is not None:
            confidence += 10
        if profile.smoking_status is not None:
            confidence += 5
        if profile.exercise_frequency is not None:
            confidence += 5
        if profile.family_medical_history is not None:
            confidence += 5
    return min(confidence, 100.0)


def _is_elevated(level: RiskLevel) -> bool:
    return level in (RiskLevel.HIGH, RiskLevel.VERY_HIGH)


def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values)


class RiskPredictor:
    """Produces cardiovascular, diabetes and weight-trend predictions for one user."""

    def __init__(self, config: RiskConfig | None = None) -> None:
        self.config = config or RiskConfig()
        self.logger = logger.bind(component="risk_predictor")

    @classmethod
    def from_config(cls, config: AppConfig) -> "RiskPredictor":
        return cls(config.risk)

    def predict_health_risks(
        self,
        profile: HealthProfile | None,
        metrics: Sequence[HealthMetric],
        age: int | None,
        now: datetime | None = None,
        user_id: str | None = None,
    ) -> list[RiskPrediction]:
        """
        All predictions for a user, in order: cardiovascular, diabetes, weight trend.

        Returns an empty list without a profile. Metrics measured before the lookback
        window are ignored; the weight trend is omitted when there are too few readings.
        """
        log = self.logger.bind(user_id=user_id)
        if profile is None:
            log.warning("no_health_profile")
            return []

        now = as_utc(now) if now else utc_now()
        since = add_months(now, -self.config.metrics_lookback_months)
        recent = [m for m in metrics if as_utc(m.measured_at) >= since]

        predictions = [
            self.predict_cardiovascular(profile, recent, age, now),
            self.predict_diabetes(profile, recent, age, now),
        ]
        weight_trend = self.predict_weight_trend(profile, recent, now)
        if weight_trend is not None:
            predictions.append(weight_trend)

        for prediction in predictions:
            log.info(
                "risk_prediction_generated",
                target_condition=prediction.target_condition,
                risk_level=prediction.risk_level.value,
                risk_score=prediction.risk_score,
                confidence=prediction.confidence_score,
            )
        return predictions

    def predict_cardiovascular(
        self,
        profile: HealthProfile,
        metrics: Sequence[HealthMetric],
        age: int | None,
        now: datetime | None = None,
    ) -> RiskPrediction:
        now = as_utc(now) if now else utc_now()
        points = 0
        risk_factors: list[str] = []
        protective_factors: list[str] = []

        if age is not None and age > 45:
            points += 15
            risk_factors.append(f"Age {age} (over 45)")

        bmi = profile.bmi
        if bmi is not None:
            if bmi > 30:
                points += 20
                risk_factors.append(f"BMI {bmi:.1f} (obese)")
            elif bmi > 25:
                points += 10
                risk_factors.append(f"BMI {bmi:.1f} (overweight)")
            elif 18.5 <= bmi <= 24.9:
                protective_factors.append("Normal BMI")

        bp_readings = recent_readings(
            metrics,
            MetricType.BLOOD_PRESSURE,
            RECENT_READINGS,
            lambda m: m.systolic is not None,
        )
        if bp_readings:
            avg_systolic = _average([m.systolic for m in bp_readings])  # type: ignore[misc]
            if avg_systolic >= 140:
                points += 25
                risk_factors.append(f"High blood pressure (avg {avg_systolic:.0f} mmHg)")
            elif avg_systolic < 120:
                protective_factors.append("Normal blood pressure")

        if profile.smoking_status == SmokingStatus.CURRENT:
            points += 20
            risk_factors.append("Current smoker")
        elif profile.smoking_status == SmokingStatus.NEVER:
            protective_factors.append("Non-smoker")

        if profile.exercise_frequency == ExerciseFrequency.SEDENTARY:
            points += 10
            risk_factors.append("Sedentary lifestyle")
        elif profile.exercise_frequency in ACTIVE_LEVELS:
            protective_factors.append("Regular physical activity")

        if profile.chronic_diseases:
            points += 15
            risk_factors.append("Chronic disease present")

        level = classify_risk(points)
        recommendations: list[str] = []
        if _is_elevated(level):
            recommendations += [
                "See a cardiologist for a detailed assessment",
                "Preventive medication may be needed",
            ]
        recommendations += [
            "Exercise regularly (150 minutes/week)",
            "Follow a DASH diet: plenty of vegetables, little salt",
            "Quit smoking if you smoke",
            "Maintain a healthy weight",
            "Sleep 7-8 hours a night",
            "Monitor your blood pressure regularly",
        ]

        outlook = (
            "Your cardiovascular risk is low. Keep up a healthy lifestyle."
            if level == RiskLevel.LOW
            else "You should take steps to reduce your cardiovascular risk."
        )

        return RiskPrediction(
            target_condition="Cardiovascular disease",
            prediction_type=PredictionType.DISEASE_RISK,
            risk_score=float(points),
            risk_level=level,
            summary=(
                f"Cardiovascular disease risk: {_LEVEL_LABELS[level]}\n\n"
                f"Risk points: {points}/100\n\n{outlook}"
            ),
            risk_factors=risk_factors,
            protective_factors=protective_factors,
            recommendations=recommendations,
            algorithm=CARDIOVASCULAR_ALGORITHM,
            confidence_score=calculate_confidence(len(bp_readings), profile),
            predicted_at=now,
            valid_until=add_months(now, self.config.disease_validity_months),
        )

    def predict_diabetes(
        self,
        profile: HealthProfile,
        metrics: Sequence[HealthMetric],
        age: int | None,
        now: datetime | None = None,
    ) -> RiskPrediction:
        now = as_utc(now) if now else utc_now()
        points = 0
        risk_factors: list[str] = []
        protective_factors: list[str] = []

        if age is not None and age > 45:
            points += 15
            risk_factors.append(f"Age {age} (over 45)")

        bmi = profile.bmi
        if bmi is not None:
            if bmi >= 30:
                points += 25
                risk_factors.append("High BMI (obese)")
            elif bmi >= 25:
                points += 15
                risk_factors.append("Overweight")

        sugar_readings = recent_readings(metrics, MetricType.BLOOD_SUGAR, RECENT_READINGS)
        if sugar_readings:
            avg_sugar = _average([m.value for m in sugar_readings])  # type: ignore[misc]
            if avg_sugar >= 126:
                points += 30
                risk_factors.append("High blood sugar")
            elif avg_sugar >= 100:
                points += 20
                risk_factors.append("Pre-diabetic blood sugar")
            else:
                protective_factors.append("Normal blood sugar")

        history = profile.family_medical_history or []
        if any(
            keyword in unicodedata.normalize("NFC", entry).casefold()
            for entry in history
            for keyword in DIABETES_HISTORY_KEYWORDS
        ):
            points += 20
            risk_factors.append("Family history of diabetes")

        if profile.exercise_frequency == ExerciseFrequency.SEDENTARY:
            points += 10
            risk_factors.append("Sedentary lifestyle")
        elif profile.exercise_frequency == ExerciseFrequency.ACTIVE:
            protective_factors.append("Regular physical activity")

        level = classify_risk(points)
        recommendations: list[str] = []
        if _is_elevated(level):
            recommendations.append("Ask your doctor for an HbA1c test")
        recommendations += [
            "Cut sugar and refined carbohydrates",
            "Exercise 30 minutes a day",
            "Lose 5-10% of body weight if overweight",
            "Eat more greens and whole grains",
            "Check your blood sugar periodically",
        ]

        outlook = (
            "Your diabetes risk is low. Keep up a healthy lifestyle."
            if level == RiskLevel.LOW
            else "You should take preventive steps to reduce your risk."
        )

        return RiskPrediction(
            target_condition="Type 2 diabetes",
            prediction_type=PredictionType.DISEASE_RISK,
            risk_score=float(points),
            risk_level=level,
            summary=(
                f"Type 2 diabetes risk: {_LEVEL_LABELS[level]}\n\n"
                f"Risk points: {points}/100\n{outlook}"
            ),
            risk_factors=risk_factors,
            protective_factors=protective_factors,
            recommendations=recommendations,
            algorithm=DIABETES_ALGORITHM,
            confidence_score=calculate_confidence(len(sugar_readings), profile),
            predicted_at=now,
            valid_until=add_months(now, self.config.disease_validity_months),
        )

    def predict_weight_trend(
        self,
        profile: HealthProfile | None,
        metrics: Sequence[HealthMetric],
        now: datetime | None = None,
    ) -> RiskPrediction | None:
        """Weight trend over the supplied readings; None with fewer than 3 readings."""
        readings = list(reversed(recent_readings(metrics, MetricType.WEIGHT)))
        if len(readings) < MIN_WEIGHT_READINGS:
            return None

        now = as_utc(now) if now else utc_now()
        first_weight: float = readings[0].value  # type: ignore[assignment]
        last_weight: float = readings[-1].value  # type: ignore[assignment]
        change = last_weight - first_weight
        change_percent = change / first_weight * 100 if first_weight else 0.0

        if change > 2:
            trend = TrendDirection.UP
        elif change < -2:
            trend = TrendDirection.DOWN
        else:
            trend = TrendDirection.STABLE

        if abs(change_percent) > 10:
            level = RiskLevel.HIGH
        elif abs(change_percent) > 5:
            level = RiskLevel.MODERATE
        else:
            level = RiskLevel.LOW

        if change > 5:
            recommendations = [
                "Significant weight gain - review your diet",
                "Increase physical activity",
            ]
        elif change < -5:
            recommendations = [
                "Significant weight loss - look into the cause",
                "Make sure your nutrition is adequate",
            ]
        else:
            recommendations = ["Weight is stable - keep it up"]

        return RiskPrediction(
            target_condition="Weight trend",
            prediction_type=PredictionType.HEALTH_TREND,
            risk_score=abs(change_percent),
            risk_level=level,
            summary=(
                f"Weight trend: {trend.value}\n\n"
                f"Change: {change:.1f} kg ({change_percent:.1f}%)\n"
                f"Over {len(readings)} readings"
            ),
            recommendations=recommendations,
            algorithm=WEIGHT_TREND_ALGORITHM,
            confidence_score=calculate_confidence(len(readings), profile),
            predicted_at=now,
            valid_until=add_months(now, self.config.trend_validity_months),
            trend=trend,
        )
