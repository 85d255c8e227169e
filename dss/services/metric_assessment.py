"""Status classification for individual metric readings."""

import structlog

from dss.domain.models import HealthMetric, MetricAssessment, MetricStatus, MetricType

logger = structlog.get_logger(__name__)


def assess_metric(metric: HealthMetric) -> MetricAssessment:
    """Classify one reading as NORMAL, WARNING or CRITICAL.

    Readings missing the values their type needs, and types without thresholds,
    are reported as NORMAL with no note.
    """
    status: MetricStatus
    note: str | None
    if metric.metric_type == MetricType.BLOOD_PRESSURE:
        status, note = _assess_blood_pressure(metric.systolic, metric.diastolic)
    elif metric.metric_type == MetricType.BLOOD_SUGAR:
        status, note = _assess_blood_sugar(metric.value)
    elif metric.metric_type == MetricType.HEART_RATE:
        status, note = _assess_heart_rate(metric.value)
    elif metric.metric_type == MetricType.BODY_TEMPERATURE:
        status, note = _assess_body_temperature(metric.value)
    else:
        status, note = MetricStatus.NORMAL, None

    if status is not MetricStatus.NORMAL:
        logger.debug("metric_flagged", metric_type=metric.metric_type.value, status=status.value)

    return MetricAssessment(metric_type=metric.metric_type, status=status, note=note)


def _assess_blood_pressure(
    systolic: float | None, diastolic: float | None
) -> tuple[MetricStatus, str | None]:
    if systolic is None or diastolic is None:
        return MetricStatus.NORMAL, None
    if systolic >= 180 or diastolic >= 120:
        return MetricStatus.CRITICAL, "Hypertensive crisis - seek medical care immediately"
    if systolic >= 140 or diastolic >= 90:
        return MetricStatus.WARNING, "High blood pressure"
    if systolic < 90 or diastolic < 60:
        return MetricStatus.WARNING, "Low blood pressure"
    return MetricStatus.NORMAL, "Blood pressure is normal"


def _assess_blood_sugar(value: float | None) -> tuple[MetricStatus, str | None]:
    if value is None:
        return MetricStatus.NORMAL, None
    if value >= 200:
        return MetricStatus.CRITICAL, "Very high blood sugar - see a doctor immediately"
    if value >= 126:
        return MetricStatus.WARNING, "High blood sugar"
    if value < 70:
        return MetricStatus.WARNING, "Low blood sugar"
    return MetricStatus.NORMAL, "Blood sugar is normal"


def _assess_heart_rate(value: float | None) -> tuple[MetricStatus, str | None]:
    if value is None:
        return MetricStatus.NORMAL, None
    if value > 120 or value < 40:
        return MetricStatus.CRITICAL, "Heart rate is dangerously out of range"
    if value > 100 or value < 50:
        return MetricStatus.WARNING, "Heart rate is outside the normal range"
    return MetricStatus.NORMAL, "Heart rate is normal"


def _assess_body_temperature(value: float | None) -> tuple[MetricStatus, str | None]:
    if value is None:
        return MetricStatus.NORMAL, None
    if value >= 39.0:
        return MetricStatus.CRITICAL, "High fever"
    if value >= 37.5:
        return MetricStatus.WARNING, "Fever"
    if value < 35.0:
        return MetricStatus.WARNING, "Low body temperature"
    return MetricStatus.NORMAL, "Body temperature is normal"
