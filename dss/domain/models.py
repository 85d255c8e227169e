"""
Domain models for health decision support.

These models represent the core business concepts and are framework-agnostic.
Inputs owned by the caller (symptoms, metrics, profile, disease patterns) are frozen
snapshots; outputs are plain validated records the caller may persist or expose.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class RuleSeverity(str, Enum):
    """Severity of a fired rule or generated insight, ordered INFO < WARNING < CRITICAL."""

    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    @classmethod
    def highest(cls, *severities: "RuleSeverity") -> "RuleSeverity":
        """Return the most severe of the given levels (INFO when none are given)."""
        return max(severities, key=lambda s: s.rank, default=cls.INFO)


class DiseaseSeverity(str, Enum):
    """Severity tag carried by a disease in the knowledge base."""

    MILD = "MILD"
    MODERATE = "MODERATE"
    SEVERE = "SEVERE"
    CRITICAL = "CRITICAL"


class UrgencyLevel(str, Enum):
    # NONE is only produced when the user has no active symptoms
    NONE = "NONE"
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class MetricType(str, Enum):
    """Types of health metrics a user can record."""

    WEIGHT = "WEIGHT"
    BLOOD_PRESSURE = "BLOOD_PRESSURE"
    BLOOD_SUGAR = "BLOOD_SUGAR"
    HEART_RATE = "HEART_RATE"
    BODY_TEMPERATURE = "BODY_TEMPERATURE"
    CHOLESTEROL = "CHOLESTEROL"
    OXYGEN_SATURATION = "OXYGEN_SATURATION"


class MetricStatus(str, Enum):
    NORMAL = "NORMAL"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class SmokingStatus(str, Enum):
    NEVER = "NEVER"
    FORMER = "FORMER"
    CURRENT = "CURRENT"


class ExerciseFrequency(str, Enum):
    SEDENTARY = "SEDENTARY"
    LIGHT = "LIGHT"
    MODERATE = "MODERATE"
    ACTIVE = "ACTIVE"
    VERY_ACTIVE = "VERY_ACTIVE"


class InsightType(str, Enum):
    RECOMMENDATION = "RECOMMENDATION"
    WARNING = "WARNING"
    ACHIEVEMENT = "ACHIEVEMENT"
    TIP = "TIP"
    PREDICTION = "PREDICTION"


class PredictionType(str, Enum):
    DISEASE_RISK = "DISEASE_RISK"
    HEALTH_TREND = "HEALTH_TREND"


class TrendDirection(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    STABLE = "STABLE"


# Caller-owned inputs


class Symptom(BaseModel):
    """A symptom recorded by the user. Active while it has no end date."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    body_part: str | None = None
    severity: int | None = Field(None, ge=1, le=10, description="1 (mild) to 10 (severe)")
    start_date: datetime
    end_date: datetime | None = Field(None, description="None while the symptom is active")

    @computed_field(return_type=bool)
    def is_active(self) -> bool:
        return self.end_date is None


class HealthMetric(BaseModel):
    """Individual health metric reading."""

    model_config = ConfigDict(frozen=True)

    metric_type: MetricType
    value: float | None = Field(None, description="Value for single-valued metrics")
    systolic: float | None = Field(None, description="Systolic pressure for BLOOD_PRESSURE")
    diastolic: float | None = Field(None, description="Diastolic pressure for BLOOD_PRESSURE")
    unit: str | None = None
    measured_at: datetime


class HealthProfile(BaseModel):
    """Profile attributes used by the risk scorers. None means "not provided"."""

    model_config = ConfigDict(frozen=True)

    bmi: float | None = Field(None, gt=0.0)
    smoking_status: SmokingStatus | None = None
    exercise_frequency: ExerciseFrequency | None = None
    chronic_diseases: list[str] = Field(default_factory=list)
    family_medical_history: list[str] | None = None


class SymptomPattern(BaseModel):
    """One symptom in a disease's diagnostic signature."""

    model_config = ConfigDict(frozen=True)

    symptom_name: str
    weight: int = Field(default=0, ge=0, le=100, description="Relative importance (0-100)")
    is_critical: bool = Field(
        default=False, description="Absence of a critical symptom rules the disease out"
    )
    qualifiers: list[str] = Field(default_factory=list)


class DiseasePattern(BaseModel):
    """Knowledge-base entry mapping a disease to its symptom patterns."""

    model_config = ConfigDict(frozen=True)

    disease_name: str
    disease_name_en: str | None = None
    icd_code: str | None = None
    category: str | None = None
    severity: DiseaseSeverity | None = None
    requires_immediate_attention: bool = False
    recommendations: list[str] = Field(default_factory=list)
    symptom_patterns: list[SymptomPattern] = Field(default_factory=list)


# Derived outputs


class DiseaseMatchScore(BaseModel):
    """A disease matched against the user's symptoms, with its weighted score."""

    disease_name: str
    disease_name_en: str | None = None
    icd_code: str | None = None
    category: str | None = None
    severity: DiseaseSeverity | None = None
    match_score: float = Field(
        ge=0.0, description="Weighted match; may exceed 1.0 when critical symptoms match"
    )
    recommendations: list[str] = Field(default_factory=list)
    requires_immediate_attention: bool = False

    @classmethod
    def from_pattern(cls, pattern: DiseasePattern, match_score: float) -> "DiseaseMatchScore":
        return cls(
            disease_name=pattern.disease_name,
            disease_name_en=pattern.disease_name_en,
            icd_code=pattern.icd_code,
            category=pattern.category,
            severity=pattern.severity,
            match_score=match_score,
            recommendations=list(pattern.recommendations),
            requires_immediate_attention=pattern.requires_immediate_attention,
        )


class UrgencyAssessment(BaseModel):
    """Composite urgency with the factors that contributed to it."""

    score: float = Field(ge=0.0, le=100.0)
    level: UrgencyLevel
    factors: list[str] = Field(default_factory=list)


class Insight(BaseModel):
    """Insight generated from a symptom analysis, for the caller to persist."""

    insight_type: InsightType
    category: str = "SYMPTOM_ANALYSIS"
    title: str
    message: str
    actionable_advice: str
    priority: int = Field(ge=1, le=3, description="1 (highest) to 3 (lowest)")
    severity: RuleSeverity
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    expires_at: datetime


class SymptomAnalysisResult(BaseModel):
    """Outcome of analysing a user's active symptoms."""

    ranked_diseases: list[DiseaseMatchScore] = Field(default_factory=list)
    urgency_score: float = Field(ge=0.0, le=100.0)
    urgency_level: UrgencyLevel
    recommendations: list[str] = Field(default_factory=list)
    note: str
    insight: Insight | None = None

    @classmethod
    def no_symptoms(cls) -> "SymptomAnalysisResult":
        """Canonical result for a user without active symptoms."""
        return cls(
            ranked_diseases=[],
            urgency_score=0.0,
            urgency_level=UrgencyLevel.NONE,
            recommendations=["No symptoms are currently being tracked"],
            note="You have no active symptoms",
        )

    @classmethod
    def no_match(cls, urgency_score: float = 30.0) -> "SymptomAnalysisResult":
        """Canonical result when no known disease shares a symptom with the user."""
        return cls(
            ranked_diseases=[],
            urgency_score=urgency_score,
            urgency_level=UrgencyLevel.LOW,
            recommendations=[
                "No matching condition was found in the knowledge base",
                "If symptoms are severe or do not improve, see a doctor",
            ],
            note="Your symptoms do not match any condition in the system",
        )


class RiskPrediction(BaseModel):
    """Point-based risk prediction for one target condition."""

    target_condition: str
    prediction_type: PredictionType
    risk_score: float = Field(ge=0.0, description="Raw point total (or |change %| for trends)")
    risk_level: RiskLevel
    summary: str
    risk_factors: list[str] = Field(default_factory=list)
    protective_factors: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    algorithm: str
    confidence_score: float = Field(ge=0.0, le=100.0)
    predicted_at: datetime
    valid_until: datetime
    trend: TrendDirection | None = None


class MetricAssessment(BaseModel):
    """Status classification of a single metric reading."""

    metric_type: MetricType
    status: MetricStatus
    note: str | None = None
