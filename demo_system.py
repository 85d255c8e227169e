"""
End-to-end demo of the decision-support pipeline on sample data.

This script walks through:
1. Configuration loading and logging setup
2. Metric assessment and health rule evaluation
3. Symptom analysis against a small knowledge base
4. Risk prediction from profile and metric history

Run with: uv run python demo_system.py
"""

from datetime import UTC, date, datetime, timedelta

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dss.config import get_config
from dss.domain.clock import age_from_birth_date
from dss.domain.models import (
    DiseasePattern,
    DiseaseSeverity,
    ExerciseFrequency,
    HealthMetric,
    HealthProfile,
    MetricType,
    SmokingStatus,
    Symptom,
    SymptomPattern,
)
from dss.logging_config import configure_logging
from dss.services import (
    InMemoryDiseaseKnowledgeBase,
    RiskPredictor,
    SymptomAnalysisService,
    assess_metric,
    evaluate_health_rules,
)

console = Console()
NOW = datetime.now(UTC)


def sample_profile() -> HealthProfile:
    return HealthProfile(
        bmi=31.2,
        smoking_status=SmokingStatus.FORMER,
        exercise_frequency=ExerciseFrequency.SEDENTARY,
        chronic_diseases=["hypertension"],
        family_medical_history=["Mother: type 2 diabetes"],
    )


def sample_metrics() -> list[HealthMetric]:
    metrics = [
        HealthMetric(
            metric_type=MetricType.BLOOD_PRESSURE,
            systolic=systolic,
            diastolic=diastolic,
            unit="mmHg",
            measured_at=NOW - timedelta(days=days_ago),
        )
        for days_ago, systolic, diastolic in [(1, 148, 94), (4, 152, 96), (8, 145, 91)]
    ]
    metrics += [
        HealthMetric(
            metric_type=MetricType.BLOOD_SUGAR,
            value=value,
            unit="mg/dL",
            measured_at=NOW - timedelta(days=days_ago),
        )
        for days_ago, value in [(2, 118), (9, 124), (16, 109)]
    ]
    metrics += [
        HealthMetric(
            metric_type=MetricType.WEIGHT,
            value=value,
            unit="kg",
            measured_at=NOW - timedelta(days=days_ago),
        )
        for days_ago, value in [(60, 88.0), (30, 90.5), (1, 93.0)]
    ]
    return metrics


def sample_symptoms() -> list[Symptom]:
    return [
        Symptom(name="Headache", severity=6, start_date=NOW - timedelta(days=9)),
        Symptom(name="Dizziness", severity=4, start_date=NOW - timedelta(days=3)),
        Symptom(name="Blurred vision", severity=5, start_date=NOW - timedelta(days=2)),
    ]


def sample_knowledge_base() -> InMemoryDiseaseKnowledgeBase:
    return InMemoryDiseaseKnowledgeBase(
        [
            DiseasePattern(
                disease_name="Hypertensive urgency",
                icd_code="I16.0",
                category="CARDIOVASCULAR",
                severity=DiseaseSeverity.SEVERE,
                recommendations=["Measure your blood pressure now and again in 30 minutes"],
                symptom_patterns=[
                    SymptomPattern(symptom_name="headache", weight=30, is_critical=True),
                    SymptomPattern(symptom_name="blurred vision", weight=30),
                    SymptomPattern(symptom_name="dizziness", weight=20),
                    SymptomPattern(symptom_name="chest pain", weight=20),
                ],
            ),
            DiseasePattern(
                disease_name="Migraine",
                icd_code="G43",
                category="NEUROLOGICAL",
                severity=DiseaseSeverity.MODERATE,
                recommendations=["Rest in a dark, quiet room"],
                symptom_patterns=[
                    SymptomPattern(symptom_name="headache", weight=50, is_critical=True),
                    SymptomPattern(symptom_name="nausea", weight=30),
                    SymptomPattern(symptom_name="blurred vision", weight=20),
                ],
            ),
            DiseasePattern(
                disease_name="Common cold",
                icd_code="J00",
                category="RESPIRATORY",
                severity=DiseaseSeverity.MILD,
                symptom_patterns=[
                    SymptomPattern(symptom_name="cough", weight=40),
                    SymptomPattern(symptom_name="sore throat", weight=40),
                    SymptomPattern(symptom_name="headache", weight=20),
                ],
            ),
        ]
    )


def demo_configuration() -> bool:
    console.print(Panel("🔧 Configuration", style="blue"))

    config = get_config()
    configure_logging(config.logging)

    table = Table(title="Scoring Parameters")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Environment", config.environment)
    table.add_row("Min match score", str(config.matcher.min_match_score))
    table.add_row("Max ranked diseases", str(config.matcher.max_ranked_diseases))
    table.add_row("Persistent symptom days", str(config.urgency.persistent_symptom_days))
    table.add_row("Metrics lookback (months)", str(config.risk.metrics_lookback_months))
    console.print(table)
    return True


def demo_health_rules() -> bool:
    console.print(Panel("📏 Metric Assessment & Health Rules", style="blue"))

    metrics = sample_metrics()
    table = Table(title="Latest Readings")
    table.add_column("Metric", style="cyan")
    table.add_column("Status", style="white")
    table.add_column("Note", style="white")
    for metric in metrics:
        assessment = assess_metric(metric)
        table.add_row(metric.metric_type.value, assessment.status.value, assessment.note or "-")
    console.print(table)

    result = evaluate_health_rules(sample_profile(), metrics)
    console.print(f"Fired rules: {', '.join(result.fired_rule_names) or 'none'}")
    console.print(f"Highest severity: {result.highest_severity.value}", style="yellow")
    for recommendation in result.recommendations:
        console.print(Panel(recommendation))
    return result.has_results()


def demo_symptom_analysis() -> bool:
    console.print(Panel("🩺 Symptom Analysis", style="blue"))

    service = SymptomAnalysisService.from_config(get_config())
    result = service.analyze(sample_symptoms(), sample_knowledge_base(), user_id="demo-user")

    table = Table(title="Ranked Conditions")
    table.add_column("Condition", style="cyan")
    table.add_column("ICD", style="white")
    table.add_column("Match", style="white")
    for disease in result.ranked_diseases:
        table.add_row(disease.disease_name, disease.icd_code or "-", f"{disease.match_score:.0%}")
    console.print(table)

    console.print(f"Urgency: {result.urgency_level.value} ({result.urgency_score:.0f}/100)")
    console.print(result.note, style="yellow")
    if result.insight:
        console.print(Panel(result.insight.message, title=result.insight.title))
    return bool(result.ranked_diseases)


def demo_risk_prediction() -> bool:
    console.print(Panel("📈 Risk Prediction", style="blue"))

    predictor = RiskPredictor.from_config(get_config())
    age = age_from_birth_date(date(1972, 5, 20))
    predictions = predictor.predict_health_risks(
        sample_profile(), sample_metrics(), age, user_id="demo-user"
    )

    table = Table(title=f"Predictions (age {age})")
    table.add_column("Target", style="cyan")
    table.add_column("Level", style="white")
    table.add_column("Score", style="white")
    table.add_column("Confidence", style="white")
    for prediction in predictions:
        table.add_row(
            prediction.target_condition,
            prediction.risk_level.value,
            f"{prediction.risk_score:.1f}",
            f"{prediction.confidence_score:.0f}%",
        )
    console.print(table)
    return len(predictions) == 3


def run_demo() -> None:
    console.print(Panel("🧪 Health Decision Support - Demo", style="bold blue"))

    steps = [
        ("Configuration", demo_configuration),
        ("Health Rules", demo_health_rules),
        ("Symptom Analysis", demo_symptom_analysis),
        ("Risk Prediction", demo_risk_prediction),
    ]

    results = []
    for step_name, step in steps:
        console.print(f"\n{'=' * 60}")
        try:
            results.append((step_name, step()))
        except Exception as e:
            console.print(f"❌ {step_name} failed with exception: {e}", style="red")
            results.append((step_name, False))

    console.print(f"\n{'=' * 60}")
    summary_table = Table(title="Demo Summary")
    summary_table.add_column("Step", style="cyan")
    summary_table.add_column("Result", style="white")
    for step_name, ok in results:
        summary_table.add_row(step_name, "✅ OK" if ok else "❌ FAILED")
    console.print(summary_table)


if __name__ == "__main__":
    run_demo()
