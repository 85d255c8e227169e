"""
Decision-support services.

This package contains the rule engine and health rules, the symptom-disease matcher,
urgency scoring, symptom analysis orchestration and risk prediction.
"""

from .health_rules import BloodSugarRule, BMIRule, PersistentHypertensionRule, evaluate_health_rules
from .knowledge_base import DiseaseKnowledgeBase, InMemoryDiseaseKnowledgeBase
from .metric_assessment import assess_metric
from .risk_prediction import RiskPredictor, calculate_confidence, classify_risk
from .rule_engine import Result, Rule, RuleEngine, RuleOutcome, RuleResult
from .symptom_analysis import SymptomAnalysisService
from .symptom_matcher import SymptomDiseaseMatcher
from .urgency import UrgencyScorer

__all__ = [
    "BMIRule",
    "BloodSugarRule",
    "DiseaseKnowledgeBase",
    "InMemoryDiseaseKnowledgeBase",
    "PersistentHypertensionRule",
    "Result",
    "RiskPredictor",
    "Rule",
    "RuleEngine",
    "RuleOutcome",
    "RuleResult",
    "SymptomAnalysisService",
    "SymptomDiseaseMatcher",
    "UrgencyScorer",
    "assess_metric",
    "calculate_confidence",
    "classify_risk",
    "evaluate_health_rules",
]
