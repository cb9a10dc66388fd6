"""Risk Evaluator - module init."""

from session_sentinel.risk.evaluator import RiskEvaluator
from session_sentinel.risk.geo import haversine_km, haversine_many
from session_sentinel.risk.schema import EvaluationContext, RiskAssessment

__all__ = [
    "EvaluationContext",
    "RiskAssessment",
    "RiskEvaluator",
    "haversine_km",
    "haversine_many",
]
