"""
Rules Module — Fault Scoring & Attribution + Explainability

Public API:
- FaultScorer / score: Telemetry -> Verdict
- Verdict: label, probability, confidence, attribution, affected components
- FaultLabel: normal/warning/fault
- ExplanationGenerator: Ranked, human-readable contributions
"""

from .scorer import (
    FaultLabel,
    FaultRule,
    FaultScorer,
    FAULT_RULES,
    RuleOutcome,
    Verdict,
    THRESHOLD_FAULT,
    THRESHOLD_WARNING,
    ensure_valid_record,
    score,
)
from .explainer import (
    ExplanationGenerator,
    FaultLocation,
    FeatureContribution,
    MAX_CONTRIBUTIONS,
    impact_level,
)

__all__ = [
    "FaultLabel",
    "FaultRule",
    "FaultScorer",
    "FAULT_RULES",
    "RuleOutcome",
    "Verdict",
    "THRESHOLD_FAULT",
    "THRESHOLD_WARNING",
    "ensure_valid_record",
    "score",
    "ExplanationGenerator",
    "FaultLocation",
    "FeatureContribution",
    "MAX_CONTRIBUTIONS",
    "impact_level",
]
