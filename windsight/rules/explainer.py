"""
Explainability Engine — Surface Understandable Reasoning

Turns a Verdict's signed attribution into ranked, human-readable
contributions. "Why is this a warning?" -> "Vibration Levels (75.0 mm/s),
High Impact, check bearings and perform balancing maintenance"

Constraints:
- Ranking by |attribution|, top 8 only
- Fixed recommendation rules per parameter (no free-form generation)
- Explanations include the observed value with its unit
- Fault locations carry component + severity only (no geometry)
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from windsight.rules.scorer import Verdict
from windsight.telemetry.config import PARAMETERS_BY_NAME
from windsight.telemetry.schemas import TelemetryRecord


# ============================================================================
# CONSTANTS
# ============================================================================

# Maximum number of contributions to return
MAX_CONTRIBUTIONS = 8

# |attribution| thresholds for impact levels
IMPACT_HIGH = 0.1
IMPACT_MEDIUM = 0.05

# Human-readable parameter names (falls back to the catalog label)
PARAMETER_NAMES = {
    "vibrationLevels": "Vibration Levels",
    "componentTemperatures": "Component Temperature",
    "windSpeed": "Wind Speed",
    "powerFactor": "Power Factor",
    "gearboxOilCondition": "Gearbox Oil Quality",
    "generatorPower": "Generator Power",
    "frequency": "Electrical Frequency",
    "current": "Electrical Current",
    "voltage": "Voltage",
    "turbulenceIntensity": "Turbulence Intensity",
    "tipSpeedRatio": "Tip Speed Ratio",
    "coefficientPerformance": "Performance Coefficient",
}

PARAMETER_DESCRIPTIONS = {
    "vibrationLevels": "High vibration can indicate bearing wear, imbalance, or gearbox issues",
    "componentTemperatures": "Elevated temperatures suggest overheating in electrical or mechanical components",
    "windSpeed": "Both very low and very high wind speeds can cause operational issues",
    "powerFactor": "Low power factor indicates electrical system inefficiency or faults",
    "gearboxOilCondition": "Poor oil condition leads to increased wear and potential failures",
    "generatorPower": "Power output deviations can indicate generator or grid connection issues",
    "frequency": "Frequency variations suggest grid instability or control system problems",
    "current": "Current anomalies may indicate electrical faults or load imbalances",
    "voltage": "Voltage fluctuations can cause equipment stress and reduced efficiency",
    "turbulenceIntensity": "High turbulence increases fatigue loads on turbine components",
    "tipSpeedRatio": "Optimal tip speed ratio is crucial for maximum energy capture",
    "coefficientPerformance": "Performance coefficient indicates overall turbine efficiency",
}

DEFAULT_DESCRIPTION = "This parameter affects turbine operation and health"
DEFAULT_RECOMMENDATION = "Monitor parameter within normal operational ranges"

# Component -> (driving parameter, severity when the verdict has no attribution for it)
FAULT_LOCATION_SOURCES = {
    "Gearbox": ("vibrationLevels", 0.5),
    "Generator": ("componentTemperatures", 0.5),
    "Bearings": ("vibrationLevels", 0.4),
    "Power Electronics": ("powerFactor", 0.3),
    "Rotor": ("windSpeed", 0.4),
}


# ============================================================================
# Recommendation rules
# ============================================================================

def _recommend_vibration(value: float, impact: float) -> str:
    if impact > 0.05 and value > 50:
        return "Check bearings and perform balancing maintenance"
    if value > 70:
        return "Schedule immediate vibration analysis and bearing inspection"
    return "Monitor vibration trends and maintain regular inspection schedule"


def _recommend_temperature(value: float, impact: float) -> str:
    if impact > 0.05 and value > 80:
        return "Check cooling systems and electrical connections"
    if value > 100:
        return "Immediate shutdown recommended to prevent damage"
    return "Monitor temperature trends and ensure proper ventilation"


def _recommend_wind_speed(value: float, impact: float) -> str:
    if value < 3:
        return "Normal operation - below cut-in wind speed"
    if value > 25:
        return "Monitor for potential cut-out conditions"
    return "Optimal wind conditions for power generation"


def _recommend_power_factor(value: float, impact: float) -> str:
    if impact > 0.03 and value < 0.9:
        return "Check electrical connections and power electronics"
    return "Power factor within acceptable range"


def _recommend_gearbox_oil(value: float, impact: float) -> str:
    if impact > 0.03 and value < 50:
        return "Schedule oil change and filter replacement"
    if value < 30:
        return "Immediate oil system maintenance required"
    return "Oil condition satisfactory"


RECOMMENDATIONS = {
    "vibrationLevels": _recommend_vibration,
    "componentTemperatures": _recommend_temperature,
    "windSpeed": _recommend_wind_speed,
    "powerFactor": _recommend_power_factor,
    "gearboxOilCondition": _recommend_gearbox_oil,
}


# ============================================================================
# Feature Contribution
# ============================================================================

@dataclass
class FeatureContribution:
    """Contribution of one parameter to a verdict."""
    parameter: str
    display_name: str
    description: str
    value: Any
    formatted_value: str
    attribution: float
    impact: str          # High / Medium / Low
    direction: str       # increases_risk / decreases_risk
    recommendation: str

    def to_wire(self) -> Dict[str, Any]:
        data = asdict(self)
        return {
            "parameter": data["parameter"],
            "displayName": data["display_name"],
            "description": data["description"],
            "value": data["value"],
            "formattedValue": data["formatted_value"],
            "attribution": data["attribution"],
            "impact": data["impact"],
            "direction": data["direction"],
            "recommendation": data["recommendation"],
        }


@dataclass
class FaultLocation:
    """A component implicated by a verdict, with a severity for highlighting."""
    component: str
    parameter: str
    severity: float


def impact_level(attribution: float) -> str:
    """Bucket an attribution by magnitude."""
    magnitude = abs(attribution)
    if magnitude > IMPACT_HIGH:
        return "High"
    if magnitude > IMPACT_MEDIUM:
        return "Medium"
    return "Low"


def display_name(parameter: str) -> str:
    if parameter in PARAMETER_NAMES:
        return PARAMETER_NAMES[parameter]
    spec = PARAMETERS_BY_NAME.get(parameter)
    return spec.label if spec else parameter


def format_value(parameter: str, value: Any) -> str:
    """Render a value with one decimal and its unit."""
    spec = PARAMETERS_BY_NAME.get(parameter)
    unit = spec.unit if spec else ""
    text = f"{value:.1f}" if isinstance(value, (int, float)) else str(value)
    return f"{text} {unit}".strip()


def recommend(parameter: str, value: Any, attribution: float) -> str:
    rule = RECOMMENDATIONS.get(parameter)
    if rule is None or not isinstance(value, (int, float)):
        return DEFAULT_RECOMMENDATION
    return rule(value, attribution)


# ============================================================================
# Explanation Generator
# ============================================================================

class ExplanationGenerator:
    """
    Builds ranked explanations for a verdict.

    Works on the verdict as scored; nothing is recomputed.
    """

    def __init__(self, max_contributions: int = MAX_CONTRIBUTIONS):
        self.max_contributions = max_contributions

    def contributions(
        self,
        verdict: Verdict,
        record: Optional[TelemetryRecord] = None,
    ) -> List[FeatureContribution]:
        """
        Rank the verdict's attribution by absolute value.

        Args:
            verdict: Scored verdict
            record: Telemetry the verdict came from (for values and recommendations)

        Returns:
            Top contributions, most influential first
        """
        values = record.to_wire() if record is not None else {}
        ranked = sorted(verdict.attribution.items(), key=lambda item: abs(item[1]), reverse=True)

        result = []
        for parameter, attribution in ranked[: self.max_contributions]:
            value = values.get(parameter)
            result.append(FeatureContribution(
                parameter=parameter,
                display_name=display_name(parameter),
                description=PARAMETER_DESCRIPTIONS.get(parameter, DEFAULT_DESCRIPTION),
                value=value,
                formatted_value=format_value(parameter, value) if value is not None else "",
                attribution=attribution,
                impact=impact_level(attribution),
                direction="increases_risk" if attribution > 0 else "decreases_risk",
                recommendation=recommend(parameter, value, attribution),
            ))
        return result

    def summary(self, verdict: Verdict) -> str:
        """One-sentence overview of the verdict."""
        return (
            f"Analyzed {len(verdict.attribution)} parameters and identified "
            f"{len(verdict.affected_components)} potentially affected components. "
            f"The {verdict.label.value} prediction is primarily driven by the "
            f"highest-impact parameters."
        )

    def explain(self, verdict: Verdict, record: Optional[TelemetryRecord] = None) -> Dict[str, Any]:
        """Full explanation payload (wire names)."""
        return {
            "label": verdict.label.value,
            "probability": verdict.probability,
            "confidence": verdict.confidence,
            "summary": self.summary(verdict),
            "featureImportance": dict(verdict.attribution),
            "contributions": [c.to_wire() for c in self.contributions(verdict, record)],
        }

    def fault_locations(self, verdict: Verdict) -> List[FaultLocation]:
        """
        Components to highlight, in affected-component order.

        Severity is the driving parameter's attribution when positive,
        otherwise the component's default severity.

        Components without a known driving parameter (e.g. Control System)
        are not located.
        """
        locations = []
        for component in verdict.affected_components:
            source = FAULT_LOCATION_SOURCES.get(component)
            if source is None:
                continue
            parameter, default_severity = source
            # Idle rules carry negative attribution; severity stays positive
            severity = verdict.attribution.get(parameter, 0.0)
            if severity <= 0:
                severity = default_severity
            locations.append(FaultLocation(component=component, parameter=parameter, severity=severity))
        return locations
