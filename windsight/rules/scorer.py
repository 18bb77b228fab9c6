"""
Fault Scoring & Attribution — Convert Telemetry to a Verdict

This is where RULES live. Telemetry comes in; a label, a fault probability,
a confidence and a signed per-parameter attribution come out.

Constraints:
- Independent threshold rules, each with a fixed weight (no magic numbers)
- Label thresholds are strict: a tie falls to the lower tier
- Probability is never below the deterministic rule sum, never above 1
- All randomness comes from an injectable random.Random
- Missing or non-finite fields fail loudly (no default substitution)
"""

import math
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from windsight.telemetry.schemas import InvalidRecord, TelemetryRecord


# ============================================================================
# THRESHOLD CONSTANTS — Explicit, Named, No Magic Numbers
# ============================================================================

# Fault score thresholds (strictly greater than)
THRESHOLD_FAULT = 0.6
THRESHOLD_WARNING = 0.3

# Rule sums are rounded before classification so float accumulation
# (0.3 + 0.15 + 0.15) lands exactly on a tie instead of just above it
SCORE_PRECISION = 10

# Probability = fault score + U[0, PROBABILITY_NOISE)
PROBABILITY_NOISE = 0.1

# Confidence = U[CONFIDENCE_MIN, CONFIDENCE_MIN + CONFIDENCE_SPAN)
CONFIDENCE_MIN = 0.85
CONFIDENCE_SPAN = 0.1

# Residual importance for parameters no rule reads: U[-bound, bound)
RESIDUAL_ATTRIBUTION: Dict[str, float] = {
    "generatorPower": 0.02,
    "frequency": 0.01,
}


# ============================================================================
# Enums and Schemas
# ============================================================================

class FaultLabel(str, Enum):
    """Fault classification levels."""
    NORMAL = "normal"
    WARNING = "warning"
    FAULT = "fault"


@dataclass(frozen=True)
class FaultRule:
    """A single threshold rule and the explanation it contributes."""
    name: str
    parameter: str                    # Wire name of the parameter the rule reads
    weight: float                     # Added to the fault score when fired
    components: Tuple[str, ...]       # Components implicated when fired
    fired_attribution: float          # Positive: pushes toward fault
    idle_attribution: float           # Negative: pushes away from fault
    condition: Callable[[TelemetryRecord], bool]

    def applies(self, record: TelemetryRecord) -> bool:
        return bool(self.condition(record))


@dataclass(frozen=True)
class RuleOutcome:
    """Result of evaluating one rule against one record."""
    rule: FaultRule
    fired: bool

    @property
    def attribution(self) -> float:
        return self.rule.fired_attribution if self.fired else self.rule.idle_attribution


FAULT_RULES: Tuple[FaultRule, ...] = (
    FaultRule(
        name="high_vibration",
        parameter="vibrationLevels",
        weight=0.30,
        components=("Gearbox", "Bearings"),
        fired_attribution=0.15,
        idle_attribution=-0.05,
        condition=lambda r: r.vibration_levels > 70,
    ),
    FaultRule(
        name="overheating",
        parameter="componentTemperatures",
        weight=0.25,
        components=("Generator", "Power Electronics"),
        fired_attribution=0.12,
        idle_attribution=-0.03,
        condition=lambda r: r.component_temperatures > 90,
    ),
    FaultRule(
        name="wind_out_of_range",
        parameter="windSpeed",
        weight=0.20,
        components=("Rotor", "Control System"),
        fired_attribution=0.10,
        idle_attribution=-0.02,
        condition=lambda r: r.wind_speed > 25 or r.wind_speed < 3,
    ),
    FaultRule(
        name="low_power_factor",
        parameter="powerFactor",
        weight=0.15,
        components=("Power Electronics",),
        fired_attribution=0.08,
        idle_attribution=-0.01,
        condition=lambda r: r.power_factor < 0.85,
    ),
    FaultRule(
        name="degraded_gearbox_oil",
        parameter="gearboxOilCondition",
        weight=0.10,
        components=("Gearbox",),
        fired_attribution=0.06,
        idle_attribution=-0.01,
        condition=lambda r: r.gearbox_oil_condition < 30,
    ),
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Verdict(BaseModel):
    """
    Scoring result for one Telemetry Record.

    Immutable once created: attribution is a read-only mapping and the
    affected components are a tuple. Parsing accepts the legacy remote
    field names `prediction` (label) and `shapValues` (attribution).
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    label: FaultLabel = Field(
        ...,
        validation_alias=AliasChoices("label", "prediction"),
        serialization_alias="label",
    )
    probability: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    attribution: Mapping[str, float] = Field(
        default_factory=dict,
        validate_default=True,
        validation_alias=AliasChoices("attribution", "shapValues"),
        serialization_alias="attribution",
    )
    affected_components: Tuple[str, ...] = ()
    timestamp: datetime = Field(default_factory=_utc_now)

    @field_validator("attribution")
    @classmethod
    def freeze_attribution(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        return MappingProxyType(dict(v))

    @field_serializer("attribution")
    def dump_attribution(self, v: Mapping[str, float]) -> Dict[str, float]:
        return dict(v)

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def to_wire(self) -> Dict[str, Any]:
        """Dump to a JSON-ready dict keyed by wire names."""
        return self.model_dump(by_alias=True, mode="json")


# ============================================================================
# Record validation
# ============================================================================

def ensure_valid_record(record: Union[TelemetryRecord, Mapping[str, Any]]) -> TelemetryRecord:
    """
    Coerce and check a record before scoring.

    Mappings are validated into a TelemetryRecord. Records built without
    validation (model_construct) are checked field by field.

    Raises:
        InvalidRecord: If any field is missing or any numeric field is non-finite
    """
    if not isinstance(record, TelemetryRecord):
        return TelemetryRecord.from_mapping(record)

    missing = []
    non_finite = []
    for name, field in TelemetryRecord.model_fields.items():
        if name not in record.__dict__:
            missing.append(field.alias)
            continue
        if field.annotation is float:
            value = record.__dict__[name]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                non_finite.append(field.alias)

    if missing or non_finite:
        raise InvalidRecord(
            f"Invalid telemetry record: missing={missing} non_finite={non_finite}",
            fields=missing + non_finite,
        )
    return record


# ============================================================================
# Fault Scorer
# ============================================================================

class FaultScorer:
    """
    Scores telemetry into a Verdict.

    Deterministic given a seeded random source and a fixed clock:
    same record + same rng state = same Verdict.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rules: Tuple[FaultRule, ...] = FAULT_RULES,
    ):
        """
        Initialize scorer.

        Args:
            rng: Random source for probability/confidence/residual noise
            clock: Returns the verdict timestamp (UTC)
            rules: Threshold rules to apply
        """
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock or _utc_now
        self.rules = rules

    def evaluate_rules(self, record: TelemetryRecord) -> List[RuleOutcome]:
        """Evaluate every rule independently, in table order."""
        return [RuleOutcome(rule=rule, fired=rule.applies(record)) for rule in self.rules]

    def compute_fault_score(self, outcomes: List[RuleOutcome]) -> float:
        """
        Sum the weights of fired rules.

        Returns:
            Deterministic fault score in [0, sum of weights]
        """
        total = sum(outcome.rule.weight for outcome in outcomes if outcome.fired)
        return round(total, SCORE_PRECISION)

    def classify(self, fault_score: float) -> FaultLabel:
        """
        Classify a fault score.

        Uses EXPLICIT NAMED CONSTANTS; exactly 0.6 is a warning and
        exactly 0.3 is normal.
        """
        if fault_score > THRESHOLD_FAULT:
            return FaultLabel.FAULT
        elif fault_score > THRESHOLD_WARNING:
            return FaultLabel.WARNING
        else:
            return FaultLabel.NORMAL

    def collect_components(self, outcomes: List[RuleOutcome]) -> List[str]:
        """Affected components of fired rules, first-seen order, no duplicates."""
        components: Dict[str, None] = {}
        for outcome in outcomes:
            if outcome.fired:
                for component in outcome.rule.components:
                    components.setdefault(component, None)
        return list(components)

    def compute_attribution(self, outcomes: List[RuleOutcome]) -> Dict[str, float]:
        """
        Signed per-parameter contribution (SHAP-like, not true Shapley).

        Positive = pushes toward fault. Rule parameters get a fixed value by
        outcome; residual parameters get symmetric noise.
        """
        attribution = {outcome.rule.parameter: outcome.attribution for outcome in outcomes}
        for parameter, bound in RESIDUAL_ATTRIBUTION.items():
            attribution[parameter] = self._rng.random() * 2 * bound - bound
        return attribution

    def fault_score(self, record: Union[TelemetryRecord, Mapping[str, Any]]) -> float:
        """Deterministic rule sum for a record."""
        return self.compute_fault_score(self.evaluate_rules(ensure_valid_record(record)))

    def score(self, record: Union[TelemetryRecord, Mapping[str, Any]]) -> Verdict:
        """
        Generate the complete verdict for a record.

        Args:
            record: TelemetryRecord or mapping with every field present

        Returns:
            Verdict with label, probability, confidence, attribution, components

        Raises:
            InvalidRecord: If a field is missing or non-finite
        """
        record = ensure_valid_record(record)
        outcomes = self.evaluate_rules(record)

        fault_score = self.compute_fault_score(outcomes)
        label = self.classify(fault_score)

        # Draw order is fixed: residual attribution, probability, confidence
        attribution = self.compute_attribution(outcomes)
        probability = min(fault_score + self._rng.random() * PROBABILITY_NOISE, 1.0)
        confidence = CONFIDENCE_MIN + self._rng.random() * CONFIDENCE_SPAN

        return Verdict(
            label=label,
            probability=probability,
            confidence=confidence,
            attribution=attribution,
            affected_components=self.collect_components(outcomes),
            timestamp=self._clock(),
        )


def score(
    record: Union[TelemetryRecord, Mapping[str, Any]],
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Verdict:
    """Score a single record with a throwaway scorer."""
    return FaultScorer(rng=rng, clock=clock).score(record)
