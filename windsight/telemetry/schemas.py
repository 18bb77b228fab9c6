"""
Telemetry Record Schema — Pydantic Models

One snapshot of every turbine operating parameter. Python attributes are
snake_case; the wire/CSV names are the camelCase parameter names, and both
spellings are accepted on input.

Constraints:
- Every field is required (no silent defaults)
- Numeric fields must be finite (NaN/inf rejected)
- Categorical fields are closed enums
- Records are immutable; updates produce a new validated record
"""

from enum import Enum
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel


class InvalidRecord(ValueError):
    """Raised when a telemetry record is missing fields or holds non-finite values."""

    def __init__(self, message: str, fields: List[str] = None):
        super().__init__(message)
        self.fields = fields or []


class BrakingSystemType(str, Enum):
    """Braking systems offered by the control panel."""
    AERODYNAMIC = "aerodynamic"
    MECHANICAL = "mechanical"
    HYDRAULIC = "hydraulic"
    ELECTROMAGNETIC = "electromagnetic"


class TowerType(str, Enum):
    """Tower construction types."""
    TUBULAR = "tubular"
    LATTICE = "lattice"
    CONCRETE = "concrete"
    HYBRID = "hybrid"


class FoundationType(str, Enum):
    """Foundation types."""
    GRAVITY = "gravity"
    PILE = "pile"
    ROCK_ANCHOR = "rock_anchor"
    MAT = "mat"


class TelemetryRecord(BaseModel):
    """
    Telemetry Record — all turbine parameters at one point in time.
    
    Field order is the canonical parameter order (CSV header order).
    The categorical fields are presentation-only: no scoring rule reads them.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        frozen=True,
        extra="ignore",
    )

    # === Electrical ===
    generator_power: float = Field(..., description="Generator output in kW")
    voltage: float = Field(..., description="Voltage in V")
    current: float = Field(..., description="Current in A")
    frequency: float = Field(..., description="Grid frequency in Hz")
    power_factor: float = Field(..., description="Power factor (0.0-1.0)")

    # === Wind & Environmental ===
    wind_speed: float = Field(..., description="Wind speed in m/s")
    wind_direction: float = Field(..., description="Wind direction in degrees")
    turbulence_intensity: float = Field(..., description="Turbulence intensity in %")
    air_density: float = Field(..., description="Air density in kg/m³")
    temperature: float = Field(..., description="Ambient temperature in °C")
    pressure: float = Field(..., description="Ambient pressure in hPa")
    humidity: float = Field(..., description="Relative humidity in %")

    # === Performance ===
    tip_speed_ratio: float
    coefficient_performance: float
    power_curve: float = Field(..., description="Power curve adherence in %")
    capacity_factor: float = Field(..., description="Capacity factor in %")

    # === Control ===
    cut_in_wind_speed: float
    rated_wind_speed: float
    cut_out_wind_speed: float
    braking_system_type: BrakingSystemType

    # === Health Monitoring ===
    vibration_levels: float = Field(..., description="Vibration in mm/s")
    component_temperatures: float = Field(..., description="Component temperature in °C")
    gearbox_oil_condition: float = Field(..., description="Oil condition in %")
    noise_levels: float = Field(..., description="Noise in dB")

    # === Structural ===
    tower_type: TowerType
    material_properties: float = Field(..., description="Material integrity in %")
    foundation_type: FoundationType

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TelemetryRecord":
        """
        Validate a mapping (wire or attribute names) into a record.
        
        Raises:
            InvalidRecord: If any field is missing, non-numeric or non-finite
        """
        if isinstance(data, cls):
            return data
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise InvalidRecord(
                f"Invalid telemetry record: {', '.join(fields) or 'unknown field'}",
                fields=fields,
            ) from e

    @classmethod
    def wire_name(cls, name: str) -> str:
        """Map an attribute or wire name to its wire (camelCase) name."""
        field = cls.model_fields.get(name)
        if field is not None:
            return field.alias
        return name

    def to_wire(self) -> Dict[str, Any]:
        """Dump to a JSON-ready dict keyed by wire names."""
        return self.model_dump(by_alias=True, mode="json")

    def with_updates(self, changes: Mapping[str, Any]) -> "TelemetryRecord":
        """
        Return a new validated record with the given fields replaced.
        
        Args:
            changes: Field values keyed by wire or attribute name
            
        Raises:
            InvalidRecord: On unknown fields or invalid values
        """
        wire_names = {field.alias for field in type(self).model_fields.values()}
        updated = self.to_wire()
        unknown = []
        for key, value in changes.items():
            name = self.wire_name(key)
            if name not in wire_names:
                unknown.append(key)
                continue
            updated[name] = value
        if unknown:
            raise InvalidRecord(
                f"Unknown telemetry fields: {', '.join(sorted(unknown))}",
                fields=sorted(unknown),
            )
        return self.from_mapping(updated)
