"""
Telemetry Configuration — Constants, Parameter Catalog and Presets

Defines the turbine operating point the dashboard starts from, the slider
catalog for every parameter, the bounded perturbations applied by the
real-time simulator, and the preset scenarios offered for quick loading.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


# =============================================================================
# PARAMETER GROUPS
# =============================================================================

GROUP_ELECTRICAL = "electrical"
GROUP_ENVIRONMENTAL = "environmental"
GROUP_PERFORMANCE = "performance"
GROUP_CONTROL = "control"
GROUP_HEALTH = "health"
GROUP_STRUCTURAL = "structural"


@dataclass(frozen=True)
class ParameterSpec:
    """Display and range metadata for a single telemetry parameter."""
    name: str                   # Wire/CSV name (camelCase)
    label: str                  # Human-readable label
    group: str
    unit: str = ""
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    step: Optional[float] = None
    options: Tuple[str, ...] = ()  # Only for categorical parameters

    @property
    def is_categorical(self) -> bool:
        return bool(self.options)


# Declaration order here is the canonical field order (CSV header order)
PARAMETER_CATALOG: Tuple[ParameterSpec, ...] = (
    # Electrical
    ParameterSpec("generatorPower", "Generator Power", GROUP_ELECTRICAL, "kW", 0, 5000, 10),
    ParameterSpec("voltage", "Voltage", GROUP_ELECTRICAL, "V", 0, 1000, 1),
    ParameterSpec("current", "Current", GROUP_ELECTRICAL, "A", 0, 3000, 1),
    ParameterSpec("frequency", "Frequency", GROUP_ELECTRICAL, "Hz", 45, 65, 0.1),
    ParameterSpec("powerFactor", "Power Factor", GROUP_ELECTRICAL, "", 0, 1, 0.01),
    # Wind & environmental
    ParameterSpec("windSpeed", "Wind Speed", GROUP_ENVIRONMENTAL, "m/s", 0, 30, 0.1),
    ParameterSpec("windDirection", "Wind Direction", GROUP_ENVIRONMENTAL, "°", 0, 360, 1),
    ParameterSpec("turbulenceIntensity", "Turbulence Intensity", GROUP_ENVIRONMENTAL, "%", 0, 50, 1),
    ParameterSpec("airDensity", "Air Density", GROUP_ENVIRONMENTAL, "kg/m³", 1.0, 1.4, 0.01),
    ParameterSpec("temperature", "Temperature", GROUP_ENVIRONMENTAL, "°C", -30, 50, 1),
    ParameterSpec("pressure", "Pressure", GROUP_ENVIRONMENTAL, "hPa", 950, 1050, 1),
    ParameterSpec("humidity", "Humidity", GROUP_ENVIRONMENTAL, "%", 0, 100, 1),
    # Performance
    ParameterSpec("tipSpeedRatio", "Tip Speed Ratio", GROUP_PERFORMANCE, "", 0, 15, 0.1),
    ParameterSpec("coefficientPerformance", "Coefficient of Performance", GROUP_PERFORMANCE, "", 0, 0.6, 0.01),
    ParameterSpec("powerCurve", "Power Curve", GROUP_PERFORMANCE, "%", 0, 100, 1),
    ParameterSpec("capacityFactor", "Capacity Factor", GROUP_PERFORMANCE, "%", 0, 100, 1),
    # Control
    ParameterSpec("cutInWindSpeed", "Cut-in Wind Speed", GROUP_CONTROL, "m/s", 0, 10, 0.1),
    ParameterSpec("ratedWindSpeed", "Rated Wind Speed", GROUP_CONTROL, "m/s", 5, 25, 0.1),
    ParameterSpec("cutOutWindSpeed", "Cut-out Wind Speed", GROUP_CONTROL, "m/s", 15, 35, 0.1),
    ParameterSpec(
        "brakingSystemType", "Braking System", GROUP_CONTROL,
        options=("aerodynamic", "mechanical", "hydraulic", "electromagnetic"),
    ),
    # Health monitoring
    ParameterSpec("vibrationLevels", "Vibration Levels", GROUP_HEALTH, "mm/s", 0, 100, 1),
    ParameterSpec("componentTemperatures", "Component Temperatures", GROUP_HEALTH, "°C", 0, 150, 1),
    ParameterSpec("gearboxOilCondition", "Gearbox Oil Condition", GROUP_HEALTH, "%", 0, 100, 1),
    ParameterSpec("noiseLevels", "Noise Levels", GROUP_HEALTH, "dB", 0, 120, 1),
    # Structural
    ParameterSpec(
        "towerType", "Tower Type", GROUP_STRUCTURAL,
        options=("tubular", "lattice", "concrete", "hybrid"),
    ),
    ParameterSpec("materialProperties", "Material Properties", GROUP_STRUCTURAL, "%", 0, 100, 1),
    ParameterSpec(
        "foundationType", "Foundation Type", GROUP_STRUCTURAL,
        options=("gravity", "pile", "rock_anchor", "mat"),
    ),
)

PARAMETER_NAMES: Tuple[str, ...] = tuple(spec.name for spec in PARAMETER_CATALOG)

PARAMETERS_BY_NAME: Dict[str, ParameterSpec] = {spec.name: spec for spec in PARAMETER_CATALOG}


# =============================================================================
# DEFAULT OPERATING POINT (2.5 MW class turbine)
# =============================================================================

DEFAULT_PARAMETERS: Dict[str, object] = {
    "generatorPower": 2500.0,
    "voltage": 690.0,
    "current": 2100.0,
    "frequency": 50.0,
    "powerFactor": 0.95,
    "windSpeed": 12.5,
    "windDirection": 180.0,
    "turbulenceIntensity": 15.0,
    "airDensity": 1.225,
    "temperature": 20.0,
    "pressure": 1013.0,
    "humidity": 65.0,
    "tipSpeedRatio": 7.5,
    "coefficientPerformance": 0.45,
    "powerCurve": 85.0,
    "capacityFactor": 35.0,
    "cutInWindSpeed": 3.5,
    "ratedWindSpeed": 12.0,
    "cutOutWindSpeed": 25.0,
    "brakingSystemType": "aerodynamic",
    "vibrationLevels": 25.0,
    "componentTemperatures": 65.0,
    "gearboxOilCondition": 85.0,
    "noiseLevels": 45.0,
    "towerType": "tubular",
    "materialProperties": 95.0,
    "foundationType": "gravity",
}

# Rotor geometry used for the rotation speed readout
ROTOR_DIAMETER_M: float = 126.0


# =============================================================================
# REAL-TIME PERTURBATION BOUNDS
# =============================================================================

WIND_SPEED_JITTER: float = 1.0            # ± m/s per tick
COMPONENT_TEMP_JITTER: float = 2.5        # ± °C per tick
VIBRATION_JITTER: float = 5.0             # ± mm/s per tick
POWER_PER_WIND_SPEED: float = 150.0       # kW per m/s (generatorPower is recomputed)
GENERATOR_POWER_JITTER: float = 100.0     # ± kW around the wind-derived power
POWER_FACTOR_JITTER: float = 0.05
POWER_FACTOR_BOUNDS: Tuple[float, float] = (0.5, 1.0)
FREQUENCY_JITTER: float = 0.5
FREQUENCY_BOUNDS: Tuple[float, float] = (45.0, 65.0)

DEFAULT_SAMPLE_INTERVAL_S: float = 3.0


# =============================================================================
# PRESET SCENARIOS
# =============================================================================

@dataclass(frozen=True)
class Scenario:
    """A named operating condition used to seed the dashboard."""
    name: str
    wind_speed: float
    generator_power: float
    vibration_levels: float
    component_temperatures: float
    power_factor: float
    frequency: float


SCENARIOS: Tuple[Scenario, ...] = (
    Scenario("Normal Operation", 12, 1800, 25, 65, 0.95, 50),
    Scenario("High Vibration Warning", 15, 2200, 75, 85, 0.88, 49.5),
    Scenario("Overheating Fault", 8, 1200, 45, 125, 0.75, 48.2),
    Scenario("Low Wind Speed", 3, 200, 15, 45, 0.92, 50.2),
    Scenario("High Wind Speed", 25, 3500, 85, 95, 0.85, 51.1),
)

# Nominal grid voltage and rated power used to derive scenario fields
SCENARIO_VOLTAGE_V: float = 690.0
SCENARIO_RATED_POWER_KW: float = 5000.0
