"""
Telemetry Simulator — Live Feed for the Real-Time Dashboard

Derives each new telemetry snapshot from the previous one by applying
independent bounded perturbations. Only the fields a live feed would move
are touched; everything else carries over unchanged.

CRITICAL: This is a SIMULATOR. It does NOT claim to have real sensors attached.
"""

import random
from typing import Iterator, List, Optional

from .config import (
    COMPONENT_TEMP_JITTER,
    DEFAULT_PARAMETERS,
    FREQUENCY_BOUNDS,
    FREQUENCY_JITTER,
    GENERATOR_POWER_JITTER,
    POWER_FACTOR_BOUNDS,
    POWER_FACTOR_JITTER,
    POWER_PER_WIND_SPEED,
    ROTOR_DIAMETER_M,
    SCENARIO_RATED_POWER_KW,
    SCENARIO_VOLTAGE_V,
    SCENARIOS,
    VIBRATION_JITTER,
    WIND_SPEED_JITTER,
    Scenario,
)
from .schemas import BrakingSystemType, FoundationType, TelemetryRecord, TowerType


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def default_record() -> TelemetryRecord:
    """The operating point the dashboard starts from."""
    return TelemetryRecord.from_mapping(DEFAULT_PARAMETERS)


def perturb_record(record: TelemetryRecord, rng: random.Random) -> TelemetryRecord:
    """
    Derive the next telemetry snapshot from the current one.
    
    - windSpeed, componentTemperatures, vibrationLevels: random walk, floored at 0
    - generatorPower: recomputed from the NEW wind speed (not incremented)
    - powerFactor: random walk clamped to [0.5, 1]
    - frequency: random walk clamped to [45, 65]
    
    Args:
        record: Current telemetry
        rng: Random source (seed it for deterministic feeds)
        
    Returns:
        A new TelemetryRecord; the input is left untouched
    """
    wind_speed = max(0.0, record.wind_speed + rng.uniform(-WIND_SPEED_JITTER, WIND_SPEED_JITTER))
    component_temperatures = max(
        0.0,
        record.component_temperatures + rng.uniform(-COMPONENT_TEMP_JITTER, COMPONENT_TEMP_JITTER),
    )
    vibration_levels = max(
        0.0,
        record.vibration_levels + rng.uniform(-VIBRATION_JITTER, VIBRATION_JITTER),
    )
    generator_power = max(
        0.0,
        wind_speed * POWER_PER_WIND_SPEED
        + rng.uniform(-GENERATOR_POWER_JITTER, GENERATOR_POWER_JITTER),
    )
    power_factor = _clamp(
        record.power_factor + rng.uniform(-POWER_FACTOR_JITTER, POWER_FACTOR_JITTER),
        *POWER_FACTOR_BOUNDS,
    )
    frequency = _clamp(
        record.frequency + rng.uniform(-FREQUENCY_JITTER, FREQUENCY_JITTER),
        *FREQUENCY_BOUNDS,
    )

    return record.model_copy(update={
        "wind_speed": wind_speed,
        "component_temperatures": component_temperatures,
        "vibration_levels": vibration_levels,
        "generator_power": generator_power,
        "power_factor": power_factor,
        "frequency": frequency,
    })


def rotation_speed(record: TelemetryRecord) -> float:
    """
    Rotor angular speed in rad/s.
    
    Formula: ω = (TSR × wind speed) / rotor radius
    """
    rotor_radius = ROTOR_DIAMETER_M / 2
    return record.tip_speed_ratio * record.wind_speed / rotor_radius


def scenario_record(scenario: Scenario, rng: random.Random) -> TelemetryRecord:
    """
    Build a full record for a preset scenario.
    
    Fields the scenario does not pin are jittered around plausible values.
    """
    return TelemetryRecord(
        generator_power=scenario.generator_power,
        voltage=SCENARIO_VOLTAGE_V,
        current=scenario.generator_power / SCENARIO_VOLTAGE_V * 1.5,
        frequency=scenario.frequency,
        power_factor=scenario.power_factor,
        wind_speed=scenario.wind_speed,
        wind_direction=180 + rng.uniform(-20, 20),
        turbulence_intensity=10 + rng.uniform(0, 10),
        air_density=1.225,
        temperature=20 + rng.uniform(0, 10),
        pressure=1013,
        humidity=60 + rng.uniform(0, 20),
        tip_speed_ratio=7.5,
        coefficient_performance=0.45,
        power_curve=85,
        capacity_factor=scenario.generator_power / SCENARIO_RATED_POWER_KW * 100,
        cut_in_wind_speed=3,
        rated_wind_speed=12,
        cut_out_wind_speed=25,
        braking_system_type=BrakingSystemType.AERODYNAMIC,
        vibration_levels=scenario.vibration_levels,
        component_temperatures=scenario.component_temperatures,
        gearbox_oil_condition=85 - rng.uniform(0, 20),
        noise_levels=65 + rng.uniform(0, 10),
        tower_type=TowerType.TUBULAR,
        material_properties=95,
        foundation_type=FoundationType.GRAVITY,
    )


def scenario_records(seed: Optional[int] = None) -> List[TelemetryRecord]:
    """Build a record for every preset scenario, in catalog order."""
    rng = random.Random(seed)
    return [scenario_record(scenario, rng) for scenario in SCENARIOS]


class TelemetrySimulator:
    """
    Stateful live-feed simulator.
    
    Usage:
        simulator = TelemetrySimulator(seed=42)
        for record in simulator.generate(count=10):
            print(record.wind_speed)
    """

    def __init__(
        self,
        record: Optional[TelemetryRecord] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the simulator.
        
        Args:
            record: Starting telemetry (defaults to the dashboard operating point)
            seed: Random seed for deterministic output (None for random)
            rng: Explicit random source; takes precedence over seed
        """
        self.seed = seed
        self._rng = rng or random.Random(seed)
        self._initial = record or default_record()
        self._record = self._initial

    @property
    def record(self) -> TelemetryRecord:
        """Current telemetry snapshot."""
        return self._record

    def set_record(self, record: TelemetryRecord) -> None:
        """Replace the current snapshot (operator edits)."""
        self._record = record

    def step(self) -> TelemetryRecord:
        """Advance the feed by one tick and return the new snapshot."""
        self._record = perturb_record(self._record, self._rng)
        return self._record

    def generate(self, count: int) -> Iterator[TelemetryRecord]:
        """
        Generate multiple consecutive snapshots.
        
        Yields:
            TelemetryRecord instances
        """
        for _ in range(count):
            yield self.step()

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the simulator to its starting record.
        
        Args:
            seed: New random seed (uses original if None)
        """
        if seed is not None:
            self.seed = seed
        self._rng = random.Random(self.seed)
        self._record = self._initial
