"""
Telemetry Module — Turbine Telemetry Record & Live Feed Simulator

Public API:
- TelemetryRecord: One snapshot of every turbine parameter
- InvalidRecord: Missing or non-finite field
- TelemetrySimulator / perturb_record: Bounded live-feed perturbation
- Parameter catalog, defaults and preset scenarios
- CSV import/export helpers
"""

from .config import (
    DEFAULT_PARAMETERS,
    PARAMETER_CATALOG,
    PARAMETER_NAMES,
    SCENARIOS,
    ParameterSpec,
    Scenario,
)
from .csv_io import (
    CsvFormatError,
    load_records_from_csv,
    parse_telemetry_csv,
    records_to_csv,
)
from .schemas import (
    BrakingSystemType,
    FoundationType,
    InvalidRecord,
    TelemetryRecord,
    TowerType,
)
from .simulator import (
    TelemetrySimulator,
    default_record,
    perturb_record,
    rotation_speed,
    scenario_records,
)

__all__ = [
    "DEFAULT_PARAMETERS",
    "PARAMETER_CATALOG",
    "PARAMETER_NAMES",
    "SCENARIOS",
    "ParameterSpec",
    "Scenario",
    "CsvFormatError",
    "load_records_from_csv",
    "parse_telemetry_csv",
    "records_to_csv",
    "BrakingSystemType",
    "FoundationType",
    "InvalidRecord",
    "TelemetryRecord",
    "TowerType",
    "TelemetrySimulator",
    "default_record",
    "perturb_record",
    "rotation_speed",
    "scenario_records",
]
