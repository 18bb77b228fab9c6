"""
Unit Tests — Telemetry Record & Live Feed Simulator

Tests verify:
1. Records require every field and reject non-finite values
2. Perturbations stay within their bounds and clamps
3. generatorPower follows the NEW wind speed
4. Output is deterministic with fixed seeds
5. Preset scenarios produce complete records
"""

import random

import pytest

from windsight.telemetry import (
    DEFAULT_PARAMETERS,
    PARAMETER_NAMES,
    SCENARIOS,
    InvalidRecord,
    TelemetryRecord,
    TelemetrySimulator,
    default_record,
    perturb_record,
    rotation_speed,
    scenario_records,
)


# Fields the live feed moves; everything else must carry over unchanged
PERTURBED = {"wind_speed", "component_temperatures", "vibration_levels", "generator_power", "power_factor", "frequency"}


class TestTelemetryRecord:
    """Test record validation."""

    def test_default_record_matches_defaults(self):
        assert default_record().to_wire() == DEFAULT_PARAMETERS

    def test_wire_order_is_canonical(self):
        assert list(default_record().to_wire()) == list(PARAMETER_NAMES)

    def test_accepts_attribute_names(self):
        data = dict(default_record())
        assert TelemetryRecord.from_mapping(data) == default_record()

    def test_missing_field_rejected(self):
        data = dict(DEFAULT_PARAMETERS)
        del data["frequency"]

        with pytest.raises(InvalidRecord) as exc_info:
            TelemetryRecord.from_mapping(data)
        assert exc_info.value.fields == ["frequency"]

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "fast"])
    def test_non_finite_rejected(self, value):
        data = dict(DEFAULT_PARAMETERS, windSpeed=value)
        with pytest.raises(InvalidRecord):
            TelemetryRecord.from_mapping(data)

    def test_unknown_enum_rejected(self):
        with pytest.raises(InvalidRecord):
            TelemetryRecord.from_mapping(dict(DEFAULT_PARAMETERS, towerType="wooden"))

    def test_with_updates_returns_new_record(self):
        record = default_record()
        updated = record.with_updates({"windSpeed": 20, "vibration_levels": 40})

        assert updated.wind_speed == 20
        assert updated.vibration_levels == 40
        assert record.wind_speed == 12.5

    def test_with_updates_rejects_unknown_field(self):
        with pytest.raises(InvalidRecord) as exc_info:
            default_record().with_updates({"rotorSpeed": 10})
        assert exc_info.value.fields == ["rotorSpeed"]

    def test_rotation_speed(self):
        """TSR 7.5, wind 12.5 m/s, radius 63 m."""
        assert rotation_speed(default_record()) == pytest.approx(7.5 * 12.5 / 63)


class TestPerturbation:
    """Test bounded random walk."""

    def test_only_live_fields_change(self):
        record = default_record()
        new = perturb_record(record, random.Random(1))

        for name in type(record).model_fields:
            if name not in PERTURBED:
                assert getattr(new, name) == getattr(record, name)

    def test_input_untouched(self):
        record = default_record()
        perturb_record(record, random.Random(1))
        assert record == default_record()

    def test_step_bounds(self):
        rng = random.Random(2)
        record = default_record()
        for _ in range(200):
            new = perturb_record(record, rng)
            assert abs(new.wind_speed - record.wind_speed) <= 1.0
            assert abs(new.component_temperatures - record.component_temperatures) <= 2.5
            assert abs(new.vibration_levels - record.vibration_levels) <= 5.0
            assert 0.5 <= new.power_factor <= 1.0
            assert 45 <= new.frequency <= 65
            record = new

    def test_generator_power_follows_new_wind_speed(self):
        rng = random.Random(3)
        record = default_record()
        for _ in range(100):
            record = perturb_record(record, rng)
            expected = record.wind_speed * 150
            assert max(0.0, expected - 100) <= record.generator_power <= expected + 100

    def test_floors_at_zero(self):
        record = default_record().with_updates({
            "windSpeed": 0, "vibrationLevels": 0, "componentTemperatures": 0,
        })
        rng = random.Random(4)
        for _ in range(50):
            record = perturb_record(record, rng)
            assert record.wind_speed >= 0
            assert record.vibration_levels >= 0
            assert record.component_temperatures >= 0
            assert record.generator_power >= 0

    def test_clamps_power_factor_at_upper_bound(self):
        record = default_record().with_updates({"powerFactor": 1.0})
        rng = random.Random(5)
        for _ in range(50):
            assert perturb_record(record, rng).power_factor <= 1.0


class TestDeterminism:
    """Fixed seeds give identical feeds."""

    def test_same_seed_same_feed(self):
        first = list(TelemetrySimulator(seed=42).generate(20))
        second = list(TelemetrySimulator(seed=42).generate(20))
        assert first == second

    def test_different_seeds_differ(self):
        first = list(TelemetrySimulator(seed=1).generate(5))
        second = list(TelemetrySimulator(seed=2).generate(5))
        assert first != second

    def test_reset_replays(self):
        simulator = TelemetrySimulator(seed=42)
        first = list(simulator.generate(5))
        simulator.reset()
        assert list(simulator.generate(5)) == first

    def test_step_tracks_current_record(self):
        simulator = TelemetrySimulator(seed=42)
        record = simulator.step()
        assert simulator.record == record


class TestScenarios:
    """Preset scenarios."""

    def test_one_record_per_scenario(self):
        records = scenario_records(seed=7)
        assert len(records) == len(SCENARIOS) == 5

    def test_pinned_fields(self):
        for scenario, record in zip(SCENARIOS, scenario_records(seed=7)):
            assert record.wind_speed == scenario.wind_speed
            assert record.generator_power == scenario.generator_power
            assert record.vibration_levels == scenario.vibration_levels
            assert record.component_temperatures == scenario.component_temperatures
            assert record.power_factor == scenario.power_factor
            assert record.frequency == scenario.frequency

    def test_seeded_scenarios_are_stable(self):
        assert scenario_records(seed=7) == scenario_records(seed=7)
