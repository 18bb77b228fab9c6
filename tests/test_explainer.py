"""
Explainability Engine Tests

Tests verify:
- Ranking by |attribution|, top 8 only
- Impact buckets and risk direction
- Fixed recommendation rules with observed values
- Fault locations follow affected components
"""

import random
from datetime import datetime, timezone

import pytest

from windsight.rules import ExplanationGenerator, FaultScorer, MAX_CONTRIBUTIONS, Verdict, impact_level
from windsight.rules.explainer import format_value, recommend
from windsight.telemetry import default_record


def scored(**changes):
    record = default_record().with_updates(changes)
    scorer = FaultScorer(rng=random.Random(1), clock=lambda: datetime(2024, 1, 1, tzinfo=timezone.utc))
    return scorer.score(record), record


class TestRanking:
    """Test contribution ranking."""

    def test_sorted_by_absolute_attribution(self):
        verdict, record = scored(vibrationLevels=80, componentTemperatures=95)
        contributions = ExplanationGenerator().contributions(verdict, record)

        magnitudes = [abs(c.attribution) for c in contributions]
        assert magnitudes == sorted(magnitudes, reverse=True)
        assert contributions[0].parameter == "vibrationLevels"
        assert contributions[1].parameter == "componentTemperatures"

    def test_top_n_only(self):
        verdict = Verdict(
            label="normal",
            probability=0.1,
            confidence=0.9,
            attribution={f"p{i}": i / 100 for i in range(12)},
        )
        contributions = ExplanationGenerator().contributions(verdict)

        assert MAX_CONTRIBUTIONS == 8
        assert len(contributions) == 8
        assert contributions[0].parameter == "p11"

    def test_values_come_from_record(self):
        verdict, record = scored(vibrationLevels=75)
        contribution = ExplanationGenerator().contributions(verdict, record)[0]

        assert contribution.value == 75
        assert contribution.formatted_value == "75.0 mm/s"
        assert contribution.display_name == "Vibration Levels"


class TestImpact:
    """Test impact buckets and direction."""

    @pytest.mark.parametrize("attribution, expected", [
        (0.15, "High"),
        (-0.12, "High"),
        (0.1, "Medium"),
        (0.06, "Medium"),
        (0.05, "Low"),
        (-0.01, "Low"),
    ])
    def test_impact_level(self, attribution, expected):
        assert impact_level(attribution) == expected

    def test_direction(self):
        verdict, record = scored(vibrationLevels=80)
        by_parameter = {c.parameter: c for c in ExplanationGenerator().contributions(verdict, record)}

        assert by_parameter["vibrationLevels"].direction == "increases_risk"
        assert by_parameter["componentTemperatures"].direction == "decreases_risk"


class TestRecommendations:
    """Fixed recommendation rules."""

    def test_high_vibration(self):
        assert recommend("vibrationLevels", 75, 0.15) == "Check bearings and perform balancing maintenance"

    def test_low_wind(self):
        assert recommend("windSpeed", 2, 0.1) == "Normal operation - below cut-in wind speed"

    def test_unknown_parameter_uses_default(self):
        assert recommend("noiseLevels", 50, 0.0) == "Monitor parameter within normal operational ranges"

    def test_format_value_categorical(self):
        assert format_value("towerType", "tubular") == "tubular"


class TestExplain:
    """Full explanation payload."""

    def test_payload_keys(self):
        verdict, record = scored(vibrationLevels=80, powerFactor=0.8)
        payload = ExplanationGenerator().explain(verdict, record)

        assert payload["label"] == "warning"
        assert payload["featureImportance"] == verdict.attribution
        assert "3 potentially affected components" in payload["summary"]
        assert payload["contributions"][0]["displayName"] == "Vibration Levels"


class TestFaultLocations:
    """Fault locations follow affected components."""

    def test_locations_use_attribution_as_severity(self):
        verdict, _ = scored(vibrationLevels=80)
        locations = ExplanationGenerator().fault_locations(verdict)

        assert [loc.component for loc in locations] == ["Gearbox", "Bearings"]
        assert all(loc.severity == 0.15 for loc in locations)

    def test_control_system_is_not_located(self):
        verdict, _ = scored(windSpeed=30)
        locations = ExplanationGenerator().fault_locations(verdict)

        assert [loc.component for loc in locations] == ["Rotor"]
        assert locations[0].parameter == "windSpeed"

    def test_normal_verdict_has_no_locations(self):
        verdict, _ = scored()
        assert ExplanationGenerator().fault_locations(verdict) == []

    def test_idle_parameter_uses_default_severity(self):
        verdict, _ = scored(componentTemperatures=95)
        locations = ExplanationGenerator().fault_locations(verdict)

        assert verdict.attribution["powerFactor"] < 0
        severities = {loc.component: loc.severity for loc in locations}
        assert severities == {"Generator": 0.12, "Power Electronics": 0.3}

    def test_missing_attribution_uses_default_severity(self):
        verdict = Verdict(
            label="warning",
            probability=0.7,
            confidence=0.8,
            affected_components=("Gearbox", "Rotor"),
        )
        locations = ExplanationGenerator().fault_locations(verdict)

        assert [loc.severity for loc in locations] == [0.5, 0.4]
        assert all(loc.severity > 0 for loc in locations)
