"""
Tests for the environmental suitability engine.
"""

import math

from canopy.config import PlantConfig, SuitabilityConfig
from canopy.core.models import ChunkEnvironmentSnapshot, Plant, Season
from canopy.simulation.suitability import (
    GrowthPreferences,
    SuitabilityState,
    calculate_suitability,
    classify,
    preference_factor,
    resolve_preferences,
    suitability_for_part,
    temperature_factor,
)


def ideal_chunk(**overrides):
    values = dict(moisture=50, light_level=50, temperature=25, wind_level=0)
    values.update(overrides)
    return ChunkEnvironmentSnapshot(**values)


class TestFactors:
    """Individual factor curves."""

    def test_preference_match(self):
        assert preference_factor(0.4, 0.4, 0.25) == 1.0

    def test_preference_opposite(self):
        assert abs(preference_factor(0.0, 1.0, 0.25) - 0.25) < 1e-12

    def test_temperature_inside_range(self):
        assert temperature_factor(25, (0, 50)) == 1.0

    def test_temperature_near_edge(self):
        assert temperature_factor(2, (0, 50)) == 0.75
        assert temperature_factor(48, (0, 50)) == 0.75

    def test_temperature_outside_decays(self):
        """Ten degrees out costs a factor of e."""
        assert abs(temperature_factor(-10, (0, 50)) - 0.75 * math.exp(-1)) < 1e-12

    def test_temperature_far_outside_floors(self):
        assert temperature_factor(-200, (0, 50)) == 0.05

    def test_reversed_range_accepted(self):
        assert temperature_factor(25, (50, 0)) == 1.0


class TestCalculateSuitability:
    """Blended multiplier and classification."""

    def test_ideal_conditions(self):
        result = calculate_suitability(ideal_chunk())
        assert result.multiplier == 1.0
        assert result.state == SuitabilityState.SUITABLE
        assert result.limiting_factor is None

    def test_mild_summer(self, summer_chunk):
        """Neutral preferences in a bright, damp summer chunk."""
        result = calculate_suitability(summer_chunk)
        assert abs(result.multiplier - 0.85 * 0.775 * 1.1 * 0.95) < 1e-9
        assert result.state == SuitabilityState.SUITABLE
        assert result.limiting_factor == "light"

    def test_hostile_conditions_floor(self):
        """Everything wrong clamps to the floor and reports temperature."""
        chunk = ideal_chunk(moisture=0, light_level=0, temperature=-150, human_presence=100)
        prefs = GrowthPreferences(water_preference=1.0, light_preference=1.0, temperature_range=(10, 30))
        result = calculate_suitability(chunk, prefs, Season.WINTER)
        assert result.multiplier == 0.05
        assert result.state == SuitabilityState.UNSUITABLE
        assert result.limiting_factor == "temperature"

    def test_ceiling(self):
        config = PlantConfig(suitability=SuitabilityConfig(season_multipliers={Season.SPRING: 3.0}))
        result = calculate_suitability(ideal_chunk(), season=Season.SPRING, config=config)
        assert result.multiplier == 1.5

    def test_season_from_chunk(self):
        result = calculate_suitability(ideal_chunk(season=Season.AUTUMN))
        assert abs(result.multiplier - 0.9) < 1e-12
        assert result.limiting_factor == "season"

    def test_human_presence_penalty(self):
        result = calculate_suitability(ideal_chunk(human_presence=100))
        assert abs(result.multiplier - 0.5) < 1e-12
        assert result.state == SuitabilityState.UNFAVORABLE

    def test_malformed_values_are_neutral(self):
        """NaN and infinite readings fall back to neutral instead of raising."""
        result = calculate_suitability(ideal_chunk(moisture=math.nan, light_level=math.inf))
        assert math.isfinite(result.multiplier)
        assert result.factors["moisture"] == 1.0
        assert result.factors["light"] == 1.0

    def test_monotonic_in_moisture_distance(self):
        prefs = GrowthPreferences(water_preference=0.8)
        values = [calculate_suitability(ideal_chunk(moisture=m), prefs).multiplier for m in (80, 60, 40, 20)]
        assert values == sorted(values, reverse=True)


class TestClassify:
    """Band edges."""

    def test_bands(self):
        assert classify(0.6) == SuitabilityState.SUITABLE
        assert classify(0.59) == SuitabilityState.UNFAVORABLE
        assert classify(0.25) == SuitabilityState.UNFAVORABLE
        assert classify(0.2499) == SuitabilityState.UNSUITABLE


class TestPreferenceResolution:
    """Part overrides and plant defaults."""

    def test_part_overrides_plant(self):
        plant = Plant.from_dict({
            "id": "fern",
            "name": "Fern",
            "plantProperties": {
                "waterPreference": 0.9,
                "lightPreference": 0.2,
                "temperatureRange": [5, 25],
                "parts": [
                    {"name": "fronds", "maxQty": 4, "lightPreference": 0.6},
                ],
            },
        })
        prefs = resolve_preferences(plant, plant.part("fronds"))
        assert prefs.water_preference == 0.9
        assert prefs.light_preference == 0.6
        assert prefs.temperature_range == (5, 25)

    def test_neutral_defaults(self):
        assert resolve_preferences() == GrowthPreferences()

    def test_suitability_for_part_lookup(self, make_tree):
        """Parts can be addressed by name or index; the clock picks the season."""
        plant = make_tree()
        by_name = suitability_for_part(ideal_chunk(), plant, "leaves", game_time=250)
        by_index = suitability_for_part(ideal_chunk(), plant, 0, game_time=250)
        assert by_name == by_index
        assert by_name.factors["season"] == 1.1

    def test_suitability_for_plant_defaults(self, make_tree):
        result = suitability_for_part(ideal_chunk(season=Season.SPRING), make_tree())
        assert abs(result.multiplier - 1.3) < 1e-12
