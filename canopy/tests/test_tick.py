"""
Tests for the plant tick orchestrator.
"""

from dataclasses import replace
import math

import pytest

from canopy.core.errors import PlantDataError
from canopy.core.models import ChunkEnvironmentSnapshot, Plant, PlantProperties, Season
from canopy.simulation.tick import (
    DROP_EVENT,
    GROW_EVENT,
    PLANT_WILTS,
    DroppedItem,
    EnvUpdates,
    NarrativeEvent,
    TickResult,
    adaptive_plant_tick,
    compute_env_updates,
    resolve_event,
)
from canopy.simulation.parts import PartEvent
from canopy.simulation.scheduler import EventProbabilities
from canopy.simulation.suitability import SuitabilityState


def quantities(plant):
    return {p.name: p.current_qty for p in plant.parts}


# =============================================================================
# SCENARIOS
# =============================================================================

class TestTickScenarios:
    """Forced-randomness scenarios on a common tree."""

    def test_leaves_grow_under_favorable_draw(self, make_tree, summer_chunk, fixed_rng):
        """Leaves at 4/5 grow to 5/5 and emit a grow event."""
        plant = make_tree(leaves=4)
        result = adaptive_plant_tick(plant, summer_chunk, rng_seed="s", rng_factory=fixed_rng(leaves=0.01))

        assert quantities(result.new_plant)["leaves"] == 5
        assert NarrativeEvent(GROW_EVENT, {"part": "leaves", "target": "Common Tree"}) in result.narrative_events
        assert result.dropped_items == ()
        assert result.plant_removed is False

    def test_leaves_drop_in_high_wind(self, make_tree, summer_chunk, fixed_rng):
        """High wind and an unfavorable draw strip a leaf and release fallen_leaf."""
        plant = make_tree(leaves=4)
        windy = replace(summer_chunk, wind_level=80)
        result = adaptive_plant_tick(plant, windy, rng_seed="s", rng_factory=fixed_rng(leaves=0.99))

        assert quantities(result.new_plant)["leaves"] == 3
        assert NarrativeEvent(DROP_EVENT, {"part": "leaves", "target": "Common Tree"}) in result.narrative_events
        assert DroppedItem("fallen_leaf", 1, "tree-1") in result.dropped_items

    def test_flowers_grow_once_leaves_mature(self, make_tree, summer_chunk, fixed_rng):
        """Mature leaves unlock flower growth."""
        plant = make_tree(leaves=5, flowers=0)
        result = adaptive_plant_tick(plant, summer_chunk, rng_seed="s", rng_factory=fixed_rng(flowers=0.01))

        assert quantities(result.new_plant)["flowers"] == 1
        assert quantities(result.new_plant)["leaves"] == 5
        assert NarrativeEvent(GROW_EVENT, {"part": "flowers", "target": "Common Tree"}) in result.narrative_events

    def test_flowers_blocked_by_immature_leaves(self, make_tree, summer_chunk, fixed_rng):
        """Flowers stay at zero while leaves are below the maturity threshold."""
        plant = make_tree(leaves=3, flowers=0)
        result = adaptive_plant_tick(plant, summer_chunk, rng_seed="s", rng_factory=fixed_rng(flowers=0.01))

        assert quantities(result.new_plant)["flowers"] == 0
        assert result.narrative_events == ()

    def test_dependent_ignores_same_tick_prerequisite_change(self, make_tree, summer_chunk, fixed_rng):
        """Leaves reaching maturity this tick do not unlock flowers until the next."""
        plant = make_tree(leaves=3, flowers=0)
        factory = fixed_rng(leaves=0.01, flowers=0.01)

        first = adaptive_plant_tick(plant, summer_chunk, rng_seed="s", rng_factory=factory)
        assert quantities(first.new_plant)["leaves"] == 4
        assert quantities(first.new_plant)["flowers"] == 0

        second = adaptive_plant_tick(first.new_plant, summer_chunk, rng_seed="s", game_time=1, rng_factory=factory)
        assert quantities(second.new_plant)["flowers"] == 1

    def test_maxed_leaves_stay_stable(self, make_tree, summer_chunk, fixed_rng):
        """A mid-range draw leaves a maxed part untouched."""
        plant = make_tree(leaves=5)
        result = adaptive_plant_tick(plant, summer_chunk, rng_seed="s", rng_factory=fixed_rng(leaves=0.5))

        assert quantities(result.new_plant)["leaves"] == 5
        assert result.narrative_events == ()

    def test_all_parts_gone_wilts(self, make_tree, summer_chunk, fixed_rng):
        """Every part at zero flags removal with only the wilt notice."""
        plant = make_tree(leaves=0, flowers=0, fruits=0, trunk=0, roots=0)
        result = adaptive_plant_tick(plant, summer_chunk, rng_seed="s", rng_factory=fixed_rng())

        assert result.plant_removed is True
        assert result.narrative_events == (NarrativeEvent(PLANT_WILTS, {"target": "Common Tree"}),)
        assert result.dropped_items == ()


# =============================================================================
# CONTRACT
# =============================================================================

class TestTickContract:
    """Purity, determinism and guard behavior."""

    def test_deterministic(self, make_tree, summer_chunk):
        """Same inputs and seed give identical results."""
        plant = make_tree(leaves=3, flowers=1)
        a = adaptive_plant_tick(plant, summer_chunk, rng_seed="world-7", game_time=42)
        b = adaptive_plant_tick(plant, summer_chunk, rng_seed="world-7", game_time=42)
        assert a == b

    def test_inputs_not_mutated(self, make_tree, summer_chunk, fixed_rng):
        """The input plant and chunk are left as they were."""
        plant = make_tree(leaves=4)
        before = quantities(plant)
        chunk_before = summer_chunk.as_dict()

        result = adaptive_plant_tick(plant, summer_chunk, rng_seed="s", rng_factory=fixed_rng(leaves=0.01))

        assert quantities(plant) == before
        assert summer_chunk.as_dict() == chunk_before
        assert result.new_plant is not plant

    def test_no_properties_passthrough(self, summer_chunk):
        """Plants without properties or parts come back unchanged."""
        bare = Plant("rock-1", "Rock")
        empty = Plant("rock-2", "Rock", PlantProperties())

        for plant in (bare, empty):
            result = adaptive_plant_tick(plant, summer_chunk)
            assert result == TickResult(new_plant=plant)
            assert result.plant_removed is False

    def test_corrupt_probability_raises(self, summer_chunk):
        """A NaN grow probability is rejected, not simulated."""
        plant = Plant.from_dict({
            "id": "bad",
            "name": "Bad",
            "plantProperties": {"parts": [{"name": "leaves", "maxQty": 3, "currentQty": 1, "growProb": math.nan}]},
        })
        with pytest.raises(PlantDataError):
            adaptive_plant_tick(plant, summer_chunk)

    def test_nan_vegetation_contribution_raises(self, make_tree, summer_chunk):
        """Plant-level numbers are checked before anything is simulated."""
        with pytest.raises(PlantDataError) as exc:
            adaptive_plant_tick(make_tree(vegetationContribution=math.nan), summer_chunk)
        assert exc.value.plant_id == "tree-1"

    def test_string_vegetation_contribution_raises(self, make_tree, summer_chunk):
        with pytest.raises(PlantDataError):
            adaptive_plant_tick(make_tree(vegetationContribution="20"), summer_chunk)

    def test_quantities_stay_in_bounds(self, make_tree):
        """Hundreds of real ticks never push a part outside [0, max]."""
        chunk = ChunkEnvironmentSnapshot(moisture=50, light_level=50, temperature=25,
                                         wind_level=60, season=Season.SPRING)
        plant = make_tree(leaves=2, flowers=0, fruits=0)

        for tick in range(400):
            result = adaptive_plant_tick(plant, chunk, rng_seed="bounds", game_time=tick)
            for part in result.new_plant.parts:
                assert 0 <= part.current_qty <= part.max_qty
            if result.plant_removed:
                break
            plant = result.new_plant

    def test_parts_keep_declared_order(self, make_tree, summer_chunk, fixed_rng):
        """New snapshot lists parts in their declared order."""
        plant = make_tree()
        result = adaptive_plant_tick(plant, summer_chunk, rng_factory=fixed_rng())
        assert [p.name for p in result.new_plant.parts] == [p.name for p in plant.parts]

    def test_suitability_reported_per_part(self, make_tree, summer_chunk, fixed_rng):
        """Each part's suitability is exposed for inspection."""
        result = adaptive_plant_tick(make_tree(), summer_chunk, rng_factory=fixed_rng())
        assert set(result.suitability) == {"leaves", "flowers", "fruits", "trunk", "roots"}
        assert result.suitability["leaves"].state == SuitabilityState.SUITABLE
        assert abs(result.suitability["leaves"].multiplier - 0.68839375) < 1e-9


# =============================================================================
# EVENT RESOLUTION & FEEDBACK
# =============================================================================

class TestResolveEvent:
    """Single-draw event resolution."""

    def test_low_draw_grows(self):
        assert resolve_event(0.01, EventProbabilities(grow=0.05, drop=0.05)) is PartEvent.GROW

    def test_high_draw_drops(self):
        assert resolve_event(0.97, EventProbabilities(grow=0.05, drop=0.05)) is PartEvent.DROP

    def test_middle_draw_does_nothing(self):
        assert resolve_event(0.5, EventProbabilities(grow=0.05, drop=0.05)) is None

    def test_zero_drop_never_drops(self):
        """A draw at the very top cannot drop a part with no drop chance."""
        assert resolve_event(0.999999, EventProbabilities(grow=0.05, drop=0.0)) is None


class TestEnvironmentFeedback:
    """Environment deltas derived from the new quantities."""

    def test_full_canopy_shades(self, make_tree):
        """Full foliage reduces light by the maximum delta."""
        updates = compute_env_updates(make_tree(leaves=5))
        assert updates.light_level_delta == -3

    def test_partial_canopy_shades_less(self, make_tree):
        """Foliage just above half shades by one."""
        assert compute_env_updates(make_tree(leaves=3)).light_level_delta == -1

    def test_thin_canopy_no_light_change(self, make_tree):
        assert compute_env_updates(make_tree(leaves=2)).light_level_delta is None

    def test_bare_canopy_lets_light_in(self, make_tree):
        """No foliage raises light."""
        assert compute_env_updates(make_tree(leaves=0)).light_level_delta == 1

    def test_light_follows_category_not_name(self):
        """Any foliage-category part shades, whatever it is called."""
        cactus = Plant.from_dict({
            "id": "cactus-1",
            "name": "Cactus",
            "plantProperties": {"parts": [{"name": "pads", "maxQty": 3, "currentQty": 3, "category": "foliage"}]},
        })
        assert compute_env_updates(cactus).light_level_delta == -3

    def test_roots_and_fruit(self, make_tree):
        """Roots feed the soil, fruit attracts creatures."""
        updates = compute_env_updates(make_tree(roots=1, fruits=2))
        assert abs(updates.nutrition_delta - 0.05) < 1e-9
        assert abs(updates.attract_creatures_delta - 0.2) < 1e-9

    def test_vegetation_contribution(self, make_tree):
        """Vegetation delta follows the fill ratio against the initial ratio."""
        plant = make_tree(leaves=5, flowers=0, fruits=0, trunk=1, roots=1,
                          vegetationContribution=20, initialVegetationRatio=0.5)
        updates = compute_env_updates(plant)
        assert abs(updates.vegetation_density_delta - 20 * (7 / 13 - 0.5)) < 1e-9

    def test_as_dict_skips_missing(self):
        updates = EnvUpdates(light_level_delta=-2)
        assert updates.as_dict() == {"lightLevelDelta": -2}
        assert EnvUpdates().is_empty
