"""
Canopy - Plant Tick Orchestrator

One call advances one plant by one tick:
1. Score the environment for every part (part overrides, then plant defaults)
2. Draw once per part from a part-specific stream: grow, drop or nothing
3. Apply the transitions against a pre-tick snapshot, so a dependent part
   never reacts to its prerequisite's change in the same tick
4. Derive environment feedback from the new quantities
5. Flag the plant for removal when every part is gone

The function is pure: identical (plant, chunk, config, seed, game_time)
always yields an identical TickResult, and nothing passed in is modified.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging
import math

from ..core.models import ChunkEnvironmentSnapshot, PartCategory, Plant, PlantPartDefinition, Season
from ..core.rng import Rng, Seed, create_rng, derive_seed
from ..config import PLANT, PlantConfig
from .suitability import SuitabilityResult, calculate_suitability, resolve_preferences
from .scheduler import EventProbabilities, event_probabilities
from .parts import PartEvent, apply_event, dependency_order, growth_unlocked, validate_plant

logger = logging.getLogger(__name__)


# Narrative keys (rendered by the localization layer)
GROW_EVENT = "growEvent"
DROP_EVENT = "dropEvent"
PLANT_WILTS = "plantWilts"


@dataclass(frozen=True)
class DroppedItem:
    """Loot released into the world, tagged with the plant it came from."""
    name: str
    quantity: int
    source_plant_id: str


@dataclass(frozen=True)
class NarrativeEvent:
    """Structured narrative record: a template key plus its parameters."""
    key: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EnvUpdates:
    """Deltas for the world-state layer to merge into the chunk."""
    light_level_delta: Optional[float] = None
    nutrition_delta: Optional[float] = None
    attract_creatures_delta: Optional[float] = None
    vegetation_density_delta: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return all(v is None for v in (
            self.light_level_delta,
            self.nutrition_delta,
            self.attract_creatures_delta,
            self.vegetation_density_delta,
        ))

    def as_dict(self) -> Dict[str, float]:
        fields = {
            "lightLevelDelta": self.light_level_delta,
            "nutritionDelta": self.nutrition_delta,
            "attractCreaturesDelta": self.attract_creatures_delta,
            "vegetationDensityDelta": self.vegetation_density_delta,
        }
        return {k: v for k, v in fields.items() if v is not None}


@dataclass(frozen=True)
class TickResult:
    """Everything one plant tick produces."""
    new_plant: Plant
    dropped_items: Tuple[DroppedItem, ...] = ()
    narrative_events: Tuple[NarrativeEvent, ...] = ()
    env_updates: EnvUpdates = field(default_factory=EnvUpdates)
    plant_removed: bool = False

    # Per-part suitability used this tick, for inspection
    suitability: Dict[str, SuitabilityResult] = field(default_factory=dict)


RngFactory = Callable[[Seed], Rng]


def resolve_event(u: float, probabilities: EventProbabilities) -> Optional[PartEvent]:
    """
    Map a single uniform draw onto an event.

    Growth owns the bottom of [0, 1), drop the top, so a low draw is the
    favourable outcome and a high draw the unfavourable one.
    """
    if u < probabilities.grow:
        return PartEvent.GROW
    if probabilities.drop > 0 and u >= 1.0 - probabilities.drop:
        return PartEvent.DROP
    return None


def compute_env_updates(plant: Plant, config: PlantConfig = PLANT) -> EnvUpdates:
    """Environment feedback as a function of the plant's current quantities."""
    parts = plant.parts

    def totals(matching: List[PlantPartDefinition]) -> Tuple[int, int]:
        return sum(p.current_qty for p in matching), sum(p.max_qty for p in matching)

    def of(category: PartCategory) -> List[PlantPartDefinition]:
        return [p for p in parts if p.category is category]

    light_delta = None
    foliage_qty, foliage_max = totals([p for p in parts if p.category.blocks_light])
    if foliage_max > 0:
        if foliage_qty > foliage_max * config.canopy_fraction:
            light_delta = -math.floor(foliage_qty / foliage_max * config.canopy_max_light_delta)
        elif foliage_qty == 0:
            light_delta = config.bare_canopy_light_delta

    nutrition_delta = None
    root_qty, _ = totals(of(PartCategory.ROOT))
    if root_qty > 0:
        nutrition_delta = config.root_nutrition_per_unit * root_qty

    attract_delta = None
    fruit_qty, _ = totals(of(PartCategory.FRUIT))
    if fruit_qty > 0:
        attract_delta = config.fruit_attraction_per_unit * fruit_qty

    vegetation_delta = None
    properties = plant.plant_properties
    if properties is not None and properties.vegetation_contribution:
        ratio = plant.total_qty / max(1, plant.total_max_qty)
        vegetation_delta = properties.vegetation_contribution * (ratio - properties.initial_vegetation_ratio)

    return EnvUpdates(
        light_level_delta=light_delta,
        nutrition_delta=nutrition_delta,
        attract_creatures_delta=attract_delta,
        vegetation_density_delta=vegetation_delta,
    )


def adaptive_plant_tick(
    plant: Plant,
    chunk: ChunkEnvironmentSnapshot,
    config: PlantConfig = PLANT,
    rng_seed: Seed = 0,
    game_time: int = 0,
    rng_factory: RngFactory = create_rng,
) -> TickResult:
    """
    Advance ``plant`` by one tick in ``chunk``.

    Args:
        plant: Plant snapshot before the tick
        chunk: Environment of the plant's location (read-only)
        config: Plant configuration
        rng_seed: Base seed; each part draws from derive_seed(seed, time, name)
        game_time: Current game tick
        rng_factory: Builds a generator from a seed

    Returns:
        TickResult with the new plant snapshot, loot, narrative events,
        environment deltas and the removal flag

    Raises:
        PlantDataError: if the plant's data is corrupt
    """
    properties = plant.plant_properties
    if properties is None or not properties.parts:
        return TickResult(new_plant=plant)

    validate_plant(plant)

    season = chunk.season or Season.from_game_time(game_time, config.ticks_per_season)
    snapshot = {p.name: p for p in plant.parts}
    updated = dict(snapshot)

    dropped_items: List[DroppedItem] = []
    narrative_events: List[NarrativeEvent] = []
    suitability: Dict[str, SuitabilityResult] = {}

    for part in dependency_order(plant.parts, plant.plant_id):
        result = calculate_suitability(chunk, resolve_preferences(plant, part), season, config)
        suitability[part.name] = result

        prerequisite = snapshot[part.trigger_from] if part.trigger_from else None
        probabilities = event_probabilities(
            part,
            result.multiplier,
            chunk.wind_level,
            config,
            can_grow=growth_unlocked(part, prerequisite, config),
        )

        rng = rng_factory(derive_seed(rng_seed, game_time, part.name))
        event = resolve_event(rng.float(), probabilities)
        transition = apply_event(part, event, rng, prerequisite, config)
        updated[part.name] = transition.part

        if not transition.applied:
            continue

        key = GROW_EVENT if transition.event is PartEvent.GROW else DROP_EVENT
        narrative_events.append(NarrativeEvent(key, {"part": part.name, "target": plant.name}))
        for item in transition.items:
            dropped_items.append(DroppedItem(item.name, item.quantity, plant.plant_id))

        logger.debug(
            f"{plant.plant_id}: {part.name} {transition.event.value} -> "
            f"{transition.part.current_qty}/{part.max_qty} "
            f"({result.state.value}, x{result.multiplier:.2f})"
        )

    new_plant = plant.with_parts(updated[p.name] for p in plant.parts)
    env_updates = compute_env_updates(new_plant, config)

    plant_removed = all(p.current_qty == 0 for p in new_plant.parts)
    if plant_removed:
        narrative_events.append(NarrativeEvent(PLANT_WILTS, {"target": plant.name}))
        logger.info(f"{plant.plant_id} has wilted: every part is gone")

    return TickResult(
        new_plant=new_plant,
        dropped_items=tuple(dropped_items),
        narrative_events=tuple(narrative_events),
        env_updates=env_updates,
        plant_removed=plant_removed,
        suitability=suitability,
    )
