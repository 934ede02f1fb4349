"""
Canopy - Chunk Plant Processing
Runs the plant tick for every plant in a chunk and merges the feedback.

Every plant sees the same pre-tick chunk snapshot; environment deltas are
merged only after all plants have been processed, so plant order never
changes the outcome.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence
import logging

from ..core.models import ChunkEnvironmentSnapshot, Plant
from ..core.rng import Seed, create_rng, derive_seed
from ..config import PLANT, PlantConfig
from .tick import DroppedItem, EnvUpdates, NarrativeEvent, RngFactory, adaptive_plant_tick, compute_env_updates
from .event_calendar import PartEventCalendar

logger = logging.getLogger(__name__)


@dataclass
class ChunkTickResult:
    """Aggregate outcome of one tick over a chunk's plants."""
    chunk: ChunkEnvironmentSnapshot
    plants: List[Plant] = field(default_factory=list)
    removed_plant_ids: List[str] = field(default_factory=list)
    skipped_plant_ids: List[str] = field(default_factory=list)
    dropped_items: List[DroppedItem] = field(default_factory=list)
    narrative_events: List[NarrativeEvent] = field(default_factory=list)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def vegetation_density(plants: Sequence[Plant]) -> float:
    """Vegetation density (0-100) implied by the plants' contributions and fill."""
    total = 0.0
    for plant in plants:
        properties = plant.plant_properties
        if properties is None:
            continue
        properties.validate(plant.plant_id)
        if not properties.vegetation_contribution:
            continue
        ratio = plant.total_qty / max(1, plant.total_max_qty)
        total += properties.vegetation_contribution * ratio
    return _clamp(total, 0.0, 100.0)


def apply_env_updates(
    chunk: ChunkEnvironmentSnapshot,
    updates: EnvUpdates,
) -> ChunkEnvironmentSnapshot:
    """Merge plant feedback into a new chunk snapshot (0-100 scales clamped)."""
    if updates.is_empty:
        return chunk

    light = chunk.light_level
    if updates.light_level_delta is not None:
        light = _clamp(light + updates.light_level_delta, 0.0, 100.0)

    vegetation = chunk.vegetation_density
    if updates.vegetation_density_delta is not None:
        vegetation = _clamp(vegetation + updates.vegetation_density_delta, 0.0, 100.0)

    nutrition = chunk.nutrition
    if updates.nutrition_delta is not None:
        nutrition = max(0.0, nutrition + updates.nutrition_delta)

    attraction = chunk.creature_attraction
    if updates.attract_creatures_delta is not None:
        attraction = max(0.0, attraction + updates.attract_creatures_delta)

    return replace(
        chunk,
        light_level=light,
        vegetation_density=vegetation,
        nutrition=nutrition,
        creature_attraction=attraction,
    )


def simulate_chunk_tick(
    chunk: ChunkEnvironmentSnapshot,
    plants: Sequence[Plant],
    config: PlantConfig = PLANT,
    world_seed: Seed = 0,
    game_time: int = 0,
    calendar: Optional[PartEventCalendar] = None,
    rng_factory: RngFactory = create_rng,
) -> ChunkTickResult:
    """
    Tick every plant in a chunk.

    Args:
        chunk: Pre-tick chunk snapshot
        plants: Plants living in the chunk
        config: Plant configuration
        world_seed: Base seed; each plant uses derive_seed(world_seed, plant_id)
        game_time: Current game tick
        calendar: Optional event calendar; dormant plants are passed
            through untouched, their feedback is still merged
        rng_factory: Builds a generator from a seed

    Returns:
        ChunkTickResult with surviving plants and the merged chunk
    """
    result = ChunkTickResult(chunk=chunk)
    pending: List[EnvUpdates] = []

    for plant in plants:
        plant_seed = derive_seed(world_seed, plant.plant_id)

        if calendar is not None and calendar.is_dormant(plant, chunk, game_time, world_seed):
            # Nothing can fire, but standing parts still shade and feed the chunk
            pending.append(compute_env_updates(plant, config))
            result.plants.append(plant)
            result.skipped_plant_ids.append(plant.plant_id)
            continue

        tick = adaptive_plant_tick(plant, chunk, config, plant_seed, game_time, rng_factory)
        pending.append(tick.env_updates)
        result.dropped_items.extend(tick.dropped_items)
        result.narrative_events.extend(tick.narrative_events)

        if tick.plant_removed:
            result.removed_plant_ids.append(plant.plant_id)
            if calendar is not None:
                calendar.forget(plant.plant_id)
        else:
            result.plants.append(tick.new_plant)

    merged = chunk
    for updates in pending:
        merged = apply_env_updates(merged, updates)
    result.chunk = merged

    if result.removed_plant_ids:
        logger.info(f"Removed {len(result.removed_plant_ids)} wilted plant(s): {result.removed_plant_ids}")
    return result
