"""
Canopy - Simulation Package
Environmental suitability, event scheduling, part transitions, the plant
tick, harvesting and chunk-level processing.
"""

from .suitability import (
    SuitabilityState,
    GrowthPreferences,
    SuitabilityResult,
    resolve_preferences,
    preference_factor,
    temperature_factor,
    classify,
    calculate_suitability,
    suitability_for_part,
)

from .scheduler import (
    EventProbabilities,
    event_probabilities,
    sample_geometric_wait,
    schedule_next_event,
)

from .parts import (
    PartEvent,
    ItemYield,
    PartTransition,
    maturity_threshold,
    is_mature,
    growth_unlocked,
    validate_plant,
    dependency_order,
    roll_loot,
    apply_event,
)

from .tick import (
    GROW_EVENT,
    DROP_EVENT,
    PLANT_WILTS,
    DroppedItem,
    NarrativeEvent,
    EnvUpdates,
    TickResult,
    resolve_event,
    compute_env_updates,
    adaptive_plant_tick,
)

from .harvest import (
    HARVEST_PART_SUCCESS,
    HarvestResult,
    harvestable_parts,
    stamina_cost,
    harvest_part,
)

from .event_calendar import CalendarEntry, PartEventCalendar

from .chunk import ChunkTickResult, apply_env_updates, simulate_chunk_tick, vegetation_density

__all__ = [
    # Suitability
    "SuitabilityState",
    "GrowthPreferences",
    "SuitabilityResult",
    "resolve_preferences",
    "preference_factor",
    "temperature_factor",
    "classify",
    "calculate_suitability",
    "suitability_for_part",

    # Scheduling
    "EventProbabilities",
    "event_probabilities",
    "sample_geometric_wait",
    "schedule_next_event",

    # Part transitions
    "PartEvent",
    "ItemYield",
    "PartTransition",
    "maturity_threshold",
    "is_mature",
    "growth_unlocked",
    "validate_plant",
    "dependency_order",
    "roll_loot",
    "apply_event",

    # Tick
    "GROW_EVENT",
    "DROP_EVENT",
    "PLANT_WILTS",
    "DroppedItem",
    "NarrativeEvent",
    "EnvUpdates",
    "TickResult",
    "resolve_event",
    "compute_env_updates",
    "adaptive_plant_tick",

    # Harvest
    "HARVEST_PART_SUCCESS",
    "HarvestResult",
    "harvestable_parts",
    "stamina_cost",
    "harvest_part",

    # Calendar
    "CalendarEntry",
    "PartEventCalendar",

    # Chunk
    "ChunkTickResult",
    "apply_env_updates",
    "simulate_chunk_tick",
    "vegetation_density",
]
