"""
Canopy - Adaptive Plant Simulation
Part-level growth, decay and harvest of plants driven by the environment
of the chunk they live in.
"""

__version__ = "1.0.0"

from .config import PLANT, PlantConfig, SuitabilityConfig

from .core import (
    CanopyError,
    ConfigurationError,
    PlantDataError,
    HarvestError,
    Season,
    PartCategory,
    LootDrop,
    PlantPartDefinition,
    PlantProperties,
    Plant,
    ChunkEnvironmentSnapshot,
    Rng,
    create_rng,
    derive_seed,
)

from .simulation import (
    calculate_suitability,
    schedule_next_event,
    adaptive_plant_tick,
    harvest_part,
    simulate_chunk_tick,
    PartEventCalendar,
    TickResult,
)

from .data import PLANT_CATALOG, spawn_plant

__all__ = [
    "__version__",
    "PLANT",
    "PlantConfig",
    "SuitabilityConfig",
    "CanopyError",
    "ConfigurationError",
    "PlantDataError",
    "HarvestError",
    "Season",
    "PartCategory",
    "LootDrop",
    "PlantPartDefinition",
    "PlantProperties",
    "Plant",
    "ChunkEnvironmentSnapshot",
    "Rng",
    "create_rng",
    "derive_seed",
    "calculate_suitability",
    "schedule_next_event",
    "adaptive_plant_tick",
    "harvest_part",
    "simulate_chunk_tick",
    "PartEventCalendar",
    "TickResult",
    "PLANT_CATALOG",
    "spawn_plant",
]
