"""
Canopy - Core Module
Data model, deterministic randomness and error types.
"""

from .errors import (
    CanopyError,
    ConfigurationError,
    PlantDataError,
    HarvestError,
    PartNotFoundError,
    HiddenPartError,
    PartDepletedError,
    InsufficientStaminaError,
)
from .models import (
    Season,
    PartCategory,
    QuantityRange,
    LootDrop,
    PlantPartDefinition,
    PlantProperties,
    Plant,
    ChunkEnvironmentSnapshot,
)
from .rng import Rng, create_rng, derive_seed

__all__ = [
    # Errors
    "CanopyError",
    "ConfigurationError",
    "PlantDataError",
    "HarvestError",
    "PartNotFoundError",
    "HiddenPartError",
    "PartDepletedError",
    "InsufficientStaminaError",

    # Models
    "Season",
    "PartCategory",
    "QuantityRange",
    "LootDrop",
    "PlantPartDefinition",
    "PlantProperties",
    "Plant",
    "ChunkEnvironmentSnapshot",

    # Randomness
    "Rng",
    "create_rng",
    "derive_seed",
]
