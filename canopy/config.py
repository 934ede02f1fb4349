"""
Canopy - Configuration
Tunable constants for plant growth, decay, suitability and feedback.
"""

from dataclasses import dataclass, field
from typing import Dict
import math

from .core.errors import ConfigurationError
from .core.models import Season


def _require_finite(owner: str, values: Dict[str, float]):
    for name, value in values.items():
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ConfigurationError(f"{owner}.{name} must be a finite number, got {value!r}")


@dataclass
class SuitabilityConfig:
    """Environmental suitability model."""

    # Moisture/light factor when the chunk is as far from preference as possible
    preference_floor: float = 0.25

    # Temperature (degrees C)
    temperature_margin: float = 5.0    # Inside range but near an edge
    temperature_edge_factor: float = 0.75
    temperature_falloff: float = 10.0  # Outside range: decay length
    temperature_floor: float = 0.05

    # Multiplier bounds
    multiplier_floor: float = 0.05
    multiplier_ceiling: float = 1.5

    # Classification bands
    suitable_threshold: float = 0.6
    unsuitable_threshold: float = 0.25

    # Human presence
    human_penalty_factor: float = 0.5

    season_multipliers: Dict[Season, float] = field(default_factory=lambda: {
        Season.SPRING: 1.3,
        Season.SUMMER: 1.1,
        Season.AUTUMN: 0.9,
        Season.WINTER: 0.6,
    })

    def __post_init__(self):
        _require_finite("SuitabilityConfig", {
            "preference_floor": self.preference_floor,
            "temperature_margin": self.temperature_margin,
            "temperature_edge_factor": self.temperature_edge_factor,
            "temperature_falloff": self.temperature_falloff,
            "temperature_floor": self.temperature_floor,
            "multiplier_floor": self.multiplier_floor,
            "multiplier_ceiling": self.multiplier_ceiling,
            "suitable_threshold": self.suitable_threshold,
            "unsuitable_threshold": self.unsuitable_threshold,
            "human_penalty_factor": self.human_penalty_factor,
        })
        _require_finite("SuitabilityConfig.season_multipliers", {
            season.value: value for season, value in self.season_multipliers.items()
        })
        if self.multiplier_floor <= 0:
            raise ConfigurationError("multiplier_floor must be strictly positive")
        if self.multiplier_ceiling < self.multiplier_floor:
            raise ConfigurationError(
                f"multiplier_ceiling {self.multiplier_ceiling} is below floor {self.multiplier_floor}"
            )
        if self.temperature_falloff <= 0:
            raise ConfigurationError("temperature_falloff must be strictly positive")
        if not self.unsuitable_threshold < self.suitable_threshold:
            raise ConfigurationError(
                f"unsuitable_threshold {self.unsuitable_threshold} must be below "
                f"suitable_threshold {self.suitable_threshold}"
            )

    def season_multiplier(self, season: Season) -> float:
        return self.season_multipliers.get(season, 1.0)


@dataclass
class PlantConfig:
    """Plant part growth, decay and environment feedback."""

    suitability: SuitabilityConfig = field(default_factory=SuitabilityConfig)

    # Scaling of base per-tick probabilities
    growth_scale: float = 1.0
    drop_scale: float = 1.0
    wind_drop_factor: float = 0.05      # Added drop chance at wind level 100
    structural_rate_factor: float = 0.1  # Trunk/roots change this much slower
    max_event_probability: float = 0.95

    # Dependency gating: prerequisite must hold this fraction of its max_qty
    maturity_fraction: float = 0.8

    # Canopy light occlusion
    canopy_fraction: float = 0.5
    canopy_max_light_delta: int = 3
    bare_canopy_light_delta: int = 1

    # Other environment feedback (per unit of current quantity)
    root_nutrition_per_unit: float = 0.05
    fruit_attraction_per_unit: float = 0.1

    # Harvest
    default_stamina_cost: int = 5

    # Clock
    ticks_per_season: int = 100

    def __post_init__(self):
        _require_finite("PlantConfig", {
            "growth_scale": self.growth_scale,
            "drop_scale": self.drop_scale,
            "wind_drop_factor": self.wind_drop_factor,
            "structural_rate_factor": self.structural_rate_factor,
            "max_event_probability": self.max_event_probability,
            "maturity_fraction": self.maturity_fraction,
            "canopy_fraction": self.canopy_fraction,
            "root_nutrition_per_unit": self.root_nutrition_per_unit,
            "fruit_attraction_per_unit": self.fruit_attraction_per_unit,
        })
        for name in ("growth_scale", "drop_scale", "wind_drop_factor", "structural_rate_factor"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"PlantConfig.{name} cannot be negative")
        if not 0 < self.max_event_probability <= 1:
            raise ConfigurationError(
                f"max_event_probability must be in (0, 1], got {self.max_event_probability}"
            )
        if not 0 <= self.maturity_fraction <= 1:
            raise ConfigurationError(
                f"maturity_fraction must be in [0, 1], got {self.maturity_fraction}"
            )
        if self.ticks_per_season < 1:
            raise ConfigurationError("ticks_per_season must be at least 1")


# Default configuration
PLANT = PlantConfig()
