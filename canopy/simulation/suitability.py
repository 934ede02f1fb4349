"""
Canopy - Environmental Suitability Engine

Blends a chunk's physical signals into one growth multiplier and a
three-state classification:
- Moisture and light: closeness to the plant's preference (0-1)
- Temperature: hard range with a soft decay outside it
- Season and human presence: flat modifiers

The engine is a pure function of its inputs. Malformed environment values
are replaced with neutral ones rather than raised, so inspection panels can
always render a state.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union
from enum import Enum
import logging
import math

from ..core.models import ChunkEnvironmentSnapshot, Plant, PlantPartDefinition, Season
from ..config import PLANT, PlantConfig

logger = logging.getLogger(__name__)


NEUTRAL_WATER_PREFERENCE = 0.5
NEUTRAL_LIGHT_PREFERENCE = 0.5
NEUTRAL_TEMPERATURE_RANGE = (0.0, 50.0)


class SuitabilityState(Enum):
    """How well a location suits a plant or part."""
    SUITABLE = "SUITABLE"          # Close to or above ideal
    UNFAVORABLE = "UNFAVORABLE"    # Degraded but growing
    UNSUITABLE = "UNSUITABLE"      # Near the floor


@dataclass(frozen=True)
class GrowthPreferences:
    """Resolved environmental preferences for one part."""
    water_preference: float = NEUTRAL_WATER_PREFERENCE
    light_preference: float = NEUTRAL_LIGHT_PREFERENCE
    temperature_range: Tuple[float, float] = NEUTRAL_TEMPERATURE_RANGE


@dataclass(frozen=True)
class SuitabilityResult:
    """Multiplier, band and the per-factor breakdown behind them."""
    multiplier: float
    state: SuitabilityState
    limiting_factor: Optional[str] = None
    factors: Dict[str, float] = field(default_factory=dict)


def resolve_preferences(
    plant: Optional[Plant] = None,
    part: Optional[PlantPartDefinition] = None,
) -> GrowthPreferences:
    """Part override, then plant default, then neutral."""
    properties = plant.plant_properties if plant is not None else None

    def pick(attr: str, neutral):
        if part is not None and getattr(part, attr) is not None:
            return getattr(part, attr)
        if properties is not None and getattr(properties, attr) is not None:
            return getattr(properties, attr)
        return neutral

    return GrowthPreferences(
        water_preference=pick("water_preference", NEUTRAL_WATER_PREFERENCE),
        light_preference=pick("light_preference", NEUTRAL_LIGHT_PREFERENCE),
        temperature_range=tuple(pick("temperature_range", NEUTRAL_TEMPERATURE_RANGE)),
    )


def _finite(value, default: float, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        logger.warning(f"Non-finite {label} {value!r}; using {default}")
        return default
    return float(value)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def preference_factor(observed: float, preferred: float, floor: float) -> float:
    """
    Score how close an observed 0-1 signal is to the preferred value.

    1.0 when they match, ``floor`` when they are a full scale apart.
    """
    closeness = 1.0 - abs(observed - preferred)
    return floor + (1.0 - floor) * _clamp(closeness, 0.0, 1.0)


def temperature_factor(
    temperature: float,
    temperature_range: Tuple[float, float],
    config: PlantConfig = PLANT,
) -> float:
    """
    Temperature contribution.

    Inside the range: 1.0, or the edge factor within the margin of either
    bound. Outside: exponential decay from the edge factor towards the floor,
    so plants degrade instead of stopping dead.
    """
    cfg = config.suitability
    low, high = sorted(temperature_range)

    if temperature < low:
        distance = low - temperature
    elif temperature > high:
        distance = temperature - high
    else:
        distance = 0.0

    if distance > 0:
        return max(cfg.temperature_floor,
                   cfg.temperature_edge_factor * math.exp(-distance / cfg.temperature_falloff))

    if temperature - low < cfg.temperature_margin or high - temperature < cfg.temperature_margin:
        return cfg.temperature_edge_factor
    return 1.0


def classify(multiplier: float, config: PlantConfig = PLANT) -> SuitabilityState:
    """Map a multiplier onto its band. Monotonic in the multiplier."""
    cfg = config.suitability
    if multiplier >= cfg.suitable_threshold:
        return SuitabilityState.SUITABLE
    if multiplier < cfg.unsuitable_threshold:
        return SuitabilityState.UNSUITABLE
    return SuitabilityState.UNFAVORABLE


def calculate_suitability(
    chunk: ChunkEnvironmentSnapshot,
    preferences: Optional[GrowthPreferences] = None,
    season: Optional[Season] = None,
    config: PlantConfig = PLANT,
) -> SuitabilityResult:
    """
    Compute the environmental multiplier and state for a set of preferences.

    Args:
        chunk: Environment snapshot of the plant's location
        preferences: Resolved preferences (neutral when omitted)
        season: Current season; falls back to the chunk's, then to neutral
        config: Plant configuration

    Returns:
        SuitabilityResult with a multiplier in [floor, ceiling]
    """
    cfg = config.suitability
    prefs = preferences or GrowthPreferences()

    moisture = _clamp(_finite(chunk.moisture, 50.0, "moisture"), 0.0, 100.0) / 100
    light = _clamp(_finite(chunk.light_level, 50.0, "light level"), 0.0, 100.0) / 100
    temperature = _finite(chunk.temperature, 20.0, "temperature")
    human = _clamp(_finite(chunk.human_presence, 0.0, "human presence"), 0.0, 100.0) / 100

    water_pref = _clamp(_finite(prefs.water_preference, NEUTRAL_WATER_PREFERENCE, "water preference"), 0.0, 1.0)
    light_pref = _clamp(_finite(prefs.light_preference, NEUTRAL_LIGHT_PREFERENCE, "light preference"), 0.0, 1.0)
    temp_range = tuple(
        _finite(bound, neutral, "temperature bound")
        for bound, neutral in zip(prefs.temperature_range, NEUTRAL_TEMPERATURE_RANGE)
    )

    season = season or chunk.season
    factors = {
        "moisture": preference_factor(moisture, water_pref, cfg.preference_floor),
        "light": preference_factor(light, light_pref, cfg.preference_floor),
        "temperature": temperature_factor(temperature, temp_range, config),
        "season": cfg.season_multiplier(season) if season is not None else 1.0,
        "human_presence": max(0.0, 1.0 - human * cfg.human_penalty_factor),
    }

    raw = 1.0
    for value in factors.values():
        raw *= value

    multiplier = _clamp(raw, cfg.multiplier_floor, cfg.multiplier_ceiling)
    limiting = min(factors, key=factors.get)
    state = classify(multiplier, config)

    return SuitabilityResult(
        multiplier=multiplier,
        state=state,
        limiting_factor=limiting if factors[limiting] < 1.0 else None,
        factors=factors,
    )


def suitability_for_part(
    chunk: ChunkEnvironmentSnapshot,
    plant: Plant,
    part: Union[PlantPartDefinition, str, int, None] = None,
    config: PlantConfig = PLANT,
    game_time: int = 0,
) -> SuitabilityResult:
    """
    Inspection query: suitability of ``plant`` (or one of its parts) here.

    ``part`` may be a part definition, a part name, an index into the
    plant's parts, or None for plant-level defaults.
    """
    if isinstance(part, str):
        part = plant.part(part)
    elif isinstance(part, int) and not isinstance(part, bool):
        parts = plant.parts
        part = parts[part] if 0 <= part < len(parts) else None

    season = chunk.season or Season.from_game_time(game_time, config.ticks_per_season)
    return calculate_suitability(chunk, resolve_preferences(plant, part), season, config)
