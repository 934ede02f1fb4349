"""
Canopy - Part Event Scheduler

Hybrid scheduling: instead of rolling a Bernoulli trial for every part on
every tick, compute the effective per-tick event probability once and
inverse-sample the geometric wait until the first success. The result only
needs recomputing when the part's conditions change.

    wait = ceil( ln(U) / ln(1 - p_eff) ),   U ~ Uniform(0, 1]
"""

from dataclasses import dataclass
from typing import Optional
import logging
import math

from ..core.errors import PlantDataError
from ..core.models import PlantPartDefinition
from ..core.rng import Rng, Seed, create_rng, derive_seed
from ..config import PLANT, PlantConfig

logger = logging.getLogger(__name__)


# Below this an event is treated as impossible; keeps ln(1 - p) away from 0
MIN_EVENT_PROBABILITY = 1e-12


@dataclass(frozen=True)
class EventProbabilities:
    """Effective per-tick probabilities for one part. ``grow + drop <= 1``."""
    grow: float = 0.0
    drop: float = 0.0

    @property
    def total(self) -> float:
        return self.grow + self.drop

    @property
    def possible(self) -> bool:
        return self.total > MIN_EVENT_PROBABILITY


def _check_multiplier(value: float, part: PlantPartDefinition) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise PlantDataError(f"environment multiplier must be finite, got {value!r}", part_name=part.name)
    if value < 0:
        raise PlantDataError(f"environment multiplier cannot be negative, got {value}", part_name=part.name)
    return float(value)


def _wind_fraction(wind_level: float) -> float:
    if isinstance(wind_level, bool) or not isinstance(wind_level, (int, float)) or not math.isfinite(wind_level):
        logger.warning(f"Non-finite wind level {wind_level!r}; treating as calm")
        return 0.0
    return max(0.0, min(100.0, float(wind_level))) / 100


def event_probabilities(
    part: PlantPartDefinition,
    environment_multiplier: float,
    wind_level: float = 0.0,
    config: PlantConfig = PLANT,
    can_grow: bool = True,
) -> EventProbabilities:
    """
    Combine base probabilities, suitability and wind into per-tick chances.

    - Growth: grow_prob x growth_scale x multiplier; impossible at max_qty or
      while gated by an immature prerequisite
    - Drop: drop_prob x drop_scale x multiplier, plus wind for foliage and
      flowers; impossible at zero
    - Structural parts: both directions x structural_rate_factor
    - Each capped at max_event_probability, jointly normalised to <= 1
    """
    part.validate()
    multiplier = _check_multiplier(environment_multiplier, part)
    rate = config.structural_rate_factor if part.structural else 1.0

    grow = 0.0
    if can_grow and part.current_qty < part.max_qty:
        grow = part.grow_prob * config.growth_scale * multiplier * rate

    drop = 0.0
    if part.current_qty > 0:
        drop = part.drop_prob * config.drop_scale * multiplier
        if part.category.wind_sensitive:
            drop += _wind_fraction(wind_level) * config.wind_drop_factor
        drop *= rate

    grow = min(grow, config.max_event_probability)
    drop = min(drop, config.max_event_probability)
    if grow < MIN_EVENT_PROBABILITY:
        grow = 0.0
    if drop < MIN_EVENT_PROBABILITY:
        drop = 0.0

    total = grow + drop
    if total > 1.0:
        grow, drop = grow / total, drop / total

    return EventProbabilities(grow=grow, drop=drop)


def sample_geometric_wait(p: float, rng: Rng) -> Optional[int]:
    """
    Ticks until the first success of a Bernoulli(p) process, always >= 1.

    Returns None when ``p`` is effectively zero (the event never happens).
    """
    if not p > MIN_EVENT_PROBABILITY:
        return None
    if p >= 1.0:
        return 1
    u = 1.0 - rng.float()  # (0, 1]
    wait = math.ceil(math.log(u) / math.log1p(-p))
    return max(1, wait)


def schedule_next_event(
    part: PlantPartDefinition,
    environment_multiplier: float,
    current_tick: int,
    seed: Seed,
    wind_level: float = 0.0,
    config: PlantConfig = PLANT,
    can_grow: bool = True,
) -> Optional[int]:
    """
    Tick at which the part's next growth or drop event should fire.

    Args:
        part: Part to schedule
        environment_multiplier: Suitability multiplier for the part
        current_tick: Current game tick
        seed: Base seed; combined with the part name and tick
        wind_level: Chunk wind level (0-100)
        config: Plant configuration
        can_grow: False while the part's prerequisite is immature

    Returns:
        A tick strictly greater than ``current_tick``, or None if no event
        can occur under these conditions.
    """
    probabilities = event_probabilities(part, environment_multiplier, wind_level, config, can_grow)
    if not probabilities.possible:
        return None

    rng = create_rng(derive_seed(seed, part.name, current_tick))
    wait = sample_geometric_wait(probabilities.total, rng)
    if wait is None:
        return None

    logger.debug(
        f"Scheduled {part.name} in {wait} ticks "
        f"(p_grow {probabilities.grow:.4f}, p_drop {probabilities.drop:.4f})"
    )
    return current_tick + wait
