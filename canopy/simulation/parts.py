"""
Canopy - Part State Machine
Applies one resolved growth or drop event to a plant part.

Rules:
- Quantities move one unit at a time and stay inside [0, max_qty]
- A part with ``trigger_from`` only grows while its prerequisite is mature
- A drop yields the part's passive ``dropped_loot``, never its harvest loot
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from enum import Enum
import logging
import math

from ..core.errors import PlantDataError
from ..core.models import LootDrop, Plant, PlantPartDefinition
from ..core.rng import Rng
from ..config import PLANT, PlantConfig

logger = logging.getLogger(__name__)


class PartEvent(Enum):
    """Stochastic events a part can undergo in one tick."""
    GROW = "grow"
    DROP = "drop"


@dataclass(frozen=True)
class ItemYield:
    """A resolved loot entry."""
    name: str
    quantity: int


@dataclass(frozen=True)
class PartTransition:
    """Outcome of applying an event to a part."""
    part: PlantPartDefinition
    event: Optional[PartEvent] = None
    applied: bool = False
    items: Tuple[ItemYield, ...] = ()


# =============================================================================
# MATURITY & DEPENDENCIES
# =============================================================================

def maturity_threshold(part: PlantPartDefinition, config: PlantConfig = PLANT) -> int:
    """Quantity at which ``part`` unlocks its dependents (never below 1)."""
    return max(1, math.ceil(round(part.max_qty * config.maturity_fraction, 9)))


def is_mature(part: PlantPartDefinition, config: PlantConfig = PLANT) -> bool:
    return part.current_qty >= maturity_threshold(part, config)


def growth_unlocked(
    part: PlantPartDefinition,
    prerequisite: Optional[PlantPartDefinition],
    config: PlantConfig = PLANT,
) -> bool:
    """True if nothing gates the part, or its prerequisite is mature."""
    if part.trigger_from is None:
        return True
    if prerequisite is None:
        raise PlantDataError(
            f"trigger_from '{part.trigger_from}' references a missing part",
            part_name=part.name,
        )
    return is_mature(prerequisite, config)


def validate_plant(plant: Plant):
    """
    Check every part of ``plant`` for corrupt data.

    Raises:
        PlantDataError: non-finite numbers, duplicate names, dangling or
            self-referencing ``trigger_from``, dependency cycles
    """
    if plant.plant_properties is not None:
        plant.plant_properties.validate(plant.plant_id)

    names = set()
    for part in plant.parts:
        part.validate(plant.plant_id)
        if part.name in names:
            raise PlantDataError("duplicate part name", plant_id=plant.plant_id, part_name=part.name)
        names.add(part.name)

    for part in plant.parts:
        if part.trigger_from is None:
            continue
        if part.trigger_from == part.name:
            raise PlantDataError("part cannot trigger from itself", plant_id=plant.plant_id, part_name=part.name)
        if part.trigger_from not in names:
            raise PlantDataError(
                f"trigger_from '{part.trigger_from}' references a missing part",
                plant_id=plant.plant_id,
                part_name=part.name,
            )

    dependency_order(plant.parts, plant_id=plant.plant_id)


def dependency_order(
    parts: Sequence[PlantPartDefinition],
    plant_id: str = None,
) -> List[PlantPartDefinition]:
    """
    Order parts so prerequisites come before their dependents.

    Stable: independent parts keep their declared order.
    """
    by_name = {p.name: p for p in parts}
    placed: Dict[str, bool] = {}
    ordered: List[PlantPartDefinition] = []

    def visit(part: PlantPartDefinition, trail: Tuple[str, ...]):
        if placed.get(part.name):
            return
        if part.name in trail:
            cycle = " -> ".join(trail + (part.name,))
            raise PlantDataError(f"dependency cycle: {cycle}", plant_id=plant_id, part_name=part.name)
        if part.trigger_from is not None:
            prerequisite = by_name.get(part.trigger_from)
            if prerequisite is None:
                raise PlantDataError(
                    f"trigger_from '{part.trigger_from}' references a missing part",
                    plant_id=plant_id,
                    part_name=part.name,
                )
            visit(prerequisite, trail + (part.name,))
        placed[part.name] = True
        ordered.append(part)

    for part in parts:
        visit(part, ())
    return ordered


# =============================================================================
# TRANSITIONS
# =============================================================================

def roll_loot(drops: Iterable[LootDrop], rng: Rng) -> List[ItemYield]:
    """Resolve each loot entry independently against its chance and range."""
    items = []
    for drop in drops:
        if rng.float() < drop.chance:
            quantity = rng.int(drop.quantity.min, drop.quantity.max)
            if quantity > 0:
                items.append(ItemYield(drop.name, quantity))
    return items


def grow(
    part: PlantPartDefinition,
    prerequisite: Optional[PlantPartDefinition] = None,
    config: PlantConfig = PLANT,
) -> PartTransition:
    if part.current_qty >= part.max_qty:
        return PartTransition(part, PartEvent.GROW, applied=False)
    if not growth_unlocked(part, prerequisite, config):
        logger.debug(f"{part.name} growth blocked by immature {part.trigger_from}")
        return PartTransition(part, PartEvent.GROW, applied=False)
    return PartTransition(part.with_qty(part.current_qty + 1), PartEvent.GROW, applied=True)


def drop(part: PlantPartDefinition, rng: Rng) -> PartTransition:
    if part.current_qty <= 0:
        return PartTransition(part, PartEvent.DROP, applied=False)
    items = roll_loot(part.dropped_loot, rng)
    return PartTransition(part.with_qty(part.current_qty - 1), PartEvent.DROP, applied=True, items=tuple(items))


def apply_event(
    part: PlantPartDefinition,
    event: Optional[PartEvent],
    rng: Rng,
    prerequisite: Optional[PlantPartDefinition] = None,
    config: PlantConfig = PLANT,
) -> PartTransition:
    """
    Apply ``event`` to ``part``.

    Args:
        part: Part before the event
        event: GROW, DROP or None for no change
        rng: Source for dropped-loot rolls
        prerequisite: Pre-tick snapshot of the part named by trigger_from
        config: Plant configuration

    Returns:
        PartTransition; ``applied`` is False when bounds or gating refused it
    """
    if event is PartEvent.GROW:
        return grow(part, prerequisite, config)
    if event is PartEvent.DROP:
        return drop(part, rng)
    return PartTransition(part)
