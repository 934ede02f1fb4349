"""
Canopy - Part Harvesting
Active harvest of a single plant part by a player.

Hidden parts (roots and the like) are left out of the default harvest
surface; reaching them needs an explicit reveal (digging, cutting).
"""

from dataclasses import dataclass
from typing import List, Tuple
import logging

from ..core.errors import (
    HiddenPartError,
    InsufficientStaminaError,
    PartDepletedError,
    PartNotFoundError,
)
from ..core.models import Plant, PlantPartDefinition
from ..core.rng import Rng
from ..config import PLANT, PlantConfig
from .parts import roll_loot
from .tick import DroppedItem, NarrativeEvent

logger = logging.getLogger(__name__)


HARVEST_PART_SUCCESS = "harvestPartSuccess"


@dataclass(frozen=True)
class HarvestResult:
    """Outcome of one successful harvest."""
    new_plant: Plant
    items: Tuple[DroppedItem, ...]
    stamina_spent: int
    narrative_events: Tuple[NarrativeEvent, ...]
    plant_depleted: bool = False


def harvestable_parts(plant: Plant, include_hidden: bool = False) -> List[PlantPartDefinition]:
    """Parts that currently have stock and are exposed to normal harvesting."""
    return [
        p for p in plant.parts
        if p.current_qty > 0 and (include_hidden or not p.hidden)
    ]


def stamina_cost(part: PlantPartDefinition, config: PlantConfig = PLANT) -> int:
    if part.stamina_cost is not None:
        return part.stamina_cost
    return config.default_stamina_cost


def harvest_part(
    plant: Plant,
    part_name: str,
    rng: Rng,
    stamina: float,
    reveal_hidden: bool = False,
    config: PlantConfig = PLANT,
) -> HarvestResult:
    """
    Take one unit of ``part_name`` and roll its harvest loot.

    Args:
        plant: Plant being harvested
        part_name: Name of the part to take
        rng: Source for loot rolls
        stamina: Harvester's available stamina
        reveal_hidden: Set by special actions that expose hidden parts
        config: Plant configuration

    Returns:
        HarvestResult with the new plant snapshot and loot

    Raises:
        PartNotFoundError, HiddenPartError, PartDepletedError,
        InsufficientStaminaError
    """
    part = plant.part(part_name)
    if part is None:
        raise PartNotFoundError(f"{plant.plant_id} has no part '{part_name}'", part_name)
    part.validate(plant.plant_id)

    if part.hidden and not reveal_hidden:
        raise HiddenPartError(f"'{part_name}' is hidden and needs a special action", part_name)
    if part.current_qty <= 0:
        raise PartDepletedError(f"no '{part_name}' left on {plant.plant_id}", part_name)

    cost = stamina_cost(part, config)
    if stamina < cost:
        raise InsufficientStaminaError(
            f"harvesting '{part_name}' needs {cost} stamina, have {stamina}",
            part_name,
            required=cost,
            available=stamina,
        )

    taken = part.with_qty(part.current_qty - 1)
    new_plant = plant.with_parts(taken if p.name == part_name else p for p in plant.parts)
    items = tuple(
        DroppedItem(item.name, item.quantity, plant.plant_id)
        for item in roll_loot(part.loot, rng)
    )

    logger.info(
        f"Harvested {part_name} from {plant.plant_id}: "
        f"{', '.join(f'{i.quantity}x {i.name}' for i in items) or 'nothing'}"
    )

    return HarvestResult(
        new_plant=new_plant,
        items=items,
        stamina_spent=cost,
        narrative_events=(
            NarrativeEvent(HARVEST_PART_SUCCESS, {"part": part_name, "target": plant.name}),
        ),
        plant_depleted=all(p.current_qty == 0 for p in new_plant.parts),
    )
