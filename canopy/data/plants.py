"""
Canopy - Plant Catalog
Template records for the built-in plants and a seeded spawner.

Templates use the persisted camelCase layout so they go through the same
``Plant.from_dict`` path as saved plants.
"""

from typing import Any, Dict, List, Optional
import copy
import logging
import math

from ..core.errors import PlantDataError
from ..core.models import Plant
from ..core.rng import Seed, create_rng, derive_seed

logger = logging.getLogger(__name__)


def _loot(name: str, chance: float, low: int = 1, high: int = 1) -> Dict[str, Any]:
    return {"name": name, "chance": chance, "quantity": {"min": low, "max": high}}


PLANT_CATALOG: Dict[str, Dict[str, Any]] = {
    "common_tree": {
        "id": "common_tree",
        "name": {"en": "Common Tree", "vi": "Cây Gỗ Thường"},
        "plantProperties": {
            "vegetationContribution": 20,
            "initialVegetationRatio": 0.9,
            "waterPreference": 0.6,
            "lightPreference": 0.7,
            "temperatureRange": (5, 30),
            "parts": [
                {
                    "name": "leaves",
                    "maxQty": 5,
                    "growProb": 0.05,
                    "dropProb": 0.01,
                    "loot": [_loot("plant_fiber", 0.9, 1, 2)],
                    "droppedLoot": [_loot("fallen_leaf", 1.0)],
                },
                {
                    "name": "flowers",
                    "maxQty": 3,
                    "growProb": 0.03,
                    "dropProb": 0.005,
                    "loot": [_loot("white_flower", 0.7)],
                    "droppedLoot": [_loot("petal", 1.0)],
                    "triggerFrom": "leaves",
                },
                {
                    "name": "fruits",
                    "maxQty": 3,
                    "growProb": 0.02,
                    "dropProb": 0.01,
                    "loot": [_loot("strange_fruit", 0.8)],
                    "droppedLoot": [_loot("tree_seed", 0.2)],
                    "triggerFrom": "flowers",
                },
                {
                    "name": "trunk",
                    "maxQty": 1,
                    "growProb": 0.005,
                    "dropProb": 0.0,
                    "loot": [_loot("sturdy_branch", 0.6), _loot("wood_core", 0.9)],
                    "structural": True,
                    "staminaCost": 15,
                },
                {
                    "name": "roots",
                    "maxQty": 1,
                    "growProb": 0.008,
                    "dropProb": 0.0,
                    "loot": [_loot("root", 0.5)],
                    "structural": True,
                    "hidden": True,
                    "staminaCost": 10,
                },
            ],
        },
    },
    "cactus": {
        "id": "cactus",
        "name": {"en": "Cactus", "vi": "Xương Rồng"},
        "plantProperties": {
            "vegetationContribution": 10,
            "initialVegetationRatio": 0.5,
            "waterPreference": 0.15,
            "lightPreference": 0.9,
            "temperatureRange": (20, 50),
            "parts": [
                {
                    "name": "flowers",
                    "maxQty": 2,
                    "growProb": 0.04,
                    "dropProb": 0.005,
                    "loot": [_loot("cactus_flower", 0.8)],
                    "droppedLoot": [_loot("petal", 1.0)],
                },
                {
                    "name": "fruits",
                    "maxQty": 4,
                    "growProb": 0.03,
                    "dropProb": 0.01,
                    "loot": [_loot("cactus_fruit", 0.9, 1, 2)],
                    "droppedLoot": [_loot("cactus_seed", 0.3)],
                    "triggerFrom": "flowers",
                },
                {
                    "name": "trunk",
                    "maxQty": 1,
                    "growProb": 0.006,
                    "dropProb": 0.0,
                    "loot": [_loot("thorny_vine", 0.7)],
                    "structural": True,
                    "staminaCost": 8,
                },
            ],
        },
    },
}


def available_templates() -> List[str]:
    return sorted(PLANT_CATALOG)


def initial_quantity(max_qty: int, draw: float) -> int:
    """Starting stock between 80% and 100% of ``max_qty`` for a draw in [0, 1)."""
    if max_qty <= 0:
        return 0
    qty = math.ceil(round(max_qty * (0.8 + draw * 0.2), 9))
    return max(1, min(max_qty, qty))


def spawn_plant(template_id: str, seed: Seed = 0, plant_id: Optional[str] = None) -> Plant:
    """
    Instantiate a catalog plant with its parts partially grown.

    Args:
        template_id: Key in PLANT_CATALOG
        seed: Seed for the starting quantities
        plant_id: Instance id (defaults to the template id)

    Returns:
        A validated Plant snapshot

    Raises:
        PlantDataError: unknown template
    """
    template = PLANT_CATALOG.get(template_id)
    if template is None:
        raise PlantDataError(
            f"unknown plant template (available: {', '.join(available_templates())})",
            plant_id=template_id,
        )

    record = copy.deepcopy(template)
    if plant_id is not None:
        record["id"] = plant_id

    rng = create_rng(derive_seed(seed, template_id))
    for part in record["plantProperties"]["parts"]:
        part["currentQty"] = initial_quantity(part["maxQty"], rng.float())

    plant = Plant.from_dict(record)
    for part in plant.parts:
        part.validate(plant.plant_id)

    logger.debug(
        f"Spawned {plant.plant_id} ({template_id}): "
        f"{', '.join(f'{p.name} {p.current_qty}/{p.max_qty}' for p in plant.parts)}"
    )
    return plant
