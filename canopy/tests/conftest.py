"""
Shared fixtures: a plant builder and a fake Rng with forced draws.
"""

import pytest

from canopy.core.models import ChunkEnvironmentSnapshot, Plant, Season


class FixedRng:
    """
    Stand-in for Rng that returns a forced ``float`` draw.

    ``by_part`` maps part names to draws; a part is matched when its name
    appears in the seed the generator was built from. ``int`` always
    returns the lower bound.
    """

    def __init__(self, seed, default: float = 0.5, by_part=None):
        self.seed = seed
        self.value = default
        for name, value in (by_part or {}).items():
            if name in str(seed):
                self.value = value

    def float(self) -> float:
        return self.value

    def int(self, minimum: int, maximum: int) -> int:
        return min(minimum, maximum)


def fixed_factory(default: float = 0.5, **by_part):
    """rng_factory for adaptive_plant_tick with per-part forced draws."""
    return lambda seed: FixedRng(seed, default, by_part)


def tree_record(leaves=4, flowers=0, fruits=0, trunk=1, roots=1, plant_id="tree-1", **properties):
    parts = [
        {
            "name": "leaves", "maxQty": 5, "currentQty": leaves,
            "growProb": 0.05, "dropProb": 0.01,
            "loot": [{"name": "plant_fiber", "chance": 0.9, "quantity": {"min": 1, "max": 2}}],
            "droppedLoot": [{"name": "fallen_leaf", "chance": 1, "quantity": {"min": 1, "max": 1}}],
        },
        {
            "name": "flowers", "maxQty": 3, "currentQty": flowers,
            "growProb": 0.03, "dropProb": 0.005,
            "loot": [{"name": "white_flower", "chance": 0.7, "quantity": {"min": 1, "max": 1}}],
            "droppedLoot": [{"name": "petal", "chance": 1, "quantity": {"min": 1, "max": 1}}],
            "triggerFrom": "leaves",
        },
        {
            "name": "fruits", "maxQty": 3, "currentQty": fruits,
            "growProb": 0.02, "dropProb": 0.01,
            "loot": [{"name": "strange_fruit", "chance": 0.8, "quantity": {"min": 1, "max": 1}}],
            "droppedLoot": [{"name": "tree_seed", "chance": 0.2, "quantity": {"min": 1, "max": 1}}],
            "triggerFrom": "flowers",
        },
        {
            "name": "trunk", "maxQty": 1, "currentQty": trunk,
            "growProb": 0.005, "dropProb": 0,
            "loot": [{"name": "wood_core", "chance": 0.9, "quantity": {"min": 1, "max": 1}}],
            "structural": True,
        },
        {
            "name": "roots", "maxQty": 1, "currentQty": roots,
            "growProb": 0.008, "dropProb": 0,
            "loot": [{"name": "root", "chance": 0.5, "quantity": {"min": 1, "max": 1}}],
            "structural": True, "hidden": True, "staminaCost": 10,
        },
    ]
    return {
        "id": plant_id,
        "name": {"en": "Common Tree", "vi": "Cây Gỗ Thường"},
        "plantProperties": dict({"parts": parts}, **properties),
    }


@pytest.fixture
def make_tree():
    """Build a common tree with chosen part quantities."""
    def build(**kwargs) -> Plant:
        return Plant.from_dict(tree_record(**kwargs))
    return build


@pytest.fixture
def summer_chunk():
    """Mild summer chunk; neutral preferences score about 0.688 here."""
    return ChunkEnvironmentSnapshot(
        moisture=70,
        light_level=80,
        temperature=20,
        wind_level=0,
        season=Season.SUMMER,
        human_presence=10,
    )


@pytest.fixture
def fixed_rng():
    """Factory of rng_factory callables with forced draws."""
    return fixed_factory
