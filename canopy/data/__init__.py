"""
Canopy - Data Module
Built-in plant templates.
"""

from .plants import PLANT_CATALOG, available_templates, initial_quantity, spawn_plant

__all__ = [
    "PLANT_CATALOG",
    "available_templates",
    "initial_quantity",
    "spawn_plant",
]
