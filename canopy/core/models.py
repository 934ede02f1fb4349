"""
Canopy - Data Model
Plants, their parts, loot tables and the chunk environment they live in.

All records are frozen. A tick never edits a plant in place; it returns a
new ``Plant`` built with ``with_parts``.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
from enum import Enum
import math

from .errors import PlantDataError


class Season(Enum):
    """Seasons in cycle order (a game year starts in winter)."""
    WINTER = "winter"
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"

    @classmethod
    def from_game_time(cls, game_time: int, ticks_per_season: int = 100) -> "Season":
        """Season implied by the game clock, for chunks that carry none."""
        order = list(cls)
        index = (int(game_time) // max(1, ticks_per_season)) % len(order)
        return order[index]

    @classmethod
    def parse(cls, value) -> "Season":
        if isinstance(value, Season):
            return value
        return cls(str(value).lower())


class PartCategory(Enum):
    """Anatomical role of a plant part."""
    FOLIAGE = "foliage"
    FLOWER = "flower"
    FRUIT = "fruit"
    TRUNK = "trunk"
    ROOT = "root"
    OTHER = "other"

    @property
    def is_structural(self) -> bool:
        """Trunk and roots regenerate slowly and rarely drop."""
        return self in (PartCategory.TRUNK, PartCategory.ROOT)

    @property
    def wind_sensitive(self) -> bool:
        """Wind strips these parts on top of their normal decay."""
        return self in (PartCategory.FOLIAGE, PartCategory.FLOWER)

    @property
    def blocks_light(self) -> bool:
        return self is PartCategory.FOLIAGE

    @classmethod
    def infer(cls, name: str, structural: bool = False) -> "PartCategory":
        """Best guess for persisted records that only carry a name."""
        category = _CATEGORY_BY_NAME.get(name.lower(), cls.OTHER)
        if structural and not category.is_structural:
            return cls.TRUNK
        return category


_CATEGORY_BY_NAME = {
    "leaves": PartCategory.FOLIAGE,
    "leaf": PartCategory.FOLIAGE,
    "needles": PartCategory.FOLIAGE,
    "fronds": PartCategory.FOLIAGE,
    "flowers": PartCategory.FLOWER,
    "flower": PartCategory.FLOWER,
    "blossoms": PartCategory.FLOWER,
    "fruits": PartCategory.FRUIT,
    "fruit": PartCategory.FRUIT,
    "berries": PartCategory.FRUIT,
    "seeds": PartCategory.FRUIT,
    "trunk": PartCategory.TRUNK,
    "stem": PartCategory.TRUNK,
    "branches": PartCategory.TRUNK,
    "roots": PartCategory.ROOT,
    "root": PartCategory.ROOT,
}


@dataclass(frozen=True)
class QuantityRange:
    """Inclusive yield range."""
    min: int = 1
    max: int = 1


@dataclass(frozen=True)
class LootDrop:
    """One entry of a loot table, resolved independently of its siblings."""
    name: str
    chance: float = 1.0
    quantity: QuantityRange = field(default_factory=QuantityRange)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], part_name: str = None) -> "LootDrop":
        qty = data.get("quantity") or {}
        return cls(
            name=_require(data, "name", "loot entry", part_name),
            chance=data.get("chance", 1.0),
            quantity=QuantityRange(qty.get("min", 1), qty.get("max", 1)),
        )


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_finite(value) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value))


def _is_probability(value) -> bool:
    return _is_finite(value) and 0.0 <= value <= 1.0


def _require(data: Mapping[str, Any], key: str, owner: str, part_name: str = None):
    if key not in data:
        raise PlantDataError(f"{owner} record is missing '{key}'", part_name=part_name)
    return data[key]


def _optional_range(value, part_name: str = None) -> Optional[Tuple[float, float]]:
    if value is None:
        return None
    try:
        low, high = value
    except (TypeError, ValueError):
        raise PlantDataError(f"temperatureRange must be a [low, high] pair, got {value!r}", part_name=part_name)
    return (low, high)


@dataclass(frozen=True)
class PlantPartDefinition:
    """
    A countable anatomical part of a plant (leaves, flowers, trunk, ...).

    ``current_qty`` moves one unit at a time between 0 and ``max_qty``.
    ``grow_prob``/``drop_prob`` are base per-tick probabilities before any
    environmental scaling. A part with ``trigger_from`` only grows while the
    named prerequisite part is mature.
    """
    name: str
    max_qty: int
    current_qty: int = 0
    grow_prob: float = 0.0
    drop_prob: float = 0.0
    loot: Tuple[LootDrop, ...] = ()
    dropped_loot: Tuple[LootDrop, ...] = ()
    trigger_from: Optional[str] = None
    category: PartCategory = PartCategory.OTHER
    hidden: bool = False
    stamina_cost: Optional[int] = None

    # Overrides of the plant-level preferences
    water_preference: Optional[float] = None
    light_preference: Optional[float] = None
    temperature_range: Optional[Tuple[float, float]] = None

    @property
    def structural(self) -> bool:
        return self.category.is_structural

    @property
    def fill_ratio(self) -> float:
        if self.max_qty <= 0:
            return 0.0
        return self.current_qty / self.max_qty

    def with_qty(self, qty: int) -> "PlantPartDefinition":
        return replace(self, current_qty=qty)

    def validate(self, plant_id: str = None):
        """Raise PlantDataError if any numeric field is corrupt."""
        def fail(message: str):
            raise PlantDataError(message, plant_id=plant_id, part_name=self.name)

        if not isinstance(self.name, str) or not self.name:
            raise PlantDataError(f"part name must be a non-empty string, got {self.name!r}", plant_id=plant_id)
        if not _is_int(self.max_qty) or self.max_qty < 0:
            fail(f"max_qty must be a non-negative integer, got {self.max_qty!r}")
        if not _is_int(self.current_qty):
            fail(f"current_qty must be an integer, got {self.current_qty!r}")
        if not 0 <= self.current_qty <= self.max_qty:
            fail(f"current_qty {self.current_qty} outside [0, {self.max_qty}]")
        for label, value in (("grow_prob", self.grow_prob), ("drop_prob", self.drop_prob)):
            if not _is_probability(value):
                fail(f"{label} must be a finite probability in [0, 1], got {value!r}")
        for drop in self.loot + self.dropped_loot:
            if not _is_probability(drop.chance):
                fail(f"loot '{drop.name}' chance must be in [0, 1], got {drop.chance!r}")
            if not (_is_int(drop.quantity.min) and _is_int(drop.quantity.max)):
                fail(f"loot '{drop.name}' quantity range must be integers")
        for label, value in (("water_preference", self.water_preference),
                             ("light_preference", self.light_preference)):
            if value is not None and not _is_finite(value):
                fail(f"{label} must be finite, got {value!r}")
        if self.temperature_range is not None and not all(_is_finite(v) for v in self.temperature_range):
            fail(f"temperature_range must be finite, got {self.temperature_range!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlantPartDefinition":
        """Build from a persisted camelCase record."""
        name = _require(data, "name", "part")
        if not isinstance(name, str) or not name:
            raise PlantDataError(f"part name must be a non-empty string, got {name!r}")
        if "category" in data:
            try:
                category = PartCategory(data["category"])
            except ValueError:
                raise PlantDataError(f"unknown part category {data['category']!r}", part_name=name)
        else:
            category = PartCategory.infer(name, bool(data.get("structural", False)))
        return cls(
            name=name,
            max_qty=_require(data, "maxQty", "part", name),
            current_qty=data.get("currentQty", 0),
            grow_prob=data.get("growProb", 0.0),
            drop_prob=data.get("dropProb", 0.0),
            loot=tuple(LootDrop.from_dict(d, name) for d in data.get("loot") or ()),
            dropped_loot=tuple(LootDrop.from_dict(d, name) for d in data.get("droppedLoot") or ()),
            trigger_from=data.get("triggerFrom"),
            category=category,
            hidden=bool(data.get("hidden", False)),
            stamina_cost=data.get("staminaCost"),
            water_preference=data.get("waterPreference"),
            light_preference=data.get("lightPreference"),
            temperature_range=_optional_range(data.get("temperatureRange"), name),
        )


@dataclass(frozen=True)
class PlantProperties:
    """Plant-wide growth settings and the part list."""
    parts: Tuple[PlantPartDefinition, ...] = ()
    vegetation_contribution: float = 0.0
    initial_vegetation_ratio: float = 0.0

    # Defaults for parts without overrides
    water_preference: Optional[float] = None
    light_preference: Optional[float] = None
    temperature_range: Optional[Tuple[float, float]] = None

    def validate(self, plant_id: str = None):
        """Raise PlantDataError if a plant-level number is corrupt."""
        for label, value in (("vegetation_contribution", self.vegetation_contribution),
                             ("initial_vegetation_ratio", self.initial_vegetation_ratio)):
            if not _is_finite(value):
                raise PlantDataError(f"{label} must be finite, got {value!r}", plant_id=plant_id)
        for label, value in (("water_preference", self.water_preference),
                             ("light_preference", self.light_preference)):
            if value is not None and not _is_finite(value):
                raise PlantDataError(f"{label} must be finite, got {value!r}", plant_id=plant_id)
        if self.temperature_range is not None and not all(_is_finite(v) for v in self.temperature_range):
            raise PlantDataError(f"temperature_range must be finite, got {self.temperature_range!r}",
                                 plant_id=plant_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlantProperties":
        return cls(
            parts=tuple(PlantPartDefinition.from_dict(p) for p in data.get("parts") or ()),
            vegetation_contribution=data.get("vegetationContribution", 0.0),
            initial_vegetation_ratio=data.get("initialVegetationRatio", 0.0),
            water_preference=data.get("waterPreference"),
            light_preference=data.get("lightPreference"),
            temperature_range=_optional_range(data.get("temperatureRange")),
        )


@dataclass(frozen=True)
class Plant:
    """A plant instance as stored in a chunk."""
    plant_id: str
    name: str
    plant_properties: Optional[PlantProperties] = None

    @property
    def parts(self) -> Tuple[PlantPartDefinition, ...]:
        if self.plant_properties is None:
            return ()
        return self.plant_properties.parts

    def part(self, name: str) -> Optional[PlantPartDefinition]:
        for p in self.parts:
            if p.name == name:
                return p
        return None

    def with_parts(self, parts: Iterable[PlantPartDefinition]) -> "Plant":
        properties = self.plant_properties or PlantProperties()
        return replace(self, plant_properties=replace(properties, parts=tuple(parts)))

    @property
    def total_qty(self) -> int:
        return sum(p.current_qty for p in self.parts)

    @property
    def total_max_qty(self) -> int:
        return sum(p.max_qty for p in self.parts)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Plant":
        name = data.get("name", data.get("id", "unknown"))
        if isinstance(name, Mapping):
            # Localized name tables: keep the English entry as display name
            name = name.get("en") or next(iter(name.values()), "unknown")
        properties = data.get("plantProperties")
        return cls(
            plant_id=data.get("id", "unknown"),
            name=name,
            plant_properties=PlantProperties.from_dict(properties) if properties is not None else None,
        )


@dataclass(frozen=True)
class ChunkEnvironmentSnapshot:
    """
    Read-only physical attributes of a plant's location.

    Moisture, light, wind, vegetation and human presence are 0-100 scales;
    temperature is in degrees C. ``season`` may be absent, in which case the
    game clock decides.
    """
    moisture: float = 50.0
    light_level: float = 50.0
    temperature: float = 20.0
    wind_level: float = 0.0
    season: Optional[Season] = None
    vegetation_density: float = 0.0
    human_presence: float = 0.0
    nutrition: float = 0.0
    creature_attraction: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChunkEnvironmentSnapshot":
        season = data.get("season")
        return cls(
            moisture=data.get("moisture", 50.0),
            light_level=data.get("lightLevel", 50.0),
            temperature=data.get("temperature", 20.0),
            wind_level=data.get("windLevel", 0.0),
            season=Season.parse(season) if season is not None else None,
            vegetation_density=data.get("vegetationDensity", 0.0),
            human_presence=data.get("humanPresence", 0.0),
            nutrition=data.get("nutrition", 0.0),
            creature_attraction=data.get("creatureAttraction", 0.0),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "moisture": self.moisture,
            "lightLevel": self.light_level,
            "temperature": self.temperature,
            "windLevel": self.wind_level,
            "season": self.season.value if self.season else None,
            "vegetationDensity": self.vegetation_density,
            "humanPresence": self.human_presence,
            "nutrition": self.nutrition,
            "creatureAttraction": self.creature_attraction,
        }
