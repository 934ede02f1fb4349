"""
Canopy - Part Event Calendar
Caches each part's next scheduled event tick across ticks.

An entry is only recomputed when the part's conditions change (suitability,
wind, quantity, dependency gate) or its due tick has passed. Callers use it
to skip plants on which no event can possibly fire.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

from ..core.models import ChunkEnvironmentSnapshot, Plant, Season
from ..core.rng import Seed, derive_seed
from ..config import PLANT, PlantConfig
from .suitability import calculate_suitability, resolve_preferences
from .scheduler import schedule_next_event
from .parts import growth_unlocked, validate_plant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarEntry:
    """Next event tick for one part and the conditions it was computed under."""
    due_tick: Optional[int]
    signature: Tuple


class PartEventCalendar:
    """
    Next-event index keyed by (plant_id, part_name).

    Supports:
    - Lazy recomputation when conditions change
    - Earliest due tick per plant
    - Dormancy check (no part can ever fire under current conditions)
    """

    def __init__(self, config: PlantConfig = PLANT):
        self.config = config
        self.entries: Dict[Tuple[str, str], CalendarEntry] = {}
        self.recomputations = 0

    def refresh(
        self,
        plant: Plant,
        chunk: ChunkEnvironmentSnapshot,
        current_tick: int,
        seed: Seed,
    ) -> Dict[str, Optional[int]]:
        """
        Bring the plant's entries up to date.

        Returns:
            Part name -> next event tick (None if no event can occur)
        """
        validate_plant(plant)
        season = chunk.season or Season.from_game_time(current_tick, self.config.ticks_per_season)
        snapshot = {p.name: p for p in plant.parts}
        due: Dict[str, Optional[int]] = {}

        for part in plant.parts:
            result = calculate_suitability(chunk, resolve_preferences(plant, part), season, self.config)
            prerequisite = snapshot[part.trigger_from] if part.trigger_from else None
            unlocked = growth_unlocked(part, prerequisite, self.config)
            signature = (round(result.multiplier, 9), chunk.wind_level, part.current_qty, unlocked)

            key = (plant.plant_id, part.name)
            entry = self.entries.get(key)
            stale = (
                entry is None
                or entry.signature != signature
                or (entry.due_tick is not None and entry.due_tick < current_tick)
            )
            if stale:
                due_tick = schedule_next_event(
                    part,
                    result.multiplier,
                    current_tick,
                    derive_seed(seed, plant.plant_id),
                    wind_level=chunk.wind_level,
                    config=self.config,
                    can_grow=unlocked,
                )
                entry = CalendarEntry(due_tick, signature)
                self.entries[key] = entry
                self.recomputations += 1

            due[part.name] = entry.due_tick

        return due

    def earliest(self, plant_id: str) -> Optional[int]:
        """Earliest scheduled tick across the plant's parts."""
        ticks = [
            e.due_tick for (pid, _), e in self.entries.items()
            if pid == plant_id and e.due_tick is not None
        ]
        return min(ticks) if ticks else None

    def due_parts(self, plant_id: str, tick: int) -> List[str]:
        """Parts whose scheduled event falls on or before ``tick``."""
        return sorted(
            name for (pid, name), e in self.entries.items()
            if pid == plant_id and e.due_tick is not None and e.due_tick <= tick
        )

    def is_dormant(
        self,
        plant: Plant,
        chunk: ChunkEnvironmentSnapshot,
        current_tick: int,
        seed: Seed,
    ) -> bool:
        """
        True when ticking the plant cannot change anything.

        A plant with every part at zero is never dormant: it still has to be
        reported as wilted.
        """
        if not plant.parts:
            return False
        due = self.refresh(plant, chunk, current_tick, seed)
        if all(p.current_qty == 0 for p in plant.parts):
            return False
        return all(tick is None for tick in due.values())

    def forget(self, plant_id: str):
        """Drop every entry of a removed plant."""
        stale = [k for k in self.entries if k[0] == plant_id]
        for key in stale:
            del self.entries[key]
        if stale:
            logger.debug(f"Forgot {len(stale)} calendar entries for {plant_id}")
