"""
Canopy - Errors
Typed failures for corrupt data, bad configuration and refused harvests.
"""


class CanopyError(Exception):
    """Base class for all plant simulation errors."""
    pass


class ConfigurationError(CanopyError):
    """Tunable constants are malformed."""
    pass


class PlantDataError(CanopyError, ValueError):
    """Plant or part data is corrupt (non-finite numbers, broken dependencies)."""

    def __init__(self, message: str, plant_id: str = None, part_name: str = None):
        self.plant_id = plant_id
        self.part_name = part_name
        location = ""
        if plant_id:
            location += f"plant '{plant_id}'"
        if part_name:
            location += f"{', ' if location else ''}part '{part_name}'"
        super().__init__(f"{location}: {message}" if location else message)


class HarvestError(CanopyError):
    """A harvest request was refused."""

    key = "cantHarvest"

    def __init__(self, message: str, part_name: str = None):
        self.part_name = part_name
        super().__init__(message)


class PartNotFoundError(HarvestError):
    key = "cantHarvest_partNotFound"


class HiddenPartError(HarvestError):
    key = "cantHarvest_hiddenPart"


class PartDepletedError(HarvestError):
    key = "cantHarvest_noMoreParts"


class InsufficientStaminaError(HarvestError):
    key = "cantHarvest_noStamina"

    def __init__(self, message: str, part_name: str = None, required: int = 0, available: float = 0):
        self.required = required
        self.available = available
        super().__init__(message, part_name)
