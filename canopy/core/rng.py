"""
Canopy - Deterministic Random Source
Seeded generator shared by every stochastic rule in the simulation.

Nothing in the package touches the module-level ``random`` state. Callers
build an ``Rng`` from a seed (or derive a sub-seed first) and hand it down.
"""

from typing import Any, List, Sequence, TypeVar, Union
import hashlib
import random

T = TypeVar("T")

Seed = Union[str, int]


def derive_seed(*components: Any) -> str:
    """
    Compose a sub-seed from a base seed and qualifiers.

    derive_seed("world-1", 250, "leaves") -> "world-1:250:leaves"

    Backslashes and colons inside a component are escaped, so
    ("a:b", "c") and ("a", "b:c") never yield the same seed.
    """
    return ":".join(str(c).replace("\\", "\\\\").replace(":", "\\:") for c in components)


class Rng:
    """
    Seeded pseudo-random generator.

    Supports:
    - Uniform floats in [0, 1)
    - Bounded integers (inclusive)
    - Single and weighted choice
    - Non-mutating shuffles

    Two instances built from the same seed produce the same draw sequence.
    """

    def __init__(self, seed: Seed = 0):
        self.seed = seed
        # str seeds hash through sha512 inside random.Random, stable across runs
        self._random = random.Random(str(seed))

    @property
    def seed_hex(self) -> str:
        """Short stable digest of the seed, for composing sub-seeds."""
        return hashlib.sha256(str(self.seed).encode("utf-8")).hexdigest()[:16]

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[self._random.randrange(len(items))]

    def weighted_choice(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """
        Select one item with probability proportional to its weight.

        Negative weights count as zero. If every weight is zero the first
        item is returned without consuming a draw.
        """
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        if len(items) != len(weights):
            raise ValueError(
                f"Items and weights must have the same length ({len(items)} != {len(weights)})"
            )
        if len(items) == 1:
            return items[0]

        clean = [max(0.0, w) for w in weights]
        total = sum(clean)
        if total == 0:
            return items[0]

        r = self.float() * total
        cumulative = 0.0
        for item, weight in zip(items, clean):
            cumulative += weight
            if r < cumulative:
                return item

        # Floating point rounding
        return items[-1]

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a shuffled copy; the input is left untouched."""
        shuffled = list(items)
        self._random.shuffle(shuffled)
        return shuffled

    def float(self) -> float:
        """Uniform draw in [0, 1)."""
        return self._random.random()

    def int(self, minimum: int, maximum: int) -> int:
        """Uniform integer in [minimum, maximum]; bounds are swapped if reversed."""
        if minimum > maximum:
            minimum, maximum = maximum, minimum
        if minimum == maximum:
            return minimum
        return self._random.randint(minimum, maximum)

    def __repr__(self) -> str:
        return f"Rng(seed={self.seed!r})"


def create_rng(seed: Seed = 0) -> Rng:
    """Build a generator for ``seed``. Default factory for the tick orchestrator."""
    return Rng(seed)
