from __future__ import annotations

import random
from typing import Sequence, TypeVar

from pygame.math import Vector2

T = TypeVar("T")


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_int_range(self, low: int, high: int) -> int:
        return self._random.randrange(low, high)

    def next_point(self, width: float, height: float) -> Vector2:
        return Vector2(self._random.uniform(0.0, width), self._random.uniform(0.0, height))

    def sample_choice(self, items: Sequence[T]) -> T | None:
        if not items:
            return None
        return self._random.choice(items)
