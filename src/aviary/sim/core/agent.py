from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from pygame.math import Vector2

from ..utils.math2d import normalize_angle, polar_to_vector

# Approximate radius of the bird graphic per unit of size.
RADIUS_PER_SIZE = 100.0


class Behavior(str, Enum):
    SKITTISH = "skittish"
    FRIENDLY = "friendly"
    NEUTRAL = "neutral"


BEHAVIOR_COLORS = {
    Behavior.SKITTISH: "#a1d8dd",
    Behavior.FRIENDLY: "#bfffcd",
    Behavior.NEUTRAL: "#dfd6d6",
}


@dataclass(slots=True)
class Bird:
    id: int
    position: Vector2
    speed: float
    heading: float
    behavior: Behavior
    size: float
    rotation_amplitude: float = 0.0
    rotation_frequency: float = 0.0
    scale_amplitude: float = 0.0
    scale_frequency: float = 0.0
    phase_offset: float = 0.0
    prev_heading: float = -90.0
    scale: float = 1.0
    wingspan: float = 1.0
    smoothed_angular_velocity: float = 0.0
    spooked: bool = False
    enthralled: bool = False
    radius: float = field(init=False)

    def __post_init__(self) -> None:
        self.behavior = Behavior(self.behavior)
        numbers = (
            self.position.x,
            self.position.y,
            self.speed,
            self.heading,
            self.size,
            self.rotation_amplitude,
            self.rotation_frequency,
            self.scale_amplitude,
            self.scale_frequency,
            self.phase_offset,
        )
        if not all(math.isfinite(value) for value in numbers):
            raise ValueError(f"bird {self.id} has non-finite parameters")
        if self.size <= 0.0:
            raise ValueError(f"bird {self.id} size must be positive, got {self.size}")
        if self.speed < 0.0:
            raise ValueError(f"bird {self.id} speed must be non-negative, got {self.speed}")
        self.position = Vector2(self.position)
        self.heading = normalize_angle(self.heading)
        self.radius = self.size * RADIUS_PER_SIZE

    @property
    def velocity(self) -> Vector2:
        return polar_to_vector(self.speed, self.heading)

    @property
    def color(self) -> str:
        return BEHAVIOR_COLORS[self.behavior]
