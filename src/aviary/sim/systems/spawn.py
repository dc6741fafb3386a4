from __future__ import annotations

import logging
import math
from typing import List, Optional, Tuple

from pygame.math import Vector2

from ..core.agent import Behavior, Bird
from ..core.config import SimulationConfig
from ..core.obstacle import Obstacle
from ..core.rng import DeterministicRng

logger = logging.getLogger(__name__)

_BEHAVIORS = [Behavior.SKITTISH, Behavior.FRIENDLY, Behavior.NEUTRAL]


def sample_behaviors(rng: DeterministicRng, count: int, fixed: List[str] | None = None) -> List[Behavior]:
    # Drawn up front so the mix does not depend on placement retries.
    if fixed:
        return [Behavior(fixed[index % len(fixed)]) for index in range(count)]
    return [rng.sample_choice(_BEHAVIORS) for _ in range(count)]


def sample_position(
    rng: DeterministicRng,
    config: SimulationConfig,
    obstacle: Optional[Obstacle],
    viewport: Optional[Tuple[float, float]] = None,
) -> Vector2:
    width, height = viewport or (config.viewport_width, config.viewport_height)
    position = rng.next_point(width, height)
    if obstacle is None:
        return position
    attempts = max(1, config.spawn.max_placement_attempts)
    for _ in range(attempts - 1):
        if not obstacle.contains(position):
            return position
        position = rng.next_point(width, height)
    if obstacle.contains(position):
        # The bird will escape on its first tick.
        logger.warning("Placed bird inside obstacle after %d attempts", attempts)
    return position


def sample_population(
    rng: DeterministicRng,
    config: SimulationConfig,
    obstacle: Optional[Obstacle] = None,
    count: Optional[int] = None,
    viewport: Optional[Tuple[float, float]] = None,
) -> List[Bird]:
    spawn = config.spawn
    flight = config.flight
    if count is None:
        count = rng.next_int_range(spawn.min_birds, max(spawn.min_birds + 1, spawn.max_birds))
    behaviors = sample_behaviors(rng, count, spawn.behaviors)

    birds: List[Bird] = []
    for index in range(count):
        size = rng.next_range(*spawn.size_range)
        position = sample_position(rng, config, obstacle, viewport)
        heading = rng.next_range(0.0, 360.0)
        speed = rng.next_range(*spawn.speed_range)
        birds.append(
            Bird(
                id=index,
                position=position,
                speed=speed,
                heading=heading,
                behavior=behaviors[index],
                size=size,
                rotation_amplitude=rng.next_range(*spawn.rotation_amplitude_range),
                rotation_frequency=rng.next_range(*spawn.rotation_frequency_range),
                scale_amplitude=rng.next_range(*spawn.scale_amplitude_range),
                scale_frequency=rng.next_range(*spawn.scale_frequency_range),
                phase_offset=rng.next_range(0.0, 2.0 * math.pi),
                prev_heading=flight.rest_heading,
            )
        )
    return birds
