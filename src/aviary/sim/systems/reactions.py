from __future__ import annotations

from pygame.math import Vector2

from ..core.agent import Behavior, Bird
from ..core.config import FlightConfig
from ..core.obstacle import Obstacle
from ..utils.math2d import direction_angle, weighted_mean_angle


def observe_creature(bird: Bird, creature: Vector2, flight: FlightConfig) -> None:
    dist = bird.position.distance_to(creature)

    if dist >= bird.radius * flight.creature_observation_range:
        # Out of sight. Leaving range re-arms both one-shot flags.
        if bird.enthralled:
            bird.enthralled = False
            bird.speed = flight.background_speed
        if bird.spooked:
            bird.spooked = False
        return

    weight = flight.steering_weight
    if bird.behavior is Behavior.SKITTISH:
        if not bird.spooked:
            bird.speed += flight.skittish_flee_boost
            bird.spooked = True
        bird.heading = weighted_mean_angle(bird.heading, direction_angle(creature, bird.position), weight)
    elif bird.behavior is Behavior.NEUTRAL:
        # Turns away without speeding up, so it can be ridden around.
        bird.heading = weighted_mean_angle(bird.heading, direction_angle(creature, bird.position), weight)
    elif bird.behavior is Behavior.FRIENDLY:
        bird.enthralled = True
        if dist > flight.contact_distance:
            bird.heading = weighted_mean_angle(bird.heading, direction_angle(bird.position, creature), weight)
            bird.speed = flight.enthrall_speed
        else:
            # Center on the creature: any heading would spin wildly.
            bird.speed = 0.0
    else:
        raise ValueError(f"unhandled behavior {bird.behavior!r}")


def observe_obstacle(bird: Bird, obstacle: Obstacle, flight: FlightConfig) -> bool:
    """Steer away from the obstacle. Returns True when the bird is trapped inside it."""
    if obstacle.contains(bird.position):
        bird.speed = flight.escape_speed
        return True

    nearest = obstacle.nearest_point(bird.position)
    dist = bird.position.distance_to(nearest)
    if dist < bird.radius * flight.obstacle_observation_range:
        bird.heading = weighted_mean_angle(bird.heading, direction_angle(nearest, bird.position), flight.steering_weight)
        if bird.behavior is Behavior.SKITTISH:
            bird.speed += flight.skittish_avoid_boost
    return False
