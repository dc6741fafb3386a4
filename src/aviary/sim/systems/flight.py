from __future__ import annotations

from ..core.agent import Bird
from ..core.config import FlightConfig
from ..types.snapshot import Pose
from ..utils.math2d import angle_delta, normalize_angle, oscillation


def iterate(bird: Bird, time: float, width: float, height: float, flight: FlightConfig) -> Pose:
    update_velocity(bird, time, flight)
    update_position(bird, width, height, flight.viewport_margin)
    update_scale(bird, time, flight)
    update_wingspan(bird, flight)
    pose = Pose(
        id=bird.id,
        x=bird.position.x,
        y=bird.position.y,
        heading=bird.heading,
        scale=bird.scale,
        wingspan=bird.wingspan,
    )
    bird.prev_heading = bird.heading
    return pose


def update_velocity(bird: Bird, time: float, flight: FlightConfig) -> None:
    # Reactions adjust speed and heading on their own; this is the ambient part.
    if bird.speed > flight.background_speed:
        bird.speed = max(flight.background_speed, bird.speed * flight.speed_decay)
    bird.heading = normalize_angle(
        bird.heading + oscillation(bird.rotation_amplitude, bird.rotation_frequency, time, bird.phase_offset)
    )


def update_position(bird: Bird, width: float, height: float, margin: float) -> None:
    bird.position += bird.velocity

    position = bird.position
    if position.x < -margin:
        position.x = width + margin
    if position.x > width + margin:
        position.x = -margin
    if position.y < -margin:
        position.y = height + margin
    if position.y > height + margin:
        position.y = -margin


def update_scale(bird: Bird, time: float, flight: FlightConfig) -> None:
    # Scale stands in for height above ground.
    bird.scale = flight.base_size + oscillation(bird.scale_amplitude, bird.scale_frequency, time, bird.phase_offset)


def update_wingspan(bird: Bird, flight: FlightConfig) -> None:
    """Fold the wings in proportion to how hard the bird is turning.

    Angular velocity is in degrees/second at the nominal frame rate. It is
    clamped before smoothing: the first frame rotates every bird from the
    rest heading into its sampled heading, which would otherwise read as a
    huge spike.
    """
    momentary = abs(angle_delta(bird.heading, bird.prev_heading)) * flight.fps
    keep = flight.smoothing_keep
    bird.smoothed_angular_velocity = (
        bird.smoothed_angular_velocity * keep + min(momentary, flight.max_angular_velocity) * (1.0 - keep)
    )
    bird.wingspan = flight.wingspan_open - (
        bird.smoothed_angular_velocity / flight.wingspan_reference_velocity
    ) * flight.wingspan_fold
