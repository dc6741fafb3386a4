from __future__ import annotations

import math

from pygame.math import Vector2


def normalize_angle(angle: float) -> float:
    wrapped = angle % 360.0
    # -1e-17 % 360.0 rounds to 360.0
    if wrapped >= 360.0:
        return 0.0
    return wrapped


def angle_delta(current: float, previous: float) -> float:
    """Shortest signed rotation from ``previous`` to ``current`` in degrees."""
    return (current - previous + 180.0) % 360.0 - 180.0


def weighted_mean_angle(x: float, y: float, x_weight: float) -> float:
    """Blend heading ``x`` toward ``y`` along the shorter arc.

    ``x_weight`` is the share kept from ``x``: 1.0 returns ``x``, 0.0 returns
    ``y``. Both are degrees; the result is in ``[0, 360)``.
    """
    yy = (y - x) % 360.0
    if yy < 180.0:
        mm = yy * (1.0 - x_weight)
    else:
        mm = 360.0 * x_weight + yy * (1.0 - x_weight)
    return normalize_angle(mm + x)


def direction_angle(origin: Vector2, target: Vector2) -> float:
    dx = target.x - origin.x
    dy = target.y - origin.y
    if dx * dx + dy * dy < 1e-18:
        return 0.0
    return normalize_angle(math.degrees(math.atan2(dy, dx)))


def polar_to_vector(length: float, angle: float) -> Vector2:
    vector = Vector2()
    vector.from_polar((length, angle))
    return vector


def oscillation(amplitude: float, frequency: float, time: float, phase: float) -> float:
    return amplitude * math.cos(time * 2.0 * math.pi * frequency + phase)
