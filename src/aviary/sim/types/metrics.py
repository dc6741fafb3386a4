from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    average_speed: float
    average_scale: float
    average_wingspan: float
    spooked: int
    enthralled: int
    trapped: int
    skittish: int
    friendly: int
    neutral: int
    tick_duration_ms: float = 0.0
