from __future__ import annotations

from typing import Iterable

from ..core.agent import Behavior, Bird
from ..types.metrics import TickMetrics


def create_metrics(tick: int, birds: Iterable[Bird], trapped: int, duration_ms: float) -> TickMetrics:
    population = 0
    speed_sum = 0.0
    scale_sum = 0.0
    wingspan_sum = 0.0
    spooked = 0
    enthralled = 0
    counts = {behavior: 0 for behavior in Behavior}
    for bird in birds:
        population += 1
        speed_sum += bird.speed
        scale_sum += bird.scale
        wingspan_sum += bird.wingspan
        spooked += int(bird.spooked)
        enthralled += int(bird.enthralled)
        counts[bird.behavior] += 1
    inv = 1.0 / population if population else 0.0
    return TickMetrics(
        tick=tick,
        population=population,
        average_speed=speed_sum * inv,
        average_scale=scale_sum * inv,
        average_wingspan=wingspan_sum * inv,
        spooked=spooked,
        enthralled=enthralled,
        trapped=trapped,
        skittish=counts[Behavior.SKITTISH],
        friendly=counts[Behavior.FRIENDLY],
        neutral=counts[Behavior.NEUTRAL],
        tick_duration_ms=duration_ms,
    )
