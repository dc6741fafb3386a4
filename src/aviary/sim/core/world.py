from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, List, Optional, Sequence

from pygame.math import Vector2

from .agent import Bird
from .config import SimulationConfig
from .obstacle import Obstacle, RectObstacle
from .rng import DeterministicRng
from ..systems import flight, metrics as metrics_system, reactions, spawn
from ..types.metrics import TickMetrics
from ..types.snapshot import Pose, Snapshot, SnapshotEnvironment, SnapshotMetadata, SnapshotViewport

logger = logging.getLogger(__name__)


class World:
    """Owns the bird population and the creature/obstacle it reacts to.

    ``set_creature`` and ``set_obstacle`` may be called between ticks; each
    tick reads both once so every bird sees the same environment.
    """

    def __init__(self, config: SimulationConfig, birds: Optional[Sequence[Bird]] = None):
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._width = config.viewport_width
        self._height = config.viewport_height
        self._creature: Vector2 | None = None
        self._obstacle: Obstacle | None = self._configured_obstacle()
        self._birds: List[Bird] = []
        self._poses: List[Pose] = []
        self._time = 0.0
        self._metrics: TickMetrics | None = None
        self._fixed_birds = list(birds) if birds is not None else None
        self._bootstrap_population()

    @property
    def birds(self) -> List[Bird]:
        return self._birds

    @property
    def poses(self) -> List[Pose]:
        return self._poses

    @property
    def creature(self) -> Vector2 | None:
        return self._creature

    @property
    def obstacle(self) -> Obstacle | None:
        return self._obstacle

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def viewport(self) -> tuple[float, float]:
        return self._width, self._height

    def _configured_obstacle(self) -> Obstacle | None:
        if self._config.obstacle is None:
            return None
        return RectObstacle.from_bounding_box(*self._config.obstacle)

    def _bootstrap_population(self) -> None:
        if self._fixed_birds is not None:
            self._birds = self._fixed_birds
        else:
            self._birds = spawn.sample_population(
                self._rng, self._config, self._obstacle, viewport=(self._width, self._height)
            )
        logger.info("Spawned %d birds (seed=%d)", len(self._birds), self._config.seed)

    def reset(self) -> None:
        if self._fixed_birds is not None:
            raise RuntimeError("cannot reset a world built from explicit birds")
        # Viewport and obstacle come from the client layout and survive a reset.
        self._rng.reset()
        self._creature = None
        self._poses = []
        self._time = 0.0
        self._metrics = None
        self._bootstrap_population()

    def set_creature(self, point: Vector2 | Sequence[float] | None) -> None:
        self._creature = None if point is None else Vector2(point)

    def set_obstacle(self, obstacle: Obstacle | None) -> None:
        self._obstacle = obstacle

    def resize(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"viewport must be positive, got {width}x{height}")
        self._width = float(width)
        self._height = float(height)

    def step(self, tick: int) -> TickMetrics:
        return self.tick(tick * self._config.time_step, tick)

    def tick(self, time: float, tick: int | None = None) -> TickMetrics:
        start = perf_counter()
        flight_config = self._config.flight
        width = self._width
        height = self._height
        creature = None if self._creature is None else Vector2(self._creature)
        obstacle = self._obstacle

        poses: List[Pose] = []
        trapped = 0
        for bird in self._birds:
            pose = flight.iterate(bird, time, width, height, flight_config)
            if creature is not None:
                reactions.observe_creature(bird, creature, flight_config)
            if obstacle is not None and reactions.observe_obstacle(bird, obstacle, flight_config):
                trapped += 1
                logger.debug("Bird %d trapped at (%.1f, %.1f), escaping", bird.id, bird.position.x, bird.position.y)
            poses.append(pose)

        self._poses = poses
        self._time = time
        if tick is None:
            tick = self._metrics.tick + 1 if self._metrics is not None else 0
        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(tick, self._birds, trapped, duration_ms)
        return self._metrics

    def snapshot(self, tick: int) -> Snapshot:
        metrics = self._metrics
        if metrics is None:
            metrics = metrics_system.create_metrics(tick, self._birds, 0, 0.0)
        poses = {pose.id: pose for pose in self._poses}
        birds: List[Dict[str, Any]] = []
        for bird in self._birds:
            pose = poses.get(bird.id)
            birds.append(
                {
                    "id": bird.id,
                    "size": bird.size,
                    "x": pose.x if pose else bird.position.x,
                    "y": pose.y if pose else bird.position.y,
                    "heading": pose.heading if pose else bird.heading,
                    "scale": pose.scale if pose else bird.scale,
                    "wingspan": pose.wingspan if pose else bird.wingspan,
                    "speed": bird.speed,
                    "behavior": bird.behavior.value,
                    "color": bird.color,
                    "spooked": bird.spooked,
                    "enthralled": bird.enthralled,
                }
            )
        creature = None if self._creature is None else [self._creature.x, self._creature.y]
        obstacle = None if self._obstacle is None else self._obstacle.as_payload()
        return Snapshot(
            tick=tick,
            time=self._time,
            metrics=metrics,
            birds=birds,
            viewport=SnapshotViewport(
                width=self._width,
                height=self._height,
                margin=self._config.flight.viewport_margin,
            ),
            environment=SnapshotEnvironment(creature=creature, obstacle=obstacle),
            metadata=SnapshotMetadata(
                sim_dt=self._config.time_step,
                tick_rate=1.0 / self._config.time_step if self._config.time_step > 0 else 0.0,
                seed=self._config.seed,
                config_version=self._config.config_version,
            ),
        )
