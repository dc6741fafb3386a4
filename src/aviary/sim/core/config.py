from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml


@dataclass
class FlightConfig:
    fps: float = 60.0
    base_size: float = 2.0
    background_speed: float = 1.5
    speed_decay: float = 0.99
    enthrall_speed: float = 0.2
    escape_speed: float = 8.0
    max_angular_velocity: float = 25.0
    creature_observation_range: float = 3.0
    obstacle_observation_range: float = 1.0
    viewport_margin: float = 100.0
    steering_weight: float = 0.9
    skittish_flee_boost: float = 5.0
    skittish_avoid_boost: float = 0.1
    contact_distance: float = 5.0
    # Heading the bird graphic points at before any transform (up, in screen space).
    rest_heading: float = -90.0
    smoothing_keep: float = 0.6
    wingspan_open: float = 1.2
    wingspan_fold: float = 0.6
    wingspan_reference_velocity: float = 25.0


@dataclass
class SpawnConfig:
    min_birds: int = 10
    max_birds: int = 20
    size_range: tuple[float, float] = (0.2, 0.7)
    speed_range: tuple[float, float] = (0.5, 1.0)
    rotation_amplitude_range: tuple[float, float] = (0.0, 0.5)
    rotation_frequency_range: tuple[float, float] = (0.05, 0.2)
    scale_amplitude_range: tuple[float, float] = (0.0, 0.2)
    scale_frequency_range: tuple[float, float] = (1.0 / 40.0, 1.0 / 20.0)
    max_placement_attempts: int = 1000
    behaviors: List[str] = field(default_factory=list)


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 60.0
    viewport_width: float = 1280.0
    viewport_height: float = 720.0
    seed: int = 42
    config_version: str = "v1"
    obstacle: Optional[tuple[float, float, float, float]] = None
    flight: FlightConfig = field(default_factory=FlightConfig)
    spawn: SpawnConfig = field(default_factory=SpawnConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text())
        return load_config(data or {})


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 2


_RANGE_KEYS = (
    "size_range",
    "speed_range",
    "rotation_amplitude_range",
    "rotation_frequency_range",
    "scale_amplitude_range",
    "scale_frequency_range",
)


def load_config(raw: dict) -> SimulationConfig:
    default_spawn = SpawnConfig()

    def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        return default

    flight = FlightConfig(**raw.get("flight", {}))
    spawn_raw = raw.get("spawn", {})
    spawn = SpawnConfig(
        **{k: v for k, v in spawn_raw.items() if k not in _RANGE_KEYS},
        **{k: _pair(spawn_raw.get(k), getattr(default_spawn, k)) for k in _RANGE_KEYS},
    )
    obstacle_raw = raw.get("obstacle")
    obstacle = None
    if obstacle_raw is not None:
        if not isinstance(obstacle_raw, (tuple, list)) or len(obstacle_raw) != 4:
            raise ValueError(f"obstacle must be [left, top, right, bottom], got {obstacle_raw!r}")
        obstacle = tuple(float(v) for v in obstacle_raw)
    sim_values = {k: v for k, v in raw.items() if k not in {"flight", "spawn", "obstacle"}}
    return SimulationConfig(flight=flight, spawn=spawn, obstacle=obstacle, **sim_values)


def load_app_config(raw: dict) -> AppConfig:
    return AppConfig(
        simulation=load_config(raw.get("simulation", {})),
        broadcast_interval=int(raw.get("broadcast_interval", 2)),
    )
