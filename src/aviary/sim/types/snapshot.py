from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .metrics import TickMetrics


@dataclass(frozen=True, slots=True)
class Pose:
    id: int
    x: float
    y: float
    heading: float
    scale: float
    wingspan: float


@dataclass(slots=True)
class Snapshot:
    tick: int
    time: float
    metrics: TickMetrics
    birds: List[Dict[str, Any]]
    viewport: "SnapshotViewport"
    environment: "SnapshotEnvironment"
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotViewport:
    width: float
    height: float
    margin: float


@dataclass(slots=True)
class SnapshotEnvironment:
    creature: Optional[List[float]]
    obstacle: Optional[Dict[str, Any]]


@dataclass(slots=True)
class SnapshotMetadata:
    sim_dt: float
    tick_rate: float
    seed: int
    config_version: str
