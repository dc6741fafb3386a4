from __future__ import annotations

import argparse
import asyncio
import json
import logging
import math
import os
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Set

import uvicorn
import yaml
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from ..logging_config import configure_logging
from ..sim.core.config import AppConfig, SimulationConfig, load_app_config
from ..sim.core.obstacle import obstacle_from_payload
from ..sim.core.world import World

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1, max_queue: int = 120):
        self.config = config
        self.world = World(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.running = False
        self.tick = 0
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque(maxlen=max(1, max_queue))
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._broadcast_task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._broadcast_task is None:
            self._broadcast_task = asyncio.create_task(self._loop())
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def shutdown(self) -> None:
        self.running = False
        if self._broadcast_task is not None:
            self._broadcast_task.cancel()
            try:
                await self._broadcast_task
            except asyncio.CancelledError:
                pass
            self._broadcast_task = None

    async def reset(self) -> None:
        async with self._lock:
            self.world.reset()
            self.tick = 0
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.time_step / self.speed_multiplier)
            if not self.running:
                continue
            async with self._lock:
                self.world.step(self.tick)
                self.tick += 1
            if self.tick % self.broadcast_interval == 0:
                await self._broadcast_snapshot()

    async def set_creature(self, point: Any) -> bool:
        if point is None:
            async with self._lock:
                self.world.set_creature(None)
            return True
        try:
            x, y = float(point[0]), float(point[1])
        except (TypeError, ValueError, IndexError, KeyError):
            logger.warning("Rejected creature position %r", point)
            return False
        async with self._lock:
            self.world.set_creature((x, y))
        return True

    async def set_obstacle(self, payload: Any) -> bool:
        if payload is None:
            async with self._lock:
                self.world.set_obstacle(None)
            return True
        try:
            obstacle = obstacle_from_payload(payload)
        except (TypeError, ValueError) as exc:
            logger.warning("Rejected obstacle payload: %s", exc)
            return False
        async with self._lock:
            self.world.set_obstacle(obstacle)
        return True

    async def resize(self, width: Any, height: Any) -> bool:
        try:
            async with self._lock:
                self.world.resize(float(width), float(height))
        except (TypeError, ValueError) as exc:
            logger.warning("Rejected resize: %s", exc)
            return False
        return True

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    def _serialize_snapshot(self) -> QueuedSnapshot:
        snapshot = self.world.snapshot(self.tick)
        payload = {
            "type": "snapshot",
            "tick": snapshot.tick,
            "payload": {
                "tick": snapshot.tick,
                "time": snapshot.time,
                "metrics": asdict(snapshot.metrics),
                "birds": snapshot.birds,
                "viewport": asdict(snapshot.viewport),
                "environment": asdict(snapshot.environment),
                "metadata": asdict(snapshot.metadata),
            },
        }
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        # Clients may join or leave while a send is awaited.
        for client in list(self.clients):
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
            except Exception as exc:
                logger.warning("Dropping client after failed send: %s", exc)
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)

    async def handle_message(self, payload: Dict[str, Any]) -> None:
        kind = payload.get("type")
        if kind == "ack":
            tick = payload.get("tick")
            if isinstance(tick, int):
                await self.acknowledge(tick)
        elif kind == "creature":
            await self.set_creature(payload.get("point"))
        elif kind == "obstacle":
            await self.set_obstacle(payload.get("obstacle"))
        elif kind == "resize":
            await self.resize(payload.get("width"), payload.get("height"))
        else:
            logger.debug("Ignoring message type %r", kind)


def _load_app_config() -> AppConfig:
    path = os.getenv("AVIARY_CONFIG")
    if not path:
        return AppConfig()
    logger.info("Loading app config from %s", path)
    return load_app_config(yaml.safe_load(Path(path).read_text()) or {})


app_config = _load_app_config()
app = FastAPI(title="Aviary")
controller = SimulationController(app_config.simulation, broadcast_interval=app_config.broadcast_interval)
static_dir = Path(__file__).resolve().parent.parent / "static"
app.mount("/static", StaticFiles(directory=static_dir), name="static")


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.on_event("shutdown")
async def _shutdown() -> None:
    await controller.shutdown()


@app.get("/")
async def index() -> FileResponse:
    return FileResponse(static_dir / "index.html")


@app.get("/api/status")
async def status() -> JSONResponse:
    snapshot = controller.world.snapshot(controller.tick)
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "population": len(controller.world.birds),
            "metrics": asdict(snapshot.metrics),
            "environment": asdict(snapshot.environment),
        }
    )


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.running = True
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.running = False
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.tick})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    try:
        speed = float(payload.get("multiplier", 1.0))
    except (TypeError, ValueError):
        speed = math.nan
    if not math.isfinite(speed):
        logger.warning("Rejected speed multiplier %r", payload.get("multiplier"))
        return JSONResponse({"accepted": False}, status_code=422)
    controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.post("/api/creature")
async def move_creature(payload: dict) -> JSONResponse:
    accepted = await controller.set_creature(payload.get("point"))
    return JSONResponse({"accepted": accepted}, status_code=200 if accepted else 422)


@app.post("/api/obstacle")
async def change_obstacle(payload: dict) -> JSONResponse:
    accepted = await controller.set_obstacle(payload.get("obstacle"))
    return JSONResponse({"accepted": accepted}, status_code=200 if accepted else 422)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    controller._client_last_sent[websocket] = -1
    logger.info("Client connected (%d total)", len(controller.clients))
    await controller._send_pending_snapshots(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                continue
            if isinstance(payload, dict):
                await controller.handle_message(payload)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)
        logger.info("Client disconnected (%d left)", len(controller.clients))


def main() -> None:
    parser = argparse.ArgumentParser(description="Aviary web server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args()
    configure_logging(level=args.log_level)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


__all__ = ["app", "controller", "main"]
