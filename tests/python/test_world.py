from __future__ import annotations

import pytest
from pygame.math import Vector2
from pytest import approx

from aviary.sim.core.agent import Behavior
from aviary.sim.core.config import SimulationConfig, SpawnConfig
from aviary.sim.core.obstacle import RectObstacle
from aviary.sim.core.world import World
from conftest import make_bird


def run_steps(config: SimulationConfig, steps: int):
    world = World(config)
    world.set_creature((640.0, 360.0))
    history = []
    for tick in range(steps):
        world.step(tick)
        history.append([(round(p.x, 6), round(p.y, 6), round(p.heading, 6)) for p in world.poses])
    return history


def test_deterministic_steps():
    config = SimulationConfig(seed=1234, obstacle=(400.0, 200.0, 880.0, 520.0))
    result_a = run_steps(config, 120)
    config_b = SimulationConfig(seed=1234, obstacle=(400.0, 200.0, 880.0, 520.0))
    result_b = run_steps(config_b, 120)
    assert result_a == result_b


def test_tick_without_environment_only_moves_birds():
    bird = make_bird(Behavior.FRIENDLY, position=(100.0, 100.0), heading=0.0, speed=1.0, prev_heading=0.0)
    world = World(SimulationConfig(), birds=[bird])
    metrics = world.tick(0.0)
    assert metrics.population == 1
    assert metrics.enthralled == 0
    assert bird.position.x == approx(101.0)
    assert len(world.poses) == 1


def test_creature_reaction_runs_after_motion():
    bird = make_bird(Behavior.FRIENDLY, position=(100.0, 100.0), heading=0.0, speed=1.0, size=0.5)
    world = World(SimulationConfig(), birds=[bird])
    world.set_creature((150.0, 100.0))
    world.tick(0.0)
    assert bird.enthralled
    assert bird.speed == approx(world._config.flight.enthrall_speed)
    # pose was taken before the reaction changed anything
    assert world.poses[0].x == approx(101.0)

    world.set_creature(None)
    world.tick(1.0 / 60.0)
    assert bird.enthralled


def test_all_birds_share_one_environment_snapshot():
    point = Vector2(50.0, 50.0)
    birds = [
        make_bird(Behavior.SKITTISH, position=(40.0, 50.0), bird_id=0),
        make_bird(Behavior.SKITTISH, position=(60.0, 50.0), bird_id=1),
    ]
    world = World(SimulationConfig(), birds=birds)
    world.set_creature(point)
    point.x = 5000.0
    metrics = world.tick(0.0)
    assert metrics.spooked == 2
    assert world.creature == Vector2(50.0, 50.0)


def test_trapped_birds_are_counted_and_escape():
    bird = make_bird(position=(500.0, 300.0), speed=1.0, prev_heading=0.0)
    world = World(SimulationConfig(), birds=[bird])
    world.set_obstacle(RectObstacle(400.0, 200.0, 600.0, 400.0))
    metrics = world.tick(0.0)
    assert metrics.trapped == 1
    assert bird.speed == approx(world._config.flight.escape_speed)


def test_resize_changes_wrap_extent():
    bird = make_bird(position=(195.0, 50.0), heading=0.0, speed=10.0)
    world = World(SimulationConfig(), birds=[bird])
    world.resize(100.0, 100.0)
    world.tick(0.0)
    assert bird.position.x == approx(-100.0)
    with pytest.raises(ValueError):
        world.resize(0.0, 100.0)


def test_snapshot_contains_metadata_and_bird_pose():
    config = SimulationConfig(seed=7, time_step=0.5, viewport_width=300.0, viewport_height=200.0)
    world = World(config)
    world.set_creature((10.0, 20.0))
    world.set_obstacle(RectObstacle(0.0, 0.0, 5.0, 5.0))
    world.step(3)
    snapshot = world.snapshot(3)

    assert snapshot.time == approx(1.5)
    assert snapshot.viewport.width == approx(300.0)
    assert snapshot.viewport.margin == approx(100.0)
    assert snapshot.metadata.sim_dt == approx(0.5)
    assert snapshot.metadata.tick_rate == approx(2.0)
    assert snapshot.metadata.seed == 7
    assert snapshot.environment.creature == [10.0, 20.0]
    assert snapshot.environment.obstacle["kind"] == "rect"
    assert snapshot.metrics.population == len(world.birds)

    payload = snapshot.birds[0]
    for key in ["id", "size", "x", "y", "heading", "scale", "wingspan", "speed", "behavior", "color"]:
        assert key in payload
    assert payload["x"] == approx(world.poses[0].x)
    assert payload["behavior"] in {"skittish", "friendly", "neutral"}
    assert payload["size"] == approx(world.birds[0].size)


def test_reset_rebuilds_same_population():
    world = World(SimulationConfig(seed=3))
    first = [(b.position.x, b.position.y, b.behavior) for b in world.birds]
    for tick in range(30):
        world.step(tick)
    world.set_creature((1.0, 1.0))
    world.reset()
    assert world.creature is None
    assert world.metrics is None
    assert [(b.position.x, b.position.y, b.behavior) for b in world.birds] == first


def test_reset_keeps_client_layout():
    world = World(SimulationConfig(seed=3))
    obstacle = RectObstacle(100.0, 100.0, 200.0, 150.0)
    world.resize(400.0, 300.0)
    world.set_obstacle(obstacle)
    world.reset()
    assert world.viewport == (400.0, 300.0)
    assert world.obstacle == obstacle
    assert not any(obstacle.contains(b.position) for b in world.birds)
    assert all(0.0 <= b.position.x <= 400.0 and 0.0 <= b.position.y <= 300.0 for b in world.birds)


def test_reset_refuses_explicit_population():
    world = World(SimulationConfig(), birds=[make_bird()])
    with pytest.raises(RuntimeError):
        world.reset()


def test_configured_obstacle_keeps_spawned_birds_outside():
    config = SimulationConfig(
        seed=11,
        viewport_width=200.0,
        viewport_height=200.0,
        obstacle=(0.0, 0.0, 150.0, 200.0),
        spawn=SpawnConfig(min_birds=30, max_birds=31),
    )
    world = World(config)
    assert len(world.birds) == 30
    assert all(not world.obstacle.contains(bird.position) for bird in world.birds)
