from types import SimpleNamespace

from castletd.core.config import GameConfig
from castletd.core.engine import Engine
from castletd.core.model.state import new_state
from castletd.core.rules.spawner import step_spawner


def test_first_spawn_waits_for_full_interval(straight_path):
    cfg = GameConfig(seed=3)
    s = new_state(cfg)

    assert step_spawner(s, straight_path, cfg, 3000.0) is None
    enemy = step_spawner(s, straight_path, cfg, 3000.5)

    assert enemy is not None
    assert s.enemies == [enemy]
    assert (enemy.x, enemy.y) == (0.0, 200.0)
    assert enemy.hp == 3.0 and enemy.max_hp == 3.0
    assert enemy.speed == 0.5
    assert 20 <= enemy.worth <= 29
    assert s.last_spawn_ms == 3000.5


def test_spawn_interval_halves_every_rate_increase_interval(straight_path):
    cfg = GameConfig(seed=3)
    s = new_state(cfg)

    step_spawner(s, straight_path, cfg, 10000.0)
    assert s.spawn_interval_ms == 3000.0
    step_spawner(s, straight_path, cfg, 10000.5)
    assert s.spawn_interval_ms == 1500.0
    assert s.spawn_rate_multiplier == 2
    step_spawner(s, straight_path, cfg, 20001.0)
    assert s.spawn_interval_ms == 750.0
    assert s.spawn_rate_multiplier == 4


def test_min_interval_bounds_the_halving(straight_path):
    cfg = GameConfig(seed=3, min_spawn_interval_ms=1000.0)
    s = new_state(cfg)

    for now in (10000.5, 20001.0, 30001.5, 40002.0):
        step_spawner(s, straight_path, cfg, now)

    assert s.spawn_interval_ms == 1000.0
    assert s.spawn_rate_multiplier == 16


def test_spawner_respects_pause_and_game_over(straight_path):
    cfg = SimpleNamespace(
        spawn_rate_increase_interval_ms=10000.0,
        min_spawn_interval_ms=0.0,
        kill_reward_min=10,
        kill_reward_max=10,
        enemy_speed=1.0,
        enemy_health=5.0,
    )
    s = new_state(GameConfig())
    s.paused = True
    assert step_spawner(s, straight_path, cfg, 5000.0) is None
    s.paused = False
    s.game_over = True
    assert step_spawner(s, straight_path, cfg, 5000.0) is None
    s.game_over = False

    enemy = step_spawner(s, straight_path, cfg, 5000.0)
    assert enemy is not None
    assert enemy.worth == 10
    assert enemy.hp == 5.0


def test_engine_spawns_one_enemy_per_interval(straight_path):
    engine = Engine(GameConfig(seed=11), path=straight_path)

    for _ in range(500):
        engine.tick()

    assert len(engine.state.enemies) == 2
    ids = [e.enemy_id for e in engine.state.enemies]
    assert ids == sorted(ids)
