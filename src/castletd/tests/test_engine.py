import pytest

from castletd.core.config import GameConfig
from castletd.core.engine import Engine
from castletd.core.model.path import path_from_points


def test_engine_generates_path_from_config() -> None:
    engine = Engine(GameConfig(seed=7))
    assert len(engine.path) == 9
    assert engine.phase == "RUNNING"
    assert engine.state.castle_health == 5
    assert engine.state.gold == 100


def test_same_seed_is_deterministic() -> None:
    a = Engine(GameConfig(seed=21))
    b = Engine(GameConfig(seed=21))
    for engine in (a, b):
        engine.act("PLACE_TOWER", {"x": 150, "y": 210, "kind": "basic"})
        for _ in range(1200):
            engine.tick()
    assert a.observe() == b.observe()


def test_placement_spends_gold_and_second_attempt_is_rejected() -> None:
    engine = Engine(GameConfig(seed=1))

    tower = engine.act("PLACE_TOWER", {"x": 100, "y": 100, "kind": "triple"})
    assert tower is not None
    assert engine.state.gold == 0

    assert engine.act("PLACE_TOWER", {"x": 120, "y": 100}) is None
    assert engine.state.gold == 0
    assert len(engine.state.towers) == 1


@pytest.mark.parametrize("payload", [None, {}, {"x": 10}, {"y": 10}])
def test_incomplete_placement_payload_is_ignored(payload) -> None:
    engine = Engine(GameConfig(seed=1))
    assert engine.act("PLACE_TOWER", payload) is None
    assert engine.state.gold == 100


def test_unknown_action_raises() -> None:
    engine = Engine(GameConfig(seed=1))
    with pytest.raises(ValueError):
        engine.act("SELL_TOWER", {})


def test_pause_freezes_the_clock() -> None:
    engine = Engine(GameConfig(seed=1))
    engine.tick()
    clock = engine.state.clock_ms

    assert engine.act("PAUSE_TOGGLE") is True
    assert engine.tick() is None
    assert engine.step(1.0) is None
    assert engine.state.clock_ms == clock

    assert engine.act("PAUSE_TOGGLE") is False
    engine.tick()
    assert engine.state.clock_ms > clock


def test_step_runs_fixed_frame_ticks() -> None:
    engine = Engine(GameConfig(seed=1))
    engine.step(0.5)
    assert abs(engine.state.clock_ms - 500.0) <= engine.frame_ms + 1e-6

    short = Engine(GameConfig(seed=1))
    short.step(0.001)
    assert short.state.clock_ms == 0.0


def test_last_castle_health_breakthrough_ends_the_game() -> None:
    cfg = GameConfig(seed=1, castle_health=1, spawn_interval_ms=0.0)
    engine = Engine(cfg, path=path_from_points(800, 400, [(0, 200), (3, 200)]))

    assert engine.tick() == "game lost"
    assert engine.state.castle_health == 0
    assert engine.phase == "GAME_OVER"

    clock = engine.state.clock_ms
    assert engine.tick() is None
    assert engine.step(1.0) is None
    assert engine.state.clock_ms == clock
    assert engine.act("PLACE_TOWER", {"x": 10, "y": 10}) is None


def test_stationary_enemy_dies_to_three_basic_shots(straight_path) -> None:
    cfg = GameConfig(seed=4, enemy_speed=0.0)
    engine = Engine(cfg, path=straight_path)
    tower = engine.act("PLACE_TOWER", {"x": 10, "y": 200, "kind": "basic"})
    assert tower is not None

    kill_clock = None
    while engine.state.clock_ms < 5500.0:
        engine.tick()
        if kill_clock is None and engine.state.kills:
            kill_clock = engine.state.clock_ms

    assert kill_clock is not None and kill_clock >= 3000.0
    assert tower.shots_fired == 3
    assert engine.state.kills == 1
    assert 20 <= engine.state.gold <= 29
    assert engine.state.gold == engine.state.gold_earned
    assert engine.state.enemies == []


def test_economy_and_health_invariants_over_a_long_run() -> None:
    cfg = GameConfig(seed=2024)
    engine = Engine(cfg)
    engine.act("PLACE_TOWER", {"x": 200, "y": 230, "kind": "basic"})

    s = engine.state
    last_health = s.castle_health
    for _ in range(60 * 90):
        if engine.tick() is not None:
            break
        assert s.castle_health <= last_health
        last_health = s.castle_health
        assert s.gold == cfg.starting_gold - s.gold_spent + s.gold_earned
        assert all(e.alive for e in s.enemies)
        if s.gold >= 100 and len(s.towers) < 3:
            engine.act("PLACE_TOWER", {"x": 400, "y": 170, "kind": "triple"})

    assert engine.state.game_over == (engine.state.castle_health <= 0)
    assert engine.state.game_over


def test_observe_reports_entities(straight_path) -> None:
    engine = Engine(GameConfig(seed=3, spawn_interval_ms=0.0), path=straight_path)
    engine.act("PLACE_TOWER", {"x": 30, "y": 200})
    engine.tick()

    obs = engine.observe()
    assert obs["phase"] == "RUNNING"
    assert obs["path"] == [(0.0, 200.0), (800.0, 200.0)]
    assert len(obs["enemies"]) == 1
    assert obs["enemies"][0]["progress"] == 0.0
    assert obs["towers"][0]["kind"] == "basic"
    assert obs["towers"][0]["last_shot_ms"] == pytest.approx(engine.frame_ms)


def test_configured_tower_cost_is_charged() -> None:
    engine = Engine(GameConfig(seed=1, tower_costs={"basic": 50}))

    first = engine.act("PLACE_TOWER", {"x": 100, "y": 100, "kind": "basic"})
    second = engine.act("PLACE_TOWER", {"x": 200, "y": 100, "kind": "basic"})
    assert first is not None and second is not None
    assert (first.cost, second.cost) == (50, 50)
    assert engine.state.gold == 0

    # kinds without an entry keep their table price
    assert engine.config.tower_cost("triple") == 100
    with pytest.raises(KeyError):
        engine.act("PLACE_TOWER", {"x": 10, "y": 10, "kind": "laser"})
