import numpy as np
import pytest

from castletd.ai.actions import Noop, Place, action_space_spec, flatten, unflatten
from castletd.ai.env import CastleTDEnv
from castletd.ai.obs import ENEMY_SLOT_FEATURES, SCALAR_KEYS
from castletd.core.config import GameConfig


def test_action_table_round_trip_on_default_canvas() -> None:
    spec = action_space_spec(800, 400, cell_size=40)
    assert len(spec.cell_positions) == 200
    assert spec.tower_kinds == ("basic", "triple")
    assert spec.num_actions == 401
    assert spec.cell_positions[0] == (20.0, 20.0)

    assert flatten(Noop(), spec) == 0
    action = Place(tower_type=1, cell=5)
    assert unflatten(flatten(action, spec), spec) == action
    with pytest.raises(ValueError):
        unflatten(spec.num_actions, spec)


def test_reset_returns_observation_and_mask() -> None:
    env = CastleTDEnv(max_enemies=8)
    obs, info = env.reset(seed=123)

    assert obs.shape == env.observation_space.shape
    assert obs.shape == (len(SCALAR_KEYS) + 8 * len(ENEMY_SLOT_FEATURES),)
    assert obs.dtype == np.float32
    assert obs[1] == pytest.approx(1.0)
    mask = info["action_mask"]
    assert mask.dtype == bool
    assert mask[0]
    assert int(mask.sum()) == env.action_space.n


def test_placement_spends_gold_and_updates_mask() -> None:
    env = CastleTDEnv()
    env.reset(seed=5)

    obs, reward, terminated, truncated, info = env.step(Place(tower_type=0, cell=42))

    assert info["placed"]
    assert not info["invalid_action"]
    assert not terminated and not truncated
    assert env.engine.state.gold == 0
    assert int(info["action_mask"].sum()) == 1

    _, _, _, _, info = env.step(Place(tower_type=1, cell=3))
    assert info["invalid_action"]
    assert not info["placed"]
    assert len(env.engine.state.towers) == 1


def test_out_of_range_action_id_becomes_noop() -> None:
    env = CastleTDEnv()
    env.reset(seed=1)
    _, _, _, _, info = env.step(10_000)
    assert info["invalid_action"]

    strict = CastleTDEnv(strict_invalid_actions=True)
    strict.reset(seed=1)
    with pytest.raises(ValueError):
        strict.step(10_000)


def test_episode_terminates_when_castle_falls() -> None:
    cfg = GameConfig(castle_health=1, spawn_interval_ms=0.0, enemy_speed=200.0)
    env = CastleTDEnv(config=cfg, frames_per_step=30)
    env.reset(seed=9)

    _, reward, terminated, truncated, _ = env.step(0)

    assert terminated
    assert not truncated
    assert reward < 0.0
    with pytest.raises(RuntimeError):
        env.step(0)


def test_truncates_at_max_steps() -> None:
    env = CastleTDEnv(frames_per_step=1, max_steps=3)
    env.reset(seed=2)
    results = [env.step(0) for _ in range(3)]
    assert [r[3] for r in results] == [False, False, True]


def test_step_before_reset_raises() -> None:
    env = CastleTDEnv()
    with pytest.raises(RuntimeError):
        env.step(0)


def test_mask_uses_configured_tower_costs() -> None:
    env = CastleTDEnv(config=GameConfig(tower_costs={"basic": 50, "triple": 100}))
    env.reset(seed=2)
    assert env.action_spec.tower_costs == (50, 100)

    _, _, _, _, info = env.step(Place(tower_type=0, cell=10))
    assert info["placed"]
    assert env.engine.state.gold == 50
    # only the basic tower is still affordable
    assert int(info["action_mask"].sum()) == 1 + len(env.action_spec.cell_positions)
