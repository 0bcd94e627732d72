# src/castletd/core/rules/spawner.py
from __future__ import annotations

from ..model.entities import Enemy
from ..rng import rand_int

# duck-typed: only reads the state/config fields it needs


def step_spawner(state, path, config, now_ms: float) -> Enemy | None:
    """
    One spawner tick at simulated time `now_ms`.

    - spawns one enemy once more than `spawn_interval_ms` has passed since the
      previous spawn (the first spawn is measured from t=0)
    - every `spawn_rate_increase_interval_ms`, halves the spawn interval and
      doubles the rate multiplier; `min_spawn_interval_ms` bounds the halving
    """
    if getattr(state, "paused", False):
        return None
    if getattr(state, "game_over", False):
        return None

    spawned = None
    if now_ms - state.last_spawn_ms > state.spawn_interval_ms:
        spawned = spawn_enemy(state, path, config)
        state.last_spawn_ms = now_ms

    if now_ms - state.last_rate_increase_ms > config.spawn_rate_increase_interval_ms:
        halved = state.spawn_interval_ms / 2.0
        state.spawn_interval_ms = max(float(config.min_spawn_interval_ms), halved)
        state.spawn_rate_multiplier *= 2
        state.last_rate_increase_ms = now_ms

    return spawned


def spawn_enemy(state, path, config) -> Enemy:
    start = path.start
    worth = rand_int(state, int(config.kill_reward_min), int(config.kill_reward_max))
    enemy = Enemy(
        enemy_id=state.next_entity_id(),
        x=float(start.x),
        y=float(start.y),
        path_index=0,
        speed=float(config.enemy_speed),
        hp=float(config.enemy_health),
        max_hp=float(config.enemy_health),
        worth=int(worth),
    )
    state.enemies.append(enemy)
    return enemy
