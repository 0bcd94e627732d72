from __future__ import annotations

import numpy as np

from castletd.core.rules.enemy_motion import path_progress


MAX_ENEMIES = 16
MAX_TOWERS = 32
GOLD_SCALE = 1000.0
CLOCK_SCALE = 120_000.0
SCALAR_KEYS = (
    "gold_norm",
    "castle_health_norm",
    "clock_norm",
    "spawn_interval_norm",
    "enemy_count_norm",
    "tower_count_norm",
)
ENEMY_SLOT_FEATURES = ("exists", "x_norm", "y_norm", "hp_frac", "progress")


def observation_size(max_enemies: int = MAX_ENEMIES) -> int:
    return len(SCALAR_KEYS) + max_enemies * len(ENEMY_SLOT_FEATURES)


def build_observation(state, path, config, *, max_enemies: int = MAX_ENEMIES) -> np.ndarray:
    """
    Flat float32 observation: scalars first, then `max_enemies` enemy slots.

    Enemies are listed in spawn order (oldest first), which is also the order
    towers scan them in. Missing slots are zero.
    """
    width = float(max(1, config.width))
    height = float(max(1, config.height))
    start_health = float(max(1, config.castle_health))
    start_interval = float(config.spawn_interval_ms) or 1.0

    obs = np.zeros(observation_size(max_enemies), dtype=np.float32)
    obs[0] = min(1.0, float(state.gold) / GOLD_SCALE)
    obs[1] = max(0.0, float(state.castle_health) / start_health)
    obs[2] = min(1.0, float(state.clock_ms) / CLOCK_SCALE)
    obs[3] = min(1.0, float(state.spawn_interval_ms) / start_interval)
    obs[4] = min(1.0, len(state.enemies) / float(max_enemies))
    obs[5] = min(1.0, len(state.towers) / float(MAX_TOWERS))

    slot_size = len(ENEMY_SLOT_FEATURES)
    base = len(SCALAR_KEYS)
    live = [e for e in state.enemies if e.alive][:max_enemies]
    for idx, enemy in enumerate(live):
        offset = base + idx * slot_size
        hp_frac = float(enemy.hp) / float(enemy.max_hp) if enemy.max_hp > 0 else 0.0
        obs[offset:offset + slot_size] = (
            1.0,
            float(enemy.x) / width,
            float(enemy.y) / height,
            max(0.0, hp_frac),
            path_progress(enemy, path),
        )
    return obs
