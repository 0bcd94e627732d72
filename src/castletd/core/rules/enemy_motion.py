# src/castletd/core/rules/enemy_motion.py
from __future__ import annotations

import math


DEFAULT_SNAP_DISTANCE = 6.0


def step_enemies(state, path, *, dt_scale: float = 1.0, snap_distance: float = DEFAULT_SNAP_DISTANCE) -> int:
    """
    Move every live enemy one frame along the path.

    dt_scale=1.0 is one 60 fps frame; speeds are expressed in units per frame.
    Returns the number of breakthroughs this tick.
    """
    if getattr(state, "paused", False):
        return 0
    if getattr(state, "game_over", False):
        return 0

    breakthroughs = 0
    for enemy in state.enemies:
        if not enemy.alive:
            continue
        if advance_enemy(state, enemy, path, dt_scale=dt_scale, snap_distance=snap_distance):
            breakthroughs += 1
    return breakthroughs


def advance_enemy(
    state,
    enemy,
    path,
    *,
    dt_scale: float = 1.0,
    snap_distance: float = DEFAULT_SNAP_DISTANCE,
) -> bool:
    """
    Advance one enemy toward its next waypoint.

    Within `snap_distance` of the waypoint the enemy snaps onto it and the
    waypoint index moves on. Snapping onto the last waypoint (or being handed an
    exhausted index) is a breakthrough: the castle loses one health, the enemy
    dies and no gold is granted. Returns True on breakthrough.
    """
    if not enemy.alive:
        return False

    last = len(path) - 1
    if enemy.path_index >= last:
        _break_through(state, enemy)
        return True

    target = path[enemy.path_index + 1]
    dx = target.x - enemy.x
    dy = target.y - enemy.y
    dist = math.hypot(dx, dy)
    if dist > 0.0:
        # never overshoot the waypoint, whatever the speed
        step = min(enemy.speed * dt_scale, dist)
        enemy.x += dx / dist * step
        enemy.y += dy / dist * step

    if math.hypot(target.x - enemy.x, target.y - enemy.y) < snap_distance:
        enemy.x = float(target.x)
        enemy.y = float(target.y)
        enemy.path_index += 1
        if enemy.path_index >= last:
            _break_through(state, enemy)
            return True
    return False


def reap_enemies(state) -> int:
    """Drop enemies whose alive flag went false; returns how many were removed."""
    enemies = state.enemies
    keep = [e for e in enemies if e.alive]
    removed = len(enemies) - len(keep)
    if removed:
        state.enemies = keep
    return removed


def path_progress(enemy, path) -> float:
    """Fraction of the path's waypoints already passed, in [0, 1]."""
    last = len(path) - 1
    if last <= 0:
        return 1.0
    return min(1.0, max(0.0, enemy.path_index / last))


def _break_through(state, enemy) -> None:
    enemy.alive = False
    state.breach_castle(1)
