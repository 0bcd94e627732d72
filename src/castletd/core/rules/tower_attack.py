# src/castletd/core/rules/tower_attack.py
from __future__ import annotations

import math

from ..model.entities import Enemy, Projectile, Tower
from ..model.towers import get_tower_def


def step_towers(state, now_ms: float, *, dt_scale: float = 1.0) -> int:
    """
    Tick tower -> target -> volley -> homing projectiles -> damage.

    Towers act in placement order. Each one first tries to shoot, then moves
    and resolves its own projectiles. Returns the number of hits this tick.
    """
    if getattr(state, "paused", False):
        return 0
    if getattr(state, "game_over", False):
        return 0

    towers = getattr(state, "towers", [])
    if not towers:
        return 0

    enemies = getattr(state, "enemies", [])
    enemies_by_id = {e.enemy_id: e for e in enemies}
    hits = 0
    for tower in towers:
        try_shoot(tower, enemies, now_ms)
        hits += step_projectiles(state, tower, enemies_by_id, dt_scale=dt_scale)
    return hits


def cooldown_ready(tower: Tower, now_ms: float) -> bool:
    if tower.last_shot_ms is None:
        return True
    return now_ms - tower.last_shot_ms > tower.cooldown_ms


def try_shoot(tower: Tower, enemies: list[Enemy], now_ms: float) -> list[Projectile]:
    """
    Fire one volley at the first live enemy in range, if the cooldown allows.

    No prioritisation beyond list order. At most one volley per cooldown window,
    however many enemies are in range.
    """
    if not cooldown_ready(tower, now_ms):
        return []
    target = select_target(tower, enemies)
    if target is None:
        return []

    tower_def = get_tower_def(tower.kind)
    fired: list[Projectile] = []
    for off_x, off_y in tower_def.volley_offsets():
        fired.append(
            Projectile(
                x=tower.x + off_x,
                y=tower.y + off_y,
                target_id=target.enemy_id,
                damage=float(tower.damage),
                speed=float(tower_def.projectile_speed),
                hit_radius=float(tower_def.hit_radius),
                tower_id=tower.tower_id,
                fired_ms=float(now_ms),
            )
        )
    tower.projectiles.extend(fired)
    tower.last_shot_ms = float(now_ms)
    tower.shots_fired += 1
    return fired


def select_target(tower: Tower, enemies: list[Enemy]) -> Enemy | None:
    range_sq = float(tower.range) ** 2
    for enemy in enemies:
        if not enemy.alive:
            continue
        if _distance_sq(tower.x, tower.y, enemy.x, enemy.y) <= range_sq:
            return enemy
    return None


def step_projectiles(state, tower: Tower, enemies_by_id: dict[int, Enemy], *, dt_scale: float = 1.0) -> int:
    """
    Advance each owned projectile toward its target's current position.

    A projectile within hit radius applies its damage once and is dropped.
    A projectile whose target is gone or already dead is dropped as a miss.
    """
    if not tower.projectiles:
        return 0
    keep: list[Projectile] = []
    hits = 0
    for projectile in tower.projectiles:
        target = enemies_by_id.get(projectile.target_id)
        if target is None or not target.alive:
            continue
        if advance_projectile(projectile, target, dt_scale=dt_scale):
            apply_damage(state, target, projectile.damage)
            hits += 1
            continue
        keep.append(projectile)
    tower.projectiles = keep
    return hits


def advance_projectile(projectile: Projectile, target: Enemy, *, dt_scale: float = 1.0) -> bool:
    """Homing move; returns True once the projectile is within hit radius."""
    dx = target.x - projectile.x
    dy = target.y - projectile.y
    dist = math.hypot(dx, dy)
    step = projectile.speed * dt_scale
    if dist <= step:
        projectile.x = float(target.x)
        projectile.y = float(target.y)
    elif dist > 0.0:
        projectile.x += dx / dist * step
        projectile.y += dy / dist * step
    return has_arrived(projectile, target)


def has_arrived(projectile: Projectile, target: Enemy) -> bool:
    return _distance_sq(projectile.x, projectile.y, target.x, target.y) < projectile.hit_radius ** 2


def apply_damage(state, target: Enemy, amount: float) -> bool:
    """
    Subtract `amount` from the target's health. Returns True if this hit killed it.

    Damage to an already dead enemy is ignored, so the kill reward is paid once.
    """
    if not target.alive:
        return False
    target.hp -= amount
    if target.hp > 0:
        return False
    _kill_enemy(state, target)
    return True


def _kill_enemy(state, target: Enemy) -> None:
    target.alive = False
    state.earn_gold(int(target.worth))
    state.kills += 1


def _distance_sq(ax: float, ay: float, bx: float, by: float) -> float:
    dx = ax - bx
    dy = ay - by
    return dx * dx + dy * dy
