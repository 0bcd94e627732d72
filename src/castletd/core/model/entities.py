from __future__ import annotations
from dataclasses import dataclass, field


@dataclass(slots=True)
class Enemy:
    enemy_id: int
    x: float
    y: float

    # index of the waypoint the enemy last reached; it walks toward path[path_index + 1]
    path_index: int

    speed: float
    hp: float
    max_hp: float
    worth: int
    alive: bool = True


@dataclass(slots=True)
class Projectile:
    x: float
    y: float
    target_id: int
    damage: float
    speed: float
    hit_radius: float
    tower_id: int
    fired_ms: float = 0.0


@dataclass(slots=True)
class Tower:
    tower_id: int
    x: float
    y: float
    kind: str
    title: str
    cost: int
    range: float
    damage: float
    cooldown_ms: float
    last_shot_ms: float | None = None
    shots_fired: int = 0
    projectiles: list[Projectile] = field(default_factory=list)
