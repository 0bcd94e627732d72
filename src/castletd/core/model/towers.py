from __future__ import annotations

from dataclasses import dataclass
import math


@dataclass(frozen=True)
class TowerDef:
    kind: str
    title: str
    cost: int
    range: float
    damage: float
    cooldown_ms: float
    # shot pattern: `volley` projectiles spread evenly on a circle of `volley_radius`
    volley: int
    volley_radius: float
    projectile_speed: float
    hit_radius: float

    def volley_offsets(self) -> list[tuple[float, float]]:
        if self.volley <= 1:
            return [(0.0, 0.0)]
        offsets: list[tuple[float, float]] = []
        for i in range(self.volley):
            angle = 2.0 * math.pi * i / self.volley
            offsets.append((math.cos(angle) * self.volley_radius, math.sin(angle) * self.volley_radius))
        return offsets


TOWER_DEFS: dict[str, TowerDef] = {
    "basic": TowerDef(
        kind="basic",
        title="BASIC TOWER",
        cost=100,
        range=100.0,
        damage=1.0,
        cooldown_ms=1000.0,
        volley=1,
        volley_radius=0.0,
        projectile_speed=5.0,
        hit_radius=10.0,
    ),
    "triple": TowerDef(
        kind="triple",
        title="TRIPLE TOWER",
        cost=100,
        range=120.0,
        damage=2.0,
        cooldown_ms=2000.0,
        volley=3,
        volley_radius=10.0,
        projectile_speed=5.0,
        hit_radius=10.0,
    ),
}


def get_tower_def(kind: str) -> TowerDef:
    try:
        return TOWER_DEFS[kind]
    except KeyError as exc:
        raise KeyError(f"Unknown tower kind: {kind!r}") from exc


def list_tower_defs() -> list[TowerDef]:
    return list(TOWER_DEFS.values())
