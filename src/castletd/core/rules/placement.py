from __future__ import annotations

import logging

from ..model.entities import Tower
from ..model.towers import get_tower_def


logger = logging.getLogger(__name__)


def point_on_canvas(width: float, height: float, x: float, y: float) -> bool:
    return 0.0 <= x <= float(width) and 0.0 <= y <= float(height)


def can_place_tower(
    state,
    width: float,
    height: float,
    x: float,
    y: float,
    tower_kind: str = "basic",
    *,
    cost: int | None = None,
) -> bool:
    if getattr(state, "game_over", False):
        return False
    if not point_on_canvas(width, height, x, y):
        return False
    if cost is None:
        cost = get_tower_def(str(tower_kind)).cost
    return int(state.gold) >= int(cost)


def place_tower(
    state,
    width: float,
    height: float,
    x: float,
    y: float,
    tower_kind: str = "basic",
    *,
    cost: int | None = None,
) -> Tower | None:
    """
    Build a tower at (x, y) and charge its cost (the tower table price unless
    `cost` overrides it).

    Not enough gold or an off-canvas point is a silent no-op (returns None).
    """
    tower_def = get_tower_def(str(tower_kind))
    cost = tower_def.cost if cost is None else int(cost)
    if not can_place_tower(state, width, height, x, y, tower_kind, cost=cost):
        logger.debug("placement rejected kind=%s at (%.1f,%.1f) gold=%s", tower_kind, x, y, state.gold)
        return None
    if not state.spend_gold(cost):
        return None
    tower = Tower(
        tower_id=state.next_entity_id(),
        x=float(x),
        y=float(y),
        kind=tower_def.kind,
        title=tower_def.title,
        cost=cost,
        range=tower_def.range,
        damage=tower_def.damage,
        cooldown_ms=tower_def.cooldown_ms,
    )
    state.towers.append(tower)
    return tower
