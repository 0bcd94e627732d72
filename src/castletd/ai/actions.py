from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Mapping

from castletd.core.model.towers import list_tower_defs
from castletd.core.rules.placement import point_on_canvas


logger = logging.getLogger(__name__)

DEFAULT_CELL_SIZE = 40


@dataclass(frozen=True, slots=True)
class Place:
    tower_type: int
    cell: int


@dataclass(frozen=True, slots=True)
class Noop:
    pass


Action = Place | Noop


@dataclass(frozen=True, slots=True)
class ActionSpaceSpec:
    cell_size: int
    tower_kinds: tuple[str, ...]
    tower_costs: tuple[int, ...]
    # centre of each placement cell, row-major from the top-left corner
    cell_positions: tuple[tuple[float, float], ...]
    noop: int
    place: int
    place_count: int
    num_actions: int


def action_space_spec(
    width: int,
    height: int,
    *,
    cell_size: int = DEFAULT_CELL_SIZE,
    tower_costs: Mapping[str, int] | None = None,
) -> ActionSpaceSpec:
    if cell_size <= 0:
        raise ValueError(f"cell_size must be > 0, got {cell_size}")
    tower_defs = list_tower_defs()
    tower_kinds = tuple(t.kind for t in tower_defs)
    prices = tower_costs or {}
    costs = tuple(int(prices.get(t.kind, t.cost)) for t in tower_defs)

    cells: list[tuple[float, float]] = []
    for y in range(0, int(height) - cell_size + 1, cell_size):
        for x in range(0, int(width) - cell_size + 1, cell_size):
            cells.append((x + cell_size * 0.5, y + cell_size * 0.5))

    place_count = len(tower_kinds) * len(cells)
    return ActionSpaceSpec(
        cell_size=int(cell_size),
        tower_kinds=tower_kinds,
        tower_costs=costs,
        cell_positions=tuple(cells),
        noop=0,
        place=1,
        place_count=place_count,
        num_actions=1 + place_count,
    )


def flatten(action: Action, spec: ActionSpaceSpec) -> int:
    if isinstance(action, Noop):
        return spec.noop
    if isinstance(action, Place):
        cell_count = len(spec.cell_positions)
        if not 0 <= action.tower_type < len(spec.tower_kinds):
            raise ValueError(f"tower_type out of range: {action.tower_type}")
        if not 0 <= action.cell < cell_count:
            raise ValueError(f"cell out of range: {action.cell}")
        return spec.place + action.tower_type * cell_count + action.cell
    raise TypeError(f"Unknown action {action!r}")


def unflatten(action_id: int, spec: ActionSpaceSpec) -> Action:
    if action_id == spec.noop:
        return Noop()
    offset = action_id - spec.place
    if 0 <= offset < spec.place_count:
        cell_count = len(spec.cell_positions)
        return Place(tower_type=offset // cell_count, cell=offset % cell_count)
    raise ValueError(f"action id out of range: {action_id}")


def compute_action_mask(state, spec: ActionSpaceSpec, width: int, height: int) -> list[bool]:
    mask = [False] * spec.num_actions
    mask[spec.noop] = True
    if getattr(state, "game_over", False):
        return mask
    gold = int(getattr(state, "gold", 0))
    cell_count = len(spec.cell_positions)
    for kind_idx, cost in enumerate(spec.tower_costs):
        if gold < cost:
            continue
        base = spec.place + kind_idx * cell_count
        for cell_idx, (x, y) in enumerate(spec.cell_positions):
            if point_on_canvas(width, height, x, y):
                mask[base + cell_idx] = True
    return mask
