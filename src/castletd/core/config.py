from __future__ import annotations

import copy
from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Iterator

from .model.towers import TOWER_DEFS, get_tower_def


_SUPPORTED_SCHEMA_VERSIONS = {1}
_ALLOWED_KEYS: dict[str, Any] = {
    "schema_version": None,
    "canvas": {
        "width": None,
        "height": None,
        "path_segments": None,
        "path_jitter": None,
    },
    "economy": {
        "castle_health": None,
        "starting_gold": None,
    },
    "spawn": {
        "interval_ms": None,
        "rate_increase_interval_ms": None,
        "min_interval_ms": None,
    },
    "enemy": {
        "speed": None,
        "health": None,
        "reward_min": None,
        "reward_max": None,
        "snap_distance": None,
    },
    "sim": {
        "fps": None,
        "seed": None,
    },
    "towers": {kind: {"cost": None} for kind in TOWER_DEFS},
}

DEFAULT_CONFIG: dict[str, Any] = {
    "schema_version": 1,
    "canvas": {
        "width": 800,
        "height": 400,
        "path_segments": 8,
        "path_jitter": 50.0,
    },
    "economy": {
        "castle_health": 5,
        "starting_gold": 100,
    },
    "spawn": {
        "interval_ms": 3000.0,
        "rate_increase_interval_ms": 10000.0,
        "min_interval_ms": 0.0,
    },
    "enemy": {
        "speed": 0.5,
        "health": 3.0,
        "reward_min": 20,
        "reward_max": 29,
        "snap_distance": 6.0,
    },
    "sim": {
        "fps": 60,
        "seed": None,
    },
    "towers": {kind: {"cost": tower_def.cost} for kind, tower_def in TOWER_DEFS.items()},
}


@dataclass(frozen=True, slots=True)
class GameConfig:
    width: int = 800
    height: int = 400
    path_segments: int = 8
    path_jitter: float = 50.0

    castle_health: int = 5
    starting_gold: int = 100

    spawn_interval_ms: float = 3000.0
    spawn_rate_increase_interval_ms: float = 10000.0
    min_spawn_interval_ms: float = 0.0

    enemy_speed: float = 0.5
    enemy_health: float = 3.0
    kill_reward_min: int = 20
    kill_reward_max: int = 29
    snap_distance: float = 6.0

    fps: int = 60
    seed: int | None = None

    # per-kind build cost; kinds missing here cost what the tower table says
    tower_costs: dict[str, int] = field(default_factory=lambda: {k: d.cost for k, d in TOWER_DEFS.items()})

    @property
    def frame_ms(self) -> float:
        return 1000.0 / float(self.fps)

    def tower_cost(self, kind: str) -> int:
        if kind in self.tower_costs:
            return int(self.tower_costs[kind])
        return get_tower_def(kind).cost


def config_from_dict(cfg: dict[str, Any]) -> GameConfig:
    """
    Build a GameConfig from a (possibly partial) config mapping.

    Missing sections and keys fall back to DEFAULT_CONFIG.
    """
    merged = deep_merge(DEFAULT_CONFIG, cfg)
    _validate_config(merged)
    canvas = merged["canvas"]
    economy = merged["economy"]
    spawn = merged["spawn"]
    enemy = merged["enemy"]
    sim = merged["sim"]
    towers = merged["towers"]
    seed = sim.get("seed")
    return GameConfig(
        width=int(canvas["width"]),
        height=int(canvas["height"]),
        path_segments=int(canvas["path_segments"]),
        path_jitter=float(canvas["path_jitter"]),
        castle_health=int(economy["castle_health"]),
        starting_gold=int(economy["starting_gold"]),
        spawn_interval_ms=float(spawn["interval_ms"]),
        spawn_rate_increase_interval_ms=float(spawn["rate_increase_interval_ms"]),
        min_spawn_interval_ms=float(spawn["min_interval_ms"]),
        enemy_speed=float(enemy["speed"]),
        enemy_health=float(enemy["health"]),
        kill_reward_min=int(enemy["reward_min"]),
        kill_reward_max=int(enemy["reward_max"]),
        snap_distance=float(enemy["snap_distance"]),
        fps=int(sim["fps"]),
        seed=None if seed is None else int(seed),
        tower_costs={kind: int(section["cost"]) for kind, section in towers.items()},
    )


def load_json_config(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError(f"config root must be a JSON object: {p}")
    return payload


def load_game_config(path: str | Path | None = None, overrides: list[str] | None = None) -> GameConfig:
    cfg: dict[str, Any] = load_json_config(path) if path is not None else {}
    cfg = apply_overrides(cfg, overrides)
    return config_from_dict(cfg)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Nested dicts merge key by key; any other value in `override` replaces the base one."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = deep_merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def apply_overrides(cfg: dict[str, Any], overrides_list: list[str] | None) -> dict[str, Any]:
    """
    Return a copy of `cfg` with `section.key=value` overrides applied in order.

    Missing intermediate sections are created; `cfg` itself is left untouched.
    """
    out = copy.deepcopy(cfg)
    for item in overrides_list or ():
        keys, value = _parse_override(item)
        *parents, leaf = keys
        cursor = out
        for key in parents:
            child = cursor.get(key)
            if not isinstance(child, dict):
                child = cursor[key] = {}
            cursor = child
        cursor[leaf] = value
    return out


def _parse_override(item: str) -> tuple[list[str], Any]:
    path_str, sep, value_str = item.partition("=")
    if not sep:
        raise ValueError(f"override must look like section.key=value: {item!r}")
    keys = path_str.split(".")
    if not all(keys):
        raise ValueError(f"override path has an empty segment: {item!r}")
    return keys, _cast_scalar(value_str)


_LITERALS: dict[str, Any] = {"true": True, "false": False, "null": None, "none": None}


def _cast_scalar(value: str) -> Any:
    text = value.strip()
    if text.lower() in _LITERALS:
        return _LITERALS[text.lower()]
    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_dict(parent: dict[str, Any], key: str) -> dict[str, Any]:
    if key not in parent:
        raise ValueError(f"missing '{key}' section in config")
    value = parent[key]
    if not isinstance(value, dict):
        raise ValueError(f"config '{key}' must be a JSON object")
    return value


def _require_number(parent: dict[str, Any], key: str, *, section: str) -> float:
    if key not in parent:
        raise ValueError(f"missing '{section}.{key}' in config")
    value = parent[key]
    if not _is_number(value):
        raise ValueError(f"config '{section}.{key}' must be a number")
    return float(value)


def _validate_config(cfg: dict[str, Any]) -> None:
    unknown = sorted(_unknown_keys(cfg, _ALLOWED_KEYS))
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(unknown)}")

    schema_version = cfg.get("schema_version")
    if schema_version not in _SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"unsupported schema_version: {schema_version}")

    canvas = _require_dict(cfg, "canvas")
    if _require_number(canvas, "width", section="canvas") <= 0:
        raise ValueError("canvas.width must be > 0")
    if _require_number(canvas, "height", section="canvas") <= 0:
        raise ValueError("canvas.height must be > 0")
    if _require_number(canvas, "path_segments", section="canvas") < 1:
        raise ValueError("canvas.path_segments must be >= 1")
    if _require_number(canvas, "path_jitter", section="canvas") < 0:
        raise ValueError("canvas.path_jitter must be >= 0")

    economy = _require_dict(cfg, "economy")
    _require_number(economy, "castle_health", section="economy")
    if _require_number(economy, "starting_gold", section="economy") < 0:
        raise ValueError("economy.starting_gold must be >= 0")

    spawn = _require_dict(cfg, "spawn")
    if _require_number(spawn, "interval_ms", section="spawn") < 0:
        raise ValueError("spawn.interval_ms must be >= 0")
    if _require_number(spawn, "rate_increase_interval_ms", section="spawn") <= 0:
        raise ValueError("spawn.rate_increase_interval_ms must be > 0")
    if _require_number(spawn, "min_interval_ms", section="spawn") < 0:
        raise ValueError("spawn.min_interval_ms must be >= 0")

    enemy = _require_dict(cfg, "enemy")
    if _require_number(enemy, "speed", section="enemy") < 0:
        raise ValueError("enemy.speed must be >= 0")
    if _require_number(enemy, "health", section="enemy") <= 0:
        raise ValueError("enemy.health must be > 0")
    reward_min = _require_number(enemy, "reward_min", section="enemy")
    reward_max = _require_number(enemy, "reward_max", section="enemy")
    if reward_min > reward_max:
        raise ValueError("enemy.reward_min must be <= enemy.reward_max")
    if _require_number(enemy, "snap_distance", section="enemy") <= 0:
        raise ValueError("enemy.snap_distance must be > 0")

    sim = _require_dict(cfg, "sim")
    if _require_number(sim, "fps", section="sim") <= 0:
        raise ValueError("sim.fps must be > 0")
    seed = sim.get("seed")
    if seed is not None and not _is_number(seed):
        raise ValueError("sim.seed must be a number or null")

    towers = _require_dict(cfg, "towers")
    for kind in towers:
        section = _require_dict(towers, kind)
        if _require_number(section, "cost", section=f"towers.{kind}") < 0:
            raise ValueError(f"towers.{kind}.cost must be >= 0")


def _unknown_keys(value: Any, allowed: Any, prefix: str = "") -> Iterator[str]:
    """Yield the dotted path of every key in `value` that `allowed` does not list."""
    if not isinstance(value, dict) or not isinstance(allowed, dict):
        return
    for key, sub_value in value.items():
        dotted = f"{prefix}{key}"
        if key not in allowed:
            yield dotted
        else:
            yield from _unknown_keys(sub_value, allowed[key], f"{dotted}.")
