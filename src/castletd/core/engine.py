# src/castletd/core/engine.py
from __future__ import annotations

import logging
from typing import Any, Literal

from .config import GameConfig
from .model.path import Path, generate_path
from .model.state import GameState, new_state
from .rules.enemy_motion import path_progress, reap_enemies, step_enemies
from .rules.placement import place_tower
from .rules.spawner import step_spawner
from .rules.tower_attack import step_towers


logger = logging.getLogger(__name__)

ActionType = Literal[
    "PLACE_TOWER",
    "PAUSE_TOGGLE",
]

Phase = Literal["RUNNING", "GAME_OVER"]


class Engine:
    """
    Deterministic engine: no GUI dependency, no wall-clock reads.

    `tick(dt_ms)` runs exactly one simulation tick; `step(dt_seconds)` feeds
    real elapsed time through a fixed-step accumulator (one tick per frame).
    """

    def __init__(self, config: GameConfig | None = None, *, path: Path | None = None, seed: int | None = None):
        self.config = config or GameConfig()
        self._fixed_path = path
        self._seed = seed
        self.state: GameState = new_state(self.config, seed)
        self.path: Path = path or self._generate_path()
        self._accum = 0.0

    @property
    def frame_ms(self) -> float:
        return self.config.frame_ms

    @property
    def frame_dt(self) -> float:
        return self.config.frame_ms / 1000.0

    @property
    def phase(self) -> Phase:
        return "GAME_OVER" if self.state.game_over else "RUNNING"

    def _generate_path(self) -> Path:
        cfg = self.config
        return generate_path(cfg.width, cfg.height, cfg.path_segments, self.state, jitter=cfg.path_jitter)

    def reset(self, seed: int | None = None) -> None:
        if seed is not None:
            self._seed = seed
        self.state = new_state(self.config, self._seed)
        self.path = self._fixed_path or self._generate_path()
        self._accum = 0.0

    def act(self, action_type: ActionType, payload: dict[str, Any] | None = None) -> Any:
        if self.state.game_over:
            return None

        if action_type == "PAUSE_TOGGLE":
            self.state.paused = not self.state.paused
            return self.state.paused

        if action_type == "PLACE_TOWER":
            if not payload:
                return None
            x = payload.get("x")
            y = payload.get("y")
            if x is None or y is None:
                return None
            kind = str(payload.get("kind", "basic"))
            cfg = self.config
            return place_tower(self.state, cfg.width, cfg.height, float(x), float(y), kind, cost=cfg.tower_cost(kind))

        raise ValueError(f"Unknown action_type={action_type!r}")

    def tick(self, dt_ms: float | None = None) -> str | None:
        """
        One simulation tick advancing the clock by `dt_ms` (default: one frame).

        Order: spawn -> move enemies -> reap -> towers/projectiles -> reap -> game over check.
        """
        s = self.state
        if s.game_over or s.paused:
            return None
        if s.castle_health <= 0:
            return self._enter_game_over()

        frame_ms = self.config.frame_ms
        dt_ms = frame_ms if dt_ms is None else max(0.0, float(dt_ms))
        dt_scale = dt_ms / frame_ms
        s.clock_ms += dt_ms
        now = s.clock_ms

        step_spawner(s, self.path, self.config, now)
        step_enemies(s, self.path, dt_scale=dt_scale, snap_distance=self.config.snap_distance)
        reap_enemies(s)
        step_towers(s, now, dt_scale=dt_scale)
        reap_enemies(s)

        if s.castle_health <= 0:
            return self._enter_game_over()
        return None

    def step(self, dt_seconds: float) -> str | None:
        """
        Advance the simulation in fixed frame ticks (host frame hook).
        """
        if self.state.game_over or self.state.paused:
            return None

        frame_dt = self.frame_dt
        self._accum += max(0.0, dt_seconds)
        while self._accum >= frame_dt:
            self._accum -= frame_dt
            result = self.tick(self.config.frame_ms)
            if result is not None:
                self._accum = 0.0
                return result
        return None

    def _enter_game_over(self) -> str:
        s = self.state
        s.game_over = True
        logger.info(
            "game over at t=%.0fms kills=%s breakthroughs=%s gold=%s towers=%s",
            s.clock_ms,
            s.kills,
            s.breakthroughs,
            s.gold,
            len(s.towers),
        )
        return "game lost"

    def observe(self) -> dict[str, Any]:
        s = self.state
        return {
            "phase": self.phase,
            "clock_ms": s.clock_ms,
            "castle_health": s.castle_health,
            "gold": s.gold,
            "paused": s.paused,
            "spawn_interval_ms": s.spawn_interval_ms,
            "spawn_rate_multiplier": s.spawn_rate_multiplier,
            "kills": s.kills,
            "breakthroughs": s.breakthroughs,
            "path": [(w.x, w.y) for w in self.path],
            "enemies": [
                {
                    "id": e.enemy_id,
                    "x": e.x,
                    "y": e.y,
                    "hp": e.hp,
                    "max_hp": e.max_hp,
                    "speed": e.speed,
                    "path_index": e.path_index,
                    "progress": path_progress(e, self.path),
                }
                for e in s.enemies
            ],
            "towers": [
                {
                    "id": t.tower_id,
                    "x": t.x,
                    "y": t.y,
                    "kind": t.kind,
                    "title": t.title,
                    "range": t.range,
                    "damage": t.damage,
                    "cooldown_ms": t.cooldown_ms,
                    "last_shot_ms": t.last_shot_ms,
                    "projectiles": [(p.x, p.y, p.target_id) for p in t.projectiles],
                }
                for t in s.towers
            ],
            "game_over": s.game_over,
        }
