from __future__ import annotations

import logging
from typing import Any

import gymnasium as gym
import numpy as np

from castletd.core.config import GameConfig
from castletd.core.engine import Engine

from .actions import (
    DEFAULT_CELL_SIZE,
    Action,
    Noop,
    Place,
    action_space_spec,
    compute_action_mask,
    flatten,
    unflatten,
)
from .obs import MAX_ENEMIES, build_observation, observation_size
from .rewards import RewardConfig, compute_reward, reward_state_from


logger = logging.getLogger(__name__)


class CastleTDEnv(gym.Env):
    """
    Real-time castle defence as a turn-based env.

    Each step applies one action (noop or place a tower on a grid cell), then
    simulates `frames_per_step` engine ticks.
    """

    metadata = {"render_modes": []}

    def __init__(
        self,
        *,
        config: GameConfig | None = None,
        cell_size: int = DEFAULT_CELL_SIZE,
        frames_per_step: int = 30,
        max_steps: int = 2000,
        max_enemies: int = MAX_ENEMIES,
        strict_invalid_actions: bool = False,
        reward_config: RewardConfig | None = None,
    ) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.frames_per_step = int(frames_per_step)
        self.max_steps = int(max_steps)
        self.max_enemies = int(max_enemies)
        self.strict_invalid_actions = strict_invalid_actions
        self.reward_config = reward_config or RewardConfig()

        self.action_spec = action_space_spec(
            self.config.width,
            self.config.height,
            cell_size=cell_size,
            tower_costs=self.config.tower_costs,
        )
        self.action_space = gym.spaces.Discrete(self.action_spec.num_actions)
        self.observation_space = gym.spaces.Box(
            low=-np.inf,
            high=np.inf,
            shape=(observation_size(self.max_enemies),),
            dtype=np.float32,
        )

        self.engine: Engine | None = None
        self.episode_seed: int | None = None
        self._step_count = 0
        self._last_action_mask: np.ndarray | None = None

    def reset(self, *, seed: int | None = None, options: dict[str, Any] | None = None) -> tuple[np.ndarray, dict]:
        super().reset(seed=seed)
        engine_seed = int(self.np_random.integers(1, 2**31 - 1))
        self.episode_seed = engine_seed
        self.engine = Engine(self.config, seed=engine_seed)
        self._step_count = 0
        self._last_action_mask = self._compute_action_mask()
        logger.info("reset seed=%s engine_seed=%s", seed, engine_seed)
        obs = self._observe()
        info = {"engine_seed": engine_seed, "action_mask": self._last_action_mask}
        return obs, info

    def _observe(self) -> np.ndarray:
        if self.engine is None:
            raise RuntimeError("Environment not reset")
        return build_observation(self.engine.state, self.engine.path, self.config, max_enemies=self.max_enemies)

    def _compute_action_mask(self) -> np.ndarray:
        if self.engine is None:
            raise RuntimeError("Environment not reset")
        mask = compute_action_mask(self.engine.state, self.action_spec, self.config.width, self.config.height)
        return np.asarray(mask, dtype=bool)

    def action_masks(self) -> np.ndarray:
        if self._last_action_mask is None:
            self._last_action_mask = self._compute_action_mask()
        return self._last_action_mask

    def step(self, action: Action | int) -> tuple[np.ndarray, float, bool, bool, dict[str, Any]]:
        if self.engine is None:
            raise RuntimeError("Environment not reset")
        if self.engine.state.game_over:
            raise RuntimeError("step() called after episode end; call reset()")
        self._step_count += 1

        invalid_action = False
        if isinstance(action, (int, np.integer)):
            action_id = int(action)
            try:
                action_obj = unflatten(action_id, self.action_spec)
            except ValueError as exc:
                if self.strict_invalid_actions:
                    raise ValueError(f"Invalid action id {action!r}") from exc
                action_obj = Noop()
                action_id = self.action_spec.noop
                invalid_action = True
        else:
            action_obj = action
            try:
                action_id = flatten(action_obj, self.action_spec)
            except (TypeError, ValueError) as exc:
                if self.strict_invalid_actions:
                    raise ValueError(f"Invalid action {action_obj!r}") from exc
                action_obj = Noop()
                action_id = self.action_spec.noop
                invalid_action = True

        mask_before = self.action_masks()
        if not bool(mask_before[action_id]):
            if self.strict_invalid_actions:
                raise ValueError(f"Action not valid in current state: {action_obj!r}")
            invalid_action = True
            action_obj = Noop()

        prev_state = reward_state_from(self.engine.state)
        placed = self._apply_action(action_obj)
        for _ in range(self.frames_per_step):
            if self.engine.tick() is not None:
                break
        new_state = reward_state_from(self.engine.state)

        terminated = bool(self.engine.state.game_over)
        truncated = not terminated and self._step_count >= self.max_steps
        reward = compute_reward(
            prev_state,
            new_state,
            config=self.reward_config,
            invalid_action=invalid_action,
            episode_done=terminated,
        )
        self._last_action_mask = self._compute_action_mask()
        info: dict[str, Any] = {
            "invalid_action": invalid_action,
            "placed": placed,
            "action_mask": self._last_action_mask,
            "clock_ms": self.engine.state.clock_ms,
        }
        if terminated:
            s = self.engine.state
            logger.info(
                "episode_done steps=%s clock_ms=%.0f kills=%s gold=%s towers=%s",
                self._step_count,
                s.clock_ms,
                s.kills,
                s.gold,
                len(s.towers),
            )
        return self._observe(), reward, terminated, truncated, info

    def _apply_action(self, action: Action) -> bool:
        if self.engine is None:
            return False
        if isinstance(action, Noop):
            return False
        if isinstance(action, Place):
            x, y = self.action_spec.cell_positions[action.cell]
            kind = self.action_spec.tower_kinds[action.tower_type]
            tower = self.engine.act("PLACE_TOWER", {"x": x, "y": y, "kind": kind})
            return tower is not None
        raise TypeError(f"Unknown action {action!r}")

    def render(self) -> None:
        return None

    def close(self) -> None:
        return None
