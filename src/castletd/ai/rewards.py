from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RewardState:
    gold: int
    castle_health: int
    kills: int
    breakthroughs: int


@dataclass(frozen=True, slots=True)
class RewardConfig:
    kill_reward: float = 1.0
    gold_weight: float = 0.0
    breach_penalty: float = 10.0
    survival_bonus: float = 0.01
    terminal_loss_penalty: float = 100.0
    invalid_action_penalty: float = 0.0


def reward_state_from(state) -> RewardState:
    return RewardState(
        gold=int(getattr(state, "gold", 0)),
        castle_health=int(getattr(state, "castle_health", 0)),
        kills=int(getattr(state, "kills", 0)),
        breakthroughs=int(getattr(state, "breakthroughs", 0)),
    )


def compute_reward(
    prev_state: RewardState,
    new_state: RewardState,
    *,
    config: RewardConfig,
    invalid_action: bool = False,
    episode_done: bool = False,
) -> float:
    reward = 0.0
    kills = max(0, new_state.kills - prev_state.kills)
    breaches = max(0, new_state.breakthroughs - prev_state.breakthroughs)
    reward += kills * config.kill_reward
    reward += (new_state.gold - prev_state.gold) * config.gold_weight
    reward -= breaches * config.breach_penalty
    if invalid_action:
        reward += config.invalid_action_penalty
    if episode_done:
        reward -= config.terminal_loss_penalty
    else:
        reward += config.survival_bonus
    return float(reward)
