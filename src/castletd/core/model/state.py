from __future__ import annotations
from dataclasses import dataclass, field

from ..config import GameConfig
from ..rng import seed_state
from .entities import Enemy, Tower


@dataclass(slots=True)
class GameState:
    castle_health: int = 5
    gold: int = 100
    paused: bool = False

    clock_ms: float = 0.0
    spawn_interval_ms: float = 3000.0
    spawn_rate_multiplier: int = 1
    last_spawn_ms: float = 0.0
    last_rate_increase_ms: float = 0.0

    enemies: list[Enemy] = field(default_factory=list)
    towers: list[Tower] = field(default_factory=list)

    kills: int = 0
    breakthroughs: int = 0
    gold_earned: int = 0
    gold_spent: int = 0

    next_id: int = 1
    rng_state: int = 1
    rng_calls: int = 0
    game_over: bool = False

    def next_entity_id(self) -> int:
        entity_id = self.next_id
        self.next_id += 1
        return entity_id

    def spend_gold(self, amount: int) -> bool:
        """Deduct `amount` if affordable; leaves gold untouched otherwise."""
        amount = int(amount)
        if amount < 0 or self.gold < amount:
            return False
        self.gold -= amount
        self.gold_spent += amount
        return True

    def earn_gold(self, amount: int) -> None:
        amount = int(amount)
        if amount <= 0:
            return
        self.gold += amount
        self.gold_earned += amount

    def breach_castle(self, damage: int = 1) -> None:
        self.castle_health -= max(0, int(damage))
        self.breakthroughs += 1
        if self.castle_health <= 0:
            self.game_over = True


def new_state(config: GameConfig, seed: int | None = None) -> GameState:
    state = GameState(
        castle_health=int(config.castle_health),
        gold=int(config.starting_gold),
        spawn_interval_ms=float(config.spawn_interval_ms),
    )
    seed_state(state, config.seed if seed is None else seed)
    return state
