from __future__ import annotations

import logging
from typing import Callable, List

import pyglet
from pyglet.window import key

from ..core.config import GameConfig
from ..core.engine import Engine
from ..core.model.towers import get_tower_def
from .controls import click_to_placement


logger = logging.getLogger(__name__)

BACKGROUND_COLOR = (220, 220, 220, 255)
ENEMY_COLOR = (255, 0, 0)
PROJECTILE_COLOR = (255, 255, 255)
PATH_COLOR = (0, 0, 0)
TOWER_COLORS = {
    "basic": (200, 200, 200),
    "triple": (100, 100, 100),
}
ENEMY_RADIUS = 10
PROJECTILE_RADIUS = 5
TOWER_HALF_SIZE = 10


def _resize_pool(pool: list, count: int, factory: Callable[[], object]) -> None:
    while len(pool) < count:
        pool.append(factory())
    while len(pool) > count:
        pool.pop().delete()


class SimpleGui:
    def __init__(self, config: GameConfig, *, seed: int | None = None) -> None:
        self.config = config
        self.engine = Engine(config, seed=seed)

        self.window = pyglet.window.Window(
            width=config.width,
            height=config.height,
            caption="Castle Defence",
        )
        self.batch = pyglet.graphics.Batch()
        self.ui_batch = pyglet.graphics.Batch()
        self.background = pyglet.shapes.Rectangle(
            0, 0, config.width, config.height, color=BACKGROUND_COLOR[:3], batch=self.batch
        )
        self._path_shapes: List[pyglet.shapes.Line] = []
        self._build_path_overlay()

        self.enemy_shapes: List[pyglet.shapes.Circle] = []
        self.projectile_shapes: List[pyglet.shapes.Circle] = []
        self.tower_shapes: list = []

        self._health_label = pyglet.text.Label(
            "",
            x=10,
            y=config.height - 30,
            font_size=16,
            color=(0, 0, 0, 255),
            batch=self.ui_batch,
        )
        self._gold_label = pyglet.text.Label(
            "",
            x=10,
            y=config.height - 60,
            font_size=16,
            color=(0, 0, 0, 255),
            batch=self.ui_batch,
        )
        self._game_over_label = pyglet.text.Label(
            "Game Over",
            x=config.width // 2,
            y=config.height // 2,
            anchor_x="center",
            anchor_y="center",
            font_size=30,
            color=(255, 255, 255, 255),
        )
        self._last_health: int | None = None
        self._last_gold: int | None = None
        self._refresh_labels()

        self.window.push_handlers(
            on_draw=self.on_draw,
            on_mouse_press=self.on_mouse_press,
            on_key_press=self.on_key_press,
        )
        pyglet.clock.schedule_interval(self.update, self.engine.frame_dt)

    def _to_screen_y(self, y: float) -> float:
        return self.config.height - y

    def _build_path_overlay(self) -> None:
        for shape in self._path_shapes:
            shape.delete()
        self._path_shapes.clear()
        for x1, y1, x2, y2 in self.engine.path.segments():
            line = pyglet.shapes.Line(
                x1,
                self._to_screen_y(y1),
                x2,
                self._to_screen_y(y2),
                2,
                color=PATH_COLOR,
                batch=self.batch,
            )
            self._path_shapes.append(line)

    def _make_tower_shape(self, tower) -> object:
        x = tower.x
        y = self._to_screen_y(tower.y)
        color = TOWER_COLORS.get(tower.kind, TOWER_COLORS["basic"])
        s = TOWER_HALF_SIZE
        if get_tower_def(tower.kind).volley > 1:
            return pyglet.shapes.Triangle(x, y + s, x - s, y - s, x + s, y - s, color=color, batch=self.batch)
        return pyglet.shapes.Rectangle(x - s, y - s, 2 * s, 2 * s, color=color, batch=self.batch)

    def _sync_tower_shapes(self) -> None:
        towers = self.engine.state.towers
        for tower in towers[len(self.tower_shapes):]:
            self.tower_shapes.append(self._make_tower_shape(tower))

    def _sync_enemy_shapes(self) -> None:
        enemies = self.engine.state.enemies
        _resize_pool(
            self.enemy_shapes,
            len(enemies),
            lambda: pyglet.shapes.Circle(-100, -100, ENEMY_RADIUS, color=ENEMY_COLOR, batch=self.batch),
        )
        for shape, enemy in zip(self.enemy_shapes, enemies):
            shape.x = enemy.x
            shape.y = self._to_screen_y(enemy.y)

    def _sync_projectile_shapes(self) -> None:
        projectiles = [p for tower in self.engine.state.towers for p in tower.projectiles]
        _resize_pool(
            self.projectile_shapes,
            len(projectiles),
            lambda: pyglet.shapes.Circle(-100, -100, PROJECTILE_RADIUS, color=PROJECTILE_COLOR, batch=self.batch),
        )
        for shape, projectile in zip(self.projectile_shapes, projectiles):
            shape.x = projectile.x
            shape.y = self._to_screen_y(projectile.y)

    def _refresh_labels(self) -> None:
        s = self.engine.state
        if s.castle_health != self._last_health:
            self._last_health = s.castle_health
            self._health_label.text = f"Castle Health: {s.castle_health}"
        if s.gold != self._last_gold:
            self._last_gold = s.gold
            self._gold_label.text = f"Gold: {s.gold}"

    def update(self, dt: float) -> None:
        result = self.engine.step(dt)
        if result is not None:
            logger.info("[gui] %s", result)
        self._refresh_labels()
        self._sync_enemy_shapes()
        self._sync_tower_shapes()
        self._sync_projectile_shapes()

    def on_draw(self) -> None:
        self.window.clear()
        if self.engine.state.game_over:
            self._game_over_label.draw()
            return
        self.batch.draw()
        self.ui_batch.draw()

    def on_mouse_press(self, x: int, y: int, button: int, modifiers: int) -> None:
        payload = click_to_placement(button, x, y, self.config.height)
        if payload is None:
            return
        tower = self.engine.act("PLACE_TOWER", payload)
        logger.debug("[gui] click (%s,%s) button=%s kind=%s placed=%s", x, y, button, payload["kind"], tower is not None)
        if tower is not None:
            self._sync_tower_shapes()
            self._refresh_labels()

    def on_key_press(self, symbol: int, modifiers: int) -> None:
        if symbol == key.P:
            paused = self.engine.act("PAUSE_TOGGLE")
            logger.info("[gui] paused=%s", paused)


def run(config: GameConfig | None = None, *, seed: int | None = None) -> None:
    _app = SimpleGui(config or GameConfig(), seed=seed)
    pyglet.app.run()
