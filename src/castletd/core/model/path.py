from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterator

from ..rng import rand_uniform


@dataclass(frozen=True, slots=True)
class Waypoint:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Path:
    """
    Ordered, immutable list of waypoints enemies walk from first to last.

    The first waypoint is the spawn point; the last one is the castle.
    """
    width: int
    height: int
    waypoints: tuple[Waypoint, ...]

    def __len__(self) -> int:
        return len(self.waypoints)

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(self.waypoints)

    def __getitem__(self, index: int) -> Waypoint:
        return self.waypoints[index]

    @property
    def start(self) -> Waypoint:
        return self.waypoints[0]

    @property
    def end(self) -> Waypoint:
        return self.waypoints[-1]

    def segments(self) -> list[tuple[float, float, float, float]]:
        return [(a.x, a.y, b.x, b.y) for a, b in zip(self.waypoints[:-1], self.waypoints[1:])]

    def length(self) -> float:
        return sum(math.hypot(x2 - x1, y2 - y1) for x1, y1, x2, y2 in self.segments())


def generate_path(
    width: int,
    height: int,
    segment_count: int,
    state,
    *,
    jitter: float = 50.0,
) -> Path:
    """
    Left-to-right path across the canvas.

    Endpoints sit on the vertical midline of the left and right edges; the
    segment_count - 1 interior points are evenly spaced horizontally and offset
    vertically by a uniform draw in [-jitter, +jitter).
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid canvas size {width}x{height}")
    if segment_count < 1:
        raise ValueError(f"segment_count must be >= 1, got {segment_count}")

    mid_y = height / 2.0
    segment_width = width / segment_count
    points = [Waypoint(0.0, mid_y)]
    for i in range(1, segment_count):
        offset = rand_uniform(state, -jitter, jitter)
        points.append(Waypoint(i * segment_width, mid_y + offset))
    points.append(Waypoint(float(width), mid_y))
    return Path(width=int(width), height=int(height), waypoints=tuple(points))


def path_from_points(width: int, height: int, points) -> Path:
    waypoints = tuple(Waypoint(float(x), float(y)) for x, y in points)
    if len(waypoints) < 2:
        raise ValueError("Path needs at least 2 waypoints")
    return Path(width=int(width), height=int(height), waypoints=waypoints)
