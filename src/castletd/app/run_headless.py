from __future__ import annotations

import argparse
import logging

from castletd.core.config import load_game_config
from castletd.core.engine import Engine
from castletd.core.model.towers import TOWER_DEFS


logger = logging.getLogger(__name__)


def _parse_placement(value: str) -> tuple[str, float, float]:
    parts = value.split(":")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"placement must be kind:x:y, got {value!r}")
    kind, x, y = parts
    if kind not in TOWER_DEFS:
        known = ", ".join(sorted(TOWER_DEFS))
        raise argparse.ArgumentTypeError(f"unknown tower kind {kind!r} (expected one of: {known})")
    try:
        return kind, float(x), float(y)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"placement coordinates must be numbers: {value!r}") from exc


def run_headless(engine: Engine, seconds: float, placements: list[tuple[str, float, float]]) -> str | None:
    for kind, x, y in placements:
        tower = engine.act("PLACE_TOWER", {"x": x, "y": y, "kind": kind})
        if tower is None:
            logger.warning("placement %s at (%.1f,%.1f) rejected (gold=%s)", kind, x, y, engine.state.gold)

    ticks = int(seconds * 1000.0 / engine.frame_ms)
    for _ in range(ticks):
        result = engine.tick()
        if result is not None:
            return result
    return None


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default=None, help="Path to a JSON game config")
    ap.add_argument("--set", dest="overrides", action="append", default=None, help="Override, e.g. enemy.health=5")
    ap.add_argument("--seconds", type=float, default=30.0)
    ap.add_argument("--fps", type=int, default=None)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--place", action="append", type=_parse_placement, default=[], help="kind:x:y, repeatable")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(message)s",
    )

    overrides = list(args.overrides or [])
    if args.fps is not None:
        overrides.append(f"sim.fps={args.fps}")
    config = load_game_config(args.config, overrides)
    engine = Engine(config, seed=args.seed)

    run_headless(engine, args.seconds, args.place)

    s = engine.state
    print(
        f"clock_ms={s.clock_ms:.0f} castle_health={s.castle_health} gold={s.gold} "
        f"kills={s.kills} breakthroughs={s.breakthroughs} enemies={len(s.enemies)} "
        f"towers={len(s.towers)} phase={engine.phase}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
