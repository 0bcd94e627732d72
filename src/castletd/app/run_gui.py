from __future__ import annotations

import argparse
import logging

from castletd.core.config import load_game_config


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default=None, help="Path to a JSON game config")
    ap.add_argument("--set", dest="overrides", action="append", default=None, help="Override, e.g. spawn.interval_ms=1500")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(message)s",
    )

    from castletd.gui.pyglet_app import run

    run(load_game_config(args.config, args.overrides), seed=args.seed)


if __name__ == "__main__":
    main()
