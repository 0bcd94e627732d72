from __future__ import annotations

import sys
from pathlib import Path

import pytest


SRC_PATH = Path(__file__).resolve().parent / "src"
if SRC_PATH.is_dir():
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture
def straight_path():
    from castletd.core.model.path import path_from_points

    return path_from_points(800, 400, [(0, 200), (800, 200)])
