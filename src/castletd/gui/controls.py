from __future__ import annotations

from typing import Any, Mapping


# pyglet.window.mouse button codes (importing pyglet.window needs a display)
LEFT = 1
MIDDLE = 2
RIGHT = 4

# left click builds the basic tower, right click the triple one
BUTTON_KINDS: dict[int, str] = {
    LEFT: "basic",
    RIGHT: "triple",
}


def click_to_placement(
    button: int,
    x: float,
    y: float,
    height: float,
    button_kinds: Mapping[int, str] = BUTTON_KINDS,
) -> dict[str, Any] | None:
    """
    Turn a mouse press into a PLACE_TOWER payload.

    Unmapped buttons give None. Window y grows upwards while canvas y grows
    downwards, so y is flipped against the canvas height.
    """
    kind = button_kinds.get(button)
    if kind is None:
        return None
    return {"x": float(x), "y": float(height) - float(y), "kind": kind}
