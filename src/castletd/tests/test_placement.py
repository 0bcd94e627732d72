import pytest

from castletd.core.model.state import GameState
from castletd.core.rules.placement import can_place_tower, place_tower


def test_exactly_one_placement_succeeds_with_100_gold() -> None:
    s = GameState(gold=100)

    first = place_tower(s, 800, 400, 100, 100, "basic")
    assert first is not None
    assert s.gold == 0
    assert s.gold_spent == 100

    second = place_tower(s, 800, 400, 200, 100, "basic")
    assert second is None
    assert s.gold == 0
    assert s.towers == [first]


@pytest.mark.parametrize("kind", ["basic", "triple"])
def test_tower_gets_stats_from_its_kind(kind: str) -> None:
    s = GameState(gold=100)
    tower = place_tower(s, 800, 400, 10, 20, kind)

    assert tower is not None
    assert tower.kind == kind
    assert (tower.x, tower.y) == (10.0, 20.0)
    assert tower.last_shot_ms is None
    assert tower.projectiles == []
    if kind == "basic":
        assert (tower.range, tower.damage, tower.cooldown_ms) == (100.0, 1.0, 1000.0)
    else:
        assert (tower.range, tower.damage, tower.cooldown_ms) == (120.0, 2.0, 2000.0)


def test_off_canvas_placement_is_ignored() -> None:
    s = GameState(gold=500)
    assert place_tower(s, 800, 400, -1, 100) is None
    assert place_tower(s, 800, 400, 100, 401) is None
    assert s.gold == 500
    assert s.towers == []


def test_no_placement_after_game_over() -> None:
    s = GameState(gold=500, game_over=True)
    assert not can_place_tower(s, 800, 400, 100, 100)
    assert place_tower(s, 800, 400, 100, 100) is None
    assert s.gold == 500


def test_unknown_kind_raises() -> None:
    s = GameState(gold=500)
    with pytest.raises(KeyError):
        place_tower(s, 800, 400, 100, 100, "laser")
