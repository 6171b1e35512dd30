# cosmic_ball/tests/test_level.py
"""
Level generator tests.

Usage (from repo root):
  python -m cosmic_ball.tests.test_level
"""
from __future__ import annotations
from collections import Counter
from cosmic_ball.game.entities import Platform, PlatformType, STANDARD_PLATFORM_TYPES
from cosmic_ball.game.level import LevelGen, default_seed
from cosmic_ball.game.config import SEED_DEFAULT


def layout(gen: LevelGen):
    return [(round(p.x, 6), p.y, p.platform_type) for p in gen.platforms]


def test_type_distribution():
    gen = LevelGen(800, 600, seed=2024)
    n = 100_000
    counts = Counter(gen.random_platform_type() for _ in range(n))
    assert abs(counts[PlatformType.SPIKE_TWISTED] / n - 0.05) < 0.005
    assert abs(counts[PlatformType.SPIKE] / n - 0.05) < 0.005
    for t in STANDARD_PLATFORM_TYPES:
        assert abs(counts[t] / n - 0.18) < 0.01, f"{t} drawn {counts[t]} times"


def test_seed_level_layout():
    gen = LevelGen(800, 600, seed=5)
    gen.seed_level()
    start = gen.platforms[0]
    assert start.platform_type is PlatformType.STAR
    assert (start.x, start.y) == (350, 550)

    rows = sorted({p.y for p in gen.platforms[1:]}, reverse=True)
    assert rows[0] == 450 and rows[-1] == -1950 and len(rows) == 25
    for p in gen.platforms:
        assert 0 <= p.x <= 800 - p.width


def test_same_seed_same_layout():
    a, b = LevelGen(800, 600, seed=77), LevelGen(800, 600, seed=77)
    a.seed_level(); b.seed_level()
    a.extend(); b.extend()
    assert layout(a) == layout(b)
    assert [(u.x, u.y, u.powerup_type) for u in a.power_ups] == \
           [(u.x, u.y, u.powerup_type) for u in b.power_ups]


def test_extend_from_empty_reaches_threshold():
    gen = LevelGen(800, 600, seed=9)
    assert gen.highest_platform_y() == 600
    rows = gen.extend()
    assert rows > 0
    assert gen.highest_platform_y() <= gen.extension_threshold()
    assert not gen.needs_extension()
    assert gen.hazards == [], "extension rows never carry hazards"


def test_extension_rows_are_centred():
    gen = LevelGen(800, 600, seed=11)
    gen.extend()
    by_row = {}
    for p in gen.platforms:
        by_row.setdefault(p.y, []).append(p)
    for row in by_row.values():
        assert 1 <= len(row) <= 3
        left = min(p.x for p in row)
        right = max(p.x + p.width for p in row)
        assert abs(left - (800 - right)) < 1e-6
        xs = sorted(p.x for p in row)
        assert all(abs((b - a) - 120) < 1e-6 for a, b in zip(xs, xs[1:]))


def test_narrow_canvas_one_slot():
    gen = LevelGen(150, 600, seed=1)
    assert gen.slots_per_row() == 1
    gen.extend()
    assert all(len([p for p in gen.platforms if p.y == y]) == 1
               for y in {p.y for p in gen.platforms})


def test_invalid_canvas_rejected():
    for w, h in ((50, 600), (800, 0)):
        try:
            LevelGen(w, h, seed=1)
        except ValueError:
            continue
        raise AssertionError(f"{w}x{h} should be rejected")


def test_update_scrolls_and_prunes():
    gen = LevelGen(800, 600, seed=1)
    keep = Platform(0, 100, PlatformType.NEBULA)
    gone = Platform(0, 699, PlatformType.NEBULA)
    spike = Platform(0, 100, PlatformType.SPIKE)
    gen.platforms = [keep, gone, spike]
    live = gen.update(now_ms=0.0, game_speed=1.0)
    assert live == {keep.id, spike.id}
    assert keep.y == 103 and spike.y == 105


def test_default_seed_convention():
    assert default_seed(None) == SEED_DEFAULT
    assert default_seed(-1) is None
    assert default_seed(42) == 42


def main():
    test_type_distribution()
    test_seed_level_layout()
    test_same_seed_same_layout()
    test_extend_from_empty_reaches_threshold()
    test_extension_rows_are_centred()
    test_narrow_canvas_one_slot()
    test_invalid_canvas_rejected()
    test_update_scrolls_and_prunes()
    test_default_seed_convention()
    print("✓ level tests passed")


if __name__ == "__main__":
    main()
