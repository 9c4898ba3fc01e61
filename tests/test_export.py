import pytest

import bubble_art.export as export_mod
from bubble_art.errors import ConversionCancelled, EmptyGridError
from bubble_art.export import export_block_size, render_export
from bubble_art.model import CapabilityTier, Color, QualityLevel

from conftest import run

FULL = CapabilityTier.UNCONSTRAINED
REDUCED = CapabilityTier.CONSTRAINED


@pytest.mark.parametrize("quality,tier,expected", [
    (QualityLevel.MEDIUM, FULL, 1),
    (QualityLevel.HIGH, FULL, 2),
    (QualityLevel.ULTRA, FULL, 3),
    (QualityLevel.MEDIUM, REDUCED, 1),
    (QualityLevel.HIGH, REDUCED, 2),
    (QualityLevel.ULTRA, REDUCED, 2),
])
def test_quality_multiplier_table(quality, tier, expected):
    assert quality.multiplier(tier) == expected
    assert export_block_size(10, quality, tier) == 10 * expected


def test_unknown_quality_falls_back_to_high():
    assert QualityLevel.parse("bogus") is QualityLevel.HIGH
    assert QualityLevel.parse("ULTRA") is QualityLevel.ULTRA


def test_single_cell_export():
    grid = [[Color(100, 150, 200)]]
    img = run(render_export(grid, QualityLevel.HIGH, FULL, base_block_size=10))
    assert img.size == (20, 20)
    assert img.mode == "RGB"
    for corner in [(0, 0), (19, 0), (0, 19), (19, 19)]:
        assert img.getpixel(corner) == (255, 255, 255)
    center = img.getpixel((10, 10))
    for got, base in zip(center, (100, 150, 200)):
        assert abs(got - base) <= 40


def test_export_dimensions_follow_grid():
    grid = [[Color(0, 0, 0)] * 3 for _ in range(2)]
    img = run(render_export(grid, QualityLevel.MEDIUM, FULL, base_block_size=4))
    assert img.size == (12, 8)


@pytest.mark.parametrize("grid", [[], [[]]])
def test_empty_grid_fails_before_allocation(monkeypatch, grid):
    def no_alloc(*args, **kwargs):
        raise AssertionError("surface allocated")

    monkeypatch.setattr(export_mod.np, "full", no_alloc)
    with pytest.raises(EmptyGridError):
        run(render_export(grid, QualityLevel.HIGH, FULL, base_block_size=10))


def test_export_progress_covers_second_half():
    values = []
    grid = [[Color(10, 10, 10)] * 4 for _ in range(25)]
    run(render_export(grid, QualityLevel.MEDIUM, FULL, values.append, base_block_size=2))
    assert values == sorted(values)
    assert values[0] > 0.5
    assert values[-1] == 1.0


def test_export_reports_at_least_every_ten_rows():
    values = []
    grid = [[Color(10, 10, 10)] for _ in range(100)]
    run(render_export(grid, QualityLevel.MEDIUM, FULL, values.append,
                      base_block_size=1, progress_updates=2))
    assert len(values) == 10


def test_export_cancellation_checked_per_row():
    rows_seen = {"n": 0}

    def is_cancelled():
        rows_seen["n"] += 1
        return rows_seen["n"] > 3

    grid = [[Color(1, 2, 3)] * 2 for _ in range(8)]
    with pytest.raises(ConversionCancelled):
        run(render_export(grid, QualityLevel.HIGH, FULL, None, is_cancelled, base_block_size=4))
    assert rows_seen["n"] == 4


def test_export_is_deterministic():
    grid = [[Color(30, 60, 90), Color(200, 100, 0)], [Color(5, 5, 5), Color(250, 250, 250)]]
    a = run(render_export(grid, QualityLevel.ULTRA, FULL, base_block_size=6))
    b = run(render_export(grid, QualityLevel.ULTRA, FULL, base_block_size=6))
    assert a.tobytes() == b.tobytes()


def test_export_yields_after_each_report():
    calls = {"n": 0}
    values = []

    async def counting_yield():
        calls["n"] += 1

    grid = [[Color(10, 10, 10)] for _ in range(25)]
    run(render_export(grid, QualityLevel.MEDIUM, FULL, values.append,
                      base_block_size=1, progress_updates=2, yield_control=counting_yield))
    # reports after rows 10, 20 and the last one
    assert values == pytest.approx([0.7, 0.9, 1.0])
    assert calls["n"] == 3
