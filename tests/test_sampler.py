from bubble_art.model import BLACK, CapabilityTier, Color, PixelBuffer
from bubble_art.sampler import FULL_OFFSETS, REDUCED_OFFSETS, ColorSampler, sample_block, sample_offsets

from conftest import BLUE, RED, WHITE, make_buffer, gradient_buffer

FULL = CapabilityTier.UNCONSTRAINED
REDUCED = CapabilityTier.CONSTRAINED


def _center_marked_buffer():
    # 4x4 red with a single blue pixel at (2, 2), the block center
    pixels = [BLUE if (x, y) == (2, 2) else RED for y in range(4) for x in range(4)]
    return make_buffer(4, 4, pixels)


def test_offsets_per_tier():
    assert sample_offsets(FULL) == FULL_OFFSETS
    assert sample_offsets(REDUCED) == REDUCED_OFFSETS
    assert len(FULL_OFFSETS) == 5
    assert REDUCED_OFFSETS == ((0.5, 0.5),)


def test_solid_block_returns_its_color():
    buf = PixelBuffer.solid(4, 4, RED)
    assert sample_block(buf, 0, 0, 4, FULL) == Color(255, 0, 0)


def test_reduced_tier_reads_only_center():
    buf = _center_marked_buffer()
    assert sample_block(buf, 0, 0, 4, REDUCED) == Color(0, 0, 255)


def test_full_tier_averages_five_points():
    buf = _center_marked_buffer()
    # one blue sample, four red ones
    assert sample_block(buf, 0, 0, 4, FULL) == Color(204, 0, 51)


def test_coordinates_are_clamped_into_the_buffer():
    buf = make_buffer(2, 2, [RED, BLUE, RED, WHITE])
    # every sample point lands past the edge and clamps to (1, 1)
    assert sample_block(buf, 10, 10, 4, FULL) == Color(255, 255, 255)


def test_empty_buffer_falls_back_to_black():
    assert sample_block(PixelBuffer(0, 0, b""), 0, 0, 4, FULL) is BLACK


def test_truncated_data_falls_back_to_black():
    buf = PixelBuffer(4, 4, b"")
    assert sample_block(buf, 0, 0, 4, FULL) == Color(0, 0, 0)


def test_cached_result_matches_uncached():
    buf = gradient_buffer(17, 13)
    sampler = ColorSampler()
    first = sampler.sample_block(buf, 5, 5, 5, FULL)
    second = sampler.sample_block(buf, 5, 5, 5, FULL)
    assert first == second == sample_block(buf, 5, 5, 5, FULL)
    assert sampler.hits == 1
    assert sampler.misses == 1
    assert (5, 5, 5) in sampler


def test_cache_key_includes_block_size():
    buf = gradient_buffer(16, 16)
    sampler = ColorSampler()
    sampler.sample_block(buf, 0, 0, 4, FULL)
    sampler.sample_block(buf, 0, 0, 8, FULL)
    assert len(sampler) == 2


def test_clear_drops_entries_and_counters():
    buf = gradient_buffer(8, 8)
    sampler = ColorSampler()
    sampler.sample_block(buf, 0, 0, 4, FULL)
    sampler.clear()
    assert len(sampler) == 0
    assert sampler.hits == sampler.misses == 0


def test_fallback_is_not_memoized():
    sampler = ColorSampler()
    assert sampler.sample_block(PixelBuffer(0, 0, b""), 0, 0, 4, FULL) == BLACK
    assert len(sampler) == 0


def test_real_black_pixels_are_memoized():
    sampler = ColorSampler()
    buf = PixelBuffer.solid(4, 4, (0, 0, 0))
    assert sampler.sample_block(buf, 0, 0, 4, FULL) == BLACK
    assert len(sampler) == 1
