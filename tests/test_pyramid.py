import numpy as np
import pytest

from ssimulacra2.alpha import alpha_blend
from ssimulacra2.errors import InvalidInputError, SizeMismatchError
from ssimulacra2.pyramid import build_pyramid, downsample, level_sizes


def test_downsample_averages_2x2_blocks():
    img = np.arange(16, dtype=np.float32).reshape(4, 4, 1)
    out = downsample(img)
    assert out.shape == (2, 2, 1)
    assert out[0, 0, 0] == pytest.approx((0 + 1 + 4 + 5) / 4)
    assert out[1, 1, 0] == pytest.approx((10 + 11 + 14 + 15) / 4)


def test_downsample_odd_size_clamps_edge():
    img = np.arange(9, dtype=np.float32).reshape(3, 3, 1)
    out = downsample(img)
    assert out.shape == (2, 2, 1)
    # last column block is (2, 2, 5, 5)
    assert out[0, 1, 0] == pytest.approx((2 + 2 + 5 + 5) / 4)
    # corner block repeats the single corner sample
    assert out[1, 1, 0] == pytest.approx(8.0)


def test_downsample_keeps_constant_images_constant():
    img = np.full((7, 5, 3), 0.25, dtype=np.float32)
    out = downsample(img)
    assert out.shape == (4, 3, 3)
    assert np.all(out == np.float32(0.25))


def test_level_sizes_use_ceiling_halving():
    assert level_sizes(100, 37) == [(100, 37), (50, 19), (25, 10), (13, 5), (7, 3), (4, 2)]


def test_build_pyramid_yields_six_levels(textured):
    levels = list(build_pyramid(textured, textured.copy()))
    assert [scale for scale, _, _ in levels] == list(range(6))
    assert [lvl.shape[:2] for _, lvl, _ in levels] == [
        (64, 64), (32, 32), (16, 16), (8, 8), (4, 4), (2, 2)]


def test_build_pyramid_rejects_mismatch():
    with pytest.raises(SizeMismatchError):
        next(build_pyramid(np.zeros((8, 8, 3), np.float32), np.zeros((8, 9, 3), np.float32)))


def test_alpha_blend_opaque_and_transparent():
    px = np.zeros((8, 8, 4), dtype=np.float32)
    px[:, :, :3] = 0.6
    px[:4, :, 3] = 1.0
    out = alpha_blend(px, 0.1)
    assert out.shape == (8, 8, 3)
    assert np.allclose(out[:4], 0.6)
    assert np.allclose(out[4:], 0.1)


def test_alpha_blend_half_alpha():
    px = np.full((8, 8, 4), 0.5, dtype=np.float32)
    px[:, :, :3] = 1.0
    assert np.allclose(alpha_blend(px, 0.9), 0.5 * 1.0 + 0.5 * 0.9)


def test_alpha_blend_passes_rgb_through(textured):
    assert alpha_blend(textured, 0.5) is textured


@pytest.mark.parametrize("background", [-0.1, 1.5, "dark"])
def test_alpha_blend_rejects_bad_background(rgba, background):
    with pytest.raises(InvalidInputError):
        alpha_blend(rgba, background)
