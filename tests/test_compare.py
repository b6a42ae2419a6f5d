import types

import cv2 as cv
import numpy as np
import pytest

from ssimulacra2 import (ImageTooSmallError, InvalidInputError, SizeMismatchError, compare,
                         compute, compute_features)
from ssimulacra2.calibration import FEATURE_COUNT
from ssimulacra2.errors import ErrorKind
from ssimulacra2.metrics import gaussian_blur
from ssimulacra2.pyramid import build_pyramid


def _noisy(img, sigma, seed=7):
    noise = np.random.default_rng(seed).normal(0.0, 1.0, img.shape).astype(np.float32)
    return img + np.float32(sigma) * noise


def test_identical_images_score_100(textured):
    assert compute(textured, textured.copy()) == 100.0


def test_identical_gray_scores_100(gray):
    assert compute(gray, gray.copy()) == 100.0


def test_gray_noise_scenario(gray):
    once = compute(gray, _noisy(gray, 0.02))
    twice = compute(gray, _noisy(gray, 0.04))
    assert once < 100.0
    assert twice < once


@pytest.mark.parametrize("seed", range(5))
def test_score_never_exceeds_100(seed):
    rng = np.random.default_rng(seed)
    a = rng.random((24, 40, 3), dtype=np.float32)
    b = rng.random((24, 40, 3), dtype=np.float32)
    assert compute(a, b) <= 100.0


def test_score_decreases_with_blur_strength(textured):
    scores = [compute(textured, textured)]
    for sigma in (0.5, 1.0, 2.0, 4.0):
        blurred = cv.GaussianBlur(textured, (0, 0), sigma)
        scores.append(compute(textured, blurred))
    assert all(b <= a for a, b in zip(scores, scores[1:]))
    assert scores[-1] < scores[0]


def test_feature_vector_length_is_resolution_independent(textured):
    small = compute_features(textured[:8, :8], _noisy(textured[:8, :8], 0.05))
    large = compute_features(textured, _noisy(textured, 0.05))
    assert len(small) == len(large) == FEATURE_COUNT


def test_small_images_only_fill_reachable_scales(textured):
    ref = textured[:8, :8]
    fv = compute_features(ref, _noisy(ref, 0.05))
    # 8x8 -> scale 0 and its 4x4 half are evaluated, nothing below
    assert np.any(fv.scale_block(0) > 0)
    assert np.any(fv.scale_block(1) > 0)
    for scale in range(2, 6):
        assert np.all(fv.scale_block(scale) == 0.0)


def test_large_images_fill_all_scales(rng):
    ref = gaussian_blur(rng.random((160, 144, 3), dtype=np.float32))
    fv = compute_features(ref, _noisy(ref, 0.05))
    for scale in range(6):
        assert np.any(fv.scale_block(scale) > 0)


def test_alpha_takes_worse_background(rgba, rng):
    distorted = rgba.copy()
    distorted[:, :, :3] = np.clip(_noisy(rgba[:, :, :3], 0.05), 0.0, 1.0)
    dark = compute(rgba, distorted, background=0.1)
    light = compute(rgba, distorted, background=0.9)
    assert compute(rgba, distorted) == min(dark, light)


def test_alpha_runs_two_passes_and_explicit_background_one(rgba):
    result = compare(rgba, rgba.copy())
    assert [p.background for p in result.passes] == [0.1, 0.9]
    assert result.score == 100.0
    result = compare(rgba, rgba.copy(), background=0.5)
    assert [p.background for p in result.passes] == [0.5]


def test_opaque_images_ignore_background(textured):
    distorted = _noisy(textured, 0.03)
    result = compare(textured, distorted, background=0.3)
    assert [p.background for p in result.passes] == [None]
    assert result.score == compute(textured, distorted)


def test_alpha_on_distorted_only_still_composites(textured, rng):
    distorted = np.concatenate([textured, np.full((64, 64, 1), 0.5, np.float32)], axis=2)
    result = compare(textured, distorted)
    assert len(result.passes) == 2
    assert result.score < 100.0


def test_threaded_passes_match_sequential(rgba):
    distorted = rgba.copy()
    distorted[:, :, :3] = _noisy(rgba[:, :, :3], 0.04)
    assert compute(rgba, distorted, workers=2) == compute(rgba, distorted)


def test_deterministic(textured):
    distorted = _noisy(textured, 0.03)
    first = compute(textured, distorted)
    for _ in range(3):
        assert compute(textured, distorted) == first


def test_size_mismatch_rejected(textured):
    with pytest.raises(SizeMismatchError) as exc:
        compute(textured, textured[:, :32])
    assert exc.value.kind == ErrorKind.SIZE_MISMATCH


@pytest.mark.parametrize("shape", [(7, 64, 3), (64, 7, 3), (4, 4, 4)])
def test_too_small_rejected_before_pyramid(shape, monkeypatch):
    calls = []
    monkeypatch.setattr("ssimulacra2.orchestrator.build_pyramid",
                        lambda *a, **k: calls.append(a) or build_pyramid(*a, **k))
    img = np.zeros(shape, dtype=np.float32)
    with pytest.raises(ImageTooSmallError) as exc:
        compute(img, img.copy())
    assert exc.value.kind == ErrorKind.TOO_SMALL
    assert calls == []


@pytest.mark.parametrize("bad", [None, np.zeros((0, 0, 3)), np.zeros((16, 16)),
                                 np.zeros((16, 16, 2)), np.full((16, 16, 3), np.nan)])
def test_invalid_buffers_rejected(bad, gray):
    with pytest.raises(InvalidInputError):
        compute(bad, gray[:16, :16])


@pytest.mark.parametrize("background", [-0.01, 1.01])
def test_background_out_of_range_rejected(rgba, background):
    with pytest.raises(InvalidInputError):
        compute(rgba, rgba, background=background)


def test_integer_buffers_are_accepted(rng):
    a = rng.integers(0, 2, (16, 16, 3))
    assert compute(a, a) == 100.0


def test_orchestrator_module_is_not_shadowed():
    import ssimulacra2
    import ssimulacra2.orchestrator as orchestrator
    assert isinstance(orchestrator, types.ModuleType)
    assert orchestrator.build_pyramid is build_pyramid
    assert ssimulacra2.compare is orchestrator.compare


@pytest.mark.parametrize("alpha", [2.0, -0.5])
def test_alpha_outside_unit_range_rejected(rgba, alpha):
    bad = rgba.copy()
    bad[0, 0, 3] = alpha
    with pytest.raises(InvalidInputError) as exc:
        compute(bad, rgba)
    assert "alpha" in str(exc.value)
