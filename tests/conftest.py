from __future__ import annotations

import cv2 as cv
import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def textured(rng):
    """64x64 linear-RGB image with structure at several scales."""
    noise = rng.random((64, 64, 3), dtype=np.float32)
    return np.clip(cv.GaussianBlur(noise, (0, 0), 1.0) * 0.8 + 0.1, 0.0, 1.0).astype(np.float32)


@pytest.fixture
def gray():
    return np.full((64, 64, 3), 0.2, dtype=np.float32)


@pytest.fixture
def rgba(textured, rng):
    alpha = rng.random((64, 64, 1), dtype=np.float32)
    return np.concatenate([textured, alpha], axis=2)


def encode_png(rgb_u8):
    """Encode an RGB(A) uint8 array as PNG bytes."""
    if rgb_u8.ndim == 3 and rgb_u8.shape[2] == 4:
        bgr = cv.cvtColor(rgb_u8, cv.COLOR_RGBA2BGRA)
    elif rgb_u8.ndim == 3:
        bgr = cv.cvtColor(rgb_u8, cv.COLOR_RGB2BGR)
    else:
        bgr = rgb_u8
    ok, buf = cv.imencode(".png", bgr)
    assert ok
    return buf.tobytes()
