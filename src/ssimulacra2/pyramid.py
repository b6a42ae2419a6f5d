import logging

import numpy as np

from .calibration import DEFAULT_CALIBRATION
from .errors import SizeMismatchError

logger = logging.getLogger(__name__)


def downsample(img):
    """Halve an H x W x C buffer with a 2x2 box filter.

    An odd trailing row/column is clamped (the edge sample is repeated), so the
    output is ceil(H/2) x ceil(W/2) and no input sample is dropped.
    """
    h, w = img.shape[:2]
    padded = np.pad(img, ((0, h % 2), (0, w % 2), (0, 0)), mode="edge")
    total = (padded[0::2, 0::2] + padded[0::2, 1::2]) + padded[1::2, 0::2] + padded[1::2, 1::2]
    return (total * np.float32(0.25)).astype(img.dtype, copy=False)


def level_sizes(width, height, num_scales=DEFAULT_CALIBRATION.num_scales):
    """(width, height) of every pyramid level."""
    sizes = [(width, height)]
    for _ in range(num_scales - 1):
        width, height = (width + 1) // 2, (height + 1) // 2
        sizes.append((width, height))
    return sizes


def build_pyramid(reference, distorted, num_scales=DEFAULT_CALIBRATION.num_scales):
    """Yield ``(scale, reference_level, distorted_level)`` for every level.

    Levels are produced lazily; each pair is released once the caller moves on
    to the next one.
    """
    if reference.shape != distorted.shape:
        raise SizeMismatchError(f"pyramid inputs differ: {reference.shape} vs {distorted.shape}")
    for scale in range(num_scales):
        if scale:
            reference = downsample(reference)
            distorted = downsample(distorted)
        logger.debug("pyramid level %d: %dx%d", scale, reference.shape[1], reference.shape[0])
        yield scale, reference, distorted
