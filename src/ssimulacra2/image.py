"""Pixel buffers and the preconditions every comparison checks up front.

A pixel buffer is a plain H x W x C float32 numpy array of linear-light
samples, C = 3 (RGB) or 4 (RGBA).
"""

import numpy as np

from .errors import ImageTooSmallError, InvalidInputError, SizeMismatchError

MIN_SIZE = 8


def as_pixel_buffer(pixels, name="image"):
    """Validate ``pixels`` and return it as a float32 H x W x C array."""
    if pixels is None:
        raise InvalidInputError(f"{name} is None")
    arr = np.asarray(pixels)
    if arr.size == 0:
        raise InvalidInputError(f"{name} is empty")
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise InvalidInputError(f"{name} must be H x W x 3 or H x W x 4, got shape {arr.shape}")
    if arr.dtype != np.float32:
        arr = arr.astype(np.float32)
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError(f"{name} contains NaN or infinite samples")
    if arr.shape[2] == 4:
        alpha = arr[:, :, 3]
        if alpha.min() < 0.0 or alpha.max() > 1.0:
            raise InvalidInputError(
                f"{name} alpha must be in [0, 1], got {alpha.min():g}..{alpha.max():g}")
    return arr


def has_alpha(pixels):
    return pixels.shape[2] == 4


def dimensions(pixels):
    """(width, height) of a buffer."""
    return pixels.shape[1], pixels.shape[0]


def check_min_size(pixels, name="image", min_size=MIN_SIZE):
    width, height = dimensions(pixels)
    if width < min_size or height < min_size:
        raise ImageTooSmallError(
            f"{name} is {width}x{height} pixels, minimum is {min_size}x{min_size}",
            details=f"Image too small: {width}x{height} pixels\n"
                    f"Minimum required size: {min_size}x{min_size} pixels\n")


def check_pair(reference, distorted, min_size=MIN_SIZE):
    """Validate both buffers of a comparison; returns them as float32 arrays."""
    reference = as_pixel_buffer(reference, "reference")
    distorted = as_pixel_buffer(distorted, "distorted")
    check_min_size(reference, "reference", min_size)
    check_min_size(distorted, "distorted", min_size)
    if reference.shape[:2] != distorted.shape[:2]:
        raise SizeMismatchError(
            "reference is {}x{} but distorted is {}x{}".format(
                *dimensions(reference), *dimensions(distorted)))
    return reference, distorted


def check_background(background):
    if background is None:
        return None
    try:
        value = float(background)
    except (TypeError, ValueError):
        raise InvalidInputError(f"background intensity must be a number, got {background!r}") from None
    if not 0.0 <= value <= 1.0:
        raise InvalidInputError(f"background intensity must be in [0, 1], got {value}")
    return value
