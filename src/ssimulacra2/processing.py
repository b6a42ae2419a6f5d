import functools
import logging
import os

import cv2 as cv
import numpy as np
import PyOpenColorIO as OCIO

from .errors import DecodeError, ErrorKind, ImageTooSmallError, InvalidInputError
from .image import MIN_SIZE
from .sniff import analyze_image_header, detect_format

logger = logging.getLogger(__name__)

DEFAULT_OCIO_CONFIG = "studio-config-latest"
SRGB = "sRGB - Texture"
LINEAR_SRGB = "Linear Rec.709 (sRGB)"


@functools.lru_cache(maxsize=None)
def load_config(path=None):
    """OCIO config from a .ocio file, or the built-in studio config."""
    try:
        if path:
            logger.debug("using OCIO config %s", path)
            return OCIO.Config.CreateFromFile(path)
        return OCIO.Config.CreateFromBuiltinConfig(DEFAULT_OCIO_CONFIG)
    except OCIO.Exception as e:
        raise InvalidInputError(f"cannot load OCIO config {path or DEFAULT_OCIO_CONFIG!r}: {e}") from e


def _make_processor(config, src, dst):
    return config.getProcessor(src, dst).getDefaultCPUProcessor()


def to_linear(rgb, colorspace=SRGB, config=None):
    """Convert encoded H x W x 3 samples in ``colorspace`` to linear sRGB."""
    if colorspace == LINEAR_SRGB:
        return rgb
    if config is None:
        config = load_config()
    try:
        cpu = _make_processor(config, colorspace, LINEAR_SRGB)
    except OCIO.Exception as e:
        raise InvalidInputError(f"cannot convert from color space {colorspace!r}: {e}") from e
    frame_copy = np.ascontiguousarray(rgb, dtype=np.float32).copy()
    cpu.applyRGB(frame_copy)
    return frame_copy


def _normalize(raw):
    # Convert to float32 and normalize based on bit depth
    if raw.dtype == np.uint8:
        return raw.astype(np.float32) / 255.0
    if raw.dtype == np.uint16:
        return raw.astype(np.float32) / 65535.0
    return raw.astype(np.float32)


def _to_rgb(frame):
    """OpenCV channel order (gray, BGR, BGRA) -> RGB or RGBA."""
    if frame.ndim == 2:
        return cv.cvtColor(frame, cv.COLOR_GRAY2RGB)
    if frame.shape[2] == 1:
        return cv.cvtColor(frame[:, :, 0], cv.COLOR_GRAY2RGB)
    if frame.shape[2] == 2:
        # gray + alpha
        gray = frame[:, :, :1]
        return np.ascontiguousarray(np.concatenate([gray, gray, gray, frame[:, :, 1:2]], axis=2))
    if frame.shape[2] == 4:
        return cv.cvtColor(frame, cv.COLOR_BGRA2RGBA)
    return cv.cvtColor(frame, cv.COLOR_BGR2RGB)


def decode_image(data, colorspace=SRGB, config=None):
    """Decode an encoded image buffer into a linear-light pixel buffer.

    Returns an H x W x 3 (or x 4 with alpha) float32 array. Alpha is never
    color managed. Images smaller than 8x8 are rejected.
    """
    if data is None:
        raise InvalidInputError("image data is None")
    if len(data) == 0:
        raise DecodeError("empty image data", kind=ErrorKind.EMPTY_DATA)

    analysis = analyze_image_header(data)
    try:
        raw = cv.imdecode(np.frombuffer(data, dtype=np.uint8), cv.IMREAD_UNCHANGED)
    except cv.error as e:
        raise DecodeError(f"failed to decode image data: {e}",
                          details=f"Image analysis:\n{analysis}",
                          kind=ErrorKind.CORRUPT_DATA) from e
    if raw is None:
        kind = ErrorKind.UNSUPPORTED_FORMAT if detect_format(data) is None else ErrorKind.DECODE_FAILED
        raise DecodeError(
            details="Failed to decode image data.\n"
                    f"Image analysis:\n{analysis}\n"
                    "Possible causes:\n"
                    "- Corrupted image data\n"
                    "- Unsupported image format variant\n"
                    "- Incomplete image data\n",
            kind=kind)

    height, width = raw.shape[:2]
    if width < MIN_SIZE or height < MIN_SIZE:
        raise ImageTooSmallError(
            f"image is {width}x{height} pixels, minimum is {MIN_SIZE}x{MIN_SIZE}",
            details=f"Image too small: {width}x{height} pixels\n"
                    f"Minimum required size: {MIN_SIZE}x{MIN_SIZE} pixels\n"
                    f"Image analysis:\n{analysis}")

    frame = _to_rgb(_normalize(raw))
    rgb = to_linear(frame[:, :, :3], colorspace, config)
    if frame.shape[2] == 4:
        return np.concatenate([rgb, frame[:, :, 3:4]], axis=2)
    return rgb


def load_image(path, colorspace=SRGB, config=None):
    """Load a still image from disk as a linear-light pixel buffer."""
    if not path:
        raise InvalidInputError("image path is empty")
    if not os.path.isfile(path):
        raise DecodeError(f"Could not read image: {path}", kind=ErrorKind.FILE_NOT_FOUND)
    with open(path, "rb") as f:
        data = f.read()
    logger.debug("read %d bytes from %s", len(data), path)
    return decode_image(data, colorspace, config)
