import numpy as np

from .calibration import DEFAULT_CALIBRATION
from .errors import InvalidInputError

# Opsin absorbance: linear sRGB -> LMS-like cone responses
OPSIN_ABSORBANCE_MATRIX = np.array([
    [0.30, 0.622, 0.078],
    [0.23, 0.692, 0.078],
    [0.24342268924547819, 0.20476744424496821, 0.55180986650955360],
], dtype=np.float32)

OPSIN_ABSORBANCE_BIAS = np.float32(0.0037930732552754493)
_NEG_BIAS_CBRT = -np.cbrt(OPSIN_ABSORBANCE_BIAS)


def linear_rgb_to_xyb(rgb):
    """Convert an H x W x 3 linear sRGB buffer to XYB.

    Mixed cone responses are clamped at zero before the cube root, so
    out-of-gamut negatives cannot produce NaNs.
    """
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        raise InvalidInputError(f"expected an H x W x 3 buffer, got shape {rgb.shape}")
    mixed = rgb.astype(np.float32, copy=False) @ OPSIN_ABSORBANCE_MATRIX.T
    mixed += OPSIN_ABSORBANCE_BIAS
    np.maximum(mixed, 0.0, out=mixed)
    lms = np.cbrt(mixed) + _NEG_BIAS_CBRT

    xyb = np.empty_like(lms)
    xyb[:, :, 0] = 0.5 * (lms[:, :, 0] - lms[:, :, 1])
    xyb[:, :, 1] = 0.5 * (lms[:, :, 0] + lms[:, :, 1])
    xyb[:, :, 2] = lms[:, :, 2]
    return xyb


def make_positive_xyb(xyb, calibration=DEFAULT_CALIBRATION):
    """Shift and scale XYB so all three channels are roughly in [0, 1].

    B is replaced by B - Y, X is scaled up because its natural range is tiny.
    Returns a new array.
    """
    out = np.empty_like(xyb)
    out[:, :, 0] = xyb[:, :, 0] * calibration.x_scale + calibration.x_offset
    out[:, :, 1] = xyb[:, :, 1] + calibration.y_offset
    out[:, :, 2] = (xyb[:, :, 2] - xyb[:, :, 1]) + calibration.b_offset
    return out


def to_positive_xyb(rgb, calibration=DEFAULT_CALIBRATION):
    return make_positive_xyb(linear_rgb_to_xyb(rgb), calibration)
