import math

from .calibration import DEFAULT_CALIBRATION
from .errors import CalibrationError


def combine(features, calibration=DEFAULT_CALIBRATION):
    """Weighted sum of the absolute feature values.

    ``math.fsum`` makes the total independent of summation order.
    """
    values = features.values if hasattr(features, "values") else features
    weights = calibration.weights
    if len(values) != len(weights):
        raise CalibrationError(
            f"feature vector has {len(values)} entries but the weight table has {len(weights)}")
    return math.fsum(w * abs(float(v)) for w, v in zip(weights, values))


def map_to_score(raw, calibration=DEFAULT_CALIBRATION):
    """Monotone map from the raw weighted error to the 100-is-perfect scale."""
    raw *= calibration.prescale
    a, b, c = calibration.poly
    raw = a * raw + b * raw * raw + c * raw * raw * raw
    if raw > 0:
        return 100.0 - 10.0 * math.pow(raw, calibration.exponent)
    return 100.0


def score(features, calibration=DEFAULT_CALIBRATION):
    return map_to_score(combine(features, calibration), calibration)


_QUALITY_LABELS = (
    (0.0, "Extremely low quality, very strong distortion"),
    (10.0, "Very low quality"),
    (30.0, "Low quality"),
    (50.0, "Medium quality"),
    (70.0, "High quality"),
    (80.0, "Very high quality"),
    (85.0, "Excellent quality"),
    (90.0, "Visually lossless"),
)


def quality_label(value):
    """Rough verbal reading of a score, e.g. 'High quality' for 50 <= score < 70."""
    for upper, label in _QUALITY_LABELS:
        if value < upper:
            return label
    return "Near mathematically lossless"
