"""Metric orchestration: buffers in, SSIMULACRA 2.1 score out.

``compute`` is the core entry point. ``compute_from_files`` and
``compute_from_memory`` decode first and then defer to it.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from .alpha import alpha_blend
from .calibration import DEFAULT_CALIBRATION
from .colorspace import to_positive_xyb
from .features import assemble_features, scale_features
from .image import check_background, check_pair, has_alpha
from .metrics import edge_diff_map, local_statistics, ssim_map
from .processing import SRGB, decode_image, load_config, load_image
from .pyramid import build_pyramid
from .score import score as combine_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PassResult:
    """Outcome of one pipeline run; ``background`` is None for opaque images."""
    background: object
    features: object
    score: float


@dataclass(frozen=True)
class Comparison:
    score: float
    passes: tuple

    @property
    def worst_pass(self):
        return min(self.passes, key=lambda p: p.score)


def compute_features(reference, distorted, calibration=DEFAULT_CALIBRATION):
    """Feature vector of two opaque linear-RGB buffers of equal size.

    Level ``s + 1`` of the pyramid is only evaluated while level ``s`` is at
    least ``min_size`` in both dimensions; unevaluated levels stay zero.
    """
    blocks = {}
    for scale, ref_level, dist_level in build_pyramid(reference, distorted, calibration.num_scales):
        img1 = to_positive_xyb(ref_level, calibration)
        img2 = to_positive_xyb(dist_level, calibration)
        stats = local_statistics(img1, img2, calibration)
        blocks[scale] = scale_features(
            ssim_map(stats, calibration),
            edge_diff_map(img1, stats.mu1, img2, stats.mu2))
        if min(ref_level.shape[:2]) < calibration.min_size:
            break
    logger.debug("evaluated %d of %d scales", len(blocks), calibration.num_scales)
    return assemble_features(blocks)


def _run_pass(reference, distorted, background, calibration):
    if background is not None:
        reference = alpha_blend(reference, background)
        distorted = alpha_blend(distorted, background)
    features = compute_features(reference, distorted, calibration)
    result = PassResult(background, features, combine_score(features, calibration))
    logger.debug("background %s: score %.8f", background, result.score)
    return result


def pass_backgrounds(reference, distorted, background=None, calibration=DEFAULT_CALIBRATION):
    """Background intensities the comparison runs at, in pass order."""
    if not (has_alpha(reference) or has_alpha(distorted)):
        return (None,)
    if background is not None:
        return (background,)
    return (calibration.dark_background, calibration.light_background)


def compare(reference, distorted, background=None, calibration=DEFAULT_CALIBRATION, workers=1):
    """Full comparison with every pass kept, see ``compute``."""
    reference, distorted = check_pair(reference, distorted, calibration.min_size)
    background = check_background(background)
    backgrounds = pass_backgrounds(reference, distorted, background, calibration)

    if workers > 1 and len(backgrounds) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(backgrounds))) as executor:
            passes = tuple(executor.map(
                lambda bg: _run_pass(reference, distorted, bg, calibration), backgrounds))
    else:
        passes = tuple(_run_pass(reference, distorted, bg, calibration) for bg in backgrounds)

    # the worse background wins
    return Comparison(min(p.score for p in passes), passes)


def compute(reference, distorted, background=None, calibration=DEFAULT_CALIBRATION, workers=1):
    """SSIMULACRA 2.1 score of ``distorted`` against ``reference``.

    Both are linear-light H x W x 3 or H x W x 4 float buffers of the same
    size, at least 8x8. Images with alpha are composited over ``background``
    or, when it is None, over dark (0.1) and light (0.9) gray with the lower
    score reported. 100 means identical; there is no lower bound.

    Raises ``InvalidInputError``, ``ImageTooSmallError`` or
    ``SizeMismatchError`` before any computation starts.
    """
    return compare(reference, distorted, background, calibration, workers).score


def compare_files(original_path, distorted_path, background=None, colorspace=SRGB,
                  config_path=None, calibration=DEFAULT_CALIBRATION, workers=1):
    check_background(background)
    config = load_config(config_path) if config_path else None
    reference = load_image(original_path, colorspace, config)
    distorted = load_image(distorted_path, colorspace, config)
    return compare(reference, distorted, background, calibration, workers)


def compute_from_files(original_path, distorted_path, background=None, colorspace=SRGB,
                       config_path=None, calibration=DEFAULT_CALIBRATION, workers=1):
    return compare_files(original_path, distorted_path, background, colorspace,
                         config_path, calibration, workers).score


def compute_from_memory(original_data, distorted_data, background=None, colorspace=SRGB,
                        config_path=None, calibration=DEFAULT_CALIBRATION, workers=1):
    check_background(background)
    config = load_config(config_path) if config_path else None
    reference = decode_image(original_data, colorspace, config)
    distorted = decode_image(distorted_data, colorspace, config)
    return compute(reference, distorted, background, calibration, workers)
