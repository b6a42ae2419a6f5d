"""Local statistics at one pyramid level.

All maps are computed with the same fixed Gaussian window at every level; the
pyramid supplies the multi-scale behaviour. Inputs are H x W x 3 positive-XYB
float32 buffers; the maps keep that shape (one plane per channel).
"""

from dataclasses import dataclass

import cv2 as cv
import numpy as np

from .calibration import DEFAULT_CALIBRATION


@dataclass(frozen=True)
class LocalStats:
    """Windowed first and second moments of a reference/distorted pair.

    ``sigma11``, ``sigma22`` and ``sigma12`` are the blurred raw products
    (E[x^2], E[y^2], E[xy]); the squared means are subtracted where they are
    used, in double precision.
    """
    mu1: np.ndarray
    mu2: np.ndarray
    sigma11: np.ndarray
    sigma22: np.ndarray
    sigma12: np.ndarray


def gaussian_blur(img, calibration=DEFAULT_CALIBRATION):
    ksize = 2 * calibration.blur_radius + 1
    return cv.GaussianBlur(np.ascontiguousarray(img), (ksize, ksize),
                           sigmaX=calibration.blur_sigma, sigmaY=calibration.blur_sigma,
                           borderType=cv.BORDER_REFLECT)


def local_statistics(img1, img2, calibration=DEFAULT_CALIBRATION):
    return LocalStats(
        mu1=gaussian_blur(img1, calibration),
        mu2=gaussian_blur(img2, calibration),
        sigma11=gaussian_blur(img1 * img1, calibration),
        sigma22=gaussian_blur(img2 * img2, calibration),
        sigma12=gaussian_blur(img1 * img2, calibration),
    )


def ssim_map(stats, calibration=DEFAULT_CALIBRATION):
    """Per-pixel structural similarity, 1.0 where the images agree.

    The luminance term is ``1 - (mu1 - mu2)^2`` rather than the classic
    ratio: XYB is already perceptually uniform, so no second gamma is applied.
    Values can go negative for anti-correlated structure.
    """
    mu1 = stats.mu1.astype(np.float64)
    mu2 = stats.mu2.astype(np.float64)
    mu11 = mu1 * mu1
    mu22 = mu2 * mu2
    mu12 = mu1 * mu2
    num_m = 1.0 - (mu1 - mu2) * (mu1 - mu2)
    num_s = 2.0 * (stats.sigma12.astype(np.float64) - mu12) + calibration.c2
    denom_s = (stats.sigma11.astype(np.float64) - mu11) + (stats.sigma22.astype(np.float64) - mu22) + calibration.c2
    return num_m * num_s / denom_s


def edge_diff_map(img1, mu1, img2, mu2):
    """Relative change of local high-frequency energy, 0.0 where unchanged.

    Positive where the distorted image has edges the reference lacks
    (ringing, blocking), negative where reference detail was smoothed away.
    """
    detail1 = np.abs(img1.astype(np.float64) - mu1)
    detail2 = np.abs(img2.astype(np.float64) - mu2)
    return (1.0 + detail2) / (1.0 + detail1) - 1.0
