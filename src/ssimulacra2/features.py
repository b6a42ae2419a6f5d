"""Norm aggregation: per-scale statistic maps -> the fixed-length feature vector."""

from dataclasses import dataclass

import numpy as np

from .calibration import (CHANNELS, ERROR_MAPS, FEATURE_COUNT, NORMS, NUM_SCALES,
                          feature_index, feature_names)

SCALE_BLOCK = len(CHANNELS) * len(ERROR_MAPS) * len(NORMS)


def error_maps(ssim, edge_diff):
    """Deviation of each statistic map from its ideal value.

    Returns an array of shape (len(ERROR_MAPS), H, W, channels), all >= 0.
    """
    return np.stack([
        np.maximum(1.0 - ssim, 0.0),
        np.maximum(edge_diff, 0.0),
        np.maximum(-edge_diff, 0.0),
    ])


def l1_norm(errors):
    """Mean error per map and channel (average magnitude)."""
    return errors.mean(axis=(1, 2), dtype=np.float64)


def l4_norm(errors):
    """Fourth root of the mean fourth power per map and channel.

    A soft maximum: dominated by the worst regions without being decided by a
    single pixel.
    """
    sq = errors * errors
    return np.sqrt(np.sqrt((sq * sq).mean(axis=(1, 2), dtype=np.float64)))


def scale_features(ssim, edge_diff):
    """Norms of one pyramid level, shape (channels, maps, norms)."""
    errors = error_maps(ssim, edge_diff)
    norms = np.stack([l1_norm(errors), l4_norm(errors)], axis=-1)  # (maps, channels, norms)
    return norms.transpose(1, 0, 2)


@dataclass(frozen=True)
class FeatureVector:
    values: np.ndarray

    def __len__(self):
        return len(self.values)

    def __getitem__(self, key):
        if isinstance(key, str):
            key = feature_names().index(key)
        return self.values[key]

    def get(self, scale, channel, error_map, norm):
        return self.values[feature_index(scale, CHANNELS.index(channel),
                                         ERROR_MAPS.index(error_map), NORMS.index(norm))]

    def scale_block(self, scale):
        block = self.values[scale * SCALE_BLOCK:(scale + 1) * SCALE_BLOCK]
        return block.reshape(len(CHANNELS), len(ERROR_MAPS), len(NORMS))

    def as_dict(self):
        return dict(zip(feature_names(), self.values.tolist()))


def assemble_features(blocks):
    """Lay out ``{scale: block}`` in scale order; missing scales stay zero."""
    values = np.zeros(FEATURE_COUNT, dtype=np.float64)
    for scale, block in blocks.items():
        if not 0 <= scale < NUM_SCALES:
            raise IndexError(f"scale {scale} outside 0..{NUM_SCALES - 1}")
        values[scale * SCALE_BLOCK:(scale + 1) * SCALE_BLOCK] = np.asarray(block, dtype=np.float64).ravel()
    values.setflags(write=False)
    return FeatureVector(values)
