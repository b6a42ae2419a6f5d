"""Fixed calibration of SSIMULACRA 2.1.

The weights were fitted offline against human-rated image pairs. They are
published in channel-major order (channel, scale, norm, map); the feature
vector is laid out scale-major (scale, channel, map, norm), so the table is
permuted once at import. Changing any number here is a model update.
"""

from dataclasses import dataclass
from functools import lru_cache

NUM_SCALES = 6
CHANNELS = ("X", "Y", "B")
ERROR_MAPS = ("ssim", "artifact", "detail_lost")
NORMS = ("L1", "L4")

FEATURE_COUNT = NUM_SCALES * len(CHANNELS) * len(ERROR_MAPS) * len(NORMS)

# Published order: for channel, for scale, for norm, for map
PUBLISHED_WEIGHTS = (
    0.0,
    0.0007376606707406586,
    0.0,
    0.0,
    0.0007793481682867309,
    0.0,
    0.0,
    0.0004371155730107379,
    0.0,
    1.1041726426657346,
    0.00066284834129271,
    0.00015231632783718752,
    0.0,
    0.0016406437456599754,
    0.0,
    1.8422455520539298,
    11.441172603757666,
    0.0,
    0.0007989109436015163,
    0.000176816438078653,
    0.0,
    1.8787594979546387,
    10.94906990605142,
    0.0,
    0.0007289346991508072,
    0.9677937080626833,
    0.0,
    0.00014003424285435884,
    0.9981766977854967,
    0.00031949755934435053,
    0.0004550992113792063,
    0.0,
    0.0,
    0.0013648766163243398,
    0.0,
    0.0,
    0.0,
    0.0,
    0.0,
    7.466890328078848,
    0.0,
    17.445833984131262,
    0.0006235601634041466,
    0.0,
    0.0,
    6.683678146179332,
    0.00037724407979611296,
    1.027889937768264,
    225.20515300849274,
    0.0,
    0.0,
    19.213238186143016,
    0.0011401524586618361,
    0.001237755635509985,
    176.39317598450694,
    0.0,
    0.0,
    24.43300999870476,
    0.28520802612117757,
    0.0004485436923833408,
    0.0,
    0.0,
    0.0,
    34.77906344483772,
    44.835625328877896,
    0.0,
    0.0,
    0.0,
    0.0,
    0.0,
    0.0,
    0.0,
    0.0,
    0.0008680556573291698,
    0.0,
    0.0,
    0.0,
    0.0,
    0.0,
    0.0005313191874358747,
    0.0,
    0.00016533814161379112,
    0.0,
    0.0,
    0.0,
    0.0,
    0.0,
    0.0004179171803251336,
    0.0017290828234722833,
    0.0,
    0.0020827005846636437,
    0.0,
    0.0,
    8.826982764996862,
    23.19243343998926,
    0.0,
    95.1080498811086,
    0.9863978034400682,
    0.9834382792465353,
    0.0012286405048278493,
    171.2667255897307,
    0.9807858872435379,
    0.0,
    0.0,
    0.0,
    0.0005130064588990679,
    0.0,
    0.00010854057858411537,
)


def feature_index(scale, channel, error_map, norm):
    """Position of one feature in the feature vector."""
    return ((scale * len(CHANNELS) + channel) * len(ERROR_MAPS) + error_map) * len(NORMS) + norm


def published_index(scale, channel, error_map, norm):
    return ((channel * NUM_SCALES + scale) * len(NORMS) + norm) * len(ERROR_MAPS) + error_map


@lru_cache(maxsize=None)
def feature_names():
    names = [None] * FEATURE_COUNT
    for s in range(NUM_SCALES):
        for c, ch in enumerate(CHANNELS):
            for m, em in enumerate(ERROR_MAPS):
                for n, norm in enumerate(NORMS):
                    names[feature_index(s, c, m, n)] = f"s{s}.{ch}.{em}.{norm}"
    return tuple(names)


def _to_feature_order(published):
    weights = [0.0] * FEATURE_COUNT
    for s in range(NUM_SCALES):
        for c in range(len(CHANNELS)):
            for m in range(len(ERROR_MAPS)):
                for n in range(len(NORMS)):
                    weights[feature_index(s, c, m, n)] = published[published_index(s, c, m, n)]
    return tuple(weights)


@dataclass(frozen=True)
class Calibration:
    """Every constant the metric depends on. Instances are immutable."""
    weights: tuple = _to_feature_order(PUBLISHED_WEIGHTS)
    num_scales: int = NUM_SCALES
    min_size: int = 8
    # local statistics window
    blur_sigma: float = 1.5
    blur_radius: int = 6
    c2: float = 0.0009
    # positive XYB offsets
    x_scale: float = 14.0
    x_offset: float = 0.42
    y_offset: float = 0.01
    b_offset: float = 0.55
    # raw -> score mapping
    prescale: float = 0.9562382616834844
    poly: tuple = (2.326765642916932, -0.020884521182843837, 6.248496625763138e-05)
    exponent: float = 0.6276336467831387
    # matte intensities tried when an image has alpha and no background is given
    dark_background: float = 0.1
    light_background: float = 0.9


DEFAULT_CALIBRATION = Calibration()
