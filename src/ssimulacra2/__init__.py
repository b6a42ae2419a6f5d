"""SSIMULACRA 2.1 perceptual image similarity metric."""

__version__ = "2.1.0"
VERSION = "SSIMULACRA 2.1"

from .orchestrator import (Comparison, PassResult, compare, compare_files, compute,  # noqa: E402
                           compute_features, compute_from_files, compute_from_memory)
from .errors import (CalibrationError, DecodeError, ErrorKind, ImageTooSmallError,  # noqa: E402
                     InvalidInputError, SizeMismatchError, Ssimulacra2Error, error_message)
from .processing import decode_image, load_image  # noqa: E402
from .score import quality_label  # noqa: E402
from .sniff import analyze_image_header, detect_format  # noqa: E402


def get_version():
    return VERSION
