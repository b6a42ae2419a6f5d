"""Error kinds and exceptions raised by the metric and its decoder.

Every failure is raised to the caller with its kind and, where useful, a
multi-line ``details`` string (e.g. the header analysis of undecodable bytes).
"""

from enum import IntEnum


class ErrorKind(IntEnum):
    OK = 0
    INVALID_INPUT = -1
    FILE_NOT_FOUND = -2
    UNSUPPORTED_FORMAT = -3
    SIZE_MISMATCH = -4
    TOO_SMALL = -5
    OUT_OF_MEMORY = -6
    CORRUPT_DATA = -7
    EMPTY_DATA = -8
    DECODE_FAILED = -9
    INTERNAL = -10
    UNKNOWN = -99


_MESSAGES = {
    ErrorKind.OK: "Success",
    ErrorKind.INVALID_INPUT: "Invalid input parameters",
    ErrorKind.FILE_NOT_FOUND: "File not found or could not be loaded",
    ErrorKind.UNSUPPORTED_FORMAT: "Unsupported image format",
    ErrorKind.SIZE_MISMATCH: "Image size mismatch",
    ErrorKind.TOO_SMALL: "Image too small (minimum 8x8 pixels)",
    ErrorKind.OUT_OF_MEMORY: "Out of memory",
    ErrorKind.CORRUPT_DATA: "Corrupt or invalid image data",
    ErrorKind.EMPTY_DATA: "Empty data buffer",
    ErrorKind.DECODE_FAILED: "Failed to decode image data",
    ErrorKind.INTERNAL: "Internal error (calibration table does not match the feature vector)",
    ErrorKind.UNKNOWN: "Unknown error",
}


def error_message(kind):
    """Human-readable text for an error kind (or its integer code)."""
    try:
        return _MESSAGES[ErrorKind(kind)]
    except ValueError:
        return "Invalid error code"


class Ssimulacra2Error(ValueError):
    kind = ErrorKind.UNKNOWN

    def __init__(self, message=None, details="", kind=None):
        if kind is not None:
            self.kind = ErrorKind(kind)
        self.details = details
        super().__init__(message or error_message(self.kind))


class InvalidInputError(Ssimulacra2Error):
    kind = ErrorKind.INVALID_INPUT


class SizeMismatchError(Ssimulacra2Error):
    kind = ErrorKind.SIZE_MISMATCH


class ImageTooSmallError(Ssimulacra2Error):
    kind = ErrorKind.TOO_SMALL


class DecodeError(Ssimulacra2Error):
    """Raised by the decoder; ``kind`` tells missing file, empty, unsupported or corrupt apart."""
    kind = ErrorKind.DECODE_FAILED


class CalibrationError(Ssimulacra2Error):
    # a build defect, never a per-call condition
    kind = ErrorKind.INTERNAL
