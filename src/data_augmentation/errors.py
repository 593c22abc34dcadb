"""
Error kinds raised by the augmentation engine.

Per-image and per-variant errors are recoverable: the pipeline logs them and
moves on. Config and annotation errors are fatal for a run.
"""


class AugmentationError(Exception):
    """Base class for all augmentation errors."""


class UnreadableSourceError(AugmentationError):
    """A source image could not be decoded."""


class DegenerateRegionError(AugmentationError):
    """A rectangle was truncated to zero or negative width/height."""


class SingularProjectionError(AugmentationError):
    """A projective mapping hit a zero (or behind-camera) depth."""


class WriteFailureError(AugmentationError):
    """An output image could not be encoded or written."""


class ConfigError(AugmentationError):
    """Invalid or unreadable augmentation configuration."""


class AnnotationError(AugmentationError):
    """Input annotation file or image listing could not be read."""
