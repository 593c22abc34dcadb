"""
Synthesize labeled training images by randomly warping and degrading
labeled regions of a small set of source images.
"""

from .config import AugmentationConfig, load_config
from .pipeline import AugmentationPipeline, RunStats, Variant, image_transform
from .rects import FloatRect, Rect
from .sink import AnnotatedImageWriter

__all__ = [
    "AnnotatedImageWriter",
    "AugmentationConfig",
    "AugmentationPipeline",
    "FloatRect",
    "Rect",
    "RunStats",
    "Variant",
    "image_transform",
    "load_config",
]
