"""
Augmentation driver.

For every source image and every labeled rectangle in it, generates
``generate_num`` variants by composing:

    random_deform_rect -> truncate_rect -> random_rotate_image -> noise -> blur

One random generator is threaded through the whole run, so a seeded run over
the same inputs in the same order reproduces its output exactly.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence

import cv2
import numpy as np
from tqdm import tqdm

from .config import AugmentationConfig
from .errors import (
    DegenerateRegionError,
    SingularProjectionError,
    UnreadableSourceError,
    WriteFailureError,
)
from .photometric import random_blur, random_noise
from .projection import DEFAULT_Z
from .rects import Rect, random_deform_rect, truncate_rect
from .rotation import random_rotate_image

logger = logging.getLogger(__name__)

ImageLoader = Callable[[Path], np.ndarray]


def read_image(path: Path | str) -> np.ndarray:
    """
    Decode an image file as 8-bit BGR.

    Raises:
        UnreadableSourceError: the file is missing or cannot be decoded
    """
    img = cv2.imread(str(path))
    if img is None or img.size == 0:
        raise UnreadableSourceError(f"cannot decode {path}")
    return img


def _check_pixel_buffer(img: np.ndarray):
    if img.dtype != np.uint8:
        raise ValueError(f"expected an 8-bit image, got {img.dtype}")
    if img.ndim == 2 or (img.ndim == 3 and img.shape[2] in (1, 3)):
        return
    raise ValueError(f"expected a 1 or 3 channel image, got shape {img.shape}")


def image_transform(
    img: np.ndarray,
    area: Rect,
    config: AugmentationConfig,
    rng: np.random.Generator,
    z: float = DEFAULT_Z,
    interpolation: int = cv2.INTER_LINEAR,
    border_mode: int = cv2.BORDER_CONSTANT,
    border_color=(0, 0, 0),
) -> np.ndarray:
    """
    Generate one randomized variant of ``area`` in ``img``.

    An empty ``area`` means the whole image, without deformation.

    Raises:
        DegenerateRegionError: the deformed region falls outside the image
        SingularProjectionError: the sampled pose cannot be projected
    """
    _check_pixel_buffer(img)
    img_size = (img.shape[1], img.shape[0])

    if area.is_empty():
        rect = Rect.full_frame(img)
    else:
        rect = random_deform_rect(
            area,
            config.x_slide_sigma,
            config.y_slide_sigma,
            config.aspect_ratio_sigma,
            rng,
        )
    rect = truncate_rect(rect, img_size)
    if rect.is_empty():
        raise DegenerateRegionError(f"deformed region {rect} has no pixels inside the image")

    dst = random_rotate_image(
        img,
        config.yaw_sigma,
        config.pitch_sigma,
        config.roll_sigma,
        rect,
        rng,
        z,
        interpolation,
        border_mode,
        border_color,
    )
    # noise goes on before blur
    dst = random_noise(dst, config.noise_max_sigma, rng)
    return random_blur(dst, config.blur_max_sigma, rng)


@dataclass
class Variant:
    """One generated image and where it came from."""
    source: Path
    image_index: int
    area_index: int
    variant_index: int
    image: np.ndarray

    @property
    def name(self) -> str:
        return f"img{self.image_index}_{self.area_index}_{self.variant_index}.png"


@dataclass
class RunStats:
    images_loaded: int = 0
    images_skipped: int = 0
    variants_written: int = 0
    variants_skipped: int = 0
    variants_failed: int = 0


class AugmentationPipeline:
    """
    Generates randomized variants of labeled regions.

    Unreadable images and variants whose region or projection degenerates
    are logged and skipped; they never stop the run.
    """

    def __init__(
        self,
        config: AugmentationConfig,
        rng: Optional[np.random.Generator] = None,
        load_image: ImageLoader = read_image,
        z: float = DEFAULT_Z,
    ):
        """
        Args:
            config: Sigmas and ratios for the run
            rng: Random generator shared by every draw (default: unseeded)
            load_image: Decodes a source path, raising UnreadableSourceError
            z: Camera distance used for pose warps
        """
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng()
        self.load_image = load_image
        self.z = z

    def iter_variants(
        self,
        img_files: Sequence[Path | str],
        areas: Optional[Sequence[Sequence[Rect]]] = None,
        stats: Optional[RunStats] = None,
    ) -> Iterator[Variant]:
        """
        Lazily generate variants for every image and labeled region.

        Args:
            img_files: Source image paths
            areas: Rectangles per image; ``None`` uses each full image once
            stats: Counters to update while generating
        """
        if areas is not None and len(areas) != len(img_files):
            raise ValueError(
                f"got {len(areas)} rectangle lists for {len(img_files)} images"
            )
        stats = stats if stats is not None else RunStats()

        for i, img_file in enumerate(tqdm(img_files, desc="images")):
            img_file = Path(img_file)
            logger.info(f"Load {img_file}")
            try:
                img = self.load_image(img_file)
            except UnreadableSourceError:
                logger.exception(f"skipping unreadable image {img_file}")
                stats.images_skipped += 1
                continue
            stats.images_loaded += 1

            trans_areas = [Rect.full_frame(img)] if areas is None else areas[i]
            for j, area in enumerate(trans_areas):
                for k in range(self.config.generate_num):
                    try:
                        tran_img = image_transform(
                            img, area, self.config, self.rng, self.z
                        )
                    except (DegenerateRegionError, SingularProjectionError) as ex:
                        logger.warning(
                            f"skipping variant {k} of area {j} in {img_file}: {ex}"
                        )
                        stats.variants_skipped += 1
                        continue
                    yield Variant(img_file, i, j, k, tran_img)

    def run(
        self,
        img_files: Sequence[Path | str],
        sink,
        areas: Optional[Sequence[Sequence[Rect]]] = None,
    ) -> RunStats:
        """
        Generate every variant and hand it to ``sink.write(name, image)``.

        Write failures are logged and counted; the run continues.
        """
        stats = RunStats()
        for variant in self.iter_variants(img_files, areas, stats):
            try:
                dst_file = sink.write(variant.name, variant.image)
            except WriteFailureError:
                logger.exception(f"Save image {variant.name} failed")
                stats.variants_failed += 1
                continue
            logger.info(f"Save image {dst_file} succeed")
            stats.variants_written += 1
        return stats
