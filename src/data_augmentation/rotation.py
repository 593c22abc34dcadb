"""
Random camera pose warps of an image region.
"""

import math
from dataclasses import dataclass

import cv2
import numpy as np

from .errors import DegenerateRegionError
from .projection import DEFAULT_Z, rotate_image
from .rects import Rect, trunc_half, truncate_rect_keep_center


@dataclass(frozen=True)
class Pose:
    """Camera viewpoint change, angles in degrees."""
    yaw: float
    pitch: float
    roll: float
    z: float = DEFAULT_Z

    @classmethod
    def sample(
        cls,
        yaw_sigma: float,
        pitch_sigma: float,
        roll_sigma: float,
        rng: np.random.Generator,
        z: float = DEFAULT_Z,
    ) -> "Pose":
        """Draw yaw, pitch and roll (in that order) from zero-mean Gaussians."""
        yaw = rng.normal(0.0, yaw_sigma)
        pitch = rng.normal(0.0, pitch_sigma)
        roll = rng.normal(0.0, roll_sigma)
        return cls(float(yaw), float(pitch), float(roll), z)


def expand_rect_for_rotate(area: Rect) -> Rect:
    """
    Square around ``area``'s center with side ``round((w + h) / sqrt(2))``.

    Rotating that square about its center keeps the original area covered,
    so the re-cropped result has no empty borders.
    """
    side = int((area.width + area.height) / math.sqrt(2.0) + 0.5)
    return Rect(
        area.x - trunc_half(side - area.width),
        area.y - trunc_half(side - area.height),
        side,
        side,
    )


def random_rotate_image(
    src: np.ndarray,
    yaw_sigma: float,
    pitch_sigma: float,
    roll_sigma: float,
    area: Rect,
    rng: np.random.Generator,
    z: float = DEFAULT_Z,
    interpolation: int = cv2.INTER_LINEAR,
    border_mode: int = cv2.BORDER_CONSTANT,
    border_color=(0, 0, 0),
) -> np.ndarray:
    """
    Rotate ``area`` of ``src`` by a random pose and crop it back to size.

    A larger square around ``area`` is cut out first, warped, and the center
    of the warp is cropped to ``area``'s width and height (or less, if the
    warp came out smaller). An empty ``area`` means the whole image.

    Raises:
        DegenerateRegionError: a crop ends up with no pixels
        SingularProjectionError: the sampled pose cannot be projected
    """
    pose = Pose.sample(yaw_sigma, pitch_sigma, roll_sigma, rng, z)

    if area.is_empty():
        area = Rect.full_frame(src)
        rect = area
    else:
        rect = expand_rect_for_rotate(area)
    rect = truncate_rect_keep_center(rect, (src.shape[1], src.shape[0]))
    if rect.is_empty():
        raise DegenerateRegionError(f"rotation source {rect} outside image for area {area}")

    rot_img = rotate_image(
        rect.crop(src),
        pose.yaw,
        pose.pitch,
        pose.roll,
        pose.z,
        interpolation,
        border_mode,
        border_color,
    )

    rot_h, rot_w = rot_img.shape[:2]
    dst_area = Rect(
        trunc_half(rot_w - area.width),
        trunc_half(rot_h - area.height),
        area.width,
        area.height,
    )
    dst_area = truncate_rect_keep_center(dst_area, (rot_w, rot_h))
    if dst_area.is_empty():
        raise DegenerateRegionError(f"warped image {rot_w}x{rot_h} too small for {area}")
    return dst_area.crop(rot_img)
