"""
Rectangle arithmetic.

Integer rectangles follow OpenCV's (x, y, width, height) convention. Values
computed in floating point are truncated toward zero when stored back into an
integer rectangle, which is what assigning a double to an int field does.
"""

from dataclasses import dataclass

import numpy as np

from .errors import DegenerateRegionError


def trunc_half(n: int) -> int:
    # integer halving that truncates toward zero for negative values too
    return int(n / 2)


@dataclass(frozen=True)
class Rect:
    """Pixel-aligned rectangle."""
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def full_frame(cls, img: np.ndarray) -> "Rect":
        """Rectangle covering a whole image."""
        return cls(0, 0, img.shape[1], img.shape[0])

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_tuple(self) -> tuple[int, int, int, int]:
        """Return as (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    def crop(self, img: np.ndarray) -> np.ndarray:
        """Copy of the image region under this rectangle."""
        return img[self.y : self.y + self.height, self.x : self.x + self.width].copy()


@dataclass(frozen=True)
class FloatRect:
    """Real-valued rectangle, used for circumscribing bounds."""
    x: float
    y: float
    width: float
    height: float

    def pixel_size(self) -> tuple[int, int]:
        """(width, height) rounded to whole pixels."""
        return int(round(self.width)), int(round(self.height))


def truncate_rect(rect: Rect, img_size: tuple[int, int]) -> Rect:
    """
    Clip a rectangle to [0, width) x [0, height).

    Protruding edges are cut off. A rectangle lying completely outside the
    bounds comes back with zero or negative width/height; callers must
    check ``is_empty()``.

    Args:
        rect: Rectangle to clip
        img_size: (width, height) of the bounds
    """
    max_w, max_h = img_size
    x, y, w, h = rect.as_tuple()
    if x < 0:
        w += x
        x = 0
    if y < 0:
        h += y
        y = 0
    if x + w > max_w:
        w = max_w - x
    if y + h > max_h:
        h = max_h - y
    return Rect(x, y, w, h)


def truncate_rect_keep_center(rect: Rect, max_size: tuple[int, int]) -> Rect:
    """
    Clip a rectangle to [0, width) x [0, height), staying close to its center.

    An edge below 0 is moved to 0 and the opposite edge is pulled in by the
    same amount, so the center does not move.

    Overflow does NOT keep the center fixed: the origin moves in by half the
    overflow and the far edge is cut at the bound, so the box loses one and a
    half times the overflow and its center shifts back by a quarter of it.
    This is the createsamples-style rule; near-border crops keep more of
    their area than a symmetric trim would leave them.

    Args:
        rect: Rectangle to clip
        max_size: (width, height) of the bounds
    """
    max_w, max_h = max_size
    x, y, w, h = rect.as_tuple()
    if x < 0:
        w += 2 * x
        x = 0
    if y < 0:
        h += 2 * y
        y = 0
    if x + w > max_w:
        x += (x + w - max_w) // 2
        w = max_w - x
    if y + h > max_h:
        y += (y + h - max_h) // 2
        h = max_h - y
    return Rect(x, y, w, h)


def random_deform_rect(
    rect: Rect,
    x_slide_sigma: float,
    y_slide_sigma: float,
    aspect_sigma: float,
    rng: np.random.Generator,
) -> Rect:
    """
    Randomly slide a rectangle and change its aspect ratio.

    Width and height move in opposite directions by ``deform = a / (2 + a)``
    where ``a ~ N(0, aspect_sigma)``, so the area stays roughly constant.
    The deformed box is centered on the original and then shifted by
    ``N(0, x_slide_sigma) * new_width`` and ``N(0, y_slide_sigma) * new_height``.

    No clamping is done; truncate the result afterwards.
    """
    x_shift = rng.normal(0.0, x_slide_sigma)
    y_shift = rng.normal(0.0, y_slide_sigma)
    aspect_change = rng.normal(0.0, aspect_sigma)

    denom = 2.0 + aspect_change
    if denom == 0:
        raise DegenerateRegionError(f"aspect change {aspect_change} collapses {rect}")
    deform = aspect_change / denom

    width = int(rect.width * (1.0 + deform))
    height = int(rect.height * (1.0 - deform))
    x = rect.x + trunc_half(rect.width - width)
    y = rect.y + trunc_half(rect.height - height)

    x = int(x + x_shift * width)
    y = int(y + y_shift * height)
    return Rect(x, y, width, height)
