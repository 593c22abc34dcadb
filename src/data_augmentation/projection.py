"""
Perspective warp of an image plane rotated in 3D.

The source image is treated as a flat plate centered at the origin. It is
rotated by yaw/pitch/roll, pushed to distance Z along the optical axis and
viewed by a pinhole camera whose focal length is also Z, so that an
unrotated plate projects back at its original scale.

The warp is computed backwards: for each destination pixel the camera ray
through it is intersected with the rotated plate, giving a fractional
source coordinate. ``cv2.remap`` then does the resampling.
"""

import logging
import math

import cv2
import numpy as np

from .errors import DegenerateRegionError, SingularProjectionError
from .rects import FloatRect

logger = logging.getLogger(__name__)

DEFAULT_Z = 1000.0

# projected corners closer to the camera plane than this are unusable
MIN_DEPTH = 1e-9
# smallest |ray . plate normal| accepted when solving for the ray parameter
MIN_RAY_DENOM = 1e-12
# cv2.remap cannot produce images this large on either side
MAX_REMAP_SIZE = 32767


def compose_external_matrix(
    yaw: float,
    pitch: float,
    roll: float,
    trans_x: float,
    trans_y: float,
    trans_z: float,
) -> np.ndarray:
    """
    Camera external matrix (rotation + translation) from yaw/pitch/roll.

    Angles are in degrees. The rotation block is ``Rx(roll) @ Ry(pitch) @ Rz(yaw)``::

        [ cp*cy,            -cp*sy,             sp     ]
        [ cr*sy + sr*sp*cy,  cr*cy - sr*sp*sy, -sr*cp  ]
        [ sr*sy - cr*sp*cy,  sr*cy + cr*sp*sy,  cr*cp  ]

    Returns:
        3x4 float64 matrix ``[R | t]``
    """
    y, p, r = (math.radians(a) for a in (yaw, pitch, roll))
    sy, cy = math.sin(y), math.cos(y)
    sp, cp = math.sin(p), math.cos(p)
    sr, cr = math.sin(r), math.cos(r)

    return np.array(
        [
            [cp * cy, -cp * sy, sp, trans_x],
            [cr * sy + sr * sp * cy, cr * cy - sr * sp * sy, -sr * cp, trans_y],
            [sr * sy - cr * sp * cy, sr * cy + cr * sp * sy, cr * cp, trans_z],
        ],
        dtype=np.float64,
    )


def _corners(img_size: tuple[int, int]) -> np.ndarray:
    # homogeneous image corners, one per column, clockwise from the origin
    w, h = img_size
    return np.array(
        [
            [0, w, w, 0],
            [0, 0, h, h],
            [1, 1, 1, 1],
        ],
        dtype=np.float64,
    )


def circum_trans_img_rect(img_size: tuple[int, int], trans_m: np.ndarray) -> FloatRect:
    """
    Circumscribing rectangle of an image warped by a 3x3 projective matrix.

    Args:
        img_size: (width, height) of the source image
        trans_m: 3x3 projective matrix

    Raises:
        SingularProjectionError: a corner lands on or behind the camera plane
    """
    dst = trans_m @ _corners(img_size)
    depth = dst[2]
    if np.any(depth <= MIN_DEPTH):
        raise SingularProjectionError(f"corner depth {depth.min()} is not in front of the camera")

    xs = dst[0] / depth
    ys = dst[1] / depth
    min_x, max_x = float(xs.min()), float(xs.max())
    min_y, max_y = float(ys.min()), float(ys.max())
    return FloatRect(min_x, min_y, max_x - min_x, max_y - min_y)


def create_map(
    src_size: tuple[int, int],
    dst_rect: FloatRect,
    trans_mat: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Destination-to-source coordinate map for ``cv2.remap``.

    ``trans_mat`` is the 4x4 rotation that places the plate centered at
    (0, 0, Z). The camera ray through destination pixel (dx, dy) is
    (dx*r, dy*r, Z*r); a plate point (sx, sy) sits at
    ``trans_mat @ (sx, sy, 0, 1)``. Inverting ``trans_mat`` and requiring a
    zero third component fixes r, which then gives (sx, sy).

    Out-of-range source coordinates are kept as they are; the remap border
    mode decides what they become.

    Args:
        src_size: (width, height) of the source image
        dst_rect: circumscribing rectangle of the warped image
        trans_mat: 4x4 rotation/translation matrix

    Returns:
        (map_x, map_y) float32 arrays of shape (height, width) of ``dst_rect``

    Raises:
        SingularProjectionError: a camera ray runs parallel to the plate
    """
    width, height = dst_rect.pixel_size()
    z = trans_mat[2, 3]
    inv = np.linalg.inv(trans_mat)

    dx, dy = np.meshgrid(
        dst_rect.x + np.arange(width, dtype=np.float64),
        dst_rect.y + np.arange(height, dtype=np.float64),
    )

    denom = inv[2, 0] * dx + inv[2, 1] * dy + inv[2, 2] * z
    if np.any(np.abs(denom) < MIN_RAY_DENOM):
        raise SingularProjectionError("camera ray parallel to the image plate")
    r = -inv[2, 3] / denom

    sx = (inv[0, 0] * dx + inv[0, 1] * dy + inv[0, 2] * z) * r + inv[0, 3]
    sy = (inv[1, 0] * dx + inv[1, 1] * dy + inv[1, 2] * z) * r + inv[1, 3]

    src_w, src_h = src_size
    map_x = (sx + src_w / 2).astype(np.float32)
    map_y = (sy + src_h / 2).astype(np.float32)
    return map_x, map_y


def rotate_image(
    src: np.ndarray,
    yaw: float,
    pitch: float,
    roll: float,
    z: float = DEFAULT_Z,
    interpolation: int = cv2.INTER_LINEAR,
    border_mode: int = cv2.BORDER_CONSTANT,
    border_color=(0, 0, 0),
) -> np.ndarray:
    """
    Rotate an image in 3D and render it with a pinhole camera.

    The output is sized to the circumscribing rectangle of the warped image,
    so it is usually larger than the input.
    """
    src_h, src_w = src.shape[:2]

    rot_mat = np.eye(4, dtype=np.float64)
    rot_mat[:3, :] = compose_external_matrix(yaw, pitch, roll, 0, 0, z)

    # 2D pixel -> 3D plate point, image center at the origin
    inv_persp_mat = np.zeros((4, 3), dtype=np.float64)
    inv_persp_mat[0, 0] = 1
    inv_persp_mat[1, 1] = 1
    inv_persp_mat[3, 2] = 1
    inv_persp_mat[0, 2] = -src_w / 2
    inv_persp_mat[1, 2] = -src_h / 2

    # 3D -> 2D, focal length Z
    persp_mat = np.zeros((3, 4), dtype=np.float64)
    persp_mat[0, 0] = z
    persp_mat[1, 1] = z
    persp_mat[2, 2] = 1

    trans_mat = persp_mat @ rot_mat @ inv_persp_mat
    circum_rect = circum_trans_img_rect((src_w, src_h), trans_mat)
    out_w, out_h = circum_rect.pixel_size()
    if out_w <= 0 or out_h <= 0:
        raise DegenerateRegionError(f"warped image has no area: {circum_rect}")
    if out_w >= MAX_REMAP_SIZE or out_h >= MAX_REMAP_SIZE:
        # a corner sits just in front of the camera plane
        raise SingularProjectionError(
            f"warped image {out_w}x{out_h} too large for yaw={yaw:.2f} pitch={pitch:.2f} roll={roll:.2f}"
        )
    logger.debug(
        f"rotate yaw={yaw:.2f} pitch={pitch:.2f} roll={roll:.2f} {src_w}x{src_h} -> {out_w}x{out_h}"
    )

    map_x, map_y = create_map((src_w, src_h), circum_rect, rot_mat)
    return cv2.remap(
        src,
        map_x,
        map_y,
        interpolation,
        borderMode=border_mode,
        borderValue=border_color,
    )
