"""Tests for random pose warps."""

import numpy as np
import pytest

from data_augmentation.errors import DegenerateRegionError
from data_augmentation.projection import DEFAULT_Z
from data_augmentation.rects import Rect
from data_augmentation.rotation import Pose, expand_rect_for_rotate, random_rotate_image


@pytest.fixture
def image():
    rng = np.random.default_rng(3)
    return rng.integers(0, 256, size=(100, 100, 3), dtype=np.uint8)


class TestPose:
    def test_zero_sigmas(self):
        pose = Pose.sample(0, 0, 0, np.random.default_rng(0))
        assert pose == Pose(0.0, 0.0, 0.0, DEFAULT_Z)

    def test_reproducible_with_seed(self):
        a = Pose.sample(5, 5, 5, np.random.default_rng(11))
        b = Pose.sample(5, 5, 5, np.random.default_rng(11))
        assert a == b

    def test_draws_yaw_pitch_roll_in_order(self):
        pose = Pose.sample(1, 2, 3, np.random.default_rng(9))
        rng = np.random.default_rng(9)
        expected = (rng.normal(0, 1), rng.normal(0, 2), rng.normal(0, 3))
        assert (pose.yaw, pose.pitch, pose.roll) == pytest.approx(expected)


class TestExpandRectForRotate:
    def test_square(self):
        assert expand_rect_for_rotate(Rect(10, 10, 40, 40)) == Rect(2, 2, 57, 57)

    def test_wide_rect(self):
        """A very wide box expands to a square narrower than itself."""
        assert expand_rect_for_rotate(Rect(0, 0, 100, 10)) == Rect(11, -34, 78, 78)


class TestRandomRotateImage:
    def test_zero_pose_returns_area(self, image):
        rng = np.random.default_rng(0)
        out = random_rotate_image(image, 0, 0, 0, Rect(10, 10, 40, 40), rng)
        assert np.array_equal(out, image[10:50, 10:50])

    def test_empty_area_means_whole_image(self):
        img = np.arange(600, dtype=np.uint16).reshape(20, 30).astype(np.uint8)
        out = random_rotate_image(img, 0, 0, 0, Rect(0, 0, 0, 0), np.random.default_rng(0))
        assert np.array_equal(out, img)

    def test_area_near_border(self, image):
        """The context square is clipped at the image edge."""
        rng = np.random.default_rng(0)
        out = random_rotate_image(image, 0, 0, 0, Rect(60, 10, 40, 40), rng)
        assert out.shape == (40, 40, 3)
        assert np.array_equal(out, image[10:50, 58:98])

    def test_random_pose_keeps_area_size(self, image):
        rng = np.random.default_rng(21)
        for _ in range(5):
            out = random_rotate_image(image, 5, 5, 5, Rect(20, 30, 40, 30), rng)
            assert out.shape == (30, 40, 3)

    def test_area_outside_image(self, image):
        with pytest.raises(DegenerateRegionError):
            random_rotate_image(
                image, 0, 0, 0, Rect(300, 300, 10, 10), np.random.default_rng(0)
            )
