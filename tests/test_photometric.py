"""Tests for noise and blur perturbations."""

import cv2
import numpy as np
import pytest

from data_augmentation.photometric import (
    add_gaussian_noise,
    blur_kernel_size,
    gaussian_blur,
    random_blur,
    random_noise,
)


@pytest.fixture
def image():
    rng = np.random.default_rng(5)
    return rng.integers(0, 256, size=(32, 48, 3), dtype=np.uint8)


class TestBlurKernelSize:
    @pytest.mark.parametrize(
        "sigma,size",
        [
            (0.0, 1),
            (0.5, 1),
            (0.8, 3),
            (1.0, 3),
            (1.3, 3),
            (1.5, 5),
            (2.0, 5),
            (3.0, 9),
        ],
    )
    def test_sigma_to_kernel_size(self, sigma, size):
        assert blur_kernel_size(sigma) == size

    @pytest.mark.parametrize("sigma", np.linspace(0, 10, 41))
    def test_always_odd(self, sigma):
        assert blur_kernel_size(sigma) % 2 == 1


class TestNoise:
    def test_zero_max_sigma_is_bit_identical(self, image):
        out = random_noise(image, 0.0, np.random.default_rng(0))
        assert np.array_equal(out, image)

    def test_values_are_clamped(self):
        img = np.full((20, 20, 3), 250, dtype=np.uint8)
        out = add_gaussian_noise(img, 40.0, np.random.default_rng(1))
        assert out.dtype == np.uint8
        assert out.max() == 255
        assert out.min() < 250

    def test_does_not_modify_input(self, image):
        before = image.copy()
        add_gaussian_noise(image, 10.0, np.random.default_rng(2))
        assert np.array_equal(image, before)

    def test_grayscale_shape_kept(self):
        img = np.full((10, 12), 128, dtype=np.uint8)
        out = add_gaussian_noise(img, 5.0, np.random.default_rng(3))
        assert out.shape == (10, 12)

    def test_noise_level_tracks_sigma(self):
        img = np.full((200, 200), 128, dtype=np.uint8)
        out = add_gaussian_noise(img, 10.0, np.random.default_rng(4))
        assert np.std(out.astype(np.float64)) == pytest.approx(10.0, rel=0.1)

    def test_reproducible_with_seed(self, image):
        a = random_noise(image, 20.0, np.random.default_rng(8))
        b = random_noise(image, 20.0, np.random.default_rng(8))
        assert np.array_equal(a, b)


class TestBlur:
    def test_zero_max_sigma_is_bit_identical(self, image):
        out = random_blur(image, 0.0, np.random.default_rng(0))
        assert np.array_equal(out, image)

    def test_small_sigma_passes_through(self, image):
        """sigma 0.5 gives a 1x1 kernel, which is skipped."""
        assert gaussian_blur(image, 0.5) is image

    def test_matches_opencv_gaussian_blur(self, image):
        expected = cv2.GaussianBlur(image, (5, 5), 2.0)
        assert np.array_equal(gaussian_blur(image, 2.0), expected)

    def test_blur_smooths(self, image):
        out = gaussian_blur(image, 3.0)
        assert out.shape == image.shape
        assert np.std(out.astype(np.float64)) < np.std(image.astype(np.float64))
