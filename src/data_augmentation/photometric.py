import cv2
import numpy as np


def blur_kernel_size(sigma: float) -> int:
    """
    Odd Gaussian kernel size for a blur sigma.

    ``round(sigma * 2.5)``, bumped to the next odd number when even.
    """
    size = int(sigma * 2.5 + 0.5)
    size += 1 - size % 2
    return size


def add_gaussian_noise(img: np.ndarray, sigma: float, rng: np.random.Generator) -> np.ndarray:
    """
    Add per-pixel, per-channel Gaussian noise to an 8-bit image.

    Noisy values are truncated toward zero and clamped to [0, 255].
    """
    if sigma <= 0:
        return img
    noise = rng.normal(0.0, sigma, img.shape).astype(np.float32)
    noisy = (img.astype(np.float32) + noise).astype(np.int32)
    return np.clip(noisy, 0, 255).astype(np.uint8)


def gaussian_blur(img: np.ndarray, sigma: float) -> np.ndarray:
    size = blur_kernel_size(sigma)
    if sigma <= 0 or size < 3:
        return img
    return cv2.GaussianBlur(img, (size, size), sigma)


def random_noise(img: np.ndarray, noise_max_sigma: float, rng: np.random.Generator) -> np.ndarray:
    """Gaussian noise with sigma drawn from U(0, noise_max_sigma)."""
    sigma = rng.uniform(0.0, noise_max_sigma)
    return add_gaussian_noise(img, sigma, rng)


def random_blur(img: np.ndarray, blur_max_sigma: float, rng: np.random.Generator) -> np.ndarray:
    """Gaussian blur with sigma drawn from U(0, blur_max_sigma)."""
    sigma = rng.uniform(0.0, blur_max_sigma)
    return gaussian_blur(img, sigma)
