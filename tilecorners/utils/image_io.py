"""
Image I/O helpers.

Thin wrappers around PIL and scikit-image that turn an image file into the
single-channel intensity grid the detector works on.
"""

import os
import numpy as np
from PIL import Image
from skimage.color import rgb2gray
from skimage.transform import rescale

from tilecorners.errors import ConfigError


def load_image(path: str) -> np.ndarray:
    """Load an image file as a uint8 RGB array.

    Parameters
    ----------
    path : str
        Path to the image.

    Returns
    -------
    np.ndarray
        H x W x 3 uint8 array.
    """
    with Image.open(path) as img:
        return np.array(img.convert("RGB"))


def to_grayscale(img: np.ndarray) -> np.ndarray:
    """Convert a uint8 RGB image to a float64 intensity grid in [0, 255].

    The detection threshold is tuned for 8-bit intensities, so the [0, 1]
    output of ``rgb2gray`` is scaled back up.
    """
    return rgb2gray(img) * 255.0


def resize_grid(grid: np.ndarray, scale_factor: float) -> np.ndarray:
    """Rescale an intensity grid by *scale_factor* (1.0 returns it as is)."""
    if scale_factor <= 0:
        raise ConfigError(f"scale_factor must be positive, got {scale_factor!r}")
    if scale_factor == 1.0:
        return grid
    return rescale(grid, scale_factor, anti_aliasing=scale_factor < 1.0,
                   preserve_range=True)


def load_grayscale(path: str, scale_factor: float = 1.0):
    """Load *path* and return ``(rgb, gray)`` at the requested scale.

    Downscaling a large photo first keeps the number of response
    evaluations manageable; the RGB image is rescaled alongside so that
    the detected points can be drawn on it directly.
    """
    rgb = load_image(path)
    gray = resize_grid(to_grayscale(rgb), scale_factor)
    if scale_factor != 1.0:
        rgb = rescale(rgb, scale_factor, anti_aliasing=scale_factor < 1.0,
                      channel_axis=-1, preserve_range=True)
        rgb = np.clip(rgb, 0, 255).astype(np.uint8)
    return rgb, gray


def ensure_output_dir(base: str = "results") -> str:
    """Create the output directory if needed and return it."""
    os.makedirs(base, exist_ok=True)
    return base
