"""
Image gradients for corner detection.

Horizontal and vertical intensity derivatives are taken with the 3x3 Sobel
operator.  The grid may first be smoothed with a small Gaussian to suppress
sensor noise.  Borders are handled by reflection rather than zero padding,
which would create artificial step edges along the image frame.
"""

import logging

import numpy as np
from scipy import ndimage

from tilecorners.config import DetectorConfig
from tilecorners.errors import ConfigError
from tilecorners.types import as_intensity_grid, require_size

logger = logging.getLogger(__name__)

# Convolved (not correlated), so Ix > 0 where intensity increases with col.
SOBEL_X = np.array([[1, 0, -1],
                    [2, 0, -2],
                    [1, 0, -1]], dtype=np.float64)
SOBEL_Y = SOBEL_X.T

BORDER_MODE = "reflect"


def gaussian_smooth(grid: np.ndarray, size: int, sigma: float) -> np.ndarray:
    """Gaussian blur of a 2-D grid with a *size* x *size* window and
    reflected borders.

    The window is cut at ``size // 2`` pixels from the centre and
    renormalised, so the footprint is exactly the configured kernel size.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0 or size % 2 == 0:
        raise ConfigError(f"Kernel size must be a positive odd integer, got {size!r}")
    if sigma <= 0:
        raise ConfigError(f"Kernel sigma must be positive, got {sigma!r}")
    return ndimage.gaussian_filter(grid, sigma, mode=BORDER_MODE, radius=size // 2)


class GradientField:
    """Computes the Sobel derivatives (Ix, Iy) of an intensity grid."""

    def __init__(self, config: DetectorConfig = None):
        self.config = (config or DetectorConfig()).validate()

    def compute(self, image):
        """Differentiate *image* along columns (Ix) and rows (Iy).

        Parameters
        ----------
        image : array_like
            H x W single-channel intensity grid.

        Returns
        -------
        ix, iy : np.ndarray
            H x W float64 derivative grids.
        """
        grid = as_intensity_grid(image)
        cfg = self.config

        require_size(grid.shape, 3, "Derivative kernel")
        if cfg.pre_blur:
            require_size(grid.shape, cfg.pre_blur_kernel, "Pre-blur kernel")
            grid = gaussian_smooth(grid, cfg.pre_blur_kernel, cfg.pre_blur_sigma)

        ix = ndimage.convolve(grid, SOBEL_X, mode=BORDER_MODE)
        iy = ndimage.convolve(grid, SOBEL_Y, mode=BORDER_MODE)

        logger.debug("Gradients computed for %dx%d grid (pre_blur=%s)",
                     grid.shape[0], grid.shape[1], cfg.pre_blur)
        return ix, iy
