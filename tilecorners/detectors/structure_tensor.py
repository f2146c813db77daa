"""
Structure tensor aggregation.

The products of the image gradients (Ix^2, Iy^2, Ix*Iy) are summed over a
Gaussian-weighted window around every pixel, giving the entries of the
local 2x2 structure tensor.  A Gaussian window is used instead of a plain
rectangular sum; it weights the centre of the window more heavily and gives
a smoother, more stable response.
"""

import logging

import numpy as np

from tilecorners.config import DetectorConfig
from tilecorners.detectors.gradients import gaussian_smooth
from tilecorners.errors import InsufficientSizeError
from tilecorners.types import require_size

logger = logging.getLogger(__name__)


class StructureTensorAggregator:
    """Aggregates gradient products into windowed sums (Sx2, Sy2, Sxy)."""

    def __init__(self, config: DetectorConfig = None):
        self.config = (config or DetectorConfig()).validate()

    def aggregate(self, ix: np.ndarray, iy: np.ndarray):
        """Compute the Gaussian-windowed structure tensor entries.

        Parameters
        ----------
        ix, iy : np.ndarray
            H x W horizontal / vertical derivatives.

        Returns
        -------
        sx2, sy2, sxy : np.ndarray
            H x W aggregated tensor entries.
        """
        ix = np.asarray(ix, dtype=np.float64)
        iy = np.asarray(iy, dtype=np.float64)
        if ix.ndim != 2 or ix.shape != iy.shape:
            raise InsufficientSizeError(
                f"Gradient grids must be 2-D and of equal shape, got {ix.shape} and {iy.shape}")

        size = self.config.aggregation_kernel
        sigma = self.config.aggregation_sigma
        require_size(ix.shape, size, "Aggregation kernel")

        sx2 = gaussian_smooth(ix * ix, size, sigma)
        sy2 = gaussian_smooth(iy * iy, size, sigma)
        sxy = gaussian_smooth(ix * iy, size, sigma)

        logger.debug("Structure tensor aggregated with %dx%d window (sigma=%.2f)",
                     size, size, sigma)
        return sx2, sy2, sxy
