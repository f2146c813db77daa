"""
Corner detection pipeline.

    intensity grid -> (Ix, Iy) -> (Sx2, Sy2, Sxy) -> response map -> points

All options and the image shape are checked before any stage runs, so a
bad call fails without doing work.  Every intermediate grid is created for
the call and dropped when it returns; only the list of interest points is
handed back.
"""

import logging

import numpy as np

from tilecorners.config import DetectorConfig
from tilecorners.detectors.gradients import GradientField
from tilecorners.detectors.harris import CornerResponseScorer
from tilecorners.detectors.structure_tensor import StructureTensorAggregator
from tilecorners.errors import InsufficientSizeError
from tilecorners.suppression.nms import NonMaxSuppressor
from tilecorners.types import as_intensity_grid, require_size

logger = logging.getLogger(__name__)


def _prepare(image, config):
    config = (config or DetectorConfig()).validate()
    grid = as_intensity_grid(image)
    require_size(grid.shape, config.required_size(), "Required kernel")
    return grid, config


def _response(grid: np.ndarray, config: DetectorConfig) -> np.ndarray:
    ix, iy = GradientField(config).compute(grid)
    sx2, sy2, sxy = StructureTensorAggregator(config).aggregate(ix, iy)
    return CornerResponseScorer(config).score(sx2, sy2, sxy)


def compute_response(image, config: DetectorConfig = None) -> np.ndarray:
    """Run the dense stages only and return the thresholded response map."""
    grid, config = _prepare(image, config)
    return _response(grid, config)


def detect_interest_points(image, config: DetectorConfig = None) -> list:
    """Detect well separated corners in a single-channel image.

    Parameters
    ----------
    image : array_like
        H x W intensity grid.  The default ``detection_threshold`` assumes
        intensities in the 0..255 range.
    config : DetectorConfig, optional
        Pipeline options; defaults are used when omitted.

    Returns
    -------
    list of InterestPoint
        Selected corners in acceptance order.  Empty when nothing exceeds
        the threshold.

    Raises
    ------
    ConfigError
        Invalid configuration.
    InsufficientSizeError
        The image is smaller than a kernel or than the tile grid.
    """
    grid, config = _prepare(image, config)
    height, width = grid.shape
    if height < config.tiles_y or width < config.tiles_x:
        raise InsufficientSizeError(
            f"Cannot split a {height}x{width} image into "
            f"{config.tiles_y}x{config.tiles_x} tiles")

    response = _response(grid, config)
    points = NonMaxSuppressor(config).suppress(response)
    logger.info("Detected %d interest points in %dx%d image", len(points), height, width)
    return points
