"""
Harris corner response.

At every pixel the aggregated structure tensor

    M = [[Sx2, Sxy],
         [Sxy, Sy2]]

is reduced to the scalar ``R = det(M) - k * trace(M)^2``.  Corners give a
large positive R, edges a large negative R and flat regions a value close
to zero.  R is deliberately kept signed; taking its absolute value would let
strong edges pass as corners.
"""

import logging

import numpy as np

from tilecorners.config import DetectorConfig
from tilecorners.errors import InsufficientSizeError

logger = logging.getLogger(__name__)


class CornerResponseScorer:
    """Turns structure tensor entries into a dense, thresholded response map."""

    def __init__(self, config: DetectorConfig = None):
        self.config = (config or DetectorConfig()).validate()

    def raw_response(self, sx2, sy2, sxy) -> np.ndarray:
        """Harris response ``det(M) - k * trace(M)^2`` without thresholding."""
        sx2 = np.asarray(sx2, dtype=np.float64)
        sy2 = np.asarray(sy2, dtype=np.float64)
        sxy = np.asarray(sxy, dtype=np.float64)
        if sx2.ndim != 2 or not (sx2.shape == sy2.shape == sxy.shape):
            raise InsufficientSizeError(
                "Tensor grids must be 2-D and of equal shape, got "
                f"{sx2.shape}, {sy2.shape} and {sxy.shape}")

        det = sx2 * sy2 - sxy ** 2
        trace = sx2 + sy2
        return det - self.config.k * trace ** 2

    def score(self, sx2, sy2, sxy) -> np.ndarray:
        """Compute the response map.

        Values below ``detection_threshold`` are clamped to zero rather than
        dropped, so the map keeps the shape of the input.  Responses inside
        the ``border_margin`` strip are zeroed as well.

        Returns
        -------
        np.ndarray
            H x W float64 response map.
        """
        response = self.raw_response(sx2, sy2, sxy)
        response[response < self.config.detection_threshold] = 0.0

        margin = self.config.border_margin
        if margin:
            response[:margin, :] = 0.0
            response[-margin:, :] = 0.0
            response[:, :margin] = 0.0
            response[:, -margin:] = 0.0

        logger.debug("Response map: %d of %d pixels at or above threshold %g",
                     int(np.count_nonzero(response)), response.size,
                     self.config.detection_threshold)
        return response
