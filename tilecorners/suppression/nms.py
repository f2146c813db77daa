"""
Tiled non-maximal suppression (NMS) for corner response maps.

The response map is cut into a fixed grid of tiles.  Each tile contributes
its strongest responses, and every accepted point blocks a square zone of
side ``2 * min_pixel_radius + 1`` around itself in a suppression mask
shared by all tiles.  This spreads the selected corners over the whole
image instead of letting one highly textured region take all of them.

The selection is greedy, not a globally optimal maximum independent set.
Tiles are visited in raster order, so when exclusion zones overlap across a
tile boundary the point in the earlier tile wins, even if a later tile holds
a stronger response next to it.
"""

import logging

import numpy as np

from tilecorners.config import DetectorConfig
from tilecorners.errors import InsufficientSizeError
from tilecorners.types import InterestPoint

logger = logging.getLogger(__name__)


def tile_bounds(shape: tuple, tiles_y: int, tiles_x: int):
    """Yield ``(top, left, height, width)`` of every tile in raster order.

    The tile size is ``H // tiles_y`` by ``W // tiles_x``; the trailing rows
    and columns that do not fill a whole tile are left out rather than
    forming smaller tiles.
    """
    height, width = shape
    tile_h = height // tiles_y
    tile_w = width // tiles_x
    if tile_h == 0 or tile_w == 0:
        raise InsufficientSizeError(
            f"Cannot split a {height}x{width} map into {tiles_y}x{tiles_x} tiles")

    for tile_row in range(tiles_y):
        for tile_col in range(tiles_x):
            yield tile_row * tile_h, tile_col * tile_w, tile_h, tile_w


def sorted_candidates(tile: np.ndarray, threshold: float):
    """Return tile-local (rows, cols, scores) above *threshold*, best first.

    Ties on score are broken by row, then by column, both ascending.
    """
    rows, cols = np.nonzero(tile > threshold)
    scores = tile[rows, cols]
    # lexsort keys are applied last-to-first: score desc, then row, then col
    order = np.lexsort((cols, rows, -scores))
    return rows[order], cols[order], scores[order]


class NonMaxSuppressor:
    """Reduces a dense response map to well separated interest points."""

    def __init__(self, config: DetectorConfig = None):
        self.config = (config or DetectorConfig()).validate()

    def suppress(self, response) -> list:
        """Select interest points from *response*.

        Parameters
        ----------
        response : array_like
            H x W corner response map.

        Returns
        -------
        list of InterestPoint
            Accepted points in acceptance order: tiles in raster order, and
            within a tile by descending score.  May be empty.
        """
        response = np.asarray(response, dtype=np.float64)
        if response.ndim != 2:
            raise InsufficientSizeError(
                f"Response map must be 2-D, got shape {response.shape}")

        cfg = self.config
        radius = cfg.min_pixel_radius
        mask = np.zeros(response.shape, dtype=bool)
        points = []

        for top, left, tile_h, tile_w in tile_bounds(response.shape, cfg.tiles_y, cfg.tiles_x):
            tile = response[top:top + tile_h, left:left + tile_w]
            rows, cols, scores = sorted_candidates(tile, cfg.detection_threshold)

            taken = 0
            for r, c, score in zip(rows, cols, scores):
                if taken >= cfg.max_per_tile:
                    break
                row, col = top + int(r), left + int(c)
                if mask[row, col]:
                    continue

                # Chebyshev exclusion zone, clipped at the image border
                mask[max(0, row - radius):row + radius + 1,
                     max(0, col - radius):col + radius + 1] = True
                points.append(InterestPoint(row, col, float(score)))
                taken += 1

        logger.debug("NMS kept %d points (%dx%d tiles, max %d per tile, radius %d)",
                     len(points), cfg.tiles_y, cfg.tiles_x, cfg.max_per_tile, radius)
        return points
