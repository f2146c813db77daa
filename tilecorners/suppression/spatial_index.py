"""
Spatial lookup over detected interest points.

Answers "which points are near this pixel?" (e.g. under a mouse cursor)
without scanning the whole list.  Points are bucketed into square cells;
a query only visits the cells its search square overlaps.
"""

from collections import defaultdict

from tilecorners.errors import ConfigError


class PointIndex:
    """Grid-of-buckets index built once over a sequence of interest points.

    Parameters
    ----------
    points : iterable of InterestPoint
        Points to index, typically the output of the pipeline.
    cell_size : int
        Side length of a bucket in pixels.
    """

    def __init__(self, points, cell_size: int = 16):
        if isinstance(cell_size, bool) or not isinstance(cell_size, int) or cell_size <= 0:
            raise ConfigError(f"cell_size must be a positive integer, got {cell_size!r}")
        self.cell_size = cell_size
        self._points = tuple(points)
        self._buckets = defaultdict(list)
        for order, point in enumerate(self._points):
            self._buckets[self._cell(point.row, point.col)].append(order)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(self._points)

    def _cell(self, row: int, col: int):
        return row // self.cell_size, col // self.cell_size

    def near(self, row: int, col: int, radius: int) -> list:
        """Points within Chebyshev distance *radius* of (row, col).

        Results keep the order of the indexed sequence.
        """
        if radius < 0:
            raise ConfigError(f"radius must be non-negative, got {radius!r}")

        row_lo, col_lo = self._cell(row - radius, col - radius)
        row_hi, col_hi = self._cell(row + radius, col + radius)

        hits = []
        for cell_row in range(row_lo, row_hi + 1):
            for cell_col in range(col_lo, col_hi + 1):
                for order in self._buckets.get((cell_row, cell_col), ()):
                    point = self._points[order]
                    if max(abs(point.row - row), abs(point.col - col)) <= radius:
                        hits.append(order)
        return [self._points[i] for i in sorted(hits)]

    def nearest(self, row: int, col: int, radius: int):
        """Best-scoring point within *radius* of (row, col), or None."""
        hits = self.near(row, col, radius)
        if not hits:
            return None
        return max(hits, key=lambda p: p.score)
