"""
Shared data types: the intensity grid accepted by the pipeline and the
interest points it returns.
"""

from dataclasses import dataclass

import numpy as np

from tilecorners.errors import ConfigError, InsufficientSizeError


@dataclass(frozen=True)
class InterestPoint:
    """A selected corner: pixel position (row, col) and its response score."""

    row: int
    col: int
    score: float


def as_intensity_grid(image) -> np.ndarray:
    """Return *image* as a read-only float64 H x W grid.

    Parameters
    ----------
    image : array_like
        Single-channel intensity values, row-major.

    Returns
    -------
    np.ndarray
        A fresh float64 copy with the write flag cleared, so no stage can
        modify the caller's data.
    """
    grid = np.array(image, dtype=np.float64)
    if grid.ndim != 2:
        raise InsufficientSizeError(
            f"Intensity grid must be 2-D (H x W), got shape {grid.shape}")
    if grid.shape[0] == 0 or grid.shape[1] == 0:
        raise InsufficientSizeError(f"Intensity grid is empty: shape {grid.shape}")
    if not np.all(np.isfinite(grid)):
        raise ConfigError("Intensity grid contains NaN or infinite values")
    grid.flags.writeable = False
    return grid


def require_size(shape: tuple, size: int, what: str) -> None:
    """Raise ``InsufficientSizeError`` if a *size* x *size* kernel does not
    fit into a grid of *shape*."""
    height, width = shape
    if height < size or width < size:
        raise InsufficientSizeError(
            f"{what} ({size}x{size}) is larger than the image ({height}x{width})")
