"""
Visualization utilities for detected interest points.

All functions save figures to disk rather than displaying them interactively,
making the module suitable for headless execution.
"""

import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend
import matplotlib.pyplot as plt


def save_interest_points(img: np.ndarray, points: list, out_path: str,
                          title: str = None, marker_size: int = 4) -> None:
    """Save *img* with every interest point drawn as a red dot outlined in black."""
    rows = [p.row for p in points]
    cols = [p.col for p in points]

    fig, ax = plt.subplots(figsize=(10, 8))
    ax.imshow(img, cmap="gray" if img.ndim == 2 else None)
    if points:
        ax.plot(cols, rows, "o", markersize=marker_size,
                markerfacecolor="red", markeredgecolor="black", markeredgewidth=1)
    ax.set_title(title or f"Interest points ({len(points)} detected)")
    ax.axis("off")

    plt.tight_layout()
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def save_response_map(response: np.ndarray, out_path: str,
                       title: str = "Corner response") -> None:
    """Save a heat map of the response map (log-scaled, zeros stay dark)."""
    fig, ax = plt.subplots(figsize=(10, 8))
    im = ax.imshow(np.log1p(np.clip(response, 0, None)), cmap="inferno")
    fig.colorbar(im, ax=ax, label="log(1 + R)")
    ax.set_title(title)
    ax.axis("off")

    plt.tight_layout()
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
