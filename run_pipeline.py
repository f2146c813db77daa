#!/usr/bin/env python3
"""
run_pipeline.py – Tiled Harris Corner Detection

Loads configuration from configs/default.yaml (or a user-specified file),
detects interest points in every image given on the command line or listed
in the config, and writes the visualisations to the results directory.

Usage
-----
    python run_pipeline.py photo.jpg
    python run_pipeline.py --config configs/default.yaml photo.jpg
    python run_pipeline.py photo.jpg --query 120 340
    python run_pipeline.py photo.jpg --no-figures --verbose
"""

import argparse
import logging
import os
import sys
import time

from tilecorners.config import load_config, detector_config
from tilecorners.errors import TileCornersError
from tilecorners.pipeline import compute_response
from tilecorners.suppression.nms import NonMaxSuppressor
from tilecorners.suppression.spatial_index import PointIndex
from tilecorners.utils.image_io import load_grayscale, ensure_output_dir
from tilecorners.utils.visualization import save_interest_points, save_response_map


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────

def banner(text: str) -> None:
    width = 60
    print("\n" + "─" * width)
    print(f"  {text}")
    print("─" * width)


def query_radius(radius, det_cfg) -> int:
    """Search radius for ``--query``; falls back to ``min_pixel_radius`` when unset."""
    return radius if radius is not None else det_cfg.min_pixel_radius


def report_query(points: list, query: tuple, radius: int) -> None:
    """Print the points around *query*, like hovering over the rendered image."""
    index = PointIndex(points, cell_size=max(1, 2 * radius))
    row, col = query
    hits = index.near(row, col, radius)
    if not hits:
        print(f"    No interest point within {radius}px of ({row}, {col})")
    for p in hits:
        print(f"    ({p.row}, {p.col})  corner value = {p.score:.1f}")


# ──────────────────────────────────────────────────────────────────────────────
# Per-image pipeline
# ──────────────────────────────────────────────────────────────────────────────

def run_image(path: str, cfg: dict, results_dir: str, args) -> dict:
    """Detect interest points in a single image and return summary metrics."""
    name = os.path.splitext(os.path.basename(path))[0]
    banner(f"Image: {name}")
    det_cfg = detector_config(cfg)

    # ── 1. Load image ─────────────────────────────────────────────────────────
    scale = cfg.get("image", {}).get("scale_factor", 1.0)
    rgb, gray = load_grayscale(path, scale_factor=scale)
    print(f"  Loaded image  {gray.shape[1]}×{gray.shape[0]}  (scale {scale})")

    # ── 2. Corner response ────────────────────────────────────────────────────
    print("  Stage 1 – Gradients, structure tensor, corner response")
    response = compute_response(gray, det_cfg)
    print(f"    {int((response > det_cfg.detection_threshold).sum())} pixels "
          f"above threshold {det_cfg.detection_threshold:g}")

    # ── 3. Non-maximal suppression ────────────────────────────────────────────
    print("  Stage 2 – Tiled non-maximal suppression")
    points = NonMaxSuppressor(det_cfg).suppress(response)
    print(f"    {len(points)} interest points "
          f"({det_cfg.tiles_y}×{det_cfg.tiles_x} tiles, "
          f"≤{det_cfg.max_per_tile}/tile, radius {det_cfg.min_pixel_radius}px)")

    if not args.no_figures:
        marker = cfg.get("visualization", {}).get("marker_size", 4)
        save_interest_points(rgb, points, os.path.join(results_dir, f"{name}_points.jpg"),
                             marker_size=marker)
        save_response_map(response, os.path.join(results_dir, f"{name}_response.jpg"))
        print(f"  Saved figures → {results_dir}/{name}_*.jpg")

    if args.query is not None:
        print(f"  Query ({args.query[0]}, {args.query[1]})")
        radius = query_radius(args.radius, det_cfg)
        report_query(points, tuple(args.query), radius)

    return {"image": name, "height": gray.shape[0], "width": gray.shape[1],
            "points": len(points),
            "best": max((p.score for p in points), default=None)}


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────

def parse_args():
    p = argparse.ArgumentParser(
        description="Harris corner detection with tiled non-maximal suppression"
    )
    p.add_argument(
        "images", nargs="*",
        help="Image files to process (default: images listed in the config)",
    )
    p.add_argument(
        "--config", default="configs/default.yaml",
        help="Path to YAML configuration file (default: configs/default.yaml)",
    )
    p.add_argument(
        "--query", nargs=2, type=int, metavar=("ROW", "COL"), default=None,
        help="Print the interest points near this pixel",
    )
    p.add_argument(
        "--radius", type=int, default=None,
        help="Search radius for --query (default: min_pixel_radius)",
    )
    p.add_argument(
        "--no-figures", action="store_true",
        help="Skip writing the visualisations",
    )
    p.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging from the detector",
    )
    return p.parse_args()


def main():
    args = parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(levelname)s %(name)s: %(message)s")

    # Load configuration
    if not os.path.exists(args.config):
        print(f"[ERROR] Config file not found: {args.config}")
        sys.exit(1)
    try:
        cfg = load_config(args.config)
        det_cfg = detector_config(cfg)
    except TileCornersError as exc:
        print(f"[ERROR] Invalid configuration: {exc}")
        sys.exit(1)

    images = args.images or cfg.get("images", [])
    if not images:
        print("[ERROR] No images given on the command line or in the config")
        sys.exit(1)

    # Validate that image files exist
    for path in images:
        if not os.path.exists(path):
            print(f"[ERROR] Image not found: {path}")
            sys.exit(1)

    results_dir = ensure_output_dir(cfg.get("results_dir", "results"))

    banner("Tiled Harris Corner Detection")
    print(f"  Config  : {args.config}")
    print(f"  Images  : {len(images)}")
    print(f"  k       : {det_cfg.k}")
    print(f"  Output  : {results_dir}/")

    t0 = time.time()
    all_metrics = []

    for path in images:
        try:
            metrics = run_image(path, cfg, results_dir, args)
        except TileCornersError as exc:
            print(f"[ERROR] {path}: {exc}")
            sys.exit(1)
        all_metrics.append(metrics)

    # ── Summary table ──────────────────────────────────────────────────────
    banner("Results Summary")
    header = f"{'Image':<20} {'Size':>11} {'Points':>8} {'Best R':>14}"
    print(header)
    print("─" * len(header))
    for m in all_metrics:
        size = f"{m['width']}×{m['height']}"
        best = f"{m['best']:.4g}" if m["best"] is not None else "–"
        print(f"{m['image']:<20} {size:>11} {m['points']:>8} {best:>14}")

    elapsed = time.time() - t0
    print(f"\nDetection complete in {elapsed:.1f}s")
    if not args.no_figures:
        print(f"Results saved to: {os.path.abspath(results_dir)}/")


if __name__ == "__main__":
    main()
