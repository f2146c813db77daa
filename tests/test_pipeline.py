from dataclasses import replace

import numpy as np
import pytest

from tilecorners.config import DetectorConfig
from tilecorners.errors import ConfigError, InsufficientSizeError
from tilecorners.pipeline import compute_response, detect_interest_points

SQUARE_CORNERS = [(30, 30), (30, 34), (34, 30), (34, 34)]


def chebyshev(p, q):
    return max(abs(p.row - q.row), abs(p.col - q.col))


@pytest.fixture
def square():
    """64x64 black image with a 5x5 white square centred on (32, 32)."""
    img = np.zeros((64, 64))
    img[30:35, 30:35] = 255.0
    return img


@pytest.fixture
def noise():
    rng = np.random.default_rng(12)
    return rng.uniform(0, 255, size=(96, 96))


# Sharp localisation: no pre-blur and a 3x3 aggregation window.
SHARP = DetectorConfig(pre_blur=False, aggregation_kernel=3, aggregation_sigma=1.0,
                       detection_threshold=1e6, tiles_x=1, tiles_y=1,
                       max_per_tile=10, min_pixel_radius=3)


def test_constant_image_yields_nothing():
    img = np.full((50, 50), 90.0)
    np.testing.assert_array_equal(compute_response(img), 0.0)
    assert detect_interest_points(img) == []
    assert detect_interest_points(img, DetectorConfig(detection_threshold=1e-9)) == []


def test_square_corners_are_found(square):
    points = detect_interest_points(square, SHARP)

    assert len(points) == 4
    for corner in SQUARE_CORNERS:
        assert any(max(abs(p.row - corner[0]), abs(p.col - corner[1])) <= 2 for p in points)
    for i, p in enumerate(points):
        for q in points[i + 1:]:
            assert chebyshev(p, q) >= SHARP.min_pixel_radius


def test_threshold_above_corner_response_gives_nothing(square):
    peak = compute_response(square, replace(SHARP, detection_threshold=0.0)).max()
    assert peak > SHARP.detection_threshold
    assert detect_interest_points(square, replace(SHARP, detection_threshold=float(peak))) == []


def test_default_config_stays_near_the_square(square):
    points = detect_interest_points(square)
    assert points
    for p in points:
        assert 24 <= p.row <= 40 and 24 <= p.col <= 40


def test_points_are_separated(noise):
    cfg = DetectorConfig(detection_threshold=0.0, tiles_x=4, tiles_y=4,
                         max_per_tile=25, min_pixel_radius=5)
    points = detect_interest_points(noise, cfg)
    assert points
    for i, p in enumerate(points):
        for q in points[i + 1:]:
            assert chebyshev(p, q) >= cfg.min_pixel_radius


def test_all_points_exceed_threshold(noise):
    cfg = DetectorConfig(detection_threshold=1e5, tiles_x=3, tiles_y=3, min_pixel_radius=4)
    assert all(p.score > cfg.detection_threshold
               for p in detect_interest_points(noise, cfg))


def test_raising_threshold_never_adds_points(noise):
    base = DetectorConfig(tiles_x=1, tiles_y=1, max_per_tile=500, min_pixel_radius=3)
    counts = [len(detect_interest_points(noise, replace(base, detection_threshold=t)))
              for t in (0.0, 1e4, 1e6, 1e8, 1e10, 1e14)]
    assert counts == sorted(counts, reverse=True)
    assert counts[0] > 0


def test_single_tile_is_global_greedy_top_n(noise):
    n, radius = 12, 6
    cfg = DetectorConfig(detection_threshold=0.0, tiles_x=1, tiles_y=1,
                         max_per_tile=n, min_pixel_radius=radius)
    points = detect_interest_points(noise, cfg)

    response = compute_response(noise, cfg)
    rows, cols = np.nonzero(response > 0.0)
    ranked = sorted(zip(-response[rows, cols], rows, cols))
    expected = []
    for neg_score, r, c in ranked:
        if len(expected) == n:
            break
        if all(max(abs(r - er), abs(c - ec)) > radius for er, ec, _ in expected):
            expected.append((r, c, -neg_score))

    assert [(p.row, p.col, p.score) for p in points] == \
        [(int(r), int(c), float(s)) for r, c, s in expected]


def test_deterministic(noise):
    cfg = DetectorConfig(detection_threshold=1e4, tiles_x=5, tiles_y=5, min_pixel_radius=4)
    assert detect_interest_points(noise, cfg) == detect_interest_points(noise.copy(), cfg)


def test_input_left_untouched(noise):
    before = noise.copy()
    detect_interest_points(noise)
    np.testing.assert_array_equal(noise, before)


def test_even_kernel_raises_config_error():
    with pytest.raises(ConfigError):
        detect_interest_points(np.zeros((64, 64)), DetectorConfig(aggregation_kernel=4))
    with pytest.raises(ConfigError):
        detect_interest_points(np.zeros((64, 64)), DetectorConfig(pre_blur_kernel=4))


def test_non_positive_tiles_and_radius_raise_config_error():
    with pytest.raises(ConfigError):
        detect_interest_points(np.zeros((64, 64)), DetectorConfig(tiles_x=0))
    with pytest.raises(ConfigError):
        detect_interest_points(np.zeros((64, 64)), DetectorConfig(min_pixel_radius=0))


def test_kernel_larger_than_tiny_image():
    cfg = DetectorConfig(pre_blur=False, aggregation_kernel=3, tiles_x=1, tiles_y=1)
    with pytest.raises(InsufficientSizeError):
        detect_interest_points(np.zeros((2, 2)), cfg)


def test_default_kernels_need_seven_pixels():
    with pytest.raises(InsufficientSizeError):
        compute_response(np.zeros((6, 40)))


def test_more_tiles_than_pixels_fails_early():
    with pytest.raises(InsufficientSizeError):
        detect_interest_points(np.zeros((8, 8)))


def test_empty_and_non_2d_inputs():
    with pytest.raises(InsufficientSizeError):
        detect_interest_points(np.zeros((0, 10)))
    with pytest.raises(InsufficientSizeError):
        detect_interest_points(np.zeros((20, 20, 3)))


def test_non_finite_input():
    img = np.zeros((20, 20))
    img[3, 3] = np.nan
    with pytest.raises(ConfigError):
        detect_interest_points(img)


def test_accepts_nested_lists():
    img = [[0.0] * 12 for _ in range(12)]
    assert detect_interest_points(img, DetectorConfig(tiles_x=2, tiles_y=2)) == []


def test_negative_threshold_is_rejected():
    img = np.zeros((40, 40))
    img[:, 20:] = 255.0
    cfg = DetectorConfig(detection_threshold=-100.0, tiles_x=1, tiles_y=1, min_pixel_radius=3)
    with pytest.raises(ConfigError):
        detect_interest_points(img, cfg)


def test_straight_edge_yields_no_corners():
    img = np.zeros((40, 40))
    img[:, 20:] = 255.0
    cfg = DetectorConfig(detection_threshold=0.0, tiles_x=1, tiles_y=1, min_pixel_radius=3)

    raw = compute_response(img, cfg)
    np.testing.assert_array_equal(raw, 0.0)
    assert detect_interest_points(img, cfg) == []
