import numpy as np
import pytest

from tilecorners.config import DetectorConfig
from tilecorners.detectors.gradients import GradientField, gaussian_smooth
from tilecorners.errors import ConfigError, InsufficientSizeError

NO_BLUR = DetectorConfig(pre_blur=False)


def test_smoothing_is_normalised_symmetric_and_bounded():
    impulse = np.zeros((15, 15))
    impulse[7, 7] = 1.0
    out = gaussian_smooth(impulse, 5, 1.0)

    assert out.sum() == pytest.approx(1.0)
    np.testing.assert_allclose(out, out[::-1, :])
    np.testing.assert_allclose(out, out[:, ::-1])
    assert out[7, 7] == out.max()
    # 5x5 window: nothing beyond two pixels from the centre
    assert out[7, 9] > 0
    assert out[7, 10] == 0.0
    assert out[4, 7] == 0.0


@pytest.mark.parametrize("size", [4, 0, -1])
def test_smoothing_rejects_bad_sizes(size):
    with pytest.raises(ConfigError):
        gaussian_smooth(np.zeros((10, 10)), size, 1.0)


def test_smoothing_rejects_bad_sigma():
    with pytest.raises(ConfigError):
        gaussian_smooth(np.zeros((10, 10)), 5, 0.0)


def test_smoothing_keeps_constant_grid():
    grid = np.full((9, 11), 42.0)
    np.testing.assert_allclose(gaussian_smooth(grid, 5, 1.0), grid)


@pytest.mark.parametrize("config", [NO_BLUR, DetectorConfig()])
def test_constant_image_has_zero_gradient_including_borders(config):
    ix, iy = GradientField(config).compute(np.full((20, 30), 128.0))
    assert ix.shape == iy.shape == (20, 30)
    np.testing.assert_array_equal(ix, 0.0)
    np.testing.assert_array_equal(iy, 0.0)


def test_horizontal_ramp():
    # intensity grows by 2 per column
    grid = np.tile(np.arange(12, dtype=float) * 2.0, (8, 1))
    ix, iy = GradientField(NO_BLUR).compute(grid)

    # (I[c+1] - I[c-1]) * (1 + 2 + 1)
    np.testing.assert_allclose(ix[:, 1:-1], 16.0)
    np.testing.assert_array_equal(iy, 0.0)
    # reflected border: I[-1] == I[0]
    np.testing.assert_allclose(ix[:, 0], 8.0)


def test_vertical_step_sign():
    grid = np.zeros((10, 10))
    grid[5:, :] = 100.0
    ix, iy = GradientField(NO_BLUR).compute(grid)
    np.testing.assert_array_equal(ix, 0.0)
    assert iy[4, 5] > 0
    assert iy[5, 5] > 0
    assert iy[1, 5] == 0.0


def test_input_is_not_modified():
    grid = np.arange(100, dtype=float).reshape(10, 10)
    before = grid.copy()
    GradientField().compute(grid)
    np.testing.assert_array_equal(grid, before)


def test_even_pre_blur_kernel_raises():
    with pytest.raises(ConfigError):
        GradientField(DetectorConfig(pre_blur_kernel=4))


def test_image_smaller_than_derivative_kernel():
    with pytest.raises(InsufficientSizeError):
        GradientField(NO_BLUR).compute(np.zeros((2, 2)))


def test_image_smaller_than_pre_blur_kernel():
    with pytest.raises(InsufficientSizeError):
        GradientField(DetectorConfig(pre_blur_kernel=5)).compute(np.zeros((4, 10)))


def test_non_2d_input_raises():
    with pytest.raises(InsufficientSizeError):
        GradientField().compute(np.zeros((10, 10, 3)))
