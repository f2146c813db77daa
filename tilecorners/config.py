"""
Detector configuration.

Holds every tunable option of the pipeline in one immutable object and
validates it up front, so that the individual stages can assume sane
values.  Configuration files are plain YAML; the detector options live in
the ``detector`` section.
"""

from dataclasses import dataclass, fields, asdict

import yaml

from tilecorners.errors import ConfigError


@dataclass(frozen=True)
class DetectorConfig:
    """Options recognised by the corner detection pipeline.

    Parameters
    ----------
    k : float
        Trace-penalty constant of the corner response, usually in
        [0.04, 0.06].
    pre_blur : bool
        Smooth the intensity grid before differentiation.
    pre_blur_kernel, pre_blur_sigma : int, float
        Size (odd) and standard deviation of the pre-blur Gaussian.
    aggregation_kernel, aggregation_sigma : int, float
        Size (odd) and standard deviation of the Gaussian window used to
        aggregate the structure tensor.
    detection_threshold : float
        Responses below this value are clamped to zero; only points
        strictly above it can be selected.
    tiles_x, tiles_y : int
        Number of NMS tiles along the columns / rows.
    max_per_tile : int
        Maximum number of points accepted from one tile.
    min_pixel_radius : int
        Minimum Chebyshev distance between two accepted points.
    border_margin : int
        Width of the border strip whose responses are zeroed (0 = none).
    """

    k: float = 0.04
    pre_blur: bool = True
    pre_blur_kernel: int = 5
    pre_blur_sigma: float = 1.0
    aggregation_kernel: int = 7
    aggregation_sigma: float = 1.5
    detection_threshold: float = 10000.0
    tiles_x: int = 10
    tiles_y: int = 10
    max_per_tile: int = 10
    min_pixel_radius: int = 10
    border_margin: int = 0

    def validate(self) -> "DetectorConfig":
        """Check every option, raising ``ConfigError`` on the first bad one."""
        _check_kernel("pre_blur_kernel", self.pre_blur_kernel)
        _check_kernel("aggregation_kernel", self.aggregation_kernel)
        _check_positive("pre_blur_sigma", self.pre_blur_sigma)
        _check_positive("aggregation_sigma", self.aggregation_sigma)
        _check_positive_int("tiles_x", self.tiles_x)
        _check_positive_int("tiles_y", self.tiles_y)
        _check_positive_int("max_per_tile", self.max_per_tile)
        _check_positive_int("min_pixel_radius", self.min_pixel_radius)

        if isinstance(self.detection_threshold, bool) or \
                not isinstance(self.detection_threshold, (int, float)):
            raise ConfigError(
                f"detection_threshold must be a number, got {self.detection_threshold!r}")
        # clamped responses are 0, so a negative threshold would select them
        if self.detection_threshold < 0:
            raise ConfigError(
                f"detection_threshold must be non-negative, got {self.detection_threshold!r}")
        if isinstance(self.k, bool) or not isinstance(self.k, (int, float)) or \
                not 0.0 < self.k < 0.25:
            raise ConfigError(f"k must lie in (0, 0.25), got {self.k}")
        if _not_int(self.border_margin) or self.border_margin < 0:
            raise ConfigError(
                f"border_margin must be a non-negative integer, got {self.border_margin!r}")
        return self

    def required_size(self) -> int:
        """Smallest image side every kernel of this configuration fits into."""
        size = max(3, self.aggregation_kernel)
        if self.pre_blur:
            size = max(size, self.pre_blur_kernel)
        return size

    @classmethod
    def from_dict(cls, options: dict) -> "DetectorConfig":
        """Build a validated config from a plain mapping (e.g. parsed YAML)."""
        options = dict(options or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigError(f"Unknown detector option(s): {', '.join(unknown)}")
        return cls(**options).validate()

    def to_dict(self) -> dict:
        return asdict(self)


def load_config(path: str) -> dict:
    """Read a YAML configuration file into a dict."""
    with open(path, "r") as fh:
        cfg = yaml.safe_load(fh)
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"Top level of {path} must be a mapping")
    return cfg


def detector_config(cfg: dict) -> DetectorConfig:
    """Extract the ``detector`` section of a loaded config file."""
    return DetectorConfig.from_dict(cfg.get("detector", {}))


def _not_int(value) -> bool:
    return isinstance(value, bool) or not isinstance(value, int)


def _check_kernel(name: str, size) -> None:
    # an even kernel has no centre pixel
    if _not_int(size) or size <= 0 or size % 2 == 0:
        raise ConfigError(f"{name} must be a positive odd integer, got {size!r}")


def _check_positive_int(name: str, value) -> None:
    if _not_int(value) or value <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")


def _check_positive(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
