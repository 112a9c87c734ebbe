import math
from dataclasses import dataclass

from lbp_texture.errors import ConfigurationError

# --- DEFAULTS ---
DEFAULT_POINTS = 8
DEFAULT_RADIUS = 1.0
DEFAULT_NUM_CLASSES = 10
DEFAULT_STRIDE = 3  # spatial subsampling in both axes

# What to do when an image yields no sampled pixel
DEGENERATE_POLICIES = ("skip", "zeros", "nan")


@dataclass(frozen=True)
class ClassificationConfig:
    """
    Immutable parameters of an LBP nearest-neighbour classifier.

    Args:
        points (int): number of circular comparison points (P).
        radius (float): sampling radius in pixels (R).
        num_classes (int): number of target classes (C).
        stride (int): scan stride used by the histogram builder.
        degenerate (str): 'skip', 'zeros' or 'nan' for images with no sampled pixel.
        skip_unreadable (bool): skip images that fail to decode instead of aborting.
    """

    points: int = DEFAULT_POINTS
    radius: float = DEFAULT_RADIUS
    num_classes: int = DEFAULT_NUM_CLASSES
    stride: int = DEFAULT_STRIDE
    degenerate: str = "skip"
    skip_unreadable: bool = True

    def __post_init__(self):
        if isinstance(self.points, bool) or not isinstance(self.points, int) or self.points <= 0:
            raise ConfigurationError(f"points must be a positive integer, got {self.points!r}")
        try:
            radius = float(self.radius)
        except (TypeError, ValueError):
            raise ConfigurationError(f"radius must be a number, got {self.radius!r}") from None
        if not math.isfinite(radius) or radius <= 0:
            raise ConfigurationError(f"radius must be a positive finite number, got {self.radius!r}")
        # Normalise so ints given on the command line behave like floats
        object.__setattr__(self, "radius", radius)
        if isinstance(self.num_classes, bool) or not isinstance(self.num_classes, int) or self.num_classes <= 0:
            raise ConfigurationError(f"num_classes must be a positive integer, got {self.num_classes!r}")
        if isinstance(self.stride, bool) or not isinstance(self.stride, int) or self.stride <= 0:
            raise ConfigurationError(f"stride must be a positive integer, got {self.stride!r}")
        if self.degenerate not in DEGENERATE_POLICIES:
            raise ConfigurationError(
                f"degenerate must be one of {', '.join(DEGENERATE_POLICIES)}, got {self.degenerate!r}"
            )

    @property
    def n_bins(self):
        return 2 ** self.points

    @property
    def margin(self):
        """Pixels excluded from every image edge so all samples stay in bounds."""
        return int(math.ceil(self.radius))
