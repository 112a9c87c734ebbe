import math
from dataclasses import replace

import numpy as np
from loguru import logger

from lbp_texture.config import ClassificationConfig
from lbp_texture.errors import ConfigurationError, DegenerateHistogramError
from lbp_texture.preprocessing.preprocess import as_pixel_buffer


def _check_params(points, radius):
    if points <= 0 or radius <= 0:
        raise ConfigurationError(f"LBP needs points > 0 and radius > 0, got points={points}, radius={radius}")


def sampling_offsets(points, radius):
    """
    Integer (dx, dy) offsets of the P circular neighbours around a centre pixel.

    Neighbour i sits at angle 2*pi*i/P, displaced by (R*sin, R*cos). Each
    offset is rounded to the nearest integer with exact halves going up
    (floor(d + 0.5)), so it is the same at every pixel position. Bit i of an
    LBP code belongs to offset i.
    """
    _check_params(points, radius)
    offsets = []
    for i in range(points):
        theta = 2 * math.pi * i / points
        dx = math.sin(theta) * radius
        dy = math.cos(theta) * radius
        # Round the offset, not the absolute coordinate: position-independent
        offsets.append((int(math.floor(dx + 0.5)), int(math.floor(dy + 0.5))))
    return offsets


def lbp_code(image, x, y, points, radius):
    """
    Compute the rotation-variant LBP code of pixel (x, y).

    Every sampled neighbour with intensity >= the centre sets its bit. The
    result lies in [0, 2**points). Out-of-bounds samples raise IndexError.
    """
    buffer = as_pixel_buffer(image)
    center = buffer.get(x, y)

    value = 0
    for i, (dx, dy) in enumerate(sampling_offsets(points, radius)):
        if buffer.get(x + dx, y + dy) >= center:
            value |= 1 << i
    return value


def scan_region(width, height, config):
    """
    Return the x and y coordinates visited by the histogram builder.

    A margin of ceil(radius) pixels is left on every edge; the function checks
    that no sampling offset can leave the image from inside that region.
    """
    margin = config.margin
    offsets = sampling_offsets(config.points, config.radius)
    reach = max(max(abs(dx), abs(dy)) for dx, dy in offsets)
    if reach > margin:
        raise RuntimeError(f"Sampling offset {reach} exceeds scan margin {margin}")

    xs = np.arange(margin, width - margin, config.stride)
    ys = np.arange(margin, height - margin, config.stride)
    return xs, ys


def compute_lbp_codes(image, config, stride=None):
    """
    LBP codes for every pixel of the scan grid as a (len(ys), len(xs)) array.

    stride overrides config.stride, e.g. stride=1 for a full-resolution code map.
    """
    pixels = np.asarray(as_pixel_buffer(image))
    height, width = pixels.shape
    if stride is not None and stride != config.stride:
        config = replace(config, stride=stride)
    xs, ys = scan_region(width, height, config)

    codes = np.zeros((ys.size, xs.size), dtype=np.int64)
    if codes.size == 0:
        return codes

    center = pixels[np.ix_(ys, xs)]
    for i, (dx, dy) in enumerate(sampling_offsets(config.points, config.radius)):
        neighbour = pixels[np.ix_(ys + dy, xs + dx)]
        codes |= (neighbour >= center).astype(np.int64) << i
    return codes


def compute_lbp_histogram(image, config):
    """
    Build the L1-normalised LBP histogram (descriptor) of an image.

    The descriptor has 2**P bins summing to 1. When no pixel is sampled the
    outcome follows config.degenerate: 'skip' raises DegenerateHistogramError,
    'zeros' returns an all-zero descriptor, 'nan' returns all-NaN bins.
    """
    codes = compute_lbp_codes(image, config)
    histogram = np.bincount(codes.ravel(), minlength=config.n_bins).astype(np.float64)

    # Normalise by the sum of the bins (L1)
    total = histogram.sum()
    if total == 0:
        buffer = as_pixel_buffer(image)
        if config.degenerate == "skip":
            raise DegenerateHistogramError(buffer.width, buffer.height, config.margin, config.stride)
        if config.degenerate == "zeros":
            logger.warning(
                f"No pixel sampled in {buffer.width}x{buffer.height} image, returning an all-zero descriptor"
            )
            return histogram
        with np.errstate(invalid="ignore", divide="ignore"):
            return histogram / total

    return histogram / total


class LBPExtractor:
    """Stateless descriptor extractor bound to one ClassificationConfig."""

    def __init__(self, config=None):
        self.config = config or ClassificationConfig()

    @property
    def n_bins(self):
        return self.config.n_bins

    def code(self, image, x, y):
        return lbp_code(image, x, y, self.config.points, self.config.radius)

    def extract(self, image):
        return compute_lbp_histogram(image, self.config)
