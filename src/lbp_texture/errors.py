class LBPTextureError(Exception):
    """Base class for every error raised by lbp_texture."""


class ConfigurationError(LBPTextureError, ValueError):
    """Invalid classification parameters (points, radius, classes, stride, policy)."""


class EmptyTrainingIndexError(LBPTextureError):
    """Nearest-neighbour search or testing attempted without training descriptors."""


class NotTrainedError(LBPTextureError):
    """Testing attempted with an index that was never frozen by a training run."""


class DescriptorMismatchError(LBPTextureError, ValueError):
    """Query and training descriptors have different lengths."""


class LabelOutOfRangeError(LBPTextureError, ValueError):
    """A test label falls outside [0, num_classes)."""


class DecodeFailure(LBPTextureError):
    """An image could not be read or decoded as grayscale."""

    def __init__(self, path, reason="could not decode image"):
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


class DegenerateHistogramError(LBPTextureError):
    """No pixel was sampled, so the histogram cannot be normalised."""

    def __init__(self, width, height, margin, stride):
        super().__init__(
            f"no pixel sampled in a {width}x{height} image "
            f"(margin={margin}, stride={stride})"
        )
        self.width = width
        self.height = height


class MalformedDatasetLineError(LBPTextureError, ValueError):
    """A dataset list line could not be parsed in strict mode."""

    def __init__(self, source, line_no, line, reason):
        super().__init__(f"{source}:{line_no}: {reason}: {line!r}")
        self.source = source
        self.line_no = line_no
        self.line = line
        self.reason = reason
