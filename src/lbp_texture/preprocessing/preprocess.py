import os

import cv2
import numpy as np

from lbp_texture.errors import DecodeFailure


class PixelBuffer:
    """
    Bounds-checked view over a 2D 8-bit grayscale image.

    Coordinates are (x, y) = (column, row), like image.at<uchar>(y, x) in OpenCV.
    """

    def __init__(self, pixels):
        pixels = np.asarray(pixels)
        if pixels.ndim != 2:
            raise ValueError(f"Expected a 2D grayscale image, got shape {pixels.shape}")
        self.pixels = pixels

    @property
    def width(self):
        return self.pixels.shape[1]

    @property
    def height(self):
        return self.pixels.shape[0]

    def get(self, x, y):
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return int(self.pixels[y, x])

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self.pixels
        return self.pixels.astype(dtype)

    def __repr__(self):
        return f"PixelBuffer(width={self.width}, height={self.height})"


def as_pixel_buffer(image):
    if isinstance(image, PixelBuffer):
        return image
    return PixelBuffer(image)


def load_grayscale(path):
    """
    Read an image file as a grayscale PixelBuffer.

    Raises DecodeFailure if the file is missing or OpenCV cannot decode it.
    """
    path = os.fspath(path)
    if not os.path.exists(path):
        raise DecodeFailure(path, "image not found")

    try:
        path.encode("utf-8")
    except UnicodeEncodeError:
        # Non-UTF-8 file name (surrogate-escaped); cv2.imread only accepts UTF-8 paths
        return decode_grayscale(np.fromfile(path, dtype=np.uint8).tobytes(), name=path)

    img = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
    if img is None:
        raise DecodeFailure(path)
    return PixelBuffer(img)


def decode_grayscale(data, name="<bytes>"):
    """Decode an in-memory encoded image (PNG, JPEG, ...) as grayscale."""
    nparr = np.frombuffer(data, np.uint8)
    if nparr.size == 0:
        raise DecodeFailure(name, "empty image data")

    img = cv2.imdecode(nparr, cv2.IMREAD_GRAYSCALE)
    if img is None:
        raise DecodeFailure(name)
    return PixelBuffer(img)
