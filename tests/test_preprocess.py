import numpy as np
import pytest

from lbp_texture.errors import DecodeFailure
from lbp_texture.preprocessing.preprocess import PixelBuffer, decode_grayscale, load_grayscale


def test_pixel_buffer_uses_x_as_column():
    buffer = PixelBuffer(np.array([[1, 2, 3], [4, 5, 6]], dtype=np.uint8))
    assert (buffer.width, buffer.height) == (3, 2)
    assert buffer.get(2, 0) == 3
    assert buffer.get(0, 1) == 4


@pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (3, 0), (0, 2)])
def test_pixel_buffer_is_bounds_checked(x, y):
    buffer = PixelBuffer(np.zeros((2, 3), dtype=np.uint8))
    with pytest.raises(IndexError):
        buffer.get(x, y)


def test_pixel_buffer_rejects_colour_images():
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((4, 4, 3), dtype=np.uint8))


def test_load_grayscale_reads_png(image_dir, noise_image):
    buffer = load_grayscale(image_dir / "noise_a.png")
    np.testing.assert_array_equal(np.asarray(buffer), noise_image)


def test_load_grayscale_missing_file(tmp_path):
    with pytest.raises(DecodeFailure, match="not found"):
        load_grayscale(tmp_path / "missing.png")


def test_load_grayscale_undecodable_file(image_dir):
    with pytest.raises(DecodeFailure) as excinfo:
        load_grayscale(image_dir / "broken.png")
    assert excinfo.value.path.endswith("broken.png")


def test_decode_grayscale_from_bytes(image_dir, flat_image):
    data = (image_dir / "flat_a.png").read_bytes()
    np.testing.assert_array_equal(np.asarray(decode_grayscale(data)), flat_image)


def test_decode_grayscale_rejects_garbage():
    with pytest.raises(DecodeFailure):
        decode_grayscale(b"")
    with pytest.raises(DecodeFailure):
        decode_grayscale(b"garbage")
