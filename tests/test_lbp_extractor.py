import numpy as np
import pytest

from lbp_texture.config import ClassificationConfig
from lbp_texture.errors import ConfigurationError, DegenerateHistogramError
from lbp_texture.features.lbp_extractor import (
    LBPExtractor,
    compute_lbp_codes,
    compute_lbp_histogram,
    lbp_code,
    sampling_offsets,
    scan_region,
)
from lbp_texture.features.utils import compute_lbp_map, plot_lbp_histogram


def test_offsets_for_four_points():
    # angle 0 points down (+y), angle pi/2 points right (+x)
    assert sampling_offsets(4, 1.0) == [(0, 1), (1, 0), (0, -1), (-1, 0)]


def test_offsets_for_eight_points():
    assert sampling_offsets(8, 1.0) == [
        (0, 1), (1, 1), (1, 0), (1, -1), (0, -1), (-1, -1), (-1, 0), (-1, 1),
    ]


def test_offsets_round_exact_halves_up():
    # dy=+0.5 -> 1, dx=+0.5 -> 1, dy=-0.5 -> 0, dx=-0.5 -> 0
    assert sampling_offsets(4, 0.5) == [(0, 1), (1, 0), (0, 0), (0, 0)]


def test_lbp_code_on_hand_built_neighbourhood():
    image = np.array(
        [
            [10, 50, 10],
            [5, 20, 30],
            [10, 15, 10],
        ],
        dtype=np.uint8,
    )
    # bit0 below (15 < 20), bit1 right (30), bit2 above (50), bit3 left (5 < 20)
    assert lbp_code(image, 1, 1, 4, 1.0) == 0b0110


def test_lbp_code_counts_equal_intensity_as_set():
    image = np.full((3, 3), 9, dtype=np.uint8)
    assert lbp_code(image, 1, 1, 8, 1.0) == 255


def test_lbp_code_rejects_bad_parameters():
    image = np.zeros((3, 3), dtype=np.uint8)
    with pytest.raises(ConfigurationError):
        lbp_code(image, 1, 1, 0, 1.0)
    with pytest.raises(ConfigurationError):
        lbp_code(image, 1, 1, 8, 0.0)


def test_lbp_code_out_of_bounds_raises():
    image = np.zeros((3, 3), dtype=np.uint8)
    with pytest.raises(IndexError):
        lbp_code(image, 0, 0, 8, 1.0)


@pytest.mark.parametrize("points", [1, 2, 4, 8, 10])
def test_descriptor_length_is_two_to_the_p(points, noise_image):
    config = ClassificationConfig(points=points)
    assert compute_lbp_histogram(noise_image, config).shape == (2 ** points,)


@pytest.mark.parametrize("radius, stride", [(1.0, 3), (1.0, 1), (2.0, 2), (1.5, 5)])
def test_descriptor_sums_to_one(radius, stride, noise_image):
    config = ClassificationConfig(radius=radius, stride=stride)
    hist = compute_lbp_histogram(noise_image, config)
    assert hist.sum() == pytest.approx(1.0, abs=1e-9)
    assert (hist >= 0).all()


def test_uniform_image_puts_all_mass_in_top_bin(flat_image):
    hist = LBPExtractor().extract(flat_image)
    assert hist[255] == 1.0
    assert hist[:255].sum() == 0.0


def test_vectorised_codes_match_per_pixel_codes(noise_image):
    config = ClassificationConfig(points=8, radius=2.0, stride=3)
    codes = compute_lbp_codes(noise_image, config)
    xs, ys = scan_region(noise_image.shape[1], noise_image.shape[0], config)

    expected = np.array([[lbp_code(noise_image, x, y, 8, 2.0) for x in xs] for y in ys])
    np.testing.assert_array_equal(codes, expected)


def test_scan_region_honours_margin_and_stride():
    config = ClassificationConfig(radius=1.0, stride=3)
    xs, ys = scan_region(10, 7, config)
    assert list(xs) == [1, 4, 7]
    assert list(ys) == [1, 4]


@pytest.mark.parametrize("points", [3, 8, 16])
@pytest.mark.parametrize("radius", [0.4, 1.0, 1.5, 2.5, 3.0])
def test_sampling_offsets_stay_inside_margin(points, radius):
    margin = ClassificationConfig(points=points, radius=radius).margin
    for dx, dy in sampling_offsets(points, radius):
        assert abs(dx) <= margin and abs(dy) <= margin


def test_stride_controls_number_of_sampled_pixels(noise_image):
    dense = compute_lbp_codes(noise_image, ClassificationConfig(stride=1))
    sparse = compute_lbp_codes(noise_image, ClassificationConfig(stride=3))
    assert dense.shape == (62, 62)
    assert sparse.shape == (21, 21)


def test_degenerate_image_skip_policy_raises():
    tiny = np.zeros((2, 2), dtype=np.uint8)
    with pytest.raises(DegenerateHistogramError):
        compute_lbp_histogram(tiny, ClassificationConfig())


def test_degenerate_image_zeros_policy():
    tiny = np.zeros((2, 2), dtype=np.uint8)
    hist = compute_lbp_histogram(tiny, ClassificationConfig(degenerate="zeros"))
    assert hist.shape == (256,)
    assert not hist.any()


def test_degenerate_image_nan_policy_reproduces_division_by_zero():
    tiny = np.zeros((3, 2), dtype=np.uint8)
    hist = compute_lbp_histogram(tiny, ClassificationConfig(degenerate="nan"))
    assert np.isnan(hist).all()


def test_smallest_sampled_image_has_one_pixel():
    image = np.arange(9, dtype=np.uint8).reshape(3, 3)
    hist = compute_lbp_histogram(image, ClassificationConfig())
    assert np.count_nonzero(hist) == 1
    assert hist[lbp_code(image, 1, 1, 8, 1.0)] == 1.0


def test_lbp_map_has_image_shape(noise_image):
    config = ClassificationConfig()
    lbp = compute_lbp_map(noise_image, config)
    assert lbp.shape == noise_image.shape
    assert lbp[0].sum() == 0
    assert lbp[5, 7] == lbp_code(noise_image, 7, 5, 8, 1.0)


def test_plot_lbp_histogram_writes_file(tmp_path, noise_image):
    out = tmp_path / "lbp.png"
    hist = plot_lbp_histogram(noise_image, ClassificationConfig(), out_path=out)
    assert out.exists()
    assert hist.shape == (256,)
