import matplotlib.pyplot as plt
import numpy as np

from lbp_texture.features.lbp_extractor import compute_lbp_codes, compute_lbp_histogram
from lbp_texture.preprocessing.preprocess import as_pixel_buffer


def compute_lbp_map(image, config):
    """
    Full-resolution LBP code image, same shape as the input.

    Pixels inside the margin keep code 0. Useful for looking at texture,
    the descriptor itself is built on the strided grid.
    """
    pixels = np.asarray(as_pixel_buffer(image))
    margin = config.margin
    lbp = np.zeros(pixels.shape, dtype=np.int64)

    codes = compute_lbp_codes(pixels, config, stride=1)
    lbp[margin:margin + codes.shape[0], margin:margin + codes.shape[1]] = codes
    return lbp


def plot_lbp_histogram(image, config, title="LBP Histogram", out_path=None):
    """
    Visualizes the image, its LBP code map and its descriptor side-by-side.
    Saves the figure when out_path is given, otherwise shows it.
    """
    pixels = np.asarray(as_pixel_buffer(image))
    hist = compute_lbp_histogram(pixels, config)
    lbp_image = compute_lbp_map(pixels, config)

    fig = plt.figure(figsize=(12, 4))

    plt.subplot(1, 3, 1)
    plt.imshow(pixels, cmap="gray")
    plt.title("Original Image")
    plt.axis("off")

    plt.subplot(1, 3, 2)
    plt.imshow(lbp_image, cmap="gray")
    plt.title("LBP Texture")
    plt.axis("off")

    plt.subplot(1, 3, 3)
    plt.bar(range(len(hist)), hist)
    plt.title(title)
    plt.xlabel("LBP code")

    if out_path is not None:
        fig.savefig(out_path)
        plt.close(fig)
    else:
        plt.show()
    return hist
