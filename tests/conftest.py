# tests/conftest.py
import os

os.environ.setdefault("MPLBACKEND", "Agg")

from pathlib import Path

import cv2
import numpy as np
import pytest
from loguru import logger

from lbp_texture.config import ClassificationConfig


@pytest.fixture(autouse=True)
def disable_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture
def config():
    return ClassificationConfig()


@pytest.fixture
def flat_image():
    # Every neighbour equals the centre, so every code is 2**P - 1
    return np.full((32, 32), 120, dtype=np.uint8)


@pytest.fixture
def noise_image():
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(64, 64), dtype=np.uint8)


@pytest.fixture
def image_dir(tmp_path: Path, flat_image, noise_image) -> Path:
    """
    <tmp>/images/
        flat_a.png   uniform texture
        flat_b.png   uniform texture, different intensity
        noise_a.png  random texture
        noise_b.png  random texture, other seed
        tiny.png     too small to sample
        broken.png   not an image
    """
    base = tmp_path / "images"
    base.mkdir()
    cv2.imwrite(str(base / "flat_a.png"), flat_image)
    cv2.imwrite(str(base / "flat_b.png"), np.full((40, 48), 30, dtype=np.uint8))
    cv2.imwrite(str(base / "noise_a.png"), noise_image)
    rng = np.random.default_rng(11)
    cv2.imwrite(str(base / "noise_b.png"), rng.integers(0, 256, size=(64, 64), dtype=np.uint8))
    cv2.imwrite(str(base / "tiny.png"), np.zeros((2, 2), dtype=np.uint8))
    (base / "broken.png").write_bytes(b"definitely not a png")
    return base


@pytest.fixture
def list_files(tmp_path: Path, image_dir: Path):
    train = tmp_path / "train.txt"
    train.write_text(
        f"0 {image_dir / 'flat_a.png'}\n"
        f"1 {image_dir / 'noise_a.png'}\n"
    )
    test = tmp_path / "test.txt"
    test.write_text(
        f"0 {image_dir / 'flat_b.png'}\n"
        f"1 {image_dir / 'noise_b.png'}\n"
        f"1 {image_dir / 'flat_b.png'}\n"
    )
    return train, test
