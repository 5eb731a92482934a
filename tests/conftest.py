import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def rgba_pixels():
    """Random 6x8 RGBA image as an (h, w, 4) uint8 array."""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(6, 8, 4), dtype=np.uint8)


@pytest.fixture
def png_file(tmp_path, rgba_pixels):
    path = tmp_path / "sample.png"
    Image.fromarray(rgba_pixels).save(path, format="PNG")
    return path
