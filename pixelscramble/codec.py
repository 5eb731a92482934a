"""
PNG/JPEG <-> flat RGBA buffers.

Images are always handled as RGBA, 4 bytes per pixel, row-major. JPEG has
no alpha channel, so it is dropped on save.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import UnsupportedFormatError
from .permutation import as_byte_array

logger = logging.getLogger(__name__)

BYTES_PER_PIXEL = 4

FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
}

PathLike = Union[str, Path]


@dataclass
class PixelImage:
    width: int
    height: int
    pixels: np.ndarray
    mode: str = "RGBA"
    format: str = "PNG"

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    def flat(self) -> np.ndarray:
        """Row-major RGBA bytes (a view onto pixels when possible)."""
        return self.pixels.reshape(-1)

    def from_flat(self, buffer) -> "PixelImage":
        """New PixelImage of the same shape holding buffer's bytes."""
        arr = as_byte_array(buffer)
        if arr.size != self.pixels.size:
            raise ValueError(f"expected {self.pixels.size} bytes, got {arr.size}")
        return PixelImage(self.width, self.height, arr.reshape(self.height, self.width, BYTES_PER_PIXEL).copy(),
                          mode=self.mode, format=self.format)


def format_for(path: PathLike) -> str:
    ext = Path(path).suffix.lower()
    try:
        return FORMATS[ext]
    except KeyError:
        raise UnsupportedFormatError(f"unsupported image format {ext or '(none)'!r}; use PNG or JPEG") from None


def to_rgba(img: Image.Image) -> np.ndarray:
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return np.array(img, dtype=np.uint8)


def load_image(path: PathLike) -> PixelImage:
    """Decode a PNG or JPEG file into RGBA pixels."""
    format_for(path)
    try:
        with Image.open(path) as img:
            if img.format not in ("PNG", "JPEG"):
                raise UnsupportedFormatError(f"{path}: {img.format} images are not supported")
            original_mode = img.mode
            detected = img.format
            rgba = to_rgba(img)
    except UnidentifiedImageError as e:
        raise UnsupportedFormatError(f"{path}: not a readable image") from e

    height, width = rgba.shape[:2]
    logger.debug("Loaded %s: %dx%d (%s)", path, width, height, original_mode)
    return PixelImage(width, height, rgba, mode=original_mode, format=detected)


def save_image(image: PixelImage, path: PathLike, quality: int = 90) -> Path:
    """Encode image to PNG or JPEG, chosen by the file extension."""
    fmt = format_for(path)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # (h, w, 4) uint8 arrays decode as RGBA
    out = Image.fromarray(np.ascontiguousarray(image.pixels, dtype=np.uint8))
    if fmt == "JPEG":
        out.convert("RGB").save(path, format=fmt, quality=quality)
    else:
        out.save(path, format=fmt)
    logger.debug("Saved %s (%s)", path, fmt)
    return path
