"""numpy-backed pixel engine.

Pixels live in an ``HxWx3`` (opaque) or ``HxWx4`` (with alpha) uint8 array.
Pillow is only used at the edges, to read and write the file format.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

from pictor.image.color import parse_hex_color
from pictor.image.engine import DecodedImage

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

_OPAQUE_FORMATS = frozenset({"JPEG", "BMP"})


def _has_alpha(image: Image.Image) -> bool:
    if image.mode in ("RGBA", "LA", "PA"):
        return True
    # Palette, greyscale and RGB images can carry a transparent index or colour.
    return "transparency" in image.info


class ArrayEngine:
    """Decodes into a numpy array and mattes with vectorised compositing."""

    def __init__(self, max_image_pixels: int) -> None:
        self._max_image_pixels = max_image_pixels
        self._pixels: NDArray[np.uint8] | None = None
        self._format: str | None = None

    @property
    def name(self) -> str:
        return "array"

    @property
    def pixels(self) -> NDArray[np.uint8]:
        """The decoded pixel array.

        Raises:
            RuntimeError: If nothing has been decoded yet.
        """
        if self._pixels is None:
            raise RuntimeError("ArrayEngine used before decode()")
        return self._pixels

    def decode(self, path: str) -> DecodedImage:
        source = Path(path)
        if not source.is_file():
            raise FileNotFoundError(f"Image not found: {source}")

        try:
            with Image.open(source) as opened:
                width, height = opened.size
                if width * height > self._max_image_pixels:
                    raise ValueError(
                        f"Image {source} has {width * height} pixels, limit is {self._max_image_pixels}"
                    )
                mode = "RGBA" if _has_alpha(opened) else "RGB"
                pixels = np.asarray(opened.convert(mode), dtype=np.uint8).copy()
                image_format = opened.format
        except FileNotFoundError:
            raise
        # Unidentified formats and truncated pixel data both surface as OSError.
        except (OSError, Image.DecompressionBombError) as exc:
            raise ValueError(f"Not a decodable image: {source}") from exc

        self._pixels = pixels
        self._format = image_format
        logger.debug("Array engine decoded %s (%s, shape=%s)", source, image_format, pixels.shape)
        return DecodedImage(width=width, height=height, mime=Image.MIME.get(image_format or "", ""))

    def get_data(self) -> bytes:
        pixels = self.pixels
        image_format = self._format or "PNG"
        if image_format in _OPAQUE_FORMATS and pixels.shape[2] == 4:
            pixels = pixels[:, :, :3]

        buffer = io.BytesIO()
        Image.fromarray(np.ascontiguousarray(pixels)).save(buffer, format=image_format)
        return buffer.getvalue()

    def fill(self, color: str) -> None:
        background = np.array(parse_hex_color(color), dtype=np.float32)
        pixels = self.pixels
        if pixels.shape[2] == 3:
            return

        rgb = pixels[:, :, :3].astype(np.float32)
        alpha = pixels[:, :, 3:4].astype(np.float32) / 255.0
        composited = rgb * alpha + background * (1.0 - alpha)
        self._pixels = np.clip(np.rint(composited), 0, 255).astype(np.uint8)
        logger.debug("Array engine filled background with %s", color)

    def enable_transparency(self) -> None:
        pixels = self.pixels
        if pixels.shape[2] == 4:
            return
        opaque = np.full((*pixels.shape[:2], 1), 255, dtype=np.uint8)
        self._pixels = np.concatenate([pixels, opaque], axis=2)
