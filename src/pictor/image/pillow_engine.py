"""Pillow-backed pixel engine."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image

from pictor.image.color import parse_hex_color
from pictor.image.engine import DecodedImage

logger = logging.getLogger(__name__)

# Encoders that cannot store an alpha channel
_OPAQUE_FORMATS = frozenset({"JPEG", "BMP"})


class PillowEngine:
    """Decodes, mattes and encodes images with a ``PIL.Image.Image``."""

    def __init__(self, max_image_pixels: int) -> None:
        self._max_image_pixels = max_image_pixels
        self._image: Image.Image | None = None
        self._format: str | None = None

    @property
    def name(self) -> str:
        return "pillow"

    @property
    def image(self) -> Image.Image:
        """The decoded image.

        Raises:
            RuntimeError: If nothing has been decoded yet.
        """
        if self._image is None:
            raise RuntimeError("PillowEngine used before decode()")
        return self._image

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
                opened.load()
                image_format = opened.format
                image = opened.copy()
        except FileNotFoundError:
            raise
        # Unidentified formats and truncated pixel data both surface as OSError.
        except (OSError, Image.DecompressionBombError) as exc:
            raise ValueError(f"Not a decodable image: {source}") from exc

        self._image = image
        self._format = image_format
        mime = Image.MIME.get(image_format or "", "")
        logger.debug("Pillow decoded %s (%s, mode=%s)", source, image_format, image.mode)
        return DecodedImage(width=width, height=height, mime=mime)

    def get_data(self) -> bytes:
        image = self.image
        image_format = self._format or "PNG"
        if image_format in _OPAQUE_FORMATS and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        buffer = io.BytesIO()
        image.save(buffer, format=image_format)
        return buffer.getvalue()

    def fill(self, color: str) -> None:
        rgb = parse_hex_color(color)
        rgba = self.image.convert("RGBA")
        canvas = Image.new("RGBA", rgba.size, (*rgb, 255))
        canvas.alpha_composite(rgba)
        self._image = canvas.convert("RGB")
        logger.debug("Pillow filled background with %s", color)

    def enable_transparency(self) -> None:
        image = self.image
        if image.mode in ("RGBA", "LA", "PA"):
            return
        # Palette transparency ("transparency" in info) is carried over by convert().
        self._image = image.convert("RGBA")
