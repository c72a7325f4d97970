"""Image descriptor: identity, decoded metadata and pending transform intents.

The descriptor never touches pixels itself. It answers questions such as
"does this image need cropping?" or "should the background be filled or
kept transparent?" and hands the actual work to a ``PixelEngine``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pictor.image.engine import PixelEngine

logger = logging.getLogger(__name__)


class InvalidGeometryError(ValueError):
    """Raised when a geometric value cannot be derived from the stored dimensions."""


# ---------------------------------------------------------------------------
# Type families
# ---------------------------------------------------------------------------


class ImageFamily(StrEnum):
    JPEG = "JPEG"
    GIF = "GIF"
    PNG = "PNG"
    BMP = "BMP"


MIME_TYPES: dict[ImageFamily, frozenset[str]] = {
    ImageFamily.JPEG: frozenset({"image/jpeg"}),
    ImageFamily.GIF: frozenset({"image/gif"}),
    ImageFamily.PNG: frozenset({"image/png", "image/x-png"}),
    ImageFamily.BMP: frozenset({"image/bmp", "image/x-ms-bmp"}),
}


# ---------------------------------------------------------------------------
# Metadata and plans
# ---------------------------------------------------------------------------


@dataclass
class ImageInfo:
    """Decoded metadata and crop target. ``None`` means not yet known / not requested."""

    width: int | None = None
    height: int | None = None
    mime: str | None = None
    crop_width: int | None = None
    crop_height: int | None = None


class BackgroundAction(StrEnum):
    NONE = "none"
    ENABLE_TRANSPARENCY = "enable_transparency"
    FILL = "fill"


@dataclass(frozen=True)
class TransformPlan:
    """Operations an image needs before it is encoded."""

    crop: bool
    sharpen: bool
    background: BackgroundAction
    background_color: str | None = None


# ---------------------------------------------------------------------------
# Descriptor
# ---------------------------------------------------------------------------


class ImageDescriptor:
    """One image's path, metadata and pending transformation intents.

    A descriptor is created per request and is not shared between threads.
    """

    def __init__(
        self,
        path: str | None = None,
        engine: PixelEngine | None = None,
        document_root: str = "",
    ) -> None:
        self._path: str | None = None
        self._original_path: str | None = None
        self._background: str | None = None
        self._info = ImageInfo()
        self._engine = engine
        self._document_root = document_root

        if path is not None:
            self.set_path(path)
            self.set_original_path(path)

    def __repr__(self) -> str:
        return (
            f"ImageDescriptor(path={self._path!r}, mime={self.mime_type!r}, "
            f"size={self.width}x{self.height})"
        )

    # -- Identity -----------------------------------------------------------

    @property
    def path(self) -> str | None:
        """Current file location, possibly rewritten by later steps."""
        return self._path

    def set_path(self, path: str) -> ImageDescriptor:
        self._path = path
        return self

    @property
    def full_path(self) -> str:
        """Document root joined to the current path."""
        return self._document_root + (self._path or "")

    @property
    def original_path(self) -> str | None:
        """Source file location as given at construction."""
        return self._original_path

    def set_original_path(self, path: str) -> ImageDescriptor:
        self._original_path = path
        return self

    @property
    def background(self) -> str | None:
        """Requested matting colour in hex, ``None`` for no explicit fill."""
        return self._background

    def set_background(self, color: str | None) -> ImageDescriptor:
        self._background = color
        return self

    @property
    def engine(self) -> PixelEngine | None:
        return self._engine

    # -- Metadata -----------------------------------------------------------

    @property
    def info(self) -> ImageInfo:
        return self._info

    @property
    def width(self) -> int:
        """Stored width truncated to an integer, 0 while unknown."""
        return int(self._info.width or 0)

    @property
    def height(self) -> int:
        """Stored height truncated to an integer, 0 while unknown."""
        return int(self._info.height or 0)

    def set_width(self, width: int) -> int:
        self._info.width = width
        return width

    def set_height(self, height: int) -> int:
        self._info.height = height
        return height

    @property
    def mime_type(self) -> str:
        return self._info.mime or ""

    def set_mime_type(self, mime: str) -> str:
        self._info.mime = mime
        return mime

    @property
    def datasize(self) -> int:
        """Byte length of the encoded image as produced by the engine."""
        return len(self._require_engine().get_data())

    def load(self) -> ImageDescriptor:
        """Decode the file at ``full_path`` and record its dimensions and MIME type."""
        engine = self._require_engine()
        decoded = engine.decode(self.full_path)
        self.set_width(decoded.width)
        self.set_height(decoded.height)
        self.set_mime_type(decoded.mime)
        logger.debug(
            "Decoded %s with %s engine: %dx%d %s",
            self.full_path,
            engine.name,
            decoded.width,
            decoded.height,
            decoded.mime,
        )
        return self

    # -- Type classification ------------------------------------------------

    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    def is_of_type(self, family: str = ImageFamily.JPEG) -> bool:
        """Check the MIME type against one family: ``JPEG``, ``GIF``, ``PNG`` or ``BMP``.

        Matching is exact and case-sensitive. Unknown families and MIME types
        simply return False.
        """
        return self.mime_type in MIME_TYPES.get(family, frozenset())

    def is_jpeg(self) -> bool:
        return self.is_of_type(ImageFamily.JPEG)

    def is_gif(self) -> bool:
        return self.is_of_type(ImageFamily.GIF)

    def is_bmp(self) -> bool:
        return self.is_of_type(ImageFamily.BMP)

    def is_png(self) -> bool:
        return self.is_of_type(ImageFamily.PNG)

    def is_able_to_have_transparency(self) -> bool:
        return self.is_png() or self.is_gif()

    def _sharpening_is_desired(self) -> bool:
        # Only lossy output benefits from sharpening after a resize.
        return self.is_jpeg()

    # -- Geometry -----------------------------------------------------------

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def ratio(self) -> float:
        """Width divided by height.

        Raises:
            InvalidGeometryError: If the height is zero or not yet known.
        """
        height = self.height
        if height == 0:
            raise InvalidGeometryError(f"Cannot compute ratio of {self._path!r}: height is 0")
        return self.width / height

    # -- Cropping -----------------------------------------------------------

    @property
    def crop_width(self) -> int | None:
        return self._info.crop_width

    @property
    def crop_height(self) -> int | None:
        return self._info.crop_height

    def set_crop_width(self, width: int) -> int:
        self._info.crop_width = width
        return width

    def set_crop_height(self, height: int) -> int:
        self._info.crop_height = height
        return height

    def cropping_is_needed(self) -> bool:
        """Return True when the crop target is smaller than the image on either axis.

        A target that shrinks only one axis still triggers a crop, even if the
        other axis is larger than the image.
        """
        crop_width = self.crop_width
        crop_height = self.crop_height
        if crop_width is None or crop_height is None:
            return False
        return crop_width < self.width or crop_height < self.height

    # -- Background ---------------------------------------------------------

    def apply_background(self, color: str | None = None) -> ImageDescriptor:
        """Keep transparency or fill the background, depending on format and colour.

        Formats without transparency (JPEG, BMP, unknown) are left alone. For
        GIF and PNG an empty colour (None, "" or "0") enables transparency and
        any other colour is used to fill the background for matting.
        """
        action = self._background_action(color)
        if action is BackgroundAction.FILL:
            self._require_engine().fill(color)  # type: ignore[arg-type]
        elif action is BackgroundAction.ENABLE_TRANSPARENCY:
            self._require_engine().enable_transparency()
        logger.debug("Background for %s: %s", self._path, action)
        return self

    def plan(self) -> TransformPlan:
        """Summarise the operations this image needs, without calling the engine.

        The background decision uses the colour stored with ``set_background``.
        """
        action = self._background_action(self._background)
        return TransformPlan(
            crop=self.cropping_is_needed(),
            sharpen=self._sharpening_is_desired(),
            background=action,
            background_color=self._background if action is BackgroundAction.FILL else None,
        )

    # -- Internal -----------------------------------------------------------

    def _background_action(self, color: str | None) -> BackgroundAction:
        if not self.is_able_to_have_transparency():
            return BackgroundAction.NONE
        if not color or color == "0":
            return BackgroundAction.ENABLE_TRANSPARENCY
        return BackgroundAction.FILL

    def _require_engine(self) -> PixelEngine:
        if self._engine is None:
            raise RuntimeError(f"No pixel engine attached to image {self._path!r}")
        return self._engine
