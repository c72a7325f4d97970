"""Engine selection and descriptor construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pictor.config import get_settings
from pictor.image.array_engine import ArrayEngine
from pictor.image.descriptor import ImageDescriptor
from pictor.image.pillow_engine import PillowEngine

if TYPE_CHECKING:
    from collections.abc import Callable

    from pictor.config import Settings
    from pictor.image.engine import PixelEngine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Engine registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineSpec:
    """Static metadata for a pixel engine backend."""

    name: str
    factory: Callable[[Settings], PixelEngine]
    description: str


ENGINE_REGISTRY: dict[str, EngineSpec] = {
    "pillow": EngineSpec(
        name="pillow",
        factory=lambda settings: PillowEngine(max_image_pixels=settings.max_image_pixels),
        description="Pillow images, GD-style in-place operations",
    ),
    "array": EngineSpec(
        name="array",
        factory=lambda settings: ArrayEngine(max_image_pixels=settings.max_image_pixels),
        description="numpy pixel arrays with vectorised compositing",
    ),
}


def create_engine(settings: Settings) -> PixelEngine:
    """Instantiate the engine named by ``settings.engine``."""
    try:
        spec = ENGINE_REGISTRY[settings.engine]
    except KeyError:
        raise KeyError(f"Unknown engine: {settings.engine}") from None
    logger.debug("Using %s engine: %s", spec.name, spec.description)
    return spec.factory(settings)


def open_image(path: str, settings: Settings | None = None) -> ImageDescriptor:
    """Build a descriptor for ``path`` and decode its metadata.

    Raises:
        FileNotFoundError: If the file does not exist under the document root.
        ValueError: If the file cannot be decoded or exceeds size limits.
    """
    settings = settings or get_settings()
    engine = create_engine(settings)
    image = ImageDescriptor(path, engine=engine, document_root=settings.document_root)
    image.set_background(settings.default_background)
    image.load()
    logger.info("Opened %s (%s, %dx%d)", image.full_path, image.mime_type, image.width, image.height)
    return image
