"""Pixel engine capability.

The descriptor decides *what* has to happen to an image; an engine does
the pixel work. Implementations: Pillow (``pillow_engine``) and numpy
arrays (``array_engine``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class DecodedImage:
    """Metadata reported by an engine after inspecting a source file."""

    width: int
    height: int
    mime: str


class PixelEngine(Protocol):
    """Protocol for pixel decoding/encoding backends."""

    @property
    def name(self) -> str:
        """Return the engine identifier string."""
        ...

    def decode(self, path: str) -> DecodedImage:
        """Open an image file and keep its pixels for later operations.

        Args:
            path: Full filesystem path of the source image.

        Returns:
            Width, height and MIME type of the decoded image.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file cannot be decoded or exceeds size limits.
        """
        ...

    def get_data(self) -> bytes:
        """Encode the current pixels in the decoded format."""
        ...

    def fill(self, color: str) -> None:
        """Flatten transparency onto an opaque background.

        Args:
            color: Hex colour, e.g. ``"#ffffff"`` or ``"fff"``.
        """
        ...

    def enable_transparency(self) -> None:
        """Make sure the alpha channel survives encoding."""
        ...
