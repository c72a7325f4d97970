"""Hex colour parsing for background fills."""

from __future__ import annotations

import re

_HEX_COLOR = re.compile(r"#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})")


def parse_hex_color(value: str) -> tuple[int, int, int]:
    """Parse a hex colour such as ``#fff`` or ``336699`` into an RGB triple.

    Raises:
        ValueError: If the value is not 3 or 6 hex digits (optionally prefixed with ``#``).
    """
    match = _HEX_COLOR.fullmatch(value.strip())
    if match is None:
        raise ValueError(f"Invalid hex colour: {value!r}")

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
