"""Color parsing and conversion for paint colors.

Provides:
    - Hex color strings ("#ff0000", "#f00") ↔ RGB uint8 triples
    - RGB uint8 → float [0,1] for the premultiplied working surface

Colors arrive from the form layer as CSS-style hex strings; everything below
the form boundary works with (r, g, b) integer triples in [0, 255].
"""

import re
from typing import Sequence, Tuple

import numpy as np

RGB = Tuple[int, int, int]

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def is_hex_color(value: str) -> bool:
    """True if value is a 3- or 6-digit hex color (leading '#' optional)."""
    return bool(value) and _HEX_RE.match(value.strip()) is not None


def parse_hex_color(value: str) -> RGB:
    """Parse "#rrggbb" or "#rgb" into an (r, g, b) tuple.

    Raises
    ------
    ValueError
        If value is not a hex color
    """
    match = _HEX_RE.match(value.strip()) if value else None
    if match is None:
        raise ValueError(f"Not a hex color: {value!r}")

    digits = match.group(1)
    if len(digits) == 3:
        digits = ''.join(c * 2 for c in digits)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Format an (r, g, b) triple as lowercase "#rrggbb"."""
    r, g, b = (int(np.clip(c, 0, 255)) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def rgb_to_unit(rgb: Sequence[int]) -> np.ndarray:
    """RGB uint8 triple → float32 array in [0, 1], shape (3,)."""
    return np.asarray(rgb, dtype=np.float32) / 255.0
