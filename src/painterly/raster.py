"""Raster primitives: persistent canvas buffer, even-odd fill, compositing.

Two pixel representations are used:
    - RasterBuffer.pixels: persistent canvas, RGBA uint8, shape (H, W, 4)
    - working surface: premultiplied RGBA float32 in [0, 1], shape (H, W, 4),
      transparent black when created

Primitives:
    - even_odd_coverage(): scanline polygon fill with the even-odd rule
    - source_over(): draw a flat color through a coverage mask at an opacity
    - destination_in(): keep the working surface only where a mask is opaque
    - RasterBuffer.composite(): merge a working surface onto the canvas
    - RasterBuffer.resize()/grow(): content-preserving size changes
    - RasterBuffer.snapshot()/restore(): full pixel copies for history

Sampling convention:
    Pixel (col, row) is inside a polygon when its center (col + 0.5,
    row + 0.5) is; crossings are half-open so shared edges never double-fill.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

import cv2
import numpy as np

from src.utils import color as color_utils
from src.utils import compute

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Immutable copy of a buffer's pixels.

    Attributes
    ----------
    pixels : np.ndarray
        RGBA uint8, shape (H, W, 4), read-only
    """
    pixels: np.ndarray

    @classmethod
    def capture(cls, pixels: np.ndarray) -> "Snapshot":
        data = np.array(pixels, dtype=np.uint8, copy=True)
        data.flags.writeable = False
        return cls(pixels=data)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]


class RasterBuffer:
    """Resizable RGBA canvas with an opaque background.

    Attributes
    ----------
    pixels : np.ndarray
        RGBA uint8, shape (height, width, 4); mutated in place
    background : tuple of int
        Background RGB used by clear() and for newly exposed area
    """

    def __init__(self, width: int, height: int, background: Sequence[int] = WHITE):
        _check_size(width, height)
        self.background: Tuple[int, int, int] = tuple(int(c) for c in background)
        self.pixels = np.empty((int(height), int(width), 4), dtype=np.uint8)
        self.clear()

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def _fill_value(self) -> Tuple[int, int, int, int]:
        return (*self.background, 255)

    def clear(self) -> None:
        """Fill the whole buffer with the opaque background."""
        self.pixels[...] = self._fill_value()

    def resize(self, width: int, height: int) -> None:
        """Resize to width × height keeping content anchored at the origin.

        Area beyond the old bounds is filled with the background; area
        beyond the new bounds is cropped.
        """
        _check_size(width, height)
        if (width, height) == self.size:
            return

        kept = self.pixels[:min(height, self.height), :min(width, self.width)]
        pad_bottom = height - kept.shape[0]
        pad_right = width - kept.shape[1]
        self.pixels = cv2.copyMakeBorder(
            np.ascontiguousarray(kept),
            0, pad_bottom, 0, pad_right,
            cv2.BORDER_CONSTANT,
            value=self._fill_value(),
        )
        logger.debug(f"Buffer resized to {width}x{height}")

    def grow(self, width: int, height: int) -> bool:
        """Enlarge (never shrink) so that width × height fits; True if resized."""
        new_w, new_h = max(self.width, int(width)), max(self.height, int(height))
        if (new_w, new_h) == self.size:
            return False
        self.resize(new_w, new_h)
        return True

    def snapshot(self) -> Snapshot:
        return Snapshot.capture(self.pixels)

    def restore(self, snapshot: Snapshot) -> None:
        """Write snapshot pixels at the origin, clipped to the buffer."""
        h = min(self.height, snapshot.height)
        w = min(self.width, snapshot.width)
        self.pixels[:h, :w] = snapshot.pixels[:h, :w]

    def composite(self, working: np.ndarray) -> None:
        """Source-over merge of a premultiplied float surface at the origin.

        Parameters
        ----------
        working : np.ndarray
            Premultiplied RGBA float32 in [0, 1], shape (h, w, 4); clipped
            to the buffer when larger
        """
        h = min(self.height, working.shape[0])
        w = min(self.width, working.shape[1])
        src = working[:h, :w]
        dst = self.pixels[:h, :w].astype(np.float32)

        inv = 1.0 - src[..., 3:4]
        out = src * 255.0 + dst * inv
        self.pixels[:h, :w] = np.clip(np.rint(out), 0, 255).astype(np.uint8)

    def __repr__(self) -> str:
        return f"RasterBuffer({self.width}x{self.height}, background={color_utils.rgb_to_hex(self.background)})"


def _check_size(width: int, height: int) -> None:
    if int(width) <= 0 or int(height) <= 0:
        raise ValueError(f"Buffer size must be positive, got {width}x{height}")


def new_working_surface(width: int, height: int) -> np.ndarray:
    """Transparent premultiplied RGBA float32 surface, shape (height, width, 4)."""
    _check_size(width, height)
    return np.zeros((int(height), int(width), 4), dtype=np.float32)


def even_odd_coverage(points, width: int, height: int) -> np.ndarray:
    """Rasterize a closed polygon with the even-odd fill rule.

    Parameters
    ----------
    points : array-like
        Polygon vertices, shape (N, 2) or (N, 3) (extra columns ignored);
        the polygon closes from the last vertex back to the first
    width, height : int
        Raster size

    Returns
    -------
    np.ndarray
        Boolean coverage, shape (height, width)

    Notes
    -----
    Vertices with non-finite coordinates are dropped before filling. Every
    scanline is crossed by an even number of edges, so sorted crossings pair
    up into fill spans; self-intersecting loops become holes.
    """
    coverage = np.zeros((height, width), dtype=bool)

    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or len(pts) == 0:
        return coverage
    pts = pts[:, :2]
    pts = pts[compute.finite_rows(pts)]
    if len(pts) < 3:
        return coverage

    x0, y0 = pts[:, 0], pts[:, 1]
    x1, y1 = np.roll(x0, -1), np.roll(y0, -1)

    # Scanline rows whose center lies in [y_lo, y_hi) for each edge
    with np.errstate(over='ignore', invalid='ignore'):
        row_start = np.clip(np.ceil(np.minimum(y0, y1) - 0.5), 0, height).astype(np.int64)
        row_end = np.clip(np.ceil(np.maximum(y0, y1) - 0.5), 0, height).astype(np.int64)

    counts = row_end - row_start
    total = int(counts.sum())
    if total == 0:
        return coverage

    edge = np.repeat(np.arange(len(pts)), counts)
    first = np.cumsum(counts) - counts
    rows = np.repeat(row_start, counts) + (np.arange(total) - np.repeat(first, counts))

    with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
        yc = rows + 0.5
        xs = x0[edge] + (yc - y0[edge]) * (x1[edge] - x0[edge]) / (y1[edge] - y0[edge])
    xs = np.clip(np.nan_to_num(xs, nan=0.0, posinf=width + 1.0, neginf=-1.0), -1.0, width + 1.0)

    order = np.lexsort((xs, rows))
    rows, xs = rows[order], xs[order]

    span_rows = rows[0::2]
    col_start = np.clip(np.ceil(xs[0::2] - 0.5), 0, width).astype(np.int64)
    col_end = np.clip(np.ceil(xs[1::2] - 0.5), 0, width).astype(np.int64)

    diff = np.zeros((height, width + 1), dtype=np.int32)
    np.add.at(diff, (span_rows, col_start), 1)
    np.add.at(diff, (span_rows, col_end), -1)
    coverage[...] = np.cumsum(diff, axis=1)[:, :width] > 0
    return coverage


def source_over(
    working: np.ndarray,
    coverage: np.ndarray,
    rgb: Sequence[int],
    alpha: float
) -> np.ndarray:
    """Draw a flat color through a coverage mask onto a working surface.

    Parameters
    ----------
    working : np.ndarray
        Premultiplied RGBA float32 surface, modified in place
    coverage : np.ndarray
        Boolean or [0, 1] float coverage, shape (H, W)
    rgb : sequence of int
        Fill color (uint8 triple)
    alpha : float
        Opacity in [0, 1]

    Returns
    -------
    np.ndarray
        The working surface (same object)
    """
    src_a = coverage.astype(np.float32) * np.float32(alpha)
    if not src_a.any():
        return working

    src_a = src_a[..., np.newaxis]
    inv = 1.0 - src_a
    working[..., :3] = color_utils.rgb_to_unit(rgb) * src_a + working[..., :3] * inv
    working[..., 3:4] = src_a + working[..., 3:4] * inv
    return working


def destination_in(working: np.ndarray, mask_rgba: np.ndarray) -> np.ndarray:
    """Keep the working surface only where the mask is opaque.

    Parameters
    ----------
    working : np.ndarray
        Premultiplied RGBA float32 surface, modified in place
    mask_rgba : np.ndarray
        RGBA uint8 mask, same height/width; only its alpha is used

    Returns
    -------
    np.ndarray
        The working surface (same object)
    """
    if mask_rgba.shape[:2] != working.shape[:2]:
        raise ValueError(
            f"Mask shape {mask_rgba.shape[:2]} != working surface shape {working.shape[:2]}"
        )
    working *= (mask_rgba[..., 3:4].astype(np.float32) / 255.0)
    return working
