"""Geometric operations on outlines and paths.

All functions operate on numpy arrays of shape (N, 2) or (N, 3); the third
column, when present, is a per-vertex weight and is carried through
untouched.

Provides:
    - distance(): Euclidean distance between two points
    - as_path(): validate/convert a point sequence to an (N, C) float array
    - interpolate_segment(): evenly spaced interior points on a segment
    - path_bbox(): axis-aligned bounds of the finite vertices
    - scale_points(): anisotropic rescale of xy coordinates
"""

import math
from typing import Sequence, Tuple

import numpy as np


def distance(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Euclidean distance between the xy parts of two points."""
    return math.hypot(float(p1[0]) - float(p2[0]), float(p1[1]) - float(p2[1]))


def as_path(points, columns: int = 2) -> np.ndarray:
    """Convert a point sequence to a float64 array of shape (N, columns).

    Raises
    ------
    ValueError
        If the input cannot be shaped as (N, columns)
    """
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        return np.zeros((0, columns), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != columns:
        raise ValueError(f"Expected points of shape (N, {columns}), got {arr.shape}")
    return arr


def interpolate_segment(
    start: Sequence[float],
    end: Sequence[float],
    n: int
) -> np.ndarray:
    """Points start + (end - start) * i / n for i in 1..n-1.

    Parameters
    ----------
    start, end : sequence of float
        Segment endpoints (xy)
    n : int
        Number of equal sub-segments; n <= 1 yields no points

    Returns
    -------
    np.ndarray
        Interior points, shape (max(n-1, 0), 2)
    """
    if n <= 1:
        return np.zeros((0, 2), dtype=np.float64)
    x0, y0 = float(start[0]), float(start[1])
    x1, y1 = float(end[0]), float(end[1])
    t = np.arange(1, n, dtype=np.float64) / n
    return np.stack([x0 + (x1 - x0) * t, y0 + (y1 - y0) * t], axis=1)


def path_bbox(points: np.ndarray) -> Tuple[float, float, float, float]:
    """Bounding box (x_min, y_min, x_max, y_max) of the finite vertices.

    Returns all-NaN bounds when no vertex is finite.
    """
    pts = np.asarray(points, dtype=np.float64)[:, :2]
    pts = pts[np.isfinite(pts).all(axis=1)]
    if len(pts) == 0:
        nan = float('nan')
        return (nan, nan, nan, nan)
    return (
        float(pts[:, 0].min()),
        float(pts[:, 1].min()),
        float(pts[:, 0].max()),
        float(pts[:, 1].max()),
    )


def scale_points(points: np.ndarray, sx: float, sy: float) -> np.ndarray:
    """Return a copy with x scaled by sx and y by sy (extra columns kept)."""
    out = np.array(points, dtype=np.float64, copy=True)
    if out.size:
        out[:, 0] *= sx
        out[:, 1] *= sy
    return out
