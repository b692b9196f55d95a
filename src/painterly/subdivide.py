"""Recursive random midpoint subdivision of closed weighted paths.

One pass walks every cyclic pair (p1 = previous vertex, p2 = current vertex),
pairing the last vertex with the first, and emits

    m  = (jitter(mid.x, base_radius · rm), jitter(mid.y, base_radius · rm), rm)
    p2 (unchanged)

with rm = (w1 + w2) · temperature / 2. The output therefore starts with the
midpoint of (last, first) and its length is exactly twice the input length.

Invariants:
    - iterations = 0 returns the input path unchanged (the same object for
      float64 array input)
    - len(output) = len(input) · 2**iterations
    - original vertices survive at odd indices of every pass

Numerics:
    temperature > 1 grows weights geometrically and, over enough passes,
    overflows to inf/NaN. This is left unclamped; the rasterizer ignores
    non-finite vertices, and a warning is logged here so the degenerate
    output is explainable.
"""

import logging

import numpy as np

from src.painterly.jitter import JitterSampler
from src.utils import compute

logger = logging.getLogger(__name__)


def as_weighted_path(path) -> np.ndarray:
    """Convert (N, 3) points to a float64 array, validating the shape.

    Raises
    ------
    ValueError
        If the path is not (N, 3)
    """
    arr = np.asarray(path, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"Weighted path must have shape (N, 3), got {arr.shape}")
    return arr


def subdivide_once(
    path: np.ndarray,
    base_radius: float,
    temperature: float,
    sampler: JitterSampler
) -> np.ndarray:
    """Run a single subdivision pass.

    Parameters
    ----------
    path : np.ndarray
        Weighted path, shape (N, 3), N >= 2
    base_radius : float
        Weight → pixel displacement scale
    temperature : float
        Weight decay (< 1) or growth (> 1) factor per pass
    sampler : JitterSampler
        Perturbation policy

    Returns
    -------
    np.ndarray
        Path of shape (2N, 3)
    """
    prev = np.roll(path, 1, axis=0)

    with np.errstate(over='ignore', invalid='ignore'):
        rm = (prev[:, 2] + path[:, 2]) * temperature / 2
        radius = base_radius * rm
        mx = sampler.sample((prev[:, 0] + path[:, 0]) / 2, radius)
        my = sampler.sample((prev[:, 1] + path[:, 1]) / 2, radius)

    out = np.empty((2 * len(path), 3), dtype=np.float64)
    out[0::2, 0] = mx
    out[0::2, 1] = my
    out[0::2, 2] = rm
    out[1::2] = path
    return out


def subdivide(
    path,
    base_radius: float,
    temperature: float,
    iterations: int,
    sampler: JitterSampler
) -> np.ndarray:
    """Apply `iterations` subdivision passes to a closed weighted path.

    Parameters
    ----------
    path : array-like
        Weighted path, shape (N, 3) with columns (x, y, weight), N >= 2
    base_radius : float
        Weight → pixel displacement scale
    temperature : float
        Weight decay/growth factor per pass
    iterations : int
        Number of passes, >= 0
    sampler : JitterSampler
        Perturbation policy (owns the random source)

    Returns
    -------
    np.ndarray
        Path of shape (N · 2**iterations, 3). For iterations == 0 the input is
        returned unchanged, as the same object when it is already a float64 array.

    Raises
    ------
    ValueError
        If the path has fewer than 2 vertices or iterations is negative
    """
    if iterations < 0:
        raise ValueError(f"iterations must be >= 0, got {iterations}")

    path = as_weighted_path(path)
    if len(path) < 2:
        raise ValueError(f"Cannot subdivide a path with {len(path)} vertices (need >= 2)")

    for _ in range(iterations):
        path = subdivide_once(path, base_radius, temperature, sampler)

    if iterations and not np.isfinite(path).all():
        n_bad = int((~compute.finite_rows(path)).sum())
        logger.warning(
            f"Subdivision produced {n_bad} non-finite vertices "
            f"(temperature={temperature}, iterations={iterations}); they will not be drawn"
        )

    return path
