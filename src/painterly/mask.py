"""Soft-edge alpha mask from blurred noise.

Algorithm:
    1. Pad the target region by p = ceil(3·radius) on every side
    2. Fill the padded grid with independent uniform 16-bit noise
    3. Separable Gaussian blur (σ = radius), horizontal then vertical
    4. Crop back to width × height
    5. alpha = clip(255 + min(0, (blurred/256 − 128) · radius^1.5 · weight), 0, 255)

The blurred noise hovers around 32768, so the bracket is a small signed
deviation; only negative deviations erode alpha. Scaling by radius^1.5
compensates for the variance the blur removes, keeping erosion comparable
across radii. Composited with destination-in, the mask turns the flat fill
edge into a mottled, eroded one.

A zero radius or zero weight disables the mask entirely (see mask_enabled()).
"""

import logging
from typing import Optional, Sequence

import numpy as np

from src.painterly.jitter import make_rng
from src.utils import compute

logger = logging.getLogger(__name__)

NOISE_LEVELS = 1 << 16


def mask_enabled(filter_radius: Optional[float], filter_weight: Optional[float]) -> bool:
    """True unless the mask step should be skipped (missing or zero params)."""
    if filter_radius is None or filter_weight is None:
        return False
    return filter_radius > 0.0 and filter_weight > 0.0


def mask_alpha(blurred: np.ndarray, filter_radius: float, filter_weight: float) -> np.ndarray:
    """Map blurred 16-bit noise to uint8 alpha (clamped to [0, 255])."""
    weight = float(filter_radius) ** 1.5 * float(filter_weight)
    erosion = np.minimum(0.0, (blurred.astype(np.float64) / 256.0 - 128.0) * weight)
    return np.clip(np.rint(255.0 + erosion), 0, 255).astype(np.uint8)


def build_mask(
    width: int,
    height: int,
    color: Sequence[int],
    filter_radius: float,
    filter_weight: float,
    rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """Build an RGBA mask the size of the target region.

    Parameters
    ----------
    width, height : int
        Target region size (px)
    color : sequence of int
        RGB written into the color channels
    filter_radius : float
        Blur σ in pixels, >= 0
    filter_weight : float
        Erosion strength, >= 0
    rng : np.random.Generator, optional
        Noise source; a fresh OS-seeded generator when omitted

    Returns
    -------
    np.ndarray
        RGBA uint8, shape (height, width, 4). With a zero radius or weight
        the alpha channel is fully opaque.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Mask size must be positive, got {width}x{height}")
    if filter_radius < 0 or filter_weight < 0:
        raise ValueError(
            f"Mask parameters must be non-negative, got radius={filter_radius}, weight={filter_weight}"
        )

    mask = np.empty((height, width, 4), dtype=np.uint8)
    mask[..., :3] = np.asarray(color, dtype=np.uint8)

    if not mask_enabled(filter_radius, filter_weight):
        mask[..., 3] = 255
        return mask

    rng = rng if rng is not None else make_rng()
    pad = compute.blur_padding(filter_radius)
    noise = rng.integers(0, NOISE_LEVELS, size=(height + 2 * pad, width + 2 * pad))

    blurred = compute.separable_blur(noise, filter_radius)
    blurred = blurred[pad:pad + height, pad:pad + width]

    mask[..., 3] = mask_alpha(blurred, filter_radius, filter_weight)
    logger.debug(
        f"Built {width}x{height} mask (radius={filter_radius}, weight={filter_weight}, "
        f"pad={pad}, mean alpha={mask[..., 3].mean():.1f})"
    )
    return mask
