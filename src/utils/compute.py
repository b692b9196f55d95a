"""Numerics: blur kernels, separable filtering and finiteness checks.

Core utilities:
    - gaussian_kernel_1d(): normalized 1-D Gaussian taps (torch, FP32)
    - separable_blur(): two 1-D passes (horizontal, then vertical) via conv1d
    - blur_padding(): padding that keeps blur edge effects out of a crop
    - finite_rows(): mask of path vertices with finite coordinates

Invariants:
    - Blur runs in FP32 on CPU; inputs/outputs are numpy arrays
    - Kernel half-width is ceil(3σ), so padding by blur_padding(σ) on each side
      makes the cropped interior identical to an infinite-plane blur
"""

import math

import numpy as np
import torch
import torch.nn.functional as F


def blur_padding(radius: float) -> int:
    """Padding (px per side) that fully contains a blur of this radius."""
    return int(math.ceil(3.0 * max(float(radius), 0.0)))


def gaussian_kernel_1d(sigma: float) -> torch.Tensor:
    """Build a normalized 1-D Gaussian kernel.

    Parameters
    ----------
    sigma : float
        Standard deviation in pixels; sigma <= 0 gives the identity kernel [1]

    Returns
    -------
    torch.Tensor
        Kernel of length 2*ceil(3σ)+1, FP32, sums to 1
    """
    half = blur_padding(sigma)
    if half == 0:
        return torch.ones(1, dtype=torch.float32)

    x = torch.arange(-half, half + 1, dtype=torch.float32)
    kernel = torch.exp(-0.5 * (x / float(sigma)) ** 2)
    return kernel / kernel.sum()


def separable_blur(img: np.ndarray, sigma: float) -> np.ndarray:
    """Blur a 2-D array with a separable Gaussian (horizontal then vertical).

    Parameters
    ----------
    img : np.ndarray
        Input, shape (H, W), any real dtype
    sigma : float
        Gaussian standard deviation in pixels

    Returns
    -------
    np.ndarray
        Blurred array, shape (H, W), float32

    Notes
    -----
    Borders are zero-padded; callers that care pad by blur_padding(sigma)
    first and crop afterwards.
    """
    if img.ndim != 2:
        raise ValueError(f"separable_blur expects a 2-D array, got shape {img.shape}")

    kernel = gaussian_kernel_1d(sigma)
    half = kernel.numel() // 2
    data = torch.from_numpy(np.ascontiguousarray(img, dtype=np.float32))
    if half == 0:
        return data.numpy().copy()

    h, w = data.shape
    weight = kernel.view(1, 1, -1)

    # Horizontal pass: every row is a batch entry
    rows = F.conv1d(data.view(h, 1, w), weight, padding=half).view(h, w)

    # Vertical pass: every column is a batch entry
    cols = rows.t().contiguous().view(w, 1, h)
    out = F.conv1d(cols, weight, padding=half).view(w, h).t().contiguous()
    return out.numpy()


def finite_rows(points: np.ndarray) -> np.ndarray:
    """Boolean mask (N,) of rows whose first two columns are finite."""
    points = np.asarray(points)
    if points.size == 0:
        return np.zeros(len(points), dtype=bool)
    return np.isfinite(points[:, :2]).all(axis=1)
