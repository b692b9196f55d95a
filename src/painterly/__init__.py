"""Procedural painterly fill: layer generation, compositing, history.

Modules:
    - jitter: uniform / Gaussian perturbation samplers (injectable RNG)
    - subdivide: recursive random midpoint subdivision of weighted paths
    - layers: shared base path + independently randomized layers
    - mask: blurred-noise soft-edge alpha mask
    - raster: canvas buffer, even-odd fill, compositing primitives
    - compositor: layers (+ mask) → working surface → canvas
    - history: linear undo/redo state machine over canvas snapshots
    - outline: outline capture helpers (thinning, closing, weights)
    - form: raw form fields → validated PaintingRequest
    - session: one canvas + history + serialized deferred submissions

Invariants:
    - One submission at a time per canvas; history push follows compositing
    - Paths are (N, 3) float64 arrays (x, y, weight)
    - Same inputs and seed produce the same pixels
"""

from src.painterly.jitter import GaussianJitter, UniformJitter, make_rng, make_sampler
from src.painterly.raster import RasterBuffer, Snapshot
from src.painterly.session import PaintingInputError, PaintSession, SubmissionPendingError

__all__ = [
    'GaussianJitter',
    'UniformJitter',
    'make_rng',
    'make_sampler',
    'RasterBuffer',
    'Snapshot',
    'PaintSession',
    'PaintingInputError',
    'SubmissionPendingError',
]
