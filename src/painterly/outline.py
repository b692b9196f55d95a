"""Outline capture helpers: point thinning, gap closing, weight assignment.

The pointer-driven capture itself belongs to the host; these helpers give it
the same behavior as the drawing surface:
    - a new point is kept only when it is farther than min_distance from the
      previous kept point
    - on release, outlines of fewer than 2 points are discarded
    - the gap between the last and first point is closed with evenly spaced
      points no further apart than min_distance
    - before generation every vertex gets a random weight in [0, 1)
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from src.painterly.jitter import make_rng
from src.utils import geometry

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

DEFAULT_MIN_DISTANCE = 16.0


def close_path(points: Sequence[Sequence[float]], min_distance: float) -> np.ndarray:
    """Append interpolated points along the closing segment (last → first).

    Parameters
    ----------
    points : sequence of (x, y)
        Captured outline, at least 1 point
    min_distance : float
        Target spacing; floor(gap / min_distance) - 1 points are inserted

    Returns
    -------
    np.ndarray
        Closed outline, shape (N + k, 2); the first point is not repeated
    """
    if min_distance <= 0:
        raise ValueError(f"min_distance must be positive, got {min_distance}")
    pts = geometry.as_path(points)
    if len(pts) == 0:
        return pts

    gap = geometry.distance(pts[-1], pts[0])
    n = int(math.floor(gap / min_distance))
    closing = geometry.interpolate_segment(pts[-1], pts[0], n)
    return np.concatenate([pts, closing], axis=0)


def randomize_weights(
    points: Sequence[Sequence[float]],
    rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """Attach a uniform [0, 1) weight to every vertex → shape (N, 3)."""
    pts = geometry.as_path(points)
    rng = rng if rng is not None else make_rng()
    weights = rng.random(len(pts))
    return np.column_stack([pts, weights]) if len(pts) else np.zeros((0, 3))


def scale_path(points: Sequence[Sequence[float]], sx: float, sy: float) -> np.ndarray:
    """Rescale outline coordinates, e.g. after the canvas was resized."""
    return geometry.scale_points(geometry.as_path(points), sx, sy)


class OutlineRecorder:
    """Accumulates pointer positions into an outline.

    Attributes
    ----------
    min_distance : float
        Minimum spacing between kept points (px)
    points : list of (x, y)
        Current outline (closed after finish())
    active : bool
        True between begin() and finish()
    """

    def __init__(self, min_distance: float = DEFAULT_MIN_DISTANCE):
        if min_distance <= 0:
            raise ValueError(f"min_distance must be positive, got {min_distance}")
        self.min_distance = float(min_distance)
        self.points: List[Point] = []
        self.active = False

    def begin(self, x: float, y: float) -> None:
        """Pointer down: start a new outline at (x, y)."""
        self.points = [(float(x), float(y))]
        self.active = True

    def extend(self, x: float, y: float) -> bool:
        """Pointer move: keep (x, y) if far enough from the last point."""
        if not self.active:
            return False
        if self.points and geometry.distance((x, y), self.points[-1]) <= self.min_distance:
            return False
        self.points.append((float(x), float(y)))
        return True

    def finish(self) -> List[Point]:
        """Pointer up: discard short outlines, otherwise close the gap."""
        self.active = False
        if len(self.points) < 2:
            logger.debug(f"Outline discarded ({len(self.points)} point)")
            self.points = []
            return []
        closed = close_path(self.points, self.min_distance)
        self.points = [(float(x), float(y)) for x, y in closed]
        logger.debug(f"Outline closed with {len(self.points)} points")
        return list(self.points)

    def clear(self) -> None:
        self.points = []
        self.active = False

    def __len__(self) -> int:
        return len(self.points)
