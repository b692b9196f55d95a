"""Layer set generation: many randomized variants of one base silhouette.

The input outline is first subdivided `pre_iterations` times into a shared
base path (the rough silhouette). Every layer then subdivides that base path
a further `iterations` times with fresh randomness, so layers agree on the
silhouette and differ in detail. Stacked at low opacity they read as
overlapping hand-painted strokes.

Layers share no mutable state; yield order is draw order.
"""

import logging
from typing import Iterator, List

import numpy as np

from src.painterly.jitter import JitterSampler
from src.painterly.subdivide import subdivide
from src.utils.validators import GenerationConfig

logger = logging.getLogger(__name__)


def base_path(path, config: GenerationConfig, sampler: JitterSampler) -> np.ndarray:
    """Shared silhouette: the outline subdivided `pre_iterations` times."""
    return subdivide(
        path,
        config.base_radius,
        config.temperature,
        config.pre_iterations,
        sampler,
    )


def iter_layers(
    path,
    config: GenerationConfig,
    sampler: JitterSampler
) -> Iterator[np.ndarray]:
    """Lazily yield `layer_count` layer paths in draw order.

    The base path is computed before the first layer is yielded.
    """
    base = base_path(path, config, sampler)
    for _ in range(config.layer_count):
        yield subdivide(
            base,
            config.base_radius,
            config.temperature,
            config.iterations,
            sampler,
        )


def generate_layers(
    path,
    config: GenerationConfig,
    sampler: JitterSampler
) -> List[np.ndarray]:
    """Generate all layers eagerly.

    Parameters
    ----------
    path : array-like
        Weighted outline, shape (N, 3), N >= 2
    config : GenerationConfig
        Subdivision parameters and layer count
    sampler : JitterSampler
        Perturbation policy

    Returns
    -------
    list of np.ndarray
        Exactly config.layer_count paths, each of shape
        (N · 2**(pre_iterations + iterations), 3)
    """
    layers = list(iter_layers(path, config, sampler))
    logger.debug(
        f"Generated {len(layers)} layers of {len(layers[0]) if layers else 0} vertices "
        f"(pre_iterations={config.pre_iterations}, iterations={config.iterations})"
    )
    return layers
