"""Compositor: draw generated layers (and optional mask) onto the canvas.

Pipeline for one submission:
    (a) grow the canvas to the target region if needed (content preserved)
    (b) fill every layer with the even-odd rule at the per-layer opacity,
        accumulating source-over on a transparent premultiplied working
        surface
    (c) if a mask is configured, apply it with destination-in
    (d) merge the working surface onto the canvas in a single draw

Draw order is layer order. Identical inputs and seed give identical pixels.

Usage:
    from src.painterly import compositor, jitter
    rng = jitter.make_rng(7)
    compositor.paint_path(buffer, weighted_path, request.generation,
                          request.render, jitter.make_sampler("uniform", rng), rng)
"""

import logging
from typing import Iterable, Optional

import numpy as np

from src.painterly import layers as layer_gen
from src.painterly import raster
from src.painterly.jitter import JitterSampler
from src.painterly.mask import build_mask
from src.utils import geometry
from src.utils.validators import GenerationConfig, RenderConfig

logger = logging.getLogger(__name__)


def render_layers(
    layers: Iterable[np.ndarray],
    config: RenderConfig,
    rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """Render layers (and mask) onto a fresh working surface.

    Parameters
    ----------
    layers : iterable of np.ndarray
        Layer paths in draw order, each (N, 2) or (N, 3)
    config : RenderConfig
        Target size, color, per-layer opacity, optional mask
    rng : np.random.Generator, optional
        Noise source for the mask

    Returns
    -------
    np.ndarray
        Premultiplied RGBA float32 surface, shape (config.height, config.width, 4)
    """
    working = raster.new_working_surface(config.width, config.height)

    n_layers = 0
    for layer in layers:
        coverage = raster.even_odd_coverage(layer, config.width, config.height)
        raster.source_over(working, coverage, config.color, config.alpha)
        n_layers += 1

    if config.mask is not None and config.mask.enabled:
        mask = build_mask(
            config.width,
            config.height,
            config.color,
            config.mask.radius,
            config.mask.weight,
            rng,
        )
        raster.destination_in(working, mask)
    else:
        logger.debug("Mask step skipped")

    logger.debug(f"Rendered {n_layers} layers onto {config.width}x{config.height} working surface")
    return working


def paint(
    buffer: raster.RasterBuffer,
    layers: Iterable[np.ndarray],
    config: RenderConfig,
    rng: Optional[np.random.Generator] = None
) -> None:
    """Composite layers onto the canvas buffer in place.

    Parameters
    ----------
    buffer : RasterBuffer
        Persistent canvas; grown to config.width × config.height if smaller
    layers : iterable of np.ndarray
        Layer paths in draw order
    config : RenderConfig
        Render parameters
    rng : np.random.Generator, optional
        Noise source for the mask
    """
    if buffer.grow(config.width, config.height):
        logger.info(f"Canvas grown to {buffer.width}x{buffer.height}")

    working = render_layers(layers, config, rng)
    buffer.composite(working)


def paint_path(
    buffer: raster.RasterBuffer,
    path,
    generation: GenerationConfig,
    render: RenderConfig,
    sampler: JitterSampler,
    rng: Optional[np.random.Generator] = None
) -> None:
    """Generate layers from a weighted outline and composite them.

    Layers are produced lazily so only one layer path is alive at a time.
    """
    x0, y0, x1, y1 = geometry.path_bbox(path)
    logger.debug(f"Outline bounds: ({x0:.1f}, {y0:.1f})-({x1:.1f}, {y1:.1f})")

    layers = layer_gen.iter_layers(path, generation, sampler)
    paint(buffer, layers, render, rng if rng is not None else sampler.rng)
    logger.info(
        f"Painted {generation.layer_count} layers "
        f"(alpha={render.alpha}, mask={'on' if render.mask is not None and render.mask.enabled else 'off'})"
    )
