"""Painterly Fill: procedural painterly region filling.

A traced outline is perturbed by recursive random subdivision into many
semi-transparent layers, optionally eroded by a blurred-noise alpha mask, and
composited onto a persistent canvas with linear undo/redo.

Architecture layers (strict one-way dependency):
    scripts/ → src/painterly/ → src/utils/

Key invariants:
    - Paths are (N, 3) float arrays: x, y, per-vertex weight
    - Canvas buffers are RGBA uint8, (H, W, 4), white background by default
    - Layers composite on a premultiplied FP32 working surface, merged once
    - YAML-only configs
"""

__version__ = "0.3.0"
