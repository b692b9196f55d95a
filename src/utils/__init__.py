"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Config records and YAML schema validation (validators)
    - Blur kernels and finiteness checks (compute)
    - Color parsing (color)
    - Outline geometry (geometry)
    - Atomic image/YAML I/O (fs)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (painterly, scripts).

Convenience imports:
    from src.utils import fs, compute, color, validators
    from src.utils.logging_config import setup_logging, get_logger
"""

from . import color
from . import compute
from . import fs
from . import geometry
from . import logging_config
from . import validators

from .logging_config import get_logger, push_context, setup_logging

__all__ = [
    # Modules
    'color',
    'compute',
    'fs',
    'geometry',
    'logging_config',
    'validators',
    # Direct exports
    'setup_logging',
    'get_logger',
    'push_context',
]
