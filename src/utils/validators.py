"""Typed config records and YAML schema validation (pydantic).

Provides:
    - Per-submission records: GenerationConfig, MaskConfig, RenderConfig,
      PaintingRequest (frozen; immutable for one generation pass)
    - Application config schema (painting.v1.yaml): canvas, capture,
      form defaults, palette, randomness, logging

All loaders fail fast with actionable messages (offending file and pydantic's
field-level error report).

Units:
    - Geometry: canvas pixels
    - Color: RGB uint8 triples (hex strings in YAML)
    - Opacity: [0.0, 1.0]

Usage:
    from src.utils import validators

    cfg = validators.load_painting_config("configs/painting_v1.yaml")
    gen = validators.GenerationConfig(base_radius=32, temperature=0.7,
                                      iterations=5, pre_iterations=2,
                                      layer_count=128)
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import color as color_utils


# ============================================================================
# PER-SUBMISSION RECORDS
# ============================================================================

class GenerationConfig(BaseModel):
    """Parameters of the layer-generation pass."""
    model_config = ConfigDict(frozen=True)

    base_radius: float = Field(..., ge=0.0, description="Weight → pixel displacement scale")
    temperature: float = Field(..., ge=0.0, le=1.0, description="Per-pass weight decay factor")
    iterations: int = Field(..., ge=0, description="Per-layer subdivision passes")
    pre_iterations: int = Field(..., ge=0, description="Shared base-path subdivision passes")
    layer_count: int = Field(..., gt=0, description="Number of layers to generate")


class MaskConfig(BaseModel):
    """Noise-blur mask parameters."""
    model_config = ConfigDict(frozen=True)

    radius: float = Field(..., ge=0.0, description="Blur radius (σ) in pixels")
    weight: float = Field(..., ge=0.0, description="Erosion strength")

    @property
    def enabled(self) -> bool:
        """Zero radius or zero weight means the mask step is skipped."""
        return self.radius > 0.0 and self.weight > 0.0


class RenderConfig(BaseModel):
    """Parameters of the compositing pass."""
    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0, description="Target region width (px)")
    height: int = Field(..., gt=0, description="Target region height (px)")
    color: Tuple[int, int, int] = Field(..., description="Fill color, RGB uint8")
    alpha: float = Field(..., ge=0.0, le=1.0, description="Per-layer opacity")
    mask: Optional[MaskConfig] = Field(None, description="Optional soft-edge mask")

    @field_validator('color', mode='before')
    @classmethod
    def parse_color(cls, v):
        if isinstance(v, str):
            return color_utils.parse_hex_color(v)
        return v

    @field_validator('color')
    @classmethod
    def validate_color(cls, v: Tuple[int, int, int]) -> Tuple[int, int, int]:
        for c in v:
            if not 0 <= c <= 255:
                raise ValueError(f"Color components must be in [0, 255], got {v}")
        return v


class PaintingRequest(BaseModel):
    """One validated submission: what to generate and how to draw it."""
    model_config = ConfigDict(frozen=True)

    generation: GenerationConfig
    render: RenderConfig


# ============================================================================
# APPLICATION CONFIG SCHEMA (painting.v1)
# ============================================================================

class CanvasConfig(BaseModel):
    """Initial canvas size and background."""
    width: int = Field(320, gt=0, description="Canvas width (px)")
    height: int = Field(320, gt=0, description="Canvas height (px)")
    background: str = Field("#ffffff", description="Background color (hex)")

    @field_validator('background')
    @classmethod
    def validate_background(cls, v: str) -> str:
        if not color_utils.is_hex_color(v):
            raise ValueError(f"background must be a hex color, got '{v}'")
        return v


class CaptureConfig(BaseModel):
    """Outline capture settings."""
    min_distance: float = Field(16.0, gt=0.0, description="Min spacing between captured points (px)")


class RandomnessConfig(BaseModel):
    """Jitter policy and seeding."""
    policy: str = Field("uniform", description="Jitter distribution: uniform | gaussian")
    seed: Optional[int] = Field(None, description="Seed; null uses OS entropy")

    @field_validator('policy')
    @classmethod
    def validate_policy(cls, v: str) -> str:
        allowed = {"uniform", "gaussian"}
        if v not in allowed:
            raise ValueError(f"policy must be one of {sorted(allowed)}, got '{v}'")
        return v


class LoggingConfig(BaseModel):
    """Logging settings forwarded to setup_logging()."""
    level: str = Field("INFO", description="Root log level")
    file: Optional[str] = Field(None, description="Optional log file path")
    json_format: bool = Field(False, alias="json", description="Emit JSON lines")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"level must be one of {sorted(allowed)}, got '{v}'")
        return v.upper()


class PaintingConfigV1(BaseModel):
    """Application config (painting.v1.yaml schema)."""
    schema_version: str = Field("painting.v1", alias="schema", description="Schema version")
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    form_defaults: Dict[str, str] = Field(default_factory=dict, description="Raw form field defaults")
    palette: List[str] = Field(default_factory=list, description="Selectable colors (hex)")
    randomness: RandomnessConfig = Field(default_factory=RandomnessConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "painting.v1":
            raise ValueError(f"Expected schema 'painting.v1', got '{v}'")
        return v

    @field_validator('form_defaults', mode='before')
    @classmethod
    def stringify_defaults(cls, v):
        # Form fields are raw strings, YAML gives numbers
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items()}
        return v

    @field_validator('palette')
    @classmethod
    def validate_palette(cls, v: List[str]) -> List[str]:
        for c in v:
            if not color_utils.is_hex_color(c):
                raise ValueError(f"palette entries must be hex colors, got '{c}'")
        return v

    @property
    def background_rgb(self) -> Tuple[int, int, int]:
        return color_utils.parse_hex_color(self.canvas.background)


# ============================================================================
# PUBLIC API
# ============================================================================

def load_painting_config(path: Union[str, Path]) -> PaintingConfigV1:
    """Load and validate the application config from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to painting_v1.yaml

    Returns
    -------
    PaintingConfigV1
        Validated configuration

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Painting config not found: {path}")

    data = fs.load_yaml(path) or {}
    try:
        return PaintingConfigV1(**data)
    except Exception as e:
        raise ValueError(f"Painting config validation failed at {path}: {e}") from e


def load_outline(path: Union[str, Path]) -> List[Tuple[float, float]]:
    """Load a captured outline (YAML list of [x, y] pairs, or {points: [...]}).

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If the file isn't a list of 2-element numeric points
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Outline file not found: {path}")

    data = fs.load_yaml(path)
    if isinstance(data, dict):
        data = data.get('points')
    if not isinstance(data, list):
        raise ValueError(f"Outline at {path} must be a list of [x, y] points")

    points = []
    for i, pt in enumerate(data):
        if not isinstance(pt, (list, tuple)) or len(pt) != 2:
            raise ValueError(f"Outline point {i} at {path} must have 2 coordinates, got {pt!r}")
        try:
            points.append((float(pt[0]), float(pt[1])))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Outline point {i} at {path} is not numeric: {pt!r}") from e
    return points
