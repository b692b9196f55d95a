"""Form parsing: raw field strings → validated PaintingRequest or messages.

Field names match the painting form:
    layers, alpha, iterations, pre-iterations, base-radius, temperature,
    filter-radius, filter-weight (optional), color

Numbers are parsed leniently (surrounding whitespace ignored); empty or
unparseable values count as missing. Every problem is reported at once so
the user can fix the whole form in one go. Generation must not start unless
FormResult.ok is True.
"""

import math
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from src.utils import color as color_utils
from src.utils.validators import GenerationConfig, MaskConfig, PaintingRequest, RenderConfig

MSG_AREA = "Please select an area."
MSG_COLOR_MISSING = "Please select a color."
MSG_COLOR_FORMAT = "Color must be a hex value like #ff0000."
MSG_LAYERS = "Layers must be a valid positive integer."
MSG_ALPHA = "Layer opacity must be a valid number between 0 and 1."
MSG_ITERATIONS = "Iterations must be a valid non-negative integer."
MSG_PRE_ITERATIONS = "Preprocess iterations must be a valid non-negative integer."
MSG_BASE_RADIUS = "Base radius must be a valid non-negative number."
MSG_TEMPERATURE = "Temperature must be a valid number between 0 and 1."
MSG_FILTER_RADIUS = "Filter radius must be a valid non-negative number."
MSG_FILTER_WEIGHT = "Filter weight must be a valid non-negative number."


@dataclass
class FormResult:
    """Either a validated request or a list of human-readable errors."""
    request: Optional[PaintingRequest] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.request is not None and not self.errors


def parse_number(raw: Optional[str]) -> Optional[float]:
    """Parse a finite float; None for missing, empty or invalid input."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _is_int(value: Optional[float]) -> bool:
    return value is not None and float(value).is_integer()


def parse_form(
    fields: Mapping[str, Optional[str]],
    *,
    path_length: int,
    width: int,
    height: int
) -> FormResult:
    """Validate raw form fields into a PaintingRequest.

    Parameters
    ----------
    fields : mapping of str → str
        Raw form values keyed by field name
    path_length : int
        Number of captured outline points
    width, height : int
        Target region size (current canvas size)

    Returns
    -------
    FormResult
        request set when valid, otherwise errors in form order
    """
    errors: List[str] = []

    layers = parse_number(fields.get("layers"))
    alpha = parse_number(fields.get("alpha"))
    iterations = parse_number(fields.get("iterations"))
    pre_iterations = parse_number(fields.get("pre-iterations"))
    base_radius = parse_number(fields.get("base-radius"))
    temperature = parse_number(fields.get("temperature"))
    raw_color = (fields.get("color") or "").strip()

    if path_length < 2:
        errors.append(MSG_AREA)
    if not raw_color:
        errors.append(MSG_COLOR_MISSING)
    elif not color_utils.is_hex_color(raw_color):
        errors.append(MSG_COLOR_FORMAT)
    if not _is_int(layers) or layers <= 0:
        errors.append(MSG_LAYERS)
    if alpha is None or not 0.0 <= alpha <= 1.0:
        errors.append(MSG_ALPHA)
    if not _is_int(iterations) or iterations < 0:
        errors.append(MSG_ITERATIONS)
    if not _is_int(pre_iterations) or pre_iterations < 0:
        errors.append(MSG_PRE_ITERATIONS)
    if base_radius is None or base_radius < 0:
        errors.append(MSG_BASE_RADIUS)
    if temperature is None or not 0.0 <= temperature <= 1.0:
        errors.append(MSG_TEMPERATURE)

    # Filter fields are optional; blank means "no mask"
    mask = None
    raw_radius = fields.get("filter-radius")
    raw_weight = fields.get("filter-weight")
    filter_radius = parse_number(raw_radius)
    filter_weight = parse_number(raw_weight)
    if raw_radius is not None and str(raw_radius).strip() and (filter_radius is None or filter_radius < 0):
        errors.append(MSG_FILTER_RADIUS)
    if raw_weight is not None and str(raw_weight).strip() and (filter_weight is None or filter_weight < 0):
        errors.append(MSG_FILTER_WEIGHT)

    if errors:
        return FormResult(errors=errors)

    if filter_radius is not None and filter_weight is not None:
        mask = MaskConfig(radius=filter_radius, weight=filter_weight)

    request = PaintingRequest(
        generation=GenerationConfig(
            base_radius=base_radius,
            temperature=temperature,
            iterations=int(iterations),
            pre_iterations=int(pre_iterations),
            layer_count=int(layers),
        ),
        render=RenderConfig(
            width=width,
            height=height,
            color=color_utils.parse_hex_color(raw_color),
            alpha=alpha,
            mask=mask,
        ),
    )
    return FormResult(request=request)
