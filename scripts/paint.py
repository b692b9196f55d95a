"""Headless painting: outline YAML + form values → PNG.

Runs the same pipeline as an interactive session:
    1. Load and validate the painting config (painting.v1.yaml)
    2. Load the captured outline and close its gap
    3. Merge form defaults with CLI overrides and validate them
    4. Run one submission (generate → composite → history push)
    5. Save the canvas as PNG

Refactored architecture:
    - paint_main(outline_path, output_path, ...) → dict
        * Callable function (used by tests and batch jobs)
        * Returns: {output_path, width, height, layers, points}
    - CLI entry point: if __name__ == "__main__"

CLI:
    python scripts/paint.py --outline configs/outlines/blob.yaml --output out/blob.png
    python scripts/paint.py --outline blob.yaml --output out/soft.png \\
                            --color "#0000ff" --filter-radius 4 --filter-weight 1 --seed 7
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from src.painterly.session import PaintingInputError, PaintSession
from src.utils import validators
from src.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

FORM_FIELDS = (
    "layers",
    "alpha",
    "iterations",
    "pre-iterations",
    "base-radius",
    "temperature",
    "filter-radius",
    "filter-weight",
    "color",
)


def paint_main(
    outline_path: str,
    output_path: str,
    config_path: str = "configs/painting_v1.yaml",
    overrides: Optional[Mapping[str, Any]] = None,
    seed: Optional[int] = None,
    jitter: Optional[str] = None,
) -> Dict[str, Any]:
    """Paint one outline headlessly and save the result.

    Parameters
    ----------
    outline_path : str
        YAML outline: list of [x, y] points (or {points: [...]})
    output_path : str
        PNG destination
    config_path : str
        Path to painting_v1.yaml
    overrides : Mapping[str, Any], optional
        Form field overrides keyed by form field name ("base-radius", ...)
    seed : int, optional
        Overrides randomness.seed
    jitter : str, optional
        Overrides randomness.policy ("uniform" or "gaussian")

    Returns
    -------
    Dict[str, Any]
        {output_path, width, height, layers, points}

    Raises
    ------
    PaintingInputError
        If the merged form values or the outline are invalid
    """
    cfg = validators.load_painting_config(config_path)
    if seed is not None:
        cfg.randomness.seed = seed
    if jitter is not None:
        cfg.randomness.policy = jitter

    points = validators.load_outline(outline_path)

    fields: Dict[str, str] = dict(cfg.form_defaults)
    fields.setdefault("color", cfg.palette[0] if cfg.palette else "")
    for key, value in (overrides or {}).items():
        if value is not None:
            fields[key] = str(value)

    with PaintSession.from_config(cfg) as session:
        closed = session.set_outline(points)
        logger.info(f"Loaded outline {outline_path} ({len(points)} points, {len(closed)} after closing)")
        session.submit(fields).result()
        out = session.export_png(output_path)
        width, height = session.size

    return {
        'output_path': str(out),
        'width': width,
        'height': height,
        'layers': int(float(fields["layers"])),
        'points': len(closed),
    }


def main():
    parser = argparse.ArgumentParser(description="Paint a painterly fill from an outline")
    parser.add_argument(
        "--outline",
        type=str,
        required=True,
        help="Path to outline YAML (list of [x, y] points)",
    )
    parser.add_argument(
        "--output",
        type=str,
        required=True,
        help="Output PNG path",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/painting_v1.yaml",
        help="Path to painting config",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (overrides config)",
    )
    parser.add_argument(
        "--jitter",
        choices=["uniform", "gaussian"],
        default=None,
        help="Jitter distribution (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (overrides config)",
    )
    for name in FORM_FIELDS:
        parser.add_argument(
            f"--{name}",
            dest=name.replace("-", "_"),
            type=str,
            default=None,
            help=f"Form field '{name}' (overrides config defaults)",
        )

    args = parser.parse_args()

    cfg = validators.load_painting_config(args.config)
    setup_logging(
        log_level=args.log_level or cfg.logging.level,
        log_file=cfg.logging.file,
        json=cfg.logging.json_format,
        quiet_libs=["PIL"],
        context={"app": "paint"},
    )

    overrides = {name: getattr(args, name.replace("-", "_")) for name in FORM_FIELDS}
    try:
        result = paint_main(
            outline_path=args.outline,
            output_path=args.output,
            config_path=args.config,
            overrides=overrides,
            seed=args.seed,
            jitter=args.jitter,
        )
    except PaintingInputError as e:
        for message in e.messages:
            logger.error(message)
        raise SystemExit(2)

    print("\n=== Paint Complete ===")
    print(f"Output: {result['output_path']} ({result['width']}x{result['height']})")
    print(f"Layers: {result['layers']}, outline points: {result['points']}")


if __name__ == "__main__":
    main()
