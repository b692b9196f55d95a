"""Atomic filesystem operations for image export and YAML handling.

Provides:
    - Atomic writes: tmp file → fsync → rename (prevents partial reads)
    - Atomic PNG export of RGBA/RGB buffers (via PIL)
    - In-memory PNG encoding for hosts that offer a download
    - YAML load/save

All paths use pathlib.Path for cross-platform compatibility.

Usage:
    from src.utils import fs
    fs.atomic_save_image(buffer.pixels, "out/painting.png")
    cfg = fs.load_yaml("configs/painting_v1.yaml")

Note: Module named `fs.py` rather than `io.py` to avoid shadowing stdlib `io`.
"""

import io
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import torch
import yaml
from PIL import Image


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create directory (and parents) if missing, return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(
    path: Union[str, Path],
    data: bytes,
    tmp_suffix: str = ".tmp"
) -> None:
    """Write bytes to file atomically (tmp → fsync → rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path
    data : bytes
        Data to write
    tmp_suffix : str
        Temporary file suffix, default ".tmp"

    Notes
    -----
    The tmp file lives in the target directory so the rename stays on one
    filesystem.
    """
    path = Path(path)
    ensure_dir(path.parent)
    tmp_path = path.with_suffix(path.suffix + tmp_suffix)

    try:
        with open(tmp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def to_uint8_image(img: Union[np.ndarray, torch.Tensor]) -> np.ndarray:
    """Convert an image to a PIL-compatible uint8 array.

    Parameters
    ----------
    img : Union[np.ndarray, torch.Tensor]
        - numpy: (H, W), (H, W, 3) or (H, W, 4); uint8 or float [0,1]
        - torch: (C, H, W) or (H, W), float [0,1] or uint8

    Returns
    -------
    np.ndarray
        uint8 array, (H, W) or (H, W, C)
    """
    if isinstance(img, torch.Tensor):
        img = img.detach().cpu()
        if img.ndim == 3 and img.shape[0] in (1, 3, 4):
            img = img.permute(1, 2, 0)
        if img.is_floating_point():
            img = (img.clamp(0, 1) * 255).round().to(torch.uint8)
        img = img.numpy()

    img = np.asarray(img)
    if np.issubdtype(img.dtype, np.floating):
        img = np.round(np.clip(img, 0.0, 1.0) * 255.0)
    if img.dtype != np.uint8:
        img = np.clip(img, 0, 255).astype(np.uint8)

    if img.ndim == 3 and img.shape[2] == 1:
        img = img.squeeze(2)
    return img


def encode_png(img: Union[np.ndarray, torch.Tensor]) -> bytes:
    """Encode an image as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(to_uint8_image(img)).save(buf, format="PNG")
    return buf.getvalue()


def atomic_save_image(
    img: Union[np.ndarray, torch.Tensor],
    path: Union[str, Path],
    pil_kwargs: Optional[Dict[str, Any]] = None
) -> None:
    """Save image atomically (extension determines format).

    Parameters
    ----------
    img : Union[np.ndarray, torch.Tensor]
        Image data, see to_uint8_image()
    path : Union[str, Path]
        Target file path
    pil_kwargs : Optional[Dict[str, Any]]
        Additional kwargs for PIL.Image.save (e.g., optimize=True)
    """
    path = Path(path)
    ensure_dir(path.parent)
    pil_img = Image.fromarray(to_uint8_image(img))

    # Keep the real extension last so PIL can infer the format
    tmp_path = path.with_name(path.stem + ".tmp" + path.suffix)
    try:
        pil_img.save(tmp_path, **(pil_kwargs or {}))
        tmp_path.replace(path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to save image {path} atomically: {e}") from e


def atomic_yaml_dump(obj: Any, path: Union[str, Path]) -> None:
    """Save object as YAML atomically (PyYAML safe_dump, insertion order kept)."""
    yaml_str = yaml.safe_dump(
        obj,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True
    )
    atomic_write_bytes(path, yaml_str.encode('utf-8'))


def load_yaml(path: Union[str, Path]) -> Any:
    """Load YAML file safely.

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    yaml.YAMLError
        If YAML parsing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e
