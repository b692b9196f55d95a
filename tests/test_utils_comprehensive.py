#!/usr/bin/env python3
"""Comprehensive test suite for the utils modules.

This combined test suite includes:
- Hex color parsing and conversion
- Gaussian kernels and separable blur (torch conv1d)
- Geometry helpers (segment interpolation, bounds, scaling)
- Atomic file writes, PNG export, YAML roundtrip
- Validators (per-submission records, painting.v1 schema, outlines)
- Logging idempotency, JSON output and context fields

Run with: pytest tests/test_utils_comprehensive.py -v
"""

import json
import logging
import logging.handlers
from pathlib import Path

import numpy as np
import pytest
import torch
from PIL import Image

from src.utils import (
    color,
    compute,
    fs,
    geometry,
    logging_config,
    validators,
)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture(scope="module")
def project_root():
    """Project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="module")
def painting_cfg(project_root):
    """Load the shipped painting configuration (shared across module)."""
    return validators.load_painting_config(project_root / "configs/painting_v1.yaml")


@pytest.fixture
def isolated_logging(monkeypatch):
    """Restore root logger handlers, level and context after a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    monkeypatch.setattr(logging_config, "_configured", False)
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging_config.pop_context()
    logging.captureWarnings(False)


# ============================================================================
# BASIC IMPORT TESTS
# ============================================================================

def test_imports():
    """Test that all utils modules can be imported."""
    assert color is not None
    assert compute is not None
    assert fs is not None
    assert geometry is not None
    assert logging_config is not None
    assert validators is not None


# ============================================================================
# COLOR TESTS
# ============================================================================

@pytest.mark.parametrize("value,expected", [
    ("#ff0000", (255, 0, 0)),
    ("#00FF7f", (0, 255, 127)),
    ("#f0a", (255, 0, 170)),
    ("123456", (0x12, 0x34, 0x56)),
    ("  #ffffff ", (255, 255, 255)),
])
def test_parse_hex_color(value, expected):
    assert color.parse_hex_color(value) == expected


@pytest.mark.parametrize("value", ["", "#ff00", "#gg0000", "red", "#ff00000", None])
def test_parse_hex_color_invalid(value):
    with pytest.raises(ValueError, match="Not a hex color"):
        color.parse_hex_color(value)


def test_is_hex_color():
    assert color.is_hex_color("#abc")
    assert color.is_hex_color("#a1b2c3")
    assert not color.is_hex_color("")
    assert not color.is_hex_color("#12345")
    assert not color.is_hex_color("rgb(1,2,3)")


def test_rgb_to_hex_clamps_and_lowercases():
    assert color.rgb_to_hex((255, 0, 171)) == "#ff00ab"
    assert color.rgb_to_hex((300, -5, 16)) == "#ff0010"


def test_rgb_to_unit():
    unit = color.rgb_to_unit((255, 0, 51))
    assert unit.dtype == np.float32
    assert np.allclose(unit, [1.0, 0.0, 0.2])


# ============================================================================
# COMPUTE TESTS
# ============================================================================

@pytest.mark.parametrize("radius,expected", [(0, 0), (0.1, 1), (1, 3), (2.5, 8), (-3, 0)])
def test_blur_padding(radius, expected):
    assert compute.blur_padding(radius) == expected


def test_gaussian_kernel_normalized_and_symmetric():
    kernel = compute.gaussian_kernel_1d(2.0)
    assert kernel.dtype == torch.float32
    assert kernel.numel() == 2 * 6 + 1
    assert torch.isclose(kernel.sum(), torch.tensor(1.0), atol=1e-6)
    assert torch.allclose(kernel, kernel.flip(0))
    assert kernel.argmax().item() == 6


def test_gaussian_kernel_zero_sigma_is_identity():
    kernel = compute.gaussian_kernel_1d(0.0)
    assert kernel.tolist() == [1.0]


def test_separable_blur_preserves_constant_interior():
    img = np.full((40, 40), 100.0)
    out = compute.separable_blur(img, 2.0)
    pad = compute.blur_padding(2.0)
    assert out.dtype == np.float32
    assert out.shape == (40, 40)
    assert np.allclose(out[pad:-pad, pad:-pad], 100.0, atol=1e-3)
    # Zero padding darkens the border
    assert out[0, 0] < 100.0


def test_separable_blur_impulse_is_separable_kernel():
    img = np.zeros((21, 21))
    img[10, 10] = 1.0
    out = compute.separable_blur(img, 1.5)
    kernel = compute.gaussian_kernel_1d(1.5).numpy()
    half = len(kernel) // 2
    expected = np.outer(kernel, kernel)
    assert np.allclose(out[10 - half:10 + half + 1, 10 - half:10 + half + 1], expected, atol=1e-6)
    assert np.isclose(out.sum(), 1.0, atol=1e-5)


def test_separable_blur_zero_sigma_copies():
    img = np.arange(12, dtype=np.int64).reshape(3, 4)
    out = compute.separable_blur(img, 0.0)
    assert np.array_equal(out, img.astype(np.float32))


def test_separable_blur_rejects_3d():
    with pytest.raises(ValueError, match="2-D"):
        compute.separable_blur(np.zeros((4, 4, 3)), 1.0)


def test_finite_rows():
    pts = np.array([[0.0, 1.0, np.nan], [np.inf, 1.0, 0.5], [2.0, np.nan, 0.1]])
    assert compute.finite_rows(pts).tolist() == [True, False, False]
    assert compute.finite_rows(np.zeros((0, 3))).shape == (0,)


# ============================================================================
# GEOMETRY TESTS
# ============================================================================

def test_distance():
    assert geometry.distance((0, 0), (3, 4)) == 5.0
    assert geometry.distance((1, 1, 0.5), (1, 1, 0.9)) == 0.0


def test_as_path_shapes():
    assert geometry.as_path([]).shape == (0, 2)
    assert geometry.as_path([[1, 2], [3, 4]]).dtype == np.float64
    assert geometry.as_path([], columns=3).shape == (0, 3)
    with pytest.raises(ValueError, match=r"\(N, 2\)"):
        geometry.as_path([[1, 2, 3]])


def test_interpolate_segment_interior_points():
    pts = geometry.interpolate_segment((64, 0), (0, 0), 4)
    assert pts.shape == (3, 2)
    assert np.allclose(pts, [[48, 0], [32, 0], [16, 0]])


@pytest.mark.parametrize("n", [-1, 0, 1])
def test_interpolate_segment_no_points(n):
    assert geometry.interpolate_segment((0, 0), (10, 10), n).shape == (0, 2)


def test_path_bbox_ignores_non_finite():
    pts = np.array([[5.0, 1.0, 0.2], [np.nan, 100.0, 0.1], [-2.0, 7.0, 0.3]])
    assert geometry.path_bbox(pts) == (-2.0, 1.0, 5.0, 7.0)


def test_path_bbox_all_non_finite():
    bbox = geometry.path_bbox(np.array([[np.nan, np.nan]]))
    assert all(np.isnan(v) for v in bbox)


def test_scale_points_keeps_weights():
    pts = np.array([[10.0, 20.0, 0.5]])
    out = geometry.scale_points(pts, 2.0, 0.5)
    assert np.allclose(out, [[20.0, 10.0, 0.5]])
    assert pts[0, 0] == 10.0


# ============================================================================
# FILESYSTEM TESTS
# ============================================================================

def test_ensure_dir(tmp_path):
    new_dir = tmp_path / "a" / "b"
    fs.ensure_dir(new_dir)
    fs.ensure_dir(new_dir)
    assert new_dir.exists()


def test_atomic_write_bytes(tmp_path):
    target = tmp_path / "out" / "data.bin"
    fs.atomic_write_bytes(target, b"painterly")
    assert target.read_bytes() == b"painterly"
    assert not (tmp_path / "out" / "data.bin.tmp").exists()


def test_to_uint8_image_float_and_tensor():
    arr = fs.to_uint8_image(np.array([[0.0, 0.5, 2.0]]))
    assert arr.dtype == np.uint8
    assert arr.tolist() == [[0, 128, 255]]

    tensor = fs.to_uint8_image(torch.ones(3, 2, 2))
    assert tensor.shape == (2, 2, 3)
    assert (tensor == 255).all()


def test_atomic_image_save_rgba(tmp_path):
    pixels = np.zeros((6, 8, 4), dtype=np.uint8)
    pixels[..., 0] = 200
    pixels[..., 3] = 255
    path = tmp_path / "canvas.png"
    fs.atomic_save_image(pixels, path)

    with Image.open(path) as img:
        assert img.mode == "RGBA"
        assert img.size == (8, 6)
        assert img.getpixel((0, 0)) == (200, 0, 0, 255)


def test_atomic_image_save_overwrites(tmp_path):
    img_path = tmp_path / "test.png"
    fs.atomic_save_image(torch.rand(3, 16, 16), img_path)
    fs.atomic_save_image(torch.rand(3, 32, 32), img_path)
    with Image.open(img_path) as img:
        assert img.size == (32, 32)


def test_encode_png_signature():
    data = fs.encode_png(np.zeros((4, 4, 4), dtype=np.uint8))
    assert data[:8] == b"\x89PNG\r\n\x1a\n"


def test_atomic_yaml(tmp_path):
    fs.atomic_yaml_dump({'test': 'data', 'value': 42}, tmp_path / 'test.yaml')
    loaded = fs.load_yaml(tmp_path / 'test.yaml')
    assert loaded['value'] == 42


def test_atomic_yaml_dump_keeps_order(tmp_path):
    yaml_file = tmp_path / "ordered.yaml"
    fs.atomic_yaml_dump({'zeta': 1, 'alpha': {'key': 'value'}}, yaml_file)
    content = yaml_file.read_text()
    assert content.index('zeta') < content.index('alpha')


def test_load_yaml_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        fs.load_yaml(tmp_path / "missing.yaml")


# ============================================================================
# VALIDATORS TESTS
# ============================================================================

def test_generation_config_bounds():
    cfg = validators.GenerationConfig(base_radius=32, temperature=0.7, iterations=5,
                                      pre_iterations=2, layer_count=128)
    assert cfg.layer_count == 128

    with pytest.raises(Exception):
        validators.GenerationConfig(base_radius=-1, temperature=0.7, iterations=5,
                                    pre_iterations=2, layer_count=128)
    with pytest.raises(Exception):
        validators.GenerationConfig(base_radius=1, temperature=1.5, iterations=5,
                                    pre_iterations=2, layer_count=128)
    with pytest.raises(Exception):
        validators.GenerationConfig(base_radius=1, temperature=0.5, iterations=5,
                                    pre_iterations=2, layer_count=0)


def test_generation_config_frozen():
    cfg = validators.GenerationConfig(base_radius=1, temperature=0.5, iterations=1,
                                      pre_iterations=0, layer_count=1)
    with pytest.raises(Exception):
        cfg.layer_count = 5


def test_render_config_parses_hex_color():
    cfg = validators.RenderConfig(width=10, height=20, color="#00ff00", alpha=0.5)
    assert cfg.color == (0, 255, 0)
    assert cfg.mask is None


def test_render_config_rejects_out_of_range_color():
    with pytest.raises(Exception):
        validators.RenderConfig(width=10, height=10, color=(0, 256, 0), alpha=0.5)


def test_mask_config_enabled():
    assert validators.MaskConfig(radius=2, weight=1).enabled
    assert not validators.MaskConfig(radius=0, weight=1).enabled
    assert not validators.MaskConfig(radius=2, weight=0).enabled


def test_load_painting_config(painting_cfg):
    assert painting_cfg.schema_version == "painting.v1"
    assert painting_cfg.canvas.width == 320
    assert painting_cfg.capture.min_distance == 16
    assert painting_cfg.form_defaults["layers"] == "128"
    assert painting_cfg.form_defaults["alpha"] == "0.008"
    assert len(painting_cfg.palette) == 6
    assert painting_cfg.background_rgb == (255, 255, 255)
    assert painting_cfg.logging.json_format is False


def test_load_painting_config_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        validators.load_painting_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize("override", [
    {"schema": "painting.v2"},
    {"canvas": {"width": 0}},
    {"palette": ["blue"]},
    {"randomness": {"policy": "perlin"}},
    {"logging": {"level": "LOUD"}},
])
def test_load_painting_config_invalid(tmp_path, override):
    data = {"schema": "painting.v1"}
    data.update(override)
    path = tmp_path / "bad.yaml"
    fs.atomic_yaml_dump(data, path)
    with pytest.raises(ValueError, match="validation failed"):
        validators.load_painting_config(path)


def test_load_outline_formats(tmp_path, project_root):
    as_list = tmp_path / "list.yaml"
    fs.atomic_yaml_dump([[0, 0], [10, 5.5]], as_list)
    assert validators.load_outline(as_list) == [(0.0, 0.0), (10.0, 5.5)]

    shipped = validators.load_outline(project_root / "configs/outlines/blob.yaml")
    assert len(shipped) == 9
    assert shipped[0] == (80.0, 60.0)


@pytest.mark.parametrize("data", [{"other": 1}, [[1, 2, 3]], [["a", 1]], "text"])
def test_load_outline_invalid(tmp_path, data):
    path = tmp_path / "bad_outline.yaml"
    fs.atomic_yaml_dump(data, path)
    with pytest.raises(ValueError):
        validators.load_outline(path)


# ============================================================================
# LOGGING TESTS
# ============================================================================

def test_logging_idempotency(tmp_path, isolated_logging):
    """Test logging file output and idempotency."""
    log_path = tmp_path / "test.log"

    logging_config.setup_logging(
        log_level="INFO",
        log_file=str(log_path),
        json=True,
        to_stderr=False,
        context={"app": "test"}
    )
    logger = logging_config.get_logger("utils_test")
    logger.info("hello")

    handlers = logging_config.setup_logging(
        log_level="INFO",
        log_file=str(log_path),
        json=True,
        to_stderr=False,
        context={"app": "test"}
    )
    logger.info("world")

    assert len(handlers) == 1
    lines = log_path.read_text().strip().splitlines()
    assert len(lines) == 2

    rec = json.loads(lines[0])
    assert rec["msg"] == "hello"
    assert rec["lvl"] == "INFO"
    assert rec.get("app") == "test"


def test_logging_human_format_includes_context(tmp_path, isolated_logging):
    log_path = tmp_path / "human.log"
    logging_config.setup_logging(log_level="DEBUG", log_file=str(log_path), to_stderr=False)

    logging_config.push_context(submission=3)
    logging_config.get_logger("utils_test").debug("queued")
    logging_config.pop_context(keys=["submission"])
    logging_config.get_logger("utils_test").debug("done")

    first, second = log_path.read_text().strip().splitlines()
    assert "submission=3" in first and first.endswith("queued")
    assert "submission=3" not in second


def test_logging_rotating_file(tmp_path, isolated_logging):
    log_path = tmp_path / "logs" / "rot.log"
    handlers = logging_config.setup_logging(
        log_file=str(log_path), to_stderr=False, max_bytes=1024, backup_count=2
    )
    assert isinstance(handlers[0], logging.handlers.RotatingFileHandler)
    assert log_path.parent.exists()


def test_context_push_pop():
    logging_config.pop_context()
    logging_config.push_context(a=1, b=2)
    logging_config.pop_context(keys=["a"])
    assert logging_config.get_context() == {"b": 2}
    logging_config.pop_context()
    assert logging_config.get_context() == {}


def test_formatter_rejects_unknown_mode():
    with pytest.raises(ValueError, match="Unknown format mode"):
        logging_config.ContextFormatter("xml")
