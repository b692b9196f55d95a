"""Tests for layer set generation (src.painterly.layers).

Test suites:
1. Count and length invariants
2. Shared silhouette
3. Reproducibility

Run:
    pytest tests/test_layers.py -v
"""

import numpy as np
import pytest

from src.painterly.jitter import make_rng, make_sampler
from src.painterly.layers import base_path, generate_layers, iter_layers
from src.utils.validators import GenerationConfig


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def outline():
    """Triangle with random-looking weights."""
    return np.array([
        [20.0, 20.0, 0.3],
        [120.0, 40.0, 0.9],
        [60.0, 110.0, 0.5],
    ])


def make_config(**overrides):
    params = dict(base_radius=16.0, temperature=0.7, iterations=3, pre_iterations=2, layer_count=6)
    params.update(overrides)
    return GenerationConfig(**params)


# ============================================================================
# TEST SUITE 1: Count & length
# ============================================================================

@pytest.mark.parametrize("pre,it,count", [(0, 0, 1), (2, 3, 6), (1, 4, 10), (3, 0, 4)])
def test_count_and_length(outline, pre, it, count):
    cfg = make_config(pre_iterations=pre, iterations=it, layer_count=count)
    layers = generate_layers(outline, cfg, make_sampler("uniform", make_rng(0)))

    assert len(layers) == count
    for layer in layers:
        assert layer.shape == (len(outline) * 2 ** (pre + it), 3)


def test_iter_layers_is_lazy(outline):
    cfg = make_config(layer_count=1000)
    gen = iter_layers(outline, cfg, make_sampler("uniform", make_rng(1)))
    first = next(gen)
    assert first.shape == (3 * 2 ** 5, 3)


def test_zero_passes_give_outline_copies(outline):
    cfg = make_config(pre_iterations=0, iterations=0, layer_count=3)
    layers = generate_layers(outline, cfg, make_sampler("uniform", make_rng(2)))
    for layer in layers:
        assert np.array_equal(layer, outline)


# ============================================================================
# TEST SUITE 2: Shared silhouette
# ============================================================================

def test_layers_share_base_path(outline):
    cfg = make_config(pre_iterations=2, iterations=3, layer_count=5)
    base = base_path(outline, cfg, make_sampler("uniform", make_rng(11)))
    layers = generate_layers(outline, cfg, make_sampler("uniform", make_rng(11)))

    stride = 2 ** cfg.iterations
    for layer in layers:
        assert np.array_equal(layer[stride - 1::stride], base)


def test_layers_differ_in_detail(outline):
    cfg = make_config(layer_count=2)
    a, b = generate_layers(outline, cfg, make_sampler("uniform", make_rng(3)))
    assert not np.array_equal(a, b)


# ============================================================================
# TEST SUITE 3: Reproducibility
# ============================================================================

@pytest.mark.parametrize("policy", ["uniform", "gaussian"])
def test_same_seed_same_layers(outline, policy):
    cfg = make_config()
    a = generate_layers(outline, cfg, make_sampler(policy, make_rng(99)))
    b = generate_layers(outline, cfg, make_sampler(policy, make_rng(99)))
    for la, lb in zip(a, b):
        assert np.array_equal(la, lb)
