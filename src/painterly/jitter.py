"""Jitter samplers: random perturbation offsets around a center value.

Two interchangeable policies:
    - UniformJitter: u·2r + c − r with u ~ U[0, 1), i.e. [c − r, c + r)
    - GaussianJitter: c + r·z, z standard normal via Box–Muller

Both draw from an injected numpy Generator, so a fixed seed reproduces a
painting exactly. Both accept scalars (returning a float) or arrays
(vectorized, numpy broadcasting between center and radius).

radius = 0 returns center exactly under either policy.
"""

from typing import Optional, Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

POLICIES = ("uniform", "gaussian")


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a random source; seed=None draws entropy from the OS."""
    return np.random.default_rng(seed)


class JitterSampler:
    """Base class for jitter policies.

    Attributes
    ----------
    rng : np.random.Generator
        Entropy source shared by every draw of this sampler
    """

    name = "base"

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else make_rng()

    def sample(self, center: ArrayLike, radius: ArrayLike) -> ArrayLike:
        raise NotImplementedError

    def _uniform(self, center: ArrayLike, radius: ArrayLike) -> ArrayLike:
        """U[0, 1) draws shaped like broadcast(center, radius); a float for scalars."""
        shape = np.broadcast(center, radius).shape
        if shape == ():
            return self.rng.random()
        return self.rng.random(shape)

    def __call__(self, center: ArrayLike, radius: ArrayLike) -> ArrayLike:
        return self.sample(center, radius)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class UniformJitter(JitterSampler):
    """Uniform perturbation in [center − radius, center + radius)."""

    name = "uniform"

    def sample(self, center: ArrayLike, radius: ArrayLike) -> ArrayLike:
        u = self._uniform(center, radius)
        return u * radius * 2 + center - radius


class GaussianJitter(JitterSampler):
    """Normal perturbation: center + radius · z (Box–Muller).

    The first uniform is drawn from (0, 1] rather than [0, 1) so that
    log(u1) is always finite.
    """

    name = "gaussian"

    def sample(self, center: ArrayLike, radius: ArrayLike) -> ArrayLike:
        u1 = 1.0 - self._uniform(center, radius)
        u2 = self._uniform(center, radius)
        z = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
        return center + radius * z


def make_sampler(
    policy: str = "uniform",
    rng: Optional[np.random.Generator] = None
) -> JitterSampler:
    """Build a sampler by policy name ("uniform" or "gaussian").

    Raises
    ------
    ValueError
        If policy is unknown
    """
    if policy == "uniform":
        return UniformJitter(rng)
    if policy == "gaussian":
        return GaussianJitter(rng)
    raise ValueError(f"Unknown jitter policy: {policy}. Use one of {POLICIES}.")
