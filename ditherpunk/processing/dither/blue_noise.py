"""
Blue noise threshold texture.

The 128x128 texture is not shipped as a file. It is built with the
void-and-cluster method (Ulichney 1993) from a fixed seed, so every run sees
the same map. The build takes a few seconds and happens on the first
`blue_noise_texture()` call of a process (the first `generate("blue_noise")`);
later calls return the same read-only array by reference.
"""
import logging
from functools import lru_cache
from typing import Tuple

import numpy as np
import numpy.typing as npt

from ...constants import BLUE_NOISE_SEED, BLUE_NOISE_SIGMA, BLUE_NOISE_SIZE

logger = logging.getLogger(__name__)

# Initial binary pattern density
INITIAL_DENSITY = 0.1


def _toroidal_gaussian(size: int, sigma: float) -> npt.NDArray[np.float64]:
    """Gaussian centred on (0, 0) with wrap-around distances."""
    d = np.arange(size)
    d = np.minimum(d, size - d).astype(np.float64)
    g = np.exp(-(d ** 2) / (2.0 * sigma ** 2))
    return np.outer(g, g)


def _energy(pattern: npt.NDArray[np.bool_], kernel: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    # Circular convolution == toroidal blur
    spectrum = np.fft.fft2(pattern.astype(np.float64)) * np.fft.fft2(kernel)
    return np.real(np.fft.ifft2(spectrum))


def _tightest_cluster(pattern, energy) -> Tuple[int, int]:
    flat = np.where(pattern, energy, -np.inf).argmax()
    return divmod(int(flat), pattern.shape[1])


def _largest_void(pattern, energy) -> Tuple[int, int]:
    flat = np.where(pattern, np.inf, energy).argmin()
    return divmod(int(flat), pattern.shape[1])


def _toggle(pattern, energy, kernel, pos: Tuple[int, int], value: bool) -> None:
    pattern[pos] = value
    shifted = np.roll(kernel, pos, axis=(0, 1))
    if value:
        energy += shifted
    else:
        energy -= shifted


def void_and_cluster(size: int, sigma: float = BLUE_NOISE_SIGMA, seed: int = BLUE_NOISE_SEED) -> npt.NDArray[np.float64]:
    """
    Generate a size x size rank matrix normalised to [0, 1).

    Args:
        size: Side length of the texture.
        sigma: Gaussian spread used to measure clusters and voids.
        seed: Seed for the initial random pattern.

    Returns:
        Float array where every value k / size**2 (k = 0..size**2 - 1)
        appears exactly once.
    """
    rng = np.random.default_rng(seed)
    kernel = _toroidal_gaussian(size, sigma)
    total = size * size

    pattern = rng.random((size, size)) < INITIAL_DENSITY
    if not pattern.any():
        pattern[0, 0] = True
    energy = _energy(pattern, kernel)

    # Relax the initial pattern: move the tightest cluster into the largest
    # void until the move would put it back where it came from.
    for _ in range(total):
        cluster = _tightest_cluster(pattern, energy)
        _toggle(pattern, energy, kernel, cluster, False)
        void = _largest_void(pattern, energy)
        if void == cluster:
            _toggle(pattern, energy, kernel, cluster, True)
            break
        _toggle(pattern, energy, kernel, void, True)

    ranks = np.zeros((size, size), dtype=np.int64)
    ones = int(pattern.sum())

    # Rank the prototype's points, densest first from the top down
    proto = pattern.copy()
    proto_energy = energy.copy()
    for rank in range(ones - 1, -1, -1):
        cluster = _tightest_cluster(proto, proto_energy)
        _toggle(proto, proto_energy, kernel, cluster, False)
        ranks[cluster] = rank

    # Fill the remaining cells, emptiest void first
    for rank in range(ones, total):
        void = _largest_void(pattern, energy)
        _toggle(pattern, energy, kernel, void, True)
        ranks[void] = rank

    return ranks.astype(np.float64) / total


@lru_cache(maxsize=1)
def blue_noise_texture() -> npt.NDArray[np.float64]:
    """The shared 128x128 blue noise texture (read-only)."""
    logger.debug("Building %dx%d blue noise texture", BLUE_NOISE_SIZE, BLUE_NOISE_SIZE)
    texture = void_and_cluster(BLUE_NOISE_SIZE)
    texture.setflags(write=False)
    return texture
