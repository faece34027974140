from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import numpy.typing as npt

from ...constants import ERROR_DIFFUSION_KINDS, MAX_BAYER_ORDER, RANDOM_MAP_SIZE
from ...errors import KernelNotImplemented, UnknownDitherKind
from .blue_noise import blue_noise_texture

# Base 2x2 Bayer pattern (before normalisation)
BAYER_BASE = np.array([[0, 2], [3, 1]], dtype=np.int64)


@dataclass(frozen=True)
class ThresholdMap:
    """
    Immutable grid of thresholds in [0, 1), tiled across the image.

    ``values`` is read-only so one map can be shared by every worker.
    """
    kind: str
    values: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        values = np.asarray(self.values, dtype=np.float64)
        if values.flags.writeable:
            values = values.copy()
            values.setflags(write=False)
        object.__setattr__(self, 'values', values)

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    def sample(self, x: int, y: int) -> float:
        """Threshold at pixel (x, y), wrapping outside the native size."""
        return float(self.values[y % self.height, x % self.width])

    def tile(self, width: int, height: int) -> npt.NDArray[np.float64]:
        """Threshold plane covering a width x height image."""
        tiled = np.tile(self.values, (height // self.height + 1, width // self.width + 1))
        return tiled[:height, :width]


def bayer_matrix(order: int) -> npt.NDArray[np.int64]:
    """
    Classic Bayer dispersed-dot matrix of side 2 ** (order + 1).

    Built from the 2x2 base by quadrant recursion:
        M(2n) = [[4M + 0, 4M + 2],
                 [4M + 3, 4M + 1]]
    Values are the integers 0 .. side**2 - 1.
    """
    if order < 0:
        raise UnknownDitherKind(f"Bayer order must be >= 0, got {order}")
    matrix = BAYER_BASE.copy()
    for _ in range(order):
        quarter = 4 * matrix
        matrix = np.block([
            [quarter + 0, quarter + 2],
            [quarter + 3, quarter + 1],
        ])
    return matrix


def _split_kind(kind: str, order: Optional[int]) -> Tuple[str, Optional[int]]:
    if not kind.startswith('bayer_'):
        return kind, order
    suffix = kind[len('bayer_'):]
    if not suffix.isdigit() or (order is not None and order != int(suffix)):
        raise UnknownDitherKind(f"Unknown dithering type: {kind}")
    return 'bayer', int(suffix)


def generate(
    kind: str,
    order: Optional[int] = None,
    seed: Optional[int] = None,
    shape: Optional[Tuple[int, int]] = None,
) -> ThresholdMap:
    """
    Build (or look up) the threshold map for an ordered dithering kind.

    Args:
        kind: 'rand', 'bayer_0'..'bayer_3' (or 'bayer' with ``order``), 'blue_noise'.
        order: Bayer order when ``kind`` is plain 'bayer'.
        seed: Seed for 'rand'; None draws fresh noise every run.
        shape: (height, width) the 'rand' map should cover. Defaults to a
               RANDOM_MAP_SIZE square tile.

    Raises:
        KernelNotImplemented: for the declared error diffusion kinds.
        UnknownDitherKind: for anything else.
    """
    if not isinstance(kind, str):
        raise UnknownDitherKind(f"Unknown dithering type: {kind!r}")
    if kind in ERROR_DIFFUSION_KINDS:
        raise KernelNotImplemented(f"Dithering type '{kind}' is not implemented yet")

    base, bayer_order = _split_kind(kind, order)

    match base:
        case 'rand':
            height, width = shape if shape is not None else (RANDOM_MAP_SIZE, RANDOM_MAP_SIZE)
            rng = np.random.default_rng(seed)
            return ThresholdMap(kind, rng.random((max(1, height), max(1, width))))
        case 'bayer':
            if bayer_order is None or not 0 <= bayer_order <= MAX_BAYER_ORDER:
                raise UnknownDitherKind(
                    f"Bayer order must be between 0 and {MAX_BAYER_ORDER}, got {bayer_order}"
                )
            matrix = bayer_matrix(bayer_order)
            return ThresholdMap(f"bayer_{bayer_order}", matrix / float(matrix.size))
        case 'blue_noise':
            return ThresholdMap(kind, blue_noise_texture())
        case _:
            raise UnknownDitherKind(f"Unknown dithering type: {kind}")
