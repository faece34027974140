from dataclasses import dataclass
from typing import Tuple

import numpy as np
import numpy.typing as npt
from numba import jit

from ...constants import ATKINSON_TAPS, FLOYD_STEINBERG_TAPS, JARVIS_JUDICE_NINKE_TAPS
from ..palette import Palette
from ..quantize import nearest_index

Tap = Tuple[int, int, float]


@dataclass(frozen=True)
class DiffusionKernel:
    """
    Weight table for error diffusion.

    Each tap is (dy, dx, weight) relative to the current pixel and must point
    forward in raster order (dy > 0, or dy == 0 and dx > 0).
    """
    name: str
    taps: Tuple[Tap, ...]

    def __post_init__(self) -> None:
        for dy, dx, _ in self.taps:
            if dy < 0 or (dy == 0 and dx <= 0):
                raise ValueError(f"Kernel '{self.name}' has a backward tap ({dy}, {dx})")

    @property
    def reach_below(self) -> int:
        return max(dy for dy, _, _ in self.taps)

    @property
    def reach_left(self) -> int:
        return max(0, -min(dx for _, dx, _ in self.taps))

    @property
    def reach_right(self) -> int:
        return max(0, max(dx for _, dx, _ in self.taps))

    def as_arrays(self):
        dy = np.array([t[0] for t in self.taps], dtype=np.int64)
        dx = np.array([t[1] for t in self.taps], dtype=np.int64)
        weights = np.array([t[2] for t in self.taps], dtype=np.float64)
        return dy, dx, weights


FLOYD_STEINBERG = DiffusionKernel('floyd', FLOYD_STEINBERG_TAPS)
JARVIS_JUDICE_NINKE = DiffusionKernel('jarvis', JARVIS_JUDICE_NINKE_TAPS)
ATKINSON = DiffusionKernel('atkinson', ATKINSON_TAPS)

DIFFUSION_KERNELS = {
    kernel.name: kernel for kernel in (FLOYD_STEINBERG, JARVIS_JUDICE_NINKE, ATKINSON)
}


class DiffusionState:
    """
    Accumulated error for one image pass.

    The plane is padded by the kernel's reach so taps that fall outside the
    image land in the margin and are simply never read back.
    """

    def __init__(self, height: int, width: int, kernel: DiffusionKernel) -> None:
        self.left = kernel.reach_left
        self.errors = np.zeros(
            (height + kernel.reach_below, width + kernel.reach_left + kernel.reach_right),
            dtype=np.float64,
        )


@jit(nopython=True)
def _diffuse_jit(
    values: npt.NDArray[np.float64],
    errors: npt.NDArray[np.float64],
    left: int,
    tap_dy: npt.NDArray[np.int64],
    tap_dx: npt.NDArray[np.int64],
    tap_w: npt.NDArray[np.float64],
    effective: npt.NDArray[np.float64],
    luminances: npt.NDArray[np.float64],
    magnitudes: npt.NDArray[np.float64],
    out: npt.NDArray[np.int64],
) -> None:
    """Raster-order quantize + error spread. Must run on a single stream."""
    height, width = values.shape

    for y in range(height):
        for x in range(width):
            comparand = values[y, x] + errors[y, x + left]
            index = nearest_index(comparand, effective, magnitudes)
            out[y, x] = index
            residual = comparand - luminances[index]

            for t in range(tap_dy.shape[0]):
                errors[y + tap_dy[t], x + left + tap_dx[t]] += residual * tap_w[t]


def error_diffuse(
    values: npt.NDArray[np.floating],
    palette: Palette,
    kernel: DiffusionKernel = FLOYD_STEINBERG,
) -> npt.NDArray[np.int64]:
    """
    Error diffusion dithering against an arbitrary palette.

    Pixels are visited left-to-right, top-to-bottom. Each pixel's comparand is
    its value plus the error carried to it; the residual between the
    comparand and the chosen entry's luminance is spread to unvisited
    neighbours by the kernel weights. Weights that fall off the image are
    dropped (no wrap-around).

    Args:
        values: Luminance plane (2D, floats in [0, 1]).
        palette: Target palette.
        kernel: Weight table.

    Returns:
        (h, w) array of palette indices.
    """
    img = np.ascontiguousarray(values, dtype=np.float64)
    height, width = img.shape
    out = np.zeros((height, width), dtype=np.int64)
    state = DiffusionState(height, width, kernel)
    tap_dy, tap_dx, tap_w = kernel.as_arrays()

    _diffuse_jit(
        img,
        state.errors,
        state.left,
        tap_dy,
        tap_dx,
        tap_w,
        palette.effective_luminances,
        palette.luminances,
        palette.magnitudes,
        out,
    )
    return out
