import numpy as np
import numpy.typing as npt
from numba import jit

from ..constants import TIE_EPSILON
from .palette import Palette, PaletteEntry


@jit(nopython=True, nogil=True)
def nearest_index(
    comparand: float,
    effective: npt.NDArray[np.float64],
    magnitudes: npt.NDArray[np.float64],
) -> int:
    """
    Index of the palette entry closest to ``comparand``.

    distance = |comparand - effective_luminance| / magnitude. Entries with
    magnitude 0 are skipped; a later entry only wins when it is closer by
    more than TIE_EPSILON, so ties resolve to the lower index.
    """
    best = 0
    best_distance = np.inf
    for i in range(effective.shape[0]):
        magnitude = magnitudes[i]
        if magnitude <= 0.0:
            continue
        distance = abs(comparand - effective[i]) / magnitude
        if distance < best_distance - TIE_EPSILON:
            best = i
            best_distance = distance
    return best


def ordered_comparand(value: float, threshold: float, strength: float) -> float:
    return value + (threshold - 0.5) * strength


def select_index(
    value: float,
    threshold_or_zero: float,
    palette: Palette,
    strength: float = 1.0,
    diffusion: bool = False,
) -> int:
    """
    Pick the palette index for one pixel.

    For ordered dithering ``threshold_or_zero`` is the map threshold and the
    comparand is ``value + (threshold - 0.5) * strength``. For error diffusion
    it is the carried error and the comparand is ``value + error``.
    """
    if diffusion:
        comparand = value + threshold_or_zero
    else:
        comparand = ordered_comparand(value, threshold_or_zero, strength)
    return int(nearest_index(float(comparand), palette.effective_luminances, palette.magnitudes))


def select(
    value: float,
    threshold_or_zero: float,
    palette: Palette,
    strength: float = 1.0,
    diffusion: bool = False,
) -> PaletteEntry:
    return palette[select_index(value, threshold_or_zero, palette, strength, diffusion)]


def indices_to_colors(indices: npt.NDArray[np.integer], palette: Palette) -> npt.NDArray[np.uint8]:
    """Map an (h, w) index plane to an (h, w, 3) RGB buffer."""
    return palette.colors[indices]
