from concurrent.futures import ThreadPoolExecutor

import numpy as np
import numpy.typing as npt
from numba import jit

from ..palette import Palette
from ..quantize import nearest_index
from .threshold import ThresholdMap


@jit(nopython=True, nogil=True)
def _ordered_rows_jit(
    values: npt.NDArray[np.float64],
    thresholds: npt.NDArray[np.float64],
    strength: float,
    effective: npt.NDArray[np.float64],
    magnitudes: npt.NDArray[np.float64],
    row_start: int,
    row_end: int,
    out: npt.NDArray[np.int64],
) -> None:
    """Quantize rows [row_start, row_end) against the tiled threshold map."""
    map_h, map_w = thresholds.shape
    width = values.shape[1]

    for y in range(row_start, row_end):
        for x in range(width):
            threshold = thresholds[y % map_h, x % map_w]
            comparand = values[y, x] + (threshold - 0.5) * strength
            out[y, x] = nearest_index(comparand, effective, magnitudes)


def ordered_dither(
    values: npt.NDArray[np.floating],
    threshold_map: ThresholdMap,
    palette: Palette,
    strength: float = 1.0,
    workers: int = 1
) -> npt.NDArray[np.int64]:
    """
    Apply ordered dithering using a threshold map.

    Every pixel is independent, so with ``workers > 1`` the image is split
    into row ranges that run on a thread pool (the kernel releases the GIL).
    The threshold map and palette arrays are shared read-only.

    Args:
        values: Luminance plane (2D, floats in [0, 1]).
        threshold_map: Map tiled over the image by modulo indexing.
        palette: Target palette.
        strength: Scale of the (threshold - 0.5) term.
        workers: Number of row-range workers.

    Returns:
        (h, w) array of palette indices.
    """
    img = np.ascontiguousarray(values, dtype=np.float64)
    height, width = img.shape
    out = np.zeros((height, width), dtype=np.int64)

    thresholds = np.ascontiguousarray(threshold_map.values)
    effective = palette.effective_luminances
    magnitudes = palette.magnitudes

    workers = max(1, min(int(workers), height))
    if workers == 1:
        _ordered_rows_jit(img, thresholds, float(strength), effective, magnitudes, 0, height, out)
        return out

    # split by rows
    step = (height + workers - 1) // workers
    with ThreadPoolExecutor(max_workers=workers) as ex:
        futs = [
            ex.submit(
                _ordered_rows_jit,
                img, thresholds, float(strength), effective, magnitudes, s, min(height, s + step), out
            )
            for s in range(0, height, step)
        ]
        for fu in futs:
            fu.result()

    return out
