import logging
from typing import Optional

import numpy as np
import numpy.typing as npt

from ...constants import ORDERED_STRENGTH, DitherKind
from ...errors import KernelNotImplemented, UnsupportedDitherKind
from ..palette import Palette
from .error_diffusion import DIFFUSION_KERNELS, DiffusionKernel, error_diffuse
from .ordered import ordered_dither
from .threshold import ThresholdMap, bayer_matrix, generate

logger = logging.getLogger(__name__)

# Error diffusion kinds cleared for dispatch. The kernels exist but stay
# dormant until each one is enabled here.
ENABLED_DIFFUSION_KINDS: frozenset = frozenset()


def apply_dithering_algorithm(
    kind: DitherKind,
    values: npt.NDArray[np.floating],
    palette: Palette,
    seed: Optional[int] = None,
    workers: int = 1
) -> npt.NDArray[np.int64]:
    """
    Dispatch to the ordered or error diffusion engine.

    Returns:
        (h, w) array of palette indices.

    Raises:
        UnknownDitherKind: ``kind`` is not a dithering identifier.
        UnsupportedDitherKind: ``kind`` is declared but has no engine wired in.
    """
    if kind in ENABLED_DIFFUSION_KINDS:
        logger.debug("Error diffusion with kernel %s", kind)
        return error_diffuse(values, palette, DIFFUSION_KERNELS[kind])

    try:
        threshold_map = generate(kind, seed=seed, shape=values.shape[:2])
    except KernelNotImplemented as e:
        raise UnsupportedDitherKind(f"No dithering engine available for '{kind}'") from e

    logger.debug(
        "Ordered dithering with %s (%dx%d map, %d worker(s))",
        threshold_map.kind, threshold_map.width, threshold_map.height, workers
    )
    return ordered_dither(
        values, threshold_map, palette, strength=ORDERED_STRENGTH[threshold_map.kind], workers=workers
    )


__all__ = [
    "ENABLED_DIFFUSION_KINDS",
    "DIFFUSION_KERNELS",
    "DiffusionKernel",
    "ThresholdMap",
    "apply_dithering_algorithm",
    "bayer_matrix",
    "error_diffuse",
    "generate",
    "ordered_dither",
]
