import numpy as np
import numpy.typing as npt

from ..constants import LUMA_WEIGHTS


def adjust_brightness(buffer: npt.NDArray[np.uint8], delta: int) -> npt.NDArray[np.uint8]:
    """Add ``delta`` to every channel, clamped to 0..255."""
    if delta == 0:
        return buffer
    shifted = buffer.astype(np.int32) + int(delta)
    return np.clip(shifted, 0, 255).astype(np.uint8)


def adjust_contrast(buffer: npt.NDArray[np.uint8], delta: float) -> npt.NDArray[np.uint8]:
    """
    Stretch every channel around mid-gray.

    The factor is ((100 + delta) / 100) ** 2, so delta 0 leaves the buffer
    unchanged, positive values increase contrast and -100 flattens to gray.
    """
    if delta == 0:
        return buffer
    factor = ((100.0 + float(delta)) / 100.0) ** 2
    normalized = buffer.astype(np.float64) / 255.0
    stretched = ((normalized - 0.5) * factor + 0.5) * 255.0
    return np.clip(np.rint(stretched), 0, 255).astype(np.uint8)


def adjust_tone(
    buffer: npt.NDArray[np.uint8],
    brightness_delta: int = 0,
    contrast_delta: float = 0.0,
) -> npt.NDArray[np.uint8]:
    """Apply brightness then contrast."""
    return adjust_contrast(adjust_brightness(buffer, brightness_delta), contrast_delta)


def to_luminance(buffer: npt.NDArray[np.integer]) -> npt.NDArray[np.float64]:
    """
    Convert a uint8 buffer to float luminance in [0, 1].

    (h, w) buffers are taken as gray already; (h, w, 3|4) use the RGB channels.
    """
    data = buffer.astype(np.float64)
    if data.ndim == 2:
        return data / 255.0
    weights = np.array(LUMA_WEIGHTS, dtype=np.float64)
    return (data[..., :3] @ weights) / 255.0


def to_gray(buffer: npt.NDArray[np.integer]) -> npt.NDArray[np.uint8]:
    """8-bit luminance plane; (h, w) buffers are returned as uint8 unchanged."""
    if buffer.ndim == 2:
        return buffer.astype(np.uint8, copy=False)
    return np.clip(np.rint(to_luminance(buffer) * 255.0), 0, 255).astype(np.uint8)
