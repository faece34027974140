import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
import numpy.typing as npt
from PIL import Image

from ..config import ProcessSettings
from ..processing.dither import apply_dithering_algorithm
from ..processing.quantize import indices_to_colors
from ..processing.tone import adjust_tone, to_gray, to_luminance
from .imaging import decode, encode, resize
from .utils import get_output_filename

logger = logging.getLogger(__name__)


def scale_buffer(buffer: npt.NDArray, scale: int) -> npt.NDArray:
    """Replicate every pixel into a scale x scale block."""
    if scale < 1:
        raise ValueError(f"output_scale must be >= 1, got {scale}")
    if scale == 1:
        return buffer
    return np.repeat(np.repeat(buffer, scale, axis=0), scale, axis=1)


def tone_values(buffer: npt.NDArray[np.uint8], settings: ProcessSettings) -> npt.NDArray[np.float64]:
    """Grayscale first, then brightness and contrast on the 8-bit gray plane."""
    gray = to_gray(buffer)
    adjusted = adjust_tone(gray, settings.brightness_delta, settings.contrast_delta)
    return to_luminance(adjusted)


def render_buffer(
    buffer: npt.NDArray[np.uint8],
    settings: ProcessSettings,
    seed: Optional[int] = None,
    workers: int = 1
) -> npt.NDArray[np.uint8]:
    """
    Run the engine on a pixel buffer.

    Args:
        buffer: (h, w) gray or (h, w, 3) RGB uint8 buffer, already resized.
        settings: Validated settings.
        seed: Seed for the 'rand' threshold map.
        workers: Row-range workers for ordered dithering.

    Returns:
        (h * scale, w * scale, 3) uint8 RGB buffer in palette colors.
    """
    values = tone_values(buffer, settings)

    indices = apply_dithering_algorithm(
        settings.dithering_type, values, settings.color_map, seed=seed, workers=workers
    )
    quantized = indices_to_colors(indices, settings.color_map)

    return scale_buffer(quantized, settings.output_scale)


def render(
    img: Image.Image,
    settings: ProcessSettings,
    seed: Optional[int] = None,
    workers: int = 1
) -> Image.Image:
    """Tone adjust, dither, quantize and scale an (already resized) image."""
    if img.mode not in ('RGB', 'L'):
        img = img.convert('RGB')
    result = render_buffer(np.array(img), settings, seed=seed, workers=workers)
    return Image.fromarray(result)


def run(
    img: Image.Image,
    settings: ProcessSettings,
    seed: Optional[int] = None,
    workers: int = 1
) -> Image.Image:
    """Resize to the processing bounds, then render."""
    img = resize(img, settings.processing_width, settings.processing_height)
    return render(img, settings, seed=seed, workers=workers)


def dither_image(
    input_path: Union[str, Path],
    settings: ProcessSettings,
    output_path: Optional[Union[str, Path]] = None,
    seed: Optional[int] = None,
    workers: int = 1
) -> Path:
    """
    Decode, process and encode one image file.

    Args:
        input_path: Path to input image file
        settings: Validated settings
        output_path: Optional path for output file. If None, generated from input filename.
        seed: Random seed for reproducible 'rand' dithering.
        workers: Row-range workers for ordered dithering.

    Returns:
        Path to output file
    """
    img = decode(input_path)
    logger.debug("Decoded %s (%dx%d)", input_path, *img.size)

    result = run(img, settings, seed=seed, workers=workers)

    # Determine final output path
    final_output_path: Path
    if output_path is None:
        final_output_path = get_output_filename(input_path)
    else:
        final_output_path = Path(output_path)

    encode(result, final_output_path)
    logger.info(
        "Wrote %s (%dx%d, %s, %d colors)",
        final_output_path, result.width, result.height,
        settings.dithering_type, len(settings.color_map)
    )
    return final_output_path
