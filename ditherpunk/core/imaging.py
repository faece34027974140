"""Pillow adapters for the decode / resize / encode collaborators."""
import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from PIL import Image

from ..errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)


def decode(path: Union[str, Path]) -> Image.Image:
    """Open an image and normalise it to 8-bit RGB."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert('RGB')
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Failed to open image {path}: {e}") from e


def resize(img: Image.Image, max_width: int, max_height: int) -> Image.Image:
    """
    Fit the image inside max_width x max_height, keeping its aspect ratio.

    Images are scaled up or down so the limiting side matches its bound.
    """
    width, height = img.size
    ratio = min(max_width / width, max_height / height)
    new_size = (max(1, min(max_width, round(width * ratio))), max(1, min(max_height, round(height * ratio))))
    if new_size == img.size:
        return img
    logger.debug("Resizing %dx%d -> %dx%d", width, height, *new_size)
    return img.resize(new_size, Image.Resampling.LANCZOS)


def encode(img: Image.Image, path: Union[str, Path]) -> Path:
    """
    Write the image as PNG.

    PNG is the only container written, whatever the extension. The file is
    encoded in memory, written to a temporary file beside the target and then
    moved into place, so a failure never leaves a partial file and never
    touches a file already at ``path``.
    """
    target = Path(path)
    if target.suffix.lower() != '.png':
        logger.warning("Output %s will be written as PNG regardless of its extension", target)
    buffer = io.BytesIO()
    try:
        img.save(buffer, 'PNG')
    except (OSError, ValueError) as e:
        raise EncodeError(f"Failed to encode image: {e}") from e

    try:
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix='.tmp')
    except OSError as e:
        raise EncodeError(f"Failed to write {target}: {e}") from e
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, 'wb') as fh:
            fh.write(buffer.getvalue())
        os.replace(tmp_path, target)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise EncodeError(f"Failed to write {target}: {e}") from e
    return target
