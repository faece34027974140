from pathlib import Path
from typing import Union


def get_output_filename(input_path: Union[str, Path]) -> Path:
    """
    Generate output filename with -ditherpunk suffix, avoiding overwrites.

    The extension is always .png since that is the only format written.

    Args:
        input_path: Path to input image

    Returns:
        Path object for output file
    """
    path = Path(input_path)
    stem = path.stem
    directory = path.parent

    # Start with base name
    output_path = directory / f"{stem}-ditherpunk.png"

    # If file exists, append number
    counter = 1
    while output_path.exists():
        output_path = directory / f"{stem}-ditherpunk-{counter}.png"
        counter += 1

    return output_path
