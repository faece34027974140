import sys
import click
from typing import Optional
from .config import ProcessSettings, configure_logging
from .constants import DITHER_KINDS
from .core.pipeline import dither_image
from .errors import DitherpunkError

@click.command()
@click.argument('image', type=click.Path(exists=True, dir_okay=False))
@click.argument('output', type=click.Path(dir_okay=False, writable=True), required=False)
@click.option(
    '--config', '-c', 'config_path',
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help='JSON settings file. Options given on the command line override it.'
)
@click.option(
    '--dither',
    type=click.Choice(list(DITHER_KINDS), case_sensitive=False),
    default=None,
    help='Dithering type.'
)
@click.option(
    '--width',
    type=click.IntRange(min=1),
    default=None,
    help='Maximum processing width (the image is fitted inside width x height).'
)
@click.option(
    '--height',
    type=click.IntRange(min=1),
    default=None,
    help='Maximum processing height.'
)
@click.option(
    '--brightness',
    type=int,
    default=None,
    help='Brightness delta added to every channel (-255 to 255).'
)
@click.option(
    '--contrast',
    type=float,
    default=None,
    help='Contrast delta; 0 keeps the image as is, -100 flattens it to gray.'
)
@click.option(
    '--scale',
    type=click.IntRange(min=1),
    default=None,
    help='Output scale: every dithered pixel becomes a scale x scale block.'
)
@click.option(
    '--color',
    multiple=True,
    help='Palette color: HEX[,magnitude[,offset]] (e.g. "#1A1C2C" or "F4F4F4,0.8,-0.1"). '
         'Repeat for each color, darkest first.'
)
@click.option(
    '--seed',
    type=int,
    default=None,
    help='Random seed for reproducible "rand" dithering.'
)
@click.option(
    '--workers',
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help='Worker threads for ordered dithering.'
)
@click.option(
    '--save-config',
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help='Write the effective settings to this JSON file.'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default=None,
    help='Logging level (defaults to $LOG_LEVEL or INFO).'
)
def main(
    image: str,
    output: Optional[str],
    config_path: Optional[str],
    dither: Optional[str],
    width: Optional[int],
    height: Optional[int],
    brightness: Optional[int],
    contrast: Optional[float],
    scale: Optional[int],
    color: tuple[str, ...],
    seed: Optional[int],
    workers: int,
    save_config: Optional[str],
    log_level: Optional[str]
) -> None:
    """Turn a photo into low-color dithered pixel art.

    IMAGE is the path to the input image file. OUTPUT is where the PNG is
    written; by default IMAGE-ditherpunk.png next to the input.

    Dithering types:

    - Ordered: rand, bayer_0 (2x2), bayer_1 (4x4), bayer_2 (8x8),
      bayer_3 (16x16), blue_noise

    - Error diffusion: atkinson, jarvis, floyd (declared, not available yet)
    """
    configure_logging(log_level)
    try:
        settings = ProcessSettings.read_config(config_path) if config_path else ProcessSettings.default()
        settings = settings.replace(
            processing_width=width,
            processing_height=height,
            brightness_delta=brightness,
            contrast_delta=contrast,
            dithering_type=dither.lower() if dither else None,
            color_map=list(color) if color else None,
            output_scale=scale,
        )

        output_path = dither_image(image, settings, output_path=output, seed=seed, workers=workers)
        click.secho(f"✓ Dithered image saved to: {output_path}", fg='green')

        if save_config:
            settings.write_config(save_config)
            click.secho(f"✓ Settings saved to: {save_config}", fg='green')
    except DitherpunkError as e:
        click.secho(f"Error ({type(e).__name__}): {e}", fg='red', err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
