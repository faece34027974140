import sys
from pathlib import Path

# Add project root to path so we can import the package without installing
sys.path.append(str(Path(__file__).parent.parent))

import numpy as np
import pytest
from PIL import Image
from ditherpunk.config import ProcessSettings
from ditherpunk.constants import ORDERED_KINDS, ORDERED_STRENGTH
from ditherpunk.core.pipeline import render
from ditherpunk.errors import KernelNotImplemented, UnknownDitherKind, UnsupportedDitherKind
from ditherpunk.processing.dither import apply_dithering_algorithm, generate, ordered_dither
from ditherpunk.processing.palette import resolve
from ditherpunk.processing.quantize import select_index

BLACK_WHITE = resolve()

@pytest.fixture
def gradient():
    """Horizontal 0..1 ramp, 24 rows x 40 columns."""
    return np.tile(np.linspace(0.0, 1.0, 40), (24, 1))

def test_ordered_matches_per_pixel_selection(gradient):
    """Each output pixel depends only on its value, its threshold and the palette."""
    threshold_map = generate("bayer_1")
    indices = ordered_dither(gradient, threshold_map, BLACK_WHITE)

    for y in range(gradient.shape[0]):
        for x in range(gradient.shape[1]):
            expected = select_index(gradient[y, x], threshold_map.sample(x, y), BLACK_WHITE)
            assert indices[y, x] == expected

@pytest.mark.parametrize("kind", ORDERED_KINDS)
def test_workers_do_not_change_result(kind):
    values = np.random.default_rng(5).random((37, 29))
    palette = resolve(["#000000", "#555555", "#AAAAAA", "#FFFFFF"])

    single = apply_dithering_algorithm(kind, values, palette, seed=11, workers=1)
    threaded = apply_dithering_algorithm(kind, values, palette, seed=11, workers=4)

    assert single.shape == (37, 29)
    assert np.array_equal(single, threaded)

def test_more_workers_than_rows():
    values = np.full((2, 10), 0.5)
    indices = ordered_dither(values, generate("bayer_0"), BLACK_WHITE, workers=8)
    assert indices.shape == (2, 10)

@pytest.mark.parametrize("kind", ORDERED_KINDS)
def test_flat_black_and_white(kind):
    """Pure black and pure white survive every threshold map unchanged."""
    black = apply_dithering_algorithm(kind, np.zeros((16, 16)), BLACK_WHITE, seed=1)
    white = apply_dithering_algorithm(kind, np.ones((16, 16)), BLACK_WHITE, seed=1)
    assert not black.any()
    assert white.all()

@pytest.mark.parametrize("kind", ORDERED_KINDS)
def test_flat_inputs_fill_whole_map(kind):
    """Flat extremes stay flat even where the map holds its lowest and highest threshold."""
    threshold_map = generate(kind, seed=2, shape=(16, 16))
    height, width = threshold_map.height, threshold_map.width
    strength = ORDERED_STRENGTH[kind]

    white = ordered_dither(np.ones((height, width)), threshold_map, BLACK_WHITE, strength=strength)
    black = ordered_dither(np.zeros((height, width)), threshold_map, BLACK_WHITE, strength=strength)
    assert white.all()
    assert not black.any()

def test_white_image_renders_white():
    settings = ProcessSettings.default().replace(dithering_type='bayer_0', output_scale=1)
    img = Image.new('RGB', (8, 8), (255, 255, 255))
    result = np.array(render(img, settings))
    assert (result == 255).all()

def test_bayer_density_follows_value():
    """On a 4x4 tile, white count = #{k : v + (k/16 - 1/2) * 15/16 > 1/2}."""
    threshold_map = generate("bayer_1")
    strength = ORDERED_STRENGTH["bayer_1"]
    quarter = ordered_dither(np.full((4, 4), 0.25), threshold_map, BLACK_WHITE, strength=strength)
    three_quarters = ordered_dither(np.full((4, 4), 0.75), threshold_map, BLACK_WHITE, strength=strength)

    assert quarter.sum() == 3
    assert three_quarters.sum() == 12

def test_output_tiles_with_map():
    values = np.full((16, 16), 0.4)
    indices = ordered_dither(values, generate("bayer_1"), BLACK_WHITE)
    assert np.array_equal(indices[:4, :4], indices[4:8, 8:12])
    assert np.array_equal(indices[:4, :4], indices[12:, 12:])

def test_rand_seed_is_reproducible(gradient):
    first = apply_dithering_algorithm("rand", gradient, BLACK_WHITE, seed=3)
    second = apply_dithering_algorithm("rand", gradient, BLACK_WHITE, seed=3)
    assert np.array_equal(first, second)

@pytest.mark.parametrize("kind", ["atkinson", "jarvis", "floyd"])
def test_error_diffusion_kinds_are_unsupported(kind, gradient):
    with pytest.raises(UnsupportedDitherKind) as exc_info:
        apply_dithering_algorithm(kind, gradient, BLACK_WHITE)
    assert isinstance(exc_info.value.__cause__, KernelNotImplemented)

def test_unknown_kind_surfaces_unchanged(gradient):
    with pytest.raises(UnknownDitherKind):
        apply_dithering_algorithm("sierra", gradient, BLACK_WHITE)
