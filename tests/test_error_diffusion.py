import sys
from pathlib import Path

# Add project root to path so we can import the package without installing
sys.path.append(str(Path(__file__).parent.parent))

import numpy as np
import pytest
from ditherpunk.processing.dither.error_diffusion import (
    ATKINSON,
    DIFFUSION_KERNELS,
    FLOYD_STEINBERG,
    JARVIS_JUDICE_NINKE,
    DiffusionKernel,
    DiffusionState,
    error_diffuse,
)
from ditherpunk.processing.palette import resolve

BLACK_WHITE = resolve()

def test_kernel_weight_sums():
    assert sum(w for _, _, w in FLOYD_STEINBERG.taps) == pytest.approx(1.0)
    assert sum(w for _, _, w in JARVIS_JUDICE_NINKE.taps) == pytest.approx(1.0)
    # Atkinson deliberately drops a quarter of the error
    assert sum(w for _, _, w in ATKINSON.taps) == pytest.approx(0.75)

def test_kernels_registered_by_kind():
    assert set(DIFFUSION_KERNELS) == {"floyd", "jarvis", "atkinson"}

@pytest.mark.parametrize("taps", [((0, 0, 1.0),), ((0, -1, 0.5),), ((-1, 1, 0.5),)])
def test_backward_taps_rejected(taps):
    with pytest.raises(ValueError):
        DiffusionKernel("bad", taps)

def test_state_margin_fits_kernel_reach():
    state = DiffusionState(10, 20, JARVIS_JUDICE_NINKE)
    assert state.left == 2
    assert state.errors.shape == (12, 24)
    assert DiffusionState(10, 20, FLOYD_STEINBERG).errors.shape == (11, 22)

def test_floyd_steinberg_small_example():
    """Hand-traced: the first pixel's residual pushes its right neighbour to white."""
    values = np.array([[0.4, 0.4], [0.0, 0.0]])
    assert error_diffuse(values, BLACK_WHITE).tolist() == [[0, 1], [0, 0]]

def test_error_does_not_wrap_to_next_row():
    """
    With one column the right tap falls off the image. If it leaked into the
    next row the second pixel would reach 0.6 and turn white.
    """
    values = np.array([[0.4], [0.3]])
    assert error_diffuse(values, BLACK_WHITE).tolist() == [[0], [0]]

def test_flat_inputs_stay_flat():
    assert not error_diffuse(np.zeros((8, 8)), BLACK_WHITE).any()
    assert error_diffuse(np.ones((8, 8)), BLACK_WHITE).all()

@pytest.mark.parametrize("kernel", [FLOYD_STEINBERG, JARVIS_JUDICE_NINKE])
def test_mean_luminance_preserved(kernel):
    values = np.tile(np.linspace(0.0, 1.0, 48), (32, 1))
    indices = error_diffuse(values, BLACK_WHITE, kernel)
    output = BLACK_WHITE.luminances[indices]

    assert abs(output.mean() - values.mean()) < 0.05

def test_mid_gray_is_half_on():
    indices = error_diffuse(np.full((32, 32), 0.5), BLACK_WHITE)
    assert abs(indices.mean() - 0.5) < 0.05

def test_multi_level_palette_uses_every_entry():
    palette = resolve(["#000000", "#555555", "#AAAAAA", "#FFFFFF"])
    values = np.tile(np.linspace(0.0, 1.0, 64), (16, 1))
    indices = error_diffuse(values, palette, ATKINSON)
    assert set(np.unique(indices)) == {0, 1, 2, 3}
