from typing import Literal, Tuple

# Dithering kinds
DitherKind = Literal[
    'rand', 'bayer_0', 'bayer_1', 'bayer_2', 'bayer_3', 'blue_noise',
    'atkinson', 'jarvis', 'floyd'
]

ORDERED_KINDS: Tuple[str, ...] = ('rand', 'bayer_0', 'bayer_1', 'bayer_2', 'bayer_3', 'blue_noise')
ERROR_DIFFUSION_KINDS: Tuple[str, ...] = ('atkinson', 'jarvis', 'floyd')
DITHER_KINDS: Tuple[str, ...] = ORDERED_KINDS + ERROR_DIFFUSION_KINDS

# Highest supported Bayer order (bayer_3 is 16x16)
MAX_BAYER_ORDER: int = 3

# Side length of the 'rand' threshold map when no image shape is given
RANDOM_MAP_SIZE: int = 64

# Blue noise texture
BLUE_NOISE_SIZE: int = 128
BLUE_NOISE_SIGMA: float = 1.5
BLUE_NOISE_SEED: int = 0x0D17

# Scale of the (threshold - 0.5) term for each ordered kind. A map with L
# threshold levels uses 1 - 1/L, so a zero threshold still leaves pure white
# above mid-gray and the top threshold leaves pure black below it.
ORDERED_STRENGTH = {
    'rand': 1.0 - 1.0 / RANDOM_MAP_SIZE ** 2,
    'bayer_0': 1.0 - 1.0 / 4,
    'bayer_1': 1.0 - 1.0 / 16,
    'bayer_2': 1.0 - 1.0 / 64,
    'bayer_3': 1.0 - 1.0 / 256,
    'blue_noise': 1.0 - 1.0 / BLUE_NOISE_SIZE ** 2,
}

# Error diffusion weight tables: (dy, dx, weight)
# Floyd-Steinberg
#       X   7
#   3   5   1      (/16)
FLOYD_STEINBERG_TAPS = (
    (0, 1, 7 / 16),
    (1, -1, 3 / 16), (1, 0, 5 / 16), (1, 1, 1 / 16),
)

# Jarvis-Judice-Ninke
#           X   7   5
#   3   5   7   5   3
#   1   3   5   3   1  (/48)
JARVIS_JUDICE_NINKE_TAPS = (
    (0, 1, 7 / 48), (0, 2, 5 / 48),
    (1, -2, 3 / 48), (1, -1, 5 / 48), (1, 0, 7 / 48), (1, 1, 5 / 48), (1, 2, 3 / 48),
    (2, -2, 1 / 48), (2, -1, 3 / 48), (2, 0, 5 / 48), (2, 1, 3 / 48), (2, 2, 1 / 48),
)

# Atkinson
#       X   1   1
#   1   1   1
#       1          (/8, the remaining 2/8 is dropped)
ATKINSON_TAPS = (
    (0, 1, 1 / 8), (0, 2, 1 / 8),
    (1, -1, 1 / 8), (1, 0, 1 / 8), (1, 1, 1 / 8),
    (2, 0, 1 / 8),
)

# ITU-R 601 luma weights
LUMA_WEIGHTS: Tuple[float, float, float] = (0.299, 0.587, 0.114)

# Distances closer than this are treated as equal during palette selection
TIE_EPSILON: float = 1e-9

# Default palette: pure black and pure white
DEFAULT_PALETTE_HEXES: Tuple[str, ...] = ('#000000', '#FFFFFF')
