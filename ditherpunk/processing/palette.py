import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from ..constants import DEFAULT_PALETTE_HEXES, LUMA_WEIGHTS
from ..errors import InvalidColorFormat, OutOfRangeBias, PaletteTooSmall

RGBTuple = Tuple[int, int, int]

_HEX_RE = re.compile(r'[0-9a-fA-F]{6}')


@dataclass(frozen=True)
class PaletteEntry:
    """
    A target color plus its selection bias.

    magnitude (0..1) weights how strongly the color competes: the distance to
    it is divided by the magnitude, so 0 removes it from selection.
    offset (-1..1) shifts the luminance at which the color is picked.
    """
    color: RGBTuple
    magnitude: float = 1.0
    offset: float = 0.0

    @property
    def luminance(self) -> float:
        r, g, b = self.color
        wr, wg, wb = LUMA_WEIGHTS
        return (wr * r + wg * g + wb * b) / 255.0

    @property
    def effective_luminance(self) -> float:
        return self.luminance + self.offset

    def to_hex(self) -> str:
        return '#{:02X}{:02X}{:02X}'.format(*self.color)


@dataclass(frozen=True)
class Palette:
    """Ordered, immutable sequence of palette entries (at least two)."""
    entries: Tuple[PaletteEntry, ...]

    def __post_init__(self) -> None:
        if len(self.entries) < 2:
            raise PaletteTooSmall(
                f"Palette needs 2 or more colors, got {len(self.entries)}"
            )

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> PaletteEntry:
        return self.entries[index]

    def __iter__(self):
        return iter(self.entries)

    @property
    def colors(self) -> npt.NDArray[np.uint8]:
        return np.array([entry.color for entry in self.entries], dtype=np.uint8)

    @property
    def luminances(self) -> npt.NDArray[np.float64]:
        return np.array([entry.luminance for entry in self.entries], dtype=np.float64)

    @property
    def effective_luminances(self) -> npt.NDArray[np.float64]:
        return np.array([entry.effective_luminance for entry in self.entries], dtype=np.float64)

    @property
    def magnitudes(self) -> npt.NDArray[np.float64]:
        return np.array([entry.magnitude for entry in self.entries], dtype=np.float64)


def parse_color(text: str) -> RGBTuple:
    """
    Parse a 6 digit hex color, with or without a leading '#'.

    Raises:
        InvalidColorFormat: if the string is not exactly 6 hex digits.
    """
    if not isinstance(text, str):
        raise InvalidColorFormat(f"Color must be a hex string, got {text!r}")
    cleaned = text.strip()
    if cleaned.startswith('#'):
        cleaned = cleaned[1:]
    if not _HEX_RE.fullmatch(cleaned):
        raise InvalidColorFormat(f"Color must be 6 hex digits (e.g. #1A2B3C), got {text!r}")
    return (int(cleaned[0:2], 16), int(cleaned[2:4], 16), int(cleaned[4:6], 16))


def _bias_value(raw: Any, name: str, default: float, low: float, high: float) -> float:
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise OutOfRangeBias(f"{name} must be a number, got {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise OutOfRangeBias(f"{name} must be a number, got {raw!r}")
    if math.isnan(value) or not (low <= value <= high):
        raise OutOfRangeBias(f"{name} must be between {low} and {high}, got {raw!r}")
    return value


def make_entry(color: str, magnitude: Any = None, offset: Any = None) -> PaletteEntry:
    return PaletteEntry(
        color=parse_color(color),
        magnitude=_bias_value(magnitude, 'magnitude', 1.0, 0.0, 1.0),
        offset=_bias_value(offset, 'offset', 0.0, -1.0, 1.0),
    )


def parse_entry(raw: Any) -> PaletteEntry:
    """
    Build a palette entry from one raw config value.

    Accepted forms:
        "#RRGGBB"                       bare color, default bias
        "RRGGBB,magnitude[,offset]"     comma shorthand
        {"color": ..., "magnitude": ..., "offset": ...}   ("scale" = magnitude)
        (color, magnitude, offset)      1 to 3 item sequence
    """
    if isinstance(raw, PaletteEntry):
        return raw

    if isinstance(raw, str):
        parts = [part.strip() for part in raw.split(',')]
        if len(parts) > 3:
            raise InvalidColorFormat(f"Color entry must be color[,magnitude[,offset]], got {raw!r}")
        parts += [None] * (3 - len(parts))
        return make_entry(parts[0], parts[1], parts[2])

    if isinstance(raw, Mapping):
        if 'color' not in raw:
            raise InvalidColorFormat(f"Color entry is missing 'color': {raw!r}")
        magnitude = raw.get('magnitude', raw.get('scale'))
        return make_entry(raw['color'], magnitude, raw.get('offset'))

    if isinstance(raw, Sequence) and 1 <= len(raw) <= 3:
        items = list(raw) + [None] * (3 - len(raw))
        return make_entry(items[0], items[1], items[2])

    raise InvalidColorFormat(f"Unrecognised color entry: {raw!r}")


DEFAULT_PALETTE = Palette(tuple(PaletteEntry(parse_color(h)) for h in DEFAULT_PALETTE_HEXES))


def resolve(raw_entries: Optional[Iterable[Any]] = None) -> Palette:
    """
    Resolve raw config entries into a Palette.

    Without entries the built-in black/white palette is returned.
    """
    if raw_entries is None:
        return DEFAULT_PALETTE
    if isinstance(raw_entries, Palette):
        return raw_entries
    if isinstance(raw_entries, (str, Mapping)):
        raw_entries = [raw_entries]
    return Palette(tuple(parse_entry(raw) for raw in raw_entries))
