import dataclasses
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .constants import DITHER_KINDS, DitherKind
from .errors import ConfigError, UnknownDitherKind
from .processing.palette import DEFAULT_PALETTE, Palette, resolve

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

_REQUIRED_KEYS = (
    "processing_width",
    "processing_height",
    "brightness_delta",
    "contrast_delta",
    "dithering_type",
    "output_scale",
)


def _as_int(data: Mapping[str, Any], key: str, minimum: Optional[int] = None) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"Couldn't parse {key}: expected an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {value}")
    return value


def _as_number(data: Mapping[str, Any], key: str) -> float:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"Couldn't parse {key}: expected a number, got {value!r}")
    return float(value)


def parse_dither_kind(value: Any) -> DitherKind:
    if not isinstance(value, str) or value not in DITHER_KINDS:
        raise UnknownDitherKind(f"Not recognized dithering_type: {value!r}")
    return value  # type: ignore[return-value]


@dataclass(frozen=True)
class ProcessSettings:
    processing_width: int = 256
    processing_height: int = 256
    brightness_delta: int = 0
    contrast_delta: float = 0.0
    dithering_type: DitherKind = 'bayer_2'
    color_map: Palette = field(default=DEFAULT_PALETTE)
    output_scale: int = 4

    @classmethod
    def default(cls) -> "ProcessSettings":
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProcessSettings":
        """
        Validate a raw settings mapping (e.g. parsed JSON).

        Raises:
            ConfigError: missing or mistyped keys.
            UnknownDitherKind: unrecognised dithering_type.
            InvalidColorFormat, OutOfRangeBias, PaletteTooSmall: bad color_map.
        """
        if not isinstance(data, Mapping):
            raise ConfigError("Config must be a JSON object")
        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise ConfigError(f"Missing config keys: {', '.join(missing)}")

        color_map = data.get("color_map")
        if color_map is not None and not isinstance(color_map, list):
            raise ConfigError("color_map should be an array of 2 or more colors")

        return cls(
            processing_width=_as_int(data, "processing_width", minimum=1),
            processing_height=_as_int(data, "processing_height", minimum=1),
            brightness_delta=_as_int(data, "brightness_delta"),
            contrast_delta=_as_number(data, "contrast_delta"),
            dithering_type=parse_dither_kind(data["dithering_type"]),
            color_map=resolve(color_map),
            output_scale=_as_int(data, "output_scale", minimum=1),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processing_width": self.processing_width,
            "processing_height": self.processing_height,
            "brightness_delta": self.brightness_delta,
            "contrast_delta": self.contrast_delta,
            "dithering_type": self.dithering_type,
            "color_map": [
                {"color": entry.to_hex(), "magnitude": entry.magnitude, "offset": entry.offset}
                for entry in self.color_map
            ],
            "output_scale": self.output_scale,
        }

    def replace(self, **overrides: Any) -> "ProcessSettings":
        """Copy with overrides; None values are ignored. Overrides are re-validated."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        data = self.to_dict()
        data.update(changes)
        if isinstance(data["color_map"], Palette):
            palette = data.pop("color_map")
            return dataclasses.replace(ProcessSettings.from_dict(data), color_map=palette)
        return ProcessSettings.from_dict(data)

    @classmethod
    def read_config(cls, path: Union[str, Path]) -> "ProcessSettings":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Couldn't read config file {path}: {e}") from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def write_config(self, path: Union[str, Path]) -> Path:
        target = Path(path)
        try:
            target.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Couldn't write config file {path}: {e}") from e
        return target


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return logging.getLogger("ditherpunk")
