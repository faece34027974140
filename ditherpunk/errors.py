"""Error taxonomy for the ditherpunk engine.

Every engine error is fatal for the current run; nothing is retried.
"""


class DitherpunkError(Exception):
    """Base class for all errors raised by ditherpunk."""


class ConfigError(DitherpunkError, ValueError):
    """The settings (file, CLI options or palette) are invalid."""


class InvalidColorFormat(ConfigError):
    """A palette color is not exactly 6 hex digits."""


class OutOfRangeBias(ConfigError):
    """A palette magnitude is outside [0, 1] or an offset outside [-1, 1]."""


class PaletteTooSmall(ConfigError):
    """A palette has fewer than two entries."""


class UnknownDitherKind(ConfigError):
    """The dithering identifier is not recognised at all."""


class KernelNotImplemented(DitherpunkError, NotImplementedError):
    """The dithering identifier is declared but has no implementation yet."""


class UnsupportedDitherKind(DitherpunkError):
    """Dispatch reached a dithering kind with no engine wired in."""


class DecodeError(DitherpunkError):
    """The input image could not be read or decoded."""


class EncodeError(DitherpunkError):
    """The output image could not be encoded or written."""
