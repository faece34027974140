"""ditherpunk: turn photos into low-color dithered pixel art."""

__version__ = "0.1.0"
