"""Palette, tone and dithering components of the engine."""
