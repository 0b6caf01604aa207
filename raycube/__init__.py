"""Textured raycasting maze walker driven by .cub scene files."""

__version__ = "0.1.0"
__all__ = ["colors", "xpm", "lines", "scene", "render", "game"]