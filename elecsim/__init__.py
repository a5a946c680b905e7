"""Tile-based electricity simulation on a square grid, with a probe runner."""

__version__ = "0.1.0"
__all__ = ["grid", "prober", "tiles"]