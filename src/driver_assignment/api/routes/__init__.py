"""Route group exports."""

from . import algorithms, health

__all__ = ["algorithms", "health"]
