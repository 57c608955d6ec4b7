"""Computer-controlled opponents for a turn-based grid-physics racing game."""

__version__ = "0.1.0"
