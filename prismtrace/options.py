"""
Render configuration.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class RenderMode(Enum):
    """What the color of a pixel means."""
    DEPTH = "depth"
    NORMAL = "normal"
    FULL = "full"


@dataclass
class RenderOptions:
    """Configuration for a render pass.

    Attributes:
        depth: Recursion bound for primary + reflected/refracted rays (0 renders black)
        mode: Output semantics (raw depth, normal visualization or full lighting)
    """
    depth: int = 4
    mode: RenderMode = RenderMode.FULL

    def __post_init__(self):
        if isinstance(self.mode, str):
            try:
                self.mode = RenderMode(self.mode.lower())
            except ValueError:
                raise ValueError(f"Unknown render mode: {self.mode}") from None
        if not isinstance(self.depth, int) or isinstance(self.depth, bool):
            raise ValueError(f"Render depth must be an integer, got {self.depth!r}")
        if self.depth < 0:
            raise ValueError(f"Render depth must be non-negative, got {self.depth}")
