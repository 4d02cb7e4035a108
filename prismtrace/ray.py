"""
Rays: P(t) = origin + t * direction, with a unit direction so that t is
a true distance.
"""

from __future__ import annotations
from .vec3 import Vec3, Point3


class Ray:
    """An immutable ray; the direction is normalized on construction."""

    __slots__ = ('origin', 'direction')

    def __init__(self, origin: Point3, direction: Vec3):
        object.__setattr__(self, 'origin', origin)
        object.__setattr__(self, 'direction', direction.normalize())

    def __setattr__(self, name, value):
        raise AttributeError(f"Ray is immutable, cannot set '{name}'")

    def at(self, t: float) -> Point3:
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray({self.origin!r} -> {self.direction!r})"
