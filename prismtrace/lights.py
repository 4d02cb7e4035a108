"""
Light sources for the ray tracer.

Point lights only: a position and a color intensity, no geometry and no
distance falloff. Occlusion is decided by the tracer's shadow test.
"""

from __future__ import annotations
from dataclasses import dataclass

from .vec3 import Vec3, Point3, Color


@dataclass
class Light:
    """A point light source.

    Attributes:
        position: Position of the light
        intensity: Color/weight of the emitted light
    """
    position: Point3
    intensity: Color

    def direction_to(self, point: Point3) -> Vec3:
        """Unit direction from the light toward a point."""
        return (point - self.position).normalize()
