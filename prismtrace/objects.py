"""
Renderable scene objects.

An object binds a geometric primitive to a material and exposes the
capabilities the tracer needs from it:
- intersect: solve the ray against the primitive
- shading_normal: the normal to shade with at a hit point
- is_inside: whether the ray is travelling through the object's interior
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

from .vec3 import Vec3, Point3
from .ray import Ray
from .shapes import Intersection, Sphere, Triangle, face_normal
from .materials import Material


class SceneObject(ABC):
    """Abstract base class for objects the tracer can intersect and shade."""

    def __init__(self, material: Material):
        self.material = material

    @abstractmethod
    def intersect(self, ray: Ray) -> Optional[Intersection]:
        """Nearest intersection with a positive distance, or None."""
        pass

    def shading_normal(self, ray: Ray, intersection: Intersection) -> Vec3:
        """Normal used for shading; defaults to the solver's normal."""
        return intersection.normal

    @abstractmethod
    def is_inside(self, direction: Vec3, intersection: Intersection) -> bool:
        """True if a ray with this direction is leaving the object at the hit."""
        pass


class TriangleObject(SceneObject):
    """A mesh triangle with optional per-vertex normals."""

    def __init__(
        self,
        triangle: Triangle,
        material: Material,
        n0: Optional[Vec3] = None,
        n1: Optional[Vec3] = None,
        n2: Optional[Vec3] = None
    ):
        super().__init__(material)
        self.triangle = triangle
        if n0 is not None and n1 is not None and n2 is not None:
            self.vertex_normals = (n0.normalize(), n1.normalize(), n2.normalize())
        else:
            self.vertex_normals = None

    def intersect(self, ray: Ray) -> Optional[Intersection]:
        return self.triangle.hit(ray)

    def outward_normal(self, point: Point3) -> Vec3:
        """Interpolated vertex normal at a point, or the face normal."""
        if self.vertex_normals is None:
            return self.triangle.normal
        w0, w1, w2 = self.triangle.barycentric(point)
        n0, n1, n2 = self.vertex_normals
        return (n0 * w0 + n1 * w1 + n2 * w2).normalize()

    def shading_normal(self, ray: Ray, intersection: Intersection) -> Vec3:
        return face_normal(ray, self.outward_normal(intersection.position))

    def is_inside(self, direction: Vec3, intersection: Intersection) -> bool:
        return direction.dot(self.outward_normal(intersection.position)) > 0

    def __repr__(self) -> str:
        return f"TriangleObject({self.triangle}, material={self.material.name!r})"


class SphereObject(SceneObject):
    """A sphere with a material."""

    def __init__(self, sphere: Sphere, material: Material):
        super().__init__(material)
        self.sphere = sphere

    def intersect(self, ray: Ray) -> Optional[Intersection]:
        return self.sphere.hit(ray)

    def is_inside(self, direction: Vec3, intersection: Intersection) -> bool:
        return direction.dot(self.sphere.outward_normal(intersection.position)) > 0

    def __repr__(self) -> str:
        return f"SphereObject({self.sphere}, material={self.material.name!r})"
