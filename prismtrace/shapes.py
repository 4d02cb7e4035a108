"""
Geometric primitives for the ray tracer.

Each primitive solves its own ray intersection and reports the result as
an Intersection whose normal faces against the incoming ray.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple
import math

from .vec3 import Vec3, Point3
from .ray import Ray


@dataclass
class Intersection:
    """A ray-surface hit.

    Attributes:
        distance: Distance along the (unit-direction) ray, always > 0
        position: The intersection point in world space
        normal: Unit surface normal, facing against the ray
    """
    distance: float
    position: Point3
    normal: Vec3

    def copy(self) -> Intersection:
        return Intersection(self.distance, self.position, self.normal)


def face_normal(ray: Ray, outward_normal: Vec3) -> Vec3:
    """Orient a normal so that it points against the ray direction."""
    if ray.direction.dot(outward_normal) < 0:
        return outward_normal
    return -outward_normal


class Sphere:
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float):
        if radius <= 0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self.center = center
        self.radius = radius

    def hit(self, ray: Ray, t_min: float = 0.0, t_max: float = math.inf) -> Optional[Intersection]:
        """Nearest root of |O + tD - C|² = r² with t_min < t <= t_max."""
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None

        sqrtd = math.sqrt(discriminant)
        for root in ((-half_b - sqrtd) / a, (-half_b + sqrtd) / a):
            if t_min < root <= t_max:
                point = ray.at(root)
                return Intersection(root, point, face_normal(ray, self.outward_normal(point)))
        return None

    def outward_normal(self, point: Point3) -> Vec3:
        """Radial unit normal at a point on the surface."""
        return (point - self.center).normalize()

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Triangle:
    """A flat triangle with precomputed edges and geometric normal."""

    def __init__(self, v0: Point3, v1: Point3, v2: Point3):
        self.v0 = v0
        self.v1 = v1
        self.v2 = v2
        self.e1 = v1 - v0
        self.e2 = v2 - v0
        self.normal = self.e1.cross(self.e2).normalize()

    def hit(self, ray: Ray, t_min: float = 0.0, t_max: float = math.inf) -> Optional[Intersection]:
        """Möller-Trumbore: solve O + tD = v0 + u·e1 + v·e2 for (t, u, v)."""
        p = ray.direction.cross(self.e2)
        det = self.e1.dot(p)
        if abs(det) < 1e-12:
            # Parallel to the plane
            return None

        inv_det = 1.0 / det
        s = ray.origin - self.v0
        u = s.dot(p) * inv_det
        if not 0.0 <= u <= 1.0:
            return None

        q = s.cross(self.e1)
        v = ray.direction.dot(q) * inv_det
        if v < 0.0 or u + v > 1.0:
            return None

        t = self.e2.dot(q) * inv_det
        if not t_min < t <= t_max:
            return None
        return Intersection(t, ray.at(t), face_normal(ray, self.normal))

    def barycentric(self, point: Point3) -> Tuple[float, float, float]:
        """Barycentric weights of a point in the triangle's plane.

        Returns:
            Weights (w0, w1, w2) for v0, v1, v2, summing to 1
        """
        full = self.e1.cross(self.e2)
        denom = full.length_squared()
        if denom == 0:
            return 1.0, 0.0, 0.0
        w1 = (point - self.v0).cross(self.e2).dot(full) / denom
        w2 = self.e1.cross(point - self.v0).dot(full) / denom
        return 1.0 - w1 - w2, w1, w2

    def __repr__(self) -> str:
        return f"Triangle({self.v0}, {self.v1}, {self.v2})"
