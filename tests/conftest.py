"""Shared fixtures and scene builders for the tracer tests."""

import pytest

from prismtrace.vec3 import Point3, Color
from prismtrace.shapes import Sphere, Triangle
from prismtrace.materials import Material
from prismtrace.objects import TriangleObject, SphereObject


def make_material(**kwargs) -> Material:
    kwargs.setdefault("name", "test")
    return Material(**kwargs)


def sphere_at_distance(d: float, material: Material, radius: float = 1.0) -> SphereObject:
    """Sphere whose near surface is d units down -z from the origin."""
    return SphereObject(Sphere(Point3(0, 0, -(d + radius)), radius), material)


def wall_at_distance(d: float, material: Material) -> TriangleObject:
    """Large triangle in the plane z = -d, facing +z."""
    triangle = Triangle(Point3(-10, -10, -d), Point3(10, -10, -d), Point3(0, 10, -d))
    return TriangleObject(triangle, material)


@pytest.fixture
def emissive():
    def factory(r, g, b, **kwargs):
        return make_material(intensity=Color(r, g, b), albedo=(1.0, 0.0, 0.0), **kwargs)
    return factory
