"""
Scene container.

Holds the renderable objects partitioned by kind, the lights and the
material table. A scene is built once by a loader and only read while
rendering.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Optional

from .materials import Material
from .objects import TriangleObject, SphereObject
from .lights import Light

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene loading."""
    pass


class Scene:
    """Objects (by kind), lights and materials of one scene."""

    def __init__(
        self,
        objects: Optional[Iterable[TriangleObject]] = None,
        sphere_objects: Optional[Iterable[SphereObject]] = None,
        lights: Optional[Iterable[Light]] = None,
        materials: Optional[Dict[str, Material]] = None
    ):
        self._objects: List[TriangleObject] = list(objects) if objects is not None else []
        self._sphere_objects: List[SphereObject] = list(sphere_objects) if sphere_objects is not None else []
        self._lights: List[Light] = list(lights) if lights is not None else []
        self._materials: Dict[str, Material] = dict(materials) if materials is not None else {}

    @property
    def objects(self) -> List[TriangleObject]:
        """Triangle-like objects, in load order."""
        return self._objects

    @property
    def sphere_objects(self) -> List[SphereObject]:
        """Sphere-like objects, in load order."""
        return self._sphere_objects

    @property
    def lights(self) -> List[Light]:
        return self._lights

    @property
    def materials(self) -> Dict[str, Material]:
        return self._materials

    def add(self, obj) -> None:
        """Add an object or light to the matching collection."""
        if isinstance(obj, SphereObject):
            self._sphere_objects.append(obj)
        elif isinstance(obj, TriangleObject):
            self._objects.append(obj)
        elif isinstance(obj, Light):
            self._lights.append(obj)
        else:
            raise TypeError(f"Cannot add {type(obj).__name__} to a scene")

    def add_material(self, material: Material) -> None:
        if material.name in self._materials:
            logger.warning("Material '%s' redefined", material.name)
        self._materials[material.name] = material

    def __len__(self) -> int:
        return len(self._objects) + len(self._sphere_objects)

    def __repr__(self) -> str:
        return (
            f"Scene(triangles={len(self._objects)}, spheres={len(self._sphere_objects)}, "
            f"lights={len(self._lights)}, materials={len(self._materials)})"
        )
