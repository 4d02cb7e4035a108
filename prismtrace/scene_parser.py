"""
YAML / JSON scene descriptions.

A scene file is a mapping with named materials, spheres and triangles
that reference them by name, point lights, and optional camera and render
sections (the command line may override both).

Example scene file:
```yaml
camera:
  width: 640
  height: 480
  fov: 60            # degrees
  look_from: [0, 1, 4]
  look_to: [0, 0, 0]

render:
  depth: 4
  mode: full

materials:
  glass:
    ambient: [0, 0, 0]
    specular: [1, 1, 1]
    exponent: 125
    ior: 1.5
    albedo: [0, 0.3, 0.7]

objects:
  - type: sphere
    center: [0, 0, 0]
    radius: 1
    material: glass

lights:
  - position: [0, 10, 0]
    intensity: [1, 1, 1]
```
"""

from __future__ import annotations
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .vec3 import Vec3, Point3, Color
from .shapes import Sphere, Triangle
from .materials import Material
from .objects import TriangleObject, SphereObject
from .lights import Light
from .scene import Scene, SceneParseError
from .camera import CameraOptions
from .options import RenderOptions
from .obj_loader import load_obj

logger = logging.getLogger(__name__)


class SceneParser:
    """Builds a Scene, plus optional camera and render options, from a description."""

    def __init__(self):
        self.scene = Scene()
        self.camera_options: Optional[CameraOptions] = None
        self.render_options: Optional[RenderOptions] = None

    def parse_file(self, filepath) -> Tuple[Scene, Optional[CameraOptions], Optional[RenderOptions]]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, camera options, render options); the options are
            None when the file has no such section
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        try:
            content = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise SceneParseError(f"Cannot read {path.name}: {e}") from e

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SceneParseError(f"Cannot parse {path.name}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"{path.name}: top level must be a mapping")
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[Scene, Optional[CameraOptions], Optional[RenderOptions]]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera options, render options)
        """
        materials = data.get('materials') or {}
        if not isinstance(materials, dict):
            raise SceneParseError("'materials' must be a mapping of name to material")
        # Parse materials first (objects reference them)
        for name, mat_data in materials.items():
            self.scene.add_material(self._parse_material(name, mat_data))

        try:
            for obj_data in data.get('objects') or []:
                self._parse_object(obj_data)

            for light_data in data.get('lights') or []:
                self.scene.add(Light(
                    self._parse_vec3(light_data.get('position', [0, 0, 0])),
                    self._parse_color(light_data.get('intensity', [1, 1, 1]))
                ))
        except (AttributeError, TypeError, ValueError) as e:
            raise SceneParseError(f"Malformed scene entry: {e}") from e

        if 'camera' in data:
            self.camera_options = self._parse_camera(data['camera'])

        if 'render' in data:
            try:
                self.render_options = RenderOptions(
                    depth=data['render'].get('depth', 4),
                    mode=data['render'].get('mode', 'full')
                )
            except (AttributeError, TypeError, ValueError) as e:
                raise SceneParseError(f"Invalid render section: {e}") from e

        logger.info("Parsed scene: %r", self.scene)
        return self.scene, self.camera_options, self.render_options

    def _parse_triple(self, data: Any, keys: str, kind: str) -> Tuple[float, float, float]:
        """Read three numbers from a list or a mapping keyed by `keys`."""
        if isinstance(data, dict):
            data = [data.get(k, 0) for k in keys]
        if not isinstance(data, (list, tuple)) or len(data) != 3:
            raise SceneParseError(f"{kind} needs 3 components, got {data!r}")
        try:
            return tuple(float(c) for c in data)
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Bad {kind} component in {data!r}") from e

    def _parse_vec3(self, data: Any) -> Vec3:
        return Vec3(*self._parse_triple(data, 'xyz', 'Vector'))

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color; hex strings like '#ff8000' are accepted too."""
        if isinstance(data, str) and len(data) == 7 and data.startswith('#'):
            try:
                data = [int(data[i:i + 2], 16) / 255.0 for i in (1, 3, 5)]
            except ValueError as e:
                raise SceneParseError(f"Bad hex color {data!r}") from e
        return Color(*self._parse_triple(data, 'rgb', 'Color'))

    def _parse_material(self, name: str, mat_data: Dict[str, Any]) -> Material:
        try:
            return Material(
                name=name,
                ambient_color=self._parse_color(mat_data.get('ambient', [0, 0, 0])),
                diffuse_color=self._parse_color(mat_data.get('diffuse', [0, 0, 0])),
                specular_color=self._parse_color(mat_data.get('specular', [0, 0, 0])),
                intensity=self._parse_color(mat_data.get('intensity', [0, 0, 0])),
                specular_exponent=float(mat_data.get('exponent', 0.0)),
                refraction_index=float(mat_data.get('ior', 1.0)),
                albedo=tuple(mat_data.get('albedo', (1.0, 0.0, 0.0)))
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid material '{name}': {e}") from e

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name."""
        if not isinstance(mat_ref, str):
            raise SceneParseError(f"Invalid material reference: {mat_ref}")
        if mat_ref not in self.scene.materials:
            raise SceneParseError(f"Unknown material: {mat_ref}")
        return self.scene.materials[mat_ref]

    def _parse_object(self, obj_data: Dict[str, Any]) -> None:
        obj_type = obj_data.get('type', 'sphere').lower()
        material = self._get_material(obj_data.get('material'))

        if obj_type == 'sphere':
            center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
            sphere = Sphere(center, float(obj_data.get('radius', 1.0)))
            self.scene.add(SphereObject(sphere, material))

        elif obj_type == 'triangle':
            try:
                vertices = [self._parse_vec3(obj_data[k]) for k in ('v0', 'v1', 'v2')]
            except KeyError as e:
                raise SceneParseError(f"Triangle is missing vertex {e}") from e
            normals = [None, None, None]
            if 'normals' in obj_data:
                normals = [self._parse_vec3(n) for n in obj_data['normals']]
                if len(normals) != 3:
                    raise SceneParseError("Triangle needs exactly 3 vertex normals")
            self.scene.add(TriangleObject(Triangle(*vertices), material, *normals))

        else:
            raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_camera(self, camera_data: Dict[str, Any]) -> CameraOptions:
        try:
            return CameraOptions(
                screen_width=int(camera_data.get('width', 640)),
                screen_height=int(camera_data.get('height', 480)),
                fov=math.radians(float(camera_data.get('fov', 90))),
                look_from=self._parse_vec3(camera_data.get('look_from', [0, 0, 0])),
                look_to=self._parse_vec3(camera_data.get('look_to', [0, 0, -1]))
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid camera section: {e}") from e


def load_scene(filepath) -> Scene:
    """Load a scene from an OBJ, YAML or JSON file.

    Args:
        filepath: Path to the scene file

    Returns:
        The loaded Scene
    """
    if Path(filepath).suffix.lower() == '.obj':
        return load_obj(filepath)
    scene, _, _ = SceneParser().parse_file(filepath)
    return scene


def parse_scene(data: Dict[str, Any]) -> Tuple[Scene, Optional[CameraOptions], Optional[RenderOptions]]:
    """Convenience function to parse a scene from a dictionary."""
    parser = SceneParser()
    return parser.parse_dict(data)
