"""
OBJ/MTL scene loader.

Reads a Wavefront OBJ file (and the MTL libraries it references) into a
Scene. Supported OBJ records:
- Vertices (v) and normals (vn); texture coordinates (vt) are skipped
- Faces (f) in v, v/vt, v/vt/vn and v//vn forms, fan-triangulated
- Material libraries (mtllib) and references (usemtl)
- Spheres (S x y z radius)
- Point lights (P x y z r g b)

Supported MTL records: newmtl, Ka, Kd, Ks, Ke, Ns, Ni and al (albedo).
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple
from dataclasses import dataclass

from .vec3 import Vec3, Point3, Color
from .shapes import Sphere, Triangle
from .materials import Material
from .objects import TriangleObject, SphereObject
from .lights import Light
from .scene import Scene, SceneParseError

logger = logging.getLogger(__name__)


@dataclass
class OBJVertex:
    """A face corner: position index and optional normal index (0-based)."""
    position_idx: int
    normal_idx: Optional[int] = None


def _floats(parts: List[str], count: int) -> List[float]:
    if len(parts) < count:
        raise ValueError(f"expected {count} numbers, got {len(parts)}")
    return [float(p) for p in parts[:count]]


def _records(path: Path) -> Iterator[Tuple[int, str, List[str]]]:
    """Yield (line number, command, arguments) for each non-blank record."""
    try:
        lines = path.read_text(encoding='utf-8').splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise SceneParseError(f"Cannot read {path.name}: {e}") from e

    for line_num, line in enumerate(lines, 1):
        parts = line.split('#', 1)[0].split()
        if parts:
            yield line_num, parts[0], parts[1:]


class MTLLoader:
    """Loader for Wavefront MTL material libraries."""

    def load(self, filename) -> Dict[str, Material]:
        """Load every material of an MTL file.

        Returns:
            Materials keyed by name, in file order
        """
        path = Path(filename)
        if not path.exists():
            raise SceneParseError(f"MTL file not found: {filename}")

        materials: Dict[str, Material] = {}
        current: Optional[dict] = None

        for line_num, cmd, args in _records(path):
            try:
                if cmd == 'newmtl':
                    if current is not None:
                        self._finish(current, materials, path)
                    current = {'name': ' '.join(args)}
                elif current is None:
                    raise ValueError(f"'{cmd}' before any newmtl")
                elif cmd == 'Ka':
                    current['ambient_color'] = Color(*_floats(args, 3))
                elif cmd == 'Kd':
                    current['diffuse_color'] = Color(*_floats(args, 3))
                elif cmd == 'Ks':
                    current['specular_color'] = Color(*_floats(args, 3))
                elif cmd == 'Ke':
                    current['intensity'] = Color(*_floats(args, 3))
                elif cmd == 'Ns':
                    current['specular_exponent'] = _floats(args, 1)[0]
                elif cmd == 'Ni':
                    current['refraction_index'] = _floats(args, 1)[0]
                elif cmd == 'al':
                    current['albedo'] = tuple(_floats(args, 3))
                else:
                    logger.debug("%s:%d: ignoring MTL record '%s'", path.name, line_num, cmd)
            except ValueError as e:
                raise SceneParseError(f"{path.name}:{line_num}: {e}") from e

        if current is not None:
            self._finish(current, materials, path)

        logger.debug("Loaded %d materials from %s", len(materials), path)
        return materials

    @staticmethod
    def _finish(fields: dict, materials: Dict[str, Material], path: Path) -> None:
        try:
            material = Material(**fields)
        except ValueError as e:
            raise SceneParseError(f"{path.name}: {e}") from e
        materials[material.name] = material


class OBJLoader:
    """Loader for OBJ scene files."""

    def __init__(self):
        self.vertices: List[Point3] = []
        self.normals: List[Vec3] = []
        self.current_material: Optional[Material] = None
        self.scene = Scene()

    def load(self, filename) -> Scene:
        """Load an OBJ file and return the scene it describes.

        Args:
            filename: Path to the OBJ file

        Returns:
            Scene with triangles, spheres, lights and materials
        """
        path = Path(filename)
        if not path.exists():
            raise SceneParseError(f"OBJ file not found: {filename}")

        self.vertices = []
        self.normals = []
        self.current_material = None
        self.scene = Scene()

        for line_num, cmd, args in _records(path):
            try:
                self._parse_record(path, cmd, args)
            except SceneParseError as e:
                raise SceneParseError(f"{path.name}:{line_num}: {e}") from e
            except (ValueError, IndexError) as e:
                raise SceneParseError(f"{path.name}:{line_num}: malformed '{cmd}' record: {e}") from e

        logger.info("Loaded %s: %r", path.name, self.scene)
        return self.scene

    def _parse_record(self, path: Path, cmd: str, args: List[str]) -> None:
        if cmd == 'v':
            self.vertices.append(Point3(*_floats(args, 3)))

        elif cmd == 'vn':
            self.normals.append(Vec3(*_floats(args, 3)).normalize())

        elif cmd == 'f':
            face_verts = self._parse_face(args)
            for tri in self._triangulate_face(face_verts):
                self.scene.add(tri)

        elif cmd == 'S':
            x, y, z, radius = _floats(args, 4)
            self.scene.add(SphereObject(Sphere(Point3(x, y, z), radius), self._material()))

        elif cmd == 'P':
            x, y, z, r, g, b = _floats(args, 6)
            self.scene.add(Light(Point3(x, y, z), Color(r, g, b)))

        elif cmd == 'mtllib':
            for name in args:
                for material in MTLLoader().load(path.parent / name).values():
                    self.scene.add_material(material)

        elif cmd == 'usemtl':
            name = ' '.join(args)
            if name not in self.scene.materials:
                raise SceneParseError(f"Unknown material: {name}")
            self.current_material = self.scene.materials[name]

        else:
            # vt, o, g, s and friends carry nothing the tracer uses
            logger.debug("Ignoring OBJ record '%s'", cmd)

    def _material(self) -> Material:
        if self.current_material is None:
            raise SceneParseError("Geometry before any usemtl")
        return self.current_material

    def _resolve(self, index: int, count: int, kind: str) -> int:
        """Convert a 1-based (or negative, relative) OBJ index to 0-based."""
        if index < 0:
            index = count + index + 1
        if index < 1 or index > count:
            raise SceneParseError(f"{kind} index {index} out of range (have {count})")
        return index - 1

    def _parse_face(self, face_parts: List[str]) -> List[OBJVertex]:
        """Parse face vertex indices (handles v, v/vt, v/vt/vn, v//vn formats)."""
        vertices = []

        for part in face_parts:
            indices = part.split('/')
            pos_idx = self._resolve(int(indices[0]), len(self.vertices), "Vertex")

            norm_idx = None
            if len(indices) > 2 and indices[2]:
                norm_idx = self._resolve(int(indices[2]), len(self.normals), "Normal")

            vertices.append(OBJVertex(pos_idx, norm_idx))

        return vertices

    def _triangulate_face(self, face_verts: List[OBJVertex]) -> List[TriangleObject]:
        """Triangulate a face (fan triangulation for convex polygons)."""
        if len(face_verts) < 3:
            raise SceneParseError(f"Face needs at least 3 vertices, got {len(face_verts)}")

        material = self._material()
        triangles = []

        # Fan triangulation: v0, v1, v2 then v0, v2, v3 etc.
        v0 = face_verts[0]
        for i in range(1, len(face_verts) - 1):
            corners = (v0, face_verts[i], face_verts[i + 1])
            triangle = Triangle(*(self.vertices[c.position_idx] for c in corners))

            normals = self._corner_normals(corners)
            triangles.append(TriangleObject(triangle, material, *normals))

        return triangles

    def _corner_normals(self, corners: Tuple[OBJVertex, ...]) -> Tuple[Optional[Vec3], ...]:
        if any(c.normal_idx is None for c in corners):
            return None, None, None
        return tuple(self.normals[c.normal_idx] for c in corners)


def load_obj(filename) -> Scene:
    """Convenience function to load an OBJ scene file.

    Args:
        filename: Path to the OBJ file

    Returns:
        The loaded Scene
    """
    loader = OBJLoader()
    return loader.load(filename)
