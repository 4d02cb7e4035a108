"""
prismtrace - A Python Whitted Ray Tracer

Renders OBJ/MTL (or YAML/JSON) scenes with:
- Phong ambient, diffuse and specular lighting from point lights
- Hard shadows
- Recursive mirror reflection and refraction with a depth bound
- Depth and normal visualization modes
- Extended Reinhard tone mapping and gamma correction
"""

__version__ = "0.1.0"
__author__ = "prismtrace Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import Intersection, Sphere, Triangle
from .materials import Material
from .objects import SceneObject, TriangleObject, SphereObject
from .lights import Light
from .scene import Scene, SceneParseError
from .options import RenderMode, RenderOptions
from .camera import Camera, CameraOptions
from .tracer import NearestHit, find_nearest_intersection, is_in_shadow, shade, ray_cast
from .postprocess import post_process, tone_map, normalize_depth, pack_normal
from .obj_loader import OBJLoader, MTLLoader, load_obj
from .scene_parser import SceneParser, load_scene, parse_scene
from .renderer import Renderer, render
