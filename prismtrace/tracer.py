"""
Recursive Whitted-style ray tracing core.

Implements:
- Nearest-hit queries across the two object kinds of a scene
- Hard shadows from point lights
- Phong shading with recursive reflection and refraction
- The depth-bounded recursive ray cast
"""

from __future__ import annotations
from typing import Iterable, Optional

from .vec3 import Vec3, Color, Point3, distance
from .ray import Ray
from .shapes import Intersection
from .objects import SceneObject
from .lights import Light
from .scene import Scene
from .options import RenderOptions, RenderMode

# Offset applied to secondary ray origins to avoid re-hitting the surface
SECONDARY_RAY_EPSILON = 1e-5

# A shadow ray must reproduce the shaded point within this distance
SHADOW_TOLERANCE = 1e-6


class NearestHit:
    """Nearest intersection found so far across successive queries.

    Owned by one ray cast (or shadow test) and offered candidates by each
    per-kind query in priority order. Ties keep the earlier candidate, so
    the kind queried first wins at equal distance.
    """

    __slots__ = ('intersection', 'obj')

    def __init__(self):
        self.intersection: Optional[Intersection] = None
        self.obj: Optional[SceneObject] = None

    def offer(self, obj: SceneObject, intersection: Intersection) -> bool:
        """Keep the candidate if it is the first or strictly nearer."""
        if self.intersection is None or intersection.distance < self.intersection.distance:
            self.intersection = intersection.copy()
            self.obj = obj
            return True
        return False

    def __bool__(self) -> bool:
        return self.intersection is not None


def find_nearest_intersection(
    objects: Iterable[SceneObject],
    ray: Ray,
    nearest: NearestHit
) -> Optional[SceneObject]:
    """Offer every object's intersection to the accumulator.

    Args:
        objects: Candidates of one kind, in scene order
        ray: The ray to test
        nearest: Accumulator updated in place

    Returns:
        The object of this collection that ended up accepted, or None
    """
    target = None
    for obj in objects:
        intersection = obj.intersect(ray)
        if intersection is not None and nearest.offer(obj, intersection):
            target = obj
    return target


def is_in_shadow(scene: Scene, light: Light, point: Point3) -> bool:
    """Check whether something blocks the path from a light to a point.

    A ray is cast from the light toward the point; the point is lit only
    when the nearest hit along that ray is the point itself. A shadow ray
    that hits nothing leaves the point lit.
    """
    light_ray = Ray(light.position, light.direction_to(point))
    nearest = NearestHit()
    find_nearest_intersection(scene.objects, light_ray, nearest)
    find_nearest_intersection(scene.sphere_objects, light_ray, nearest)
    if not nearest:
        return False
    return distance(point, nearest.intersection.position) > SHADOW_TOLERANCE


def shade(
    scene: Scene,
    view_ray: Ray,
    options: RenderOptions,
    intersection: Intersection,
    obj: SceneObject
) -> Color:
    """Compute the outgoing color at a visible intersection.

    Args:
        scene: Scene being rendered (for lights, shadows and recursion)
        view_ray: The ray that found the intersection
        options: Render options; depth is the remaining recursion budget
        intersection: The visible intersection, normal facing the viewer
        obj: The object owning the intersection

    Returns:
        Unclamped linear color
    """
    if options.mode is RenderMode.DEPTH:
        d = intersection.distance
        return Color(d, d, d)
    if options.mode is RenderMode.NORMAL:
        return Color.from_array(intersection.normal.to_array())

    material = obj.material
    position = intersection.position
    normal = intersection.normal

    general = material.intensity + material.ambient_color

    diffusion = Color()
    specular = Color()
    for light in scene.lights:
        if is_in_shadow(scene, light, position):
            continue
        light_dir = light.direction_to(position)
        l_d = max(0.0, (-light_dir).dot(normal))
        l_s = max(0.0, (-view_ray.direction).dot(light_dir.reflect(normal))) ** material.specular_exponent
        diffusion = diffusion + light.intensity * material.diffuse_color * l_d
        specular = specular + light.intensity * material.specular_color * l_s

    sub_options = RenderOptions(options.depth - 1, options.mode)
    inside = obj.is_inside(view_ray.direction, intersection)

    refracted = Color()
    if material.refractive_weight > 0:
        eta = 1.0 / material.refraction_index
        direction = view_ray.direction.refract(normal, eta)
        if direction is not None:
            direction = direction.normalize()
            origin = position + direction * SECONDARY_RAY_EPSILON
            refracted = ray_cast(scene, Ray(origin, direction), sub_options)
            # Light leaving the object is not attenuated a second time
            if not inside:
                refracted = refracted * material.refractive_weight

    reflected = Color()
    if material.reflective_weight > 0 and not inside:
        direction = view_ray.direction.reflect(normal).normalize()
        origin = position + normal * SECONDARY_RAY_EPSILON
        reflected = ray_cast(scene, Ray(origin, direction), sub_options)

    return (
        general
        + (diffusion + specular) * material.diffuse_weight
        + reflected * material.reflective_weight
        + refracted
    )


def ray_cast(scene: Scene, view_ray: Ray, options: RenderOptions) -> Color:
    """Trace a ray and return its color, recursing for secondary rays.

    Triangle-like objects are queried first, spheres second, sharing one
    accumulator; a sphere is visible only when strictly nearer than every
    triangle. Depth 0 and rays that hit nothing give black.
    """
    if options.depth == 0:
        return Color()

    nearest = NearestHit()
    triangle = find_nearest_intersection(scene.objects, view_ray, nearest)
    sphere = find_nearest_intersection(scene.sphere_objects, view_ray, nearest)

    if sphere is not None:
        return shade(scene, view_ray, options, nearest.intersection, sphere)
    if triangle is not None:
        intersection = nearest.intersection
        intersection.normal = triangle.shading_normal(view_ray, intersection)
        return shade(scene, view_ray, options, intersection, triangle)
    return Color()
