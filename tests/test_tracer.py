"""Tests for the recursive tracing core."""

import pytest
import numpy as np

from prismtrace import tracer
from prismtrace.vec3 import Vec3, Point3, Color
from prismtrace.ray import Ray
from prismtrace.shapes import Intersection, Sphere, Triangle
from prismtrace.objects import TriangleObject, SphereObject
from prismtrace.lights import Light
from prismtrace.scene import Scene
from prismtrace.options import RenderOptions, RenderMode
from prismtrace.tracer import (
    NearestHit, find_nearest_intersection, is_in_shadow, shade, ray_cast
)

from conftest import make_material, sphere_at_distance, wall_at_distance


FORWARD = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))


def assert_color(color, expected):
    np.testing.assert_allclose(color.to_array(), expected, atol=1e-9)


class TestNearestHit:
    """Test the nearest-hit accumulator."""

    def test_starts_empty(self):
        nearest = NearestHit()
        assert not nearest
        assert nearest.intersection is None
        assert nearest.obj is None

    def test_first_offer_accepted(self):
        nearest = NearestHit()
        hit = Intersection(5.0, Point3(0, 0, -5), Vec3(0, 0, 1))
        assert nearest.offer("a", hit)
        assert nearest.obj == "a"
        assert nearest.intersection.distance == 5.0

    def test_keeps_copy(self):
        nearest = NearestHit()
        hit = Intersection(5.0, Point3(0, 0, -5), Vec3(0, 0, 1))
        nearest.offer("a", hit)
        hit.distance = 1.0
        assert nearest.intersection.distance == 5.0

    def test_tie_keeps_earlier(self):
        nearest = NearestHit()
        nearest.offer("a", Intersection(2.0, Point3(0, 0, -2), Vec3(0, 0, 1)))
        assert not nearest.offer("b", Intersection(2.0, Point3(0, 0, -2), Vec3(0, 0, 1)))
        assert nearest.obj == "a"


class TestFindNearestIntersection:
    """Test the per-kind intersection query."""

    def test_empty_collection(self):
        nearest = NearestHit()
        assert find_nearest_intersection([], FORWARD, nearest) is None
        assert not nearest

    def test_empty_collection_leaves_best_untouched(self):
        nearest = NearestHit()
        hit = Intersection(3.0, Point3(0, 0, -3), Vec3(0, 0, 1))
        nearest.offer("a", hit)
        assert find_nearest_intersection([], FORWARD, nearest) is None
        assert nearest.obj == "a"
        assert nearest.intersection.distance == 3.0

    @pytest.mark.parametrize("order", [(1, 2, 3), (3, 2, 1), (2, 3, 1)])
    def test_collinear_returns_nearest(self, order):
        material = make_material()
        spheres = {d: sphere_at_distance(d, material, radius=0.25) for d in order}
        nearest = NearestHit()
        found = find_nearest_intersection([spheres[d] for d in order], FORWARD, nearest)
        assert found is spheres[1]
        assert nearest.intersection.distance == pytest.approx(1.0)

    def test_miss_returns_none(self):
        material = make_material()
        off_axis = SphereObject(Sphere(Point3(5, 0, -5), 1.0), material)
        nearest = NearestHit()
        assert find_nearest_intersection([off_axis], FORWARD, nearest) is None

    def test_second_kind_needs_strictly_nearer(self):
        material = make_material()
        wall = wall_at_distance(2.0, material)
        far_sphere = sphere_at_distance(3.0, material)
        nearest = NearestHit()
        assert find_nearest_intersection([wall], FORWARD, nearest) is wall
        assert find_nearest_intersection([far_sphere], FORWARD, nearest) is None
        assert nearest.obj is wall

    def test_second_kind_wins_when_nearer(self):
        material = make_material()
        wall = wall_at_distance(2.0, material)
        near_sphere = sphere_at_distance(1.0, material)
        nearest = NearestHit()
        find_nearest_intersection([wall], FORWARD, nearest)
        assert find_nearest_intersection([near_sphere], FORWARD, nearest) is near_sphere
        assert nearest.intersection.distance == pytest.approx(1.0)

    def test_first_kind_wins_tie(self):
        material = make_material()
        # Exact arithmetic: both surfaces at distance 2
        wall = TriangleObject(Triangle(Point3(-1, -1, -2), Point3(1, -1, -2), Point3(0, 1, -2)), material)
        sphere = SphereObject(Sphere(Point3(0, 0, -3), 1.0), material)
        nearest = NearestHit()
        find_nearest_intersection([wall], FORWARD, nearest)
        assert nearest.intersection.distance == 2.0
        assert find_nearest_intersection([sphere], FORWARD, nearest) is None
        assert nearest.obj is wall


class TestShadow:
    """Test the shadow test."""

    @pytest.fixture
    def ball(self):
        return SphereObject(Sphere(Point3(0, 0, 0), 1.0), make_material())

    def test_lit_point(self, ball):
        scene = Scene(sphere_objects=[ball])
        light = Light(Point3(0, 5, 0), Color(1, 1, 1))
        assert is_in_shadow(scene, light, Point3(0, 1, 0)) is False

    def test_blocked_point(self, ball):
        blocker = SphereObject(Sphere(Point3(0, 3, 0), 0.5), make_material())
        scene = Scene(sphere_objects=[ball, blocker])
        light = Light(Point3(0, 5, 0), Color(1, 1, 1))
        assert is_in_shadow(scene, light, Point3(0, 1, 0)) is True

    def test_blocked_by_other_kind(self, ball):
        blocker = TriangleObject(
            Triangle(Point3(-2, 3, -2), Point3(0, 3, 2), Point3(2, 3, -2)),
            make_material()
        )
        scene = Scene(objects=[blocker], sphere_objects=[ball])
        light = Light(Point3(0, 5, 0), Color(1, 1, 1))
        assert is_in_shadow(scene, light, Point3(0, 1, 0)) is True

    def test_far_side_self_shadowed(self, ball):
        scene = Scene(sphere_objects=[ball])
        light = Light(Point3(0, 5, 0), Color(1, 1, 1))
        assert is_in_shadow(scene, light, Point3(0, -1, 0)) is True

    def test_nothing_hit_is_lit(self):
        light = Light(Point3(0, 5, 0), Color(1, 1, 1))
        assert is_in_shadow(Scene(), light, Point3(0, 0, 0)) is False


class TestShade:
    """Test the shading evaluator."""

    VIEW = Ray(Point3(0, 3, 0), Vec3(0, -1, 0))

    def _top_hit(self, obj):
        return obj.intersect(self.VIEW)

    def test_depth_mode(self):
        obj = SphereObject(Sphere(Point3(0, 0, 0), 1.0), make_material())
        color = shade(Scene(sphere_objects=[obj]), self.VIEW, RenderOptions(1, RenderMode.DEPTH),
                      self._top_hit(obj), obj)
        assert_color(color, [2.0, 2.0, 2.0])

    def test_normal_mode(self):
        obj = SphereObject(Sphere(Point3(0, 0, 0), 1.0), make_material())
        color = shade(Scene(sphere_objects=[obj]), self.VIEW, RenderOptions(1, RenderMode.NORMAL),
                      self._top_hit(obj), obj)
        assert_color(color, [0.0, 1.0, 0.0])

    def test_base_term_only(self):
        material = make_material(intensity=Color(0.1, 0.2, 0.3), ambient_color=Color(0.3, 0.2, 0.1))
        obj = SphereObject(Sphere(Point3(0, 0, 0), 1.0), material)
        color = shade(Scene(sphere_objects=[obj]), self.VIEW, RenderOptions(1), self._top_hit(obj), obj)
        assert_color(color, [0.4, 0.4, 0.4])

    def test_diffuse_from_light_above(self):
        material = make_material(diffuse_color=Color(0.5, 0.25, 1.0))
        obj = SphereObject(Sphere(Point3(0, 0, 0), 1.0), material)
        scene = Scene(sphere_objects=[obj], lights=[Light(Point3(0, 5, 0), Color(1, 1, 0.5))])
        color = shade(scene, self.VIEW, RenderOptions(1), self._top_hit(obj), obj)
        assert_color(color, [0.5, 0.25, 0.5])

    def test_specular_highlight(self):
        material = make_material(specular_color=Color(1, 1, 1), specular_exponent=20)
        obj = SphereObject(Sphere(Point3(0, 0, 0), 1.0), material)
        scene = Scene(sphere_objects=[obj], lights=[Light(Point3(0, 5, 0), Color(1, 1, 1))])
        color = shade(scene, self.VIEW, RenderOptions(1), self._top_hit(obj), obj)
        assert_color(color, [1.0, 1.0, 1.0])

    def test_diffuse_weight_scales_local_terms(self):
        material = make_material(diffuse_color=Color(1, 1, 1), albedo=(0.5, 0.0, 0.0),
                                 ambient_color=Color(0.1, 0.1, 0.1))
        obj = SphereObject(Sphere(Point3(0, 0, 0), 1.0), material)
        scene = Scene(sphere_objects=[obj], lights=[Light(Point3(0, 5, 0), Color(1, 1, 1))])
        color = shade(scene, self.VIEW, RenderOptions(1), self._top_hit(obj), obj)
        # Base term is not weighted by the diffuse albedo
        assert_color(color, [0.6, 0.6, 0.6])

    def test_lights_sum(self):
        material = make_material(diffuse_color=Color(1, 1, 1))
        obj = SphereObject(Sphere(Point3(0, 0, 0), 1.0), material)
        lights = [Light(Point3(0, 5, 0), Color(0.25, 0, 0)), Light(Point3(0, 9, 0), Color(0, 0.5, 0))]
        scene = Scene(sphere_objects=[obj], lights=lights)
        color = shade(scene, self.VIEW, RenderOptions(1), self._top_hit(obj), obj)
        assert_color(color, [0.25, 0.5, 0.0])

    def test_occluded_light_contributes_nothing(self):
        material = make_material(diffuse_color=Color(1, 1, 1), specular_color=Color(1, 1, 1),
                                 specular_exponent=5, ambient_color=Color(0.05, 0.05, 0.05))
        obj = SphereObject(Sphere(Point3(0, 0, 0), 1.0), material)
        view = Ray(Point3(0, 2, 0), Vec3(0, -1, 0))
        blocker = SphereObject(Sphere(Point3(0, 3.5, 0), 0.5), make_material())
        scene = Scene(sphere_objects=[obj, blocker], lights=[Light(Point3(0, 5, 0), Color(1, 1, 1))])
        color = shade(scene, view, RenderOptions(1), obj.intersect(view), obj)
        assert_color(color, [0.05, 0.05, 0.05])

    def test_light_behind_surface_clamped(self):
        material = make_material(diffuse_color=Color(1, 1, 1))
        wall = wall_at_distance(2.0, material)
        # Light on the far side of the wall, shadow ray reaches the point from behind
        scene = Scene(objects=[wall], lights=[Light(Point3(0, 0, -5), Color(1, 1, 1))])
        hit = wall.intersect(FORWARD)
        color = shade(scene, FORWARD, RenderOptions(1), hit, wall)
        assert_color(color, [0.0, 0.0, 0.0])

    def test_total_internal_reflection_skips_refraction(self, monkeypatch):
        calls = []
        monkeypatch.setattr(tracer, "ray_cast", lambda *args: calls.append(args) or Color())
        material = make_material(albedo=(0.0, 0.0, 1.0), refraction_index=0.5)
        obj = TriangleObject(Triangle(Point3(-5, 0, -5), Point3(0, 0, 5), Point3(5, 0, -5)), material)
        view = Ray(Point3(-1, 0.2, 0), Vec3(1, -0.2, 0))
        hit = obj.intersect(view)
        assert hit is not None
        color = shade(Scene(objects=[obj]), view, RenderOptions(3), hit, obj)
        assert calls == []
        assert_color(color, [0.0, 0.0, 0.0])

    def test_secondary_rays_get_one_less_depth(self, monkeypatch):
        depths = []

        def fake_cast(scene, ray, options):
            depths.append(options.depth)
            return Color()

        monkeypatch.setattr(tracer, "ray_cast", fake_cast)
        material = make_material(albedo=(0.0, 0.5, 0.5), refraction_index=1.5)
        obj = SphereObject(Sphere(Point3(0, 0, -3), 1.0), material)
        shade(Scene(sphere_objects=[obj]), FORWARD, RenderOptions(5), obj.intersect(FORWARD), obj)
        assert depths == [4, 4]


class TestRayCast:
    """Test the recursive ray cast driver."""

    def test_depth_zero_is_black(self, emissive):
        scene = Scene(sphere_objects=[sphere_at_distance(2.0, emissive(1, 1, 1))])
        assert_color(ray_cast(scene, FORWARD, RenderOptions(0)), [0, 0, 0])

    def test_miss_is_black(self):
        assert_color(ray_cast(Scene(), FORWARD, RenderOptions(3)), [0, 0, 0])

    def test_sphere_in_front_of_wall(self, emissive):
        scene = Scene(
            objects=[wall_at_distance(5.0, emissive(1, 0, 0))],
            sphere_objects=[sphere_at_distance(2.0, emissive(0, 1, 0))]
        )
        assert_color(ray_cast(scene, FORWARD, RenderOptions(1)), [0, 1, 0])

    def test_wall_in_front_of_sphere(self, emissive):
        scene = Scene(
            objects=[wall_at_distance(2.0, emissive(1, 0, 0))],
            sphere_objects=[sphere_at_distance(5.0, emissive(0, 1, 0))]
        )
        assert_color(ray_cast(scene, FORWARD, RenderOptions(1)), [1, 0, 0])

    def test_tie_prefers_triangle(self, emissive):
        wall = TriangleObject(
            Triangle(Point3(-1, -1, -2), Point3(1, -1, -2), Point3(0, 1, -2)), emissive(1, 0, 0)
        )
        ball = SphereObject(Sphere(Point3(0, 0, -3), 1.0), emissive(0, 1, 0))
        scene = Scene(objects=[wall], sphere_objects=[ball])
        assert_color(ray_cast(scene, FORWARD, RenderOptions(1)), [1, 0, 0])

    def test_depth_mode_reports_distance(self, emissive):
        scene = Scene(sphere_objects=[sphere_at_distance(2.5, emissive(1, 1, 1))])
        assert_color(ray_cast(scene, FORWARD, RenderOptions(1, RenderMode.DEPTH)), [2.5, 2.5, 2.5])

    def test_triangle_normal_fixed_up(self):
        triangle = Triangle(Point3(-1, -1, -2), Point3(1, -1, -2), Point3(0, 1, -2))
        bent = Vec3(1, 0, 1)
        obj = TriangleObject(triangle, make_material(), bent, bent, bent)
        color = ray_cast(Scene(objects=[obj]), FORWARD, RenderOptions(1, RenderMode.NORMAL))
        assert_color(color, bent.normalize().to_array())

    def test_triangle_back_face_normal_faces_viewer(self):
        # Wound so the face normal points away from the camera
        triangle = Triangle(Point3(-1, -1, -2), Point3(0, 1, -2), Point3(1, -1, -2))
        obj = TriangleObject(triangle, make_material())
        color = ray_cast(Scene(objects=[obj]), FORWARD, RenderOptions(1, RenderMode.NORMAL))
        assert_color(color, [0, 0, 1])

    def test_mirror_reflects_emitter(self, emissive):
        mirror = wall_at_distance(5.0, make_material(albedo=(0.0, 1.0, 0.0)))
        behind = SphereObject(Sphere(Point3(0, 0, 5), 1.0), emissive(1, 0, 0))
        scene = Scene(objects=[mirror], sphere_objects=[behind])
        assert_color(ray_cast(scene, FORWARD, RenderOptions(2)), [1, 0, 0])
        # Not enough depth left for the reflected ray
        assert_color(ray_cast(scene, FORWARD, RenderOptions(1)), [0, 0, 0])

    def test_refraction_through_glass_ball(self, emissive):
        glass = SphereObject(
            Sphere(Point3(0, 0, -3), 1.0),
            make_material(albedo=(0.0, 0.0, 0.5), refraction_index=1.0)
        )
        backdrop = SphereObject(Sphere(Point3(0, 0, -10), 2.0), emissive(0, 1, 0))
        scene = Scene(sphere_objects=[glass, backdrop])
        # Weighted once on entry, unweighted on exit
        assert_color(ray_cast(scene, FORWARD, RenderOptions(3)), [0, 0.5, 0])
        assert_color(ray_cast(scene, FORWARD, RenderOptions(2)), [0, 0, 0])

    def test_no_reflection_from_inside(self, emissive):
        glass = SphereObject(
            Sphere(Point3(0, 0, 0), 2.0),
            make_material(albedo=(0.0, 1.0, 0.0))
        )
        # Ray starts inside the ball; a reflection would come back to the emitter
        emitter = SphereObject(Sphere(Point3(0, 0, 0.5), 0.25), emissive(1, 1, 1))
        scene = Scene(sphere_objects=[glass, emitter])
        view = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert_color(ray_cast(scene, view, RenderOptions(4)), [0, 0, 0])

    @pytest.mark.parametrize("depth", [1, 2, 5, 8])
    def test_mirror_hall_terminates_at_depth(self, monkeypatch, depth):
        mirror = make_material(albedo=(0.0, 1.0, 0.0), intensity=Color(0.1, 0, 0))
        front = TriangleObject(Triangle(Point3(-10, -10, -1), Point3(10, -10, -1), Point3(0, 10, -1)), mirror)
        back = TriangleObject(Triangle(Point3(-10, -10, 1), Point3(0, 10, 1), Point3(10, -10, 1)), mirror)
        scene = Scene(objects=[front, back])

        depths = []
        original = tracer.ray_cast

        def recording_cast(scene, ray, options):
            depths.append(options.depth)
            return original(scene, ray, options)

        monkeypatch.setattr(tracer, "ray_cast", recording_cast)
        color = tracer.ray_cast(scene, FORWARD, RenderOptions(depth))

        assert depths == list(range(depth, -1, -1))
        assert_color(color, [0.1 * depth, 0, 0])
