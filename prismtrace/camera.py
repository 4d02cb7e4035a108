"""
Camera module for generating primary rays.

Maps a pixel (row, column) of the output raster to a ray through the
pixel centre, for a pinhole camera placed with look-from / look-to points.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import math

from .vec3 import Vec3, Point3
from .ray import Ray


@dataclass
class CameraOptions:
    """Camera placement and raster size.

    Attributes:
        screen_width: Image width in pixels
        screen_height: Image height in pixels
        fov: Vertical field of view in radians
        look_from: Camera position in world space
        look_to: Point the camera is looking at
    """
    screen_width: int
    screen_height: int
    fov: float = math.pi / 2
    look_from: Point3 = field(default_factory=lambda: Point3(0, 0, 0))
    look_to: Point3 = field(default_factory=lambda: Point3(0, 0, -1))

    def __post_init__(self):
        if self.screen_width <= 0 or self.screen_height <= 0:
            raise ValueError(
                f"Screen size must be positive, got {self.screen_width}x{self.screen_height}"
            )
        if not 0 < self.fov < math.pi:
            raise ValueError(f"Field of view must be in (0, pi), got {self.fov}")
        if (self.look_from - self.look_to).near_zero():
            raise ValueError("look_from and look_to must be distinct points")


class Camera:
    """A pinhole camera producing one ray per pixel centre."""

    def __init__(self, options: CameraOptions):
        self.options = options
        self.width = options.screen_width
        self.height = options.screen_height

        self.scale = math.tan(options.fov / 2)
        self.aspect_ratio = self.width / self.height

        # Compute orthonormal camera basis
        self.forward = (options.look_from - options.look_to).normalize()  # Points backward
        up = Vec3(0, 1, 0)
        if up.cross(self.forward).near_zero():
            # Looking straight up or down
            self.right = Vec3(1, 0, 0)
        else:
            self.right = up.cross(self.forward).normalize()
        self.up = self.forward.cross(self.right)

        self.origin = options.look_from

    def make_ray(self, row: int, col: int) -> Ray:
        """Generate the ray through the centre of pixel (row, col).

        Args:
            row: Pixel row, 0 at the top of the image
            col: Pixel column, 0 at the left of the image

        Returns:
            A ray from the camera position through the pixel
        """
        x = (2.0 * (col + 0.5) / self.width - 1.0) * self.scale * self.aspect_ratio
        y = (1.0 - 2.0 * (row + 0.5) / self.height) * self.scale

        direction = self.right * x + self.up * y - self.forward
        return Ray(self.origin, direction)

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, size={self.width}x{self.height})"
