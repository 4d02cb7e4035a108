"""
Three-component vector used for positions, directions and colors.

Colors are linear and unclamped; the tracer sums light contributions
freely and only post-processing maps them into displayable range.
"""

from __future__ import annotations
import math
from typing import Optional, Union
import numpy as np

Operand = Union["Vec3", float]


def _operand(value: Operand):
    return value._data if isinstance(value, Vec3) else value


class Vec3:
    """A 3D vector backed by a float64 numpy array.

    Arithmetic with another Vec3 is component-wise (so color * color
    modulates per channel); arithmetic with a scalar broadcasts.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr) -> Vec3:
        """Wrap a numpy array or any 3-element sequence."""
        v = cls.__new__(cls)
        v._data = np.asarray(arr, dtype=np.float64)
        return v

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    # Color channel names
    r, g, b = x, y, z

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.allclose(self._data, other._data))

    __hash__ = None

    def __iter__(self):
        return (float(c) for c in self._data)

    def __neg__(self) -> Vec3:
        return Vec3.from_array(-self._data)

    def __add__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data + _operand(other))

    __radd__ = __add__

    def __sub__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data - _operand(other))

    def __mul__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data * _operand(other))

    __rmul__ = __mul__

    def __truediv__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data / _operand(other))

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def length_squared(self) -> float:
        return float(self._data @ self._data)

    def normalize(self) -> Vec3:
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length()
        if length == 0:
            return Vec3()
        return self / length

    def dot(self, other: Vec3) -> float:
        return float(self._data @ other._data)

    def cross(self, other: Vec3) -> Vec3:
        return Vec3.from_array(np.cross(self._data, other._data))

    def reflect(self, normal: Vec3) -> Vec3:
        """Mirror this direction about a unit normal."""
        return self - normal * (2.0 * self.dot(normal))

    def refract(self, normal: Vec3, eta_ratio: float) -> Optional[Vec3]:
        """Bend this unit direction through a surface by Snell's law.

        Args:
            normal: Unit surface normal facing against this vector
            eta_ratio: Ratio of refractive indices (n1/n2)

        Returns:
            Refracted direction, or None on total internal reflection
        """
        cos_i = -self.dot(normal)
        sin2_t = eta_ratio * eta_ratio * (1.0 - cos_i * cos_i)
        if sin2_t > 1.0:
            return None
        cos_t = math.sqrt(1.0 - sin2_t)
        return self * eta_ratio + normal * (eta_ratio * cos_i - cos_t)

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        return bool(np.all(np.abs(self._data) < epsilon))

    def to_array(self) -> np.ndarray:
        """Copy of the underlying array."""
        return self._data.copy()


def distance(a: Vec3, b: Vec3) -> float:
    """Euclidean distance between two points."""
    return (a - b).length()


Point3 = Vec3
Color = Vec3
