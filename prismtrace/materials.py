"""
Phong-style surface materials.

A material combines a local lighting response (ambient, diffuse and
specular colors with a specular exponent) with an albedo triple that
distributes energy between the diffuse, reflective and refractive terms.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

from .vec3 import Color


@dataclass
class Material:
    """Surface description shared by every object that references it.

    Attributes:
        name: Name the material was declared under
        ambient_color: Constant ambient term (Ka)
        diffuse_color: Lambertian response (Kd)
        specular_color: Phong highlight response (Ks)
        intensity: Emissive base term (Ke)
        specular_exponent: Phong exponent (Ns)
        refraction_index: Index of refraction of the interior (Ni)
        albedo: Weights of the (diffuse, reflective, refractive) terms
    """
    name: str = ""
    ambient_color: Color = field(default_factory=Color)
    diffuse_color: Color = field(default_factory=Color)
    specular_color: Color = field(default_factory=Color)
    intensity: Color = field(default_factory=Color)
    specular_exponent: float = 0.0
    refraction_index: float = 1.0
    albedo: Tuple[float, float, float] = (1.0, 0.0, 0.0)

    def __post_init__(self):
        self.albedo = tuple(float(a) for a in self.albedo)
        if len(self.albedo) != 3:
            raise ValueError(f"Material '{self.name}': albedo needs 3 weights, got {len(self.albedo)}")
        if any(a < 0 for a in self.albedo):
            raise ValueError(f"Material '{self.name}': albedo weights must be non-negative")
        if self.refraction_index <= 0:
            raise ValueError(
                f"Material '{self.name}': refraction index must be positive, got {self.refraction_index}"
            )
        if self.specular_exponent < 0:
            raise ValueError(f"Material '{self.name}': specular exponent must be non-negative")
        for label in ('ambient_color', 'diffuse_color', 'specular_color', 'intensity'):
            if any(c < 0 for c in getattr(self, label)):
                raise ValueError(f"Material '{self.name}': {label} components must be non-negative")

    @property
    def diffuse_weight(self) -> float:
        return self.albedo[0]

    @property
    def reflective_weight(self) -> float:
        return self.albedo[1]

    @property
    def refractive_weight(self) -> float:
        return self.albedo[2]
