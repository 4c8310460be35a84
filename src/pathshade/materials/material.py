"""Material data model.

A material is a small immutable record shared read-only by every kernel thread
that shades a point referencing it:

    kind       Lobe selector (see MaterialKind)
    emission   Emitted radiance, zero for non-emitters
    ior        Index of refraction (only meaningful for dielectric transport)
    roughness  Perceptual roughness in [0, 1]; the GGX width is roughness^2
    kd, ks     Diffuse / specular reflectance per channel, each in [0, 1]

Two representations exist:
    - ``Material``: the Taichi struct consumed by kernels.
    - ``MaterialSpec``: the validated host-side description a scene loader
      produces. Invalid parameters are rejected here, since kernels never
      raise.

Example:
    >>> from pathshade.materials.material import MaterialKind, MaterialSpec
    >>> gold = MaterialSpec(
    ...     kind=MaterialKind.MICROFACET, ks=(1.0, 0.782, 0.344), roughness=0.3
    ... )
    >>> gold.alpha
    0.09
"""

import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from pathshade.core.vector import EPSILON

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Below this roughness the GGX lobe is close to a delta and f32 sampling of
# it becomes unreliable. Microfacet specs are rejected below it.
MIN_MICROFACET_ROUGHNESS = 0.05

# Smallest GGX width used by kernels. Keeps D, and with it the pdf, positive
# for materials built in-kernel with roughness 0.
MIN_GGX_ALPHA = 1e-3

Color = tuple[float, float, float]


class MaterialKind(IntEnum):
    """Enumeration of supported material lobes.

    Used for dispatch in sample / pdf / eval.
    """

    DIFFUSE = 0
    MICROFACET = 1


# Names accepted in configuration dictionaries
KIND_NAMES: dict[str, MaterialKind] = {
    "diffuse": MaterialKind.DIFFUSE,
    "microfacet": MaterialKind.MICROFACET,
}


@ti.dataclass
class Material:
    """Material properties as seen by kernels.

    Attributes:
        kind: The MaterialKind value as an integer.
        emission: Emitted radiance (RGB).
        ior: Index of refraction.
        roughness: Perceptual roughness in [0, 1].
        kd: Diffuse reflectance (RGB).
        ks: Specular reflectance at normal incidence (RGB).
    """

    kind: ti.i32
    emission: vec3
    ior: ti.f32
    roughness: ti.f32
    kd: vec3
    ks: vec3


@ti.func
def make_material(
    kind: ti.i32,
    kd: vec3,
    ks: vec3,
    roughness: ti.f32,
    ior: ti.f32,
    emission: vec3,
) -> Material:
    """Create a Material inside a kernel."""
    return Material(
        kind=kind,
        emission=emission,
        ior=ior,
        roughness=roughness,
        kd=kd,
        ks=ks,
    )


@ti.func
def microfacet_alpha(roughness: ti.f32) -> ti.f32:
    """Map perceptual roughness to the GGX width alpha = roughness^2.

    The result is floored at MIN_GGX_ALPHA.
    """
    return ti.max(roughness * roughness, MIN_GGX_ALPHA)


@ti.func
def has_emission(mat: Material) -> ti.i32:
    """Return 1 if the material emits light (|emission| > EPSILON)."""
    return tm.length(mat.emission) > EPSILON


@ti.func
def get_emission(mat: Material) -> vec3:
    """Return the emitted radiance of the material."""
    return mat.emission


def _as_color(value: Any, name: str) -> Color:
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    return (float(value[0]), float(value[1]), float(value[2]))


@dataclass(frozen=True)
class MaterialSpec:
    """Validated host-side description of a material.

    Attributes:
        kind: The lobe used for sampling and evaluation.
        kd: Diffuse reflectance (RGB), each component in [0, 1].
        ks: Specular reflectance at normal incidence (RGB), each in [0, 1].
        roughness: Perceptual roughness in [0, 1]. Microfacet materials need
            at least MIN_MICROFACET_ROUGHNESS.
        ior: Index of refraction, >= 1. Default is 1.5 (glass).
        emission: Emitted radiance (RGB), each component >= 0.

    Raises:
        ValueError: If any parameter is out of range.
    """

    kind: MaterialKind = MaterialKind.DIFFUSE
    kd: Color = (0.0, 0.0, 0.0)
    ks: Color = (0.0, 0.0, 0.0)
    roughness: float = 0.5
    ior: float = 1.5
    emission: Color = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        try:
            kind = MaterialKind(self.kind)
        except ValueError:
            raise ValueError(f"Unknown material kind: {self.kind!r}") from None
        object.__setattr__(self, "kind", kind)

        for attr in ("kd", "ks", "emission"):
            object.__setattr__(self, attr, _as_color(getattr(self, attr), attr))

        for attr in ("kd", "ks"):
            for i, component in enumerate(getattr(self, attr)):
                if not 0.0 <= component <= 1.0:
                    raise ValueError(
                        f"{attr} component {i} = {component} is outside [0, 1]. "
                        "This would violate energy conservation."
                    )

        for i, component in enumerate(self.emission):
            if not component >= 0.0:
                raise ValueError(f"Emission component {i} = {component} is negative.")

        if not 0.0 <= self.roughness <= 1.0:
            raise ValueError(
                f"Roughness = {self.roughness} is outside [0, 1]. "
                "Roughness must be between 0 (mirror-like) and 1 (fully rough)."
            )

        if not self.ior >= 1.0:
            raise ValueError(
                f"Index of refraction = {self.ior} is less than 1.0. "
                "IOR must be >= 1.0 for physically meaningful materials."
            )

        if kind == MaterialKind.MICROFACET and self.roughness < MIN_MICROFACET_ROUGHNESS:
            raise ValueError(
                f"Microfacet roughness = {self.roughness} is below {MIN_MICROFACET_ROUGHNESS}. "
                "The GGX lobe would be nearly a delta and could not be sampled reliably."
            )

    @property
    def alpha(self) -> float:
        """The GGX distribution width (roughness squared, at least MIN_GGX_ALPHA)."""
        return max(self.roughness * self.roughness, MIN_GGX_ALPHA)

    @property
    def has_emission(self) -> bool:
        """True if the emission norm exceeds EPSILON."""
        return math.sqrt(sum(c * c for c in self.emission)) > EPSILON

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MaterialSpec":
        """Build a spec from a configuration dictionary.

        Recognized keys: ``type`` ("diffuse" or "microfacet"), ``kd``, ``ks``,
        ``roughness``, ``ior``, ``emission``. A ``name`` key is tolerated (it is
        consumed by the material library). Other keys are ignored with a warning.

        Raises:
            ValueError: If the type is unknown or a parameter is invalid.
        """
        mat_type = str(data.get("type", "")).lower()
        if mat_type not in KIND_NAMES:
            raise ValueError(f"Unknown material type: {mat_type}")

        known = {"type", "name", "kd", "ks", "roughness", "ior", "emission"}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown material keys: %s", ", ".join(unknown))

        return cls(
            kind=KIND_NAMES[mat_type],
            kd=tuple(data.get("kd", (0.0, 0.0, 0.0))),
            ks=tuple(data.get("ks", (0.0, 0.0, 0.0))),
            roughness=float(data.get("roughness", 0.5)),
            ior=float(data.get("ior", 1.5)),
            emission=tuple(data.get("emission", (0.0, 0.0, 0.0))),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the spec to a dictionary (for JSON serialization)."""
        return {
            "type": self.kind.name.lower(),
            "kd": list(self.kd),
            "ks": list(self.ks),
            "roughness": self.roughness,
            "ior": self.ior,
            "emission": list(self.emission),
        }
