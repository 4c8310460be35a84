"""Vector helpers and numerical constants shared by all material code.

Every function here is a Taichi function for use inside kernels, except
``as_unit_vector`` which validates direction arguments on the host side
before they are handed to a kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.core.vector import as_unit_vector
    >>> as_unit_vector((0.0, 0.0, 2.0), "normal")
    (0.0, 0.0, 1.0)
"""

import math
from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

# Type aliases for Taichi vectors
vec2 = tm.vec2
vec3 = tm.vec3

# Guard used for hemisphere checks, the GGX denominator floor, the pdf
# denominator floor and the emission test.
EPSILON = 1e-5


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def clamp01(x: ti.f32) -> ti.f32:
    """Clamp a scalar to [0, 1]."""
    return tm.clamp(x, 0.0, 1.0)


def as_unit_vector(v: Sequence[float], name: str = "vector") -> tuple[float, float, float]:
    """Validate and normalize a 3-vector given on the host side.

    Normals and directions passed to kernels are assumed to be unit length.
    This helper enforces that precondition at the Python boundary.

    Args:
        v: A sequence of three floats.
        name: Argument name used in error messages.

    Returns:
        The normalized vector as an (x, y, z) tuple.

    Raises:
        ValueError: If v does not have three components or is (near) zero.
    """
    if len(v) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(v)}")

    x, y, z = (float(c) for c in v)
    norm = math.sqrt(x * x + y * y + z * z)
    if not math.isfinite(norm) or norm < 1e-8:
        raise ValueError(f"{name} = {tuple(v)} cannot be normalized")

    return (x / norm, y / norm, z / norm)
