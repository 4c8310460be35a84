"""Local shading frame around a surface normal.

Directions are sampled in a local frame where the normal is the z-axis and
then mapped to world space. The frame {B, C, N} is right-handed and
orthonormal:

    if |N.x| > |N.y|:  C = (N.z, 0, -N.x) / sqrt(N.x^2 + N.z^2)
    else:              C = (0, N.z, -N.y) / sqrt(N.y^2 + N.z^2)
    B = C x N

Building C from the dominant in-plane component keeps the normalization away
from near-zero vectors, so the frame is stable for normals aligned with any
coordinate axis.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.core.frame import to_world
    >>> # Use within a Taichi kernel:
    >>> # world_dir = to_world(vec3(0.0, 0.0, 1.0), normal)  # == normal
"""

import taichi as ti
import taichi.math as tm

from pathshade.core.vector import cross

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def build_local_frame(normal: vec3):
    """Build an orthonormal basis with the normal as z-axis.

    Args:
        normal: The surface normal (must be unit length).

    Returns:
        A tuple (b, c, normal) of unit vectors such that b x c = normal.
    """
    c = vec3(0.0, 0.0, 0.0)
    if ti.abs(normal.x) > ti.abs(normal.y):
        inv_len = 1.0 / ti.sqrt(normal.x * normal.x + normal.z * normal.z)
        c = vec3(normal.z * inv_len, 0.0, -normal.x * inv_len)
    else:
        inv_len = 1.0 / ti.sqrt(normal.y * normal.y + normal.z * normal.z)
        c = vec3(0.0, normal.z * inv_len, -normal.y * inv_len)
    b = cross(c, normal)
    return b, c, normal


@ti.func
def to_world(local_dir: vec3, normal: vec3) -> vec3:
    """Transform a direction from the local frame (z-up) to world space.

    Args:
        local_dir: Direction in local coordinates, z along the normal.
        normal: The surface normal (must be unit length).

    Returns:
        local.x * B + local.y * C + local.z * N.
    """
    b, c, n = build_local_frame(normal)
    return local_dir.x * b + local_dir.y * c + local_dir.z * n


@ti.func
def to_local(world_dir: vec3, normal: vec3) -> vec3:
    """Transform a world-space direction into the local frame of a normal.

    Inverse of ``to_world``.
    """
    b, c, n = build_local_frame(normal)
    return vec3(tm.dot(world_dir, b), tm.dot(world_dir, c), tm.dot(world_dir, n))
