"""Core building blocks shared by all material models.

Components:
    vector: Vector helpers, the shared EPSILON guard and host-side validation
    frame: Local shading frame (normal as z-axis) and local/world mapping
    rng: Explicit, caller-owned random streams for sampling

Nothing in this subpackage declares Taichi fields, so it is safe to import
before ``ti.init``.
"""

from .frame import build_local_frame, to_local, to_world
from .rng import next_uniform, next_uniform2, pcg_hash, seed_stream
from .vector import (
    EPSILON,
    as_unit_vector,
    clamp01,
    cross,
    vec2,
    vec3,
)

__all__ = [
    "EPSILON",
    "vec2",
    "vec3",
    "cross",
    "clamp01",
    "as_unit_vector",
    "build_local_frame",
    "to_world",
    "to_local",
    "pcg_hash",
    "seed_stream",
    "next_uniform",
    "next_uniform2",
]
