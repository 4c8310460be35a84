"""Material dispatch: sample, pdf and eval for any MaterialKind.

These are the three operations a path tracer calls at every bounce:

    wo     = sample_material(mat, wi, n, u)
    weight = eval_material(mat, wi, wo, n) * dot(wo, n) / pdf_material(mat, wi, wo, n)

``scatter_material`` bundles the three calls with the guards needed to keep
inf and NaN out of the integrator.

Both ``pdf_material`` and ``eval_material`` return zero unless wi and wo are
on the normal's side of the surface (cosine >= EPSILON). The check happens
before any lobe-specific formula so degenerate half-vectors are never formed.

Every function below dispatches over all MaterialKind members. HANDLED_KINDS
lists the kinds with a branch and is checked against the enum at import
time, so adding a kind to the enum alone raises RuntimeError. The set is not
derived from the branches: a new kind must be added to HANDLED_KINDS and
given a branch in sample_material, pdf_material and eval_material together.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.materials.bsdf import scatter_material
    >>> # Use within a Taichi kernel:
    >>> # wo, weight, pdf, did_scatter = scatter_material(mat, wi, normal, u)
"""

import taichi as ti
import taichi.math as tm

from pathshade.core.rng import next_uniform2
from pathshade.core.vector import EPSILON
from pathshade.materials.diffuse import eval_diffuse, pdf_diffuse, sample_diffuse
from pathshade.materials.material import Material, MaterialKind
from pathshade.materials.microfacet import (
    eval_microfacet,
    pdf_microfacet,
    sample_microfacet,
)

# Type aliases for Taichi vectors
vec2 = tm.vec2
vec3 = tm.vec3

# Kinds with a branch in sample_material, pdf_material and eval_material.
# Keep in step with those branches when adding a kind.
HANDLED_KINDS = frozenset({MaterialKind.DIFFUSE, MaterialKind.MICROFACET})


def _check_dispatch_is_exhaustive() -> None:
    missing = set(MaterialKind) - HANDLED_KINDS
    if missing:
        names = ", ".join(sorted(kind.name for kind in missing))
        raise RuntimeError(f"Material dispatch has no branch for: {names}")


_check_dispatch_is_exhaustive()


@ti.func
def sample_material(mat: Material, wi: vec3, normal: vec3, u: vec2) -> vec3:
    """Sample an outgoing direction according to the material's lobe.

    Args:
        mat: The material at the shading point.
        wi: Incident direction, pointing away from the surface.
        normal: The surface normal (should be normalized).
        u: Two uniform random numbers in [0, 1) from the caller's stream.

    Returns:
        The sampled direction (unit length). Microfacet samples may lie
        below the surface.
    """
    wo = vec3(0.0, 0.0, 0.0)
    if mat.kind == int(MaterialKind.DIFFUSE):
        wo = sample_diffuse(normal, u)
    elif mat.kind == int(MaterialKind.MICROFACET):
        wo = sample_microfacet(mat.roughness, wi, normal, u)
    return wo


@ti.func
def sample_material_stream(mat: Material, wi: vec3, normal: vec3, state: ti.u32):
    """Sample an outgoing direction, drawing two uniforms from a stream.

    Args:
        mat: The material at the shading point.
        wi: Incident direction, pointing away from the surface.
        normal: The surface normal (should be normalized).
        state: The caller's random stream state.

    Returns:
        A tuple of (new_state, wo).
    """
    new_state, u = next_uniform2(state)
    wo = sample_material(mat, wi, normal, u)
    return new_state, wo


@ti.func
def pdf_material(mat: Material, wi: vec3, wo: vec3, normal: vec3) -> ti.f32:
    """Density with which ``sample_material`` produces wo given wi.

    Args:
        mat: The material at the shading point.
        wi: Incident direction, pointing away from the surface.
        wo: Outgoing direction, pointing away from the surface.
        normal: The surface normal (should be normalized).

    Returns:
        The solid-angle density (>= 0). Zero if either direction is below
        the surface.
    """
    pdf = 0.0
    if tm.dot(wo, normal) >= EPSILON and tm.dot(wi, normal) >= EPSILON:
        if mat.kind == int(MaterialKind.DIFFUSE):
            pdf = pdf_diffuse()
        elif mat.kind == int(MaterialKind.MICROFACET):
            pdf = pdf_microfacet(mat.roughness, wi, wo, normal)
    return pdf


@ti.func
def eval_material(mat: Material, wi: vec3, wo: vec3, normal: vec3) -> vec3:
    """Evaluate the material's BRDF for a direction pair.

    The cosine term is not included.

    Args:
        mat: The material at the shading point.
        wi: Incident direction, pointing away from the surface.
        wo: Outgoing direction, pointing away from the surface.
        normal: The surface normal (should be normalized).

    Returns:
        The BRDF value (RGB, >= 0). Zero if either direction is below the
        surface.
    """
    f = vec3(0.0, 0.0, 0.0)
    if tm.dot(normal, wo) >= EPSILON and tm.dot(normal, wi) >= EPSILON:
        if mat.kind == int(MaterialKind.DIFFUSE):
            f = eval_diffuse(mat.kd)
        elif mat.kind == int(MaterialKind.MICROFACET):
            f = eval_microfacet(mat.ks, mat.roughness, wi, wo, normal)
    return f


@ti.func
def scatter_material(mat: Material, wi: vec3, normal: vec3, u: vec2):
    """Sample a direction and compute its Monte Carlo weight.

    weight = eval(wi, wo) * dot(wo, n) / pdf(wi, wo)

    Samples below the surface, or with a density below EPSILON, are
    absorbed: did_scatter is 0 and the weight is zero.

    Args:
        mat: The material at the shading point.
        wi: Incident direction, pointing away from the surface.
        normal: The surface normal (should be normalized).
        u: Two uniform random numbers in [0, 1) from the caller's stream.

    Returns:
        A tuple of (wo, weight, pdf, did_scatter) where:
        - wo: The sampled direction.
        - weight: The throughput multiplier for this bounce (RGB).
        - pdf: The density of wo.
        - did_scatter: 1 if the path continues, 0 if absorbed.
    """
    wo = sample_material(mat, wi, normal, u)
    pdf = pdf_material(mat, wi, wo, normal)

    weight = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    if pdf >= EPSILON:
        cos_o = tm.dot(wo, normal)
        weight = eval_material(mat, wi, wo, normal) * cos_o / pdf
        did_scatter = 1

    return wo, weight, pdf, did_scatter
