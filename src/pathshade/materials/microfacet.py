"""GGX microfacet (Cook-Torrance) lobe.

The specular BRDF is

    f_r(wi, wo) = D(h) * V(wi, wo) * F(wi, h)

with h = normalize(wi + wo) and alpha = roughness^2:

    D  Trowbridge-Reitz / GGX normal distribution
           D = alpha^2 / (pi * denom^2),  denom = (alpha^2 - 1) NoH^2 + 1
       The denominator is floored at EPSILON so that mirror-like roughness
       (alpha -> 0, NoH -> 1) does not divide by zero.
    V  Height-correlated Smith visibility (Heitz 2014), with the
       1 / (4 NoV NoL) factor of Cook-Torrance folded in:
           V = 0.5 / (NoL * sqrt(NoV^2 (1 - alpha^2) + alpha^2)
                      + NoV * sqrt(NoL^2 (1 - alpha^2) + alpha^2))
    F  Schlick's Fresnel approximation with f0 = ks.

Sampling draws a half-vector from D(h) NoH by inverting its CDF,

    phi = 2 pi u1,  cos(theta) = sqrt((1 - u2) / (u2 (alpha^2 - 1) + 1))

and reflects the view direction about it. The Jacobian of that reflection
gives the density over outgoing directions

    pdf(wi, wo) = D(h) NoH / (4 wo . h)

The result of sampling may point below the surface; such samples carry no
contribution (pdf and eval are zero there, see ``pathshade.materials.bsdf``).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.materials.microfacet import sample_microfacet
    >>> # Use within a Taichi kernel:
    >>> # wo = sample_microfacet(roughness, wi, normal, u)
"""

import taichi as ti
import taichi.math as tm

from pathshade.core.frame import to_world
from pathshade.core.vector import EPSILON, clamp01
from pathshade.materials.fresnel import reflect, schlick_fresnel
from pathshade.materials.material import microfacet_alpha

# Type aliases for Taichi vectors
vec2 = tm.vec2
vec3 = tm.vec3


@ti.func
def d_ggx(alpha: ti.f32, n_dot_h: ti.f32) -> ti.f32:
    """Evaluate the GGX normal distribution function.

    Args:
        alpha: Distribution width (roughness squared).
        n_dot_h: Cosine between the normal and the half-vector.

    Returns:
        The microfacet normal density D(h).
    """
    alpha_sq = alpha * alpha
    denom = (alpha_sq - 1.0) * n_dot_h * n_dot_h + 1.0
    denom = ti.max(EPSILON, denom)
    return alpha_sq / (tm.pi * denom * denom)


@ti.func
def smith_visibility(alpha: ti.f32, n_dot_v: ti.f32, n_dot_l: ti.f32) -> ti.f32:
    """Height-correlated Smith visibility term.

    Equals G2 / (4 NoV NoL), so the BRDF is simply D * V * F.

    Args:
        alpha: Distribution width (roughness squared).
        n_dot_v: Cosine between the normal and the outgoing direction.
        n_dot_l: Cosine between the normal and the incident direction.

    Returns:
        The visibility term V.
    """
    alpha_sq = alpha * alpha
    lambda_v = n_dot_l * ti.sqrt(n_dot_v * n_dot_v * (1.0 - alpha_sq) + alpha_sq)
    lambda_l = n_dot_v * ti.sqrt(n_dot_l * n_dot_l * (1.0 - alpha_sq) + alpha_sq)
    return 0.5 / (lambda_v + lambda_l)


@ti.func
def sample_ggx_half_vector(alpha: ti.f32, normal: vec3, u: vec2) -> vec3:
    """Sample a microfacet normal proportionally to D(h) * NoH.

    Args:
        alpha: Distribution width (roughness squared).
        normal: The surface normal (should be normalized).
        u: Two uniform random numbers in [0, 1).

    Returns:
        The sampled half-vector in world space (unit length).
    """
    alpha_sq = alpha * alpha
    phi = 2.0 * tm.pi * u.x
    cos_theta_sq = (1.0 - u.y) / (u.y * (alpha_sq - 1.0) + 1.0)
    cos_theta = ti.sqrt(clamp01(cos_theta_sq))
    sin_theta = ti.sqrt(ti.max(0.0, 1.0 - cos_theta * cos_theta))
    local_h = vec3(sin_theta * ti.cos(phi), sin_theta * ti.sin(phi), cos_theta)
    return to_world(local_h, normal)


@ti.func
def sample_microfacet(roughness: ti.f32, wi: vec3, normal: vec3, u: vec2) -> vec3:
    """Sample an outgoing direction for the microfacet lobe.

    Args:
        roughness: Perceptual roughness in [0, 1].
        wi: Incident direction, pointing away from the surface.
        normal: The surface normal (should be normalized).
        u: Two uniform random numbers in [0, 1).

    Returns:
        The reflection of -wi about the sampled half-vector. May lie below
        the surface.
    """
    h = sample_ggx_half_vector(microfacet_alpha(roughness), normal, u)
    return reflect(-wi, h)


@ti.func
def pdf_microfacet(roughness: ti.f32, wi: vec3, wo: vec3, normal: vec3) -> ti.f32:
    """Density of ``sample_microfacet`` for the pair (wi, wo).

    Assumes both directions are above the surface.

    Args:
        roughness: Perceptual roughness in [0, 1].
        wi: Incident direction, pointing away from the surface.
        wo: Outgoing direction, pointing away from the surface.
        normal: The surface normal (should be normalized).

    Returns:
        The solid-angle density of wo.
    """
    alpha = microfacet_alpha(roughness)
    h = tm.normalize(wi + wo)
    n_dot_h = tm.dot(normal, h)
    d = d_ggx(alpha, n_dot_h)
    # Floored like the GGX denominator; dot(wo, h) -> 0 only at grazing pairs
    return d * n_dot_h / ti.max(EPSILON, 4.0 * tm.dot(wo, h))


@ti.func
def eval_microfacet(
    ks: vec3,
    roughness: ti.f32,
    wi: vec3,
    wo: vec3,
    normal: vec3,
) -> vec3:
    """Evaluate the Cook-Torrance BRDF.

    Assumes both directions are above the surface. Symmetric in wi and wo.

    Args:
        ks: Specular reflectance at normal incidence (RGB).
        roughness: Perceptual roughness in [0, 1].
        wi: Incident direction, pointing away from the surface.
        wo: Outgoing direction, pointing away from the surface.
        normal: The surface normal (should be normalized).

    Returns:
        The BRDF value D * V * F (RGB).
    """
    alpha = microfacet_alpha(roughness)
    n_dot_v = tm.dot(normal, wo)
    n_dot_l = tm.dot(normal, wi)

    h = tm.normalize(wi + wo)
    l_dot_h = clamp01(tm.dot(wi, h))
    n_dot_h = clamp01(tm.dot(normal, h))

    f = schlick_fresnel(ks, l_dot_h)
    v = smith_visibility(alpha, n_dot_v, n_dot_l)
    d = d_ggx(alpha, n_dot_h)

    return d * v * f
