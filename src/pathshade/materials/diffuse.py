"""Diffuse (Lambertian) lobe.

The BRDF is constant over the hemisphere:
    f_r(wi, wo) = kd / pi

Directions are drawn *uniformly* over the hemisphere (not cosine-weighted):
    z = |1 - 2 * u1|,  r = sqrt(1 - z^2),  phi = 2 * pi * u2
    local direction = (r cos(phi), r sin(phi), z)

so the matching density is the constant
    pdf(wi, wo) = 1 / (2 * pi)

and the estimator weight f_r * cos(theta) / pdf equals 2 * kd * cos(theta).

The hemisphere guard (both directions above the surface) is applied by the
dispatch layer in ``pathshade.materials.bsdf``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.materials.diffuse import sample_diffuse, eval_diffuse
    >>> # Use within a Taichi kernel:
    >>> # wo = sample_diffuse(normal, u)
    >>> # f = eval_diffuse(kd)
"""

import taichi as ti
import taichi.math as tm

from pathshade.core.frame import to_world

# Type aliases for Taichi vectors
vec2 = tm.vec2
vec3 = tm.vec3

INV_TWO_PI = 0.5 / tm.pi


@ti.func
def sample_diffuse(normal: vec3, u: vec2) -> vec3:
    """Sample a direction uniformly over the hemisphere around the normal.

    Args:
        normal: The surface normal (should be normalized).
        u: Two uniform random numbers in [0, 1).

    Returns:
        A unit direction with non-negative cosine to the normal.
    """
    z = ti.abs(1.0 - 2.0 * u.x)
    r = ti.sqrt(ti.max(0.0, 1.0 - z * z))
    phi = 2.0 * tm.pi * u.y
    local_dir = vec3(r * ti.cos(phi), r * ti.sin(phi), z)
    return to_world(local_dir, normal)


@ti.func
def pdf_diffuse() -> ti.f32:
    """Density of ``sample_diffuse``: 1 / (2 * pi) per steradian."""
    return INV_TWO_PI


@ti.func
def eval_diffuse(kd: vec3) -> vec3:
    """Evaluate the Lambertian BRDF.

    This function returns the BRDF value (not including the cosine term,
    which is applied separately in the rendering equation).

    Args:
        kd: The diffuse reflectance (RGB).

    Returns:
        The BRDF value kd / pi.
    """
    return kd / tm.pi
