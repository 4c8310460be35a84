"""Fresnel and specular transport utilities.

Stateless Taichi functions for mirror and dielectric interfaces:

    reflect:  R = I - 2(I . N)N
    refract:  Snell's law, n1 * sin(theta1) = n2 * sin(theta2)
    fresnel:  Dielectric Fresnel reflectance, average of s and p polarization

``I`` is the propagation direction (pointing toward the surface). For
``refract`` and ``fresnel`` the side of the interface is inferred from the
sign of I . N: a negative cosine means the ray arrives from outside (index 1),
a positive cosine means it travels inside the medium (index ior) and the
indices are swapped.

Total internal reflection is a regular outcome, not an error:
    - refract returns the zero vector (no transmitted ray),
    - fresnel returns kr = 1 (fully reflective).
The transmitted fraction is 1 - kr by energy conservation; computing it is the
caller's job.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.materials.fresnel import fresnel, refract
    >>> # Use within a Taichi kernel:
    >>> # kr = fresnel(direction, normal, 1.5)
    >>> # transmitted = refract(direction, normal, 1.5)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, ior: ti.f32) -> vec3:
    """Refract an incident vector through a dielectric interface.

    Handles both sides of the interface: when the ray is inside the medium
    (I . N >= 0) the normal is flipped and the index ratio inverted.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The outward surface normal (should be normalized).
        ior: Index of refraction of the medium behind the normal.

    Returns:
        The refracted direction, or the zero vector on total internal
        reflection.
    """
    cos_i = tm.clamp(tm.dot(incident, normal), -1.0, 1.0)
    eta_i = 1.0
    eta_t = ior
    n = normal
    if cos_i < 0.0:
        cos_i = -cos_i
    else:
        eta_i = ior
        eta_t = 1.0
        n = -normal

    eta = eta_i / eta_t
    k = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    result = vec3(0.0, 0.0, 0.0)
    if k >= 0.0:
        result = eta * incident + (eta * cos_i - ti.sqrt(k)) * n
    return result


@ti.func
def fresnel(incident: vec3, normal: vec3, ior: ti.f32) -> ti.f32:
    """Compute the dielectric Fresnel reflectance.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The outward surface normal (should be normalized).
        ior: Index of refraction of the medium behind the normal.

    Returns:
        The reflected fraction kr in [0, 1]; exactly 1 under total internal
        reflection.
    """
    cos_i = tm.clamp(tm.dot(incident, normal), -1.0, 1.0)
    eta_i = 1.0
    eta_t = ior
    if cos_i > 0.0:
        eta_i = ior
        eta_t = 1.0

    # Snell's law for the transmitted sine
    sin_t = eta_i / eta_t * ti.sqrt(ti.max(0.0, 1.0 - cos_i * cos_i))

    kr = 1.0
    if sin_t < 1.0:
        cos_t = ti.sqrt(ti.max(0.0, 1.0 - sin_t * sin_t))
        cos_i = ti.abs(cos_i)
        r_s = ((eta_t * cos_i) - (eta_i * cos_t)) / ((eta_t * cos_i) + (eta_i * cos_t))
        r_p = ((eta_i * cos_i) - (eta_t * cos_t)) / ((eta_i * cos_i) + (eta_t * cos_t))
        kr = (r_s * r_s + r_p * r_p) / 2.0
    return kr


@ti.func
def schlick_fresnel(f0: vec3, cos_theta: ti.f32) -> vec3:
    """Schlick's approximation of the Fresnel term, per channel.

    F = f0 + (1 - f0) * (1 - cos_theta)^5

    Args:
        f0: Reflectance at normal incidence (RGB).
        cos_theta: Cosine between the light direction and the half-vector,
            already clamped to [0, 1].

    Returns:
        The approximate Fresnel reflectance (RGB).
    """
    m = 1.0 - cos_theta
    m2 = m * m
    return f0 + (vec3(1.0, 1.0, 1.0) - f0) * (m2 * m2 * m)
