"""Taichi material sampling core for Monte Carlo path tracing.

This package provides the per-bounce material operations a path tracer needs,
all written as Taichi functions so they can be called from any kernel:
- Direction sampling (uniform hemisphere, GGX half-vector)
- Sampling density evaluation
- BRDF evaluation (Lambertian, Cook-Torrance with GGX and Smith visibility)
- Fresnel / specular transport utilities (reflect, refract, dielectric Fresnel)

Subpackages:
    core: Vector helpers, local shading frame, explicit random streams
    materials: Material data model, lobes, dispatch and the material registry
    scene: Named material library, configuration loading and presets
    analysis: Monte Carlo checks of sampler / pdf / BRDF consistency
    preview: Lobe tabulation and image export utilities

Modules that declare Taichi fields (the registry and everything importing it)
are not imported here, so ``ti.init`` can be called after ``import pathshade``.
"""

__version__ = "0.1.0"
