"""Material models for path tracing.

Components:
    material: Material record, MaterialKind and the validated MaterialSpec
    fresnel: Reflection, refraction (Snell's law) and dielectric Fresnel
    diffuse: Lambertian BRDF with uniform hemisphere sampling
    microfacet: GGX / Cook-Torrance BRDF with half-vector sampling
    bsdf: Dispatch of sample / pdf / eval over MaterialKind
    registry: Taichi field storage of scene materials, addressed by id

Every lobe provides:
    - sample(): Draw an outgoing direction from caller-supplied uniforms
    - pdf(): Density of that sampling strategy for a direction pair
    - eval(): BRDF value for a direction pair

The registry declares Taichi fields at import time and is therefore not
imported here; import ``pathshade.materials.registry`` after ``ti.init``.
"""

from .bsdf import (
    HANDLED_KINDS,
    eval_material,
    pdf_material,
    sample_material,
    sample_material_stream,
    scatter_material,
)
from .diffuse import eval_diffuse, pdf_diffuse, sample_diffuse
from .fresnel import fresnel, reflect, refract, schlick_fresnel
from .material import (
    MIN_GGX_ALPHA,
    MIN_MICROFACET_ROUGHNESS,
    Material,
    MaterialKind,
    MaterialSpec,
    get_emission,
    has_emission,
    make_material,
    microfacet_alpha,
)
from .microfacet import (
    d_ggx,
    eval_microfacet,
    pdf_microfacet,
    sample_ggx_half_vector,
    sample_microfacet,
    smith_visibility,
)

__all__ = [
    # Data model
    "Material",
    "MaterialKind",
    "MaterialSpec",
    "MIN_MICROFACET_ROUGHNESS",
    "MIN_GGX_ALPHA",
    "make_material",
    "microfacet_alpha",
    "has_emission",
    "get_emission",
    # Fresnel / specular transport
    "reflect",
    "refract",
    "fresnel",
    "schlick_fresnel",
    # Diffuse
    "sample_diffuse",
    "pdf_diffuse",
    "eval_diffuse",
    # Microfacet
    "d_ggx",
    "smith_visibility",
    "sample_ggx_half_vector",
    "sample_microfacet",
    "pdf_microfacet",
    "eval_microfacet",
    # Dispatch
    "HANDLED_KINDS",
    "sample_material",
    "sample_material_stream",
    "pdf_material",
    "eval_material",
    "scatter_material",
]
