"""Scene-level material storage in Taichi fields.

Materials are registered once from the host (after validation by
``MaterialSpec``) and read by kernels through their integer id. Registered
materials are never modified, so any number of kernel threads may read them
concurrently.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.materials.material import MaterialKind, MaterialSpec
    >>> from pathshade.materials.registry import add_material
    >>> white = add_material(MaterialSpec(kd=(0.725, 0.71, 0.68)))
    >>> # Use within a Taichi kernel:
    >>> # wo = sample_material_by_id(white, wi, normal, u)
"""

import logging

import taichi as ti
import taichi.math as tm

from pathshade.materials.bsdf import eval_material, pdf_material, sample_material
from pathshade.materials.material import Material, MaterialSpec, has_emission

logger = logging.getLogger(__name__)

# Type aliases for Taichi vectors
vec2 = tm.vec2
vec3 = tm.vec3

# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 256

material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_emissions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_iors = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_roughnesses = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_kds = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_kss = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0
    logger.debug("Cleared material registry")


def add_material(spec: MaterialSpec) -> int:
    """Add a material to the registry.

    Args:
        spec: The validated material description.

    Returns:
        The id of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_kinds[idx] = int(spec.kind)
    material_emissions[idx] = list(spec.emission)
    material_iors[idx] = spec.ior
    material_roughnesses[idx] = spec.roughness
    material_kds[idx] = list(spec.kd)
    material_kss[idx] = list(spec.ks)
    num_materials[None] = idx + 1

    logger.debug("Registered %s material with id %d", spec.kind.name, idx)
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


def check_material_id(material_id: int) -> None:
    """Raise ValueError if material_id does not name a registered material."""
    if not 0 <= material_id < get_material_count():
        raise ValueError(f"Invalid material_id: {material_id}")


@ti.func
def get_material(material_id: ti.i32) -> Material:
    """Get the material record for an id.

    Args:
        material_id: The id returned by ``add_material``.

    Returns:
        The Material struct.
    """
    return Material(
        kind=material_kinds[material_id],
        emission=material_emissions[material_id],
        ior=material_iors[material_id],
        roughness=material_roughnesses[material_id],
        kd=material_kds[material_id],
        ks=material_kss[material_id],
    )


@ti.func
def sample_material_by_id(material_id: ti.i32, wi: vec3, normal: vec3, u: vec2) -> vec3:
    """Sample an outgoing direction for a registered material."""
    return sample_material(get_material(material_id), wi, normal, u)


@ti.func
def pdf_material_by_id(material_id: ti.i32, wi: vec3, wo: vec3, normal: vec3) -> ti.f32:
    """Evaluate the sampling density for a registered material."""
    return pdf_material(get_material(material_id), wi, wo, normal)


@ti.func
def eval_material_by_id(material_id: ti.i32, wi: vec3, wo: vec3, normal: vec3) -> vec3:
    """Evaluate the BRDF for a registered material."""
    return eval_material(get_material(material_id), wi, wo, normal)


@ti.func
def has_emission_by_id(material_id: ti.i32) -> ti.i32:
    """Return 1 if the registered material emits light."""
    return has_emission(get_material(material_id))


@ti.func
def get_emission_by_id(material_id: ti.i32) -> vec3:
    """Get the emitted radiance of a registered material."""
    return material_emissions[material_id]
