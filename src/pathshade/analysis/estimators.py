"""Monte Carlo checks of sampler / pdf / BRDF consistency.

A path tracer is only unbiased if a material's sampler, density and BRDF
agree. The functions here run Taichi kernels over a registered material and
reduce the per-sample results with NumPy on the host:

    estimate_pdf_integral        integral of pdf over the hemisphere
                                 (1 for diffuse; the above-surface
                                 probability of a GGX sample)
    check_sample_consistency     every above-surface sample has pdf > 0
    sample_direction_histogram   solid-angle density of sampled directions
    estimate_directional_albedo  mean bounce weight (white furnace test)
    check_reciprocity            f(wi, wo) == f(wo, wi)

Every kernel draws from explicit streams seeded by (sample index, seed), so
results are reproducible for a given seed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.analysis.estimators import estimate_pdf_integral
    >>> from pathshade.scene.presets import create_cornell_box_materials
    >>> library = create_cornell_box_materials()
    >>> white = library.get_id("white")
    >>> round(estimate_pdf_integral(white, (0, 0, 1), (0, 0, 1)), 3)
    1.0
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathshade.core.frame import to_local
from pathshade.core.rng import next_uniform2, seed_stream
from pathshade.core.vector import EPSILON, as_unit_vector
from pathshade.materials.bsdf import scatter_material
from pathshade.materials.diffuse import pdf_diffuse, sample_diffuse
from pathshade.materials.registry import (
    check_material_id,
    eval_material_by_id,
    get_material,
    pdf_material_by_id,
    sample_material_by_id,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass
class ConsistencyResult:
    """Outcome of a sampler / pdf consistency check.

    Attributes:
        num_samples: Number of directions drawn.
        num_above: Samples with both directions above the surface.
        num_positive: Above-surface samples whose pdf is > 0.
    """

    num_samples: int
    num_above: int
    num_positive: int

    @property
    def fraction(self) -> float:
        """Fraction of above-surface samples with positive density."""
        if self.num_above == 0:
            return 1.0
        return self.num_positive / self.num_above


def _validate(material_id: int, num_samples: int) -> None:
    check_material_id(material_id)
    if num_samples <= 0:
        raise ValueError(f"num_samples must be positive, got {num_samples}")


def _as_vec3(v: Sequence[float], name: str) -> vec3:
    return vec3(*as_unit_vector(v, name))


# =============================================================================
# Kernels
# =============================================================================


@ti.kernel
def _pdf_integral_kernel(
    material_id: ti.i32,
    wi: vec3,
    normal: vec3,
    seed: ti.i32,
    values: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    for i in range(values.shape[0]):
        state = seed_stream(i, seed)
        _, u = next_uniform2(state)
        # Uniform hemisphere directions; pdf / (1 / 2pi) integrates to the
        # total probability above the surface.
        wo = sample_diffuse(normal, u)
        values[i] = pdf_material_by_id(material_id, wi, wo, normal) / pdf_diffuse()


@ti.kernel
def _consistency_kernel(
    material_id: ti.i32,
    wi: vec3,
    normal: vec3,
    seed: ti.i32,
    flags: ti.types.ndarray(dtype=ti.i32, ndim=1),
):
    for i in range(flags.shape[0]):
        state = seed_stream(i, seed)
        _, u = next_uniform2(state)
        wo = sample_material_by_id(material_id, wi, normal, u)
        flag = -1
        if tm.dot(wo, normal) >= EPSILON and tm.dot(wi, normal) >= EPSILON:
            flag = 0
            if pdf_material_by_id(material_id, wi, wo, normal) > 0.0:
                flag = 1
        flags[i] = flag


@ti.kernel
def _histogram_kernel(
    material_id: ti.i32,
    wi: vec3,
    normal: vec3,
    seed: ti.i32,
    num_samples: ti.i32,
    counts: ti.types.ndarray(dtype=ti.i32, ndim=2),
):
    cos_bins = counts.shape[0]
    phi_bins = counts.shape[1]
    for i in range(num_samples):
        state = seed_stream(i, seed)
        _, u = next_uniform2(state)
        wo = sample_material_by_id(material_id, wi, normal, u)
        local = to_local(wo, normal)
        if local.z >= 0.0:
            phi = ti.atan2(local.y, local.x)
            if phi < 0.0:
                phi += 2.0 * tm.pi
            bin_cos = ti.min(ti.cast(local.z * cos_bins, ti.i32), cos_bins - 1)
            bin_phi = ti.min(ti.cast(phi / (2.0 * tm.pi) * phi_bins, ti.i32), phi_bins - 1)
            ti.atomic_add(counts[bin_cos, bin_phi], 1)


@ti.kernel
def _albedo_kernel(
    material_id: ti.i32,
    wi: vec3,
    normal: vec3,
    seed: ti.i32,
    weights: ti.types.ndarray(dtype=ti.f32, ndim=2),
):
    for i in range(weights.shape[0]):
        state = seed_stream(i, seed)
        _, u = next_uniform2(state)
        mat = get_material(material_id)
        _, weight, _, _ = scatter_material(mat, wi, normal, u)
        for c in ti.static(range(3)):
            weights[i, c] = weight[c]


@ti.kernel
def _reciprocity_kernel(
    material_id: ti.i32,
    normal: vec3,
    seed: ti.i32,
    errors: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    for i in range(errors.shape[0]):
        state = seed_stream(i, seed)
        state_1, u1 = next_uniform2(state)
        _, u2 = next_uniform2(state_1)
        wi = sample_diffuse(normal, u1)
        wo = sample_diffuse(normal, u2)
        f_io = eval_material_by_id(material_id, wi, wo, normal)
        f_oi = eval_material_by_id(material_id, wo, wi, normal)
        err = 0.0
        for c in ti.static(range(3)):
            scale = ti.max(1e-6, ti.max(f_io[c], f_oi[c]))
            err = ti.max(err, ti.abs(f_io[c] - f_oi[c]) / scale)
        errors[i] = err


# =============================================================================
# Host Entry Points
# =============================================================================


def estimate_pdf_integral(
    material_id: int,
    wi: Sequence[float],
    normal: Sequence[float],
    num_samples: int = 100_000,
    seed: int = 0,
) -> float:
    """Integrate the material's pdf over the hemisphere by Monte Carlo.

    Args:
        material_id: Registered material id.
        wi: Incident direction (pointing away from the surface).
        normal: Surface normal.
        num_samples: Number of uniform hemisphere samples.
        seed: Stream seed.

    Returns:
        The estimated integral. 1 for diffuse materials; for microfacet
        materials the probability that a sample lands above the surface.
    """
    _validate(material_id, num_samples)
    values = np.zeros(num_samples, dtype=np.float32)
    _pdf_integral_kernel(
        material_id, _as_vec3(wi, "wi"), _as_vec3(normal, "normal"), seed, values
    )
    return float(values.mean(dtype=np.float64))


def check_sample_consistency(
    material_id: int,
    wi: Sequence[float],
    normal: Sequence[float],
    num_samples: int = 10_000,
    seed: int = 0,
) -> ConsistencyResult:
    """Check that sampled directions above the surface have pdf > 0.

    Args:
        material_id: Registered material id.
        wi: Incident direction (pointing away from the surface).
        normal: Surface normal.
        num_samples: Number of directions to draw.
        seed: Stream seed.

    Returns:
        A ConsistencyResult; ``fraction`` must be 1.0 for a consistent
        material.
    """
    _validate(material_id, num_samples)
    flags = np.zeros(num_samples, dtype=np.int32)
    _consistency_kernel(
        material_id, _as_vec3(wi, "wi"), _as_vec3(normal, "normal"), seed, flags
    )
    return ConsistencyResult(
        num_samples=num_samples,
        num_above=int(np.count_nonzero(flags >= 0)),
        num_positive=int(np.count_nonzero(flags == 1)),
    )


def sample_direction_histogram(
    material_id: int,
    wi: Sequence[float],
    normal: Sequence[float],
    num_samples: int = 10_000,
    seed: int = 0,
    *,
    cos_bins: int = 4,
    phi_bins: int = 4,
) -> npt.NDArray[np.float64]:
    """Histogram sampled directions as a solid-angle density.

    Bins are uniform in cos(theta) and phi of the local frame, so each bin
    covers the solid angle (1 / cos_bins) * (2 pi / phi_bins). Samples below
    the surface are dropped (but still count in the normalization).

    Args:
        material_id: Registered material id.
        wi: Incident direction (pointing away from the surface).
        normal: Surface normal.
        num_samples: Number of directions to draw.
        seed: Stream seed.
        cos_bins: Number of bins in cos(theta).
        phi_bins: Number of bins in phi.

    Returns:
        Array of shape (cos_bins, phi_bins) with the estimated density per
        steradian; 1 / (2 pi) everywhere for a uniform hemisphere sampler.
    """
    _validate(material_id, num_samples)
    if cos_bins <= 0 or phi_bins <= 0:
        raise ValueError(f"Bin counts must be positive, got ({cos_bins}, {phi_bins})")

    counts = np.zeros((cos_bins, phi_bins), dtype=np.int32)
    _histogram_kernel(
        material_id,
        _as_vec3(wi, "wi"),
        _as_vec3(normal, "normal"),
        seed,
        num_samples,
        counts,
    )
    bin_solid_angle = (1.0 / cos_bins) * (2.0 * math.pi / phi_bins)
    return counts.astype(np.float64) / (num_samples * bin_solid_angle)


def estimate_directional_albedo(
    material_id: int,
    wi: Sequence[float],
    normal: Sequence[float],
    num_samples: int = 100_000,
    seed: int = 0,
) -> npt.NDArray[np.float64]:
    """Estimate the fraction of energy reflected for one incident direction.

    This is the mean of the bounce weight f * cos / pdf, i.e. what a white
    furnace would return after one bounce. Energy-conserving materials stay
    at or below 1 per channel.

    Returns:
        Array of shape (3,) with the RGB albedo.
    """
    _validate(material_id, num_samples)
    weights = np.zeros((num_samples, 3), dtype=np.float32)
    _albedo_kernel(
        material_id, _as_vec3(wi, "wi"), _as_vec3(normal, "normal"), seed, weights
    )
    return weights.mean(axis=0, dtype=np.float64)


def check_reciprocity(
    material_id: int,
    normal: Sequence[float],
    num_pairs: int = 1_000,
    seed: int = 0,
) -> float:
    """Measure how far the BRDF is from symmetric in (wi, wo).

    Direction pairs are drawn uniformly over the hemisphere.

    Returns:
        The largest relative per-channel difference over all pairs,
        |f(wi,wo) - f(wo,wi)| / max(f(wi,wo), f(wo,wi), 1e-6).
    """
    _validate(material_id, num_pairs)
    errors = np.zeros(num_pairs, dtype=np.float32)
    _reciprocity_kernel(material_id, _as_vec3(normal, "normal"), seed, errors)
    return float(errors.max())
