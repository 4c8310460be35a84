"""Tabulation of material lobes for visual inspection.

A lobe table is a latitude-longitude grid over the upper hemisphere of the
shading frame: row i covers polar angle theta in [i, i+1] * (pi/2) / rows,
column j covers azimuth phi in [j, j+1] * 2pi / cols. Each cell holds one of

    "pdf"              pdf(wi, wo)
    "brdf"             luminance of eval(wi, wo)
    "cosine_weighted"  luminance of eval(wi, wo) * cos(theta_o)

evaluated at the cell centre. Tables convert to heat-map images with
``lobe_to_image``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.preview.lobe import tabulate_lobe, lobe_to_image
    >>> from pathshade.scene.presets import create_cornell_box_materials
    >>> library = create_cornell_box_materials()
    >>> table = tabulate_lobe(library.get_id("gold"), wi=(0.5, 0.0, 0.866))
    >>> image = lobe_to_image(table, scale="log")
"""

from collections.abc import Sequence
from typing import Literal

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathshade.core.frame import to_world
from pathshade.core.vector import as_unit_vector
from pathshade.materials.registry import (
    check_material_id,
    eval_material_by_id,
    pdf_material_by_id,
)

# Type alias for 3D vectors
vec3 = tm.vec3

LobeQuantity = Literal["pdf", "brdf", "cosine_weighted"]
LobeScale = Literal["linear", "log"]

_QUANTITY_CODES: dict[str, int] = {"pdf": 0, "brdf": 1, "cosine_weighted": 2}

# Heat-map colour ramp: (position, RGB)
_RAMP_POSITIONS = np.array([0.0, 0.25, 0.5, 0.75, 1.0])
_RAMP_COLORS = np.array(
    [
        [0.0, 0.0, 0.0],
        [0.25, 0.05, 0.45],
        [0.8, 0.2, 0.35],
        [0.98, 0.6, 0.1],
        [1.0, 1.0, 0.8],
    ]
)


@ti.kernel
def _tabulate_kernel(
    material_id: ti.i32,
    wi: vec3,
    normal: vec3,
    quantity: ti.i32,
    table: ti.types.ndarray(dtype=ti.f32, ndim=2),
):
    rows = table.shape[0]
    cols = table.shape[1]
    for i, j in ti.ndrange(rows, cols):
        theta = (i + 0.5) / rows * (0.5 * tm.pi)
        phi = (j + 0.5) / cols * (2.0 * tm.pi)
        sin_theta = ti.sin(theta)
        local_dir = vec3(sin_theta * ti.cos(phi), sin_theta * ti.sin(phi), ti.cos(theta))
        wo = to_world(local_dir, normal)

        value = 0.0
        if quantity == 0:
            value = pdf_material_by_id(material_id, wi, wo, normal)
        else:
            f = eval_material_by_id(material_id, wi, wo, normal)
            # Rec. 709 luminance
            value = tm.dot(f, vec3(0.2126, 0.7152, 0.0722))
            if quantity == 2:
                value *= tm.dot(wo, normal)
        table[i, j] = value


def tabulate_lobe(
    material_id: int,
    wi: Sequence[float],
    normal: Sequence[float] = (0.0, 0.0, 1.0),
    quantity: LobeQuantity = "cosine_weighted",
    *,
    theta_res: int = 90,
    phi_res: int = 360,
) -> npt.NDArray[np.float32]:
    """Tabulate a lobe of a registered material over the hemisphere.

    Args:
        material_id: Registered material id.
        wi: Incident direction (pointing away from the surface).
        normal: Surface normal.
        quantity: "pdf", "brdf" or "cosine_weighted".
        theta_res: Number of polar angle rows.
        phi_res: Number of azimuth columns.

    Returns:
        Array of shape (theta_res, phi_res).

    Raises:
        ValueError: If the quantity, resolution or inputs are invalid.
    """
    check_material_id(material_id)
    if quantity not in _QUANTITY_CODES:
        raise ValueError(f"Unknown lobe quantity: {quantity}")
    if theta_res <= 0 or phi_res <= 0:
        raise ValueError(f"Resolution must be positive, got ({theta_res}, {phi_res})")

    table = np.zeros((theta_res, phi_res), dtype=np.float32)
    _tabulate_kernel(
        material_id,
        vec3(*as_unit_vector(wi, "wi")),
        vec3(*as_unit_vector(normal, "normal")),
        _QUANTITY_CODES[quantity],
        table,
    )
    return table


def normalize_lobe(
    table: npt.NDArray[np.float32],
    scale: LobeScale = "linear",
) -> npt.NDArray[np.float32]:
    """Map a lobe table to [0, 1].

    Args:
        table: Lobe table from ``tabulate_lobe``.
        scale: "linear" divides by the maximum; "log" compresses the peak
            with log1p before normalizing.

    Returns:
        Normalized table of the same shape (all zeros for an empty lobe).
    """
    values = np.maximum(np.nan_to_num(table.astype(np.float64)), 0.0)
    if scale == "log":
        values = np.log1p(values)
    elif scale != "linear":
        raise ValueError(f"Unknown lobe scale: {scale}")

    peak = values.max()
    if peak > 0.0:
        values = values / peak
    return values.astype(np.float32)


def lobe_to_image(
    table: npt.NDArray[np.float32],
    scale: LobeScale = "linear",
) -> npt.NDArray[np.float32]:
    """Convert a lobe table to a heat-map RGB image.

    Returns:
        Image array of shape (rows, cols, 3) in [0, 1].
    """
    t = normalize_lobe(table, scale)
    image = np.stack(
        [np.interp(t, _RAMP_POSITIONS, _RAMP_COLORS[:, c]) for c in range(3)],
        axis=-1,
    )
    return image.astype(np.float32)
