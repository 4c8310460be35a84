"""Cornell box material palette.

The materials of the classic Cornell box test scene: red, green and white
diffuse walls, a diffuse area light with measured emission, and a set of
rough metals (gold, silver, copper) plus a near-mirror for the microfacet
lobe.

The light emission is the sum of three weighted spectral peaks projected to
RGB, as measured for the original box.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.scene.presets import create_cornell_box_materials
    >>> library = create_cornell_box_materials()
    >>> library.names[:3]
    ['red', 'green', 'white']
"""

from pathshade.scene.library import MaterialLibrary

# =============================================================================
# Cornell Box Constants
# =============================================================================

RED_WALL_KD = (0.63, 0.065, 0.05)
GREEN_WALL_KD = (0.14, 0.45, 0.091)
WHITE_WALL_KD = (0.725, 0.71, 0.68)

LIGHT_KD = (0.65, 0.65, 0.65)


def _light_emission() -> tuple[float, float, float]:
    peaks = (
        (8.0, (0.747 + 0.058, 0.747 + 0.258, 0.747)),
        (15.6, (0.740 + 0.287, 0.740 + 0.160, 0.740)),
        (18.4, (0.737 + 0.642, 0.737 + 0.159, 0.737)),
    )
    return (
        sum(w * c[0] for w, c in peaks),
        sum(w * c[1] for w, c in peaks),
        sum(w * c[2] for w, c in peaks),
    )


LIGHT_EMISSION = _light_emission()

# Metal reflectances at normal incidence
GOLD_KS = (1.0, 0.782, 0.344)
SILVER_KS = (0.97, 0.96, 0.91)
COPPER_KS = (0.97, 0.74, 0.62)
MIRROR_KS = (1.0, 1.0, 1.0)

METAL_ROUGHNESS = 0.3
# Smallest roughness the GGX sampler handles reliably
MIRROR_ROUGHNESS = 0.05


def create_cornell_box_materials(library: MaterialLibrary | None = None) -> MaterialLibrary:
    """Register the Cornell box palette.

    Args:
        library: Library to fill. It is cleared first. A new library is
            created if None.

    Returns:
        The library with materials named red, green, white, light, gold,
        silver, copper and mirror (ids in that order).
    """
    if library is None:
        library = MaterialLibrary()
    else:
        library.clear()

    library.add_diffuse("red", RED_WALL_KD)
    library.add_diffuse("green", GREEN_WALL_KD)
    library.add_diffuse("white", WHITE_WALL_KD)
    library.add_diffuse("light", LIGHT_KD, emission=LIGHT_EMISSION)

    library.add_microfacet("gold", GOLD_KS, METAL_ROUGHNESS)
    library.add_microfacet("silver", SILVER_KS, METAL_ROUGHNESS)
    library.add_microfacet("copper", COPPER_KS, METAL_ROUGHNESS)
    library.add_microfacet("mirror", MIRROR_KS, MIRROR_ROUGHNESS)

    return library
