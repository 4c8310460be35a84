"""Lobe preview utilities.

Components:
    lobe: Tabulate pdf / BRDF lobes of registered materials, map to heat maps
    export: PNG export (Pillow) and interactive display (Matplotlib)

Import the submodules after ``ti.init``:

    >>> from pathshade.preview.lobe import tabulate_lobe
    >>> from pathshade.preview.export import save_lobe_png
"""
