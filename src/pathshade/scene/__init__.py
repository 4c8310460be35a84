"""Scene-side material management.

Components:
    library: Named material library, configuration and JSON loading
    presets: The Cornell box material palette

Both modules register materials in Taichi fields, so import them after
``ti.init``:

    >>> from pathshade.scene.library import MaterialLibrary
"""
