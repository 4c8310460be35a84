"""Saving and displaying lobe tables.

Supported outputs:
    - PNG (8-bit heat map via Pillow)
    - Interactive Matplotlib figure

Example:
    >>> from pathshade.preview.export import save_lobe_png
    >>> from pathshade.preview.lobe import tabulate_lobe
    >>> table = tabulate_lobe(material_id, wi=(0.0, 0.0, 1.0))
    >>> save_lobe_png(table, "lobe.png", scale="log")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathshade.preview.lobe import LobeScale, lobe_to_image


def lobe_to_uint8(
    table: npt.NDArray[np.float32],
    *,
    scale: LobeScale = "linear",
) -> npt.NDArray[np.uint8]:
    """Convert a lobe table to an 8-bit RGB heat map.

    Returns:
        Image array of shape (rows, cols, 3) with dtype uint8.
    """
    image = lobe_to_image(table, scale)
    return (np.clip(image, 0.0, 1.0) * 255).astype(np.uint8)


def save_lobe_png(
    table: npt.NDArray[np.float32],
    filepath: str,
    *,
    scale: LobeScale = "linear",
) -> None:
    """Save a lobe table as a PNG heat map.

    Rows are polar angle (zenith at the top), columns are azimuth.

    Args:
        table: Lobe table from ``tabulate_lobe``.
        filepath: Output file path (should end in .png).
        scale: "linear" or "log" intensity mapping.
    """
    pil_image = PILImage.fromarray(lobe_to_uint8(table, scale=scale))
    pil_image.save(filepath)


def show_lobe(
    table: npt.NDArray[np.float32],
    *,
    scale: LobeScale = "linear",
    title: str | None = None,
    figsize: tuple[float, float] = (10, 4),
    block: bool = True,
) -> None:
    """Display a lobe table as a Matplotlib figure.

    Args:
        table: Lobe table from ``tabulate_lobe``.
        scale: "linear" or "log" intensity mapping.
        title: Figure title (default shows the peak value).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(
        lobe_to_image(table, scale),
        extent=(0.0, 360.0, 90.0, 0.0),
        aspect="auto",
    )
    ax.set_xlabel("phi (degrees)")
    ax.set_ylabel("theta (degrees)")

    if title is None:
        title = f"Lobe ({scale}) - peak {float(np.max(table)):.4g}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
