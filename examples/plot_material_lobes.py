#!/usr/bin/env python3
"""Plot the lobes of the Cornell box materials.

This script registers the Cornell box palette (or a JSON material library),
tabulates a lobe for each material and writes one PNG heat map per material.
It also prints the Monte Carlo consistency figures of each material, which is
a quick way to check a new material before rendering with it.

Usage:
    python -m examples.plot_material_lobes [options]

Options:
    --library PATH      JSON material library (default: Cornell box palette)
    --incident-angle A  Angle of wi from the normal in degrees (default: 45)
    --quantity Q        pdf, brdf or cosine_weighted (default: cosine_weighted)
    --scale S           linear or log (default: log)
    --output-dir DIR    Output directory (default: lobes)
    --samples N         Samples for the consistency figures (default: 100000)
    --show              Also display each lobe with Matplotlib
    --quiet             Suppress progress output

Example:
    python -m examples.plot_material_lobes --incident-angle 60 --quantity pdf
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Plot material lobes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--library",
        type=str,
        default=None,
        help="JSON material library (default: Cornell box palette)",
    )
    parser.add_argument(
        "--incident-angle",
        type=float,
        default=45.0,
        help="Angle of wi from the normal in degrees (default: 45)",
    )
    parser.add_argument(
        "--quantity",
        choices=("pdf", "brdf", "cosine_weighted"),
        default="cosine_weighted",
        help="Tabulated quantity (default: cosine_weighted)",
    )
    parser.add_argument(
        "--scale",
        choices=("linear", "log"),
        default="log",
        help="Intensity mapping (default: log)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="lobes",
        help="Output directory (default: lobes)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100_000,
        help="Samples for the consistency figures (default: 100000)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Also display each lobe with Matplotlib",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def plot_material_lobes(args: argparse.Namespace) -> list[Path]:
    """Tabulate and save the lobe of every material in the library.

    Returns:
        The written PNG paths.
    """
    from pathshade.analysis.estimators import (
        estimate_directional_albedo,
        estimate_pdf_integral,
    )
    from pathshade.preview.export import save_lobe_png, show_lobe
    from pathshade.preview.lobe import tabulate_lobe
    from pathshade.scene.library import MaterialLibrary
    from pathshade.scene.presets import create_cornell_box_materials

    if args.library is not None:
        library = MaterialLibrary.load_json(args.library)
    else:
        library = create_cornell_box_materials()

    angle = math.radians(args.incident_angle)
    normal = (0.0, 0.0, 1.0)
    wi = (math.sin(angle), 0.0, math.cos(angle))

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for name in library.names:
        material_id = library.get_id(name)
        table = tabulate_lobe(material_id, wi, normal, args.quantity)
        path = output_dir / f"{name}_{args.quantity}.png"
        save_lobe_png(table, str(path), scale=args.scale)
        written.append(path)

        if not args.quiet:
            pdf_integral = estimate_pdf_integral(material_id, wi, normal, args.samples)
            albedo = estimate_directional_albedo(material_id, wi, normal, args.samples)
            print(
                f"{name:>8}: pdf integral {pdf_integral:.4f}, "
                f"albedo ({albedo[0]:.3f}, {albedo[1]:.3f}, {albedo[2]:.3f}) -> {path}"
            )

        if args.show:
            show_lobe(table, scale=args.scale, title=f"{name} ({args.quantity})")

    return written


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)
    ti.init(arch=ti.cpu)

    try:
        plot_material_lobes(args)
    except (ValueError, KeyError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
