#!/usr/bin/env python3
"""Render the final scene of many random spheres.

This script builds the reference scene (or loads one from a JSON file), sets
up the camera and renders it scanline by scanline.

Usage:
    python examples/render_final_scene.py [options]

Options:
    --width WIDTH       Image width in pixels (default: 1200)
    --samples SAMPLES   Number of samples per pixel (default: 100)
    --depth DEPTH       Maximum ray bounce depth (default: 50)
    --seed SEED         Seed for scene layout and ray sampling (default: 0)
    --scene PATH        Load the scene from a JSON file instead
    --output OUTPUT     Output file path, .ppm or .png; "-" writes PPM to stdout
                        (default: final_scene.png)
    --cpu / --gpu       Taichi backend (default: cpu)
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    python examples/render_final_scene.py --width 400 --samples 20 --output final.ppm
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the final scene of many random spheres.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1200,
        help="Image width in pixels (default: 1200)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=50,
        help="Maximum ray bounce depth (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for scene layout and ray sampling (default: 0)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="Load the scene from a JSON file instead of building the final scene",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="final_scene.png",
        help='Output file path, .ppm or .png; "-" writes PPM to stdout '
        "(default: final_scene.png)",
    )
    backend = parser.add_mutually_exclusive_group()
    backend.add_argument(
        "--cpu",
        dest="arch",
        action="store_const",
        const="cpu",
        help="Use the CPU backend (default)",
    )
    backend.add_argument(
        "--gpu",
        dest="arch",
        action="store_const",
        const="gpu",
        help="Use the GPU backend",
    )
    parser.set_defaults(arch="cpu")
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def render_final_scene(
    width: int = 1200,
    samples: int = 100,
    depth: int = 50,
    seed: int = 0,
    scene_path: str | None = None,
    output_path: str = "final_scene.png",
    quiet: bool = False,
) -> Path | None:
    """Render the final scene and save it.

    Args:
        width: Image width in pixels.
        samples: Number of samples per pixel.
        depth: Maximum ray bounce depth.
        seed: Seed for the scene layout.
        scene_path: Optional JSON scene file to render instead.
        output_path: Output file path, or "-" for PPM on stdout.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file, or None when writing to stdout.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.core.integrator import get_pixels_numpy, render, render_image
    from pathtracer.preview.export import save_image, write_ppm
    from pathtracer.scene.final_scene import create_final_scene, final_scene_camera
    from pathtracer.scene.manager import SceneManager

    if scene_path is not None:
        scene = SceneManager()
        scene.load_json(scene_path)
    else:
        scene = create_final_scene(seed=seed)

    config = final_scene_camera(image_width=width, samples_per_pixel=samples, max_depth=depth)

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at "
            f"{config.image_width}x{config.image_height}, {samples} samples/pixel...",
            file=sys.stderr,
        )

    start_time = time.time()

    # PPM on stdout is streamed row by row as it renders
    if output_path == "-":
        write_ppm(render(scene, config), config.image_width, config.image_height, sys.stdout)
        if not quiet:
            print(f"Total time: {time.time() - start_time:.2f}s", file=sys.stderr)
        return None

    def progress_callback(rows_done: int, height: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            print(
                f"\r  Scanlines remaining: {height - rows_done:4d} "
                f"({elapsed:.1f}s elapsed)",
                end="",
                file=sys.stderr,
                flush=True,
            )

    render_image(config, callback=progress_callback)

    if not quiet:
        print(file=sys.stderr)  # Newline after progress

    output_file = Path(output_path)
    save_image(get_pixels_numpy(), output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}", file=sys.stderr)
        print(f"Total time: {total_time:.2f}s", file=sys.stderr)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    from pathtracer.core.runtime import init_taichi

    init_taichi(arch=ti.gpu if args.arch == "gpu" else ti.cpu, seed=args.seed)

    try:
        render_final_scene(
            width=args.width,
            samples=args.samples,
            depth=args.depth,
            seed=args.seed,
            scene_path=args.scene,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
