#!/usr/bin/env python3
"""Render the random sphere field.

This script builds the random scene, sets up the thin-lens camera, renders
it and writes the image. A background thread prints progress while the
render runs.

Usage:
    python -m examples.render_random_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 1200)
    --samples SAMPLES   Number of samples per pixel (default: 500)
    --depth DEPTH       Maximum path depth (default: 50)
    --seed SEED         Seed for the scene layout and the render (default: 0)
    --output OUTPUT     Output file path, .ppm or .png (default: image.ppm)
    --debug             Run Taichi in debug mode (enables kernel assertions)
    --quiet             Suppress progress output

Example:
    python -m examples.render_random_scene --width 300 --samples 20 --output small.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_random_scene")

# Seconds between progress reports
PROGRESS_INTERVAL = 0.5


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random sphere field.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1200,
        help="Image width in pixels; height follows the 3:2 aspect (default: 1200)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=500,
        help="Number of samples per pixel (default: 500)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=50,
        help="Maximum path depth (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the scene layout and the render (default: 0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path, .ppm or .png (default: image.ppm)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run Taichi in debug mode (enables kernel assertions)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def _report_progress(renderer, stop: threading.Event) -> None:
    """Print progress until ``stop`` is set."""
    while not stop.wait(PROGRESS_INTERVAL):
        progress = renderer.progress
        print(
            f"\r  Progress: {progress.pixels_completed}/{progress.pixels_total} pixels "
            f"({100.0 * progress.fraction:.1f}%) - {progress.rays_per_second():.0f} rays/s",
            end="",
            flush=True,
        )


def render_random_scene(
    width: int = 1200,
    samples_per_pixel: int = 500,
    max_depth: int = 50,
    seed: int = 0,
    output_path: str = "image.ppm",
    quiet: bool = False,
) -> Path:
    """Render the random scene and save it to a file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.core.render import Renderer, RenderSettings
    from pathtracer.preview.export import save_image
    from pathtracer.scene.random_scene import DEFAULT_ASPECT_RATIO, create_random_scene

    height = int(width / DEFAULT_ASPECT_RATIO)

    _, camera = create_random_scene(seed=seed, aspect_ratio=width / height)
    setup_camera(camera)

    renderer = Renderer(
        RenderSettings(
            width=width,
            height=height,
            samples_per_pixel=samples_per_pixel,
            max_depth=max_depth,
            seed=seed,
        )
    )

    stop = threading.Event()
    reporter = None
    if not quiet:
        reporter = threading.Thread(target=_report_progress, args=(renderer, stop), daemon=True)
        reporter.start()

    try:
        image = renderer.render()
    finally:
        stop.set()
        if reporter is not None:
            reporter.join()
            print()  # Newline after progress

    output_file = Path(output_path)
    save_image(image, output_file)

    progress = renderer.progress
    logger.info(
        "Rendered %d rays in %.2fs, saved to %s",
        progress.rays_completed,
        progress.elapsed_seconds,
        output_file.absolute(),
    )
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu, debug=args.debug)
    except Exception:
        ti.init(arch=ti.cpu, debug=args.debug)

    try:
        render_random_scene(
            width=args.width,
            samples_per_pixel=args.samples,
            max_depth=args.depth,
            seed=args.seed,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Render failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
