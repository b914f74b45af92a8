"""Command-line ray tracer.

Renders one or more scene description files (``.txt``) into a PNG image.
Every ``.txt`` argument is read into the same scene, in order; the image is
written to every ``.png`` argument.

Usage:
    whitted-render scene.txt [more.txt ...] out.png [more.png ...] [options]

Options:
    -s N            Samples per pixel along each axis; pixels are sampled
                    on an N x N jittered grid (default: 2)
    -d W H          Output image dimensions in pixels (default: 1000 1000)
    -r DEPTH        Recursion depth for reflections (default: 2)
    --debug         Shade with surface normals instead of lighting
    --epsilon EPS   Shadow and reflection ray offset (default: 1e-4)
    --seed SEED     Seed for sample jitter
    --quiet         Suppress progress output
    -v, --verbose   Enable debug logging

Example:
    whitted-render examples/scenes/spheres.txt spheres.png -s 1 -d 320 240
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

from whitted.core.integrator import MAX_DEPTH, RAY_EPSILON, TraceSettings
from whitted.core.progressive import ProgressiveRenderer
from whitted.io.scene_file import load_scene
from whitted.preview.export import save_png

logger = logging.getLogger(__name__)

DEFAULT_SAMPLES = 2
DEFAULT_WIDTH = 1000
DEFAULT_HEIGHT = 1000


@dataclass
class RenderSettings:
    """Everything needed to turn scene files into images.

    Attributes:
        infiles: Scene description files, read in order.
        outfiles: PNG files to write the same image to.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Sub-pixel grid size along each axis.
        recursion_depth: Mirror bounces per primary ray.
        debug: Use normal shading instead of Phong lighting.
        shadow_epsilon: Secondary ray offset.
        seed: Seed for sample jitter, or None for a random seed.
    """

    infiles: list[Path] = field(default_factory=list)
    outfiles: list[Path] = field(default_factory=list)
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    samples_per_pixel: int = DEFAULT_SAMPLES
    recursion_depth: int = MAX_DEPTH
    debug: bool = False
    shadow_epsilon: float = RAY_EPSILON
    seed: int | None = None

    def trace_settings(self) -> TraceSettings:
        return TraceSettings(
            recursion_depth=self.recursion_depth,
            shadow_epsilon=self.shadow_epsilon,
            normal_shading=self.debug,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whitted-render",
        description=(
            "Render a scene with a Whitted-style ray tracer. The scene is "
            "specified by one or more .txt files; the output image must be a PNG."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "files",
        nargs="+",
        help="Input .txt scene files and output .png images",
    )
    parser.add_argument(
        "-s",
        dest="samples",
        type=int,
        default=DEFAULT_SAMPLES,
        help=f"Sample each pixel on an NxN jittered grid (default: {DEFAULT_SAMPLES})",
    )
    parser.add_argument(
        "-d",
        dest="dims",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        default=(DEFAULT_WIDTH, DEFAULT_HEIGHT),
        help=f"Output image dimensions (default: {DEFAULT_WIDTH} {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "-r",
        dest="depth",
        type=int,
        default=MAX_DEPTH,
        help=f"Recursion depth for reflections (default: {MAX_DEPTH})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Render with normal-map shading",
    )
    parser.add_argument(
        "--epsilon",
        type=float,
        default=RAY_EPSILON,
        help=f"Shadow and reflection ray offset (default: {RAY_EPSILON})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for sample jitter",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> RenderSettings:
    """Validate parsed arguments and sort files by extension.

    Raises:
        ValueError: On a file that is neither .txt nor .png, a missing input
            or output, or a non-positive size or sample count.
    """
    infiles: list[Path] = []
    outfiles: list[Path] = []
    for name in args.files:
        path = Path(name)
        suffix = path.suffix.lower()
        if suffix == ".txt":
            infiles.append(path)
        elif suffix == ".png":
            outfiles.append(path)
        else:
            raise ValueError(f"Unrecognized file type: {name} (expected .txt or .png)")
    if not infiles:
        raise ValueError("At least one input .txt scene file is required")
    if not outfiles:
        raise ValueError("At least one output .png file is required")

    width, height = args.dims
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if args.samples <= 0:
        raise ValueError(f"Samples per pixel must be positive, got {args.samples}")

    return RenderSettings(
        infiles=infiles,
        outfiles=outfiles,
        width=width,
        height=height,
        samples_per_pixel=args.samples,
        recursion_depth=args.depth,
        debug=args.debug,
        shadow_epsilon=args.epsilon,
        seed=args.seed,
    )


def render(settings: RenderSettings, quiet: bool = False) -> list[Path]:
    """Render the scene files and save the image.

    Args:
        settings: Render configuration.
        quiet: If True, suppress progress output.

    Returns:
        Paths of the saved image files.
    """
    if not quiet:
        print(f"Loading scene from {', '.join(str(p) for p in settings.infiles)}...")

    scene = load_scene(settings.infiles, settings.trace_settings())
    scene.build()

    if not quiet:
        print(scene.summary())
        print(
            f"Rendering {settings.width}x{settings.height} at "
            f"{settings.samples_per_pixel ** 2} samples/pixel, depth {settings.recursion_depth}..."
        )

    renderer = ProgressiveRenderer(
        scene,
        settings.width,
        settings.height,
        samples_per_axis=settings.samples_per_pixel,
        seed=settings.seed,
    )

    start_time = time.time()

    def progress_callback(current: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / total) * 100 if total > 0 else 0
            rows_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{total} rows "
                f"({progress_pct:.1f}%) - {rows_per_sec:.1f} rows/s",
                end="",
                flush=True,
            )

    renderer.render(callback=progress_callback)

    if not quiet:
        print()  # Newline after progress
        print(f"Rendering complete in {time.time() - start_time:.2f}s")

    image = renderer.get_image_numpy()
    saved = []
    for path in settings.outfiles:
        saved.append(save_png(image, path))
        if not quiet:
            print(f"Saved image to {path}")
    return saved


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = settings_from_args(args)
        render(settings, quiet=args.quiet)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logger.debug("Render failed", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
