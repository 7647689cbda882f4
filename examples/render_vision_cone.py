#!/usr/bin/env python3
"""Cast a vision cone over a small demo scene and save it as a PNG.

The scene is a walled room with a few pillars (circles) and an inner wall.
An observer in the middle of the room looks along --view-angle and casts
--rays rays across --fov degrees.

Usage:
    python -m examples.render_vision_cone [options]

Options:
    --view-angle DEG    Center of the field of view in degrees (default: 30)
    --fov DEG           Field of view in degrees (default: 90)
    --rays COUNT        Number of rays (default: 180)
    --max-length LEN    Maximum ray length (default: 40)
    --accuracy ACC      Circle hit accuracy (default: 0.01)
    --threads N         Taichi CPU threads (default: Taichi default)
    --arch ARCH         Taichi backend (default: cpu)
    --symmetric         Include the right edge of the field of view
    --output OUTPUT     Output file path (default: vision_cone.png)
    --show              Also open a matplotlib preview window
    --quiet             Suppress progress output

Example:
    python -m examples.render_vision_cone --fov 120 --rays 360 --show
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
import time
from pathlib import Path

ROOM_SEGMENTS = [
    (-20.0, -15.0, 20.0, -15.0),
    (20.0, -15.0, 20.0, 15.0),
    (20.0, 15.0, -20.0, 15.0),
    (-20.0, 15.0, -20.0, -15.0),
    (8.0, -6.0, 8.0, 4.0),
    (-10.0, 8.0, -2.0, 8.0),
]

ROOM_CIRCLES = [
    (12.0, 9.0, 1.5),
    (4.0, 10.0, 1.0),
    (-8.0, -6.0, 2.5),
]


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Cast a vision cone over a demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--view-angle", type=float, default=30.0, help="View angle in degrees (default: 30)")
    parser.add_argument("--fov", type=float, default=90.0, help="Field of view in degrees (default: 90)")
    parser.add_argument("--rays", type=int, default=180, help="Number of rays (default: 180)")
    parser.add_argument("--max-length", type=float, default=40.0, help="Maximum ray length (default: 40)")
    parser.add_argument("--accuracy", type=float, default=0.01, help="Circle hit accuracy (default: 0.01)")
    parser.add_argument("--threads", type=int, default=None, help="Taichi CPU threads")
    parser.add_argument("--arch", type=str, default="cpu", help="Taichi backend (default: cpu)")
    parser.add_argument("--symmetric", action="store_true", help="Include the right edge of the fov")
    parser.add_argument(
        "--output",
        type=str,
        default="vision_cone.png",
        help="Output file path (default: vision_cone.png)",
    )
    parser.add_argument("--show", action="store_true", help="Open a matplotlib preview window")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_vision_cone(
    view_angle_deg: float = 30.0,
    fov_deg: float = 90.0,
    ray_count: int = 180,
    max_length: float = 40.0,
    accuracy: float = 0.01,
    output_path: str = "vision_cone.png",
    symmetric: bool = False,
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Cast the cone and save the picture.

    Returns:
        Path to the saved image file.
    """
    from src.caster import get_default_caster
    from src.caster.preview.export import hit_fraction, save_png

    caster = get_default_caster()

    start_time = time.time()
    result = caster.cast_fan_report(
        view_angle=math.radians(view_angle_deg),
        fov=math.radians(fov_deg),
        ray_count=ray_count,
        origin_x=0.0,
        origin_y=0.0,
        max_length=max_length,
        segments=ROOM_SEGMENTS,
        circles=ROOM_CIRCLES,
        circle_accuracy=accuracy,
        symmetric=symmetric,
    )
    cast_time = time.time() - start_time

    if not quiet:
        print(f"Cast {len(result.rays)} rays in {cast_time * 1000:.1f} ms")
        print(f"Hit fraction: {hit_fraction(result.rays) * 100:.1f}%")
        for issue in result.issues:
            print(f"Skipped: {issue.message}")

    output_file = Path(output_path)
    save_png(
        result.rays,
        str(output_file),
        segments=ROOM_SEGMENTS,
        circles=ROOM_CIRCLES,
        width=640,
        height=480,
        scale=15.0,
        center=(0.0, 0.0),
    )

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")

    if show:
        from src.caster.preview.display import show_preview

        show_preview(result.rays, segments=ROOM_SEGMENTS, circles=ROOM_CIRCLES, scale=12.0)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from src.caster import CasterError, init

    try:
        init(threads=args.threads, arch=args.arch)
        render_vision_cone(
            view_angle_deg=args.view_angle,
            fov_deg=args.fov,
            ray_count=args.rays,
            max_length=args.max_length,
            accuracy=args.accuracy,
            output_path=args.output,
            symmetric=args.symmetric,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except CasterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
