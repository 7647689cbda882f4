"""Image export for cast fans.

Rasterises a fan of rays together with the shapes it was cast against, for
debugging vision cones outside the host application.

World coordinates are mapped to pixels with a uniform scale around a view
center; +y points up in the image.

Supported formats:
    - PNG (8-bit sRGB via Pillow)

Example:
    >>> from src.caster import cast_fan
    >>> from src.caster.preview.export import save_png
    >>>
    >>> segments = [(5.0, -5.0, 5.0, 5.0)]
    >>> circles = [(10.0, 3.0, 2.0)]
    >>> rays = cast_fan(0.0, 1.2, 90, 0.0, 0.0, 20.0, segments, circles, 0.01)
    >>> save_png(rays, "cone.png", segments=segments, circles=circles, scale=20.0)
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage
from PIL import ImageDraw

from src.caster.errors import InvalidInputError

if TYPE_CHECKING:
    from src.caster.core.caster import Ray

RGB = tuple[int, int, int]

BACKGROUND_COLOR: RGB = (16, 16, 24)
SHAPE_COLOR: RGB = (220, 220, 220)
RAY_COLOR: RGB = (90, 80, 30)
HIT_COLOR: RGB = (255, 60, 60)
ORIGIN_COLOR: RGB = (80, 200, 255)


def _world_to_pixel(
    x: float,
    y: float,
    *,
    center: tuple[float, float],
    scale: float,
    width: int,
    height: int,
) -> tuple[float, float]:
    """Map a world point to pixel coordinates (y flipped)."""
    px = (x - center[0]) * scale + width / 2.0
    py = height / 2.0 - (y - center[1]) * scale
    return px, py


def render_fan_image(
    rays: Sequence[Ray],
    *,
    segments: Sequence[Sequence[float]] | None = None,
    circles: Sequence[Sequence[float]] | None = None,
    width: int = 512,
    height: int = 512,
    scale: float = 10.0,
    center: tuple[float, float] | None = None,
    hit_radius: int = 2,
) -> npt.NDArray[np.uint8]:
    """Draw rays, hit points and shapes into an RGB image.

    Rays that hit something are drawn up to the hit point and get a dot
    there; rays that miss are drawn out to their max_length.

    Args:
        rays: Rays returned by cast_fan().
        segments: (x1, y1, x2, y2) tuples to draw.
        circles: (cx, cy, r) tuples to draw.
        width: Image width in pixels.
        height: Image height in pixels.
        scale: Pixels per world unit.
        center: World point at the image center. Defaults to the origin of
            the first ray, or (0, 0) for an empty fan.
        hit_radius: Radius in pixels of the hit markers.

    Returns:
        8-bit image array of shape (height, width, 3) with dtype uint8.

    Raises:
        InvalidInputError: If width, height or scale are not positive.
    """
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Image dimensions ({width}x{height}) must be positive")
    if scale <= 0.0:
        raise InvalidInputError(f"scale = {scale} must be positive")

    if center is None:
        center = (rays[0].x, rays[0].y) if rays else (0.0, 0.0)

    def to_px(x: float, y: float) -> tuple[float, float]:
        return _world_to_pixel(x, y, center=center, scale=scale, width=width, height=height)

    image = PILImage.new("RGB", (width, height), BACKGROUND_COLOR)
    draw = ImageDraw.Draw(image)

    for ray in rays:
        if ray.intersection is not None:
            end = (ray.intersection.x, ray.intersection.y)
        else:
            end = (
                ray.x + math.cos(ray.angle) * ray.max_length,
                ray.y + math.sin(ray.angle) * ray.max_length,
            )
        draw.line([to_px(ray.x, ray.y), to_px(*end)], fill=RAY_COLOR, width=1)

    for x1, y1, x2, y2 in segments or ():
        draw.line([to_px(x1, y1), to_px(x2, y2)], fill=SHAPE_COLOR, width=2)

    for cx, cy, r in circles or ():
        px, py = to_px(cx, cy)
        pr = r * scale
        draw.ellipse([px - pr, py - pr, px + pr, py + pr], outline=SHAPE_COLOR, width=2)

    for ray in rays:
        if ray.intersection is not None:
            px, py = to_px(ray.intersection.x, ray.intersection.y)
            draw.ellipse(
                [px - hit_radius, py - hit_radius, px + hit_radius, py + hit_radius],
                fill=HIT_COLOR,
            )

    if rays:
        px, py = to_px(rays[0].x, rays[0].y)
        draw.ellipse([px - 3, py - 3, px + 3, py + 3], fill=ORIGIN_COLOR)

    return np.asarray(image, dtype=np.uint8)


def save_png(
    rays: Sequence[Ray],
    filepath: str,
    *,
    segments: Sequence[Sequence[float]] | None = None,
    circles: Sequence[Sequence[float]] | None = None,
    width: int = 512,
    height: int = 512,
    scale: float = 10.0,
    center: tuple[float, float] | None = None,
) -> None:
    """Render a fan with render_fan_image() and save it as a PNG file.

    Args:
        rays: Rays returned by cast_fan().
        filepath: Output file path (should end in .png).
        segments: Segments to draw.
        circles: Circles to draw.
        width: Image width in pixels.
        height: Image height in pixels.
        scale: Pixels per world unit.
        center: World point at the image center.
    """
    image_uint8 = render_fan_image(
        rays,
        segments=segments,
        circles=circles,
        width=width,
        height=height,
        scale=scale,
        center=center,
    )

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def hit_fraction(rays: Sequence[Ray]) -> float:
    """Fraction of rays in a fan that hit a shape (0.0 for an empty fan)."""
    if not rays:
        return 0.0
    return sum(ray.intersection is not None for ray in rays) / len(rays)
