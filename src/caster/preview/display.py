"""Matplotlib-based preview of a cast fan.

Example:
    >>> from src.caster.preview.display import show_preview
    >>> show_preview(rays, segments=segments, circles=circles)
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from src.caster.preview.export import hit_fraction, render_fan_image

if TYPE_CHECKING:
    from src.caster.core.caster import Ray


def show_preview(
    rays: Sequence[Ray],
    *,
    segments: Sequence[Sequence[float]] | None = None,
    circles: Sequence[Sequence[float]] | None = None,
    width: int = 512,
    height: int = 512,
    scale: float = 10.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display a fan in a matplotlib window.

    Args:
        rays: Rays returned by cast_fan().
        segments: Segments to draw.
        circles: Circles to draw.
        width: Raster width in pixels.
        height: Raster height in pixels.
        scale: Pixels per world unit.
        title: Optional custom title. Defaults to ray count and hit fraction.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    image = render_fan_image(
        rays,
        segments=segments,
        circles=circles,
        width=width,
        height=height,
        scale=scale,
    )

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image)
    ax.axis("off")

    if title is None:
        title = f"{len(rays)} rays - {hit_fraction(rays) * 100:.0f}% hit"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
