"""Preview module for visualising cast fans.

Components:
    export: Pillow rasteriser and PNG export
    display: Matplotlib-based preview window

Example:
    >>> from src.caster.preview import save_png
    >>> save_png(rays, "cone.png", segments=segments, circles=circles)
"""

from src.caster.preview.display import show_preview
from src.caster.preview.export import hit_fraction, render_fan_image, save_png

__all__ = [
    "render_fan_image",
    "save_png",
    "hit_fraction",
    "show_preview",
]
