"""Geometry module for 2D shape primitives.

Components:
    segment: Line segment primitive with general-form ray-segment intersection
    circle: Circle primitive with conservative-advancement intersection

All intersection routines are Taichi functions (@ti.func) and return a
HitRecord whose hit flag tells whether the ray struck the shape.
"""

from .circle import Circle, distance_to_surface, hit_circle, make_circle
from .segment import LineSegment, hit_segment, make_segment

__all__ = [
    "LineSegment",
    "hit_segment",
    "make_segment",
    "Circle",
    "hit_circle",
    "make_circle",
    "distance_to_surface",
]
