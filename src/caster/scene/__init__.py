"""Scene module for shape collections and scene-wide ray queries.

Components:
    shapes: Host-side validation (ShapeSet, GeometryIssue) and the Taichi
        fields kernels read shapes from (ShapeBuffers)
    intersection: Closest-hit scanners over all segments, all circles, or both
"""

from .intersection import intersect_circles, intersect_segments, intersect_shapes
from .shapes import GeometryIssue, IssueKind, ShapeBuffers, ShapeSet

__all__ = [
    "ShapeSet",
    "ShapeBuffers",
    "GeometryIssue",
    "IssueKind",
    "intersect_segments",
    "intersect_circles",
    "intersect_shapes",
]
