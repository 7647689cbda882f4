"""Taichi-based 2D ray caster for line-of-sight and vision-cone queries.

Given an emission point, a fan of rays over a field of view, a set of line
segments and a set of circles, the caster finds for each ray the nearest point
where it strikes a shape within a maximum length.

Subpackages:
    core: Ray primitives, configuration, runtime setup and the Caster
    geometry: Segment and circle intersection routines
    scene: Shape validation, shape buffers and closest-hit scanners
    preview: PNG rendering of a cast fan for debugging

Example:
    >>> from src.caster import init, cast_fan
    >>> init(threads=4)
    >>> rays = cast_fan(0.0, 1.0, 32, 0.0, 0.0, 20.0,
    ...                 [(5.0, -5.0, 5.0, 5.0)], [(10.0, 0.0, 2.0)], 0.01)
"""

from .core.caster import (
    Caster,
    FanResult,
    Intersection,
    Ray,
    cast_fan,
    choose_closest,
    fan_angles,
    get_default_caster,
    intersect,
    intersect_circle,
    intersect_circles,
    intersect_segment,
    intersect_segments,
)
from .core.config import CasterConfig
from .core.runtime import init, is_initialized
from .errors import CasterError, InvalidInputError, RuntimeInitError
from .scene.shapes import GeometryIssue, IssueKind

__version__ = "0.1.0"

__all__ = [
    "Caster",
    "CasterConfig",
    "FanResult",
    "Intersection",
    "Ray",
    "GeometryIssue",
    "IssueKind",
    "init",
    "is_initialized",
    "cast_fan",
    "fan_angles",
    "intersect",
    "intersect_segments",
    "intersect_segment",
    "intersect_circles",
    "intersect_circle",
    "choose_closest",
    "get_default_caster",
    "CasterError",
    "InvalidInputError",
    "RuntimeInitError",
]
