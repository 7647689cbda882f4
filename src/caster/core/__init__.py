"""Core module.

This module contains the fundamental building blocks for ray casting:

Components:
    ray: Kernel-side Ray and HitRecord dataclasses, 2D vector utilities and
        nearest-hit selection
    config: CasterConfig dataclass with backend and tolerance settings
    runtime: One-time Taichi runtime initialisation (the worker pool)
    caster: Fan generation, the Caster context and the public entry points

All per-ray work runs inside Taichi kernels; the outermost loop over rays is
parallelised by the Taichi runtime.
"""

from .ray import (
    HitRecord,
    Ray,
    choose_closest,
    direction_cos,
    distance,
    dot,
    length,
    make_hit_record,
    make_miss_record,
    make_ray,
    ray_at,
    ray_direction,
    vec2,
)

# Note: caster is NOT imported here to avoid circular imports with scene.
# Import directly from src.caster.core.caster or from the src.caster package.

__all__ = [
    "Ray",
    "HitRecord",
    "make_ray",
    "make_hit_record",
    "make_miss_record",
    "ray_at",
    "ray_direction",
    "vec2",
    "length",
    "distance",
    "dot",
    "direction_cos",
    "choose_closest",
]
