"""Exception types raised by the caster package.

Argument errors are also ``ValueError`` instances and runtime setup errors are
also ``RuntimeError`` instances.

Per-shape geometry problems are not exceptions: they are reported as
:class:`~src.caster.scene.shapes.GeometryIssue` records and the offending
shape is skipped.
"""


class CasterError(Exception):
    """Base class for all caster errors."""


class InvalidInputError(CasterError, ValueError):
    """An argument was rejected at the API boundary before any computation."""


class RuntimeInitError(CasterError, RuntimeError):
    """The Taichi runtime could not be initialised for the requested backend."""
