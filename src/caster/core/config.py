"""Configuration for the ray caster.

The :class:`CasterConfig` dataclass bundles the runtime backend choice and the
numeric tolerances used by the intersection routines. It is owned by a
:class:`~src.caster.core.caster.Caster` instance; nothing here is global.

Example:
    >>> from src.caster.core.config import CasterConfig
    >>> config = CasterConfig(arch="cpu", threads=4, max_circle_iterations=256)
    >>> config.validate()
    >>> CasterConfig.from_dict(config.to_dict()) == config
    True
"""

from dataclasses import asdict, dataclass
from typing import Any

from src.caster.errors import InvalidInputError

# Backends accepted by ti.init via getattr(ti, arch)
SUPPORTED_ARCHS = ("cpu", "gpu", "cuda", "vulkan", "metal", "opengl")

DEFAULT_MAX_CIRCLE_ITERATIONS = 512
DEFAULT_PARALLEL_TOLERANCE = 1e-6
DEFAULT_BOUNDS_TOLERANCE = 1e-4
DEFAULT_SHAPE_CAPACITY = 64


@dataclass
class CasterConfig:
    """Runtime and numeric settings for a caster.

    Attributes:
        arch: Taichi backend name (see SUPPORTED_ARCHS).
        threads: Maximum CPU worker threads for the Taichi runtime.
            None leaves the Taichi default in place.
        max_circle_iterations: Hard cap on conservative-advancement steps per
            ray/circle pair. Reaching the cap without converging is a miss.
        parallel_tolerance: Relative determinant threshold below which a ray
            and a segment are treated as parallel.
        bounds_tolerance: Slack on the segment extent test, per unit of the
            largest coordinate magnitude involved (at least 1), so that hits on
            endpoints and on walls far from the world origin survive f32
            rounding.
        initial_segment_capacity: Starting size of the segment buffers.
        initial_circle_capacity: Starting size of the circle buffers.
    """

    arch: str = "cpu"
    threads: int | None = None
    max_circle_iterations: int = DEFAULT_MAX_CIRCLE_ITERATIONS
    parallel_tolerance: float = DEFAULT_PARALLEL_TOLERANCE
    bounds_tolerance: float = DEFAULT_BOUNDS_TOLERANCE
    initial_segment_capacity: int = DEFAULT_SHAPE_CAPACITY
    initial_circle_capacity: int = DEFAULT_SHAPE_CAPACITY

    def validate(self) -> None:
        """Check every field, raising InvalidInputError on the first bad one."""
        if self.arch not in SUPPORTED_ARCHS:
            raise InvalidInputError(
                f"Unknown arch '{self.arch}'. Expected one of {', '.join(SUPPORTED_ARCHS)}"
            )
        if self.threads is not None and self.threads < 1:
            raise InvalidInputError(f"threads = {self.threads} must be at least 1")
        if self.max_circle_iterations < 1:
            raise InvalidInputError(
                f"max_circle_iterations = {self.max_circle_iterations} must be at least 1"
            )
        if self.parallel_tolerance < 0.0:
            raise InvalidInputError(
                f"parallel_tolerance = {self.parallel_tolerance} is negative"
            )
        if self.bounds_tolerance < 0.0:
            raise InvalidInputError(f"bounds_tolerance = {self.bounds_tolerance} is negative")
        if self.initial_segment_capacity < 1 or self.initial_circle_capacity < 1:
            raise InvalidInputError("Initial shape capacities must be at least 1")

    def to_dict(self) -> dict[str, Any]:
        """Serialize the configuration to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CasterConfig":
        """Build a configuration from a dictionary produced by to_dict().

        Unknown keys are rejected so that typos do not silently fall back to
        defaults.

        Raises:
            InvalidInputError: If data contains unknown keys or invalid values.
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise InvalidInputError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        config = cls(**data)
        config.validate()
        return config
