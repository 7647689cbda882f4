"""One-time setup of the Taichi runtime that executes ray kernels.

The Taichi runtime is the worker pool of this package: the outermost loop of
every kernel is spread across its threads. ``init`` must run before the first
kernel launch if a specific backend or thread count is wanted; calling it again
is a no-op.

Example:
    >>> from src.caster.core.runtime import init
    >>> init(threads=4)
    >>> init(threads=8)  # ignored, already initialised
"""

import logging

import taichi as ti

from src.caster.core.config import SUPPORTED_ARCHS
from src.caster.errors import InvalidInputError, RuntimeInitError

logger = logging.getLogger(__name__)

_initialized = False
_active_arch: str | None = None


def init(threads: int | None = None, arch: str = "cpu") -> None:
    """Initialise the Taichi runtime once per process.

    A GPU-class backend that fails to initialise falls back to the CPU
    backend with a warning.

    Args:
        threads: Maximum number of CPU threads. None keeps the Taichi default.
        arch: Taichi backend name, e.g. "cpu" or "gpu".

    Raises:
        InvalidInputError: If threads is not positive or arch is unknown.
        RuntimeInitError: If the CPU backend itself cannot be initialised.
    """
    global _initialized, _active_arch

    if threads is not None and threads < 1:
        raise InvalidInputError(f"threads = {threads} must be at least 1")

    backend = getattr(ti, arch, None) if arch in SUPPORTED_ARCHS else None
    if backend is None:
        raise InvalidInputError(f"Unknown Taichi arch '{arch}'")

    if _initialized:
        logger.debug("Taichi runtime already initialised on %s, ignoring init()", _active_arch)
        return

    kwargs = {}
    if threads is not None:
        kwargs["cpu_max_num_threads"] = threads

    try:
        ti.init(arch=backend, **kwargs)
        _active_arch = arch
    except Exception as e:
        if arch == "cpu":
            raise RuntimeInitError(f"Failed to initialise Taichi on cpu: {e}") from e
        logger.warning("Taichi backend '%s' unavailable (%s), falling back to cpu", arch, e)
        try:
            ti.init(arch=ti.cpu, **kwargs)
        except Exception as cpu_error:
            raise RuntimeInitError(
                f"Failed to initialise Taichi on cpu: {cpu_error}"
            ) from cpu_error
        _active_arch = "cpu"

    _initialized = True
    logger.info("Taichi runtime initialised (arch=%s, threads=%s)", _active_arch, threads)


def is_initialized() -> bool:
    """Return True once init() has completed."""
    return _initialized


def active_arch() -> str | None:
    """Get the backend name chosen by init(), or None before initialisation."""
    return _active_arch
