"""Pytest configuration for caster tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    from src.caster.core.runtime import init

    init(arch="cpu")
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(scope="session")
def caster():
    """A Caster shared by the whole session.

    Its shape buffers are rewritten on every call, so sharing it does not
    leak shapes between tests.
    """
    from src.caster.core.caster import Caster

    return Caster()
