"""Pytest configuration for pathshade tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_material_registry():
    """Clear the material registry before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the registry fields are created after ti.init()
    from pathshade.materials.registry import clear_materials

    clear_materials()
    yield
    clear_materials()
