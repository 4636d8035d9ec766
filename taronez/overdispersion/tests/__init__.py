# File: taronez/overdispersion/tests/__init__.py
# Location: taronez/taronez/overdispersion/tests/__init__.py
"""Overdispersion test implementations."""

from taronez.overdispersion.tests.tarone import TaroneZTest, tarone_z_test

__all__ = [
    "TaroneZTest",
    "tarone_z_test",
]
