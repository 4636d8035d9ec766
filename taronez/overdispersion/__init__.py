# File: taronez/overdispersion/__init__.py
# Location: taronez/taronez/overdispersion/__init__.py
"""
taronez.overdispersion: per-locus overdispersion tests.

Each test implements the OverdispersionTest ABC and is stateless, so it
can be called once per locus in any order and from any thread.

Public API
----------
OverdispersionTest   : Abstract base class for all overdispersion tests
TestResult           : Frozen dataclass holding one locus' result
OverdispersionConfig : Configuration dataclass (FORMAT keys, Z threshold)
TaroneZTest          : Tarone's Z test (Tarone, 1979)
tarone_z_test        : Functional form of TaroneZTest.run
get_test             : Look up a test by name
is_overdispersed     : Apply the Z threshold to a TestResult
"""

from __future__ import annotations

from taronez.overdispersion.base import (
    OverdispersionConfig,
    OverdispersionTest,
    TestResult,
    is_overdispersed,
)
from taronez.overdispersion.tests.tarone import TaroneZTest, tarone_z_test


def _build_registry() -> dict[str, type[OverdispersionTest]]:
    return {"tarone": TaroneZTest}


def get_test(name: str) -> OverdispersionTest:
    """
    Instantiate an overdispersion test by name.

    Raises
    ------
    ValueError
        If ``name`` is not a registered test. The message lists the
        available tests.
    """
    registry = _build_registry()
    if name not in registry:
        raise ValueError(
            f"Test '{name}' is not available. Available tests: {', '.join(sorted(registry))}"
        )
    return registry[name]()


__all__ = [
    "OverdispersionConfig",
    "OverdispersionTest",
    "TaroneZTest",
    "TestResult",
    "get_test",
    "is_overdispersed",
    "tarone_z_test",
]
