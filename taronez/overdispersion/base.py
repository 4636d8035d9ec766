# File: taronez/overdispersion/base.py
# Location: taronez/taronez/overdispersion/base.py
"""
Core abstractions for the overdispersion testing framework.

Defines the OverdispersionTest abstract base class, the TestResult
dataclass returned for every locus, and OverdispersionConfig, the typed
view of the runtime configuration.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("taronez")

DEFAULT_Z_THRESHOLD = 3.0


@dataclass(frozen=True)
class TestResult:
    """
    Result from a single overdispersion test on a single locus.

    Fields
    ------
    test_name : str
        Short test identifier (e.g. "tarone").
    pooled_proportion : float
        Shared success probability estimated under the binomial null,
        sum(successes) / sum(trials).
    z_statistic : float
        Standardized overdispersion score. NaN when every trials value is 1
        (zero variance denominator); the NaN is reported, never coerced.
    p_value : float
        2 * Phi(-|z|). NaN whenever z_statistic is NaN.
    n_samples : int
        Number of paired observations tested.
    total_trials : int
        sum(trials).
    total_successes : int
        sum(successes).
    method : str
        Informational test name.
    null_hypothesis : str
        Informational description of H0.
    alternative : str
        Direction in which the statistic is read ("greater").
    locus : str | None
        Locus identifier, when the caller supplied one.
    extra : dict
        Test-specific ancillary values (e.g. the weighted residual sum).
    """

    __test__ = False  # keep pytest from collecting this as a test class

    test_name: str
    pooled_proportion: float
    z_statistic: float
    p_value: float
    n_samples: int
    total_trials: int
    total_successes: int
    method: str = "Tarone's Z test"
    null_hypothesis: str = "counts follow a binomial distribution with one shared proportion"
    alternative: str = "greater"
    locus: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class OverdispersionConfig:
    """
    Configuration for locus extraction and result interpretation.

    Fields
    ------
    depth_field : str
        FORMAT key holding the total read depth (trials). Default: "DP".
    alt_count_field : str
        FORMAT key holding the alternate-allele read count (successes).
        Default: "AO".
    missing_value : str
        Placeholder marking a missing per-sample value. Default: ".".
    z_threshold : float
        Loci with z_statistic > z_threshold are reported as overdispersed.
        Default: 3.0.
    """

    depth_field: str = "DP"
    alt_count_field: str = "AO"
    missing_value: str = "."
    z_threshold: float = DEFAULT_Z_THRESHOLD

    @classmethod
    def from_dict(cls, cfg: dict[str, Any]) -> OverdispersionConfig:
        """Build a config from a loaded JSON dict, ignoring unrelated keys."""
        return cls(
            depth_field=str(cfg.get("depth_field", cls.depth_field)),
            alt_count_field=str(cfg.get("alt_count_field", cls.alt_count_field)),
            missing_value=str(cfg.get("missing_value", cls.missing_value)),
            z_threshold=float(cfg.get("z_threshold", cls.z_threshold)),
        )


def is_overdispersed(result: TestResult, threshold: float = DEFAULT_Z_THRESHOLD) -> bool:
    """Return True when the locus shows overdispersion above ``threshold``.

    A NaN statistic is never overdispersed.
    """
    z = result.z_statistic
    return not math.isnan(z) and z > threshold


class OverdispersionTest(ABC):
    """
    Abstract base class for all overdispersion tests.

    Subclasses implement one statistical test over the paired
    (trials, successes) counts of a single locus. Tests hold no state
    between calls, so one instance may be reused for every locus.

    Methods
    -------
    name : str (property)
        Short, lowercase identifier used for registry lookup and output
        column prefixes (e.g. "tarone").
    run(trials, successes, locus=None) -> TestResult
        Execute the test for one locus and return a TestResult.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short lowercase identifier for this test (e.g. 'tarone')."""
        ...

    @abstractmethod
    def run(
        self,
        trials: Sequence[Any],
        successes: Sequence[Any],
        locus: str | None = None,
    ) -> TestResult:
        """
        Run the test for a single locus.

        Parameters
        ----------
        trials : sequence of int
            Total read depth per sample. Whole-valued floats are accepted.
        successes : sequence of int
            Alternate-allele read count per sample, positionally paired
            with ``trials``.
        locus : str, optional
            Locus identifier copied into the result.

        Returns
        -------
        TestResult

        Raises
        ------
        taronez.errors.InputValidationError
            If the counts violate a precondition of the test.
        """
        ...
