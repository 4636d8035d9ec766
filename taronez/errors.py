"""
Exception classes for taronez.

Every error carries a human-readable message plus a ``details`` dict with
the offending index, value or locus, so malformed upstream data can be
traced back to its source.
"""

from typing import Any, Dict, Optional


class TaroneError(Exception):
    """Base exception for all taronez errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error.

        Parameters
        ----------
        message : str
            Error message
        details : dict, optional
            Additional error details
        """
        super().__init__(message)
        self.details = details or {}


class InputValidationError(TaroneError, ValueError):
    """Raised when trials/successes violate a precondition of the test."""


class ShapeMismatchError(InputValidationError):
    """Raised when trials and successes differ in length."""

    def __init__(self, n_trials: int, n_successes: int):
        """Initialize shape mismatch error."""
        message = (
            f"trials and successes must have equal length "
            f"(got {n_trials} trials, {n_successes} successes)"
        )
        super().__init__(message, {"n_trials": n_trials, "n_successes": n_successes})


class EmptyInputError(InputValidationError):
    """Raised when no samples are supplied."""

    def __init__(self):
        """Initialize empty input error."""
        super().__init__("at least one sample is required; got empty trials and successes")


class InvalidTrialsError(InputValidationError):
    """Raised when a trials value is not an integer >= 1."""

    def __init__(self, index: int, value: Any):
        """Initialize invalid trials error."""
        message = f"trials[{index}] = {value!r} is not a positive integer"
        super().__init__(message, {"index": index, "value": value})
        self.index = index
        self.value = value


class InvalidSuccessesError(InputValidationError):
    """Raised when a successes value is not an integer >= 0."""

    def __init__(self, index: int, value: Any):
        """Initialize invalid successes error."""
        message = f"successes[{index}] = {value!r} is not a non-negative integer"
        super().__init__(message, {"index": index, "value": value})
        self.index = index
        self.value = value


class SuccessesExceedTrialsError(InputValidationError):
    """Raised when successes[i] > trials[i]."""

    def __init__(self, index: int, successes: Any, trials: Any):
        """Initialize successes-exceed-trials error."""
        message = f"successes[{index}] = {successes!r} exceeds trials[{index}] = {trials!r}"
        super().__init__(message, {"index": index, "successes": successes, "trials": trials})
        self.index = index
        self.successes = successes
        self.trials = trials


class MalformedRecordError(TaroneError):
    """Raised when a VCF record cannot be turned into observations."""

    def __init__(
        self,
        message: str,
        locus: Optional[str] = None,
        sample: Optional[str] = None,
    ):
        """Initialize malformed record error."""
        if locus:
            message = f"{locus}: {message}"
        super().__init__(message, {"locus": locus, "sample": sample})
        self.locus = locus
        self.sample = sample
