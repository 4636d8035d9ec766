# File: taronez/validators.py
# Location: taronez/taronez/validators.py

"""
Validation module for taronez.

This module provides functions to validate:
- VCF files (existence, non-empty)
- Sample selections (non-empty, no duplicates)
- The Z threshold (finite number)

These validations ensure that all critical inputs and parameters
are provided correctly before proceeding with the scan.
"""

import logging
import math
import os
import sys
from typing import List, Optional

logger = logging.getLogger("taronez")


def validate_vcf_file(vcf_path: Optional[str], logger: logging.Logger) -> None:
    """
    Validate that the input VCF file exists and is non-empty.

    Parameters
    ----------
    vcf_path : str or None
        Path to the VCF file to validate.
    logger : logging.Logger
        Logger instance for logging errors and debug information.

    Raises
    ------
    SystemExit
        If the VCF file is missing or empty.
    """
    if not vcf_path or not os.path.exists(vcf_path):
        logger.error("VCF file not found: %s", vcf_path)
        sys.exit(1)
    if os.path.getsize(vcf_path) == 0:
        logger.error("VCF file %s is empty.", vcf_path)
        sys.exit(1)
    logger.debug("VCF file %s passed validation.", vcf_path)


def parse_sample_list(samples: Optional[str]) -> Optional[List[str]]:
    """
    Split a comma-separated sample selection.

    Parameters
    ----------
    samples : str or None
        Comma-separated sample IDs, e.g. "S1,S2,S3".

    Returns
    -------
    list of str or None
        The sample IDs in the given order, or None when no selection was made.

    Raises
    ------
    SystemExit
        If the selection is empty or names a sample twice.
    """
    if samples is None:
        return None
    selected = [s.strip() for s in samples.split(",") if s.strip()]
    if not selected:
        logger.error("Sample selection '%s' contains no sample IDs.", samples)
        sys.exit(1)
    duplicates = sorted({s for s in selected if selected.count(s) > 1})
    if duplicates:
        logger.error("Sample selection names samples more than once: %s", ", ".join(duplicates))
        sys.exit(1)
    return selected


def validate_z_threshold(z_threshold: float) -> None:
    """
    Validate that the Z threshold is a finite number.

    Raises
    ------
    SystemExit
        If the threshold is NaN or infinite.
    """
    if not math.isfinite(z_threshold):
        logger.error("Z threshold must be a finite number, got %s.", z_threshold)
        sys.exit(1)
