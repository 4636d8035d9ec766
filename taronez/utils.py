# File: taronez/utils.py
# Location: taronez/taronez/utils.py

"""
Utility functions module.

Provides file helpers shared by the VCF reader and the result writer.
"""

import gzip
import logging
import os

logger = logging.getLogger("taronez")


def smart_open(filename: str, mode: str = "r", encoding: str = "utf-8"):
    """
    Open a file with automatic gzip support based on file extension.

    Parameters
    ----------
    filename : str
        Path to the file
    mode : str
        File opening mode ('r', 'w', 'rt', 'wt', etc.)
    encoding : str
        Text encoding (for text modes)

    Returns
    -------
    file object
        Opened file handle
    """
    filename = os.fspath(filename)
    if filename.endswith(".gz") or filename.endswith(".bgz"):
        # Ensure text mode for gzip
        if "t" not in mode and "b" not in mode:
            mode = mode + "t"
        logger.debug(f"Opening {filename} as gzip ({mode})")
        return gzip.open(filename, mode, encoding=encoding)
    else:
        # For regular files, only add encoding for text mode
        if "b" not in mode:
            return open(filename, mode, encoding=encoding)
        else:
            return open(filename, mode)


def remove_vcf_extensions(filename: str) -> str:
    """
    Strip VCF-related extensions from a filename.

    Parameters
    ----------
    filename : str
        File name such as 'panel.vcf.gz'.

    Returns
    -------
    str
        File name without '.vcf', '.vcf.gz' or '.vcf.bgz'.
    """
    base = os.path.basename(filename)
    for ext in (".vcf.gz", ".vcf.bgz", ".vcf", ".gz", ".bgz"):
        if base.endswith(ext):
            return base[: -len(ext)]
    return base
