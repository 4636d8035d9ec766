# File: taronez/__init__.py
# Location: taronez/taronez/__init__.py

"""
taronez Package.

This package tests multi-sample mutation panels for overdispersion of
variant allele counts (Tarone's Z), separating true shared mutations
from uniform sequencing artifacts.
"""

from .version import __version__
