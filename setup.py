# File: taronez/setup.py
# Location: taronez/taronez/setup.py
"""
Setup script for taronez.

This file configures how the package is built, installed, and what
dependencies are required.
"""

import os
from setuptools import setup, find_packages

# Load version from version.py without importing the module
version = {}
with open(os.path.join("taronez", "version.py")) as f:
    exec(f.read(), version)

# Read the README for the long description
this_dir = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_dir, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="taronez",
    version=version["__version__"],
    description="Tarone's Z overdispersion test for variant allele counts in multi-sample VCFs.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["taronez=taronez.cli:main"]},
    include_package_data=True,
    package_data={"taronez": ["config.json"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
    ],
)
