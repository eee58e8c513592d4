#!/usr/bin/env python3
"""
Setup script for covfeatures.

Defaults:
- Pure Python package; linear algebra runs on torch (CPU, float64) and
  neighbor search on FAISS (exact flat L2 index).
- Install test tooling with: pip install -e .[test]
"""

from pathlib import Path
from setuptools import setup, find_packages

project_root = Path(__file__).parent

setup(
    name="covfeatures",
    version="1.0.0",
    author="Changyong Song",
    description="Covariance-based local geometric features for 3D point clouds",
    long_description=(project_root / "README.md").read_text(encoding="utf-8") if (project_root / "README.md").exists() else "",
    packages=find_packages(include=["covfeatures", "covfeatures.*"]),
    zip_safe=False,
    python_requires=">=3.8",
    install_requires=["numpy", "torch", "faiss-cpu", "pyyaml"],
    extras_require={"test": ["pytest"]},
)
