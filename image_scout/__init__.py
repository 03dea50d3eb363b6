# image_scout/__init__.py
"""
ImageScout package initializer.
Defines package version; the command line lives in :mod:`image_scout.cli`.
"""
__version__ = "0.1.0"

__all__ = ["__version__"]
