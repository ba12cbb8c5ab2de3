"""
nfteth.version: single source of truth for the package version.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
