"""
Distribution installer.

This package handles:
1. Mapping distribution URIs to cache locations
2. Downloading and verifying distributions
3. Unpacking distributions into the cache
"""

from .path_assembler import LocalDistribution, PathAssembler
from .installer import Installer

__all__ = ["Installer", "LocalDistribution", "PathAssembler"]
