"""
Data models for the maven wrapper.

This package provides the checksum algorithm registry and the Pydantic
configuration model consumed by the path assembler and the installer.
"""

from .checksum import Checksum
from .wrapper_configuration import (
    WrapperConfiguration,
    MAVEN_USER_HOME_STRING,
    PROJECT_STRING,
    DEFAULT_DISTRIBUTION_PATH,
)

__all__ = [
    "Checksum",
    "WrapperConfiguration",
    "MAVEN_USER_HOME_STRING",
    "PROJECT_STRING",
    "DEFAULT_DISTRIBUTION_PATH",
]
