"""
Wrapper configuration loading.

This package reads and writes maven-wrapper.properties and turns it into a
WrapperConfiguration for the installer.
"""

from .properties import SystemPropertiesHandler
from .wrapper_executor import WrapperExecutor
from .wrapper_generator import WrapperGenerator

__all__ = ["SystemPropertiesHandler", "WrapperExecutor", "WrapperGenerator"]
