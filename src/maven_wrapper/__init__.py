"""
maven_wrapper downloads, verifies and unpacks a Maven distribution described by
maven-wrapper.properties, then starts Maven from it.
"""

__version__ = "0.5.0"

from maven_wrapper.wrapper_models import Checksum, WrapperConfiguration
from maven_wrapper.wrapper_installer import Installer, LocalDistribution, PathAssembler
from maven_wrapper.wrapper_downloader import DefaultDownloader, Downloader
from maven_wrapper.wrapper_config import WrapperExecutor, WrapperGenerator

__all__ = [
    "Checksum",
    "WrapperConfiguration",
    "Installer",
    "LocalDistribution",
    "PathAssembler",
    "Downloader",
    "DefaultDownloader",
    "WrapperExecutor",
    "WrapperGenerator",
]
