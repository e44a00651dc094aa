"""
Distribution downloader.

This package handles:
1. Streaming a distribution or checksum file to disk
2. Sending the wrapper's User-Agent
3. Authenticating against a system-configured proxy
"""

from .downloader import Downloader, DefaultDownloader
from .proxy import configure_proxy_authentication

__all__ = ["Downloader", "DefaultDownloader", "configure_proxy_authentication"]
