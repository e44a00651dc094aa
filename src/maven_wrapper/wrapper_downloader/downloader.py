"""
Distribution downloader implementation.

Streams a single resource over HTTP(S) to a local file, reporting progress
and authenticating against a system-configured proxy when credentials exist.
"""

import logging
import pathlib
import shutil
import sys
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from typing import Optional, TextIO, Union

import requests

from maven_wrapper.wrapper_downloader import proxy
from maven_wrapper.wrapper_exceptions import DownloadException
from maven_wrapper.wrapper_logger import WrapperLogger
from maven_wrapper.wrapper_utils import PlatformUtils


PROGRESS_CHUNK = 20000
BUFFER_SIZE = 10000


class Downloader(ABC):
    """
    Fetches the bytes of a URI into a local file.
    """

    @abstractmethod
    def download(self, address: str, destination: Union[str, pathlib.Path]) -> None:
        """
        Download address into destination.

        Raises:
            DownloadException: If the resource cannot be fetched
        """


class DefaultDownloader(Downloader):
    """
    Downloader backed by a requests session.

    Every request carries a User-Agent describing the application and the
    platform. Proxy credentials are installed once per process on construction.
    """

    def __init__(
        self,
        application_name: str,
        application_version: str,
        logger: Optional[WrapperLogger] = None,
        progress_sink: Optional[TextIO] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the downloader.

        Args:
            application_name: Name reported in the User-Agent header
            application_version: Version reported in the User-Agent header
            logger: Logger for progress and error messages
            progress_sink: Stream receiving progress marks, stdout by default
            session: Session to issue requests with
            timeout: Optional connect/read timeout in seconds
        """
        self.application_name = application_name
        self.application_version = application_version
        self.logger = logger or WrapperLogger()
        self.progress_sink = progress_sink
        self.session = session or requests.Session()
        self.timeout = timeout
        proxy.configure_proxy_authentication()

    @property
    def user_agent(self) -> str:
        return PlatformUtils.user_agent(self.application_name, self.application_version)

    def download(self, address: str, destination: Union[str, pathlib.Path]) -> None:
        destination = pathlib.Path(destination)

        if destination.exists():
            self.logger.log(
                f"Skipping download of {address}, {destination} already exists",
                logging.DEBUG,
            )
            return

        destination.parent.mkdir(parents=True, exist_ok=True)
        self._download_internal(address, destination)

    def _download_internal(self, address: str, destination: pathlib.Path) -> None:
        if urllib.parse.urlsplit(address).scheme == "file":
            self._copy_local(address, destination)
            return

        sink = self.progress_sink or sys.stdout
        headers = {"User-Agent": self.user_agent}

        try:
            with self.session.get(
                address,
                headers=headers,
                proxies=proxy.authenticated_proxies(address),
                stream=True,
                timeout=self.timeout,
            ) as response:
                response.raise_for_status()

                progress_counter = 0
                with open(destination, "wb") as out:
                    for chunk in response.iter_content(chunk_size=BUFFER_SIZE):
                        if not chunk:
                            continue
                        out.write(chunk)

                        progress_counter += len(chunk)
                        while progress_counter >= PROGRESS_CHUNK:
                            sink.write(".")
                            sink.flush()
                            progress_counter -= PROGRESS_CHUNK
        except requests.RequestException as e:
            raise DownloadException(f"Could not download '{address}': {e}") from e
        finally:
            sink.write("\n")
            sink.flush()

    @staticmethod
    def _copy_local(address: str, destination: pathlib.Path) -> None:
        # requests has no file: adapter; relative distribution URLs resolve to file: URIs
        source = pathlib.Path(urllib.request.url2pathname(urllib.parse.urlsplit(address).path))
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            raise DownloadException(f"Could not download '{address}': {e}") from e
