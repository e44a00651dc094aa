"""
Platform and filesystem helpers used by the downloader and the installer.
"""

import logging
import os
import pathlib
import platform
import shutil
import stat
import sys
import zipfile
from typing import List

from maven_wrapper.wrapper_exceptions import DistributionLayoutException
from maven_wrapper.wrapper_logger import WrapperLogger


class PlatformUtils:
    """
    Describes the platform the wrapper is running on.
    """

    @staticmethod
    def is_windows() -> bool:
        return "windows" in platform.system().lower()

    @staticmethod
    def user_agent(application_name: str, application_version: str) -> str:
        """
        Builds the User-Agent sent on every download request.

        Format: "<app>/<version> (<os>;<os release>;<arch>) (<implementation>;<python version>;<implementation version>)"
        """
        implementation = platform.python_implementation()
        return "%s/%s (%s;%s;%s) (%s;%s;%s)" % (
            application_name,
            application_version,
            platform.system(),
            platform.release(),
            platform.machine(),
            implementation,
            platform.python_version(),
            _implementation_version(),
        )


def _implementation_version() -> str:
    version = sys.implementation.version
    return "%d.%d.%d" % (version.major, version.minor, version.micro)


class FileUtils:
    """
    Filesystem operations on unpacked distributions.
    """

    COPY_BUFFER_SIZE = 2048

    @staticmethod
    def list_dirs(directory: pathlib.Path) -> List[pathlib.Path]:
        """
        Returns the immediate subdirectories of a directory, sorted by name.
        A missing directory has no subdirectories.
        """
        if not directory.exists():
            return []
        return sorted(p for p in directory.iterdir() if p.is_dir())

    @staticmethod
    def delete_directory(directory: pathlib.Path) -> None:
        shutil.rmtree(directory)

    @staticmethod
    def unzip(zip_path: pathlib.Path, destination: pathlib.Path) -> None:
        """
        Extracts a zip archive into the destination directory.

        Directory entries create directories, file entries are copied byte for byte
        with their parent directories created as needed. Every entry is checked
        before anything is written.

        Raises:
            DistributionLayoutException: If an entry would be written outside the destination
        """
        destination.mkdir(parents=True, exist_ok=True)
        root = destination.resolve()

        with zipfile.ZipFile(zip_path) as archive:
            entries = []
            for entry in archive.infolist():
                target = (destination / entry.filename).resolve()
                if target != root and root not in target.parents:
                    raise DistributionLayoutException(
                        f"Archive entry '{entry.filename}' escapes target directory '{destination}'."
                    )
                entries.append((entry, target))

            for entry, target in entries:
                if entry.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue

                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(entry) as source, open(target, "wb") as out:
                    shutil.copyfileobj(source, out, FileUtils.COPY_BUFFER_SIZE)

    @staticmethod
    def set_executable(path: pathlib.Path, logger: WrapperLogger) -> bool:
        """
        Sets rwxr-xr-x on the given file. Does nothing on Windows.

        Returns:
            True if the permissions were set, False otherwise
        """
        if PlatformUtils.is_windows():
            return False

        try:
            os.chmod(
                path,
                stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH,
            )
        except OSError as e:
            logger.log(
                f"Could not set executable permissions for: {path.absolute()} ({e})",
                logging.WARNING,
            )
            logger.log(
                "Please do this manually if you want to use maven.",
                logging.WARNING,
            )
            return False

        logger.log(
            f"Set executable permissions for: {path.absolute()}",
            logging.INFO,
        )
        return True
