"""
Installer implementation.

Downloads, verifies and unpacks a distribution into the local cache, trying
each configured distribution URI in turn.
"""

import logging
import os
import pathlib
import zipfile
from typing import Optional

from maven_wrapper.wrapper_downloader import Downloader
from maven_wrapper.wrapper_exceptions import (
    ChecksumVerificationException,
    ConfigurationException,
    DistributionLayoutException,
)
from maven_wrapper.wrapper_logger import WrapperLogger
from maven_wrapper.wrapper_models import Checksum, WrapperConfiguration
from maven_wrapper.wrapper_utils import FileUtils
from maven_wrapper.wrapper_installer.path_assembler import PathAssembler


PART_SUFFIX = ".part"
CHECKSUM_SUFFIX = ".checksum"
MAVEN_COMMAND = pathlib.Path("bin", "mvn")


class Installer:
    """
    Resolves a Maven home directory from a wrapper configuration.

    A cached archive is reused unless always_download is set; an unpacked
    distribution is reused unless the archive was just downloaded, always_unpack
    is set, or nothing has been unpacked yet.
    """

    def __init__(
        self,
        downloader: Downloader,
        path_assembler: PathAssembler,
        logger: Optional[WrapperLogger] = None,
    ):
        """
        Initialize the installer.

        Args:
            downloader: Fetches distributions and checksum files
            path_assembler: Computes local cache paths for distribution URIs
            logger: Logger for progress and error messages
        """
        self.downloader = downloader
        self.path_assembler = path_assembler
        self.logger = logger or WrapperLogger()

    def create_dist(self, configuration: WrapperConfiguration) -> pathlib.Path:
        """
        Install the first distribution that can be installed.

        Args:
            configuration: The wrapper configuration

        Returns:
            The Maven home directory of the installed distribution

        Raises:
            ConfigurationException: If no distribution URIs are configured
            Exception: The failure of the first distribution URI, if every URI fails
        """
        failure: Optional[Exception] = None

        for position, distribution_uri in enumerate(configuration.distribution_uris):
            try:
                return self._create_dist_from_uri(configuration, distribution_uri, position)
            except Exception as e:
                self.logger.log(
                    f"Maven distribution '{distribution_uri}' failed: {e}",
                    logging.WARNING,
                )
                if failure is None:
                    failure = e

        if failure is None:
            raise ConfigurationException(
                "No distributions configured. Expected to find at least 1 distribution."
            )

        raise failure

    def _create_dist_from_uri(
        self, configuration: WrapperConfiguration, distribution_uri: str, position: int
    ) -> pathlib.Path:
        local_distribution = self.path_assembler.get_distribution(configuration, distribution_uri)
        local_zip_file = local_distribution.zip_file
        downloaded = False

        if configuration.always_download or not local_zip_file.exists():
            tmp_zip_file = _sibling(local_zip_file, PART_SUFFIX)
            _delete_if_exists(tmp_zip_file)

            self.logger.log(f"Downloading {distribution_uri}", logging.INFO)
            self.downloader.download(distribution_uri, tmp_zip_file)

            if configuration.verify_download:
                try:
                    self._verify_distribution(
                        configuration.checksum_algorithm,
                        distribution_uri,
                        configuration.checksum_uri_for(distribution_uri, position),
                        _sibling(local_zip_file, CHECKSUM_SUFFIX),
                        tmp_zip_file,
                    )
                except ChecksumVerificationException:
                    _delete_if_exists(tmp_zip_file)
                    raise

            os.replace(tmp_zip_file, local_zip_file)
            downloaded = True

        dist_dir = local_distribution.distribution_dir
        dirs = FileUtils.list_dirs(dist_dir)

        if downloaded or configuration.always_unpack or not dirs:
            self._clean_distribution_dir(dist_dir)
            self._unzip(distribution_uri, local_zip_file, dist_dir)
            dirs = FileUtils.list_dirs(dist_dir)

            if not dirs:
                raise DistributionLayoutException(
                    f"Maven distribution '{distribution_uri}' does not contain any directories. "
                    "Expected to find exactly 1 directory."
                )

            FileUtils.set_executable(dirs[0] / MAVEN_COMMAND, self.logger)

        if len(dirs) != 1:
            raise DistributionLayoutException(
                f"Maven distribution '{distribution_uri}' contains too many directories. "
                "Expected to find exactly 1 directory."
            )

        return dirs[0]

    def _unzip(self, distribution_uri: str, zip_file: pathlib.Path, dist_dir: pathlib.Path) -> None:
        """
        Unpack the archive into dist_dir. On failure every directory unpacked so
        far is removed, so the next run unpacks again.

        Raises:
            DistributionLayoutException: If the archive is unsafe, corrupt or cannot be written
        """
        self.logger.log(
            f"Unzipping {zip_file.absolute()} to {dist_dir.absolute()}",
            logging.INFO,
        )
        try:
            FileUtils.unzip(zip_file, dist_dir)
        except DistributionLayoutException:
            self._clean_distribution_dir(dist_dir)
            raise
        except (zipfile.BadZipFile, OSError) as e:
            self._clean_distribution_dir(dist_dir)
            raise DistributionLayoutException(
                f"Could not unzip Maven distribution '{distribution_uri}': {e}"
            ) from e

    def _clean_distribution_dir(self, dist_dir: pathlib.Path) -> None:
        for directory in FileUtils.list_dirs(dist_dir):
            self.logger.log(f"Deleting directory {directory.absolute()}", logging.INFO)
            FileUtils.delete_directory(directory)

    def _verify_distribution(
        self,
        checksum: Checksum,
        distribution_uri: str,
        checksum_uri: str,
        local_checksum_file: pathlib.Path,
        distribution_zip_file: pathlib.Path,
    ) -> None:
        """
        Download the checksum file and verify the downloaded archive against it.

        The checksum file is only moved into the cache once verification succeeds.

        Raises:
            ChecksumVerificationException: If the archive does not match
        """
        tmp_checksum_file = _sibling(local_checksum_file, PART_SUFFIX)
        _delete_if_exists(tmp_checksum_file)

        self.logger.log(f"Verifying download with {checksum_uri}", logging.INFO)
        self.downloader.download(checksum_uri, tmp_checksum_file)

        with open(tmp_checksum_file, "r", encoding="utf-8", newline="") as checksum_reader:
            expected = _strip_line_terminator(checksum_reader.readline())

        with open(distribution_zip_file, "rb") as data:
            verified = checksum.verify(data, expected)

        if not verified:
            _delete_if_exists(tmp_checksum_file)
            raise ChecksumVerificationException(
                f"Maven distribution '{distribution_uri}' failed to verify against '{checksum_uri}'."
            )

        os.replace(tmp_checksum_file, local_checksum_file)


def _sibling(path: pathlib.Path, suffix: str) -> pathlib.Path:
    return path.with_name(path.name + suffix)


def _delete_if_exists(path: pathlib.Path) -> None:
    if path.exists():
        path.unlink()


def _strip_line_terminator(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1]
    return line
