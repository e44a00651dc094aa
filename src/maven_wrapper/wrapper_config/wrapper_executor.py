"""
Wrapper executor.

Loads maven-wrapper.properties into a WrapperConfiguration, installs the
configured distribution and hands the resulting Maven home to a launcher.
"""

import logging
import pathlib
import urllib.parse
from typing import Dict, List, Optional, Sequence, Union

from maven_wrapper.wrapper_config import properties as properties_io
from maven_wrapper.wrapper_exceptions import ConfigurationException
from maven_wrapper.wrapper_logger import WrapperLogger
from maven_wrapper.wrapper_models import Checksum, WrapperConfiguration
from maven_wrapper.wrapper_settings import parse_bool


DISTRIBUTION_URL_PROPERTY = "distributionUrl"
DISTRIBUTION_BASE_PROPERTY = "distributionBase"
DISTRIBUTION_PATH_PROPERTY = "distributionPath"
ZIP_STORE_BASE_PROPERTY = "zipStoreBase"
ZIP_STORE_PATH_PROPERTY = "zipStorePath"
VERIFY_DOWNLOAD_PROPERTY = "verifyDownload"
CHECKSUM_ALGORITHM_PROPERTY = "checksumAlgorithm"
CHECKSUM_URL_PROPERTY = "checksumUrl"
CHECKSUM_EXTENSION_PROPERTY = "checksumExtension"

WRAPPER_PROPERTIES_LOCATION = pathlib.Path("maven", "wrapper", "maven-wrapper.properties")


class WrapperExecutor:
    """
    Builds the wrapper configuration from a properties file and runs an installation.

    Use for_project_directory() or for_wrapper_properties_file() to create one.
    """

    def __init__(
        self,
        properties_file: Union[str, pathlib.Path],
        logger: Optional[WrapperLogger] = None,
    ):
        """
        Load the properties file if it exists; otherwise use the default configuration.

        Args:
            properties_file: Path to maven-wrapper.properties
            logger: Logger for progress and error messages

        Raises:
            ConfigurationException: If the properties file exists but is invalid
        """
        self.properties_file = pathlib.Path(properties_file)
        self.logger = logger or WrapperLogger()
        self.properties: Dict[str, str] = {}
        self.config = WrapperConfiguration()

        if self.properties_file.exists():
            try:
                self.properties = properties_io.load(self.properties_file)
                self.config = self._build_configuration()
            except (ConfigurationException, ValueError, OSError) as e:
                raise ConfigurationException(
                    f"Could not load wrapper properties from '{self.properties_file}'."
                ) from e

            self.logger.log(
                f"Loaded wrapper properties from {self.properties_file}",
                logging.DEBUG,
            )

    @classmethod
    def for_project_directory(
        cls, project_dir: Union[str, pathlib.Path], logger: Optional[WrapperLogger] = None
    ) -> "WrapperExecutor":
        return cls(pathlib.Path(project_dir) / WRAPPER_PROPERTIES_LOCATION, logger)

    @classmethod
    def for_wrapper_properties_file(
        cls, properties_file: Union[str, pathlib.Path], logger: Optional[WrapperLogger] = None
    ) -> "WrapperExecutor":
        """
        Raises:
            ConfigurationException: If the file does not exist or is invalid
        """
        properties_file = pathlib.Path(properties_file)
        if not properties_file.exists():
            raise ConfigurationException(
                f"Wrapper properties file '{properties_file}' does not exist."
            )
        return cls(properties_file, logger)

    @property
    def distribution_uris(self) -> List[str]:
        """
        Returns the distributions this wrapper will use. Empty if no wrapper
        properties were found.
        """
        return self.config.distribution_uris

    @property
    def configuration(self) -> WrapperConfiguration:
        return self.config

    def execute(self, args: Sequence[str], installer, bootstrap_main_starter) -> int:
        """
        Install the configured distribution and start Maven from it.

        Args:
            args: Command line arguments passed to Maven unchanged
            installer: Installer resolving the Maven home
            bootstrap_main_starter: Launcher started with the Maven home

        Returns:
            The launcher's exit code
        """
        maven_home = installer.create_dist(self.config)
        return bootstrap_main_starter.start(list(args), maven_home)

    def _build_configuration(self) -> WrapperConfiguration:
        defaults = WrapperConfiguration()
        settings = {
            "distribution_uris": self._read_required_uri_list(DISTRIBUTION_URL_PROPERTY),
            "distribution_base": self._get_property(DISTRIBUTION_BASE_PROPERTY, defaults.distribution_base),
            "distribution_path": self._get_property(DISTRIBUTION_PATH_PROPERTY, defaults.distribution_path),
            "zip_base": self._get_property(ZIP_STORE_BASE_PROPERTY, defaults.zip_base),
            "zip_path": self._get_property(ZIP_STORE_PATH_PROPERTY, defaults.zip_path),
            "verify_download": parse_bool(self._get_property(VERIFY_DOWNLOAD_PROPERTY, "false")),
        }

        if settings["verify_download"]:
            settings["checksum_algorithm"] = self._parse_checksum(
                self._get_property(CHECKSUM_ALGORITHM_PROPERTY)
            )
            settings["checksum_extension"] = self.properties.get(CHECKSUM_EXTENSION_PROPERTY)
            if CHECKSUM_URL_PROPERTY in self.properties:
                settings["checksum_uris"] = self._read_required_uri_list(CHECKSUM_URL_PROPERTY)

        return WrapperConfiguration(**settings)

    @staticmethod
    def _parse_checksum(value: str) -> Checksum:
        if value in Checksum.__members__:
            return Checksum[value]

        checksum = Checksum.from_alias(value)
        if checksum is None:
            raise ConfigurationException(f"Unknown checksum algorithm '{value}'")
        return checksum

    def _read_required_uri_list(self, key: str) -> List[str]:
        uris = []
        for value in self._get_property(key).split(","):
            value = value.strip()
            if not urllib.parse.urlsplit(value).scheme:
                value = (self.properties_file.parent / value).absolute().as_uri()
            uris.append(value)
        return uris

    def _get_property(self, property_name: str, default_value: Optional[str] = None) -> str:
        value = self.properties.get(property_name)
        if value is not None:
            return value
        if default_value is not None:
            return default_value
        raise ConfigurationException(
            f"No value with key '{property_name}' specified in wrapper properties file '{self.properties_file}'."
        )
