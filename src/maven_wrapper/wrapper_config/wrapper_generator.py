"""
Generates the maven-wrapper.properties file for a project.
"""

import logging
import pathlib
from typing import List, Optional, Sequence, Union

from maven_wrapper.wrapper_config import properties as properties_io
from maven_wrapper.wrapper_config.wrapper_executor import (
    CHECKSUM_ALGORITHM_PROPERTY,
    CHECKSUM_URL_PROPERTY,
    DISTRIBUTION_URL_PROPERTY,
    VERIFY_DOWNLOAD_PROPERTY,
)
from maven_wrapper.wrapper_exceptions import ConfigurationException
from maven_wrapper.wrapper_logger import WrapperLogger
from maven_wrapper.wrapper_models import Checksum


DEFAULT_BASE_DISTRIBUTION_URL = (
    "https://repository.apache.org/content/repositories/releases/org/apache/maven/apache-maven"
)
DIST_FILENAME_PATH_TEMPLATE = "{version}/apache-maven-{version}-bin.zip"
WRAPPER_PROPERTIES_FILE_NAME = "maven-wrapper.properties"
WRAPPER_PROPERTIES_COMMENTS = "Maven download properties"


class WrapperGenerator:
    """
    Writes the wrapper properties that point a project at a Maven version.
    """

    def __init__(
        self,
        maven_version: str,
        base_distribution_urls: Optional[Sequence[str]] = None,
        verify_download: bool = False,
        checksum_algorithm: str = "SHA-1",
        checksum_extension: Optional[str] = None,
        logger: Optional[WrapperLogger] = None,
    ):
        """
        Args:
            maven_version: The Maven version the wrapper installs
            base_distribution_urls: Mirrors hosting the Maven binaries, in order of preference
            verify_download: Whether the wrapper verifies downloads against a checksum
            checksum_algorithm: Alias of the checksum algorithm, e.g. "SHA-1"
            checksum_extension: Checksum file extension, the algorithm's default if not given
            logger: Logger for progress messages
        """
        self.maven_version = maven_version
        self.base_distribution_urls: List[str] = list(base_distribution_urls or [DEFAULT_BASE_DISTRIBUTION_URL])
        self.verify_download = verify_download
        self.checksum_algorithm = checksum_algorithm
        self.checksum_extension = checksum_extension
        self.logger = logger or WrapperLogger()

    def build_properties(self) -> dict:
        """
        Returns the wrapper properties as a dictionary.

        Raises:
            ConfigurationException: If the checksum algorithm is not supported
        """
        props = {VERIFY_DOWNLOAD_PROPERTY: str(self.verify_download).lower()}
        extension = ""

        if self.verify_download:
            checksum = Checksum.from_alias(self.checksum_algorithm)
            if checksum is None:
                raise ConfigurationException(f"Unsupported checksum algorithm: {self.checksum_algorithm}")
            extension = self.checksum_extension or checksum.default_extension
            props[CHECKSUM_ALGORITHM_PROPERTY] = checksum.name

        distribution_urls = [self._distribution_url(base) for base in self.base_distribution_urls]
        props[DISTRIBUTION_URL_PROPERTY] = ",".join(distribution_urls)

        if self.verify_download:
            props[CHECKSUM_URL_PROPERTY] = ",".join(f"{url}.{extension}" for url in distribution_urls)

        return props

    def generate_wrapper_properties(self, wrapper_dir: Union[str, pathlib.Path]) -> pathlib.Path:
        """
        Write maven-wrapper.properties into wrapper_dir, creating it if needed.

        Returns:
            Path of the written file
        """
        props = self.build_properties()

        wrapper_dir = pathlib.Path(wrapper_dir)
        wrapper_dir.mkdir(parents=True, exist_ok=True)
        properties_file = wrapper_dir / WRAPPER_PROPERTIES_FILE_NAME
        properties_io.dump(props, properties_file, WRAPPER_PROPERTIES_COMMENTS)

        self.logger.log(f"Wrote wrapper properties to {properties_file}", logging.INFO)
        return properties_file

    def _distribution_url(self, base_url: str) -> str:
        if not base_url.endswith("/"):
            base_url += "/"
        return base_url + DIST_FILENAME_PATH_TEMPLATE.format(version=self.maven_version)
