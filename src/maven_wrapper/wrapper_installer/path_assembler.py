"""
Maps a distribution URI to its local cache locations.
"""

import dataclasses
import hashlib
import os
import pathlib
import posixpath
import urllib.parse
from typing import Optional, Union

from maven_wrapper.wrapper_exceptions import ConfigurationException
from maven_wrapper.wrapper_models import (
    MAVEN_USER_HOME_STRING,
    PROJECT_STRING,
    WrapperConfiguration,
)


@dataclasses.dataclass(frozen=True)
class LocalDistribution:
    """
    Where a distribution lives on disk: the directory it is unpacked into and
    the path of the downloaded archive.
    """

    distribution_dir: pathlib.Path
    zip_file: pathlib.Path


class PathAssembler:
    """
    Computes cache paths for distribution URIs.

    The layout is <base>/<path>/<archive name without extension>/<hash of URI>,
    so URIs sharing an archive name never share a directory.
    """

    def __init__(
        self,
        maven_user_home: Union[str, pathlib.Path],
        project_dir: Optional[Union[str, pathlib.Path]] = None,
    ):
        """
        Args:
            maven_user_home: Directory the MAVEN_USER_HOME base resolves to
            project_dir: Directory the PROJECT base resolves to; the current
                working directory at lookup time if not given
        """
        self.maven_user_home = pathlib.Path(maven_user_home)
        self.project_dir = pathlib.Path(project_dir) if project_dir is not None else None

    def get_distribution(self, configuration: WrapperConfiguration, distribution_uri: str) -> LocalDistribution:
        """
        Determines the local locations for a distribution URI. Performs no I/O.

        Raises:
            ConfigurationException: If a configured base is unknown
        """
        base_name = self._get_dist_name(distribution_uri)
        dist_name = self._remove_extension(base_name)
        root_dir_name = pathlib.Path(dist_name, self._get_hash(distribution_uri))

        dist_dir = self._get_base_dir(configuration.distribution_base) / configuration.distribution_path / root_dir_name
        dist_zip = self._get_base_dir(configuration.zip_base) / configuration.zip_path / root_dir_name / base_name

        return LocalDistribution(distribution_dir=dist_dir, zip_file=dist_zip)

    @staticmethod
    def _get_hash(uri: str) -> str:
        digest = hashlib.md5(uri.encode("utf-8")).digest()
        return _to_base36(int.from_bytes(digest, "big"))

    @staticmethod
    def _remove_extension(name: str) -> str:
        p = name.rfind(".")
        if p < 0:
            return name
        return name[:p]

    @staticmethod
    def _get_dist_name(uri: str) -> str:
        path = urllib.parse.unquote(urllib.parse.urlsplit(uri).path)
        return posixpath.basename(path.rstrip("/"))

    def _get_base_dir(self, base: str) -> pathlib.Path:
        if base == MAVEN_USER_HOME_STRING:
            return self.maven_user_home
        if base == PROJECT_STRING:
            return self.project_dir if self.project_dir is not None else pathlib.Path(os.getcwd())
        raise ConfigurationException(f"Base: {base} is unknown")


def _to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))
