"""
Process-wide settings for the maven wrapper, read from the environment.
"""

import os
import pathlib
from typing import Optional


class WrapperSettings:
    """
    Provides the environment variable names and default locations used by the wrapper.
    """

    MAVEN_USER_HOME_ENV = "MAVEN_USER_HOME"
    ALWAYS_DOWNLOAD_ENV = "MAVEN_WRAPPER_ALWAYS_DOWNLOAD"
    ALWAYS_UNPACK_ENV = "MAVEN_WRAPPER_ALWAYS_UNPACK"
    PROXY_USER_ENV = "MAVEN_WRAPPER_PROXY_USER"
    PROXY_PASSWORD_ENV = "MAVEN_WRAPPER_PROXY_PASSWORD"
    JAVA_HOME_ENV = "JAVA_HOME"

    DEFAULT_MAVEN_USER_HOME = pathlib.Path.home() / ".m2"
    SYSTEM_PROPERTIES_FILE_NAME = "maven-system.properties"

    @staticmethod
    def get_maven_user_home() -> pathlib.Path:
        """
        Returns the per-user home directory under which distributions are cached.
        """
        user_home = os.environ.get(WrapperSettings.MAVEN_USER_HOME_ENV)
        if user_home:
            return pathlib.Path(user_home)
        return WrapperSettings.DEFAULT_MAVEN_USER_HOME

    @staticmethod
    def get_system_properties_file() -> pathlib.Path:
        """
        Returns the file holding system properties passed to every Maven run.
        """
        return WrapperSettings.get_maven_user_home() / WrapperSettings.SYSTEM_PROPERTIES_FILE_NAME

    @staticmethod
    def env_flag(name: str) -> bool:
        """
        Parses a boolean environment variable. Only "true" (any case) is true.
        """
        return parse_bool(os.environ.get(name))

    @staticmethod
    def get_proxy_credentials() -> Optional[tuple]:
        """
        Returns (user, password) when a proxy user is configured, None otherwise.
        """
        user = os.environ.get(WrapperSettings.PROXY_USER_ENV)
        if user is None:
            return None
        return user, os.environ.get(WrapperSettings.PROXY_PASSWORD_ENV, "")


def parse_bool(value: Optional[str]) -> bool:
    return value is not None and value.lower() == "true"
