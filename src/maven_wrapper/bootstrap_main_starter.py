"""
Starts Maven from an installed distribution.
"""

import logging
import os
import pathlib
import subprocess
from typing import List, Mapping, Optional, Sequence

from maven_wrapper.wrapper_exceptions import WrapperException
from maven_wrapper.wrapper_logger import WrapperLogger
from maven_wrapper.wrapper_settings import WrapperSettings
from maven_wrapper.wrapper_utils import PlatformUtils


LAUNCHER_CLASS = "org.codehaus.plexus.classworlds.launcher.Launcher"


class BootstrapMainStarter:
    """
    Runs the classworlds launcher of a Maven home in a Java subprocess.
    """

    def __init__(
        self,
        logger: Optional[WrapperLogger] = None,
        project_dir: Optional[pathlib.Path] = None,
        system_properties: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            logger: Logger for progress messages
            project_dir: Directory Maven runs in, the current working directory if not given
            system_properties: Passed to the Java process as -Dkey=value arguments
        """
        self.logger = logger or WrapperLogger()
        self.project_dir = project_dir
        self.system_properties = dict(system_properties or {})

    def start(self, args: Sequence[str], maven_home: pathlib.Path) -> int:
        """
        Run Maven with the given arguments and wait for it to finish.

        Returns:
            Maven's exit code

        Raises:
            WrapperException: If the distribution has no classworlds launcher jar
        """
        cmd = self.build_command(args, pathlib.Path(maven_home))
        self.logger.log(f"Starting Maven: {' '.join(cmd)}", logging.DEBUG)
        return subprocess.call(cmd, cwd=self.project_dir)

    def build_command(self, args: Sequence[str], maven_home: pathlib.Path) -> List[str]:
        boot_jar = self._find_launcher_jar(maven_home)
        project_dir = self.project_dir or pathlib.Path(os.getcwd())

        return [
            self._java_executable(),
            "-classpath",
            str(boot_jar),
            f"-Dclassworlds.conf={maven_home / 'bin' / 'm2.conf'}",
            f"-Dmaven.home={maven_home}",
            f"-Dmaven.multiModuleProjectDirectory={project_dir}",
            *(f"-D{key}={value}" for key, value in self.system_properties.items()),
            LAUNCHER_CLASS,
            *args,
        ]

    @staticmethod
    def _find_launcher_jar(maven_home: pathlib.Path) -> pathlib.Path:
        jars = sorted((maven_home / "boot").glob("plexus-classworlds-*.jar"))
        if not jars:
            raise WrapperException(f"Could not locate the Maven launcher JAR in Maven distribution '{maven_home}'.")
        return jars[0]

    @staticmethod
    def _java_executable() -> str:
        java_name = "java.exe" if PlatformUtils.is_windows() else "java"
        java_home = os.environ.get(WrapperSettings.JAVA_HOME_ENV)
        if java_home:
            return str(pathlib.Path(java_home) / "bin" / java_name)
        return java_name
