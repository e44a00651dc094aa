"""
Command line entry points.

`mvnw` installs the project's Maven distribution and runs it with the given
arguments. `mvnw-generate` writes maven-wrapper.properties for a project.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from maven_wrapper import __version__
from maven_wrapper.bootstrap_main_starter import BootstrapMainStarter
from maven_wrapper.wrapper_config import SystemPropertiesHandler, WrapperExecutor, WrapperGenerator
from maven_wrapper.wrapper_downloader import DefaultDownloader
from maven_wrapper.wrapper_exceptions import WrapperException
from maven_wrapper.wrapper_installer import Installer, PathAssembler
from maven_wrapper.wrapper_logger import WrapperLogger
from maven_wrapper.wrapper_settings import WrapperSettings


APPLICATION_NAME = "mvnw"


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)
    logger = WrapperLogger()

    project_dir = os.getcwd()
    try:
        wrapper = WrapperExecutor.for_project_directory(project_dir, logger)
        installer = Installer(
            DefaultDownloader(APPLICATION_NAME, __version__, logger),
            PathAssembler(WrapperSettings.get_maven_user_home(), project_dir),
            logger,
        )
        system_properties = SystemPropertiesHandler.get_system_properties(
            WrapperSettings.get_system_properties_file()
        )
        starter = BootstrapMainStarter(logger, system_properties=system_properties)
        return wrapper.execute(args, installer, starter)
    except (WrapperException, OSError) as e:
        logger.log(str(e), logging.ERROR)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def generate(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="mvnw-generate",
        description="Write maven-wrapper.properties for a project",
    )
    parser.add_argument("--maven-version", required=True, help="Maven version the wrapper installs")
    parser.add_argument(
        "--base-distribution-url",
        action="append",
        dest="base_distribution_urls",
        help="Base URL of a Maven binaries mirror; repeat for fallbacks",
    )
    parser.add_argument("--wrapper-directory", default=os.path.join("maven", "wrapper"))
    parser.add_argument("--verify-download", action="store_true")
    parser.add_argument("--checksum-algorithm", default="SHA-1")
    parser.add_argument("--checksum-extension", default=None)
    options = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    generator = WrapperGenerator(
        options.maven_version,
        base_distribution_urls=options.base_distribution_urls,
        verify_download=options.verify_download,
        checksum_algorithm=options.checksum_algorithm,
        checksum_extension=options.checksum_extension,
    )
    try:
        generator.generate_wrapper_properties(options.wrapper_directory)
    except WrapperException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
