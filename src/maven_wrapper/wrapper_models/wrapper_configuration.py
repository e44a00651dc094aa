"""
Pydantic model for the settings of one wrapper invocation.

The configuration is built once from the wrapper properties (see
maven_wrapper.wrapper_config.wrapper_executor) and is read-only afterwards.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from maven_wrapper.wrapper_models.checksum import Checksum
from maven_wrapper.wrapper_settings import WrapperSettings


MAVEN_USER_HOME_STRING = "MAVEN_USER_HOME"
PROJECT_STRING = "PROJECT"
DEFAULT_DISTRIBUTION_PATH = "wrapper/dists"


class WrapperConfiguration(BaseModel):
    """
    Resolved settings for one installation attempt.

    Field aliases match the keys used in maven-wrapper.properties where one exists.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    distribution_uris: List[str] = Field(
        default_factory=list,
        description="Distribution URIs, tried in order until one succeeds",
    )
    distribution_base: str = Field(
        MAVEN_USER_HOME_STRING, alias="distributionBase", description="Root selector for unpacked distributions"
    )
    distribution_path: str = Field(
        DEFAULT_DISTRIBUTION_PATH, alias="distributionPath", description="Path below the distribution base"
    )
    zip_base: str = Field(
        MAVEN_USER_HOME_STRING, alias="zipStoreBase", description="Root selector for downloaded archives"
    )
    zip_path: str = Field(
        DEFAULT_DISTRIBUTION_PATH, alias="zipStorePath", description="Path below the zip base"
    )
    always_download: bool = Field(
        default_factory=lambda: WrapperSettings.env_flag(WrapperSettings.ALWAYS_DOWNLOAD_ENV),
        description="Download even if the archive is already cached",
    )
    always_unpack: bool = Field(
        default_factory=lambda: WrapperSettings.env_flag(WrapperSettings.ALWAYS_UNPACK_ENV),
        description="Unpack even if an unpacked distribution already exists",
    )
    verify_download: bool = Field(False, alias="verifyDownload")
    checksum_algorithm: Optional[Checksum] = Field(None, alias="checksumAlgorithm")
    checksum_extension: Optional[str] = Field(
        None,
        alias="checksumExtension",
        description="Overrides the algorithm's default checksum file extension",
    )
    checksum_uris: Optional[List[str]] = Field(
        None,
        description="Explicit checksum URIs, one per distribution URI",
    )

    @model_validator(mode="after")
    def _check_verification_settings(self) -> "WrapperConfiguration":
        if self.verify_download and self.checksum_algorithm is None:
            raise ValueError("verify_download requires a checksum_algorithm")
        if self.checksum_uris is not None and len(self.checksum_uris) != len(self.distribution_uris):
            raise ValueError(
                f"Expected {len(self.distribution_uris)} checksum URIs, got {len(self.checksum_uris)}"
            )
        return self

    def checksum_uri_for(self, distribution_uri: str, position: Optional[int] = None) -> str:
        """
        Returns the checksum URI to verify a distribution URI against.

        An explicitly configured checksum URI at the same position wins; otherwise the
        checksum extension is appended to the distribution URI.

        Args:
            distribution_uri: The distribution URI being verified
            position: Index of the distribution URI in distribution_uris; the first
                occurrence of distribution_uri if not given
        """
        if self.checksum_uris:
            if position is None and distribution_uri in self.distribution_uris:
                position = self.distribution_uris.index(distribution_uri)
            if position is not None:
                return self.checksum_uris[position]

        extension = self.checksum_extension or self.checksum_algorithm.default_extension
        return f"{distribution_uri}.{extension}"
