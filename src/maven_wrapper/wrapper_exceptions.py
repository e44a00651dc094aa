"""
Exceptions raised by the maven wrapper.
"""


class WrapperException(Exception):
    """
    Base exception for all maven wrapper errors.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationException(WrapperException):
    """Raised for missing or invalid wrapper configuration."""

    pass


class DownloadException(WrapperException):
    """Raised when a resource cannot be fetched."""

    pass


class ChecksumVerificationException(WrapperException):
    """Raised when a downloaded distribution does not match its checksum."""

    pass


class ChecksumGenerationException(WrapperException):
    """Raised when a checksum cannot be computed for a stream."""

    pass


class DistributionLayoutException(WrapperException):
    """Raised when an unpacked distribution does not have exactly one root directory."""

    pass
