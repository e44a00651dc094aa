"""
Checksum algorithms supported for verifying downloaded distributions.

Each algorithm carries the file extension conventionally used for its checksum
files and the aliases under which it can be named in configuration.
"""

import hashlib
from enum import Enum
from typing import BinaryIO, Dict, Optional, Tuple

from maven_wrapper.wrapper_exceptions import ChecksumGenerationException


BUFFER_SIZE = 65535


class Checksum(Enum):
    """
    Enumeration of checksum algorithms.

    Member values are (default extension, aliases, hashlib name).
    """

    SHA1 = ("sha1", ("SHA-1",), "sha1")
    MD5 = ("md5", ("MD5",), "md5")
    SHA256 = ("sha256", ("SHA-256",), "sha256")
    SHA512 = ("sha512", ("SHA-512",), "sha512")

    def __init__(self, default_extension: str, aliases: Tuple[str, ...], digest_name: str):
        self._default_extension = default_extension
        self._aliases = aliases
        self._digest_name = digest_name

    @property
    def default_extension(self) -> str:
        return self._default_extension

    @property
    def aliases(self) -> Tuple[str, ...]:
        return self._aliases

    @staticmethod
    def from_alias(alias: str) -> Optional["Checksum"]:
        """
        Look up an algorithm by one of its aliases (case-sensitive).

        Returns:
            The matching Checksum, or None if the alias is unknown
        """
        return _CHECKSUM_BY_ALIAS.get(alias)

    def generate(self, data: BinaryIO, buffer_size: int = BUFFER_SIZE) -> str:
        """
        Compute the lowercase hex digest of a binary stream, read to exhaustion.

        Args:
            data: Binary stream to hash
            buffer_size: Number of bytes read per chunk

        Returns:
            The hex-encoded digest

        Raises:
            ChecksumGenerationException: If the digest cannot be created or the stream cannot be read
        """
        try:
            digest = hashlib.new(self._digest_name)
            for chunk in iter(lambda: data.read(buffer_size), b""):
                digest.update(chunk)
        except (OSError, ValueError) as e:
            raise ChecksumGenerationException("Could not generate checksum for stream.") from e
        return digest.hexdigest()

    def verify(self, data: BinaryIO, checksum: str) -> bool:
        """
        Check a stream against an expected hex digest.

        The comparison is exact: no whitespace trimming and no case folding.
        """
        return checksum == self.generate(data)


def _build_alias_table() -> Dict[str, Checksum]:
    table: Dict[str, Checksum] = {}
    for checksum in Checksum:
        for alias in checksum.aliases:
            assert alias not in table, f"Duplicate checksum alias detected: {alias}"
            table[alias] = checksum
    return table


_CHECKSUM_BY_ALIAS = _build_alias_table()
