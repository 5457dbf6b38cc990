"""
Key material providers for PayGate Python SDK

A key provider hands out PEM-encoded key bytes on demand. Keys are read
afresh for every sign or verify call and are not retained by the provider
beyond what the caller gave it.
"""

import os
from pathlib import Path
from typing import Protocol, Union, runtime_checkable

from ..exceptions import CryptoError, ErrorCodes


@runtime_checkable
class KeyProvider(Protocol):
    """Protocol for key provider implementations"""

    def get_key(self) -> bytes:
        """Return PEM-encoded key bytes"""
        ...


class KeyFileProvider:
    """Provides a key stored in a PEM file"""

    def __init__(self, path: Union[str, os.PathLike]):
        self.path = Path(path)

    def get_key(self) -> bytes:
        """
        Read the key file.

        Returns:
            bytes: File contents

        Raises:
            CryptoError: If the file does not exist or cannot be read
        """
        try:
            with open(self.path, "rb") as f:
                return f.read()
        except OSError as e:
            raise CryptoError(
                f'Key file "{self.path}" not found or not readable.',
                ErrorCodes.KEY_NOT_READABLE,
                {"path": str(self.path), "original_error": str(e)}
            ) from e

    def __str__(self) -> str:
        return str(self.path)

    def __repr__(self) -> str:
        return f"KeyFileProvider(path='{self.path}')"


class KeyStringProvider:
    """Provides a key held in memory as PEM text"""

    def __init__(self, key: Union[str, bytes]):
        if isinstance(key, str):
            key = key.encode("ascii")
        if not isinstance(key, bytes) or not key:
            raise CryptoError(
                "Key string must be non-empty PEM text",
                ErrorCodes.INVALID_KEY_SOURCE
            )
        self._key = key

    def get_key(self) -> bytes:
        """Return the PEM bytes"""
        return self._key

    def __str__(self) -> str:
        return "<in-memory key>"

    def __repr__(self) -> str:
        return "KeyStringProvider(<redacted>)"


KeySource = Union[KeyProvider, str, os.PathLike, bytes]


def as_key_provider(source: KeySource) -> KeyProvider:
    """
    Normalize a key source into a provider.

    File paths (str or PathLike) become KeyFileProvider, raw bytes become
    KeyStringProvider and providers are returned unchanged.

    Raises:
        CryptoError: If the source type is not supported
    """
    if isinstance(source, (KeyFileProvider, KeyStringProvider)):
        return source
    if isinstance(source, (bytes, bytearray)):
        return KeyStringProvider(bytes(source))
    if isinstance(source, (str, os.PathLike)):
        if not str(source):
            raise CryptoError("Key file path cannot be empty", ErrorCodes.INVALID_KEY_SOURCE)
        return KeyFileProvider(source)
    if isinstance(source, KeyProvider):
        return source

    raise CryptoError(
        f"Unsupported key source: {type(source).__name__}",
        ErrorCodes.INVALID_KEY_SOURCE,
        {"type": type(source).__name__}
    )
