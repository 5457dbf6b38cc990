"""
RSA signing and verification for PayGate Python SDK

This module provides RSA PKCS#1 v1.5 signatures over canonical strings using
the cryptography package. Keys are PEM encoded and loaded from their source
on every call; signatures are exchanged as base64 text.
"""

import sys
import base64
import binascii
import platform
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..exceptions import CryptoError, ErrorCodes, ValidationError
from .keys import KeySource, as_key_provider

# Minimum RSA modulus accepted when generating keys
RSA_MIN_KEY_SIZE = 1024
RSA_DEFAULT_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537

Password = Union[str, bytes, None]


class HashAlgorithm(str, Enum):
    """Digest used inside the RSA signature primitive"""
    SHA1 = "sha1"
    SHA256 = "sha256"

    @classmethod
    def parse(cls, value: Union[str, "HashAlgorithm"]) -> "HashAlgorithm":
        """
        Parse hash algorithm from enum member or name.

        Accepts "sha1", "SHA-1", "sha256", "SHA-256" and similar spellings.

        Raises:
            ValidationError: If the algorithm is not supported
        """
        if isinstance(value, cls):
            return value

        if not isinstance(value, str):
            raise ValidationError(
                f"Hash algorithm must be a string, got {type(value).__name__}",
                ErrorCodes.UNSUPPORTED_HASH_ALGORITHM
            )

        normalized = value.strip().lower().replace("-", "").replace("_", "")
        for member in cls:
            if member.value == normalized:
                return member

        raise ValidationError(
            f"Unsupported hash algorithm: {value}",
            ErrorCodes.UNSUPPORTED_HASH_ALGORITHM,
            {"supported": [m.value for m in cls]}
        )


# Default digest expected by the gateway unless configured otherwise
DEFAULT_HASH_ALGORITHM = HashAlgorithm.SHA1


@dataclass
class RSAKeyPair:
    """
    PEM-encoded RSA key pair

    Attributes:
        private_key: Private key in PKCS#8 PEM (encrypted when generated with a password)
        public_key: Public key in SubjectPublicKeyInfo PEM
    """
    private_key: bytes
    public_key: bytes

    def __post_init__(self):
        """Validate key pair after initialization"""
        if not isinstance(self.private_key, bytes) or not self.private_key:
            raise CryptoError("Private key must be non-empty PEM bytes", ErrorCodes.INVALID_PRIVATE_KEY)
        if not isinstance(self.public_key, bytes) or not self.public_key:
            raise CryptoError("Public key must be non-empty PEM bytes", ErrorCodes.INVALID_PUBLIC_KEY)


def _hash_for(hash_algorithm: Union[str, HashAlgorithm]) -> hashes.HashAlgorithm:
    try:
        algorithm = HashAlgorithm.parse(hash_algorithm)
    except ValidationError as e:
        raise CryptoError(e.message, ErrorCodes.UNSUPPORTED_HASH_ALGORITHM, e.details) from e

    if algorithm is HashAlgorithm.SHA256:
        return hashes.SHA256()
    return hashes.SHA1()


def _password_bytes(password: Password) -> Optional[bytes]:
    if password is None or password == "" or password == b"":
        return None
    if isinstance(password, str):
        return password.encode("utf-8")
    return password


def _message_bytes(message: Union[str, bytes]) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    if isinstance(message, (bytes, bytearray)):
        return bytes(message)
    raise ValidationError(
        f"Message must be str or bytes, got {type(message).__name__}",
        ErrorCodes.UNSUPPORTED_VALUE_TYPE
    )


def check_platform_compatibility() -> Dict[str, Any]:
    """
    Check platform compatibility for RSA signature operations.

    Returns:
        dict: Compatibility information including cryptography availability,
              RSA and digest support and platform details
    """
    compatibility = {
        'cryptography_available': True,
        'rsa_supported': False,
        'sha1_supported': False,
        'sha256_supported': False,
        'platform_info': {
            'system': platform.system(),
            'python_version': sys.version,
            'architecture': platform.architecture()[0],
        }
    }

    try:
        key = rsa.generate_private_key(public_exponent=RSA_PUBLIC_EXPONENT, key_size=RSA_MIN_KEY_SIZE)
        compatibility['rsa_supported'] = True
    except (UnsupportedAlgorithm, ValueError):
        return compatibility

    for name, digest in (('sha1_supported', hashes.SHA1()), ('sha256_supported', hashes.SHA256())):
        try:
            signature = key.sign(b"compatibility", padding.PKCS1v15(), digest)
            key.public_key().verify(signature, b"compatibility", padding.PKCS1v15(), digest)
            compatibility[name] = True
        except (UnsupportedAlgorithm, InvalidSignature):
            compatibility[name] = False

    return compatibility


def load_private_key(source: KeySource, password: Password = None) -> rsa.RSAPrivateKey:
    """
    Load an RSA private key from a key source.

    Args:
        source: Key provider, path to a PEM file or PEM bytes
        password: Passphrase of an encrypted key

    Returns:
        RSAPrivateKey: Loaded private key

    Raises:
        CryptoError: If the key cannot be read, decrypted or is not RSA
    """
    provider = as_key_provider(source)
    pem = provider.get_key()

    try:
        key = serialization.load_pem_private_key(pem, password=_password_bytes(password))
    except TypeError as e:
        # Raised for a missing passphrase on an encrypted key and vice versa
        raise CryptoError(
            f'Private key from "{provider}" requires a different passphrase: {e}',
            ErrorCodes.INVALID_PASSPHRASE,
            {"source": str(provider)}
        ) from e
    except (ValueError, UnsupportedAlgorithm) as e:
        raise CryptoError(
            f'Private key could not be loaded from "{provider}". '
            f'Please make sure that it contains a valid private key in PEM format '
            f'and that the passphrase is correct.',
            ErrorCodes.INVALID_PRIVATE_KEY,
            {"source": str(provider), "original_error": str(e)}
        ) from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise CryptoError(
            f'Private key from "{provider}" is not an RSA key',
            ErrorCodes.UNSUPPORTED_KEY_TYPE,
            {"source": str(provider), "key_type": type(key).__name__}
        )

    return key


def load_public_key(source: KeySource) -> rsa.RSAPublicKey:
    """
    Load an RSA public key from a key source.

    Args:
        source: Key provider, path to a PEM file or PEM bytes

    Returns:
        RSAPublicKey: Loaded public key

    Raises:
        CryptoError: If the key cannot be read or is not RSA
    """
    provider = as_key_provider(source)
    pem = provider.get_key()

    try:
        key = serialization.load_pem_public_key(pem)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise CryptoError(
            f'Public key could not be loaded from "{provider}". '
            f'Please make sure that it contains a valid public key in PEM format.',
            ErrorCodes.INVALID_PUBLIC_KEY,
            {"source": str(provider), "original_error": str(e)}
        ) from e

    if not isinstance(key, rsa.RSAPublicKey):
        raise CryptoError(
            f'Public key from "{provider}" is not an RSA key',
            ErrorCodes.UNSUPPORTED_KEY_TYPE,
            {"source": str(provider), "key_type": type(key).__name__}
        )

    return key


def sign_message(
    message: Union[str, bytes],
    private_key: KeySource,
    hash_algorithm: Union[str, HashAlgorithm] = DEFAULT_HASH_ALGORITHM,
    password: Password = None,
) -> str:
    """
    Sign a message with an RSA private key.

    Args:
        message: Message to sign; strings are encoded as UTF-8
        private_key: Key provider, path to a PEM file or PEM bytes
        hash_algorithm: Digest used inside the signature
        password: Passphrase of an encrypted private key

    Returns:
        str: Base64-encoded signature

    Raises:
        CryptoError: If the key cannot be loaded or signing fails
    """
    digest = _hash_for(hash_algorithm)
    message_bytes = _message_bytes(message)
    key = load_private_key(private_key, password)

    try:
        signature = key.sign(message_bytes, padding.PKCS1v15(), digest)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise CryptoError(f"Signing failed: {e}", ErrorCodes.SIGNING_FAILED) from e

    return base64.b64encode(signature).decode("ascii")


def verify_signature(
    message: Union[str, bytes],
    signature: Union[str, bytes],
    public_key: KeySource,
    hash_algorithm: Union[str, HashAlgorithm] = DEFAULT_HASH_ALGORITHM,
) -> bool:
    """
    Verify a base64-encoded RSA signature of a message.

    Args:
        message: Original message; strings are encoded as UTF-8
        signature: Base64-encoded signature
        public_key: Key provider, path to a PEM file or PEM bytes
        hash_algorithm: Digest the signer used

    Returns:
        bool: True if signature is valid, False otherwise

    Raises:
        CryptoError: If the key cannot be loaded or the signature is not valid base64
    """
    digest = _hash_for(hash_algorithm)
    message_bytes = _message_bytes(message)

    try:
        signature_bytes = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise CryptoError(
            f"Signature is not valid base64: {e}",
            ErrorCodes.MALFORMED_SIGNATURE
        ) from e

    key = load_public_key(public_key)

    try:
        key.verify(signature_bytes, message_bytes, padding.PKCS1v15(), digest)
        return True
    except InvalidSignature:
        return False


def generate_key_pair(key_size: int = RSA_DEFAULT_KEY_SIZE, password: Password = None) -> RSAKeyPair:
    """
    Generate an RSA key pair in PEM encoding.

    Args:
        key_size: Modulus size in bits
        password: Optional passphrase used to encrypt the private key

    Returns:
        RSAKeyPair: The generated key pair

    Raises:
        CryptoError: If the key size is too small or generation fails
    """
    if not isinstance(key_size, int) or key_size < RSA_MIN_KEY_SIZE:
        raise CryptoError(
            f"Key size must be an integer of at least {RSA_MIN_KEY_SIZE} bits",
            ErrorCodes.INVALID_PRIVATE_KEY,
            {"key_size": key_size}
        )

    try:
        key = rsa.generate_private_key(public_exponent=RSA_PUBLIC_EXPONENT, key_size=key_size)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise CryptoError(f"Key generation failed: {e}", ErrorCodes.KEY_GENERATION_FAILED) from e

    password_bytes = _password_bytes(password)
    if password_bytes:
        encryption = serialization.BestAvailableEncryption(password_bytes)
    else:
        encryption = serialization.NoEncryption()

    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption
    )
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )

    return RSAKeyPair(private_key=private_pem, public_key=public_pem)
