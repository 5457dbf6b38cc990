"""
Cryptographic operations for PayGate Python SDK
"""

from .keys import (
    KeyProvider,
    KeyFileProvider,
    KeyStringProvider,
    KeySource,
    as_key_provider,
)

from .rsa import (
    DEFAULT_HASH_ALGORITHM,
    HashAlgorithm,
    RSAKeyPair,
    check_platform_compatibility,
    generate_key_pair,
    load_private_key,
    load_public_key,
    sign_message,
    verify_signature,
)

__all__ = [
    # Key providers
    'KeyProvider',
    'KeyFileProvider',
    'KeyStringProvider',
    'KeySource',
    'as_key_provider',

    # RSA operations
    'DEFAULT_HASH_ALGORITHM',
    'HashAlgorithm',
    'RSAKeyPair',
    'check_platform_compatibility',
    'generate_key_pair',
    'load_private_key',
    'load_public_key',
    'sign_message',
    'verify_signature',
]
