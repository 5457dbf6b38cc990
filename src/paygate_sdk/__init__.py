"""
PayGate Python SDK
Request signing and extension handling for the payment gateway API
"""

from .version import __version__
from .crypto.keys import (
    KeyProvider,
    KeyFileProvider,
    KeyStringProvider,
    as_key_provider,
)
from .crypto.rsa import (
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
from .exceptions import (
    PayGateSDKError,
    CryptoError,
    ProtocolMisuseError,
    SignatureVerificationError,
    ValidationError,
    ConfigurationError,
    ErrorCodes,
)
from .logging_utils import (
    SDK_LOGGER_NAME,
    TRACE_LOGGER_NAME,
    configure_logging,
    get_trace_logger,
)
from .signing import (
    FIELD_SEPARATOR,
    FieldSpec,
    SignatureBaseBuilder,
    build_signature_base,
    filter_empty,
    format_value,
    linearize,
    resolve_ordered,
    generate_dttm,
    SIGNATURE_FIELD,
    GatewaySigner,
    create_signer,
)
from .extensions import (
    Extension,
    ExtensionState,
    DatesExtension,
    CardNumberExtension,
    EETData,
    EETReport,
    EETError,
    EETWarning,
    EETInitExtension,
    EETRefundExtension,
    EETStatusExtension,
    attach_extensions,
    process_response_extensions,
)
from .config import (
    GatewayConfig,
    GatewayUrl,
    LoggingConfig,
)


# Initialize the SDK
def initialize_sdk():
    """
    Initialize the PayGate SDK and check platform compatibility.

    Returns:
        dict: Compatibility information with 'compatible' (bool) and 'warnings' (list)
    """
    warnings = []
    compatible = True

    try:
        compat_info = check_platform_compatibility()
        if not compat_info['rsa_supported']:
            warnings.append('RSA not supported by cryptography package - check version')
            compatible = False

        if not compat_info['sha1_supported']:
            warnings.append('SHA-1 signatures not supported - the default gateway digest will fail')
            compatible = False

        if not compat_info['sha256_supported']:
            warnings.append('SHA-256 signatures not supported')
            compatible = False

    except CryptoError as e:
        warnings.append(f'Platform compatibility check failed: {e}')
        compatible = False

    return {
        'compatible': compatible,
        'warnings': warnings
    }


def is_compatible():
    """
    Quick synchronous compatibility check.

    Returns:
        bool: True if platform is compatible with basic SDK functionality
    """
    return initialize_sdk()['compatible']


# Public API exports
__all__ = [
    '__version__',
    # Keys
    'KeyProvider',
    'KeyFileProvider',
    'KeyStringProvider',
    'as_key_provider',
    # RSA
    'DEFAULT_HASH_ALGORITHM',
    'HashAlgorithm',
    'RSAKeyPair',
    'check_platform_compatibility',
    'generate_key_pair',
    'load_private_key',
    'load_public_key',
    'sign_message',
    'verify_signature',
    'initialize_sdk',
    'is_compatible',
    # Exceptions
    'PayGateSDKError',
    'CryptoError',
    'ProtocolMisuseError',
    'SignatureVerificationError',
    'ValidationError',
    'ConfigurationError',
    'ErrorCodes',
    # Logging
    'SDK_LOGGER_NAME',
    'TRACE_LOGGER_NAME',
    'configure_logging',
    'get_trace_logger',
    # Signing
    'FIELD_SEPARATOR',
    'FieldSpec',
    'SignatureBaseBuilder',
    'build_signature_base',
    'filter_empty',
    'format_value',
    'linearize',
    'resolve_ordered',
    'generate_dttm',
    'SIGNATURE_FIELD',
    'GatewaySigner',
    'create_signer',
    # Extensions
    'Extension',
    'ExtensionState',
    'DatesExtension',
    'CardNumberExtension',
    'EETData',
    'EETReport',
    'EETError',
    'EETWarning',
    'EETInitExtension',
    'EETRefundExtension',
    'EETStatusExtension',
    'attach_extensions',
    'process_response_extensions',
    # Configuration
    'GatewayConfig',
    'GatewayUrl',
    'LoggingConfig',
]
