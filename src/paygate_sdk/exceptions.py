"""
Exception classes for PayGate Python SDK
"""

from typing import Optional, Dict, Any


class PayGateSDKError(Exception):
    """Base exception for all PayGate SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"


class CryptoError(PayGateSDKError):
    """Exception raised when key material or the signature primitive fails"""
    pass


class ProtocolMisuseError(PayGateSDKError):
    """Exception raised when an extension track is used in a way its variant forbids"""
    pass


class SignatureVerificationError(PayGateSDKError):
    """Exception raised when a strict extension receives an incorrectly signed block"""
    pass


class ValidationError(PayGateSDKError):
    """Exception raised for validation failures"""
    pass


class ConfigurationError(PayGateSDKError):
    """Exception raised for configuration loading and validation errors"""
    pass


# Common SDK error codes
class ErrorCodes:
    """Standard error codes for programmatic handling"""

    # Canonicalization errors
    INVALID_FIELD_SPEC = "INVALID_FIELD_SPEC"
    UNSUPPORTED_VALUE_TYPE = "UNSUPPORTED_VALUE_TYPE"

    # Key errors
    KEY_NOT_READABLE = "KEY_NOT_READABLE"
    INVALID_PRIVATE_KEY = "INVALID_PRIVATE_KEY"
    INVALID_PUBLIC_KEY = "INVALID_PUBLIC_KEY"
    INVALID_PASSPHRASE = "INVALID_PASSPHRASE"
    UNSUPPORTED_KEY_TYPE = "UNSUPPORTED_KEY_TYPE"
    INVALID_KEY_SOURCE = "INVALID_KEY_SOURCE"

    # Signature errors
    SIGNING_FAILED = "SIGNING_FAILED"
    KEY_GENERATION_FAILED = "KEY_GENERATION_FAILED"
    MALFORMED_SIGNATURE = "MALFORMED_SIGNATURE"
    UNSUPPORTED_HASH_ALGORITHM = "UNSUPPORTED_HASH_ALGORITHM"
    SIGNATURE_INCORRECT = "SIGNATURE_INCORRECT"

    # Extension protocol errors
    INVALID_EXTENSION_ID = "INVALID_EXTENSION_ID"
    INPUT_NOT_ACCEPTED = "INPUT_NOT_ACCEPTED"
    EXPECTED_ORDER_NOT_ACCEPTED = "EXPECTED_ORDER_NOT_ACCEPTED"
    INVALID_EXTENSION_DATA = "INVALID_EXTENSION_DATA"

    # Configuration errors
    MISSING_VALUE = "MISSING_VALUE"
    INVALID_BOOLEAN = "INVALID_BOOLEAN"
    INVALID_LOG_LEVEL = "INVALID_LOG_LEVEL"
    INVALID_RETURN_METHOD = "INVALID_RETURN_METHOD"
    INVALID_HASH_ALGORITHM = "INVALID_HASH_ALGORITHM"
    UNKNOWN_KEYS = "UNKNOWN_KEYS"
    INVALID_FORMAT = "INVALID_FORMAT"
    PARSE_ERROR = "PARSE_ERROR"
    FILE_ERROR = "FILE_ERROR"
