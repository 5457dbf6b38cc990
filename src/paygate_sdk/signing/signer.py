"""
Gateway payload signer

This module provides the signer that callers and extensions share: it
bundles the merchant's private key, the gateway's public key and the hash
algorithm, turns payloads into canonical strings and signs or verifies them.
Key material is loaded from its source on every call.
"""

import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

from ..crypto.keys import KeySource, as_key_provider
from ..crypto.rsa import Password, sign_message, verify_signature
from ..exceptions import CryptoError, ErrorCodes
from ..logging_utils import get_trace_logger
from .canonical import build_signature_base
from .types import DEFAULT_HASH_ALGORITHM, FieldSpecLike, HashAlgorithm
from .utils import PerformanceTimer, generate_dttm

logger = logging.getLogger(__name__)

SIGNATURE_FIELD = "signature"

# Signing slower than this is reported as a warning
SLOW_OPERATION_MS = 50


class GatewaySigner:
    """
    Signs outgoing payloads and verifies incoming ones

    A signer holds only key sources and settings, never loaded keys, so one
    instance can be shared by concurrent callers.
    """

    def __init__(
        self,
        private_key: Optional[KeySource],
        public_key: Optional[KeySource],
        *,
        private_key_password: Password = None,
        hash_algorithm: Union[str, HashAlgorithm] = DEFAULT_HASH_ALGORITHM,
        dttm_factory: Optional[Callable[[], str]] = None,
        trace_logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the signer.

        Args:
            private_key: Merchant private key source (needed for signing)
            public_key: Gateway public key source (needed for verification)
            private_key_password: Passphrase of an encrypted private key
            hash_algorithm: Digest agreed with the gateway
            dttm_factory: Producer of "dttm" timestamps (current time if None)
            trace_logger: Logger receiving base strings (SDK trace logger if None)
        """
        self.private_key = private_key
        self.public_key = public_key
        self.private_key_password = private_key_password
        self.hash_algorithm = HashAlgorithm.parse(hash_algorithm)
        self.dttm_factory = dttm_factory or generate_dttm
        self.trace_logger = trace_logger or get_trace_logger()

    def dttm(self) -> str:
        """Return the timestamp to place into "dttm" fields"""
        return self.dttm_factory()

    def trace(self, message: str) -> None:
        """Write a message to the trace log"""
        self.trace_logger.debug(message)

    def sign_string(self, base_string: str) -> str:
        """
        Sign a canonical string with the merchant private key.

        Returns:
            str: Base64-encoded signature

        Raises:
            CryptoError: If no private key is configured or signing fails
        """
        if self.private_key is None:
            raise CryptoError("No private key configured for signing", ErrorCodes.INVALID_KEY_SOURCE)

        timer = PerformanceTimer()
        signature = sign_message(base_string, self.private_key, self.hash_algorithm, self.private_key_password)

        elapsed_ms = timer.elapsed_ms()
        if elapsed_ms > SLOW_OPERATION_MS:
            logger.warning(f"Signing operation took {elapsed_ms:.2f}ms (target: <{SLOW_OPERATION_MS}ms)")

        self.trace(f'Signing string "{base_string}" using key {as_key_provider(self.private_key)}, result: {signature}')
        return signature

    def verify_string(self, base_string: str, signature: str) -> bool:
        """
        Verify a signature of a canonical string with the gateway public key.

        Returns:
            bool: True if signature is valid

        Raises:
            CryptoError: If no public key is configured, the key is broken or
                the signature is not base64
        """
        if self.public_key is None:
            raise CryptoError("No public key configured for verification", ErrorCodes.INVALID_KEY_SOURCE)

        return verify_signature(base_string, signature, self.public_key, self.hash_algorithm)

    def verify_received(self, base_string: str, signature: Any) -> bool:
        """
        Verify a signature received from the gateway.

        A signature that is not a base64 string counts as invalid.

        Raises:
            CryptoError: If no public key is configured or the key is broken
        """
        try:
            return self.verify_string(base_string, signature)
        except CryptoError as e:
            if e.error_code != ErrorCodes.MALFORMED_SIGNATURE:
                raise
            logger.warning(f"Received signature is malformed: {e.message}")
            return False

    def sign_payload(
        self,
        payload: Mapping[str, Any],
        field_specs: Optional[Iterable[FieldSpecLike]] = None,
    ) -> Dict[str, Any]:
        """
        Sign a request payload.

        Args:
            payload: Request fields in the order the gateway signs them
            field_specs: Explicit ordering; natural order of payload if None

        Returns:
            dict: Copy of payload with "signature" appended
        """
        data = {key: value for key, value in payload.items() if key != SIGNATURE_FIELD}
        base_string = build_signature_base(data, field_specs)
        data[SIGNATURE_FIELD] = self.sign_string(base_string)
        return data

    def verify_payload(
        self,
        response: Mapping[str, Any],
        field_specs: Optional[Iterable[FieldSpecLike]] = None,
    ) -> bool:
        """
        Verify the signature carried inside a response.

        Args:
            response: Response fields including "signature"
            field_specs: Explicit ordering; natural order of response if None

        Returns:
            bool: True if signature is present and valid, False if it is
                missing or malformed

        Raises:
            CryptoError: If the public key cannot be loaded
        """
        signature = response.get(SIGNATURE_FIELD)
        if not signature:
            logger.info("Response does not contain a signature")
            return False

        without_signature = {key: value for key, value in response.items() if key != SIGNATURE_FIELD}
        base_string = build_signature_base(without_signature, field_specs)
        self.trace(f"Verifying signature of response, base string is:\n{base_string}")
        return self.verify_received(base_string, signature)

    @staticmethod
    def _describe(source: Optional[KeySource]) -> str:
        return "None" if source is None else str(as_key_provider(source))

    def __repr__(self) -> str:
        return (
            f"GatewaySigner(private_key={self._describe(self.private_key)}, public_key={self._describe(self.public_key)}, "
            f"hash_algorithm='{self.hash_algorithm.value}')"
        )


def create_signer(config: Any, **overrides: Any) -> GatewaySigner:
    """
    Create a signer from gateway configuration.

    Args:
        config: GatewayConfig instance
        **overrides: Keyword arguments passed to GatewaySigner instead of config values

    Returns:
        GatewaySigner: Configured signer
    """
    options = {
        "private_key_password": config.private_key_password,
        "hash_algorithm": config.hash_algorithm,
    }
    options.update(overrides)
    private_key = options.pop("private_key", config.private_key_file or None)
    public_key = options.pop("public_key", config.bank_public_key_file or None)
    return GatewaySigner(private_key, public_key, **options)
