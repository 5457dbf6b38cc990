"""
Generic gateway extension

An extension is an additional block of data exchanged alongside a regular
gateway call. It has two independent tracks: an outgoing block that is
signed with the merchant key before sending, and an incoming block whose
signature is verified with the gateway key. Specialized extensions switch
tracks off through the capability flags and compute or parse their data.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..exceptions import (
    ErrorCodes,
    ProtocolMisuseError,
    SignatureVerificationError,
    ValidationError,
)
from ..signing.canonical import build_signature_base, linearize
from ..signing.signer import SIGNATURE_FIELD, GatewaySigner
from ..signing.types import FieldSpec, FieldSpecLike, parse_field_specs

logger = logging.getLogger(__name__)

EXTENSION_FIELD = "extension"
DTTM_FIELD = "dttm"


class ExtensionState(str, Enum):
    """Lifecycle state of an extension instance"""
    IDLE = "idle"
    INPUT_SET = "input_set"
    SIGNED = "signed"
    RESPONSE_SET = "response_set"
    VERIFIED = "verified"
    VERIFICATION_FAILED = "verification_failed"


class Extension:
    """
    Extension block with an outgoing and an incoming track

    Instances carry per-call state and are not meant to be shared between
    concurrent calls.

    Attributes:
        extension_id: Identifier sent in the "extension" field
        strict: Whether apply_response raises on a bad signature
        state: Current lifecycle state
    """

    accepts_input = True
    accepts_expected_order = True

    def __init__(self, extension_id: str, *, strict: bool = True):
        if not isinstance(extension_id, str) or not extension_id:
            raise ValidationError(
                "Extension ID cannot be empty",
                ErrorCodes.INVALID_EXTENSION_ID,
                {"extension_id": extension_id}
            )

        self.extension_id = extension_id
        self.strict = strict
        self.state = ExtensionState.IDLE

        self._input_data: Optional[Dict[str, Any]] = None
        self._expected_order: Optional[List[FieldSpec]] = None
        self._response_data: Optional[Dict[str, Any]] = None
        self._signature_correct = False

    # Outgoing track

    def set_input(self, fields: Mapping[str, Any]) -> "Extension":
        """
        Set the data block sent with the request.

        Args:
            fields: Ordered field values; empty "dttm" and "extension"
                values are filled in when the block is built

        Returns:
            Extension: self, for chaining

        Raises:
            ProtocolMisuseError: If this extension does not send input
        """
        if not self.accepts_input:
            raise ProtocolMisuseError(
                f"Extension {self.extension_id} computes its input, it cannot be set directly",
                ErrorCodes.INPUT_NOT_ACCEPTED,
                {"extension": self.extension_id, "type": type(self).__name__}
            )

        self._input_data = dict(fields) if fields is not None else None
        self.state = ExtensionState.INPUT_SET
        return self

    def get_input_data(self) -> Optional[Dict[str, Any]]:
        """Return the data block to send, or None when nothing is sent"""
        return self._input_data

    def request_signature_base(self, data: Mapping[str, Any]) -> str:
        """Build the canonical string of an outgoing block"""
        return linearize(data)

    def build_request_block(self, signer: GatewaySigner) -> Optional[Dict[str, Any]]:
        """
        Build the signed request block of this extension.

        Args:
            signer: Signer holding the merchant private key

        Returns:
            dict: Block with trailing "signature", or None when there is no input

        Raises:
            CryptoError: If signing fails
        """
        source = self.get_input_data()
        if not source:
            return None

        block = dict(source)
        if DTTM_FIELD in block and not block[DTTM_FIELD]:
            block[DTTM_FIELD] = signer.dttm()
        if EXTENSION_FIELD in block and not block[EXTENSION_FIELD]:
            block[EXTENSION_FIELD] = self.extension_id
        block.pop(SIGNATURE_FIELD, None)

        base_string = self.request_signature_base(block)
        signer.trace(f"Signing request of extension {self.extension_id}, base string is:\n{base_string}")
        block[SIGNATURE_FIELD] = signer.sign_string(base_string)

        self.state = ExtensionState.SIGNED
        return block

    # Incoming track

    def set_expected_order(self, field_specs: Optional[Iterable[FieldSpecLike]]) -> "Extension":
        """
        Set the field order used to verify the response block.

        Args:
            field_specs: Field specs in wire syntax or as FieldSpec objects;
                None restores natural order

        Returns:
            Extension: self, for chaining

        Raises:
            ProtocolMisuseError: If this extension has a fixed response order
        """
        if not self.accepts_expected_order:
            raise ProtocolMisuseError(
                f"Extension {self.extension_id} has a fixed response order",
                ErrorCodes.EXPECTED_ORDER_NOT_ACCEPTED,
                {"extension": self.extension_id, "type": type(self).__name__}
            )

        self._expected_order = parse_field_specs(field_specs) if field_specs is not None else None
        return self

    def get_expected_order(self) -> Optional[List[FieldSpec]]:
        """Return field specs of the response block, or None for natural order"""
        return self._expected_order

    def set_response_data(self, data: Mapping[str, Any]) -> None:
        """Store the response block received from the gateway"""
        self._response_data = dict(data)
        self.state = ExtensionState.RESPONSE_SET

    def get_response_data(self) -> Optional[Dict[str, Any]]:
        """Return the raw response block"""
        return self._response_data

    def response_signature_base(self, data: Mapping[str, Any]) -> str:
        """Build the canonical string of a response block without its signature"""
        return build_signature_base(data, self.get_expected_order())

    def verify_signature(self, received: Mapping[str, Any], signer: GatewaySigner) -> bool:
        """
        Verify the signature of a response block.

        Args:
            received: Response block including "signature"
            signer: Signer holding the gateway public key

        Returns:
            bool: True if the signature is present and valid, False if it is
                missing or malformed

        Raises:
            CryptoError: If the public key cannot be loaded
        """
        signature = received.get(SIGNATURE_FIELD) or ""
        if not signature:
            logger.info(f"Response of extension {self.extension_id} is not signed")
            self._record_verification(False)
            return False

        without_signature = {key: value for key, value in received.items() if key != SIGNATURE_FIELD}
        base_string = self.response_signature_base(without_signature)
        signer.trace(f"Verifying signature of response of extension {self.extension_id}, base string is:\n{base_string}")

        correct = signer.verify_received(base_string, signature)
        self._record_verification(correct)
        return correct

    def apply_response(self, received: Mapping[str, Any], signer: GatewaySigner) -> bool:
        """
        Store a response block and verify its signature.

        Returns:
            bool: Whether the signature is correct

        Raises:
            SignatureVerificationError: If the signature is incorrect and the
                extension is strict
        """
        self.set_response_data(received)
        correct = self.verify_signature(received, signer)

        if not correct:
            if self.strict:
                raise SignatureVerificationError(
                    f"Signature of extension {self.extension_id} is incorrect",
                    ErrorCodes.SIGNATURE_INCORRECT,
                    {"extension": self.extension_id}
                )
            logger.warning(f"Signature of extension {self.extension_id} is incorrect, accepted in non-strict mode")

        return correct

    def is_signature_correct(self) -> bool:
        """Return the result of the last verification"""
        return self._signature_correct

    def _record_verification(self, correct: bool) -> None:
        self._signature_correct = correct
        self.state = ExtensionState.VERIFIED if correct else ExtensionState.VERIFICATION_FAILED

    def __repr__(self) -> str:
        return f"{type(self).__name__}(extension_id='{self.extension_id}', strict={self.strict}, state='{self.state.value}')"
