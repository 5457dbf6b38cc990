"""
Test suite for the gateway payload signer

This module tests string and payload signing, response verification, trace
logging and signer construction from configuration.
"""

import logging
import re

import pytest
from unittest.mock import Mock, patch

from paygate_sdk.config import GatewayConfig
from paygate_sdk.crypto.rsa import HashAlgorithm
from paygate_sdk.exceptions import CryptoError, ErrorCodes
from paygate_sdk.logging_utils import TRACE_LOGGER_NAME
from paygate_sdk.signing import (
    SIGNATURE_FIELD,
    GatewaySigner,
    create_signer,
    generate_dttm,
    validate_dttm,
)
from paygate_sdk.signing.utils import DTTM_FORMAT

from conftest import (
    FIXED_DTTM,
    KNOWN_MESSAGE,
    KNOWN_SHA1_SIGNATURE,
    KNOWN_SHA256_SIGNATURE,
    PRIVATE_KEY_PATH,
    PROTECTED_KEY_PASSWORD,
    PROTECTED_PRIVATE_KEY_PATH,
    PUBLIC_KEY_PATH,
    corrupt,
)


class TestSignString:
    """Test signing and verifying canonical strings"""

    def test_sign_known_message(self, signer):
        assert signer.sign_string(KNOWN_MESSAGE) == KNOWN_SHA1_SIGNATURE

    def test_sign_known_message_sha256(self, signer_sha256):
        assert signer_sha256.sign_string(KNOWN_MESSAGE) == KNOWN_SHA256_SIGNATURE

    def test_verify_string(self, signer):
        assert signer.verify_string(KNOWN_MESSAGE, KNOWN_SHA1_SIGNATURE)
        assert not signer.verify_string(KNOWN_MESSAGE, corrupt(KNOWN_SHA1_SIGNATURE))

    def test_protected_key(self):
        signer = GatewaySigner(
            str(PROTECTED_PRIVATE_KEY_PATH),
            str(PUBLIC_KEY_PATH),
            private_key_password=PROTECTED_KEY_PASSWORD,
        )
        assert signer.sign_string(KNOWN_MESSAGE) == KNOWN_SHA1_SIGNATURE

    def test_missing_private_key(self):
        signer = GatewaySigner(None, str(PUBLIC_KEY_PATH))

        with pytest.raises(CryptoError, match="No private key configured") as exc_info:
            signer.sign_string("x")
        assert exc_info.value.error_code == ErrorCodes.INVALID_KEY_SOURCE

    def test_missing_public_key(self):
        signer = GatewaySigner(str(PRIVATE_KEY_PATH), None)

        with pytest.raises(CryptoError, match="No public key configured"):
            signer.verify_string("x", KNOWN_SHA1_SIGNATURE)

    def test_slow_signing_is_reported(self, signer, caplog):
        with patch("paygate_sdk.signing.signer.PerformanceTimer") as timer_class:
            timer_class.return_value.elapsed_ms.return_value = 500.0
            with caplog.at_level(logging.WARNING, logger="paygate_sdk.signing.signer"):
                signer.sign_string("x")

        assert "Signing operation took 500.00ms" in caplog.text


class TestPayloadSigning:
    """Test signing of whole payloads"""

    def setup_method(self):
        """Set up test payload"""
        self.payload = {
            "merchantId": "M1",
            "orderNo": "5547",
            "dttm": FIXED_DTTM,
            "totalAmount": 1789600,
            "closePayment": True,
            "description": None,
        }

    def test_sign_payload_appends_signature(self, signer):
        signed = signer.sign_payload(self.payload)

        assert list(signed)[-1] == SIGNATURE_FIELD
        assert SIGNATURE_FIELD not in self.payload
        assert signer.verify_string("M1|5547|20240131123456|1789600|true|", signed[SIGNATURE_FIELD])

    def test_existing_signature_is_replaced(self, signer):
        signed = signer.sign_payload(dict(self.payload, signature="stale"))
        assert signed[SIGNATURE_FIELD] != "stale"
        assert signer.verify_payload(signed)

    def test_sign_payload_with_field_order(self, signer):
        signed = signer.sign_payload(self.payload, ["orderNo", "merchantId", "?missing"])
        assert signer.verify_string("5547|M1", signed[SIGNATURE_FIELD])

    def test_verify_payload_round_trip(self, signer):
        signed = signer.sign_payload(self.payload)
        assert signer.verify_payload(signed)

    def test_verify_tampered_payload(self, signer):
        signed = signer.sign_payload(self.payload)
        signed["totalAmount"] = 1

        assert not signer.verify_payload(signed)

    def test_verify_payload_without_signature(self, signer):
        assert not signer.verify_payload(self.payload)
        assert not signer.verify_payload(dict(self.payload, signature=""))

    def test_verify_payload_malformed_signature(self, signer, caplog):
        with caplog.at_level(logging.WARNING, logger="paygate_sdk.signing.signer"):
            assert not signer.verify_payload(dict(self.payload, signature="not base64!!"))
        assert not signer.verify_payload(dict(self.payload, signature=12345))
        assert "Received signature is malformed" in caplog.text

    def test_verify_payload_broken_key_propagates(self):
        signer = GatewaySigner(None, b"not a key")
        with pytest.raises(CryptoError) as exc_info:
            signer.verify_payload({"a": "1", "signature": KNOWN_SHA1_SIGNATURE})
        assert exc_info.value.error_code == ErrorCodes.INVALID_PUBLIC_KEY

    def test_verify_payload_with_field_order(self, signer):
        order = ["merchantId", "?paymentStatus", "orderNo"]
        response = {"orderNo": "5547", "merchantId": "M1"}
        response[SIGNATURE_FIELD] = signer.sign_string("M1|5547")

        assert signer.verify_payload(response, order)


class TestTraceLogging:
    """Test that base strings reach the trace logger"""

    def test_sign_writes_base_string(self, signer, caplog):
        with caplog.at_level(logging.DEBUG, logger=TRACE_LOGGER_NAME):
            signer.sign_payload({"a": "1", "b": "2"})

        assert 'Signing string "1|2"' in caplog.text

    def test_private_key_content_not_traced(self, caplog):
        pem = PRIVATE_KEY_PATH.read_bytes()
        signer = GatewaySigner(pem, None)

        with caplog.at_level(logging.DEBUG, logger=TRACE_LOGGER_NAME):
            signer.sign_string("x")

        assert "<in-memory key>" in caplog.text
        assert "PRIVATE KEY" not in caplog.text
        assert "PRIVATE KEY" not in repr(signer)

    def test_custom_trace_logger(self):
        trace_logger = Mock(spec=logging.Logger)
        signer = GatewaySigner(str(PRIVATE_KEY_PATH), str(PUBLIC_KEY_PATH), trace_logger=trace_logger)

        signer.verify_payload({"a": "1", "signature": KNOWN_SHA1_SIGNATURE})

        trace_logger.debug.assert_called_once()
        assert "base string is:\n1" in trace_logger.debug.call_args[0][0]


class TestDttm:
    """Test timestamp generation"""

    def test_generate_dttm_format(self):
        dttm = generate_dttm()
        assert re.fullmatch(r"\d{14}", dttm)
        assert validate_dttm(dttm)

    def test_validate_dttm(self):
        assert validate_dttm("20240131123456")
        assert not validate_dttm("20241331123456")
        assert not validate_dttm("2024013112345")
        assert not validate_dttm("")

    def test_signer_uses_factory(self, signer):
        assert signer.dttm() == FIXED_DTTM

    def test_default_factory(self):
        signer = GatewaySigner(None, None)
        assert validate_dttm(signer.dttm())

    def test_format_constant(self):
        assert DTTM_FORMAT == "%Y%m%d%H%M%S"


class TestCreateSigner:
    """Test signer construction from configuration"""

    def setup_method(self):
        """Set up configuration"""
        self.config = GatewayConfig(
            merchant_id="M1",
            private_key_file=str(PROTECTED_PRIVATE_KEY_PATH),
            bank_public_key_file=str(PUBLIC_KEY_PATH),
            private_key_password=PROTECTED_KEY_PASSWORD,
            hash_algorithm="sha256",
        )

    def test_create_signer(self):
        signer = create_signer(self.config)

        assert signer.hash_algorithm is HashAlgorithm.SHA256
        assert signer.private_key_password == PROTECTED_KEY_PASSWORD
        assert signer.sign_string(KNOWN_MESSAGE) == KNOWN_SHA256_SIGNATURE

    def test_overrides(self):
        signer = create_signer(self.config, hash_algorithm="sha1", dttm_factory=lambda: FIXED_DTTM)

        assert signer.hash_algorithm is HashAlgorithm.SHA1
        assert signer.dttm() == FIXED_DTTM

    def test_config_method(self):
        signer = self.config.create_signer()
        assert signer.verify_string(KNOWN_MESSAGE, KNOWN_SHA256_SIGNATURE)

    def test_repr(self):
        text = repr(create_signer(self.config))
        assert "hash_algorithm='sha256'" in text
        assert PROTECTED_KEY_PASSWORD not in text
