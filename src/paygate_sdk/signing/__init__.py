"""
PayGate Python SDK - Signing Module

Canonical signature base construction and payload signing for the payment
gateway protocol. The canonical string is the pipe-joined list of field
values that both parties sign, so its construction must match the gateway
byte for byte.
"""

from .types import (
    FIELD_SEPARATOR,
    DEFAULT_HASH_ALGORITHM,
    HashAlgorithm,
    FieldSpec,
    SignableValue,
    parse_field_specs,
)

from .canonical import (
    MAX_NESTING_DEPTH,
    SignatureBaseBuilder,
    build_signature_base,
    filter_empty,
    format_value,
    linearize,
    linearize_to_list,
    resolve_ordered,
)

from .utils import (
    DTTM_FORMAT,
    generate_dttm,
    validate_dttm,
    parse_iso_datetime,
    parse_short_datetime,
    parse_compact_date,
    format_price_value,
)

from .signer import (
    SIGNATURE_FIELD,
    GatewaySigner,
    create_signer,
)

# Public API exports
__all__ = [
    # Types
    'FIELD_SEPARATOR',
    'DEFAULT_HASH_ALGORITHM',
    'HashAlgorithm',
    'FieldSpec',
    'SignableValue',
    'parse_field_specs',
    # Canonicalization
    'MAX_NESTING_DEPTH',
    'SignatureBaseBuilder',
    'build_signature_base',
    'filter_empty',
    'format_value',
    'linearize',
    'linearize_to_list',
    'resolve_ordered',
    # Utilities
    'DTTM_FORMAT',
    'generate_dttm',
    'validate_dttm',
    'parse_iso_datetime',
    'parse_short_datetime',
    'parse_compact_date',
    'format_price_value',
    # Signer
    'SIGNATURE_FIELD',
    'GatewaySigner',
    'create_signer',
]
