"""
PayGate Python SDK - Extensions Module

Extensions are signed blocks of additional data exchanged with the gateway
next to regular calls.
"""

from .base import (
    DTTM_FIELD,
    EXTENSION_FIELD,
    Extension,
    ExtensionState,
)

from .dates import DATES_EXTENSION_ID, DatesExtension
from .card_number import CARD_NUMBER_EXTENSION_ID, CardNumberExtension

from .eet import (
    EET_EXTENSION_ID,
    EETData,
    EETErrorMessage,
    EETError,
    EETWarning,
    EETReport,
    EETInitExtension,
    EETRefundExtension,
    EETStatusExtension,
)

from .processing import (
    EXTENSIONS_FIELD,
    attach_extensions,
    process_response_extensions,
)

__all__ = [
    # Generic extension
    'DTTM_FIELD',
    'EXTENSION_FIELD',
    'Extension',
    'ExtensionState',
    # Response-only extensions
    'DATES_EXTENSION_ID',
    'DatesExtension',
    'CARD_NUMBER_EXTENSION_ID',
    'CardNumberExtension',
    # EET
    'EET_EXTENSION_ID',
    'EETData',
    'EETErrorMessage',
    'EETError',
    'EETWarning',
    'EETReport',
    'EETInitExtension',
    'EETRefundExtension',
    'EETStatusExtension',
    # Processing
    'EXTENSIONS_FIELD',
    'attach_extensions',
    'process_response_extensions',
]
