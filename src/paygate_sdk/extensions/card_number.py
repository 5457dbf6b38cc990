"""
Masked card number extension ("maskClnRP")
"""

from typing import Any, List, Mapping, Optional

from ..signing.types import FieldSpec, parse_field_specs
from .base import Extension

CARD_NUMBER_EXTENSION_ID = "maskClnRP"

CARD_NUMBER_RESPONSE_ORDER = parse_field_specs([
    "extension",
    "dttm",
    "maskedCln",
    "expiration",
    "longMaskedCln",
])


class CardNumberExtension(Extension):
    """
    Response-only extension carrying the masked number of the paying card

    Attributes:
        masked_cln: Short masked card number, e.g. "****1234"
        expiration: Card expiration as sent by the gateway, e.g. "12/24"
        long_masked_cln: Long masked card number, e.g. "4154****1234"
    """

    accepts_input = False
    accepts_expected_order = False

    def __init__(self, *, strict: bool = True):
        super().__init__(CARD_NUMBER_EXTENSION_ID, strict=strict)
        self.masked_cln: Optional[str] = None
        self.expiration: Optional[str] = None
        self.long_masked_cln: Optional[str] = None

    def get_expected_order(self) -> List[FieldSpec]:
        return list(CARD_NUMBER_RESPONSE_ORDER)

    def set_response_data(self, data: Mapping[str, Any]) -> None:
        super().set_response_data(data)
        # Values from an earlier response are kept when a field is absent
        if data.get("maskedCln") is not None:
            self.masked_cln = data["maskedCln"]
        if data.get("expiration") is not None:
            self.expiration = data["expiration"]
        if data.get("longMaskedCln") is not None:
            self.long_masked_cln = data["longMaskedCln"]
