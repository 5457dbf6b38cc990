"""
Transaction dates extension ("trxDates")
"""

from datetime import date, datetime
from typing import Any, List, Mapping, Optional

from ..signing.types import FieldSpec, parse_field_specs
from ..signing.utils import parse_compact_date, parse_iso_datetime, parse_short_datetime
from .base import Extension

DATES_EXTENSION_ID = "trxDates"

DATES_RESPONSE_ORDER = parse_field_specs([
    "extension",
    "dttm",
    "?createdDate",
    "?authDate",
    "?settlementDate",
])


class DatesExtension(Extension):
    """
    Response-only extension reporting when a payment was created, authorized
    and settled

    Attributes:
        created_date: Creation timestamp (from ISO 8601)
        auth_date: Authorization timestamp (from YYMMDDHHMMSS)
        settlement_date: Settlement date (from YYYYMMDD)
    """

    accepts_input = False
    accepts_expected_order = False

    def __init__(self, *, strict: bool = True):
        super().__init__(DATES_EXTENSION_ID, strict=strict)
        self.created_date: Optional[datetime] = None
        self.auth_date: Optional[datetime] = None
        self.settlement_date: Optional[date] = None

    def get_expected_order(self) -> List[FieldSpec]:
        return list(DATES_RESPONSE_ORDER)

    def set_response_data(self, data: Mapping[str, Any]) -> None:
        super().set_response_data(data)
        self.created_date = parse_iso_datetime(data.get("createdDate"))
        self.auth_date = parse_short_datetime(data.get("authDate"))
        self.settlement_date = parse_compact_date(data.get("settlementDate"))
