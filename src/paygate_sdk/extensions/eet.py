"""
Electronic sales registration extensions ("eetV3")

The gateway can register card payments with the Czech electronic sales
registry (EET) on behalf of the merchant. This module provides the typed
EET payload sent with payment init and refund, the status report returned
by the gateway and the three extensions carrying them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

from ..exceptions import ErrorCodes, ValidationError
from ..signing.canonical import format_value, linearize
from ..signing.types import FIELD_SEPARATOR
from ..signing.utils import format_iso_datetime, format_price_value, parse_iso_datetime
from .base import DTTM_FIELD, EXTENSION_FIELD, Extension

EET_EXTENSION_ID = "eetV3"

PriceValue = Union[int, float, str, Decimal, None]

# Optional EET amounts in the order the gateway signs them
EET_OPTIONAL_PRICE_FIELDS = (
    ("price_zero_vat", "priceZeroVat"),
    ("price_standard_vat", "priceStandardVat"),
    ("vat_standard", "vatStandard"),
    ("price_first_reduced_vat", "priceFirstReducedVat"),
    ("vat_first_reduced", "vatFirstReduced"),
    ("price_second_reduced_vat", "priceSecondReducedVat"),
    ("vat_second_reduced", "vatSecondReduced"),
    ("price_travel_service", "priceTravelService"),
    ("price_used_goods_standard_vat", "priceUsedGoodsStandardVat"),
    ("price_used_goods_first_reduced", "priceUsedGoodsFirstReduced"),
    ("price_used_goods_second_reduced", "priceUsedGoodsSecondReduced"),
    ("price_subsequent_settlement", "priceSubsequentSettlement"),
    ("price_used_subsequent_settlement", "priceUsedSubsequentSettlement"),
)

EET_DATA_KEYS = (
    ("premise_id", "premiseId"),
    ("cash_register_id", "cashRegisterId"),
    ("total_price", "totalPrice"),
    ("delegated_vat_id", "delegatedVatId"),
) + EET_OPTIONAL_PRICE_FIELDS


def _is_set(value: Any) -> bool:
    """Whether an optional EET value is sent (zero and empty values are not)"""
    if value is None or value == "" or value == "0":
        return False
    if isinstance(value, (int, float, Decimal)) and value == 0:
        return False
    return True


def _as_premise_id(value: Any) -> Union[int, float]:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    try:
        number = Decimal(str(value).strip())
    except ArithmeticError as e:
        raise ValidationError(
            f"Premise ID must be numeric, got {value!r}",
            ErrorCodes.INVALID_EXTENSION_DATA,
            {"premiseId": value}
        ) from e
    if number == number.to_integral_value():
        return int(number)
    return float(number)


@dataclass
class EETData:
    """
    EET payload of a sale or refund

    Attributes:
        premise_id: Numeric identifier of the business premises
        cash_register_id: Identifier of the cash register
        total_price: Total amount of the receipt
        delegated_vat_id: VAT ID of the delegating taxpayer
        raw_data: Mapping the instance was parsed from, if any
    """
    premise_id: Union[int, str, None] = None
    cash_register_id: Optional[str] = None
    total_price: PriceValue = None
    delegated_vat_id: Optional[str] = None
    price_zero_vat: PriceValue = None
    price_standard_vat: PriceValue = None
    vat_standard: PriceValue = None
    price_first_reduced_vat: PriceValue = None
    vat_first_reduced: PriceValue = None
    price_second_reduced_vat: PriceValue = None
    vat_second_reduced: PriceValue = None
    price_travel_service: PriceValue = None
    price_used_goods_standard_vat: PriceValue = None
    price_used_goods_first_reduced: PriceValue = None
    price_used_goods_second_reduced: PriceValue = None
    price_subsequent_settlement: PriceValue = None
    price_used_subsequent_settlement: PriceValue = None
    raw_data: Optional[Dict[str, Any]] = field(default=None, repr=False, compare=False)

    def as_dict(self) -> Dict[str, Any]:
        """
        Render the payload in wire form.

        Mandatory fields are always present; optional amounts only when set.
        Amounts are formatted with two decimal places.

        Returns:
            dict: Wire fields in signing order

        Raises:
            ValidationError: If an amount or the premise ID is not numeric
        """
        result: Dict[str, Any] = {
            "premiseId": _as_premise_id(self.premise_id),
            "cashRegisterId": self.cash_register_id,
            "totalPrice": format_price_value(self.total_price if self.total_price is not None else 0),
        }

        if _is_set(self.delegated_vat_id):
            result["delegatedVatId"] = self.delegated_vat_id

        for attribute, key in EET_OPTIONAL_PRICE_FIELDS:
            value = getattr(self, attribute)
            if _is_set(value):
                result[key] = format_price_value(value)

        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EETData":
        """Create EETData from its wire form, keeping unknown keys in raw_data"""
        values = {attribute: data[key] for attribute, key in EET_DATA_KEYS if key in data}
        return cls(raw_data=dict(data), **values)

    def signature_base(self) -> str:
        """Canonical string of the payload"""
        return linearize(self.as_dict())


@dataclass
class EETErrorMessage:
    """Coded message attached to an EET report"""
    code: Any
    desc: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EETErrorMessage":
        return cls(code=data.get("code"), desc=data.get("desc"))

    def signature_base(self) -> str:
        return f"{format_value(self.code)}{FIELD_SEPARATOR}{format_value(self.desc)}"


class EETError(EETErrorMessage):
    """Error returned by the EET registry"""
    pass


class EETWarning(EETErrorMessage):
    """Warning returned by the EET registry"""
    pass


def _parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


@dataclass
class EETReport:
    """
    Registration report of one EET receipt

    Timestamps are parsed to datetime; the raw strings stay in raw_data and
    are used for the signature base so that it matches the gateway exactly.
    """
    eet_status: Any = None
    data: Optional[EETData] = None
    verification_mode: Optional[bool] = None
    vat_id: Optional[str] = None
    receipt_number: Optional[str] = None
    receipt_time: Optional[datetime] = None
    evidence_mode: Any = None
    uuid: Optional[str] = None
    send_time: Optional[datetime] = None
    accept_time: Optional[datetime] = None
    bkp: Optional[str] = None
    pkp: Optional[str] = None
    fik: Optional[str] = None
    reject_time: Optional[datetime] = None
    error: Optional[EETError] = None
    warnings: List[EETWarning] = field(default_factory=list)
    raw_data: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EETReport":
        """
        Parse a report block received from the gateway.

        Args:
            data: Report block

        Returns:
            EETReport: Parsed report

        Raises:
            ValidationError: If the block is not a mapping
        """
        if not isinstance(data, Mapping):
            raise ValidationError(
                f"EET report must be a mapping, got {type(data).__name__}",
                ErrorCodes.INVALID_EXTENSION_DATA
            )

        report = cls(raw_data=dict(data))
        report.eet_status = data.get("eetStatus")
        if isinstance(data.get("data"), Mapping):
            report.data = EETData.from_dict(data["data"])
        if "verificationMode" in data:
            report.verification_mode = _parse_flag(data["verificationMode"])
        report.vat_id = data.get("vatId")
        report.receipt_number = data.get("receiptNumber")
        report.receipt_time = parse_iso_datetime(data.get("receiptTime"))
        report.evidence_mode = data.get("evidenceMode")
        report.uuid = data.get("uuid")
        report.send_time = parse_iso_datetime(data.get("sendTime"))
        report.accept_time = parse_iso_datetime(data.get("acceptTime"))
        report.bkp = data.get("bkp")
        report.pkp = data.get("pkp")
        report.fik = data.get("fik")
        report.reject_time = parse_iso_datetime(data.get("rejectTime"))

        if data.get("error"):
            report.error = EETError.from_dict(data["error"])

        warnings = data.get("warning")
        if isinstance(warnings, list):
            report.warnings = [EETWarning.from_dict(item) for item in warnings]

        return report

    def _time_segment(self, key: str, moment: datetime) -> str:
        raw = self.raw_data.get(key)
        if raw:
            return raw
        return format_iso_datetime(moment)

    def signature_base(self) -> str:
        """Canonical string of the report as signed by the gateway"""
        segments: List[str] = []

        if self.eet_status is not None:
            segments.append(format_value(self.eet_status))
        if self.data is not None:
            segments.append(self.data.signature_base())
        if self.verification_mode is not None:
            segments.append(format_value(self.verification_mode))
        if self.vat_id:
            segments.append(format_value(self.vat_id))
        if self.receipt_number:
            segments.append(format_value(self.receipt_number))
        if self.receipt_time:
            segments.append(self._time_segment("receiptTime", self.receipt_time))
        if self.evidence_mode is not None:
            segments.append(format_value(self.evidence_mode))
        if self.uuid is not None:
            segments.append(format_value(self.uuid))
        if self.send_time:
            segments.append(self._time_segment("sendTime", self.send_time))
        if self.accept_time:
            segments.append(self._time_segment("acceptTime", self.accept_time))
        if self.bkp:
            segments.append(format_value(self.bkp))
        if self.pkp:
            segments.append(format_value(self.pkp))
        if self.fik:
            segments.append(format_value(self.fik))
        if self.reject_time:
            segments.append(self._time_segment("rejectTime", self.reject_time))
        if self.error is not None:
            segments.append(self.error.signature_base())
        for warning in self.warnings:
            segments.append(warning.signature_base())

        return FIELD_SEPARATOR.join(segments)


def _require_eet_data(data: Any) -> EETData:
    if not isinstance(data, EETData):
        raise ValidationError(
            f"EET data must be an EETData instance, got {type(data).__name__}",
            ErrorCodes.INVALID_EXTENSION_DATA
        )
    return data


class EETInitExtension(Extension):
    """
    Sends EET data with payment init

    The response block carries no fields of its own beyond the signed
    envelope, so it is verified in natural order.
    """

    accepts_input = False

    def __init__(self, data: EETData, verification_mode: bool = False, *, strict: bool = True):
        super().__init__(EET_EXTENSION_ID, strict=strict)
        self.data = _require_eet_data(data)
        self.verification_mode = bool(verification_mode)

    def get_input_data(self) -> Dict[str, Any]:
        return {
            EXTENSION_FIELD: self.extension_id,
            DTTM_FIELD: None,
            "data": self.data.as_dict(),
            "verificationMode": "true" if self.verification_mode else "false",
        }


class EETRefundExtension(Extension):
    """Sends EET data with a refund; nothing is sent until data is set"""

    accepts_input = False

    def __init__(self, data: Optional[EETData] = None, *, strict: bool = True):
        super().__init__(EET_EXTENSION_ID, strict=strict)
        self.data = _require_eet_data(data) if data is not None else None

    def set_data(self, data: Optional[EETData]) -> "EETRefundExtension":
        """Set or clear the EET data of the refund"""
        self.data = _require_eet_data(data) if data is not None else None
        return self

    def get_input_data(self) -> Optional[Dict[str, Any]]:
        if self.data is None:
            return None
        return {
            EXTENSION_FIELD: self.extension_id,
            DTTM_FIELD: None,
            "data": self.data.as_dict(),
        }


class EETStatusExtension(Extension):
    """
    Receives the EET registration status of a payment

    Attributes:
        report: Report of the sale, if present
        cancels: Reports of cancelled sales
    """

    accepts_input = False
    accepts_expected_order = False

    def __init__(self, *, strict: bool = True):
        super().__init__(EET_EXTENSION_ID, strict=strict)
        self.report: Optional[EETReport] = None
        self.cancels: List[EETReport] = []

    def get_input_data(self) -> None:
        return None

    def set_response_data(self, data: Mapping[str, Any]) -> None:
        super().set_response_data(data)
        self.report, self.cancels = self._parse_reports(data)

    @staticmethod
    def _parse_reports(data: Mapping[str, Any]):
        report = EETReport.from_dict(data["report"]) if data.get("report") else None
        cancels = [EETReport.from_dict(item) for item in data.get("cancel") or []]
        return report, cancels

    def response_signature_base(self, data: Mapping[str, Any]) -> str:
        report, cancels = self._parse_reports(data)

        segments = [format_value(data.get(EXTENSION_FIELD)), format_value(data.get(DTTM_FIELD))]
        if report is not None:
            segments.append(report.signature_base())
        for cancel in cancels:
            segments.append(cancel.signature_base())
        return FIELD_SEPARATOR.join(segments)

    @property
    def bkp(self) -> str:
        """Taxpayer security code of the sale"""
        return self.report.bkp if self.report and self.report.bkp else ""

    @property
    def pkp(self) -> str:
        """Taxpayer signature code of the sale"""
        return self.report.pkp if self.report and self.report.pkp else ""

    @property
    def fik(self) -> str:
        """Fiscal identification code assigned by the registry"""
        return self.report.fik if self.report and self.report.fik else ""

    @property
    def eet_status(self) -> Any:
        """Registration status code of the sale"""
        return self.report.eet_status if self.report else ""
