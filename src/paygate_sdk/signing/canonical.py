"""
Canonical signature base construction for gateway messages

This module turns structured request and response data into the
pipe-delimited string that both the client and the gateway sign. Two modes
exist: natural-order traversal of the data (`linearize`) and explicit
ordered resolution against a list of field specs (`resolve_ordered`), where
required fields keep an empty position when missing and optional fields
are left out.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..exceptions import ErrorCodes, ValidationError
from .types import (
    FIELD_SEPARATOR,
    FieldSpec,
    FieldSpecLike,
    parse_field_specs,
)

logger = logging.getLogger(__name__)

# Nested containers deeper than this contribute no segments
MAX_NESTING_DEPTH = 10

_MISSING = object()


def is_container(value: Any) -> bool:
    """
    Check whether value is spliced into the canonical string.

    Strings and bytes are sequences in Python but are leaves here.
    """
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, (Mapping, Sequence))


def format_value(value: Any) -> str:
    """
    Render a scalar value as a canonical string segment.

    Args:
        value: Scalar value (None, bool, number, string or bytes)

    Returns:
        str: Segment text

    Raises:
        ValidationError: If the value has no canonical representation
    """
    if value is None:
        return ""

    # bool must be tested before int
    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, str):
        return value

    if isinstance(value, int):
        return str(value)

    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)

    if isinstance(value, Decimal):
        return str(value)

    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError(
                f"Bytes value is not valid UTF-8: {e}",
                ErrorCodes.UNSUPPORTED_VALUE_TYPE
            ) from e

    raise ValidationError(
        f"Unsupported value type for signing: {type(value).__name__}",
        ErrorCodes.UNSUPPORTED_VALUE_TYPE,
        {"type": type(value).__name__}
    )


def _children(value: Any) -> Iterable[Any]:
    if isinstance(value, Mapping):
        return value.values()
    return value


def _flatten(value: Any, depth: int, out: List[str]) -> None:
    if not is_container(value):
        out.append(format_value(value))
        return

    if depth > MAX_NESTING_DEPTH:
        logger.warning(f"Nesting deeper than {MAX_NESTING_DEPTH} levels ignored in signature base")
        return

    for child in _children(value):
        _flatten(child, depth + 1, out)


def linearize_to_list(value: Any) -> List[str]:
    """
    Flatten a value into its ordered list of canonical segments.

    Mappings contribute their values in insertion order, sequences their
    items; nested containers are spliced in place.

    Args:
        value: Scalar, mapping or sequence

    Returns:
        list: Canonical segments
    """
    segments: List[str] = []
    if is_container(value):
        for child in _children(value):
            _flatten(child, 1, segments)
    else:
        segments.append(format_value(value))
    return segments


def linearize(value: Any) -> str:
    """
    Build the canonical string of a value in its natural key order.

    Example:
        >>> linearize({"a": "x", "b": True, "c": None, "d": [1, 2]})
        'x|true||1|2'

    Args:
        value: Scalar, mapping or sequence

    Returns:
        str: Pipe-joined canonical string
    """
    return FIELD_SEPARATOR.join(linearize_to_list(value))


def _lookup(data: Any, path: Tuple[str, ...]) -> Any:
    position = data
    for segment in path:
        if isinstance(position, Mapping):
            if segment not in position:
                return _MISSING
            position = position[segment]
        elif is_container(position):
            if not segment.isdigit():
                return _MISSING
            index = int(segment)
            if index >= len(position):
                return _MISSING
            position = position[index]
        else:
            return _MISSING
    return position


def resolve_ordered(data: Mapping[str, Any], field_specs: Iterable[FieldSpecLike]) -> List[str]:
    """
    Resolve field specs against data in the given order.

    Each spec is a dot-separated key path, optionally marked as optional.
    Missing required fields become empty segments, missing optional fields
    are left out. A path that ends on a mapping or sequence contributes all
    of its values in their own order.

    Example:
        >>> data = {"foo": "bar", "arr": {"a": "A", "b": "B"}}
        >>> resolve_ordered(data, ["foo", "arr.a", "required", "?optional", "arr"])
        ['bar', 'A', '', 'A', 'B']

    Args:
        data: Source data
        field_specs: Field specs as FieldSpec objects or wire-syntax strings

    Returns:
        list: Canonical segments
    """
    segments: List[str] = []

    for spec in parse_field_specs(field_specs):
        value = _lookup(data, spec.path)

        if value is _MISSING:
            if not spec.optional:
                segments.append("")
            continue

        if is_container(value):
            segments.extend(linearize_to_list(value))
        else:
            segments.append(format_value(value))

    return segments


def build_signature_base(data: Any, field_specs: Optional[Iterable[FieldSpecLike]] = None) -> str:
    """
    Build signature base string with or without explicit ordering.

    Args:
        data: Source data
        field_specs: Optional ordered field specs; natural order is used when empty

    Returns:
        str: Canonical string
    """
    if field_specs:
        return FIELD_SEPARATOR.join(resolve_ordered(data, field_specs))
    return linearize(data)


def filter_empty(mapping: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Remove entries whose value is None or an empty string.

    Falsy but present values such as 0, "0" and False are kept.

    Args:
        mapping: Source mapping

    Returns:
        dict: New mapping in the same key order
    """
    return {
        key: value
        for key, value in mapping.items()
        if value is not None and not (isinstance(value, str) and value == "")
    }


class SignatureBaseBuilder:
    """
    Incremental builder for signature bases assembled from several parts
    """

    def __init__(self):
        self._segments: List[str] = []

    def add(self, value: Any) -> "SignatureBaseBuilder":
        """Append a scalar or container value"""
        self._segments.extend(linearize_to_list(value) if is_container(value) else [format_value(value)])
        return self

    def add_if_present(self, value: Any) -> "SignatureBaseBuilder":
        """Append value unless it is None"""
        if value is not None:
            self.add(value)
        return self

    def add_ordered(self, data: Mapping[str, Any], field_specs: Iterable[FieldSpecLike]) -> "SignatureBaseBuilder":
        """Append values resolved from data by field specs"""
        self._segments.extend(resolve_ordered(data, field_specs))
        return self

    def segments(self) -> List[str]:
        """Return a copy of accumulated segments"""
        return list(self._segments)

    def build(self) -> str:
        """Render accumulated segments as canonical string"""
        return FIELD_SEPARATOR.join(self._segments)

    def __len__(self) -> int:
        return len(self._segments)
