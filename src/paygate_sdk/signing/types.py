"""
Type definitions for gateway signing functionality

This module provides the value types shared by the canonicalizer, the
signature engine and the extension protocol: field specifications for
ordered signature bases and the signable value union.
"""

from decimal import Decimal
from typing import Any, Callable, Iterable, List, Mapping, Sequence, Tuple, Union
from dataclasses import dataclass

from ..crypto.rsa import DEFAULT_HASH_ALGORITHM, HashAlgorithm  # noqa: F401 (re-exported)
from ..exceptions import ErrorCodes, ValidationError

# Separator between segments of a canonical string
FIELD_SEPARATOR = "|"

# Marker prefix of optional fields in textual field specs
OPTIONAL_MARKER = "?"

# Separator between path segments in textual field specs
PATH_SEPARATOR = "."


@dataclass(frozen=True)
class FieldSpec:
    """
    Declaration of the value that occupies one position of a canonical string

    Attributes:
        path: Key path into nested mappings (one item per level)
        optional: Whether an absent value is left out instead of rendered empty
    """
    path: Tuple[str, ...]
    optional: bool = False

    def __post_init__(self):
        """Validate field spec after initialization"""
        if isinstance(self.path, str):
            object.__setattr__(self, "path", tuple(self.path.split(PATH_SEPARATOR)))
        else:
            object.__setattr__(self, "path", tuple(self.path))

        if not self.path or any(segment == "" for segment in self.path):
            raise ValidationError(
                f"Field spec path cannot be empty or contain empty segments: {self.path!r}",
                ErrorCodes.INVALID_FIELD_SPEC
            )

    @classmethod
    def parse(cls, text: str) -> "FieldSpec":
        """
        Parse field spec from its textual form.

        Args:
            text: Dot-separated path, optionally prefixed with "?"

        Returns:
            FieldSpec: Parsed field spec
        """
        if not isinstance(text, str) or not text:
            raise ValidationError(
                "Field spec must be a non-empty string",
                ErrorCodes.INVALID_FIELD_SPEC,
                {"field_spec": text}
            )

        optional = text.startswith(OPTIONAL_MARKER)
        if optional:
            text = text[len(OPTIONAL_MARKER):]

        return cls(path=tuple(text.split(PATH_SEPARATOR)), optional=optional)

    @classmethod
    def of(cls, value: Union[str, "FieldSpec"]) -> "FieldSpec":
        """Return value as FieldSpec, parsing strings"""
        if isinstance(value, cls):
            return value
        return cls.parse(value)

    @property
    def key(self) -> str:
        """Dot-joined path without the optional marker"""
        return PATH_SEPARATOR.join(self.path)

    def __str__(self) -> str:
        prefix = OPTIONAL_MARKER if self.optional else ""
        return f"{prefix}{self.key}"


def parse_field_specs(specs: Iterable[Union[str, FieldSpec]]) -> List[FieldSpec]:
    """
    Parse a list of field specs given as strings or FieldSpec objects.

    Args:
        specs: Field specs in wire syntax or already structured

    Returns:
        list: Structured field specs in the same order
    """
    if isinstance(specs, (str, bytes)):
        raise ValidationError(
            "Field specs must be a list, not a single string",
            ErrorCodes.INVALID_FIELD_SPEC
        )
    return [FieldSpec.of(spec) for spec in specs]


# Type aliases for convenience
ScalarValue = Union[None, bool, int, float, Decimal, str, bytes]
SignableValue = Union[ScalarValue, Mapping[str, Any], Sequence[Any]]
FieldSpecLike = Union[str, FieldSpec]
DttmFactory = Callable[[], str]
