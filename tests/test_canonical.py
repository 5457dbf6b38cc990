"""
Test suite for canonical signature base construction

This module tests natural-order linearization, ordered resolution against
field specs, empty field filtering and the scalar encoding rules.
"""

import logging
from decimal import Decimal

import pytest

from paygate_sdk.exceptions import ValidationError
from paygate_sdk.signing import (
    FieldSpec,
    SignatureBaseBuilder,
    build_signature_base,
    filter_empty,
    format_value,
    linearize,
    linearize_to_list,
    parse_field_specs,
    resolve_ordered,
    MAX_NESTING_DEPTH,
)


class TestFormatValue:
    """Test scalar encoding rules"""

    def test_none_is_empty(self):
        assert format_value(None) == ""

    def test_booleans(self):
        """Booleans render as lowercase literals, not as 1/0"""
        assert format_value(True) == "true"
        assert format_value(False) == "false"

    def test_numbers(self):
        assert format_value(123) == "123"
        assert format_value(0) == "0"
        assert format_value(-5) == "-5"
        assert format_value(2.0) == "2"
        assert format_value(1.5) == "1.5"
        assert format_value(Decimal("10.50")) == "10.50"

    def test_strings_are_not_escaped(self):
        assert format_value("a|b") == "a|b"
        assert format_value("") == ""

    def test_bytes_are_decoded(self):
        assert format_value("kůň".encode("utf-8")) == "kůň"

    def test_invalid_utf8_bytes(self):
        with pytest.raises(ValidationError, match="not valid UTF-8"):
            format_value(b"\xff\xfe")

    def test_unsupported_type(self):
        with pytest.raises(ValidationError, match="Unsupported value type"):
            format_value(object())


class TestLinearize:
    """Test natural-order canonical strings"""

    def test_scalar_types_in_insertion_order(self):
        """Empty and null values keep their position"""
        data = {
            "string": "ahoj",
            "emptyString": "",
            "num": 123,
            "trueBool": True,
            "zeroString": "0",
            "null": None,
            "falseBool": False,
            "arr": ["a", "b", "c"],
        }

        assert linearize(data) == "ahoj||123|true|0||false|a|b|c"

    def test_nested_structures_are_spliced(self):
        data = {
            "first": "1",
            "nested": {"a": "A", "deeper": {"b": "B", "list": [1, 2]}},
            "last": "Z",
        }

        assert linearize(data) == "1|A|B|1|2|Z"

    def test_empty_container_contributes_nothing(self):
        assert linearize({"a": "x", "empty": {}, "list": [], "b": "y"}) == "x|y"

    def test_scalar_value(self):
        assert linearize("single") == "single"
        assert linearize(None) == ""

    def test_top_level_sequence(self):
        assert linearize(["a", None, True]) == "a||true"

    def test_linearize_to_list(self):
        assert linearize_to_list({"a": 1, "b": [2, 3]}) == ["1", "2", "3"]

    def test_nesting_limit(self, caplog):
        """Values nested deeper than the limit are dropped with a warning"""
        deep = "leaf"
        for _ in range(MAX_NESTING_DEPTH + 2):
            deep = {"level": deep}
        data = {"first": "A", "deep": deep}

        with caplog.at_level(logging.WARNING, logger="paygate_sdk.signing.canonical"):
            assert linearize(data) == "A"
        assert "Nesting deeper" in caplog.text

    def test_nesting_within_limit(self):
        deep = "leaf"
        for _ in range(MAX_NESTING_DEPTH - 1):
            deep = {"level": deep}

        assert linearize({"deep": deep}) == "leaf"


class TestResolveOrdered:
    """Test ordered resolution against field specs"""

    def setup_method(self):
        """Set up source data"""
        self.data = {
            "lorem": "ipsum",
            "dolor": "sit",
            "foo": {"a": "AAA", "b": "BBB", "c": "CCC"},
            "xxx": {
                "a": {"z": "Z", "y": "Y", "x": "X"},
                "b": {"z": 1, "y": 2, "x": 3},
            },
        }

    def test_ordered_and_optional_fields(self):
        """Required missing fields stay empty, optional missing ones vanish"""
        specs = [
            "lorem", "foo.a", "xxx.a", "dolor", "flash", "foo.c", "xxx.a.y",
            "?what", "xxx.b.x", "?zzz", "xxx.d.x.c.d.e", "xxx.b",
        ]

        result = resolve_ordered(self.data, specs)

        assert result == ["ipsum", "AAA", "Z", "Y", "X", "sit", "", "CCC", "Y", "3", "", "1", "2", "3"]

    def test_joined_form(self):
        base = build_signature_base(self.data, ["lorem", "?missing", "required", "foo.b"])
        assert base == "ipsum||BBB"

    def test_structured_field_specs(self):
        specs = [FieldSpec(("foo", "a")), FieldSpec(("nothing",), optional=True), FieldSpec("dolor")]
        assert resolve_ordered(self.data, specs) == ["AAA", "sit"]

    def test_found_null_is_kept_even_when_optional(self):
        data = {"a": None, "b": "B"}
        assert resolve_ordered(data, ["?a", "b"]) == ["", "B"]

    def test_sequence_index_segments(self):
        data = {"items": [{"name": "first"}, {"name": "second"}]}
        assert resolve_ordered(data, ["items.1.name", "items.5.name", "?items.9"]) == ["second", ""]

    def test_path_through_scalar_is_missing(self):
        assert resolve_ordered(self.data, ["lorem.deeper", "?dolor.deeper"]) == [""]

    def test_natural_order_without_specs(self):
        assert build_signature_base({"a": "1", "b": "2"}) == "1|2"
        assert build_signature_base({"a": "1", "b": "2"}, []) == "1|2"

    def test_single_string_is_rejected(self):
        with pytest.raises(ValidationError, match="must be a list"):
            resolve_ordered(self.data, "lorem")


class TestFieldSpec:
    """Test field spec parsing"""

    def test_parse_required(self):
        spec = FieldSpec.parse("foo.bar")
        assert spec.path == ("foo", "bar")
        assert spec.optional is False

    def test_parse_optional(self):
        spec = FieldSpec.parse("?redirect.url")
        assert spec.path == ("redirect", "url")
        assert spec.optional is True

    def test_round_trip_text(self):
        assert str(FieldSpec.parse("?a.b")) == "?a.b"
        assert FieldSpec.parse("?a.b").key == "a.b"

    def test_of_returns_existing_spec(self):
        spec = FieldSpec(("x",))
        assert FieldSpec.of(spec) is spec

    def test_invalid_specs(self):
        with pytest.raises(ValidationError):
            FieldSpec.parse("")
        with pytest.raises(ValidationError):
            FieldSpec.parse("?")
        with pytest.raises(ValidationError):
            FieldSpec.parse("a..b")

    def test_parse_field_specs(self):
        specs = parse_field_specs(["a", "?b"])
        assert [str(spec) for spec in specs] == ["a", "?b"]


class TestFilterEmpty:
    """Test removal of absent values"""

    def test_removes_null_and_empty_string(self):
        data = {"a": None, "b": "", "c": "value"}
        assert filter_empty(data) == {"c": "value"}

    def test_keeps_falsy_but_present_values(self):
        data = {"zero": 0, "zeroString": "0", "false": False, "emptyList": [], "emptyDict": {}}
        assert filter_empty(data) == data

    def test_preserves_order_and_returns_copy(self):
        data = {"z": 1, "drop": None, "a": 2}
        result = filter_empty(data)

        assert list(result) == ["z", "a"]
        assert "drop" in data


class TestSignatureBaseBuilder:
    """Test incremental base construction"""

    def test_builder(self):
        builder = SignatureBaseBuilder()
        builder.add("merchant").add(True).add_if_present(None).add({"a": 1, "b": [2]})
        builder.add_ordered({"x": "X"}, ["x", "?y", "z"])

        assert builder.build() == "merchant|true|1|2|X|"
        assert len(builder) == 6
        assert builder.segments()[0] == "merchant"
