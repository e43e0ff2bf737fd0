"""Tests for typed value coercion."""

import json

import pytest

from catalog_admin.editor import EditSession
from catalog_admin.fields import (
    MAX_INTEGER_DIGITS,
    FieldType,
    Section,
    TypedField,
    coerce_boolean,
    coerce_integer,
    default_value,
    field_from_stored,
    field_label,
    infer_type,
    join_array,
    normalize_key,
    split_array,
    to_display,
    to_storage,
)


class TestNormalizeKey:
    """Field name normalization."""

    def test_lowercases_and_replaces_spaces(self):
        assert normalize_key("Max Fan Size") == "max_fan_size"

    def test_collapses_whitespace_runs_and_trims(self):
        assert normalize_key("  L3   Cache\tMB ") == "l3_cache_mb"

    def test_label_from_key(self):
        assert field_label("max_fan_size") == "Max Fan Size"


class TestCoerceInteger:
    """parseInt-style integer coercion is total."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("42", 42),
            ("3.7", 3),
            ("12abc", 12),
            ("  -8", -8),
            ("+5", 5),
            ("", 0),
            ("abc", 0),
            ("   ", 0),
            (None, 0),
            (7, 7),
            (9.9, 9),
            (float("nan"), 0),
            (float("inf"), 0),
            ("99999999999999999999", 99999999999999999999),
        ],
    )
    def test_values(self, raw, expected):
        assert coerce_integer(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "3.7", "-", "1e5", "NaN", "∞", "9" * 5000, "-" + "1" * 4500])
    def test_always_finite(self, raw):
        result = coerce_integer(raw)
        assert isinstance(result, int)
        assert json.loads(json.dumps(result)) == result

    def test_long_digit_runs_saturate(self):
        largest = 10 ** MAX_INTEGER_DIGITS - 1
        assert coerce_integer("9" * 5000) == largest
        assert coerce_integer("-" + "1" * 4500) == -largest

    def test_leading_zeros_do_not_count(self):
        assert coerce_integer("0" * 5000 + "42") == 42

    @pytest.mark.parametrize("raw", ["١٢", "１２", "٣abc"])
    def test_non_ascii_digits_are_not_numbers(self, raw):
        assert coerce_integer(raw) == 0

    def test_huge_input_through_edit_session(self):
        session = EditSession.new("PROCESSOR")
        session.open_add_field(Section.TECHNICAL_SPECS)
        session.dialog.set_name("transistor_count")
        session.dialog.set_type("integer")
        session.submit_add_field()

        updated = session.update_field(Section.TECHNICAL_SPECS, 0, "1" * 4500)

        assert updated.value == 10 ** MAX_INTEGER_DIGITS - 1
        assert updated.storage_value() == updated.value


class TestCoerceBoolean:
    """Boolean coercion from toggles and strings."""

    def test_native_bools_pass_through(self):
        assert coerce_boolean(True) is True
        assert coerce_boolean(False) is False

    @pytest.mark.parametrize("raw", ["true", "TRUE", "True"])
    def test_true_strings(self, raw):
        assert coerce_boolean(raw) is True

    @pytest.mark.parametrize("raw", ["false", "yes", "1", "", "on"])
    def test_other_strings_are_false(self, raw):
        assert coerce_boolean(raw) is False

    def test_non_string_values_are_false(self):
        assert coerce_boolean(None) is False
        assert coerce_boolean(1) is False


class TestArrays:
    """Comma-list handling for array fields."""

    def test_split_trims_and_drops_empty(self):
        assert split_array("PCIe 4.0, PCIe 5.0 , ") == ["PCIe 4.0", "PCIe 5.0"]

    def test_split_drops_whitespace_only_elements(self):
        assert split_array(" , ,a,, ") == ["a"]

    def test_split_accepts_lists(self):
        assert split_array([" x ", "", "y"]) == ["x", "y"]

    def test_split_empty(self):
        assert split_array("") == []
        assert split_array(None) == []

    def test_join_for_display(self):
        assert join_array(["DDR5", "ECC"]) == "DDR5, ECC"

    def test_commas_inside_elements_are_lost(self):
        stored = ["1,000 MB/s", "x"]
        assert split_array(join_array(stored)) == ["1", "000 MB/s", "x"]


class TestStorageAndDisplay:
    """Conversions between display and storage forms."""

    def test_string_passthrough(self):
        assert to_storage(FieldType.STRING, "AM5") == "AM5"
        assert to_display(FieldType.STRING, "AM5") == "AM5"

    def test_integer_from_text(self):
        assert to_storage(FieldType.INTEGER, "16") == 16

    def test_boolean_from_string(self):
        assert to_storage(FieldType.BOOLEAN, "true") is True
        assert to_display(FieldType.BOOLEAN, "true") is True

    def test_array_storage(self):
        assert to_storage(FieldType.ARRAY, "a, b") == ["a", "b"]
        assert to_display(FieldType.ARRAY, ["a", "b"]) == "a, b"

    def test_defaults(self):
        assert default_value(FieldType.STRING) == ""
        assert default_value(FieldType.ARRAY) == ""
        assert default_value(FieldType.INTEGER) == 0
        assert default_value(FieldType.BOOLEAN) is False

    def test_typed_field_storage_value(self):
        field = TypedField(key="ports", type=FieldType.ARRAY, value="USB-C, HDMI,")
        assert field.storage_value() == ["USB-C", "HDMI"]
        assert field.label == "Ports"


class TestInferType:
    """Type inference from stored JSON values."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (["a"], FieldType.ARRAY),
            ([], FieldType.ARRAY),
            (True, FieldType.BOOLEAN),
            ("true", FieldType.BOOLEAN),
            ("false", FieldType.BOOLEAN),
            ("TRUE", FieldType.STRING),
            (12, FieldType.INTEGER),
            (2.5, FieldType.INTEGER),
            ("12", FieldType.STRING),
            (None, FieldType.STRING),
        ],
    )
    def test_inference(self, value, expected):
        assert infer_type(value) == expected

    def test_field_from_stored(self):
        field = field_from_stored("lanes", ["x16", "x4"], Section.TECHNICAL_SPECS)
        assert field.type == FieldType.ARRAY
        assert field.value == "x16, x4"
        assert field.section == Section.TECHNICAL_SPECS

    def test_none_loads_as_empty_string(self):
        assert field_from_stored("note", None).value == ""
