"""
Unit tests for identifier normalization and string helpers.
"""

import math

import pytest

from conciliador.data_utils import (safe_string, normalize_id, head_office_prefix,
                                    normalize_specie, gestta_area_code, natural_key)


class TestNormalizeId:

    @pytest.mark.parametrize("raw, expected", [
        ("12.345.678/0001-99", "12345678000199"),
        ("12345678000199", "12345678000199"),
        (" 11.111.111/0002-99 ", "11111111000299"),
        ("abc", ""),
        ("", ""),
        (None, ""),
        (12345678, "12345678"),
    ])
    def test_strips_everything_but_digits(self, raw, expected):
        assert normalize_id(raw) == expected

    @pytest.mark.parametrize("raw", ["12.345.678/0001-99", "x1y2", "", None, "٣12", "0001"])
    def test_idempotent(self, raw):
        once = normalize_id(raw)
        assert normalize_id(once) == once

    def test_non_ascii_digits_are_removed(self):
        assert normalize_id("١٢3") == "3"

    def test_nan_and_objects_give_empty(self):
        assert normalize_id(float('nan')) == ""
        assert normalize_id({"a": 1}) == ""


class TestSafeString:

    def test_values(self):
        assert safe_string(None) == ""
        assert safe_string(math.nan) == ""
        assert safe_string([1, 2]) == ""
        assert safe_string({"k": "v"}) == ""
        assert safe_string(0) == "0"
        assert safe_string("Ativo") == "Ativo"


class TestHeadOfficePrefix:

    def test_prefix_of_long_id(self):
        assert head_office_prefix("11111111000299") == "11111111"

    def test_exactly_eight(self):
        assert head_office_prefix("12345678") == "12345678"

    def test_short_id_has_no_prefix(self):
        assert head_office_prefix("1234567") == ""


class TestSpecieAndMarkers:

    def test_normalize_specie_removes_accents_and_spaces(self):
        assert normalize_specie("  área   integrãda ") == "AREA INTEGRADA"

    @pytest.mark.parametrize("name, code", [
        ("ACME LTDA #0", "0"),
        ("ACME LTDA # 1 ", "1"),
        ("ACME LTDA #1 FILIAL", ""),
        ("ACME LTDA #2", ""),
        ("", ""),
    ])
    def test_gestta_area_code(self, name, code):
        assert gestta_area_code(name) == code


class TestNaturalKey:

    def test_numbers_compare_numerically(self):
        assert sorted(["item10", "item2", "item1"], key=natural_key) == ["item1", "item2", "item10"]

    def test_case_and_accents_ignored(self):
        assert natural_key("Ávila") == natural_key("avila")
        assert sorted(["beta", "Álvaro", "alfa"], key=natural_key) == ["alfa", "Álvaro", "beta"]
