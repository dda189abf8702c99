import pytest

from vs_tool.errors import InvalidQuantity
from vs_tool.quantity import convert, parse, to_unit, validate_quantity


class TestParse:
    def test_binary_suffixes(self):
        assert parse("1Ki") == 1024
        assert parse("1Mi") == 1024**2
        assert parse("1Gi") == 1024**3
        assert parse("40Gi") == 40 * 1024**3
        assert parse("2Ti") == 2 * 1024**4

    def test_decimal_suffixes(self):
        assert parse("1k") == 1000
        assert parse("500M") == 500 * 10**6
        assert parse("3G") == 3 * 10**9
        assert parse("1T") == 10**12

    def test_bare_number_is_bytes(self):
        assert parse("1048576") == 1048576
        assert parse("0") == 0

    def test_fractional_values(self):
        assert parse("1.5Gi") == int(1.5 * 1024**3)
        assert parse(".5Ki") == 512

    def test_surrounding_whitespace_is_ignored(self):
        assert parse(" 2Gi ") == 2 * 1024**3

    @pytest.mark.parametrize(
        "value",
        ["", "Gi", "1GB", "1gi", "-1Gi", "1 Gi", "1Gi1", "abc", "1.2.3", "1K", "1m"]
        + ["1e3", "1E3", "+1Gi", "Infinity", "NaN", "1.5e2Mi"],
    )
    def test_rejects_malformed(self, value):
        with pytest.raises(InvalidQuantity):
            parse(value)

    def test_invalid_quantity_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse("lots")


class TestValidateQuantity:
    def test_accepts_valid(self):
        assert validate_quantity("1Gi")
        assert validate_quantity("1024")

    def test_rejects_invalid(self):
        assert not validate_quantity("1 gigabyte")
        assert not validate_quantity("")


class TestConvert:
    @pytest.mark.parametrize("value,unit", [(40, "Gi"), (1.5, "Mi"), (3, "G"), (250, "k"), (7, "Ti")])
    def test_round_trip(self, value, unit):
        assert convert(parse(f"{value}{unit}"), unit) == pytest.approx(value)

    def test_bytes(self):
        assert convert(2048, "") == 2048

    def test_binary_to_decimal(self):
        assert convert(parse("1Gi"), "G") == pytest.approx(1.073741824)

    def test_unknown_unit(self):
        with pytest.raises(ValueError):
            convert(1024, "GB")

    def test_to_unit(self):
        assert to_unit("2Gi", "Gi") == 2
