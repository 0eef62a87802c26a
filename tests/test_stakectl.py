"""
Tests for the client CLI amount handling.
"""
import pytest

from stakectl.main import to_units, fmt_units


def test_to_units_scales_by_decimals():
    assert to_units("1") == 10**18
    assert to_units("0.5") == 5 * 10**17
    assert to_units("525") == 525 * 10**18


def test_to_units_keeps_smallest_unit():
    assert to_units("0.000000000000000001") == 1
    assert to_units("123456789012.123456789012345678") == 123456789012123456789012345678


@pytest.mark.parametrize("amount", ["1e-19", "0.0000000000000000015", "abc", "inf", "nan"])
def test_to_units_rejects_unrepresentable(amount, capsys):
    with pytest.raises(SystemExit) as exc:
        to_units(amount)

    assert exc.value.code == 1
    assert "Error" in capsys.readouterr().out


def test_fmt_units():
    assert fmt_units("1500000000000000000") == "1.5 stt"
