from datetime import date, datetime, time
from decimal import Decimal

import pytest

from halo_optom.shared.dates import day_of_week, format_time_range, start_of_month
from halo_optom.shared.formatting import calculate_commission, format_idr, to_decimal
from halo_optom.shared.validators import validate_email, validate_id_phone, validate_percentage
from halo_optom.utils.sanitization import sanitize_dict, sanitize_text


@pytest.mark.parametrize(
    "value, expected",
    [(0, "Rp 0"), (50000, "Rp 50.000"), (Decimal("1250000.40"), "Rp 1.250.000"), (None, "Rp 0"), (-1500, "-Rp 1.500")],
)
def test_format_idr(value, expected):
    assert format_idr(value) == expected


def test_commission_rounding():
    assert calculate_commission(100000, 20) == Decimal("20000.00")
    assert calculate_commission(Decimal("99999"), 12.5) == Decimal("12499.88")
    assert calculate_commission(None, 20) is None
    assert calculate_commission(100000, 0) is None
    assert to_decimal("10.005") == Decimal("10.01")


@pytest.mark.parametrize(
    "raw, expected",
    [("08123456789", "+628123456789"), ("628123456789", "+628123456789"), ("+62 812-3456-789", "+628123456789")],
)
def test_phone_normalization(raw, expected):
    assert validate_id_phone(raw) == expected


@pytest.mark.parametrize("raw", ["021555123", "0812", "+1 415 555 0100"])
def test_invalid_phone(raw):
    with pytest.raises(ValueError):
        validate_id_phone(raw)


def test_email_and_percentage():
    assert validate_email("  Budi@Example.COM ") == "budi@example.com"
    with pytest.raises(ValueError):
        validate_email("not-an-email")
    with pytest.raises(ValueError):
        validate_percentage(101)
    assert validate_percentage(None) is None


def test_dates():
    assert day_of_week(date(2026, 11, 2)) == "monday"
    assert format_time_range(time(9, 0), time(12, 30)) == "09:00 - 12:30"
    assert start_of_month(datetime(2026, 10, 19, 15, 30)) == datetime(2026, 10, 1)


def test_sanitization():
    assert sanitize_text("  Halo <b>dok</b> ") == "Halo dok"
    assert sanitize_text(None) is None
    assert sanitize_dict({"a": "<i>b</i>", "n": 1, "nested": {"c": "<p>d</p>"}}) == {"a": "b", "n": 1, "nested": {"c": "d"}}
    assert sanitize_dict({"a": "<i>b</i>", "keep": "<i>b</i>"}, fields=["a"]) == {"a": "b", "keep": "<i>b</i>"}
