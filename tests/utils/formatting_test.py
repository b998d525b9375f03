from __future__ import annotations

from decimal import Decimal

import pytest

from utils.formatting import (
    ROI_COLORS,
    RoiTone,
    format_currency,
    format_profit,
    format_roi,
    roi_color,
    roi_tone,
)


@pytest.mark.parametrize(
    ("roi", "expected"),
    [
        ("84", RoiTone.STRONG_POSITIVE),
        ("20.01", RoiTone.STRONG_POSITIVE),
        ("20", RoiTone.POSITIVE),
        ("0.1", RoiTone.POSITIVE),
        ("0", RoiTone.NEUTRAL),
        ("-0.1", RoiTone.SLIGHT_LOSS),
        ("-19.99", RoiTone.SLIGHT_LOSS),
        ("-20", RoiTone.SIGNIFICANT_LOSS),
        ("-75", RoiTone.SIGNIFICANT_LOSS),
    ],
)
def test_roi_tone_boundaries(roi: str, expected: RoiTone) -> None:
    assert roi_tone(Decimal(roi)) == expected


def test_unrealized_roi_is_neutral() -> None:
    assert roi_tone(Decimal("84"), realized=False) == RoiTone.NEUTRAL
    assert roi_color(Decimal("-84"), realized=False) == "#9E9E9E"


def test_roi_colors() -> None:
    assert roi_color(Decimal("50")) == "#2E7D32"
    assert roi_color(Decimal("5")) == "#4CAF50"
    assert roi_color(Decimal("-5")) == "#FFA000"
    assert roi_color(Decimal("-50")) == "#D32F2F"
    assert set(ROI_COLORS) == set(RoiTone)


def test_format_currency() -> None:
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(Decimal("0")) == "$0.00"
    assert format_currency(Decimal("-12")) == "-$12.00"
    assert format_currency(Decimal("2.005")) == "$2.01"


def test_format_currency_small_negative_rounds_to_plain_zero() -> None:
    assert format_currency(Decimal("-0.004")) == "$0.00"
    assert format_currency(Decimal("-0.005")) == "-$0.01"


def test_format_roi() -> None:
    assert format_roi(Decimal("84")) == "+84.0%"
    assert format_roi(Decimal("0")) == "+0.0%"
    assert format_roi(Decimal("-12.46")) == "-12.5%"
    assert format_roi(Decimal("200") / Decimal("3")) == "+66.7%"


def test_format_profit() -> None:
    gain = format_profit(Decimal("42"))
    loss = format_profit(Decimal("-7.5"))
    pending = format_profit(Decimal("42"), realized=False)

    assert (gain.value, gain.color, gain.is_positive) == ("$42.00", "#2E7D32", True)
    assert (loss.value, loss.color, loss.is_positive) == ("-$7.50", "#D32F2F", False)
    assert pending.color == "#9E9E9E"
