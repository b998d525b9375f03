from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from domain.fees import (
    FeeSchedule,
    calculate_mileage_deduction,
    calculate_platform_fee,
    platform_display_name,
)
from domain.models import SalesPlatform


@pytest.mark.parametrize(
    ("platform", "sale_price", "expected"),
    [
        (SalesPlatform.EBAY, "100", "13.25"),
        (SalesPlatform.EBAY, "50", "6.63"),
        (SalesPlatform.EBAY, "33.33", "4.42"),
        (SalesPlatform.POSHMARK, "75", "15.00"),
        (SalesPlatform.MERCARI, "100", "10.00"),
        (SalesPlatform.WHATNOT, "50", "5.00"),
        (SalesPlatform.CRAIGSLIST, "100", "0.00"),
    ],
)
def test_flat_rate_platform_fees(platform: SalesPlatform, sale_price: str, expected: str) -> None:
    assert calculate_platform_fee(Decimal(sale_price), platform) == Decimal(expected)


def test_local_pickup_marketplace_charges_only_when_shipped() -> None:
    assert calculate_platform_fee(Decimal("200"), SalesPlatform.FACEBOOK) == Decimal("0.00")
    assert calculate_platform_fee(Decimal("200"), SalesPlatform.FACEBOOK, shipped=True) == Decimal("10.00")


@pytest.mark.parametrize("platform", [SalesPlatform.OFFERUP, SalesPlatform.LETGO])
def test_offerup_style_shipped_rate(platform: SalesPlatform) -> None:
    assert calculate_platform_fee(Decimal("100"), platform) == 0
    assert calculate_platform_fee(Decimal("100"), platform, shipped=True) == Decimal("12.90")


def test_manual_platform_returns_zero() -> None:
    schedule = FeeSchedule()

    assert schedule.is_manual(SalesPlatform.OTHER)
    assert calculate_platform_fee(Decimal("100"), SalesPlatform.OTHER) == 0


@pytest.mark.parametrize("sale_price", ["0", "-50"])
def test_non_positive_sale_price_has_no_fee(sale_price: str) -> None:
    assert calculate_platform_fee(Decimal(sale_price), SalesPlatform.EBAY) == 0


def test_missing_platform_has_no_fee() -> None:
    assert calculate_platform_fee(Decimal("100"), None) == 0


def test_fee_uses_custom_schedule() -> None:
    schedule = FeeSchedule(ebay=Decimal("15"), facebook_shipped=Decimal("10"))

    assert calculate_platform_fee(Decimal("100"), SalesPlatform.EBAY, schedule=schedule) == Decimal("15.00")
    assert calculate_platform_fee(Decimal("80"), SalesPlatform.FACEBOOK, shipped=True, schedule=schedule) == Decimal(
        "8.00"
    )


def test_schedule_marks_shipped_rate_platforms() -> None:
    schedule = FeeSchedule()

    assert schedule.has_shipped_rate(SalesPlatform.FACEBOOK)
    assert schedule.has_shipped_rate(SalesPlatform.OFFERUP)
    assert not schedule.has_shipped_rate(SalesPlatform.EBAY)
    assert schedule.rate_for(SalesPlatform.EBAY, shipped=True) == Decimal("13.25")


def test_schedule_rejects_out_of_range_rates() -> None:
    with pytest.raises(ValidationError):
        FeeSchedule(ebay=Decimal("-1"))
    with pytest.raises(ValidationError):
        FeeSchedule(poshmark=Decimal("101"))


@pytest.mark.parametrize(
    ("miles", "expected"),
    [("100", "72.50"), ("33", "23.93"), ("10.5", "7.61"), ("0", "0.00")],
)
def test_mileage_deduction_rounds_to_cents(miles: str, expected: str) -> None:
    assert calculate_mileage_deduction(Decimal(miles), Decimal("0.725")) == Decimal(expected)


def test_platform_display_name() -> None:
    assert platform_display_name(SalesPlatform.EBAY) == "eBay"
    assert platform_display_name(SalesPlatform.FACEBOOK) == "Facebook Marketplace"
    assert platform_display_name(None) == "Not specified"
