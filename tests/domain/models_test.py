from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from domain.models import Expense, ExpenseCategory, Item, ItemStatus, MileageTrip, Pallet


def test_pallet_rejects_negative_costs() -> None:
    with pytest.raises(ValidationError):
        Pallet(name="p", purchase_cost=Decimal("-1"), purchase_date=date(2026, 1, 1))
    with pytest.raises(ValidationError):
        Pallet(name="p", purchase_cost=Decimal("1"), sales_tax=Decimal("-1"), purchase_date=date(2026, 1, 1))


def test_sold_item_requires_sale_price() -> None:
    with pytest.raises(ValidationError):
        Item(name="lamp", status=ItemStatus.SOLD)

    item = Item(name="lamp", status=ItemStatus.SOLD, sale_price=Decimal("10"))
    assert item.sale_price == Decimal("10")


def test_item_rejects_bad_quantity_and_negative_prices() -> None:
    with pytest.raises(ValidationError):
        Item(name="lamp", quantity=0)
    with pytest.raises(ValidationError):
        Item(name="lamp", listing_price=Decimal("-5"))


def test_expense_defaults_to_no_pallets() -> None:
    expense = Expense(amount=Decimal("5"), category=ExpenseCategory.SUPPLIES, expense_date=date(2026, 1, 1))

    assert expense.pallet_ids == []
    with pytest.raises(ValidationError):
        Expense(amount=Decimal("-5"), category=ExpenseCategory.SUPPLIES, expense_date=date(2026, 1, 1))


def test_mileage_trip_requires_positive_miles() -> None:
    with pytest.raises(ValidationError):
        MileageTrip(trip_date=date(2026, 1, 1), miles=Decimal("0"), mileage_rate=Decimal("0.7"))


@pytest.mark.parametrize("field", ["platform_fee", "shipping_cost"])
def test_sold_item_rejects_negative_selling_costs(field: str) -> None:
    with pytest.raises(ValidationError, match=f"{field} must be >= 0"):
        Item(name="lamp", status=ItemStatus.SOLD, sale_price=Decimal("10"), **{field: Decimal("-1")})
