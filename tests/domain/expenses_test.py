from __future__ import annotations

from datetime import date
from decimal import Decimal

from domain.expenses import expense_share, expenses_for_pallet, mileage_share, total_expenses_for_pallet
from domain.models import MileageTrip, PalletId
from tests.helpers.factories import make_expense, make_pallet


def test_expense_is_split_equally_between_linked_pallets() -> None:
    first = make_pallet("100")
    second = make_pallet("50")
    rent = make_expense("20", first, second)

    assert expense_share(rent, first.id) == Decimal("10")
    assert expense_share(rent, second.id) == Decimal("10")


def test_expense_not_linked_to_pallet_contributes_nothing() -> None:
    linked = make_pallet("100")
    unrelated = make_pallet("100")

    assert expense_share(make_expense("20", linked), unrelated.id) == 0
    assert expense_share(make_expense("20"), linked.id) == 0


def test_expenses_for_pallet_resolves_shares() -> None:
    first = make_pallet("100")
    second = make_pallet("50")
    third = make_pallet("10")
    expenses = [
        make_expense("30", first, second, third),
        make_expense("12", first),
        make_expense("99", second),
    ]

    shares = expenses_for_pallet(expenses, first.id)

    assert [share.amount for share in shares] == [Decimal("10"), Decimal("12")]
    assert [share.linked_pallets for share in shares] == [3, 1]
    assert all(share.pallet_id == first.id for share in shares)
    assert total_expenses_for_pallet(expenses, first.id) == Decimal("22")
    assert total_expenses_for_pallet(expenses, third.id) == Decimal("10")


def test_duplicate_links_count_once() -> None:
    pallet = make_pallet("100")
    other = make_pallet("100")
    expense = make_expense("20", pallet, pallet, other)

    assert expense_share(expense, pallet.id) == Decimal("10")


def test_mileage_share_splits_deduction() -> None:
    first = make_pallet("100")
    second = make_pallet("100")
    trip = MileageTrip(
        trip_date=date(2026, 8, 2),
        miles=Decimal("100"),
        mileage_rate=Decimal("0.725"),
        pallet_ids=[PalletId(first.id), PalletId(second.id)],
    )

    assert mileage_share(trip, first.id) == Decimal("36.25")
    assert mileage_share(trip, make_pallet("1").id) == 0
