from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .fees import calculate_mileage_deduction
from .models import Expense, ExpenseId, MileageTrip, PalletId

ZERO = Decimal("0")


@dataclass(frozen=True)
class ExpenseShare:
    """The part of one expense attributed to one pallet."""

    expense_id: ExpenseId
    pallet_id: PalletId
    amount: Decimal
    linked_pallets: int


def _equal_split(amount: Decimal, pallet_ids: list[PalletId], pallet_id: PalletId) -> Decimal:
    if pallet_id not in pallet_ids:
        return ZERO
    return amount / len(set(pallet_ids))


def expense_share(expense: Expense, pallet_id: PalletId) -> Decimal:
    return _equal_split(expense.amount, expense.pallet_ids, pallet_id)


def expenses_for_pallet(expenses: Iterable[Expense], pallet_id: PalletId) -> list[ExpenseShare]:
    return [
        ExpenseShare(
            expense_id=expense.id,
            pallet_id=pallet_id,
            amount=expense_share(expense, pallet_id),
            linked_pallets=len(set(expense.pallet_ids)),
        )
        for expense in expenses
        if pallet_id in expense.pallet_ids
    ]


def total_expenses_for_pallet(expenses: Iterable[Expense], pallet_id: PalletId) -> Decimal:
    return sum((share.amount for share in expenses_for_pallet(expenses, pallet_id)), start=ZERO)


def mileage_share(trip: MileageTrip, pallet_id: PalletId) -> Decimal:
    return _equal_split(calculate_mileage_deduction(trip.miles, trip.mileage_rate), trip.pallet_ids, pallet_id)
