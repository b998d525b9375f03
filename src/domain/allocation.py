from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Iterable

from pydantic import BaseModel

from .models import Item, ItemCondition, Pallet

ZERO = Decimal("0")

# Conditions that do not share pallet cost unless the caller opts in.
UNSELLABLE_CONDITIONS: frozenset[ItemCondition] = frozenset({ItemCondition.UNSELLABLE})


class CostTier(StrEnum):
    """Where an item's effective cost came from, highest precedence first."""

    STORED_ALLOCATION = "stored_allocation"
    CALCULATED_ALLOCATION = "calculated_allocation"
    PURCHASE_COST = "purchase_cost"
    NONE = "none"


class ResolvedCost(BaseModel):
    amount: Decimal
    tier: CostTier


class ItemAllocation(BaseModel):
    item: Item
    calculated_allocated_cost: Decimal


def is_cost_eligible(item: Item, *, include_unsellable: bool = False) -> bool:
    return include_unsellable or item.condition not in UNSELLABLE_CONDITIONS


def pallet_total_cost(pallet: Pallet) -> Decimal:
    return pallet.purchase_cost + (pallet.sales_tax or ZERO)


def allocate_costs(
    pallet: Pallet,
    items: Iterable[Item],
    *,
    include_unsellable: bool = False,
) -> list[ItemAllocation]:
    """Split the pallet's acquisition cost evenly across eligible items.

    Ineligible items get zero. With no eligible items every item gets zero.
    """
    items_list = list(items)
    if not items_list:
        return []

    eligible_count = sum(1 for item in items_list if is_cost_eligible(item, include_unsellable=include_unsellable))
    cost_per_item = pallet_total_cost(pallet) / eligible_count if eligible_count > 0 else ZERO

    return [
        ItemAllocation(
            item=item,
            calculated_allocated_cost=(
                cost_per_item if is_cost_eligible(item, include_unsellable=include_unsellable) else ZERO
            ),
        )
        for item in items_list
    ]


def estimate_allocated_cost(
    purchase_cost: Decimal,
    sales_tax: Decimal | None,
    total_items: int,
    *,
    include_unsellable: bool = False,
    unsellable_count: int = 0,
) -> Decimal:
    """Per-item cost estimate shown before the pallet's items are saved."""
    total_cost = purchase_cost + (sales_tax or ZERO)
    divisor = total_items if include_unsellable else total_items - unsellable_count
    if divisor <= 0:
        return ZERO
    return total_cost / divisor


def resolve_effective_cost(item: Item, calculated: Decimal | None = None) -> ResolvedCost:
    if item.allocated_cost is not None:
        return ResolvedCost(amount=item.allocated_cost, tier=CostTier.STORED_ALLOCATION)
    if calculated is not None:
        return ResolvedCost(amount=calculated, tier=CostTier.CALCULATED_ALLOCATION)
    if item.purchase_cost is not None:
        return ResolvedCost(amount=item.purchase_cost, tier=CostTier.PURCHASE_COST)
    return ResolvedCost(amount=ZERO, tier=CostTier.NONE)
