from __future__ import annotations

from decimal import Decimal

from domain.allocation import (
    CostTier,
    allocate_costs,
    estimate_allocated_cost,
    pallet_total_cost,
    resolve_effective_cost,
)
from domain.models import ItemCondition
from tests.helpers.factories import make_item, make_pallet


def test_pallet_total_cost_adds_sales_tax() -> None:
    assert pallet_total_cost(make_pallet("100", "10")) == Decimal("110")
    assert pallet_total_cost(make_pallet("100")) == Decimal("100")


def test_allocate_costs_splits_cost_and_tax_evenly() -> None:
    pallet = make_pallet("100", "10")
    items = [make_item(pallet=pallet), make_item(pallet=pallet)]

    allocations = allocate_costs(pallet, items)

    assert [allocation.calculated_allocated_cost for allocation in allocations] == [Decimal("55.0"), Decimal("55.0")]
    assert [allocation.item.id for allocation in allocations] == [item.id for item in items]


def test_allocate_costs_excludes_unsellable_items_by_default() -> None:
    pallet = make_pallet("100")
    sellable_a = make_item(pallet=pallet)
    broken = make_item(pallet=pallet, condition=ItemCondition.UNSELLABLE)
    sellable_b = make_item(pallet=pallet, condition=ItemCondition.DAMAGED)

    allocations = allocate_costs(pallet, [sellable_a, broken, sellable_b])
    by_item = {allocation.item.id: allocation.calculated_allocated_cost for allocation in allocations}

    assert by_item[sellable_a.id] == Decimal("50.0")
    assert by_item[sellable_b.id] == Decimal("50.0")
    assert by_item[broken.id] == Decimal("0.0")


def test_allocate_costs_can_include_unsellable_items() -> None:
    pallet = make_pallet("90")
    items = [make_item(pallet=pallet), make_item(pallet=pallet, condition=ItemCondition.UNSELLABLE)]

    allocations = allocate_costs(pallet, items, include_unsellable=True)

    assert all(allocation.calculated_allocated_cost == Decimal("45") for allocation in allocations)


def test_allocate_costs_with_no_eligible_items_gives_zero() -> None:
    pallet = make_pallet("100")
    items = [make_item(pallet=pallet, condition=ItemCondition.UNSELLABLE) for _ in range(3)]

    allocations = allocate_costs(pallet, items)

    assert len(allocations) == 3
    assert all(allocation.calculated_allocated_cost == 0 for allocation in allocations)
    assert not any(allocation.calculated_allocated_cost.is_nan() for allocation in allocations)


def test_allocate_costs_with_no_items_returns_empty() -> None:
    assert allocate_costs(make_pallet("100"), []) == []


def test_allocate_costs_is_idempotent() -> None:
    pallet = make_pallet("100", "7.5")
    items = [make_item(pallet=pallet) for _ in range(3)]

    assert allocate_costs(pallet, items) == allocate_costs(pallet, items)


def test_estimate_allocated_cost() -> None:
    assert estimate_allocated_cost(Decimal("100"), Decimal("10"), 2) == Decimal("55")
    assert estimate_allocated_cost(Decimal("100"), None, 3, unsellable_count=1) == Decimal("50")
    assert estimate_allocated_cost(Decimal("90"), None, 3, include_unsellable=True, unsellable_count=1) == Decimal(
        "30"
    )


def test_estimate_allocated_cost_without_divisor_is_zero() -> None:
    assert estimate_allocated_cost(Decimal("100"), None, 0) == 0
    assert estimate_allocated_cost(Decimal("100"), None, 2, unsellable_count=2) == 0


def test_resolve_prefers_stored_allocation() -> None:
    item = make_item(allocated_cost=Decimal("12.34"), purchase_cost=Decimal("5"))

    resolved = resolve_effective_cost(item, Decimal("99"))

    assert resolved.amount == Decimal("12.34")
    assert resolved.tier == CostTier.STORED_ALLOCATION


def test_resolve_falls_back_to_calculated_allocation() -> None:
    item = make_item(purchase_cost=Decimal("5"))

    resolved = resolve_effective_cost(item, Decimal("27.5"))

    assert resolved.amount == Decimal("27.5")
    assert resolved.tier == CostTier.CALCULATED_ALLOCATION


def test_resolve_falls_back_to_purchase_cost() -> None:
    resolved = resolve_effective_cost(make_item(purchase_cost=Decimal("5")))

    assert resolved.amount == Decimal("5")
    assert resolved.tier == CostTier.PURCHASE_COST


def test_resolve_without_any_cost_is_zero() -> None:
    resolved = resolve_effective_cost(make_item())

    assert resolved.amount == 0
    assert resolved.tier == CostTier.NONE


def test_stored_allocation_overrides_pallet_split() -> None:
    pallet = make_pallet("100", "10")
    stored = make_item(pallet=pallet, allocated_cost=Decimal("70"))
    other = make_item(pallet=pallet)

    allocations = allocate_costs(pallet, [stored, other])
    resolved = [resolve_effective_cost(a.item, a.calculated_allocated_cost).amount for a in allocations]

    assert resolved == [Decimal("70"), Decimal("55")]
