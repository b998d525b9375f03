from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence

from pydantic import BaseModel

from .allocation import CostTier, resolve_effective_cost
from .expenses import ExpenseShare
from .models import Item, ItemStatus, Pallet

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# ROI reported when nothing was invested but something was gained.
ZERO_COST_PROFIT_ROI = Decimal("100")


def roi_percent(profit: Decimal, cost: Decimal) -> Decimal:
    if cost == 0:
        return ZERO_COST_PROFIT_ROI if profit > 0 else ZERO
    return profit / cost * HUNDRED


def calculate_net_profit(
    price: Decimal | None,
    cost: Decimal | None,
    platform_fee: Decimal | None = None,
    shipping_cost: Decimal | None = None,
) -> Decimal:
    if price is None:
        return ZERO
    return price - (cost or ZERO) - (platform_fee or ZERO) - (shipping_cost or ZERO)


class ItemProfit(BaseModel):
    price: Decimal | None
    is_estimate: bool
    cost: Decimal
    cost_tier: CostTier
    platform_fee: Decimal
    shipping_cost: Decimal
    profit: Decimal
    roi: Decimal


def _item_price(item: Item) -> tuple[Decimal | None, bool]:
    if item.sale_price is not None:
        return item.sale_price, False
    # Unsold items are valued at their listing price.
    return item.listing_price, item.listing_price is not None


def calculate_item_profit_result(item: Item, calculated: Decimal | None = None) -> ItemProfit:
    price, is_estimate = _item_price(item)
    resolved = resolve_effective_cost(item, calculated)
    fee = item.platform_fee or ZERO
    shipping = item.shipping_cost or ZERO

    if price is None:
        profit = ZERO
        roi = ZERO
    else:
        profit = calculate_net_profit(price, resolved.amount, fee, shipping)
        roi = roi_percent(profit, resolved.amount)

    return ItemProfit(
        price=price,
        is_estimate=is_estimate,
        cost=resolved.amount,
        cost_tier=resolved.tier,
        platform_fee=fee,
        shipping_cost=shipping,
        profit=profit,
        roi=roi,
    )


def calculate_item_profit(item: Item, calculated: Decimal | None = None) -> Decimal:
    return calculate_item_profit_result(item, calculated).profit


def calculate_item_roi(item: Item, calculated: Decimal | None = None) -> Decimal:
    return calculate_item_profit_result(item, calculated).roi


class PalletProfit(BaseModel):
    total_revenue: Decimal
    total_cost: Decimal
    pallet_cost: Decimal
    sales_tax: Decimal
    expenses: Decimal
    net_profit: Decimal
    roi: Decimal
    sold_items_count: int
    total_items_count: int
    unsold_items_count: int
    unsold_value: Decimal


def _share_amount(share: ExpenseShare | Decimal) -> Decimal:
    if isinstance(share, ExpenseShare):
        return share.amount
    return share


def calculate_pallet_profit(
    pallet: Pallet | None,
    items: Sequence[Item],
    expenses: Iterable[ExpenseShare | Decimal],
) -> PalletProfit:
    """Roll up revenue, cost and ROI for a pallet.

    `expenses` must already be resolved to this pallet, i.e. shared expenses
    are split before they get here (see `domain.expenses.expenses_for_pallet`).
    A missing pallet yields zeros while still counting the given items.
    """
    if pallet is None:
        return PalletProfit(
            total_revenue=ZERO,
            total_cost=ZERO,
            pallet_cost=ZERO,
            sales_tax=ZERO,
            expenses=ZERO,
            net_profit=ZERO,
            roi=ZERO,
            sold_items_count=0,
            total_items_count=len(items),
            unsold_items_count=len(items),
            unsold_value=ZERO,
        )

    sold_items = [item for item in items if item.status == ItemStatus.SOLD and item.sale_price is not None]
    total_revenue = sum((item.sale_price or ZERO for item in sold_items), start=ZERO)

    pallet_cost = pallet.purchase_cost
    sales_tax = pallet.sales_tax or ZERO
    expense_total = sum((_share_amount(share) for share in expenses), start=ZERO)
    total_cost = pallet_cost + sales_tax + expense_total

    net_profit = total_revenue - total_cost

    unsold_items = [item for item in items if item.status != ItemStatus.SOLD]
    unsold_value = sum(
        (
            item.listing_price if item.listing_price is not None else (item.retail_price or ZERO)
            for item in unsold_items
        ),
        start=ZERO,
    )

    return PalletProfit(
        total_revenue=total_revenue,
        total_cost=total_cost,
        pallet_cost=pallet_cost,
        sales_tax=sales_tax,
        expenses=expense_total,
        net_profit=net_profit,
        roi=roi_percent(net_profit, total_cost),
        sold_items_count=len(sold_items),
        total_items_count=len(items),
        unsold_items_count=len(unsold_items),
        unsold_value=unsold_value,
    )


def calculate_simple_pallet_profit(
    pallet: Pallet, items: Sequence[Item], expenses: Iterable[ExpenseShare | Decimal]
) -> Decimal:
    return calculate_pallet_profit(pallet, items, expenses).net_profit


def calculate_pallet_roi(pallet: Pallet, items: Sequence[Item], expenses: Iterable[ExpenseShare | Decimal]) -> Decimal:
    return calculate_pallet_profit(pallet, items, expenses).roi
