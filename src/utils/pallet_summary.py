from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from domain.aging import DEFAULT_STALE_THRESHOLD_DAYS, average_days_to_sell, is_item_stale
from domain.allocation import allocate_costs
from domain.expenses import expenses_for_pallet
from domain.models import Expense, Item, Pallet, PalletStatus
from domain.profit import PalletProfit, calculate_item_profit_result, calculate_pallet_profit

from .formatting import format_currency, format_roi, roi_tone


@dataclass
class PalletSummary:
    pallet: Pallet
    profit: PalletProfit
    estimated_item_profit: Decimal
    stale_items: int
    average_days_to_sell: Decimal | None

    @property
    def is_realized(self) -> bool:
        return self.pallet.status == PalletStatus.COMPLETED


def compute_pallet_summaries(
    pallets: Iterable[Pallet],
    items: Iterable[Item],
    expenses: Iterable[Expense],
    *,
    include_unsellable: bool = False,
    stale_threshold_days: int = DEFAULT_STALE_THRESHOLD_DAYS,
    today: date | None = None,
) -> list[PalletSummary]:
    """Build one summary per pallet from a full snapshot."""
    as_of = today or date.today()
    items_list = list(items)
    expenses_list = list(expenses)

    summaries: list[PalletSummary] = []
    for pallet in pallets:
        pallet_items = [item for item in items_list if item.pallet_id == pallet.id]
        shares = expenses_for_pallet(expenses_list, pallet.id)

        estimated_item_profit = sum(
            (
                calculate_item_profit_result(allocation.item, allocation.calculated_allocated_cost).profit
                for allocation in allocate_costs(pallet, pallet_items, include_unsellable=include_unsellable)
            ),
            start=Decimal("0"),
        )
        summaries.append(
            PalletSummary(
                pallet=pallet,
                profit=calculate_pallet_profit(pallet, pallet_items, shares),
                estimated_item_profit=estimated_item_profit,
                stale_items=sum(
                    1
                    for item in pallet_items
                    if is_item_stale(item, today=as_of, threshold_days=stale_threshold_days)
                ),
                average_days_to_sell=average_days_to_sell(pallet_items),
            )
        )

    return summaries


def render_pallet_summaries(summaries: Iterable[PalletSummary]) -> None:
    summaries_list = list(summaries)
    print("Pallet profit summary:")
    if not summaries_list:
        print("  (no pallets)")
        return

    headers = ("Pallet", "Status", "Items", "Sold", "Revenue", "Cost", "Profit", "ROI", "Stale")
    rows: list[tuple[str, ...]] = []
    for summary in summaries_list:
        profit = summary.profit
        label = roi_tone(profit.roi).value if summary.is_realized else "open"
        roi_text = f"{format_roi(profit.roi)} ({label})"
        rows.append(
            (
                summary.pallet.name,
                summary.pallet.status.value,
                str(profit.total_items_count),
                str(profit.sold_items_count),
                format_currency(profit.total_revenue),
                format_currency(profit.total_cost),
                format_currency(profit.net_profit),
                roi_text,
                str(summary.stale_items),
            )
        )

    widths = [max(len(header), max(len(row[idx]) for row in rows)) for idx, header in enumerate(headers)]

    def _line(values: tuple[str, ...]) -> str:
        first = f"{values[0]:<{widths[0]}}"
        second = f"{values[1]:<{widths[1]}}"
        rest = " ".join(f"{value:>{width}}" for value, width in zip(values[2:], widths[2:]))
        return f"{first} {second} {rest}"

    header = _line(headers)
    lines = [header, "-" * len(header)]
    lines.extend(_line(row) for row in rows)
    lines.append("-" * len(header))

    total_profit = sum((summary.profit.net_profit for summary in summaries_list), start=Decimal("0"))
    unsold_value = sum((summary.profit.unsold_value for summary in summaries_list), start=Decimal("0"))
    lines.append(f"Total profit: {format_currency(total_profit)}  Unsold value: {format_currency(unsold_value)}")
    print("\n".join(lines))
