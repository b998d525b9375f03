from __future__ import annotations

from decimal import Decimal

from domain.analytics import HeroMetrics, ProfitLossSummary

from .formatting import format_currency, format_roi


def render_hero_metrics(metrics: HeroMetrics) -> None:
    print("Business overview (all items, with or without a pallet):")
    print(f"  Total profit:      {format_currency(metrics.total_profit)}")
    print(f"  Items sold:        {metrics.total_items_sold}")
    print(f"  Average ROI:       {format_roi(metrics.average_roi)}")
    print(f"  Active inventory:  {format_currency(metrics.active_inventory_value)}")


def _amount_lines(rows: list[tuple[str, Decimal]], *, indent: str = "  ") -> list[str]:
    width = max(len(label) for label, _ in rows)
    values = [format_currency(amount) for _, amount in rows]
    value_width = max(len(value) for value in values)
    return [f"{indent}{label:<{width}}  {value:>{value_width}}" for (label, _), value in zip(rows, values)]


def render_profit_loss(summary: ProfitLossSummary) -> None:
    lines = [f"Profit & loss {summary.period_start.isoformat()} to {summary.period_end.isoformat()}:"]

    rows: list[tuple[str, Decimal]] = [
        (f"Gross sales ({summary.items_sold} items)", summary.gross_sales),
        (f"Pallet item costs ({summary.pallet_items_sold} sold)", -summary.pallet_item_costs),
        (f"Individual item costs ({summary.individual_items_sold} sold)", -summary.individual_item_costs),
        ("Gross profit", summary.gross_profit),
        ("Platform fees", -summary.platform_fees),
        ("Shipping", -summary.shipping_costs),
    ]
    rows.extend((entry.label, -entry.amount) for entry in summary.operating_expenses)
    rows.append(
        (
            f"Mileage ({summary.mileage.total_miles} mi, {summary.mileage.trip_count} trips)",
            -summary.mileage.total_deduction,
        )
    )
    rows.append(("Net profit", summary.net_profit))
    lines.extend(_amount_lines(rows))
    lines.append(f"  Gross margin {format_roi(summary.gross_margin)}  Net margin {format_roi(summary.net_margin)}")

    if summary.platform_breakdown:
        lines.append("  Sales by platform:")
        platform_rows = [(f"{entry.label} ({entry.count})", entry.sales) for entry in summary.platform_breakdown]
        lines.extend(_amount_lines(platform_rows, indent="    "))
    print("\n".join(lines))
