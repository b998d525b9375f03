from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import StrEnum
from typing import Callable, Iterable, Sequence, TypeVar

from pydantic import BaseModel

from .aging import DEFAULT_STALE_THRESHOLD_DAYS, average_days_to_sell, days_since_listed, is_item_stale
from .allocation import allocate_costs, resolve_effective_cost
from .expenses import expenses_for_pallet
from .fees import calculate_mileage_deduction, platform_display_name
from .models import (
    Expense,
    ExpenseCategory,
    Item,
    ItemId,
    ItemStatus,
    MileageTrip,
    Pallet,
    PalletId,
    SalesPlatform,
    SourceType,
)
from .profit import PalletProfit, calculate_net_profit, calculate_pallet_profit

ZERO = Decimal("0")
HUNDRED = Decimal("100")

UNKNOWN_SUPPLIER = "Unknown"
UNSPECIFIED_PALLET_TYPE = "Unspecified"

SOURCE_TYPE_LABELS: dict[SourceType, str] = {
    SourceType.PALLET: "Pallet",
    SourceType.THRIFT: "Thrift Store",
    SourceType.GARAGE_SALE: "Garage Sale",
    SourceType.RETAIL_ARBITRAGE: "Retail Arbitrage",
    SourceType.MYSTERY_BOX: "Mystery Box",
    SourceType.OTHER: "Other",
}

# Overhead categories; gas, mileage, fees and shipping are tracked elsewhere.
OPERATING_EXPENSE_CATEGORIES: tuple[ExpenseCategory, ...] = (
    ExpenseCategory.SUPPLIES,
    ExpenseCategory.STORAGE,
    ExpenseCategory.SUBSCRIPTIONS,
    ExpenseCategory.EQUIPMENT,
    ExpenseCategory.OTHER,
)


def source_type_label(source_type: SourceType) -> str:
    return SOURCE_TYPE_LABELS[source_type]


def expense_category_label(category: ExpenseCategory) -> str:
    return category.value.replace("_", " ").title()


def _percent(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator <= 0:
        return ZERO
    return numerator / denominator * HUNDRED


def _is_sold(item: Item) -> bool:
    return item.status == ItemStatus.SOLD and item.sale_price is not None


def _inventory_value(item: Item) -> Decimal:
    for price in (item.listing_price, item.retail_price, item.purchase_cost):
        if price is not None:
            return price
    return ZERO


@dataclass(frozen=True)
class DateRange:
    """Inclusive date bounds; a missing bound is open."""

    start: date | None = None
    end: date | None = None

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, value: date | None) -> bool:
        if self.is_open:
            return True
        if value is None:
            return False
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


RecordT = TypeVar("RecordT")


def filter_by_date_range(
    records: Iterable[RecordT], date_range: DateRange | None, date_of: Callable[[RecordT], date | None]
) -> list[RecordT]:
    if date_range is None:
        return list(records)
    return [record for record in records if date_range.contains(date_of(record))]


@dataclass
class _PalletRollup:
    pallet: Pallet
    items: list[Item]
    profit: PalletProfit


def _pallet_rollups(
    pallets: Iterable[Pallet], items: Sequence[Item], expenses: Sequence[Expense]
) -> list[_PalletRollup]:
    rollups: list[_PalletRollup] = []
    for pallet in pallets:
        pallet_items = [item for item in items if item.pallet_id == pallet.id]
        profit = calculate_pallet_profit(pallet, pallet_items, expenses_for_pallet(expenses, pallet.id))
        rollups.append(_PalletRollup(pallet=pallet, items=pallet_items, profit=profit))
    return rollups


class HeroMetrics(BaseModel):
    total_profit: Decimal
    total_items_sold: int
    average_roi: Decimal
    active_inventory_value: Decimal


def calculate_hero_metrics(
    pallets: Iterable[Pallet], items: Iterable[Item], expenses: Iterable[Expense]
) -> HeroMetrics:
    """Business-wide headline figures.

    Pallet profit comes from the pallet rollup; items bought on their own
    (no pallet) add their sale price less purchase cost, fee and shipping.
    """
    items_list = list(items)
    rollups = _pallet_rollups(pallets, items_list, list(expenses))

    total_profit = sum((rollup.profit.net_profit for rollup in rollups), start=ZERO)
    total_cost = sum((rollup.profit.total_cost for rollup in rollups), start=ZERO)

    for item in items_list:
        if item.pallet_id is not None or not _is_sold(item):
            continue
        cost = item.purchase_cost or ZERO
        selling_costs = (item.platform_fee or ZERO) + (item.shipping_cost or ZERO)
        total_profit += calculate_net_profit(item.sale_price, cost, item.platform_fee, item.shipping_cost)
        total_cost += cost + selling_costs

    active_inventory_value = sum(
        (_inventory_value(item) for item in items_list if item.status != ItemStatus.SOLD), start=ZERO
    )

    return HeroMetrics(
        total_profit=total_profit,
        total_items_sold=sum(1 for item in items_list if _is_sold(item)),
        average_roi=_percent(total_profit, total_cost),
        active_inventory_value=active_inventory_value,
    )


class RetailMetrics(BaseModel):
    total_retail_value: Decimal
    retail_recovery_rate: Decimal
    cost_per_dollar_retail: Decimal


def calculate_retail_metrics(items: Iterable[Item], purchase_cost: Decimal) -> RetailMetrics | None:
    """How much of the printed retail value a pallet recovered.

    Items without a positive retail price are ignored; with none left there
    is nothing to compare against.
    """
    with_retail = [item for item in items if item.retail_price is not None and item.retail_price > 0]
    if not with_retail:
        return None

    total_retail = sum((item.retail_price or ZERO for item in with_retail), start=ZERO)
    sold = [item for item in with_retail if _is_sold(item)]
    sold_revenue = sum((item.sale_price or ZERO for item in sold), start=ZERO)
    sold_retail = sum((item.retail_price or ZERO for item in sold), start=ZERO)

    return RetailMetrics(
        total_retail_value=total_retail,
        retail_recovery_rate=_percent(sold_revenue, sold_retail),
        cost_per_dollar_retail=purchase_cost / total_retail,
    )


class PalletAnalytics(BaseModel):
    pallet_id: PalletId
    name: str
    source_type: SourceType
    source_name: str | None
    profit: Decimal
    roi: Decimal
    total_cost: Decimal
    total_revenue: Decimal
    item_count: int
    sold_count: int
    average_days_to_sell: Decimal | None
    sell_through_rate: Decimal
    retail_metrics: RetailMetrics | None


def calculate_pallet_leaderboard(
    pallets: Iterable[Pallet], items: Iterable[Item], expenses: Iterable[Expense]
) -> list[PalletAnalytics]:
    """Per-pallet performance, most profitable first."""
    leaderboard = [
        PalletAnalytics(
            pallet_id=rollup.pallet.id,
            name=rollup.pallet.name,
            source_type=rollup.pallet.source_type,
            source_name=rollup.pallet.source_name,
            profit=rollup.profit.net_profit,
            roi=rollup.profit.roi,
            total_cost=rollup.profit.total_cost,
            total_revenue=rollup.profit.total_revenue,
            item_count=len(rollup.items),
            sold_count=rollup.profit.sold_items_count,
            average_days_to_sell=average_days_to_sell(rollup.items),
            sell_through_rate=_percent(Decimal(rollup.profit.sold_items_count), Decimal(len(rollup.items))),
            retail_metrics=calculate_retail_metrics(rollup.items, rollup.pallet.purchase_cost),
        )
        for rollup in _pallet_rollups(pallets, list(items), list(expenses))
    ]
    return sorted(leaderboard, key=lambda entry: entry.profit, reverse=True)


class SegmentComparison(BaseModel):
    segment: str
    pallet_count: int
    total_profit: Decimal
    total_cost: Decimal
    average_roi: Decimal
    average_profit_per_pallet: Decimal
    average_items_per_pallet: Decimal
    total_items_sold: int
    average_days_to_sell: Decimal | None
    sell_through_rate: Decimal
    is_mystery_box: bool = False


def _compare_segments(
    pallets: Iterable[Pallet],
    items: Iterable[Item],
    expenses: Iterable[Expense],
    segment_of: Callable[[Pallet], str],
) -> list[SegmentComparison]:
    groups: dict[str, list[_PalletRollup]] = {}
    for rollup in _pallet_rollups(pallets, list(items), list(expenses)):
        groups.setdefault(segment_of(rollup.pallet), []).append(rollup)

    comparisons: list[SegmentComparison] = []
    for segment, rollups in groups.items():
        pallet_count = len(rollups)
        total_profit = sum((rollup.profit.net_profit for rollup in rollups), start=ZERO)
        total_cost = sum((rollup.profit.total_cost for rollup in rollups), start=ZERO)
        total_items = sum(len(rollup.items) for rollup in rollups)
        total_sold = sum(rollup.profit.sold_items_count for rollup in rollups)
        segment_items = [item for rollup in rollups for item in rollup.items]

        comparisons.append(
            SegmentComparison(
                segment=segment,
                pallet_count=pallet_count,
                total_profit=total_profit,
                total_cost=total_cost,
                average_roi=_percent(total_profit, total_cost),
                average_profit_per_pallet=total_profit / pallet_count,
                average_items_per_pallet=Decimal(total_items) / pallet_count,
                total_items_sold=total_sold,
                average_days_to_sell=average_days_to_sell(segment_items),
                sell_through_rate=_percent(Decimal(total_sold), Decimal(total_items)),
                is_mystery_box=any(rollup.pallet.source_type == SourceType.MYSTERY_BOX for rollup in rollups),
            )
        )
    return comparisons


def _normalized(value: str | None, fallback: str) -> str:
    return value.strip() if value and value.strip() else fallback


def compare_source_types(
    pallets: Iterable[Pallet], items: Iterable[Item], expenses: Iterable[Expense]
) -> list[SegmentComparison]:
    """Group pallets by source type, best average ROI first."""
    comparisons = _compare_segments(pallets, items, expenses, lambda pallet: pallet.source_type.value)
    return sorted(comparisons, key=lambda comparison: comparison.average_roi, reverse=True)


def compare_suppliers(
    pallets: Iterable[Pallet], items: Iterable[Item], expenses: Iterable[Expense]
) -> list[SegmentComparison]:
    """Group pallets by supplier, most profitable first."""
    comparisons = _compare_segments(
        pallets, items, expenses, lambda pallet: _normalized(pallet.supplier, UNKNOWN_SUPPLIER)
    )
    return sorted(comparisons, key=lambda comparison: comparison.total_profit, reverse=True)


def compare_pallet_types(
    pallets: Iterable[Pallet], items: Iterable[Item], expenses: Iterable[Expense]
) -> list[SegmentComparison]:
    """Group pallets by source name (e.g. "Amazon Monster"), most profitable first."""
    comparisons = _compare_segments(
        pallets, items, expenses, lambda pallet: _normalized(pallet.source_name, UNSPECIFIED_PALLET_TYPE)
    )
    return sorted(comparisons, key=lambda comparison: comparison.total_profit, reverse=True)


class StaleItem(BaseModel):
    item_id: ItemId
    name: str
    pallet_id: PalletId | None
    pallet_name: str | None
    days_listed: int
    listing_price: Decimal | None


def get_stale_items(
    items: Iterable[Item],
    pallets: Iterable[Pallet],
    *,
    today: date,
    threshold_days: int = DEFAULT_STALE_THRESHOLD_DAYS,
) -> list[StaleItem]:
    """Unsold items listed for at least `threshold_days`, longest listed first."""
    pallet_names = {pallet.id: pallet.name for pallet in pallets}
    stale = [
        StaleItem(
            item_id=item.id,
            name=item.name,
            pallet_id=item.pallet_id,
            pallet_name=pallet_names.get(item.pallet_id) if item.pallet_id is not None else None,
            days_listed=days_since_listed(item, today=today) or 0,
            listing_price=item.listing_price,
        )
        for item in items
        if is_item_stale(item, today=today, threshold_days=threshold_days)
    ]
    return sorted(stale, key=lambda entry: entry.days_listed, reverse=True)


class TrendGranularity(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class TrendPoint(BaseModel):
    period_start: date
    profit: Decimal
    revenue: Decimal
    items_sold: int


def _period_start(day: date, granularity: TrendGranularity) -> date:
    if granularity == TrendGranularity.DAILY:
        return day
    if granularity == TrendGranularity.WEEKLY:
        # ISO weeks start on Monday.
        return day - timedelta(days=day.weekday())
    return day.replace(day=1)


def _sold_item_profit(item: Item) -> Decimal:
    # No pallet context here, so only stored or purchase cost applies.
    cost = resolve_effective_cost(item).amount
    return calculate_net_profit(item.sale_price, cost, item.platform_fee, item.shipping_cost)


def calculate_profit_trend(
    items: Iterable[Item],
    granularity: TrendGranularity = TrendGranularity.MONTHLY,
    date_range: DateRange | None = None,
) -> list[TrendPoint]:
    """Profit, revenue and sale counts of sold items bucketed by sale date."""
    sold = [item for item in items if _is_sold(item) and item.sale_date is not None]
    sold = filter_by_date_range(sold, date_range, lambda item: item.sale_date)

    buckets: dict[date, TrendPoint] = {}
    for item in sold:
        key = _period_start(item.sale_date, granularity)
        point = buckets.setdefault(key, TrendPoint(period_start=key, profit=ZERO, revenue=ZERO, items_sold=0))
        point.profit += _sold_item_profit(item)
        point.revenue += item.sale_price or ZERO
        point.items_sold += 1

    return [buckets[key] for key in sorted(buckets)]


class PeriodSummary(BaseModel):
    items_sold: int
    revenue: Decimal
    profit: Decimal
    average_sale_price: Decimal


def calculate_period_summary(items: Iterable[Item], date_range: DateRange) -> PeriodSummary:
    sold = filter_by_date_range(
        [item for item in items if _is_sold(item)], date_range, lambda item: item.sale_date
    )
    revenue = sum((item.sale_price or ZERO for item in sold), start=ZERO)
    return PeriodSummary(
        items_sold=len(sold),
        revenue=revenue,
        profit=sum((_sold_item_profit(item) for item in sold), start=ZERO),
        average_sale_price=revenue / len(sold) if sold else ZERO,
    )


class PlatformBreakdown(BaseModel):
    platform: SalesPlatform
    label: str
    sales: Decimal
    fees: Decimal
    count: int


class CategoryTotal(BaseModel):
    category: ExpenseCategory
    label: str
    amount: Decimal
    count: int


class MileageSummary(BaseModel):
    total_miles: Decimal
    average_rate: Decimal
    total_deduction: Decimal
    trip_count: int


class ProfitLossSummary(BaseModel):
    period_start: date
    period_end: date

    gross_sales: Decimal
    items_sold: int
    average_sale_price: Decimal

    pallet_item_costs: Decimal
    pallet_items_sold: int
    individual_item_costs: Decimal
    individual_items_sold: int
    total_cogs: Decimal

    gross_profit: Decimal
    gross_margin: Decimal

    platform_fees: Decimal
    shipping_costs: Decimal
    total_selling_expenses: Decimal
    platform_breakdown: list[PlatformBreakdown]

    operating_expenses: list[CategoryTotal]
    total_operating_expenses: Decimal

    mileage: MileageSummary

    total_expenses: Decimal
    net_profit: Decimal
    net_margin: Decimal


def _calculated_costs(
    pallets: Iterable[Pallet], items: Sequence[Item], include_unsellable: bool
) -> dict[ItemId, Decimal]:
    calculated: dict[ItemId, Decimal] = {}
    for pallet in pallets:
        pallet_items = [item for item in items if item.pallet_id == pallet.id]
        for allocation in allocate_costs(pallet, pallet_items, include_unsellable=include_unsellable):
            calculated[allocation.item.id] = allocation.calculated_allocated_cost
    return calculated


def _earliest_date(
    pallets: Sequence[Pallet], items: Sequence[Item], expenses: Sequence[Expense], trips: Sequence[MileageTrip]
) -> date | None:
    dates = [pallet.purchase_date for pallet in pallets]
    dates.extend(item.sale_date for item in items if item.sale_date is not None)
    dates.extend(expense.expense_date for expense in expenses)
    dates.extend(trip.trip_date for trip in trips)
    return min(dates, default=None)


def calculate_profit_loss(
    items: Iterable[Item],
    pallets: Iterable[Pallet],
    expenses: Iterable[Expense],
    mileage_trips: Iterable[MileageTrip],
    date_range: DateRange | None = None,
    *,
    include_unsellable: bool = False,
    today: date | None = None,
) -> ProfitLossSummary:
    """Profit and loss statement for tax preparation.

    Cost of goods is accrual based: only the cost of items sold in the period
    counts. A sold pallet item costs its effective cost, so pallet sales tax
    reaches COGS through the allocation. Operating expenses, mileage and sales
    are limited to the period; allocation always sees every item of a pallet.
    """
    as_of = today or date.today()
    items_list = list(items)
    pallets_list = list(pallets)
    expenses_list = filter_by_date_range(expenses, date_range, lambda expense: expense.expense_date)
    trips = filter_by_date_range(mileage_trips, date_range, lambda trip: trip.trip_date)

    sold = filter_by_date_range(
        [item for item in items_list if _is_sold(item)], date_range, lambda item: item.sale_date
    )
    gross_sales = sum((item.sale_price or ZERO for item in sold), start=ZERO)

    calculated = _calculated_costs(pallets_list, items_list, include_unsellable)
    sold_pallet_items = [item for item in sold if item.pallet_id is not None]
    pallet_item_costs = sum(
        (resolve_effective_cost(item, calculated.get(item.id)).amount for item in sold_pallet_items), start=ZERO
    )
    sold_individual_items = [item for item in sold if item.pallet_id is None and item.purchase_cost is not None]
    individual_item_costs = sum((item.purchase_cost or ZERO for item in sold_individual_items), start=ZERO)
    total_cogs = pallet_item_costs + individual_item_costs
    gross_profit = gross_sales - total_cogs

    platform_fees = sum((item.platform_fee or ZERO for item in sold), start=ZERO)
    shipping_costs = sum((item.shipping_cost or ZERO for item in sold), start=ZERO)
    total_selling_expenses = platform_fees + shipping_costs

    by_platform: dict[SalesPlatform, PlatformBreakdown] = {}
    for item in sold:
        platform = item.platform or SalesPlatform.OTHER
        entry = by_platform.setdefault(
            platform,
            PlatformBreakdown(
                platform=platform, label=platform_display_name(platform), sales=ZERO, fees=ZERO, count=0
            ),
        )
        entry.sales += item.sale_price or ZERO
        entry.fees += item.platform_fee or ZERO
        entry.count += 1
    platform_breakdown = sorted(by_platform.values(), key=lambda entry: entry.sales, reverse=True)

    operating_expenses: list[CategoryTotal] = []
    for category in OPERATING_EXPENSE_CATEGORIES:
        in_category = [expense for expense in expenses_list if expense.category == category]
        amount = sum((expense.amount for expense in in_category), start=ZERO)
        if amount > 0:
            operating_expenses.append(
                CategoryTotal(
                    category=category,
                    label=expense_category_label(category),
                    amount=amount,
                    count=len(in_category),
                )
            )
    total_operating_expenses = sum((entry.amount for entry in operating_expenses), start=ZERO)

    mileage = MileageSummary(
        total_miles=sum((trip.miles for trip in trips), start=ZERO),
        average_rate=sum((trip.mileage_rate for trip in trips), start=ZERO) / len(trips) if trips else ZERO,
        total_deduction=sum(
            (calculate_mileage_deduction(trip.miles, trip.mileage_rate) for trip in trips), start=ZERO
        ),
        trip_count=len(trips),
    )

    total_expenses = total_selling_expenses + total_operating_expenses + mileage.total_deduction
    net_profit = gross_profit - total_expenses

    period_start = (date_range.start if date_range else None) or _earliest_date(
        pallets_list, sold, expenses_list, trips
    )

    return ProfitLossSummary(
        period_start=period_start or as_of,
        period_end=(date_range.end if date_range else None) or as_of,
        gross_sales=gross_sales,
        items_sold=len(sold),
        average_sale_price=gross_sales / len(sold) if sold else ZERO,
        pallet_item_costs=pallet_item_costs,
        pallet_items_sold=len(sold_pallet_items),
        individual_item_costs=individual_item_costs,
        individual_items_sold=len(sold_individual_items),
        total_cogs=total_cogs,
        gross_profit=gross_profit,
        gross_margin=_percent(gross_profit, gross_sales),
        platform_fees=platform_fees,
        shipping_costs=shipping_costs,
        total_selling_expenses=total_selling_expenses,
        platform_breakdown=platform_breakdown,
        operating_expenses=operating_expenses,
        total_operating_expenses=total_operating_expenses,
        mileage=mileage,
        total_expenses=total_expenses,
        net_profit=net_profit,
        net_margin=_percent(net_profit, gross_sales),
    )
