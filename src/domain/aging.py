from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from .models import Item, ItemStatus

DEFAULT_STALE_THRESHOLD_DAYS = 30


def days_since_listed(item: Item, *, today: date) -> int | None:
    if item.listing_date is None:
        return None
    return (today - item.listing_date).days


def days_to_sell(item: Item) -> int | None:
    if item.status != ItemStatus.SOLD or item.listing_date is None or item.sale_date is None:
        return None
    return (item.sale_date - item.listing_date).days


def is_item_stale(item: Item, *, today: date, threshold_days: int = DEFAULT_STALE_THRESHOLD_DAYS) -> bool:
    """An unsold, listed item becomes stale after `threshold_days` on the market."""
    if item.status == ItemStatus.SOLD:
        return False
    days = days_since_listed(item, today=today)
    if days is None:
        return False
    return days >= threshold_days


def average_days_to_sell(items: Iterable[Item]) -> Decimal | None:
    durations = [days for days in (days_to_sell(item) for item in items) if days is not None]
    if not durations:
        return None
    return Decimal(sum(durations)) / len(durations)
