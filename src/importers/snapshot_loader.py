from __future__ import annotations

import logging
from csv import DictReader
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from config import config
from domain.models import (
    Expense,
    ExpenseCategory,
    Item,
    ItemCondition,
    ItemStatus,
    MileageTrip,
    Pallet,
    PalletId,
    PalletStatus,
    SalesPlatform,
    SourceType,
    TripPurpose,
)

logger = logging.getLogger(__name__)

PALLETS_FILE = "pallets.csv"
ITEMS_FILE = "items.csv"
EXPENSES_FILE = "expenses.csv"
MILEAGE_FILE = "mileage.csv"
REF_SEPARATOR = ";"


class PalletRow(BaseModel):
    ref: str
    name: str
    supplier: str | None = None
    source_type: SourceType = SourceType.PALLET
    source_name: str | None = None
    purchase_cost: Decimal
    sales_tax: Decimal | None = None
    purchase_date: date
    status: PalletStatus = PalletStatus.UNPROCESSED


class ItemRow(BaseModel):
    name: str
    pallet_ref: str | None = None
    quantity: int = 1
    condition: ItemCondition = ItemCondition.USED_GOOD
    status: ItemStatus = ItemStatus.UNLISTED
    source_type: SourceType = SourceType.PALLET
    retail_price: Decimal | None = None
    listing_price: Decimal | None = None
    purchase_cost: Decimal | None = None
    allocated_cost: Decimal | None = None
    listing_date: date | None = None
    sale_price: Decimal | None = None
    sale_date: date | None = None
    platform: SalesPlatform | None = None
    platform_fee: Decimal | None = None
    shipping_cost: Decimal | None = None
    sales_channel: str | None = None


class ExpenseRow(BaseModel):
    amount: Decimal
    category: ExpenseCategory
    description: str | None = None
    expense_date: date
    pallet_refs: str | None = None


class MileageRow(BaseModel):
    trip_date: date
    miles: Decimal
    purpose: TripPurpose = TripPurpose.OTHER
    mileage_rate: Decimal | None = None
    notes: str | None = None
    pallet_refs: str | None = None


@dataclass
class Snapshot:
    pallets: list[Pallet] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)
    expenses: list[Expense] = field(default_factory=list)
    mileage_trips: list[MileageTrip] = field(default_factory=list)


RowT = TypeVar("RowT", bound=BaseModel)
RecordT = TypeVar("RecordT")


class SnapshotLoader:
    """Read pallets, items, expenses and mileage trips exported as CSV.

    Items, expenses and trips point at pallets through the pallet's `ref`
    column; expenses and trips may list several refs separated by ';'. A trip
    without a `mileage_rate` uses `default_mileage_rate`, or the configured
    IRS rate when none is given.
    """

    def __init__(self, source_dir: Path, *, default_mileage_rate: Decimal | None = None) -> None:
        self._source_dir = source_dir
        self._default_mileage_rate = (
            default_mileage_rate if default_mileage_rate is not None else config().irs_mileage_rate
        )

    def load(self) -> Snapshot:
        pallets_by_ref: dict[str, Pallet] = {}

        def build_pallet(row: PalletRow) -> Pallet:
            if row.ref in pallets_by_ref:
                raise ValueError(f"duplicate pallet ref {row.ref!r}")
            pallet = Pallet(**row.model_dump(exclude={"ref"}))
            pallets_by_ref[row.ref] = pallet
            return pallet

        pallets = self._read_rows(PALLETS_FILE, PalletRow, build_pallet, required=True)

        items = self._read_rows(
            ITEMS_FILE,
            ItemRow,
            lambda row: Item(
                **row.model_dump(exclude={"pallet_ref"}),
                pallet_id=_resolve_ref(row.pallet_ref, pallets_by_ref) if row.pallet_ref else None,
            ),
        )

        expenses = self._read_rows(
            EXPENSES_FILE,
            ExpenseRow,
            lambda row: Expense(
                **row.model_dump(exclude={"pallet_refs"}),
                pallet_ids=[_resolve_ref(ref, pallets_by_ref) for ref in _split_refs(row.pallet_refs)],
            ),
        )

        mileage_trips = self._read_rows(
            MILEAGE_FILE,
            MileageRow,
            lambda row: MileageTrip(
                **row.model_dump(exclude={"pallet_refs", "mileage_rate"}),
                mileage_rate=row.mileage_rate if row.mileage_rate is not None else self._default_mileage_rate,
                pallet_ids=[_resolve_ref(ref, pallets_by_ref) for ref in _split_refs(row.pallet_refs)],
            ),
        )

        logger.info(
            "Loaded snapshot from %s: %d pallets, %d items, %d expenses, %d mileage trips",
            self._source_dir,
            len(pallets),
            len(items),
            len(expenses),
            len(mileage_trips),
        )
        return Snapshot(pallets=pallets, items=items, expenses=expenses, mileage_trips=mileage_trips)

    def _path(self, file_name: str) -> Path:
        return self._source_dir / file_name

    def _read_rows(
        self,
        file_name: str,
        row_type: type[RowT],
        build: Callable[[RowT], RecordT],
        *,
        required: bool = False,
    ) -> list[RecordT]:
        path = self._path(file_name)
        if not path.exists():
            if required:
                raise ValueError(f"Snapshot file {path} not found")
            logger.info("Snapshot file %s not found, skipping", path)
            return []

        records: list[RecordT] = []
        with path.open(encoding="utf-8", newline="") as handle:
            reader = DictReader(handle)
            if reader.fieldnames is None:
                raise ValueError(f"Snapshot file {path} is empty or missing headers")
            # Header is line 1.
            for line_number, raw in enumerate(reader, start=2):
                try:
                    records.append(build(row_type.model_validate(_present_cells(raw))))
                except ValidationError as err:
                    raise ValueError(f"{path}:{line_number}: invalid row: {err}") from err
                except ValueError as err:
                    raise ValueError(f"{path}:{line_number}: {err}") from err
        return records


def _resolve_ref(ref: str, pallets_by_ref: dict[str, Pallet]) -> PalletId:
    pallet = pallets_by_ref.get(ref)
    if pallet is None:
        raise ValueError(f"unknown pallet ref {ref!r}")
    return pallet.id


def _present_cells(raw: dict[str | None, Any]) -> dict[str, str]:
    # Blank cells fall back to the field default.
    return {
        key: value.strip()
        for key, value in raw.items()
        if key is not None and isinstance(value, str) and value.strip() != ""
    }


def _split_refs(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [ref.strip() for ref in raw.split(REF_SEPARATOR) if ref.strip()]
