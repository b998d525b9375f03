from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import NewType
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator

PalletId = NewType("PalletId", UUID)
ItemId = NewType("ItemId", UUID)
ExpenseId = NewType("ExpenseId", UUID)
TripId = NewType("TripId", UUID)


class PalletStatus(StrEnum):
    UNPROCESSED = "unprocessed"
    PROCESSING = "processing"
    COMPLETED = "completed"


class ItemCondition(StrEnum):
    NEW = "new"
    OPEN_BOX = "open_box"
    USED_GOOD = "used_good"
    USED_FAIR = "used_fair"
    DAMAGED = "damaged"
    FOR_PARTS = "for_parts"
    UNSELLABLE = "unsellable"


class ItemStatus(StrEnum):
    UNLISTED = "unlisted"
    LISTED = "listed"
    SOLD = "sold"


class SourceType(StrEnum):
    PALLET = "pallet"
    THRIFT = "thrift"
    GARAGE_SALE = "garage_sale"
    RETAIL_ARBITRAGE = "retail_arbitrage"
    MYSTERY_BOX = "mystery_box"
    OTHER = "other"


class ExpenseCategory(StrEnum):
    STORAGE = "storage"
    SUPPLIES = "supplies"
    SUBSCRIPTIONS = "subscriptions"
    EQUIPMENT = "equipment"
    GAS = "gas"
    FEES = "fees"
    SHIPPING = "shipping"
    MILEAGE = "mileage"
    OTHER = "other"


class SalesPlatform(StrEnum):
    EBAY = "ebay"
    POSHMARK = "poshmark"
    MERCARI = "mercari"
    WHATNOT = "whatnot"
    FACEBOOK = "facebook"
    OFFERUP = "offerup"
    LETGO = "letgo"
    CRAIGSLIST = "craigslist"
    OTHER = "other"


class TripPurpose(StrEnum):
    PALLET_PICKUP = "pallet_pickup"
    THRIFT_RUN = "thrift_run"
    GARAGE_SALE = "garage_sale"
    POST_OFFICE = "post_office"
    AUCTION = "auction"
    SOURCING = "sourcing"
    SUPPLIES = "supplies"
    OTHER = "other"


class Pallet(BaseModel):
    id: PalletId = PalletId(Field(default_factory=uuid4))
    name: str
    supplier: str | None = None
    source_type: SourceType = SourceType.PALLET
    source_name: str | None = None
    purchase_cost: Decimal
    sales_tax: Decimal | None = None
    purchase_date: date
    status: PalletStatus = PalletStatus.UNPROCESSED

    @model_validator(mode="after")
    def _validate_costs(self) -> Pallet:
        if self.purchase_cost < 0:
            raise ValueError("purchase_cost must be >= 0")
        if self.sales_tax is not None and self.sales_tax < 0:
            raise ValueError("sales_tax must be >= 0")
        return self


class Item(BaseModel):
    """A single item, optionally drawn from a pallet.

    Price fields are nullable: an unlisted item has no listing price, and only
    sold items carry sale details (sale price, date, platform, fee, shipping).
    """

    id: ItemId = ItemId(Field(default_factory=uuid4))
    pallet_id: PalletId | None = None
    name: str
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

    @model_validator(mode="after")
    def _validate_fields(self) -> Item:
        if self.quantity < 1:
            raise ValueError("Item.quantity must be >= 1")
        if self.status == ItemStatus.SOLD and self.sale_price is None:
            raise ValueError("Sold item must have a sale_price")
        for name in (
            "retail_price",
            "listing_price",
            "purchase_cost",
            "allocated_cost",
            "sale_price",
            "platform_fee",
            "shipping_cost",
        ):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be >= 0")
        return self


class Expense(BaseModel):
    id: ExpenseId = ExpenseId(Field(default_factory=uuid4))
    amount: Decimal
    category: ExpenseCategory
    description: str | None = None
    expense_date: date
    # An expense may be shared by several pallets (e.g. storage rent).
    pallet_ids: list[PalletId] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_amount(self) -> Expense:
        if self.amount < 0:
            raise ValueError("Expense.amount must be >= 0")
        return self


class MileageTrip(BaseModel):
    id: TripId = TripId(Field(default_factory=uuid4))
    trip_date: date
    miles: Decimal
    purpose: TripPurpose = TripPurpose.OTHER
    mileage_rate: Decimal
    notes: str | None = None
    pallet_ids: list[PalletId] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_fields(self) -> MileageTrip:
        if self.miles <= 0:
            raise ValueError("MileageTrip.miles must be > 0")
        if self.mileage_rate < 0:
            raise ValueError("MileageTrip.mileage_rate must be >= 0")
        return self
