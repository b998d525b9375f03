from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Table, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


class DecimalAsString(TypeDecorator):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: object) -> str | None:
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value: str | None, dialect: object) -> Decimal | None:
        if value is None:
            return None
        return Decimal(value)


class Base(DeclarativeBase):
    pass


expense_pallets = Table(
    "expense_pallets",
    Base.metadata,
    Column("expense_id", Uuid, ForeignKey("expenses.id", ondelete="CASCADE"), primary_key=True),
    Column("pallet_id", Uuid, ForeignKey("pallets.id", ondelete="CASCADE"), primary_key=True),
)

mileage_pallets = Table(
    "mileage_pallets",
    Base.metadata,
    Column("trip_id", Uuid, ForeignKey("mileage_trips.id", ondelete="CASCADE"), primary_key=True),
    Column("pallet_id", Uuid, ForeignKey("pallets.id", ondelete="CASCADE"), primary_key=True),
)


class PalletOrm(Base):
    __tablename__ = "pallets"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    supplier: Mapped[str | None] = mapped_column(String, nullable=True)
    source_type: Mapped[str] = mapped_column(String, nullable=False)
    source_name: Mapped[str | None] = mapped_column(String, nullable=True)
    purchase_cost: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    sales_tax: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)
    purchase_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False)

    items: Mapped[list["ItemOrm"]] = relationship(back_populates="pallet")
    expenses: Mapped[list["ExpenseOrm"]] = relationship(secondary=expense_pallets, back_populates="pallets")
    mileage_trips: Mapped[list["MileageTripOrm"]] = relationship(
        secondary=mileage_pallets, back_populates="pallets"
    )


class ItemOrm(Base):
    __tablename__ = "items"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    pallet_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("pallets.id"), nullable=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    condition: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False)
    source_type: Mapped[str] = mapped_column(String, nullable=False)
    retail_price: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)
    listing_price: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)
    purchase_cost: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)
    allocated_cost: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)
    listing_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    sale_price: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)
    sale_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    platform: Mapped[str | None] = mapped_column(String, nullable=True)
    platform_fee: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)
    shipping_cost: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)
    sales_channel: Mapped[str | None] = mapped_column(String, nullable=True)

    pallet: Mapped[PalletOrm | None] = relationship(back_populates="items")


class ExpenseOrm(Base):
    __tablename__ = "expenses"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    amount: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)

    pallets: Mapped[list[PalletOrm]] = relationship(
        secondary=expense_pallets, back_populates="expenses", lazy="selectin"
    )


class MileageTripOrm(Base):
    __tablename__ = "mileage_trips"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    trip_date: Mapped[date] = mapped_column(Date, nullable=False)
    miles: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    purpose: Mapped[str] = mapped_column(String, nullable=False)
    mileage_rate: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    notes: Mapped[str | None] = mapped_column(String, nullable=True)

    pallets: Mapped[list[PalletOrm]] = relationship(
        secondary=mileage_pallets, back_populates="mileage_trips", lazy="selectin"
    )
