from __future__ import annotations

from typing import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from db import models
from domain.models import (
    Expense,
    ExpenseCategory,
    ExpenseId,
    Item,
    ItemCondition,
    ItemId,
    ItemStatus,
    MileageTrip,
    Pallet,
    PalletId,
    PalletStatus,
    SalesPlatform,
    SourceType,
    TripId,
    TripPurpose,
)


class SnapshotError(Exception):
    """A stored snapshot references a record that is not in the store."""


class PalletRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, pallet: Pallet) -> Pallet:
        orm_pallet = models.PalletOrm(
            id=pallet.id,
            name=pallet.name,
            supplier=pallet.supplier,
            source_type=pallet.source_type.value,
            source_name=pallet.source_name,
            purchase_cost=pallet.purchase_cost,
            sales_tax=pallet.sales_tax,
            purchase_date=pallet.purchase_date,
            status=pallet.status.value,
        )
        self._session.add(orm_pallet)
        self._session.commit()
        self._session.refresh(orm_pallet)
        return self._to_domain(orm_pallet)

    def create_many(self, pallets: Iterable[Pallet]) -> list[Pallet]:
        return [self.create(pallet) for pallet in pallets]

    def get(self, pallet_id: UUID) -> Pallet | None:
        orm_pallet = self._session.get(models.PalletOrm, pallet_id)
        if orm_pallet is None:
            return None
        return self._to_domain(orm_pallet)

    def list(self) -> list[Pallet]:
        orm_pallets = (
            self._session.query(models.PalletOrm)
            .order_by(models.PalletOrm.purchase_date.asc(), models.PalletOrm.name.asc())
            .all()
        )
        return [self._to_domain(pallet) for pallet in orm_pallets]

    @staticmethod
    def _to_domain(orm_pallet: models.PalletOrm) -> Pallet:
        return Pallet(
            id=PalletId(orm_pallet.id),
            name=orm_pallet.name,
            supplier=orm_pallet.supplier,
            source_type=SourceType(orm_pallet.source_type),
            source_name=orm_pallet.source_name,
            purchase_cost=orm_pallet.purchase_cost,
            sales_tax=orm_pallet.sales_tax,
            purchase_date=orm_pallet.purchase_date,
            status=PalletStatus(orm_pallet.status),
        )


class ItemRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, item: Item) -> Item:
        if item.pallet_id is not None and self._session.get(models.PalletOrm, item.pallet_id) is None:
            raise SnapshotError(f"Item {item.id} references unknown pallet {item.pallet_id}")

        orm_item = models.ItemOrm(
            id=item.id,
            pallet_id=item.pallet_id,
            name=item.name,
            quantity=item.quantity,
            condition=item.condition.value,
            status=item.status.value,
            source_type=item.source_type.value,
            retail_price=item.retail_price,
            listing_price=item.listing_price,
            purchase_cost=item.purchase_cost,
            allocated_cost=item.allocated_cost,
            listing_date=item.listing_date,
            sale_price=item.sale_price,
            sale_date=item.sale_date,
            platform=item.platform.value if item.platform is not None else None,
            platform_fee=item.platform_fee,
            shipping_cost=item.shipping_cost,
            sales_channel=item.sales_channel,
        )
        self._session.add(orm_item)
        self._session.commit()
        self._session.refresh(orm_item)
        return self._to_domain(orm_item)

    def create_many(self, items: Iterable[Item]) -> list[Item]:
        return [self.create(item) for item in items]

    def get(self, item_id: UUID) -> Item | None:
        orm_item = self._session.get(models.ItemOrm, item_id)
        if orm_item is None:
            return None
        return self._to_domain(orm_item)

    def list(self) -> list[Item]:
        orm_items = self._session.query(models.ItemOrm).order_by(models.ItemOrm.name.asc()).all()
        return [self._to_domain(item) for item in orm_items]

    def list_for_pallet(self, pallet_id: UUID) -> list[Item]:
        orm_items = (
            self._session.query(models.ItemOrm)
            .filter(models.ItemOrm.pallet_id == pallet_id)
            .order_by(models.ItemOrm.name.asc())
            .all()
        )
        return [self._to_domain(item) for item in orm_items]

    @staticmethod
    def _to_domain(orm_item: models.ItemOrm) -> Item:
        return Item(
            id=ItemId(orm_item.id),
            pallet_id=PalletId(orm_item.pallet_id) if orm_item.pallet_id is not None else None,
            name=orm_item.name,
            quantity=orm_item.quantity,
            condition=ItemCondition(orm_item.condition),
            status=ItemStatus(orm_item.status),
            source_type=SourceType(orm_item.source_type),
            retail_price=orm_item.retail_price,
            listing_price=orm_item.listing_price,
            purchase_cost=orm_item.purchase_cost,
            allocated_cost=orm_item.allocated_cost,
            listing_date=orm_item.listing_date,
            sale_price=orm_item.sale_price,
            sale_date=orm_item.sale_date,
            platform=SalesPlatform(orm_item.platform) if orm_item.platform is not None else None,
            platform_fee=orm_item.platform_fee,
            shipping_cost=orm_item.shipping_cost,
            sales_channel=orm_item.sales_channel,
        )


class ExpenseRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, expense: Expense) -> Expense:
        linked_pallets: list[models.PalletOrm] = []
        for pallet_id in dict.fromkeys(expense.pallet_ids):
            orm_pallet = self._session.get(models.PalletOrm, pallet_id)
            if orm_pallet is None:
                raise SnapshotError(f"Expense {expense.id} references unknown pallet {pallet_id}")
            linked_pallets.append(orm_pallet)

        orm_expense = models.ExpenseOrm(
            id=expense.id,
            amount=expense.amount,
            category=expense.category.value,
            description=expense.description,
            expense_date=expense.expense_date,
        )
        orm_expense.pallets = linked_pallets

        self._session.add(orm_expense)
        self._session.commit()
        self._session.refresh(orm_expense)
        return self._to_domain(orm_expense)

    def create_many(self, expenses: Iterable[Expense]) -> list[Expense]:
        return [self.create(expense) for expense in expenses]

    def get(self, expense_id: UUID) -> Expense | None:
        orm_expense = self._session.get(models.ExpenseOrm, expense_id)
        if orm_expense is None:
            return None
        return self._to_domain(orm_expense)

    def list(self) -> list[Expense]:
        orm_expenses = (
            self._session.query(models.ExpenseOrm).order_by(models.ExpenseOrm.expense_date.asc()).all()
        )
        return [self._to_domain(expense) for expense in orm_expenses]

    def list_for_pallet(self, pallet_id: UUID) -> list[Expense]:
        orm_expenses = (
            self._session.query(models.ExpenseOrm)
            .filter(models.ExpenseOrm.pallets.any(models.PalletOrm.id == pallet_id))
            .order_by(models.ExpenseOrm.expense_date.asc())
            .all()
        )
        return [self._to_domain(expense) for expense in orm_expenses]

    @staticmethod
    def _to_domain(orm_expense: models.ExpenseOrm) -> Expense:
        return Expense(
            id=ExpenseId(orm_expense.id),
            amount=orm_expense.amount,
            category=ExpenseCategory(orm_expense.category),
            description=orm_expense.description,
            expense_date=orm_expense.expense_date,
            pallet_ids=sorted((PalletId(pallet.id) for pallet in orm_expense.pallets), key=str),
        )


class MileageTripRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, trip: MileageTrip) -> MileageTrip:
        linked_pallets: list[models.PalletOrm] = []
        for pallet_id in dict.fromkeys(trip.pallet_ids):
            orm_pallet = self._session.get(models.PalletOrm, pallet_id)
            if orm_pallet is None:
                raise SnapshotError(f"Mileage trip {trip.id} references unknown pallet {pallet_id}")
            linked_pallets.append(orm_pallet)

        orm_trip = models.MileageTripOrm(
            id=trip.id,
            trip_date=trip.trip_date,
            miles=trip.miles,
            purpose=trip.purpose.value,
            mileage_rate=trip.mileage_rate,
            notes=trip.notes,
        )
        orm_trip.pallets = linked_pallets

        self._session.add(orm_trip)
        self._session.commit()
        self._session.refresh(orm_trip)
        return self._to_domain(orm_trip)

    def create_many(self, trips: Iterable[MileageTrip]) -> list[MileageTrip]:
        return [self.create(trip) for trip in trips]

    def get(self, trip_id: UUID) -> MileageTrip | None:
        orm_trip = self._session.get(models.MileageTripOrm, trip_id)
        if orm_trip is None:
            return None
        return self._to_domain(orm_trip)

    def list(self) -> list[MileageTrip]:
        orm_trips = (
            self._session.query(models.MileageTripOrm).order_by(models.MileageTripOrm.trip_date.asc()).all()
        )
        return [self._to_domain(trip) for trip in orm_trips]

    def list_for_pallet(self, pallet_id: UUID) -> list[MileageTrip]:
        orm_trips = (
            self._session.query(models.MileageTripOrm)
            .filter(models.MileageTripOrm.pallets.any(models.PalletOrm.id == pallet_id))
            .order_by(models.MileageTripOrm.trip_date.asc())
            .all()
        )
        return [self._to_domain(trip) for trip in orm_trips]

    @staticmethod
    def _to_domain(orm_trip: models.MileageTripOrm) -> MileageTrip:
        return MileageTrip(
            id=TripId(orm_trip.id),
            trip_date=orm_trip.trip_date,
            miles=orm_trip.miles,
            purpose=TripPurpose(orm_trip.purpose),
            mileage_rate=orm_trip.mileage_rate,
            notes=orm_trip.notes,
            pallet_ids=sorted((PalletId(pallet.id) for pallet in orm_trip.pallets), key=str),
        )
