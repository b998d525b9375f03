from __future__ import annotations

import argparse
import logging
from decimal import Decimal
from pathlib import Path
from typing import Sequence

from config import config
from db.db import init_db
from db.repositories import ExpenseRepository, ItemRepository, MileageTripRepository, PalletRepository
from domain.analytics import calculate_hero_metrics, calculate_profit_loss
from importers.snapshot_loader import SnapshotLoader
from utils.pallet_summary import compute_pallet_summaries, render_pallet_summaries
from utils.profit_loss_summary import render_hero_metrics, render_profit_loss

logger = logging.getLogger(__name__)


def run(
    snapshot_dir: Path,
    db_path: Path,
    *,
    include_unsellable: bool,
    stale_threshold_days: int,
    mileage_rate: Decimal,
) -> None:
    # Setup components
    session = init_db(db_path, reset=True)
    pallet_repository = PalletRepository(session)
    item_repository = ItemRepository(session)
    expense_repository = ExpenseRepository(session)
    trip_repository = MileageTripRepository(session)

    # Get data
    snapshot = SnapshotLoader(snapshot_dir, default_mileage_rate=mileage_rate).load()
    pallet_repository.create_many(snapshot.pallets)
    item_repository.create_many(snapshot.items)
    expense_repository.create_many(snapshot.expenses)
    trip_repository.create_many(snapshot.mileage_trips)
    logger.info("Stored snapshot in %s", db_path)

    pallets = pallet_repository.list()
    items = item_repository.list()
    expenses = expense_repository.list()
    trips = trip_repository.list()

    # Print summary
    print(
        f"Loaded {len(pallets)} pallets, {len(items)} items, {len(expenses)} expenses, "
        f"{len(trips)} mileage trips from {snapshot_dir}"
    )
    summaries = compute_pallet_summaries(
        pallets,
        items,
        expenses,
        include_unsellable=include_unsellable,
        stale_threshold_days=stale_threshold_days,
    )
    render_pallet_summaries(summaries)
    print()
    render_hero_metrics(calculate_hero_metrics(pallets, items, expenses))
    print()
    render_profit_loss(calculate_profit_loss(items, pallets, expenses, trips, include_unsellable=include_unsellable))


def main(argv: Sequence[str] | None = None) -> None:
    settings = config()
    parser = argparse.ArgumentParser(description="Load a PalletPulse CSV snapshot and print profit reports.")
    parser.add_argument("--snapshot-dir", type=Path, default=Path("data"))
    parser.add_argument("--db", type=Path, default=settings.database_path)
    parser.add_argument(
        "--include-unsellable",
        action=argparse.BooleanOptionalAction,
        default=settings.include_unsellable_in_cost,
        help="Share pallet cost with unsellable items too.",
    )
    parser.add_argument("--stale-days", type=int, default=settings.stale_threshold_days)
    parser.add_argument(
        "--mileage-rate",
        type=Decimal,
        default=settings.irs_mileage_rate,
        help="Rate per mile for trips that do not record one.",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    run(
        args.snapshot_dir,
        args.db,
        include_unsellable=args.include_unsellable,
        stale_threshold_days=args.stale_days,
        mileage_rate=args.mileage_rate,
    )


if __name__ == "__main__":
    main()
