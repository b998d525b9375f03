"""Domain models and calculators for pallet reselling profit.

This package holds the in-memory (Pydantic) models for pallets, items,
expenses and mileage trips together with the pure functions that derive cost
allocation, profit, ROI and business-wide analytics from them. Nothing here
touches persistence, so callers pass snapshots in explicitly.
"""

__all__ = [
    "aging",
    "allocation",
    "analytics",
    "expenses",
    "fees",
    "models",
    "profit",
]
