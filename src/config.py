from __future__ import annotations

from decimal import Decimal
from functools import cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.fees import FeeSchedule


class AppSettings(BaseSettings):
    database_path: Path = Path("palletpulse.db")
    include_unsellable_in_cost: bool = False
    stale_threshold_days: int = 30
    irs_mileage_rate: Decimal = Decimal("0.725")

    platform_fee_ebay: Decimal = Decimal("13.25")
    platform_fee_poshmark: Decimal = Decimal("20")
    platform_fee_mercari: Decimal = Decimal("10")
    platform_fee_whatnot: Decimal = Decimal("10")
    platform_fee_facebook: Decimal = Decimal("5")
    platform_fee_offerup: Decimal = Decimal("12.9")

    model_config = SettingsConfigDict(
        env_prefix="PALLETPULSE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    def fee_schedule(self) -> FeeSchedule:
        # Facebook and OfferUp settings are the shipped rates; local pickup is free.
        return FeeSchedule(
            ebay=self.platform_fee_ebay,
            poshmark=self.platform_fee_poshmark,
            mercari=self.platform_fee_mercari,
            whatnot=self.platform_fee_whatnot,
            facebook_shipped=self.platform_fee_facebook,
            offerup_shipped=self.platform_fee_offerup,
        )


@cache
def config() -> AppSettings:
    return AppSettings()
