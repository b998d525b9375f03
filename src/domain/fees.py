from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, model_validator

from .models import SalesPlatform

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

PLATFORM_NAMES: dict[SalesPlatform, str] = {
    SalesPlatform.EBAY: "eBay",
    SalesPlatform.POSHMARK: "Poshmark",
    SalesPlatform.MERCARI: "Mercari",
    SalesPlatform.WHATNOT: "Whatnot",
    SalesPlatform.FACEBOOK: "Facebook Marketplace",
    SalesPlatform.OFFERUP: "OfferUp",
    SalesPlatform.LETGO: "LetGo",
    SalesPlatform.CRAIGSLIST: "Craigslist",
    SalesPlatform.OTHER: "Other",
}

# Fee is entered by the user for these.
MANUAL_PLATFORMS: frozenset[SalesPlatform] = frozenset({SalesPlatform.OTHER})


class FeeSchedule(BaseModel):
    """Marketplace fee rates in percent of the sale price.

    Local-pickup marketplaces charge nothing for in-person sales and a
    separate rate when the item is shipped.
    """

    ebay: Decimal = Decimal("13.25")
    poshmark: Decimal = Decimal("20")
    mercari: Decimal = Decimal("10")
    whatnot: Decimal = Decimal("10")
    craigslist: Decimal = Decimal("0")
    facebook_local: Decimal = Decimal("0")
    facebook_shipped: Decimal = Decimal("5")
    offerup_local: Decimal = Decimal("0")
    offerup_shipped: Decimal = Decimal("12.9")

    @model_validator(mode="after")
    def _validate_rates(self) -> FeeSchedule:
        for name, rate in self:
            if rate < 0 or rate > HUNDRED:
                raise ValueError(f"{name} must be between 0 and 100 percent")
        return self

    def has_shipped_rate(self, platform: SalesPlatform) -> bool:
        return platform in (SalesPlatform.FACEBOOK, SalesPlatform.OFFERUP, SalesPlatform.LETGO)

    def is_manual(self, platform: SalesPlatform) -> bool:
        return platform in MANUAL_PLATFORMS

    def rate_for(self, platform: SalesPlatform, *, shipped: bool = False) -> Decimal:
        if platform == SalesPlatform.FACEBOOK:
            return self.facebook_shipped if shipped else self.facebook_local
        # LetGo merged into OfferUp and shares its rates.
        if platform in (SalesPlatform.OFFERUP, SalesPlatform.LETGO):
            return self.offerup_shipped if shipped else self.offerup_local
        flat_rates = {
            SalesPlatform.EBAY: self.ebay,
            SalesPlatform.POSHMARK: self.poshmark,
            SalesPlatform.MERCARI: self.mercari,
            SalesPlatform.WHATNOT: self.whatnot,
            SalesPlatform.CRAIGSLIST: self.craigslist,
        }
        return flat_rates.get(platform, Decimal("0"))


DEFAULT_FEE_SCHEDULE = FeeSchedule()


def round_to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_platform_fee(
    sale_price: Decimal,
    platform: SalesPlatform | None,
    *,
    shipped: bool = False,
    schedule: FeeSchedule | None = None,
) -> Decimal:
    """Auto-computed marketplace fee, rounded to the cent.

    Manual platforms return zero so the caller can use a user-entered fee.
    """
    if platform is None or sale_price <= 0:
        return ZERO
    schedule = schedule or DEFAULT_FEE_SCHEDULE
    if schedule.is_manual(platform):
        return ZERO
    rate = schedule.rate_for(platform, shipped=shipped)
    return round_to_cents(sale_price * rate / HUNDRED)


def calculate_mileage_deduction(miles: Decimal, rate: Decimal) -> Decimal:
    if miles <= 0:
        return ZERO
    return round_to_cents(miles * rate)


def platform_display_name(platform: SalesPlatform | None) -> str:
    if platform is None:
        return "Not specified"
    return PLATFORM_NAMES[platform]
