from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum


def format_currency(value: Decimal) -> str:
    cents = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if cents < 0:
        return f"-${-cents:,.2f}"
    # -0.00 prints as $0.00.
    return f"${abs(cents):,.2f}"


def format_roi(roi: Decimal) -> str:
    sign = "+" if roi >= 0 else ""
    return f"{sign}{roi.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}%"


class RoiTone(StrEnum):
    STRONG_POSITIVE = "strong_positive"
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    SLIGHT_LOSS = "slight_loss"
    SIGNIFICANT_LOSS = "significant_loss"


ROI_COLORS: dict[RoiTone, str] = {
    RoiTone.STRONG_POSITIVE: "#2E7D32",
    RoiTone.POSITIVE: "#4CAF50",
    RoiTone.NEUTRAL: "#9E9E9E",
    RoiTone.SLIGHT_LOSS: "#FFA000",
    RoiTone.SIGNIFICANT_LOSS: "#D32F2F",
}

STRONG_ROI_THRESHOLD = Decimal("20")


def roi_tone(roi: Decimal, *, realized: bool = True) -> RoiTone:
    # Unrealized figures are shown neutral until the pallet is completed.
    if not realized:
        return RoiTone.NEUTRAL
    if roi > STRONG_ROI_THRESHOLD:
        return RoiTone.STRONG_POSITIVE
    if roi > 0:
        return RoiTone.POSITIVE
    if roi == 0:
        return RoiTone.NEUTRAL
    if roi > -STRONG_ROI_THRESHOLD:
        return RoiTone.SLIGHT_LOSS
    return RoiTone.SIGNIFICANT_LOSS


def roi_color(roi: Decimal, *, realized: bool = True) -> str:
    return ROI_COLORS[roi_tone(roi, realized=realized)]


@dataclass(frozen=True)
class FormattedProfit:
    value: str
    color: str
    is_positive: bool


def format_profit(amount: Decimal, *, realized: bool = True) -> FormattedProfit:
    is_positive = amount >= 0
    if not realized:
        color = ROI_COLORS[RoiTone.NEUTRAL]
    elif is_positive:
        color = ROI_COLORS[RoiTone.STRONG_POSITIVE]
    else:
        color = ROI_COLORS[RoiTone.SIGNIFICANT_LOSS]
    return FormattedProfit(value=format_currency(amount), color=color, is_positive=is_positive)
