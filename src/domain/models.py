from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class DealType(str, Enum):
    SALE = "sale"
    BOGO = "bogo"
    MULTI_BUY = "multi_buy"
    COUPON = "coupon"
    CLEARANCE = "clearance"

    @classmethod
    def parse(cls, raw: str | None) -> "DealType":
        # Unknown or missing flyer labels fall back to a plain sale.
        try:
            return cls((raw or "sale").strip().lower())
        except ValueError:
            return cls.SALE


def is_finite_price(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


@dataclass(frozen=True)
class ListItem:
    id: str
    shopper_id: str
    item_name: str
    item_variant: str | None = None
    quantity: int = 1
    checked: bool = False
    category: str | None = None

    @property
    def display_name(self) -> str:
        if self.item_variant and self.item_variant.strip():
            return f"{self.item_name} ({self.item_variant})"
        return self.item_name


@dataclass(frozen=True)
class Deal:
    id: str
    store_name: str
    product_name: str
    sale_price: float
    valid_from: date | datetime
    valid_to: date | datetime
    zip_code: str = ""
    product_brand: str | None = None
    product_category: str | None = None
    regular_price: float | None = None
    deal_type: DealType = DealType.SALE
    unit: str = "each"
    quantity_text: str | None = None
    confidence: float | None = None

    @property
    def known_regular_price(self) -> float | None:
        # Non-finite flyer prices count as unknown.
        if not is_finite_price(self.regular_price):
            return None
        return self.regular_price

    @property
    def savings(self) -> float | None:
        regular = self.known_regular_price
        if regular is None or regular < self.sale_price:
            return None
        return round(regular - self.sale_price, 2)

    @property
    def savings_percent(self) -> int | None:
        regular = self.known_regular_price
        if self.savings is None or not regular:
            return None
        return round(self.savings / regular * 100)


@dataclass(frozen=True)
class MatchResult:
    list_item: ListItem
    deal: Deal
    match_score: float
    match_reason: str
