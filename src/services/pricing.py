"""
Line pricing for quotes.

Basic idea:
- Freight is charged per pallet: baseFreightRate + perMileRate * distance.
- A line occupies ceil(cases / casesPerPallet) pallets.
- An order smaller than one pallet breaks a pallet and pays palletBreakSurcharge
  percent extra on that fractional pallet's share of freight.
- The volume tier matching the case count discounts the freight only.
- Freight never drops below minFreight for a line.
- The product side is cost-plus-margin: costPerCase * (1 + margin/100) per case.

Everything here is a pure function of its arguments. Nothing is rounded until
LinePrice.rounded() is called right before the values are stored.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Optional

from src.services.errors import InvalidInput
from src.services.pricing_settings import PricingSettings


@dataclass(frozen=True)
class LinePrice:
    unit_cost: float              # vendor cost per case
    margin_percent: float
    sale_price_per_case: float
    pallets: int
    freight_before_discount: float
    volume_discount_percent: float
    freight_cost: float           # after discount and floor
    line_total: float

    @property
    def product_total(self) -> float:
        return self.line_total - self.freight_cost

    def rounded(self) -> "LinePrice":
        """Monetary values rounded to cents, for persistence."""
        return replace(
            self,
            unit_cost=round(self.unit_cost, 2),
            sale_price_per_case=round(self.sale_price_per_case, 2),
            freight_before_discount=round(self.freight_before_discount, 2),
            freight_cost=round(self.freight_cost, 2),
            line_total=round(self.line_total, 2),
        )


def _require_cases(cases: Any) -> int:
    if isinstance(cases, bool) or not isinstance(cases, numbers.Integral):
        raise InvalidInput(f"cases must be a whole number, got {cases!r}")
    if cases <= 0:
        raise InvalidInput(f"cases must be greater than 0, got {cases}")
    return int(cases)


def _require_non_negative(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        raise InvalidInput(f"{name} must be a number, got {value!r}")
    value_f = float(value)
    if math.isnan(value_f) or value_f < 0:
        raise InvalidInput(f"{name} must be a non-negative number, got {value!r}")
    return value_f


def freight_for(cases: int, cases_per_pallet: int, distance: float, settings: PricingSettings) -> tuple:
    """
    Freight for one line.

    Returns (pallets, freight_before_discount, discount_percent, freight_total).
    """
    per_pallet = settings.base_freight_rate + settings.per_mile_rate * distance
    pallets = math.ceil(cases / cases_per_pallet)
    freight = pallets * per_pallet

    if cases < cases_per_pallet:
        share = cases / cases_per_pallet
        freight += per_pallet * share * settings.pallet_break_surcharge / 100

    discount = settings.tier_for(cases).discount
    discounted = freight * (1 - discount / 100)
    return pallets, freight, discount, max(discounted, settings.min_freight)


def price_line(
    product: Any,
    cases: Any,
    customer_type: Optional[str],
    distance: Any,
    settings: PricingSettings,
    margin_percent: Optional[float] = None,
) -> LinePrice:
    """
    Price one quote line.

    product:        anything with cost_per_case and cases_per_pallet
                    (a Product row or a plain object)
    customer_type:  used for the default margin when margin_percent is None
    distance:       delivery miles for the quote

    Raises InvalidInput for a non-positive or fractional case count, negative
    distance/cost, an empty pallet size, or a margin outside 0-100.
    """
    cases_i = _require_cases(cases)
    distance_f = _require_non_negative("distance", distance)
    unit_cost = _require_non_negative("cost_per_case", getattr(product, "cost_per_case", None))

    cases_per_pallet = getattr(product, "cases_per_pallet", None)
    if isinstance(cases_per_pallet, bool) or not isinstance(cases_per_pallet, numbers.Integral) \
            or cases_per_pallet <= 0:
        raise InvalidInput(f"cases_per_pallet must be a positive whole number, got {cases_per_pallet!r}")

    if margin_percent is None:
        margin = settings.margin_for(customer_type)
    else:
        margin = _require_non_negative("margin_percent", margin_percent)
        if margin > 100:
            raise InvalidInput(f"margin_percent must be between 0 and 100, got {margin_percent!r}")

    pallets, freight_raw, discount, freight_total = freight_for(
        cases_i, int(cases_per_pallet), distance_f, settings
    )

    sale_price = unit_cost * (1 + margin / 100)

    return LinePrice(
        unit_cost=unit_cost,
        margin_percent=margin,
        sale_price_per_case=sale_price,
        pallets=pallets,
        freight_before_discount=freight_raw,
        volume_discount_percent=discount,
        freight_cost=freight_total,
        line_total=sale_price * cases_i + freight_total,
    )
