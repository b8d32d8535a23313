from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from src.services.errors import InvalidInput


class _CamelModel(BaseModel):
    # Settings are stored and exchanged with camelCase keys (baseFreightRate ...)
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class VolumeTier(_CamelModel):
    min_cases: int = Field(alias="minCases", ge=0)
    max_cases: Optional[int] = Field(default=None, alias="maxCases")
    discount: float = Field(ge=0, le=100)

    @model_validator(mode="after")
    def _check_bounds(self) -> "VolumeTier":
        if self.max_cases is not None and self.min_cases > self.max_cases:
            raise ValueError(
                f"Volume tier {self.min_cases}-{self.max_cases}: minCases must be <= maxCases"
            )
        return self

    def matches(self, cases: int) -> bool:
        if cases < self.min_cases:
            return False
        return self.max_cases is None or cases <= self.max_cases


class Region(_CamelModel):
    id: str
    name: str
    distance: float = Field(ge=0)


class PricingSettings(_CamelModel):
    """
    Per-organization pricing configuration.

    Units:
      - baseFreightRate: currency per pallet
      - perMileRate:     currency per mile per pallet
      - minFreight:      currency floor per line
      - palletBreakSurcharge, margins, tier discounts: percent (0-100, not fractions)
    """

    base_freight_rate: float = Field(alias="baseFreightRate", ge=0)
    per_mile_rate: float = Field(alias="perMileRate", ge=0)
    pallet_break_surcharge: float = Field(alias="palletBreakSurcharge", ge=0, le=100)
    min_freight: float = Field(default=0.0, alias="minFreight", ge=0)

    margin_food_bank: float = Field(default=20.0, alias="marginFoodBank", ge=0, le=100)
    margin_school: float = Field(default=15.0, alias="marginSchool", ge=0, le=100)
    margin_corporate: float = Field(default=25.0, alias="marginCorporate", ge=0, le=100)
    default_margin: float = Field(default=20.0, alias="defaultMargin", ge=0, le=100)

    volume_tiers: List[VolumeTier] = Field(alias="volumeTiers", min_length=1)
    regions: List[Region] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_tier_coverage(self) -> "PricingSettings":
        tiers = self.volume_tiers
        if tiers[0].min_cases != 0:
            raise ValueError("Volume tiers must start at 0 cases")

        for prev, nxt in zip(tiers, tiers[1:]):
            if prev.max_cases is None:
                raise ValueError("Only the last volume tier may omit maxCases")
            if nxt.min_cases != prev.max_cases + 1:
                raise ValueError(
                    f"Volume tiers must be contiguous: {prev.min_cases}-{prev.max_cases} "
                    f"is followed by {nxt.min_cases}-{nxt.max_cases}"
                )

        region_ids = [r.id for r in self.regions]
        if len(region_ids) != len(set(region_ids)):
            raise ValueError("Region ids must be unique")
        return self

    # -------------------------------------------------------------
    #  Lookups
    # -------------------------------------------------------------
    def margin_for(self, customer_type: Optional[str]) -> float:
        """
        Default margin for a customer type.

        Food Bank / School (District) / Corporate map to their own setting,
        anything else gets defaultMargin.
        """
        key = (customer_type or "").strip().lower()
        if key == "food bank":
            return self.margin_food_bank
        if key in ("school", "school district"):
            return self.margin_school
        if key == "corporate":
            return self.margin_corporate
        return self.default_margin

    def tier_for(self, cases: int) -> VolumeTier:
        """First tier (declaration order) whose inclusive range holds `cases`."""
        for tier in self.volume_tiers:
            if tier.matches(cases):
                return tier
        # Above the last declared maxCases: the top tier keeps applying.
        return self.volume_tiers[-1]

    def region_distance(self, region_id: Optional[str]) -> Optional[float]:
        if not region_id:
            return None
        for region in self.regions:
            if region.id == region_id:
                return region.distance
        return None

    def to_document(self) -> Dict[str, Any]:
        """JSON document with the stored camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


def parse_settings(data: Any) -> PricingSettings:
    """
    Validate a raw settings document (as stored in pricing_settings.settings
    or sent to PUT /api/settings) into a PricingSettings value.

    Raises InvalidInput with a readable message on any problem.
    """
    if not isinstance(data, dict):
        raise InvalidInput("Settings must be a JSON object")
    try:
        return PricingSettings.model_validate(data)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            msg = err.get("msg", "invalid value")
            problems.append(f"{loc}: {msg}" if loc else msg)
        raise InvalidInput("; ".join(problems)) from e


DEFAULT_SETTINGS_DOCUMENT: Dict[str, Any] = {
    "baseFreightRate": 125,
    "perMileRate": 0.85,
    "palletBreakSurcharge": 15,
    "minFreight": 75,
    "marginFoodBank": 20,
    "marginSchool": 15,
    "marginCorporate": 25,
    "defaultMargin": 20,
    "volumeTiers": [
        {"minCases": 0, "maxCases": 50, "discount": 0},
        {"minCases": 51, "maxCases": 150, "discount": 8},
        {"minCases": 151, "maxCases": 300, "discount": 15},
        {"minCases": 301, "maxCases": None, "discount": 22},
    ],
    "regions": [
        {"id": "east-bay", "name": "East Bay", "distance": 25},
        {"id": "sf", "name": "San Francisco", "distance": 40},
        {"id": "south-bay", "name": "South Bay", "distance": 55},
        {"id": "central-coast", "name": "Central Coast", "distance": 120},
        {"id": "sacramento", "name": "Sacramento", "distance": 85},
        {"id": "central-valley", "name": "Central Valley", "distance": 150},
        {"id": "socal", "name": "Southern California", "distance": 400},
    ],
}

DEFAULT_SETTINGS = parse_settings(DEFAULT_SETTINGS_DOCUMENT)
