from typing import List, Literal, Optional

from pydantic import Field

from src.server.schemas.common import CamelIn


class ProductIn(CamelIn):
    name: Optional[str] = None
    unit_type: Optional[str] = None
    cases_per_pallet: Optional[int] = Field(default=None, gt=0)
    cost_per_case: Optional[float] = Field(default=None, ge=0)
    weight: Optional[float] = None
    farm: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    bipoc: Optional[bool] = None
    gap_certified: Optional[bool] = None
    available: Optional[bool] = None
    notes: Optional[str] = None


class ProductImportIn(CamelIn):
    """
    Payload for /api/products/import.

    mode:
      - "merge":   rows matching an existing name + farm are updated, the rest inserted
      - "replace": the organization's catalog is deleted first
    """
    products: List[ProductIn]
    mode: Literal["merge", "replace"] = "merge"
