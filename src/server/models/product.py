import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from src.server.models.common import utcnow


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    organization_id: uuid.UUID = Field(foreign_key="organizations.id", index=True)
    name: str
    unit_type: Optional[str] = None     # e.g. "125ct", "40 lb", "10-3lb"
    cases_per_pallet: int = 1
    cost_per_case: float                # vendor cost
    weight: Optional[float] = None      # lbs per case
    farm: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None      # "Fruits", "Vegetables", "Specialty"
    bipoc: bool = False
    gap_certified: bool = False
    available: bool = True
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
