import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from src.server.models.common import utcnow


class Customer(SQLModel, table=True):
    __tablename__ = "customers"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    organization_id: uuid.UUID = Field(foreign_key="organizations.id", index=True)
    name: str
    type: Optional[str] = None        # "Food Bank", "School District", "Corporate", ...
    region_id: Optional[str] = None   # id of a region in the pricing settings
    address: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
