import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from src.server.models.common import utcnow


class PricingSettingsRecord(SQLModel, table=True):
    """Raw settings document per organization (validated on read/write by the services)."""

    __tablename__ = "pricing_settings"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    organization_id: uuid.UUID = Field(foreign_key="organizations.id", unique=True)
    settings: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
