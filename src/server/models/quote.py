import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from src.server.models.common import utcnow


class Quote(SQLModel, table=True):
    __tablename__ = "quotes"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    organization_id: uuid.UUID = Field(foreign_key="organizations.id", index=True)
    customer_id: Optional[uuid.UUID] = Field(default=None, foreign_key="customers.id", index=True)
    distance: Optional[float] = None    # delivery miles
    status: str = "draft"               # draft | sent | accepted | rejected | expired
    notes: Optional[str] = None
    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    sent_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class QuoteItem(SQLModel, table=True):
    """
    One quote line. unit_cost, freight_cost and line_total are a snapshot
    taken when the line was priced; later product edits do not touch them.
    """

    __tablename__ = "quote_items"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    quote_id: uuid.UUID = Field(foreign_key="quotes.id", index=True)
    product_id: uuid.UUID = Field(foreign_key="products.id", index=True)
    position: int = 0
    cases: int = 1
    margin_percent: float = 20.0
    margin_override: bool = False      # margin set on the line, not taken from the customer type
    unit_cost: float = 0.0
    freight_cost: float = 0.0
    line_total: float = 0.0
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
