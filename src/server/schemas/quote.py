import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from src.server.schemas.common import CamelIn

QuoteStatusName = Literal["draft", "sent", "accepted", "rejected", "expired"]


class QuoteItemIn(CamelIn):
    """
    One line as sent by the frontend.

    Only product, cases and (optionally) margin are taken from the client;
    unit cost, freight and line total are always priced on the server.
    """
    product_id: uuid.UUID
    cases: int
    margin_percent: Optional[float] = None   # None -> customer-type default
    notes: Optional[str] = None


class QuoteIn(CamelIn):
    customer_id: Optional[uuid.UUID] = None
    distance: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    expires_at: Optional[datetime] = None
    items: Optional[List[QuoteItemIn]] = None


class QuotePriceIn(CamelIn):
    """Payload for /api/quotes/price: price lines without saving anything."""
    customer_id: Optional[uuid.UUID] = None
    customer_type: Optional[str] = None
    distance: Optional[float] = Field(default=None, ge=0)
    items: List[QuoteItemIn]


class QuoteStatusIn(CamelIn):
    status: QuoteStatusName
