from typing import Any, Dict, List, Optional
import uuid

from src.server.schemas.common import CamelIn


class ChatIn(CamelIn):
    message: Optional[str] = None
    context: Optional[Dict[str, Any]] = None
    quote_id: Optional[uuid.UUID] = None     # load the quote from the caller's organization


class AnalyzeQuoteIn(CamelIn):
    quote: Optional[Dict[str, Any]] = None
    settings: Optional[Dict[str, Any]] = None


class SuggestMarginIn(CamelIn):
    customer_type: Optional[str] = None
    total_cases: Optional[float] = None
    total_value: Optional[float] = None
    products: Optional[List[Any]] = None
