from typing import Optional

from src.server.schemas.common import CamelIn


class CustomerIn(CamelIn):
    name: Optional[str] = None
    type: Optional[str] = None
    region_id: Optional[str] = None
    address: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    notes: Optional[str] = None
