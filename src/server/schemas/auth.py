from typing import Optional

from src.server.schemas.common import CamelIn


class RegisterIn(CamelIn):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    organization_name: Optional[str] = None


class LoginIn(CamelIn):
    email: Optional[str] = None
    password: Optional[str] = None
