import uuid
from dataclasses import dataclass
from typing import Optional, Type, TypeVar

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session, SQLModel

from src.server.settings.config import settings
from src.services.errors import (
    AIServiceUnavailable,
    InvalidInput,
    InvalidTransition,
    QuoteBuilderError,
    QuoteLocked,
)
from src.services.security import TokenError, verify_token

ModelT = TypeVar("ModelT", bound=SQLModel)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    user_id: uuid.UUID
    organization_id: uuid.UUID
    email: str
    role: str


# ==============================
# AUTH
# ==============================

def _user_from_token(token: str) -> CurrentUser:
    try:
        claims = verify_token(token, secret=settings.token_secret)
        return CurrentUser(
            user_id=uuid.UUID(claims.user_id),
            organization_id=uuid.UUID(claims.organization_id),
            email=claims.email,
            role=claims.role,
        )
    except (TokenError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid or expired token")


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Authentication required")
    return _user_from_token(credentials.credentials)


def optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[CurrentUser]:
    """Like require_auth, but anonymous callers get None instead of a 401."""
    if credentials is None or not credentials.credentials:
        return None
    return _user_from_token(credentials.credentials)


# ==============================
# HELPERS
# ==============================

def get_owned(
    session: Session,
    model: Type[ModelT],
    row_id: uuid.UUID,
    user: CurrentUser,
    label: str,
) -> ModelT:
    """Row by id, 404 unless it belongs to the caller's organization."""
    row = session.get(model, row_id)
    if row is None or getattr(row, "organization_id", None) != user.organization_id:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row


def http_error(error: QuoteBuilderError) -> HTTPException:
    """Maps a domain error to the HTTP response the routers return."""
    if isinstance(error, InvalidInput):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, (InvalidTransition, QuoteLocked)):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, AIServiceUnavailable):
        return HTTPException(status_code=503, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
