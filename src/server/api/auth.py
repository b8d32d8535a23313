from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from src.server.api.deps import CurrentUser, require_auth
from src.server.db.session import get_session
from src.server.models import Organization, PricingSettingsRecord, User
from src.server.schemas.auth import LoginIn, RegisterIn
from src.server.settings.config import settings
from src.services.pricing_settings import DEFAULT_SETTINGS_DOCUMENT
from src.services.security import hash_password, issue_token, verify_password

router = APIRouter(prefix="/api/auth", tags=["auth"])

MIN_PASSWORD_LENGTH = 8


def _token_for(user_id, organization_id, email: str, role: str) -> str:
    return issue_token(
        user_id=user_id,
        organization_id=organization_id,
        email=email,
        role=role,
        secret=settings.token_secret,
        ttl_seconds=settings.token_ttl_seconds,
    )


def _public_user(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
    }


@router.post("/register", status_code=201)
def register(payload: RegisterIn, session: Session = Depends(get_session)):
    """Creates an organization, its admin user and default pricing settings."""
    if not payload.email or not payload.password or not payload.name:
        raise HTTPException(status_code=400, detail="Email, password, and name are required")

    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    email = payload.email.strip().lower()
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise HTTPException(status_code=409, detail="Email already registered")

    org = Organization(name=payload.organization_name or f"{payload.name}'s Organization")
    session.add(org)
    session.flush()

    user = User(
        organization_id=org.id,
        email=email,
        password_hash=hash_password(payload.password, iterations=settings.password_iterations),
        name=payload.name,
        role="admin",
    )
    session.add(user)
    session.add(
        PricingSettingsRecord(organization_id=org.id, settings=dict(DEFAULT_SETTINGS_DOCUMENT))
    )
    session.commit()
    session.refresh(user)

    return {
        "user": _public_user(user),
        "token": _token_for(user.id, user.organization_id, user.email, user.role),
    }


@router.post("/login")
def login(payload: LoginIn, session: Session = Depends(get_session)):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = session.exec(select(User).where(User.email == payload.email.strip().lower())).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return {
        "user": _public_user(user),
        "token": _token_for(user.id, user.organization_id, user.email, user.role),
    }


@router.get("/me")
def me(
    current: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    row = session.exec(
        select(User, Organization)
        .join(Organization, User.organization_id == Organization.id)
        .where(User.id == current.user_id)
    ).first()
    if not row:
        raise HTTPException(status_code=404, detail="User not found")

    user, org = row
    data = _public_user(user)
    data["organization_id"] = str(org.id)
    data["organization_name"] = org.name
    return {"user": data}


@router.post("/refresh")
def refresh(current: CurrentUser = Depends(require_auth)):
    return {
        "token": _token_for(current.user_id, current.organization_id, current.email, current.role)
    }
