from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from src.server.api.deps import CurrentUser, http_error, require_auth
from src.server.db.session import get_session
from src.server.schemas.settings import SettingsIn
from src.services.errors import InvalidInput
from src.services.org_settings import reset_settings, save_settings, settings_for

router = APIRouter(prefix="/api/settings", tags=["settings"])


def _current(session: Session, user: CurrentUser):
    try:
        return settings_for(session, user.organization_id)
    except InvalidInput as e:
        raise http_error(e)


@router.get("")
def get_settings(
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """Organization settings, or the defaults when none are stored yet."""
    return {"settings": _current(session, user).to_document()}


@router.put("")
def update_settings(
    payload: SettingsIn,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    if payload.settings is None:
        raise HTTPException(status_code=400, detail="Settings object is required")
    try:
        saved = save_settings(session, user.organization_id, payload.settings)
    except InvalidInput as e:
        raise http_error(e)
    return {"success": True, "settings": saved.to_document()}


@router.get("/regions")
def get_regions(
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    return {"regions": _current(session, user).to_document()["regions"]}


@router.get("/volume-tiers")
def get_volume_tiers(
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    return {"volumeTiers": _current(session, user).to_document()["volumeTiers"]}


@router.post("/reset")
def reset(
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    saved = reset_settings(session, user.organization_id)
    return {"success": True, "settings": saved.to_document()}
