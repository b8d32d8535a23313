import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from src.server.api.deps import CurrentUser, get_owned, http_error, require_auth
from src.server.db.session import get_session
from src.server.models import Quote
from src.server.schemas.quote import QuoteIn, QuotePriceIn, QuoteStatusIn
from src.services import quote_service
from src.services.errors import QuoteBuilderError
from src.services.quote_summary import summarize

router = APIRouter(prefix="/api/quotes", tags=["quotes"])


# ==============================
# LIST / GET
# ==============================

@router.get("")
def list_quotes(
    status: Optional[str] = None,
    customer_id: Optional[uuid.UUID] = Query(default=None, alias="customerId"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    quotes = quote_service.list_quotes(
        session=session,
        organization_id=user.organization_id,
        status=status,
        customer_id=customer_id,
        limit=limit,
        offset=offset,
    )
    return {"quotes": quotes}


@router.get("/{quote_id}")
def get_quote(
    quote_id: uuid.UUID,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    quote = get_owned(session, Quote, quote_id, user, "Quote")
    return {"quote": quote_service.quote_detail(session, quote)}


@router.get("/{quote_id}/summary")
def get_quote_summary(
    quote_id: uuid.UUID,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    quote = get_owned(session, Quote, quote_id, user, "Quote")
    summary = summarize(quote_service.quote_items(session, quote.id))
    data = summary.as_dict()
    data["total_value"] = round(summary.total_value, 2)
    return {"summary": data}


# ==============================
# PRICE (preview, nothing saved)
# ==============================

@router.post("/price", summary="Price quote lines without saving")
def price_quote(
    payload: QuotePriceIn,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    try:
        return quote_service.preview_quote(
            session=session,
            organization_id=user.organization_id,
            items=payload.items,
            customer_id=payload.customer_id,
            customer_type=payload.customer_type,
            distance=payload.distance,
        )
    except QuoteBuilderError as e:
        raise http_error(e)


# ==============================
# CREATE / UPDATE
# ==============================

@router.post("", status_code=201)
def create_quote(
    payload: QuoteIn,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    try:
        quote = quote_service.create_quote(
            payload=payload,
            session=session,
            organization_id=user.organization_id,
            user_id=user.user_id,
        )
    except QuoteBuilderError as e:
        raise http_error(e)
    return {"quote": quote_service.quote_detail(session, quote)}


@router.put("/{quote_id}")
def update_quote(
    quote_id: uuid.UUID,
    payload: QuoteIn,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    quote = get_owned(session, Quote, quote_id, user, "Quote")
    try:
        quote = quote_service.update_quote(quote=quote, payload=payload, session=session)
    except QuoteBuilderError as e:
        raise http_error(e)
    return {"success": True, "quote": quote_service.quote_detail(session, quote)}


# ==============================
# STATUS
# ==============================

@router.post("/{quote_id}/finalize")
def finalize_quote(
    quote_id: uuid.UUID,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    quote = get_owned(session, Quote, quote_id, user, "Quote")
    try:
        quote = quote_service.finalize_quote(quote=quote, session=session)
    except QuoteBuilderError as e:
        raise http_error(e)
    return {"quote": quote_service.quote_detail(session, quote)}


@router.post("/{quote_id}/status")
def set_quote_status(
    quote_id: uuid.UUID,
    payload: QuoteStatusIn,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    quote = get_owned(session, Quote, quote_id, user, "Quote")
    try:
        quote = quote_service.change_status(quote=quote, target=payload.status, session=session)
    except QuoteBuilderError as e:
        raise http_error(e)
    return {"quote": quote_service.quote_detail(session, quote)}


@router.delete("/{quote_id}")
def delete_quote(
    quote_id: uuid.UUID,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    quote = get_owned(session, Quote, quote_id, user, "Quote")
    quote_service.delete_quote(quote=quote, session=session)
    return {"success": True}
