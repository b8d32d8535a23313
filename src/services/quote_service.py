from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from src.server.models import Customer, Product, Quote, QuoteItem
from src.server.models.common import utcnow
from src.server.schemas.quote import QuoteIn, QuoteItemIn
from src.services.errors import InvalidInput, InvalidTransition, QuoteLocked
from src.services.org_settings import settings_for
from src.services.pricing import LinePrice, price_line
from src.services.pricing_settings import PricingSettings
from src.services.quote_summary import summarize

# ==============================
# STATUS
# ==============================

DRAFT = "draft"
SENT = "sent"
ACCEPTED = "accepted"
REJECTED = "rejected"
EXPIRED = "expired"

STATUSES = (DRAFT, SENT, ACCEPTED, REJECTED, EXPIRED)

# Forward-only; accepted, rejected and expired are terminal.
ALLOWED_TRANSITIONS: Dict[str, Tuple[str, ...]] = {
    DRAFT: (SENT, REJECTED, EXPIRED),
    SENT: (ACCEPTED, REJECTED, EXPIRED),
    ACCEPTED: (),
    REJECTED: (),
    EXPIRED: (),
}


def check_transition(current: str, target: str) -> None:
    if target not in STATUSES:
        raise InvalidInput(f"Unknown quote status '{target}'")
    if target not in ALLOWED_TRANSITIONS.get(current, ()):
        raise InvalidTransition(current, target)


# ==============================
# PRICING HELPERS
# ==============================

def resolve_distance(
    distance: Optional[float],
    customer: Optional[Customer],
    settings: PricingSettings,
) -> float:
    """
    Delivery miles used for freight.

      1) The quote's own distance, when set.
      2) The customer's region distance from the settings.
      3) 0 (freight is then base rate only, still floored at minFreight).
    """
    if distance is not None:
        return float(distance)
    if customer is not None:
        region_distance = settings.region_distance(customer.region_id)
        if region_distance is not None:
            return region_distance
    return 0.0


def _owned_customer(
    session: Session, organization_id: uuid.UUID, customer_id: Optional[uuid.UUID]
) -> Optional[Customer]:
    if customer_id is None:
        return None
    customer = session.get(Customer, customer_id)
    if customer is None or customer.organization_id != organization_id:
        raise InvalidInput(f"Unknown customer {customer_id}")
    return customer


def _owned_products(
    session: Session, organization_id: uuid.UUID, product_ids: Sequence[uuid.UUID]
) -> Dict[uuid.UUID, Product]:
    if not product_ids:
        return {}
    rows = session.exec(
        select(Product).where(
            Product.organization_id == organization_id,
            Product.id.in_(set(product_ids)),
        )
    ).all()
    found = {p.id: p for p in rows}
    missing = [str(pid) for pid in product_ids if pid not in found]
    if missing:
        raise InvalidInput(f"Unknown product(s): {', '.join(sorted(set(missing)))}")
    return found


def price_items(
    *,
    session: Session,
    organization_id: uuid.UUID,
    items: Sequence[QuoteItemIn],
    customer_type: Optional[str],
    distance: float,
    settings: PricingSettings,
) -> List[Tuple[QuoteItemIn, Product, LinePrice]]:
    """Prices every requested line. Any bad line fails the whole call."""
    products = _owned_products(session, organization_id, [i.product_id for i in items])

    priced = []
    for item in items:
        product = products[item.product_id]
        price = price_line(
            product,
            item.cases,
            customer_type,
            distance,
            settings,
            margin_percent=item.margin_percent,
        )
        priced.append((item, product, price))
    return priced


def _line_view(item: QuoteItemIn, product: Product, price: LinePrice) -> Dict[str, Any]:
    rounded = price.rounded()
    return {
        "product_id": str(product.id),
        "product_name": product.name,
        "unit_type": product.unit_type,
        "bipoc": product.bipoc,
        "cases": item.cases,
        "margin_percent": rounded.margin_percent,
        "unit_cost": rounded.unit_cost,
        "price_per_case": rounded.sale_price_per_case,
        "pallets": rounded.pallets,
        "volume_discount_percent": rounded.volume_discount_percent,
        "freight_cost": rounded.freight_cost,
        "line_total": rounded.line_total,
    }


# ==============================
# PREVIEW (no persistence)
# ==============================

def preview_quote(
    *,
    session: Session,
    organization_id: uuid.UUID,
    items: Sequence[QuoteItemIn],
    customer_id: Optional[uuid.UUID] = None,
    customer_type: Optional[str] = None,
    distance: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Prices lines the way create_quote would, without writing anything.
    An explicit customer_type wins over the customer's stored type.
    """
    settings = settings_for(session, organization_id)
    customer = _owned_customer(session, organization_id, customer_id)
    effective_type = customer_type or (customer.type if customer else None)
    miles = resolve_distance(distance, customer, settings)

    priced = price_items(
        session=session,
        organization_id=organization_id,
        items=items,
        customer_type=effective_type,
        distance=miles,
        settings=settings,
    )
    lines = [_line_view(i, p, price) for i, p, price in priced]
    summary = summarize(lines)

    return {
        "customer_type": effective_type,
        "distance": miles,
        "items": lines,
        "summary": {
            "total_cases": summary.total_cases,
            "total_value": round(summary.total_value, 2),
            "bipoc_fraction": summary.bipoc_fraction,
        },
    }


# ==============================
# CREATE / UPDATE
# ==============================

def _replace_items(
    *,
    session: Session,
    quote: Quote,
    items: Sequence[QuoteItemIn],
    customer: Optional[Customer],
    settings: PricingSettings,
) -> None:
    miles = resolve_distance(quote.distance, customer, settings)
    priced = price_items(
        session=session,
        organization_id=quote.organization_id,
        items=items,
        customer_type=customer.type if customer else None,
        distance=miles,
        settings=settings,
    )

    for old in session.exec(select(QuoteItem).where(QuoteItem.quote_id == quote.id)).all():
        session.delete(old)

    for position, (item, product, price) in enumerate(priced):
        snapshot = price.rounded()
        session.add(
            QuoteItem(
                quote_id=quote.id,
                product_id=product.id,
                position=position,
                cases=item.cases,
                margin_percent=snapshot.margin_percent,
                margin_override=item.margin_percent is not None,
                unit_cost=snapshot.unit_cost,
                freight_cost=snapshot.freight_cost,
                line_total=snapshot.line_total,
                notes=item.notes,
            )
        )


def _stored_lines(session: Session, quote_id: uuid.UUID) -> List[QuoteItemIn]:
    """Existing lines as input for re-pricing; only explicit margins are kept."""
    rows = session.exec(
        select(QuoteItem)
        .where(QuoteItem.quote_id == quote_id)
        .order_by(QuoteItem.position, QuoteItem.created_at)
    ).all()
    return [
        QuoteItemIn(
            product_id=row.product_id,
            cases=row.cases,
            margin_percent=row.margin_percent if row.margin_override else None,
            notes=row.notes,
        )
        for row in rows
    ]


def create_quote(
    *,
    payload: QuoteIn,
    session: Session,
    organization_id: uuid.UUID,
    user_id: Optional[uuid.UUID] = None,
) -> Quote:
    """
    Creates a draft quote and prices its lines on the server.

    Lines are priced before anything is written, so an invalid line leaves
    no half-created quote behind.
    """
    settings = settings_for(session, organization_id)
    customer = _owned_customer(session, organization_id, payload.customer_id)

    quote = Quote(
        organization_id=organization_id,
        customer_id=customer.id if customer else None,
        distance=payload.distance,
        notes=payload.notes,
        expires_at=payload.expires_at,
        status=DRAFT,
        created_by=user_id,
    )
    session.add(quote)

    if payload.items:
        try:
            _replace_items(
                session=session,
                quote=quote,
                items=payload.items,
                customer=customer,
                settings=settings,
            )
        except Exception:
            session.rollback()
            raise

    session.commit()
    session.refresh(quote)
    return quote


def update_quote(*, quote: Quote, payload: QuoteIn, session: Session) -> Quote:
    """
    Updates header fields present in the payload and, when `items` is sent,
    replaces and re-prices all lines. A change of distance or customer alone
    re-prices the stored lines. Only drafts can be edited.
    """
    if quote.status != DRAFT:
        raise QuoteLocked(quote.status)

    fields = payload.model_fields_set
    if "customer_id" in fields:
        customer = _owned_customer(session, quote.organization_id, payload.customer_id)
        quote.customer_id = customer.id if customer else None
    if "distance" in fields:
        quote.distance = payload.distance
    if "notes" in fields:
        quote.notes = payload.notes
    if "expires_at" in fields:
        quote.expires_at = payload.expires_at

    items = payload.items
    if items is None and fields & {"distance", "customer_id"}:
        items = _stored_lines(session, quote.id)

    if items is not None:
        customer = session.get(Customer, quote.customer_id) if quote.customer_id else None
        try:
            _replace_items(
                session=session,
                quote=quote,
                items=items,
                customer=customer,
                settings=settings_for(session, quote.organization_id),
            )
        except Exception:
            session.rollback()
            raise

    quote.updated_at = utcnow()
    session.add(quote)
    session.commit()
    session.refresh(quote)
    return quote


def change_status(*, quote: Quote, target: str, session: Session) -> Quote:
    check_transition(quote.status, target)
    quote.status = target
    now = utcnow()
    if target == SENT:
        quote.sent_at = now
    quote.updated_at = now
    session.add(quote)
    session.commit()
    session.refresh(quote)
    return quote


def finalize_quote(*, quote: Quote, session: Session) -> Quote:
    """Marks a draft as sent."""
    return change_status(quote=quote, target=SENT, session=session)


def delete_quote(*, quote: Quote, session: Session) -> None:
    for item in session.exec(select(QuoteItem).where(QuoteItem.quote_id == quote.id)).all():
        session.delete(item)
    session.delete(quote)
    session.commit()


# ==============================
# READ
# ==============================

def serialize_quote(quote: Quote, customer: Optional[Customer] = None) -> Dict[str, Any]:
    data = quote.model_dump(mode="json")
    data["customer_name"] = customer.name if customer else None
    data["customer_type"] = customer.type if customer else None
    data["region_id"] = customer.region_id if customer else None
    return data


def quote_items(session: Session, quote_id: uuid.UUID) -> List[Dict[str, Any]]:
    """Line items joined with the product fields the frontend shows."""
    rows = session.exec(
        select(QuoteItem, Product)
        .join(Product, QuoteItem.product_id == Product.id)
        .where(QuoteItem.quote_id == quote_id)
        .order_by(QuoteItem.position, QuoteItem.created_at)
    ).all()

    items = []
    for item, product in rows:
        row = item.model_dump(mode="json")
        row.update(
            {
                "product_name": product.name,
                "unit_type": product.unit_type,
                "cases_per_pallet": product.cases_per_pallet,
                "farm": product.farm,
                "location": product.location,
                "bipoc": product.bipoc,
                "gap_certified": product.gap_certified,
                "price_per_case": round(item.unit_cost * (1 + item.margin_percent / 100), 2),
            }
        )
        items.append(row)
    return items


def quote_detail(session: Session, quote: Quote) -> Dict[str, Any]:
    customer = session.get(Customer, quote.customer_id) if quote.customer_id else None
    data = serialize_quote(quote, customer)
    data["items"] = quote_items(session, quote.id)
    return data


def list_quotes(
    *,
    session: Session,
    organization_id: uuid.UUID,
    status: Optional[str] = None,
    customer_id: Optional[uuid.UUID] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """Quotes newest-updated first, with customer name/type, item count and total value."""
    stmt = (
        select(
            Quote,
            Customer,
            func.count(QuoteItem.id),
            func.coalesce(func.sum(QuoteItem.line_total), 0),
        )
        .outerjoin(Customer, Quote.customer_id == Customer.id)
        .outerjoin(QuoteItem, QuoteItem.quote_id == Quote.id)
        .where(Quote.organization_id == organization_id)
    )
    if status:
        stmt = stmt.where(Quote.status == status)
    if customer_id:
        stmt = stmt.where(Quote.customer_id == customer_id)

    stmt = (
        stmt.group_by(Quote.id, Customer.id)
        .order_by(Quote.updated_at.desc())
        .offset(offset)
        .limit(limit)
    )

    out = []
    for quote, customer, item_count, total_value in session.exec(stmt).all():
        row = serialize_quote(quote, customer)
        row["item_count"] = int(item_count or 0)
        row["total_value"] = round(float(total_value or 0), 2)
        out.append(row)
    return out


def ai_quote_context(session: Session, quote: Quote) -> Dict[str, Any]:
    """Quote in the shape the pricing assistant prompt expects (camelCase, like the frontend)."""
    detail = quote_detail(session, quote)
    return {
        "customerName": detail.get("customer_name"),
        "customerType": detail.get("customer_type"),
        "distance": detail.get("distance"),
        "status": detail.get("status"),
        "items": [
            {
                "product": i["product_name"],
                "cases": i["cases"],
                "pricePerCase": i["price_per_case"],
                "marginPercent": i["margin_percent"],
                "freightCost": i["freight_cost"],
                "lineTotal": i["line_total"],
                "bipoc": i["bipoc"],
            }
            for i in detail["items"]
        ],
    }
