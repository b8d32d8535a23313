import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from src.server.api.deps import CurrentUser, get_owned, require_auth
from src.server.db.session import get_session
from src.server.models import Customer, Quote
from src.server.models.common import utcnow
from src.server.schemas.customer import CustomerIn

router = APIRouter(prefix="/api/customers", tags=["customers"])

CUSTOMER_FIELDS = ("name", "type", "region_id", "address", "contact_email", "contact_phone", "notes")


@router.get("")
def list_customers(
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    rows = session.exec(
        select(Customer)
        .where(Customer.organization_id == user.organization_id)
        .order_by(Customer.name)
    ).all()
    return {"customers": [c.model_dump(mode="json") for c in rows]}


@router.get("/{customer_id}")
def get_customer(
    customer_id: uuid.UUID,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    customer = get_owned(session, Customer, customer_id, user, "Customer")
    return {"customer": customer.model_dump(mode="json")}


@router.post("", status_code=201)
def create_customer(
    payload: CustomerIn,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    if not payload.name:
        raise HTTPException(status_code=400, detail="Customer name is required")

    customer = Customer(
        organization_id=user.organization_id,
        **payload.model_dump(include=set(CUSTOMER_FIELDS)),
    )
    session.add(customer)
    session.commit()
    session.refresh(customer)
    return {"customer": customer.model_dump(mode="json")}


@router.put("/{customer_id}")
def update_customer(
    customer_id: uuid.UUID,
    payload: CustomerIn,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    customer = get_owned(session, Customer, customer_id, user, "Customer")

    updates = payload.model_dump(include=set(CUSTOMER_FIELDS), exclude_unset=True)
    if "name" in updates and not updates["name"]:
        raise HTTPException(status_code=400, detail="Customer name is required")

    for key, value in updates.items():
        setattr(customer, key, value)
    customer.updated_at = utcnow()

    session.add(customer)
    session.commit()
    session.refresh(customer)
    return {"customer": customer.model_dump(mode="json")}


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: uuid.UUID,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    customer = get_owned(session, Customer, customer_id, user, "Customer")

    # Quotes outlive their customer (customer_id -> NULL)
    for quote in session.exec(select(Quote).where(Quote.customer_id == customer.id)).all():
        quote.customer_id = None
        quote.updated_at = utcnow()
        session.add(quote)

    session.delete(customer)
    session.commit()
    return {"success": True}
