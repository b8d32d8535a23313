import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, or_
from sqlmodel import Session, col, select

from src.server.api.deps import CurrentUser, get_owned, require_auth
from src.server.db.session import get_session
from src.server.models import Product, QuoteItem
from src.server.models.common import utcnow
from src.server.schemas.product import ProductImportIn, ProductIn

router = APIRouter(prefix="/api/products", tags=["products"])

PRODUCT_FIELDS = (
    "name", "unit_type", "cases_per_pallet", "cost_per_case", "weight", "farm",
    "location", "category", "bipoc", "gap_certified", "available", "notes",
)


def _new_product(organization_id: uuid.UUID, payload: ProductIn) -> Product:
    data = payload.model_dump(include=set(PRODUCT_FIELDS))
    # Column defaults for flags/pallet size the client left out
    data["cases_per_pallet"] = data.get("cases_per_pallet") or 1
    data["bipoc"] = bool(data.get("bipoc") or False)
    data["gap_certified"] = bool(data.get("gap_certified") or False)
    data["available"] = data.get("available") is not False
    return Product(organization_id=organization_id, **data)


def _apply(product: Product, payload: ProductIn) -> None:
    for key, value in payload.model_dump(include=set(PRODUCT_FIELDS), exclude_unset=True).items():
        if value is None and key in ("name", "cost_per_case", "cases_per_pallet",
                                     "bipoc", "gap_certified", "available"):
            continue
        setattr(product, key, value)
    product.updated_at = utcnow()


# ==============================
# LIST
# ==============================

@router.get("")
def list_products(
    category: Optional[str] = None,
    bipoc: Optional[bool] = None,
    available: Optional[bool] = None,
    search: Optional[str] = Query(default=None, max_length=200),
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """
    Filters:
      - category:        exact match
      - bipoc=true:      BIPOC-sourced only
      - available=false: include unavailable products (default: available only)
      - search:          name or farm, case-insensitive
    """
    stmt = select(Product).where(Product.organization_id == user.organization_id)

    if category:
        stmt = stmt.where(Product.category == category)
    if bipoc:
        stmt = stmt.where(Product.bipoc == True)  # noqa: E712
    if available is not False:
        stmt = stmt.where(Product.available == True)  # noqa: E712
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(col(Product.name).ilike(pattern), col(Product.farm).ilike(pattern)))

    rows = session.exec(stmt.order_by(Product.category, Product.name)).all()
    return {"products": [p.model_dump(mode="json") for p in rows]}


@router.get("/categories")
def list_categories(
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    rows = session.exec(
        select(Product.category)
        .where(Product.organization_id == user.organization_id)
        .distinct()
        .order_by(Product.category)
    ).all()
    return {"categories": [c for c in rows if c is not None]}


@router.get("/{product_id}")
def get_product(
    product_id: uuid.UUID,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    product = get_owned(session, Product, product_id, user, "Product")
    return {"product": product.model_dump(mode="json")}


# ==============================
# CREATE / IMPORT
# ==============================

@router.post("", status_code=201)
def create_product(
    payload: ProductIn,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    if not payload.name or payload.cost_per_case is None:
        raise HTTPException(status_code=400, detail="Name and cost per case are required")

    product = _new_product(user.organization_id, payload)
    session.add(product)
    session.commit()
    session.refresh(product)
    return {"product": product.model_dump(mode="json")}


@router.post("/import")
def import_products(
    payload: ProductImportIn,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """
    Bulk import (e.g. from a vendor sheet converted to JSON).

    Rows are matched on name + farm in "merge" mode. Rows missing a name or
    cost are skipped and reported under "errors".
    """
    if not payload.products:
        raise HTTPException(status_code=400, detail="Products array is required")

    if payload.mode == "replace":
        referenced = session.exec(
            select(QuoteItem.product_id)
            .join(Product, QuoteItem.product_id == Product.id)
            .where(Product.organization_id == user.organization_id)
        ).first()
        if referenced is not None:
            raise HTTPException(
                status_code=409,
                detail="Cannot replace the catalog while quotes reference its products",
            )
        session.execute(delete(Product).where(Product.organization_id == user.organization_id))

    imported = 0
    updated = 0
    errors = []

    for row in payload.products:
        if not row.name or row.cost_per_case is None:
            errors.append({"product": row.name, "error": "Name and cost per case are required"})
            continue

        existing = None
        if payload.mode == "merge":
            existing = session.exec(
                select(Product).where(
                    Product.organization_id == user.organization_id,
                    Product.name == row.name,
                    Product.farm == row.farm,
                )
            ).first()

        if existing is not None:
            _apply(existing, row)
            session.add(existing)
            updated += 1
        else:
            session.add(_new_product(user.organization_id, row))
            imported += 1

    session.commit()

    result = {"success": True, "imported": imported, "updated": updated}
    if errors:
        result["errors"] = errors
    return result


# ==============================
# UPDATE / DELETE
# ==============================

@router.put("/{product_id}")
def update_product(
    product_id: uuid.UUID,
    payload: ProductIn,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    product = get_owned(session, Product, product_id, user, "Product")
    _apply(product, payload)
    session.add(product)
    session.commit()
    session.refresh(product)
    return {"product": product.model_dump(mode="json")}


@router.delete("/{product_id}")
def delete_product(
    product_id: uuid.UUID,
    user: CurrentUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    product = get_owned(session, Product, product_id, user, "Product")

    in_use = session.exec(select(QuoteItem.id).where(QuoteItem.product_id == product.id)).first()
    if in_use is not None:
        raise HTTPException(status_code=409, detail="Product is used on a quote and cannot be deleted")

    session.delete(product)
    session.commit()
    return {"success": True}
