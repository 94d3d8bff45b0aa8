# stockpos/routes/products.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import or_

from stockpos.enums import EntityType
from stockpos.exceptions import NotFoundError
from stockpos.models.product import Product
from stockpos.models.users import User
from stockpos.repository import SqlAlchemyRepository, get_repo
import stockpos.schemas.product as product_schemas
from stockpos.schemas.validation import DeletionResult, RequestResult
from stockpos.services.catalog import create_product, update_product
from stockpos.services.lifecycle import delete_entity, request_delete, request_restoration
from stockpos.services.permissions import Action, allowed_actions
from stockpos.utils.audit import client_ip, write_log
from stockpos.utils.tokenJWT import permission_required

router = APIRouter(prefix="/products", tags=["Products"])

can_view = permission_required(Action.VIEW, EntityType.PRODUCT)


def _out(product: Product, user: User) -> product_schemas.ProductOut:
    out = product_schemas.ProductOut.model_validate(product)
    out.allowed_actions = allowed_actions(user, EntityType.PRODUCT, product)
    return out


def _request_result(repo, product_id, validation):
    return {
        "target_type": EntityType.PRODUCT.value,
        "target_id": product_id,
        "status": repo.get("product", product_id).status,
        "validation": validation,
    }


# =========================
# PRODUCT LIST
# =========================
@router.get("", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None, description="Search by name or description"),
    category_id: Optional[int] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    low_stock: Optional[bool] = Query(None, description="Only products at or below their minimum"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=500),
    sort_by: Literal["id", "name", "sell_price", "stock_quantity", "created_at"] = "id",
    order: Literal["asc", "desc"] = "asc",
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    query = repo.session.query(Product)

    if q:
        like = f"%{q}%"
        query = query.filter(or_(Product.name.ilike(like), Product.description.ilike(like)))
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if status_filter:
        query = query.filter(Product.status == status_filter)
    if low_stock is True:
        query = query.filter(Product.stock_quantity <= Product.min_stock)
    elif low_stock is False:
        query = query.filter(Product.stock_quantity > Product.min_stock)

    col = getattr(Product, sort_by)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    total = query.count()
    items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": [_out(p, current_user) for p in items],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(
    product_id: int,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    product = repo.get("product", product_id)
    if product is None:
        raise NotFoundError("product", product_id)
    return _out(product, current_user)


@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    data = payload.model_dump()
    product = create_product(
        repo, current_user,
        name=data.pop("name"),
        sell_price=data.pop("sell_price"),
        stock_quantity=data.pop("stock_quantity"),
        min_stock=data.pop("min_stock"),
        **data,
    )
    write_log(repo.session, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              ip=client_ip(request), meta={"id": product.id, "name": product.name})
    return _out(product, current_user)


@router.patch("/{product_id}", response_model=product_schemas.ProductOut)
def edit_product(
    product_id: int,
    payload: product_schemas.ProductUpdate,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    changes = payload.model_dump(exclude_unset=True)
    product = update_product(repo, current_user, product_id, changes)
    write_log(repo.session, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              ip=client_ip(request), meta={"id": product_id, "changes": changes})
    return _out(product, current_user)


# =========================
# DELETION WORKFLOW
# =========================
@router.delete("/{product_id}", response_model=DeletionResult)
def delete_product(
    product_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    outcome = delete_entity(repo, current_user, EntityType.PRODUCT, product_id)
    write_log(repo.session, user_id=current_user.id,
              action="PRODUCT_DELETE" if outcome.mode == "direct" else "PRODUCT_DELETE_REQUEST",
              resource="products", ip=client_ip(request), meta={"id": product_id})
    return DeletionResult.from_outcome(EntityType.PRODUCT, product_id, outcome)


@router.post("/{product_id}/request-deletion", response_model=RequestResult)
def request_product_deletion(
    product_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    validation = request_delete(repo, current_user, EntityType.PRODUCT, product_id)
    write_log(repo.session, user_id=current_user.id, action="PRODUCT_DELETE_REQUEST", resource="products",
              ip=client_ip(request), meta={"id": product_id, "validation_id": validation.id})
    return _request_result(repo, product_id, validation)


@router.post("/{product_id}/request-restoration", response_model=RequestResult)
def request_product_restoration(
    product_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    validation = request_restoration(repo, current_user, EntityType.PRODUCT, product_id)
    write_log(repo.session, user_id=current_user.id, action="PRODUCT_RESTORE_REQUEST", resource="products",
              ip=client_ip(request), meta={"id": product_id, "validation_id": validation.id})
    return _request_result(repo, product_id, validation)
