# stockpos/routes/stock.py
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import Optional

from stockpos.enums import EntityType
from stockpos.exceptions import NotFoundError
from stockpos.models.stock import StockMovement
from stockpos.models.product import Product
from stockpos.models.users import User
from stockpos.repository import SqlAlchemyRepository, get_repo
from stockpos.services.permissions import Action
from stockpos.services.stock_ledger import apply_movement, preview_stock
from stockpos.utils.tokenJWT import permission_required
from stockpos.utils.audit import write_log, client_ip
import stockpos.schemas.stock as stock_schemas

router = APIRouter(prefix="/stock", tags=["Stock"])

can_view_ledger = permission_required(Action.VIEW, EntityType.STOCK_MOVEMENT)
can_move_stock = permission_required(Action.CREATE, EntityType.STOCK_MOVEMENT)


@router.get("/movements", response_model=stock_schemas.StockMovementPage)
def list_movements(
    q: Optional[str] = Query(None, description="Product name"),
    product_id: Optional[int] = Query(None),
    type: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: str = "created_at",
    order: str = "desc",
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view_ledger),
):
    db: Session = repo.session
    query = db.query(StockMovement).join(Product)

    # Filter by product
    if q:
        query = query.filter(Product.name.ilike(f"%{q}%"))
    if product_id is not None:
        query = query.filter(StockMovement.product_id == product_id)
    if type:
        query = query.filter(StockMovement.type == type)

    # Sort results
    col = StockMovement.created_at if sort_by == "created_at" else StockMovement.id
    if order == "desc":
        query = query.order_by(col.desc(), StockMovement.id.desc())
    else:
        query = query.order_by(col.asc(), StockMovement.id.asc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.post("/movements", response_model=stock_schemas.StockMovementResult, status_code=status.HTTP_201_CREATED)
def add_movement(
    payload: stock_schemas.StockMovementCreate,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_move_stock),
):
    entry = apply_movement(
        repo, current_user, payload.product_id, payload.type, payload.quantity, payload.comment
    )
    movement, product = entry.movement, entry.product
    write_log(repo.session, user_id=current_user.id, action="STOCK_MOVEMENT", resource="stock",
              ip=client_ip(request),
              meta={"id": movement.id, "product_id": product.id, "type": movement.type,
                    "quantity": movement.quantity, "low_stock": entry.low_stock})

    result = stock_schemas.StockMovementResponse.model_validate(movement).model_dump()
    result.update(stock_quantity=product.stock_quantity, low_stock=entry.low_stock)
    return result


# What-if for the movement form: the level a movement would leave behind
@router.get("/preview", response_model=stock_schemas.StockPreview)
def preview_movement(
    product_id: int,
    type: stock_schemas.StockMovementType,
    quantity: int = Query(..., gt=0),
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_move_stock),
):
    product = repo.get("product", product_id)
    if product is None:
        raise NotFoundError("product", product_id)

    new_stock = preview_stock(product, type, quantity)
    return {
        "product_id": product.id,
        "current_stock": product.stock_quantity,
        "new_stock": new_stock,
        "allowed": new_stock is not None,
        "low_stock_after": new_stock is not None and new_stock <= (product.min_stock or 0),
    }
