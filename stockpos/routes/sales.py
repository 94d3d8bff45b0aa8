# stockpos/routes/sales.py
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from stockpos.enums import EntityType, SaleStatus
from stockpos.exceptions import NotFoundError, PermissionDeniedError
from stockpos.models.sale import Sale
from stockpos.models.users import User
from stockpos.repository import SqlAlchemyRepository, get_repo
from stockpos.routes.settings import load_store_settings
import stockpos.schemas.sale as sale_schemas
from stockpos.schemas.validation import DeletionResult, RequestResult
from stockpos.services.lifecycle import delete_entity, request_delete, request_restoration
from stockpos.services.periods import day_bounds, period_range
from stockpos.services.permissions import Action, allowed_actions, has_right, is_admin
from stockpos.services.sale_totals import compute_totals
from stockpos.services.sales import create_sale, price_lines
from stockpos.utils.audit import client_ip, write_log
from stockpos.utils.tokenJWT import permission_required

router = APIRouter(prefix="/sales", tags=["Sales"])

can_view = permission_required(Action.VIEW, EntityType.SALE)
can_sell = permission_required(Action.CREATE, EntityType.SALE)


def _out(sale: Sale, user: User) -> sale_schemas.SaleOut:
    out = sale_schemas.SaleOut.model_validate(sale)
    out.allowed_actions = allowed_actions(user, EntityType.SALE, sale)
    return out


def _load_visible(repo, user, sale_id) -> Sale:
    sale = repo.get("sale", sale_id)
    if sale is None:
        raise NotFoundError("sale", sale_id)
    if not has_right(user, Action.VIEW, EntityType.SALE, sale):
        raise PermissionDeniedError("You can only see your own sales", {"kind": "sale", "id": sale_id})
    return sale


def _request_result(repo, sale_id, validation):
    return {
        "target_type": EntityType.SALE.value,
        "target_id": sale_id,
        "status": repo.get("sale", sale_id).status,
        "validation": validation,
    }


# Admin sees every sale, cashiers only their own
@router.get("", response_model=sale_schemas.SalePage)
def list_sales(
    cashier_id: Optional[int] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_method: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    sort_by: Literal["id", "created_at", "grand_total"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    query = repo.session.query(Sale)
    if not is_admin(current_user):
        query = query.filter(Sale.cashier_id == current_user.id)
    elif cashier_id is not None:
        query = query.filter(Sale.cashier_id == cashier_id)

    if status_filter:
        query = query.filter(Sale.status == status_filter)
    if payment_method:
        query = query.filter(Sale.payment_method == payment_method)
    if date_from or date_to:
        lower, upper = day_bounds(date_from or date.min, date_to or datetime.now(timezone.utc).date())
        query = query.filter(Sale.created_at >= lower, Sale.created_at < upper)

    col = getattr(Sale, sort_by)
    query = query.order_by(col.asc() if order == "asc" else col.desc(), Sale.id.desc())

    total = query.count()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    return {
        "items": [_out(s, current_user) for s in rows],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


# Personal sales dashboard of the logged-in cashier
@router.get("/mine", response_model=sale_schemas.MySalesSummary)
def my_sales(
    period: Literal["today", "week", "month", "custom"] = "month",
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_sell),
):
    lower, upper = period_range(period, date_from, date_to)
    rows = (
        repo.session.query(Sale)
        .filter(Sale.cashier_id == current_user.id, Sale.created_at >= lower, Sale.created_at < upper)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .all()
    )

    counted = [s for s in rows if s.status != SaleStatus.DELETED.value]
    revenue = round(sum(s.grand_total for s in counted), 2)

    today_lower, today_upper = period_range("today")
    today_count = (
        repo.session.query(Sale)
        .filter(
            Sale.cashier_id == current_user.id,
            Sale.status != SaleStatus.DELETED.value,
            Sale.created_at >= today_lower,
            Sale.created_at < today_upper,
        )
        .count()
    )

    breakdown = defaultdict(lambda: {"count": 0, "revenue": 0.0})
    for s in counted:
        breakdown[s.payment_method]["count"] += 1
        breakdown[s.payment_method]["revenue"] = round(breakdown[s.payment_method]["revenue"] + s.grand_total, 2)

    return {
        "date_from": lower,
        "date_to": upper,
        "total_sales": len(counted),
        "total_revenue": revenue,
        "average_basket": round(revenue / len(counted), 2) if counted else 0.0,
        "today_sales": today_count,
        "by_payment_method": dict(breakdown),
        "items": [_out(s, current_user) for s in rows],
    }


# Live totals for the point-of-sale form, nothing is recorded
@router.post("/preview", response_model=sale_schemas.TotalsOut)
def preview_totals(
    payload: sale_schemas.TotalsRequest,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_sell),
):
    tax = payload.tax_percent
    if tax is None:
        tax = load_store_settings(repo.session).default_tax_rate
    lines = price_lines(repo, [item.model_dump() for item in payload.items])
    return compute_totals(lines, payload.discount_percent, tax).as_floats()


@router.post("", response_model=sale_schemas.SaleOut, status_code=status.HTTP_201_CREATED)
def add_sale(
    payload: sale_schemas.SaleCreate,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_sell),
):
    store = load_store_settings(repo.session)
    tax = payload.tax_percent if payload.tax_percent is not None else store.default_tax_rate

    sale = create_sale(
        repo, current_user,
        items=[item.model_dump() for item in payload.items],
        discount_percent=payload.discount_percent,
        tax_percent=tax,
        payment_method=payload.payment_method,
        max_discount_percent=store.max_discount_percent,
    )
    write_log(repo.session, user_id=current_user.id, action="SALE_CREATE", resource="sales",
              ip=client_ip(request), meta={"id": sale.id, "grand_total": sale.grand_total})
    return _out(sale, current_user)


@router.get("/{sale_id}", response_model=sale_schemas.SaleOut)
def get_sale(
    sale_id: int,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    return _out(_load_visible(repo, current_user, sale_id), current_user)


@router.delete("/{sale_id}", response_model=DeletionResult)
def delete_sale(
    sale_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    _load_visible(repo, current_user, sale_id)
    outcome = delete_entity(repo, current_user, EntityType.SALE, sale_id)
    write_log(repo.session, user_id=current_user.id,
              action="SALE_DELETE" if outcome.mode == "direct" else "SALE_DELETE_REQUEST",
              resource="sales", ip=client_ip(request), meta={"id": sale_id})
    return DeletionResult.from_outcome(EntityType.SALE, sale_id, outcome)


@router.post("/{sale_id}/request-deletion", response_model=RequestResult)
def request_sale_deletion(
    sale_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    validation = request_delete(repo, current_user, EntityType.SALE, sale_id)
    write_log(repo.session, user_id=current_user.id, action="SALE_DELETE_REQUEST", resource="sales",
              ip=client_ip(request), meta={"id": sale_id, "validation_id": validation.id})
    return _request_result(repo, sale_id, validation)


@router.post("/{sale_id}/request-restoration", response_model=RequestResult)
def request_sale_restoration(
    sale_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    validation = request_restoration(repo, current_user, EntityType.SALE, sale_id)
    write_log(repo.session, user_id=current_user.id, action="SALE_RESTORE_REQUEST", resource="sales",
              ip=client_ip(request), meta={"id": sale_id, "validation_id": validation.id})
    return _request_result(repo, sale_id, validation)
