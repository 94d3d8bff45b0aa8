# stockpos/routes/reports.py
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import List, Literal, Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask
from sqlalchemy.orm import Session

from stockpos.database import get_db
from stockpos.enums import EntityType
from stockpos.exceptions import PermissionDeniedError
from stockpos.models.product import Product
from stockpos.models.sale import Sale, SaleItem
from stockpos.models.stock import StockMovement
from stockpos.models.users import User
from stockpos.schemas.reports import (
    CategoryStock, DailyRevenue, LowStockItem, SalesReport, StockReport,
    TopProduct, UserActivity, UsersReport,
)
from stockpos.services.periods import day_bounds
from stockpos.services.permissions import Action, has_right, is_admin
from stockpos.utils.audit import client_ip, write_log
from stockpos.utils.export import MEDIA_TYPES, export_rows
from stockpos.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/reports", tags=["Reports"])

ReportType = Literal["sales", "stock", "users", "my-sales"]

SALE_COLUMNS = ["id", "date", "cashier", "payment_method", "subtotal", "discount_amount",
                "tax_amount", "grand_total", "status"]
STOCK_COLUMNS = ["id", "name", "category", "stock_quantity", "min_stock", "sell_price",
                 "stock_value", "low_stock", "status"]
USER_COLUMNS = ["id", "email", "role", "status", "sales", "revenue", "movements"]


def _range(date_from: Optional[date], date_to: Optional[date]) -> Tuple[date, date, datetime, datetime]:
    """Defaults to the current month up to today."""
    today = datetime.now(timezone.utc).date()
    start = date_from or today.replace(day=1)
    end = date_to or today
    lower, upper = day_bounds(start, end)
    return start, end, lower, upper


def _require(allowed: bool, report: str):
    if not allowed:
        raise PermissionDeniedError(f"You cannot view the {report} report", {"report": report})


def _check_access(user: User, report_type: str):
    if report_type in ("sales", "users"):
        _require(is_admin(user), report_type)
    elif report_type == "stock":
        _require(has_right(user, Action.VIEW, EntityType.STOCK_MOVEMENT), report_type)
    else:
        _require(has_right(user, Action.CREATE, EntityType.SALE), report_type)


def _sales_in(db: Session, lower, upper, cashier_id=None):
    query = db.query(Sale).filter(Sale.created_at >= lower, Sale.created_at < upper)
    if cashier_id is not None:
        query = query.filter(Sale.cashier_id == cashier_id)
    return query.order_by(Sale.created_at.asc(), Sale.id.asc()).all()


def _sale_rows(sales) -> List[dict]:
    return [
        {
            "id": s.id,
            "date": s.created_at.strftime("%Y-%m-%d %H:%M") if s.created_at else "",
            "cashier": s.cashier_email,
            "payment_method": s.payment_method,
            "subtotal": s.subtotal,
            "discount_amount": s.discount_amount,
            "tax_amount": s.tax_amount,
            "grand_total": s.grand_total,
            "status": s.status,
        }
        for s in sales
    ]


def _stock_items(products) -> List[LowStockItem]:
    return [
        LowStockItem(
            product_id=p.id,
            name=p.name,
            category=p.category.name if p.category else None,
            stock_quantity=p.stock_quantity or 0,
            min_stock=p.min_stock or 0,
        )
        for p in products
    ]


# -----------------------------
# 1) Sales
# -----------------------------
def build_sales_report(db: Session, date_from=None, date_to=None) -> SalesReport:
    start, end, lower, upper = _range(date_from, date_to)
    sales = [s for s in _sales_in(db, lower, upper) if s.status != "deleted"]

    revenue = round(sum(s.grand_total for s in sales), 2)
    by_method = defaultdict(float)
    daily = defaultdict(lambda: [0, 0.0])
    for s in sales:
        by_method[s.payment_method] = round(by_method[s.payment_method] + s.grand_total, 2)
        bucket = daily[s.created_at.date()]
        bucket[0] += 1
        bucket[1] = round(bucket[1] + s.grand_total, 2)

    top = defaultdict(lambda: [None, 0, 0.0])
    sale_ids = [s.id for s in sales]
    if sale_ids:
        for item in db.query(SaleItem).filter(SaleItem.sale_id.in_(sale_ids)).all():
            entry = top[item.product_id]
            entry[0] = item.product_name
            entry[1] += item.quantity
            entry[2] = round(entry[2] + item.line_total, 2)

    top_products = sorted(
        (TopProduct(product_id=pid, product_name=name or f"#{pid}", quantity_sold=qty, revenue=rev)
         for pid, (name, qty, rev) in top.items()),
        key=lambda t: (-t.quantity_sold, t.product_id),
    )[:5]

    return SalesReport(
        date_from=start,
        date_to=end,
        total_sales=len(sales),
        total_revenue=revenue,
        average_basket=round(revenue / len(sales), 2) if sales else 0.0,
        by_payment_method=dict(by_method),
        daily=[DailyRevenue(date=d, sales=v[0], revenue=v[1]) for d, v in sorted(daily.items())],
        top_products=top_products,
    )


# -----------------------------
# 2) Stock
# -----------------------------
def build_stock_report(db: Session, date_from=None, date_to=None) -> StockReport:
    start, end, lower, upper = _range(date_from, date_to)
    products = (
        db.query(Product)
        .filter(Product.status != "deleted")
        .order_by(Product.stock_quantity.asc(), Product.name.asc())
        .all()
    )

    by_category = {}
    for p in products:
        key = p.category_id
        row = by_category.setdefault(key, CategoryStock(
            category_id=key,
            category=p.category.name if p.category else "Uncategorised",
            products=0, units=0, stock_value=0.0,
        ))
        row.products += 1
        row.units += p.stock_quantity or 0
        row.stock_value = round(row.stock_value + (p.stock_quantity or 0) * (p.buy_price or 0), 2)

    movements_by_type = defaultdict(int)
    moves = db.query(StockMovement).filter(StockMovement.created_at >= lower, StockMovement.created_at < upper)
    for m in moves.all():
        movements_by_type[m.type] += m.quantity

    return StockReport(
        date_from=start,
        date_to=end,
        total_products=len(products),
        total_units=sum(p.stock_quantity or 0 for p in products),
        stock_value=round(sum((p.stock_quantity or 0) * (p.buy_price or 0) for p in products), 2),
        low_stock=_stock_items([p for p in products if p.low_stock and (p.stock_quantity or 0) > 0]),
        out_of_stock=_stock_items([p for p in products if (p.stock_quantity or 0) == 0]),
        by_category=list(by_category.values()),
        movements_by_type=dict(movements_by_type),
    )


def _stock_rows(db: Session) -> List[dict]:
    products = db.query(Product).order_by(Product.name.asc()).all()
    return [
        {
            "id": p.id,
            "name": p.name,
            "category": p.category.name if p.category else "",
            "stock_quantity": p.stock_quantity,
            "min_stock": p.min_stock,
            "sell_price": p.sell_price,
            "stock_value": round((p.stock_quantity or 0) * (p.buy_price or 0), 2),
            "low_stock": "yes" if p.low_stock else "no",
            "status": p.status,
        }
        for p in products
    ]


# -----------------------------
# 3) Users
# -----------------------------
def build_users_report(db: Session, date_from=None, date_to=None) -> UsersReport:
    start, end, lower, upper = _range(date_from, date_to)
    users = db.query(User).order_by(User.id.asc()).all()

    sales = defaultdict(lambda: [0, 0.0])
    for s in _sales_in(db, lower, upper):
        if s.status == "deleted":
            continue
        sales[s.cashier_id][0] += 1
        sales[s.cashier_id][1] = round(sales[s.cashier_id][1] + s.grand_total, 2)

    movements = defaultdict(int)
    moves = db.query(StockMovement).filter(StockMovement.created_at >= lower, StockMovement.created_at < upper)
    for m in moves.all():
        movements[m.user_id] += 1

    by_role = defaultdict(int)
    for u in users:
        by_role[u.role] += 1

    return UsersReport(
        date_from=start,
        date_to=end,
        total_users=len(users),
        active_users=sum(1 for u in users if u.status == "active"),
        by_role=dict(by_role),
        activity=[
            UserActivity(
                user_id=u.id, email=u.email, role=u.role, status=u.status,
                sales=sales[u.id][0], revenue=sales[u.id][1], movements=movements[u.id],
            )
            for u in users
        ],
    )


@router.get("/sales", response_model=SalesReport)
def report_sales(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _check_access(current_user, "sales")
    return build_sales_report(db, date_from, date_to)


@router.get("/stock", response_model=StockReport)
def report_stock(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _check_access(current_user, "stock")
    return build_stock_report(db, date_from, date_to)


@router.get("/users", response_model=UsersReport)
def report_users(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _check_access(current_user, "users")
    return build_users_report(db, date_from, date_to)


# -----------------------------
# 4) Export (CSV / PDF)
# -----------------------------
@router.get("/{report_type}/export")
def export_report(
    report_type: ReportType,
    request: Request,
    format: Literal["csv", "pdf"] = Query("csv"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _check_access(current_user, report_type)
    start, end, lower, upper = _range(date_from, date_to)

    if report_type == "sales":
        rows, columns, title = _sale_rows(_sales_in(db, lower, upper)), SALE_COLUMNS, "Sales report"
    elif report_type == "my-sales":
        rows = _sale_rows(_sales_in(db, lower, upper, cashier_id=current_user.id))
        columns, title = SALE_COLUMNS, f"Sales of {current_user.email}"
    elif report_type == "stock":
        rows, columns, title = _stock_rows(db), STOCK_COLUMNS, "Stock report"
    else:
        report = build_users_report(db, date_from, date_to)
        rows = [
            {"id": a.user_id, "email": a.email, "role": a.role, "status": a.status,
             "sales": a.sales, "revenue": a.revenue, "movements": a.movements}
            for a in report.activity
        ]
        columns, title = USER_COLUMNS, "Users report"

    path = export_rows(report_type, format, rows, columns, title, subtitle=f"{start.isoformat()} - {end.isoformat()}")

    write_log(db, user_id=current_user.id, action="REPORT_EXPORT", resource="reports",
              ip=client_ip(request), meta={"type": report_type, "format": format, "rows": len(rows)})

    return FileResponse(
        path,
        media_type=MEDIA_TYPES[format],
        filename=f"{report_type}-{start.isoformat()}-{end.isoformat()}.{format}",
        # Exports are one-off files, removed once streamed
        background=BackgroundTask(path.unlink, missing_ok=True),
    )
