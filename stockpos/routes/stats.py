# stockpos/routes/stats.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime, timedelta, timezone
from pydantic import BaseModel
from typing import List

from stockpos.database import get_db
from stockpos.utils.tokenJWT import get_current_user
from stockpos.models.users import User
from stockpos.models.product import Product
from stockpos.models.sale import Sale, SaleItem
from stockpos.models.validation import Validation
from stockpos.schemas.reports import DashboardStats
from stockpos.services.periods import period_range
from stockpos.services.permissions import is_admin

router = APIRouter(
    prefix="/stats",
    tags=["Stats"]
)

# Deleted sales never count towards revenue
COUNTED = Sale.status != "deleted"

# === Pydantic Response Schemas ===

class DailyRevenue(BaseModel):
    date: str
    revenue: float

class DailyRevenueResponse(BaseModel):
    data: List[DailyRevenue]

# Schema for top selling products
class TopProduct(BaseModel):
    product_id: int
    product_name: str
    total_quantity_sold: int

class TopProductsResponse(BaseModel):
    data: List[TopProduct]


# === Endpoint 1: Dashboard Summary ===

@router.get("/summary", response_model=DashboardStats)
def get_stats_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # Revenue and sales count over all time
    total_sales = db.query(Sale).filter(COUNTED).count()
    total_revenue = db.query(func.coalesce(func.sum(Sale.grand_total), 0.0)).filter(COUNTED).scalar()

    lower, upper = period_range("today")
    today = db.query(Sale).filter(COUNTED, Sale.created_at >= lower, Sale.created_at < upper)
    today_sales = today.count()
    today_revenue = (
        db.query(func.coalesce(func.sum(Sale.grand_total), 0.0))
        .filter(COUNTED, Sale.created_at >= lower, Sale.created_at < upper)
        .scalar()
    )

    live_products = db.query(Product).filter(Product.status != "deleted")
    total_products = live_products.count()
    # Products at or below their own minimum
    low_stock_count = live_products.filter(Product.stock_quantity <= Product.min_stock).count()

    pending_validations = db.query(Validation).filter(Validation.status == "pending").count()

    return DashboardStats(
        total_sales=total_sales,
        total_revenue=round(total_revenue or 0.0, 2),
        total_products=total_products,
        low_stock_count=low_stock_count,
        today_sales=today_sales,
        today_revenue=round(today_revenue or 0.0, 2),
        pending_validations=pending_validations,
    )

# === Endpoint 2: Chart Data ===

@router.get("/daily-revenue", response_model=DailyRevenueResponse)
def get_daily_revenue_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")

    today = datetime.now(timezone.utc).date()
    seven_days_ago = today - timedelta(days=6)
    lower, _ = period_range("custom", seven_days_ago, today)

    rows = db.query(Sale.created_at, Sale.grand_total).filter(COUNTED, Sale.created_at >= lower).all()

    # Bucket by calendar day; missing days stay at zero
    sales_by_date = {}
    for created_at, grand_total in rows:
        key = created_at.date()
        sales_by_date[key] = sales_by_date.get(key, 0.0) + grand_total

    result_data = []
    for i in range(7):
        current_date = seven_days_ago + timedelta(days=i)
        revenue = round(sales_by_date.get(current_date, 0.0), 2)
        result_data.append(DailyRevenue(date=current_date.strftime("%d/%m"), revenue=revenue))

    return DailyRevenueResponse(data=result_data)

# === Endpoint 3: Top 5 Products ===

@router.get("/top-products", response_model=TopProductsResponse)
def get_top_products_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")

    lower, upper = period_range("month")

    # Aggregate sold quantity by product for the current month
    top_products_query = (
        db.query(
            Product.id.label("product_id"),
            Product.name.label("product_name"),
            func.sum(SaleItem.quantity).label("total_quantity_sold")
        )
        .join(SaleItem, SaleItem.product_id == Product.id)
        .join(Sale, Sale.id == SaleItem.sale_id)
        .filter(COUNTED, Sale.created_at >= lower, Sale.created_at < upper)
        .group_by(Product.id, Product.name)
        .order_by(func.sum(SaleItem.quantity).desc())
        .limit(5)
        .all()
    )

    return TopProductsResponse(data=[
        TopProduct(product_id=r.product_id, product_name=r.product_name,
                   total_quantity_sold=int(r.total_quantity_sold or 0))
        for r in top_products_query
    ])
