# stockpos/schemas/reports.py
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel


# Dashboard cards
class DashboardStats(BaseModel):
    total_sales: int
    total_revenue: float
    total_products: int
    low_stock_count: int
    today_sales: int
    today_revenue: float
    pending_validations: int


class DailyRevenue(BaseModel):
    date: date
    sales: int
    revenue: float


class TopProduct(BaseModel):
    product_id: int
    product_name: str
    quantity_sold: int
    revenue: float


class SalesReport(BaseModel):
    date_from: date
    date_to: date
    total_sales: int
    total_revenue: float
    average_basket: float
    by_payment_method: Dict[str, float]
    daily: List[DailyRevenue]
    top_products: List[TopProduct]


# Schemas for low stock alerting
class LowStockItem(BaseModel):
    product_id: int
    name: str
    category: Optional[str] = None
    stock_quantity: int
    min_stock: int


class CategoryStock(BaseModel):
    category_id: Optional[int] = None
    category: str
    products: int
    units: int
    stock_value: float


class StockReport(BaseModel):
    date_from: date
    date_to: date
    total_products: int
    total_units: int
    stock_value: float
    low_stock: List[LowStockItem]
    out_of_stock: List[LowStockItem]
    by_category: List[CategoryStock]
    movements_by_type: Dict[str, int]


class UserActivity(BaseModel):
    user_id: int
    email: str
    role: str
    status: str
    sales: int
    revenue: float
    movements: int


class UsersReport(BaseModel):
    date_from: date
    date_to: date
    total_users: int
    active_users: int
    by_role: Dict[str, int]
    activity: List[UserActivity]
