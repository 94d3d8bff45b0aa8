# stockpos/schemas/sale.py
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PaymentMethodName = Literal["cash", "card", "mobile_money"]


class SaleItemIn(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    # Defaults to the product's sell price
    unit_price: Optional[float] = Field(None, ge=0)


class SaleCreate(BaseModel):
    items: List[SaleItemIn] = Field(min_length=1)
    discount_percent: float = Field(0, ge=0, le=100)
    # Defaults to the store's default tax rate
    tax_percent: Optional[float] = Field(None, ge=0)
    payment_method: PaymentMethodName = "cash"


class TotalsRequest(BaseModel):
    items: List[SaleItemIn]
    discount_percent: float = Field(0, ge=0, le=100)
    tax_percent: Optional[float] = Field(None, ge=0)


class TotalsOut(BaseModel):
    subtotal: float
    discount_amount: float
    net_before_tax: float
    tax_amount: float
    grand_total: float


class SaleItemOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    unit_price: float
    line_total: float

    model_config = ConfigDict(from_attributes=True)


class SaleOut(BaseModel):
    id: int
    cashier_id: int
    cashier_email: Optional[str] = None
    subtotal: float
    discount_percent: float
    discount_amount: float
    net_before_tax: float
    tax_percent: float
    tax_amount: float
    grand_total: float
    payment_method: str
    status: str
    created_at: Optional[datetime] = None
    items: List[SaleItemOut] = []
    allowed_actions: List[str] = []

    model_config = ConfigDict(from_attributes=True)


class SalePage(BaseModel):
    items: List[SaleOut]
    total: int
    page: int
    page_size: int


# Cashier's own sales over a period
class PaymentBreakdown(BaseModel):
    count: int
    revenue: float


class MySalesSummary(BaseModel):
    date_from: datetime
    date_to: datetime
    total_sales: int
    total_revenue: float
    average_basket: float
    today_sales: int
    by_payment_method: Dict[str, PaymentBreakdown]
    items: List[SaleOut]
