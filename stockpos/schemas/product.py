# stockpos/schemas/product.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Shared base attributes for product entities
class ProductBase(ORMBase):
    name: str
    description: Optional[str] = None
    buy_price: float = Field(default=0, ge=0)
    sell_price: float = Field(ge=0)
    min_stock: int = Field(default=0, ge=0)
    category_id: Optional[int] = None
    image_url: Optional[str] = None


# Schema for creating a new product; opening stock is set once here
class ProductCreate(ProductBase):
    stock_quantity: int = Field(default=0, ge=0)


# Schema for partial product updates; stock moves through /stock/movements only
class ProductUpdate(ORMBase):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    buy_price: Optional[float] = Field(None, ge=0)
    sell_price: Optional[float] = Field(None, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None
    image_url: Optional[str] = None


class ProductOut(ProductBase):
    id: int
    stock_quantity: int
    low_stock: bool
    status: str
    owner_id: int
    created_at: Optional[datetime] = None
    allowed_actions: List[str] = []


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int
