# stockpos/schemas/stock.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional, Literal

# Define allowed types for stock movements
StockMovementType = Literal["in", "out", "return", "loss"]


# Schema for creating a new stock movement
class StockMovementCreate(BaseModel):
    product_id: int
    type: StockMovementType
    quantity: int = Field(gt=0)
    comment: Optional[str] = None


# Schema for returning stock movement details
class StockMovementResponse(BaseModel):
    id: int
    product_id: int
    type: str
    quantity: int
    comment: Optional[str] = None
    user_id: int
    created_at: Optional[datetime] = None
    product_name: Optional[str] = None
    user_email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# Result of recording a movement: the ledger row plus the product's new level
class StockMovementResult(StockMovementResponse):
    stock_quantity: int
    low_stock: bool


# Paginated response for stock movement history
class StockMovementPage(BaseModel):
    items: List[StockMovementResponse]
    total: int
    page: int
    page_size: int


# What a movement would do, without recording it
class StockPreview(BaseModel):
    product_id: int
    current_stock: int
    new_stock: Optional[int] = None
    allowed: bool
    low_stock_after: bool
