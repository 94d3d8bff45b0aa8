# stockpos/schemas/category.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class CategoryOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    status: str
    owner_id: int
    created_at: Optional[datetime] = None
    # What the current user may do with this row (edit, delete, request_deletion...)
    allowed_actions: List[str] = []

    model_config = ConfigDict(from_attributes=True)


class CategoryPage(BaseModel):
    items: List[CategoryOut]
    total: int
    page: int
    page_size: int
