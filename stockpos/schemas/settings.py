# stockpos/schemas/settings.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StoreSettingsOut(BaseModel):
    company_name: str
    company_address: Optional[str] = None
    company_phone: Optional[str] = None
    company_email: Optional[str] = None
    currency: str
    currency_symbol: str
    default_tax_rate: float
    max_discount_percent: float
    enable_stock_alerts: bool
    low_stock_threshold: int

    model_config = ConfigDict(from_attributes=True)


class StoreSettingsUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=1)
    company_address: Optional[str] = None
    company_phone: Optional[str] = None
    company_email: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    currency_symbol: Optional[str] = Field(None, max_length=5)
    default_tax_rate: Optional[float] = Field(None, ge=0)
    max_discount_percent: Optional[float] = Field(None, ge=0, le=100)
    enable_stock_alerts: Optional[bool] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)
