# stockpos/models/store_settings.py
from sqlalchemy import Column, Integer, String, Float, Boolean, CheckConstraint
from stockpos.database import Base


# Single-row table with shop-wide settings
class StoreSettings(Base):
    __tablename__ = "store_settings"

    id = Column(Integer, primary_key=True)
    company_name = Column(String, nullable=False, default="IT Sales Manager")
    company_address = Column(String, nullable=True)
    company_phone = Column(String, nullable=True)
    company_email = Column(String, nullable=True)

    currency = Column(String(3), nullable=False, default="EUR")
    currency_symbol = Column(String(5), nullable=False, default="€")
    default_tax_rate = Column(Float, CheckConstraint("default_tax_rate >= 0"), nullable=False, default=20)
    max_discount_percent = Column(
        Float, CheckConstraint("max_discount_percent >= 0 AND max_discount_percent <= 100"),
        nullable=False, default=10,
    )

    enable_stock_alerts = Column(Boolean, nullable=False, default=True)
    low_stock_threshold = Column(Integer, CheckConstraint("low_stock_threshold >= 0"), nullable=False, default=5)
