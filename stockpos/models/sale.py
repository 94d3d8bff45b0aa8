# stockpos/models/sale.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from stockpos.database import Base


# Point-of-sale transaction. Immutable once recorded except for its status.
class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    cashier_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Monetary values are stored rounded to 2 decimals
    subtotal = Column(Float, nullable=False)
    discount_percent = Column(Float, nullable=False, default=0)
    discount_amount = Column(Float, nullable=False, default=0)
    net_before_tax = Column(Float, nullable=False)
    tax_percent = Column(Float, nullable=False, default=0)
    tax_amount = Column(Float, nullable=False, default=0)
    grand_total = Column(Float, nullable=False)

    payment_method = Column(String, nullable=False)  # cash / card / mobile_money
    status = Column(String, nullable=False, default="valid", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    cashier = relationship("User")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")

    @property
    def cashier_email(self):
        return self.cashier.email if self.cashier else None


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    line_total = Column(Float, nullable=False)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")

    @property
    def product_name(self):
        return self.product.name if self.product else None
