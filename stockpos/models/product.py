# stockpos/models/product.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from stockpos.database import Base


# Catalog entry with prices, on-hand quantity and the low-stock threshold.
# stock_quantity only changes through stock movements once the product exists.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String)

    buy_price = Column(Float, CheckConstraint("buy_price >= 0"), nullable=False, default=0)
    sell_price = Column(Float, CheckConstraint("sell_price >= 0"), nullable=False)

    stock_quantity = Column(Integer, CheckConstraint("stock_quantity >= 0"), nullable=False, default=0)
    min_stock = Column(Integer, CheckConstraint("min_stock >= 0"), nullable=False, default=0)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    image_url = Column(String, nullable=True)

    # active -> pending_deletion -> deleted
    status = Column(String, nullable=False, default="active", index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", back_populates="products")
    owner = relationship("User")

    @property
    def low_stock(self) -> bool:
        return (self.stock_quantity or 0) <= (self.min_stock or 0)
