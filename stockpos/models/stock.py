# stockpos/models/stock.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from stockpos.database import Base


# Append-only ledger entry; rows are never updated or deleted
class StockMovement(Base):
    __tablename__ = "stock_movements"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movements_quantity"),
        CheckConstraint("type IN ('in', 'out', 'return', 'loss')", name="ck_stock_movements_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Movement classification: in, out, return, loss
    type = Column(String, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    comment = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    product = relationship("Product")
    user = relationship("User")

    @property
    def product_name(self):
        return self.product.name if self.product else None

    @property
    def user_email(self):
        return self.user.email if self.user else None
