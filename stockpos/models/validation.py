# stockpos/models/validation.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Index, text, func
from sqlalchemy.orm import relationship
from stockpos.database import Base


# Approval request linking a requested action to a target entity
class Validation(Base):
    __tablename__ = "validations"
    __table_args__ = (
        # At most one open request per target
        Index(
            "uq_validations_open_target",
            "target_type", "target_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    target_type = Column(String(20), nullable=False, index=True)  # user / category / product / sale
    target_id = Column(Integer, nullable=False, index=True)
    action = Column(String(20), nullable=False)  # deletion / restoration
    status = Column(String(20), nullable=False, default="pending", index=True)

    # Target status when the request was filed, restored on rejection
    prior_status = Column(String(20), nullable=True)

    requested_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    requested_at = Column(DateTime(timezone=True), server_default=func.now())
    resolved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    requester = relationship("User", foreign_keys=[requested_by])
    resolver = relationship("User", foreign_keys=[resolved_by])

    @property
    def requester_email(self):
        return self.requester.email if self.requester else None

    @property
    def resolver_email(self):
        return self.resolver.email if self.resolver else None
