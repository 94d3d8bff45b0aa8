# stockpos/models/log.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, JSON, func
from sqlalchemy.orm import relationship
from stockpos.database import Base


# Who did what and when: logins, catalog and stock changes, sales, approvals, exports
class Log(Base):
    __tablename__ = "logs"
    __table_args__ = (
        # Per-user activity timeline
        Index("ix_logs_user_ts", "user_id", "ts"),
    )

    id = Column(Integer, primary_key=True, index=True)

    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    action = Column(String(50), index=True)  # e.g. SALE_CREATE, VALIDATION_APPROVE
    resource = Column(String(50), index=True)
    status = Column(String(20), index=True)  # SUCCESS / FAIL
    ip = Column(String(64), nullable=True)

    # Ids and values the action touched
    meta = Column(JSON, nullable=True)

    user = relationship("User", lazy="joined", uselist=False)

    @property
    def user_email(self):
        return self.user.email if self.user else None
