import uuid
from sqlalchemy.sql import func
from sqlalchemy import Column, String, DateTime, DECIMAL, Text
from split_ledger.db.database import Base


class Settlement(Base):
    __tablename__ = "settlements"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    group_id = Column(String, nullable=False, index=True)  # Reference to groups
    paid_by_user_id = Column(String, nullable=False, index=True)  # Reference to user service
    received_by_user_id = Column(String, nullable=False, index=True)  # Reference to user service
    amount = Column(DECIMAL(10, 2), nullable=False)
    note = Column(Text, nullable=True)
    settled_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
