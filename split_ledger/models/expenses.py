import uuid
from sqlalchemy.sql import func
from sqlalchemy import Column, String, DateTime, DECIMAL, Text, Boolean, Integer
from split_ledger.db.database import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    group_id = Column(String, nullable=False, index=True)  # Reference to groups (no FK constraint)
    paid_by = Column(String, nullable=False, index=True)  # Reference to user service
    amount = Column(DECIMAL(10, 2), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


class ExpenseSplit(Base):
    __tablename__ = "expense_splits"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    expense_id = Column(String, nullable=False, index=True)  # Reference to expenses
    position = Column(Integer, nullable=False, default=0)  # Order within the expense
    user_id = Column(String, nullable=False, index=True)  # Reference to user service
    amount = Column(DECIMAL(10, 2), nullable=False)
    paid = Column(Boolean, nullable=False, default=False)
