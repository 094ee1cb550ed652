from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class ExpenseSplitBase(BaseModel):
    user_id: str
    amount: Decimal = Field(..., ge=0)
    paid: bool = False


class ExpenseSplitCreate(ExpenseSplitBase):
    pass


class ExpenseSplitOut(ExpenseSplitBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    expense_id: str


class ExpenseBase(BaseModel):
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = None
    date: datetime


class ExpenseCreate(ExpenseBase):
    # Defaults to the caller when omitted
    paid_by: Optional[str] = None
    splits: List[ExpenseSplitCreate] = Field(..., min_length=1)


class ExpenseOut(ExpenseBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    paid_by: str
    created_at: datetime


class ExpenseWithSplits(ExpenseOut):
    splits: List[ExpenseSplitOut] = []
