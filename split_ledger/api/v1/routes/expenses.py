from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from split_ledger.db.database import get_db
from split_ledger.api.v1.deps import get_current_user_id
from split_ledger.services.expense_service import (
    create_expense, get_group_expenses_with_splits, delete_expense, mark_split_paid
)
from split_ledger.services.group_service import get_group_or_404, require_group_member
from split_ledger.schemas.expense_schema import (
    ExpenseCreate, ExpenseOut, ExpenseWithSplits, ExpenseSplitOut
)

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("/groups/{group_id}", response_model=ExpenseOut)
def create_new_expense(
    group_id: str,
    expense_data: ExpenseCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a new expense with splits"""
    get_group_or_404(db, group_id)
    return create_expense(db, group_id, expense_data, user_id)


@router.get("/groups/{group_id}", response_model=List[ExpenseWithSplits])
def get_group_expenses_list(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all expenses for a group"""
    require_group_member(db, group_id, user_id)
    return get_group_expenses_with_splits(db, group_id)


@router.delete("/{expense_id}")
def delete_expense_endpoint(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Delete expense (payer or admin only)"""
    delete_expense(db, expense_id, user_id)
    return {"message": "Expense deleted successfully"}


@router.post("/splits/{split_id}/paid", response_model=ExpenseSplitOut)
def mark_split_as_paid(
    split_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Mark an expense split as already paid"""
    return mark_split_paid(db, split_id, user_id)
