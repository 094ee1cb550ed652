import logging
from sqlalchemy.orm import Session
from fastapi import HTTPException
from typing import List, Optional
from decimal import Decimal
from split_ledger.models.expenses import Expense, ExpenseSplit
from split_ledger.schemas.expense_schema import ExpenseCreate, ExpenseSplitOut, ExpenseWithSplits
from split_ledger.utils.ledger_engine import TOLERANCE

logger = logging.getLogger(__name__)


def create_expense(db: Session, group_id: str, expense_data: ExpenseCreate, user_id: str) -> Expense:
    """Create a new expense with its splits"""
    from .group_service import is_group_member, get_group_members

    if not is_group_member(db, group_id, user_id):
        raise HTTPException(status_code=403, detail="Only group members can create expenses")

    paid_by = expense_data.paid_by or user_id
    group_members = {member.user_id for member in get_group_members(db, group_id)}

    if paid_by not in group_members:
        raise HTTPException(status_code=400, detail=f"Payer {paid_by} is not a member of this group")

    for split in expense_data.splits:
        if split.user_id not in group_members:
            raise HTTPException(status_code=400, detail=f"User {split.user_id} is not a member of this group")

    total_splits = sum((split.amount for split in expense_data.splits), Decimal('0'))
    if abs(total_splits - expense_data.amount) > TOLERANCE:
        raise HTTPException(
            status_code=400,
            detail=f"Split amounts ({total_splits}) must add up to the expense amount ({expense_data.amount})"
        )

    expense = Expense(
        group_id=group_id,
        paid_by=paid_by,
        amount=expense_data.amount,
        description=expense_data.description,
        date=expense_data.date
    )
    db.add(expense)
    db.flush()

    for position, split_data in enumerate(expense_data.splits):
        db.add(ExpenseSplit(
            expense_id=expense.id,
            position=position,
            user_id=split_data.user_id,
            amount=split_data.amount,
            paid=split_data.paid
        ))

    db.commit()
    db.refresh(expense)
    logger.info(f"Expense {expense.id} of {expense_data.amount} recorded in group {group_id} (paid by {paid_by})")
    return expense


def get_expense(db: Session, expense_id: str) -> Optional[Expense]:
    """Get an expense by ID"""
    return db.query(Expense).filter(Expense.id == expense_id).first()


def get_group_expenses(db: Session, group_id: str) -> List[Expense]:
    """Get all expenses for a group, oldest first"""
    return db.query(Expense).filter(Expense.group_id == group_id)\
        .order_by(Expense.created_at, Expense.id).all()


def get_expense_splits(db: Session, expense_id: str) -> List[ExpenseSplit]:
    """Get all splits for an expense in their original order"""
    return db.query(ExpenseSplit).filter(ExpenseSplit.expense_id == expense_id)\
        .order_by(ExpenseSplit.position).all()


def get_group_expenses_with_splits(db: Session, group_id: str) -> List[ExpenseWithSplits]:
    result = []
    for expense in get_group_expenses(db, group_id):
        splits = get_expense_splits(db, expense.id)
        result.append(ExpenseWithSplits(
            id=expense.id,
            group_id=expense.group_id,
            paid_by=expense.paid_by,
            amount=expense.amount,
            description=expense.description,
            date=expense.date,
            created_at=expense.created_at,
            splits=[ExpenseSplitOut.model_validate(split) for split in splits]
        ))
    return result


def delete_expense(db: Session, expense_id: str, user_id: str):
    """Delete an expense (payer or admin only)"""
    from .group_service import is_group_admin

    expense = get_expense(db, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")

    is_admin = is_group_admin(db, expense.group_id, user_id)
    if expense.paid_by != user_id and not is_admin:
        raise HTTPException(status_code=403, detail="Only the payer or a group admin can delete an expense")

    db.query(ExpenseSplit).filter(ExpenseSplit.expense_id == expense_id).delete(synchronize_session=False)
    db.delete(expense)
    db.commit()
    logger.info(f"Expense {expense_id} deleted by {user_id}")


def mark_split_paid(db: Session, split_id: str, user_id: str) -> ExpenseSplit:
    """Flag a split as already paid (the ower or the expense payer only)"""
    split = db.query(ExpenseSplit).filter(ExpenseSplit.id == split_id).first()
    if not split:
        raise HTTPException(status_code=404, detail="Expense split not found")

    expense = get_expense(db, split.expense_id)
    if user_id not in (split.user_id, expense.paid_by):
        raise HTTPException(status_code=403, detail="Only the ower or the payer can mark a split as paid")

    split.paid = True
    db.commit()
    db.refresh(split)
    logger.info(f"Split {split_id} of expense {split.expense_id} marked paid by {user_id}")
    return split
