"""
Ledger queries for a single group.

Loads a consistent snapshot of the group's members, expenses and settlements,
converts the rows into plain engine records and runs the ledger engine. Nothing
computed here is stored; balances and suggestions are rebuilt on every request.
"""
import logging
from sqlalchemy.orm import Session
from typing import Dict, List, Tuple
from split_ledger.models.groups import GroupMember
from split_ledger.models.expenses import Expense
from split_ledger.models.settlements import Settlement
from split_ledger.schemas.group_schema import GroupOut, GroupMemberOut
from split_ledger.schemas.settlement_schema import SettlementOut
from split_ledger.schemas.ledger_schema import GroupLedgerOut, MemberBalance, SuggestedSettlement
from split_ledger.utils.ledger_engine import compute_group_ledger

logger = logging.getLogger(__name__)


def member_records(members: List[GroupMember]) -> List[Dict]:
    return [
        {"id": m.user_id, "name": m.display_name, "image_url": m.image_url}
        for m in members
    ]


def expense_records(db: Session, expenses: List[Expense]) -> List[Dict]:
    from split_ledger.services.expense_service import get_expense_splits

    return [
        {
            "payer": expense.paid_by,
            "splits": [
                {"member": split.user_id, "amount": split.amount, "paid": split.paid}
                for split in get_expense_splits(db, expense.id)
            ],
        }
        for expense in expenses
    ]


def settlement_records(settlements: List[Settlement]) -> List[Dict]:
    return [
        {"payer": s.paid_by_user_id, "receiver": s.received_by_user_id, "amount": s.amount}
        for s in settlements
    ]


def _compute(db: Session, group_id: str) -> Tuple[List[GroupMember], List[Expense], List[Settlement], Dict]:
    from split_ledger.services.group_service import get_group_members
    from split_ledger.services.expense_service import get_group_expenses
    from split_ledger.services.settlement_service import get_group_settlements

    members = get_group_members(db, group_id)
    expenses = get_group_expenses(db, group_id)
    settlements = get_group_settlements(db, group_id)

    result = compute_group_ledger(
        member_records(members),
        expense_records(db, expenses),
        settlement_records(settlements),
    )
    logger.info(
        f"Ledger for group {group_id}: {len(members)} members, {len(expenses)} expenses, "
        f"{len(settlements)} settlements, {len(result['suggested_settlements'])} suggested payments"
    )
    return members, expenses, settlements, result


def get_group_ledger(db: Session, group_id: str, user_id: str) -> GroupLedgerOut:
    """Full ledger view of a group: members, records, balances and suggested payments"""
    from split_ledger.services.group_service import require_group_member
    from split_ledger.services.expense_service import get_group_expenses_with_splits

    group = require_group_member(db, group_id, user_id)
    members, _, settlements, result = _compute(db, group_id)

    return GroupLedgerOut(
        group=GroupOut.model_validate(group),
        members=[GroupMemberOut.model_validate(m) for m in members],
        expenses=get_group_expenses_with_splits(db, group_id),
        settlements=[SettlementOut.model_validate(s) for s in settlements],
        balances=[MemberBalance.model_validate(b) for b in result["balances"]],
        suggested_settlements=[SuggestedSettlement.model_validate(s) for s in result["suggested_settlements"]],
    )


def get_suggested_settlements(db: Session, group_id: str, user_id: str) -> List[SuggestedSettlement]:
    """Only the suggested payments for a group"""
    from split_ledger.services.group_service import require_group_member

    require_group_member(db, group_id, user_id)
    _, _, _, result = _compute(db, group_id)
    return [SuggestedSettlement.model_validate(s) for s in result["suggested_settlements"]]
