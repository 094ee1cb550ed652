from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from split_ledger.db.database import get_db
from split_ledger.api.v1.deps import get_current_user_id
from split_ledger.services.settlement_service import create_settlement, get_group_settlements
from split_ledger.services.ledger_service import get_group_ledger, get_suggested_settlements
from split_ledger.services.group_service import get_group_or_404, require_group_member
from split_ledger.schemas.settlement_schema import SettlementCreate, SettlementOut
from split_ledger.schemas.ledger_schema import GroupLedgerOut, SuggestedSettlement

router = APIRouter(prefix="/settlements", tags=["settlements"])


@router.post("/groups/{group_id}", response_model=SettlementOut)
def create_new_settlement(
    group_id: str,
    settlement_data: SettlementCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Record a settlement payment"""
    get_group_or_404(db, group_id)
    return create_settlement(db, group_id, settlement_data, user_id)


@router.get("/groups/{group_id}", response_model=List[SettlementOut])
def get_group_settlements_list(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all settlements for a group"""
    require_group_member(db, group_id, user_id)
    return get_group_settlements(db, group_id)


@router.get("/groups/{group_id}/balances", response_model=GroupLedgerOut)
def get_group_balances(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get pairwise balances, member totals and suggested settlements"""
    return get_group_ledger(db, group_id, user_id)


@router.get("/groups/{group_id}/suggested", response_model=List[SuggestedSettlement])
def get_suggested_settlements_list(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get suggested settlements that clear every balance with the fewest payments"""
    return get_suggested_settlements(db, group_id, user_id)
