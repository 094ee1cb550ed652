import logging
from sqlalchemy.orm import Session
from fastapi import HTTPException
from typing import List
from split_ledger.models.settlements import Settlement
from split_ledger.schemas.settlement_schema import SettlementCreate

logger = logging.getLogger(__name__)


def create_settlement(db: Session, group_id: str, settlement_data: SettlementCreate, user_id: str) -> Settlement:
    """Record money that actually changed hands between two members"""
    from split_ledger.services.group_service import is_group_member

    if not is_group_member(db, group_id, settlement_data.paid_by_user_id):
        raise HTTPException(status_code=400, detail="Payer is not a member of this group")

    if not is_group_member(db, group_id, settlement_data.received_by_user_id):
        raise HTTPException(status_code=400, detail="Receiver is not a member of this group")

    if settlement_data.paid_by_user_id == settlement_data.received_by_user_id:
        raise HTTPException(status_code=400, detail="Payer and receiver must be different members")

    # Users can only record settlements they're involved in
    if user_id not in [settlement_data.paid_by_user_id, settlement_data.received_by_user_id]:
        raise HTTPException(status_code=403, detail="You can only create settlements you're involved in")

    settlement = Settlement(
        group_id=group_id,
        paid_by_user_id=settlement_data.paid_by_user_id,
        received_by_user_id=settlement_data.received_by_user_id,
        amount=settlement_data.amount,
        note=settlement_data.note
    )
    db.add(settlement)
    db.commit()
    db.refresh(settlement)
    logger.info(
        f"Settlement {settlement.id}: {settlement.paid_by_user_id} paid "
        f"{settlement.received_by_user_id} {settlement.amount} in group {group_id}"
    )
    return settlement


def get_group_settlements(db: Session, group_id: str) -> List[Settlement]:
    """Get all settlements for a group, oldest first"""
    return db.query(Settlement).filter(Settlement.group_id == group_id)\
        .order_by(Settlement.settled_at, Settlement.id).all()
