from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from split_ledger.db.database import get_db
from split_ledger.api.v1.deps import get_current_user_id
from split_ledger.services.group_service import (
    create_group, get_user_groups, update_group, delete_group,
    get_group_members, require_group_member
)
from split_ledger.schemas.group_schema import (
    GroupCreate, GroupUpdate, GroupOut, GroupSummaryOut, GroupMemberOut, GroupWithMembers
)

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("/", response_model=GroupOut)
def create_new_group(
    group_data: GroupCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a new group"""
    return create_group(db, group_data, user_id)


@router.get("/", response_model=List[GroupSummaryOut])
def get_my_groups(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all groups for current user"""
    return get_user_groups(db, user_id)


@router.get("/{group_id}", response_model=GroupWithMembers)
def get_group_details(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get group details with members"""
    group = require_group_member(db, group_id, user_id)
    members = get_group_members(db, group_id)

    return GroupWithMembers(
        id=group.id,
        name=group.name,
        description=group.description,
        created_by=group.created_by,
        created_at=group.created_at,
        members=[GroupMemberOut.model_validate(m) for m in members]
    )


@router.patch("/{group_id}", response_model=GroupOut)
def update_group_details(
    group_id: str,
    update_data: GroupUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Update group (admin only)"""
    return update_group(db, group_id, update_data, user_id)


@router.delete("/{group_id}")
def delete_group_endpoint(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Delete group with its expenses and settlements (admin only)"""
    delete_group(db, group_id, user_id)
    return {"message": "Group deleted successfully"}
