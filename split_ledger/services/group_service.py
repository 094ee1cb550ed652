import logging
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, func
from fastapi import HTTPException
from typing import List, Optional
from split_ledger.config import settings
from split_ledger.models.groups import Group, GroupMember, MemberRole
from split_ledger.schemas.group_schema import (
    GroupCreate, GroupUpdate, GroupMemberIn, GroupSummaryOut
)

logger = logging.getLogger(__name__)


def _check_member_limit(members: List[GroupMemberIn], creator_id: str) -> None:
    """Validate the list of OTHER participants against the group size limit"""
    max_others = settings.max_group_members - 1
    if len(members) > max_others:
        raise HTTPException(
            status_code=400,
            detail=f"Group limit reached: Max {settings.max_group_members} members allowed (you + {max_others} others)."
        )

    user_ids = [m.user_id for m in members]
    if creator_id in user_ids:
        raise HTTPException(status_code=400, detail="Do not list yourself among the other members")
    if len(set(user_ids)) != len(user_ids):
        raise HTTPException(status_code=400, detail="Duplicate members in request")


def _member_has_records(db: Session, group_id: str, user_id: str) -> bool:
    """Check whether any expense, split or settlement in the group names the user"""
    from split_ledger.models.expenses import Expense, ExpenseSplit
    from split_ledger.models.settlements import Settlement

    paid = db.query(Expense.id).filter(and_(Expense.group_id == group_id, Expense.paid_by == user_id)).first()
    if paid:
        return True

    owes = db.query(ExpenseSplit.id).join(Expense, ExpenseSplit.expense_id == Expense.id)\
        .filter(and_(Expense.group_id == group_id, ExpenseSplit.user_id == user_id)).first()
    if owes:
        return True

    settled = db.query(Settlement.id).filter(
        and_(
            Settlement.group_id == group_id,
            or_(Settlement.paid_by_user_id == user_id, Settlement.received_by_user_id == user_id)
        )
    ).first()
    return settled is not None


def _next_position(db: Session, group_id: str) -> int:
    current = db.query(func.max(GroupMember.position)).filter(GroupMember.group_id == group_id).scalar()
    return 0 if current is None else current + 1


def create_group(db: Session, group_data: GroupCreate, created_by: str) -> Group:
    """Create a new group with the creator as admin plus the listed members"""
    _check_member_limit(group_data.members, created_by)

    group = Group(
        name=group_data.name,
        description=group_data.description,
        created_by=created_by
    )
    db.add(group)
    db.flush()

    db.add(GroupMember(
        group_id=group.id,
        position=0,
        user_id=created_by,
        display_name=group_data.display_name,
        image_url=group_data.image_url,
        role=MemberRole.admin
    ))
    for position, member in enumerate(group_data.members, start=1):
        db.add(GroupMember(
            group_id=group.id,
            position=position,
            user_id=member.user_id,
            display_name=member.display_name,
            image_url=member.image_url,
            role=MemberRole.member
        ))

    db.commit()
    db.refresh(group)
    logger.info(f"Group {group.id} created by {created_by} with {len(group_data.members) + 1} members")
    return group


def get_group(db: Session, group_id: str) -> Optional[Group]:
    """Get a group by ID"""
    return db.query(Group).filter(Group.id == group_id).first()


def get_group_or_404(db: Session, group_id: str) -> Group:
    group = get_group(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


def get_user_groups(db: Session, user_id: str) -> List[GroupSummaryOut]:
    """Get all groups for a user, with member counts"""
    groups = db.query(Group).join(GroupMember, GroupMember.group_id == Group.id)\
        .filter(GroupMember.user_id == user_id)\
        .order_by(Group.created_at, Group.id).all()

    return [
        GroupSummaryOut(
            id=group.id,
            name=group.name,
            description=group.description,
            member_count=db.query(GroupMember).filter(GroupMember.group_id == group.id).count()
        )
        for group in groups
    ]


def update_group(db: Session, group_id: str, update_data: GroupUpdate, user_id: str) -> Group:
    """
    Update a group (admin only).

    When members are given they replace the full list of OTHER participants.
    The caller keeps their admin membership; retained members keep their row
    and join order, dropped members are removed, new ones join as members.
    Members named in any of the group's expenses or settlements cannot be
    dropped (400).
    """
    group = get_group_or_404(db, group_id)

    if not is_group_admin(db, group_id, user_id):
        logger.warning(f"User {user_id} attempted to update group {group_id} without admin rights")
        raise HTTPException(status_code=403, detail="Only admins can edit group")

    if update_data.members is not None:
        _check_member_limit(update_data.members, user_id)
        kept = {m.user_id for m in update_data.members} | {user_id}
        for member in get_group_members(db, group_id):
            if member.user_id not in kept and _member_has_records(db, group_id, member.user_id):
                raise HTTPException(
                    status_code=400,
                    detail=f"User {member.user_id} has expenses or settlements in this group and cannot be removed"
                )

    if update_data.name is not None:
        group.name = update_data.name
    if update_data.description is not None:
        group.description = update_data.description

    if update_data.members is not None:
        wanted = {m.user_id: m for m in update_data.members}

        for member in get_group_members(db, group_id):
            if member.user_id == user_id:
                continue
            if member.user_id in wanted:
                incoming = wanted.pop(member.user_id)
                member.display_name = incoming.display_name or member.display_name
                member.image_url = incoming.image_url or member.image_url
            else:
                db.delete(member)

        position = _next_position(db, group_id)
        for incoming in update_data.members:
            if incoming.user_id not in wanted:
                continue
            db.add(GroupMember(
                group_id=group_id,
                position=position,
                user_id=incoming.user_id,
                display_name=incoming.display_name,
                image_url=incoming.image_url,
                role=MemberRole.member
            ))
            position += 1

    db.commit()
    db.refresh(group)
    logger.info(f"Group {group_id} updated by {user_id}")
    return group


def delete_group(db: Session, group_id: str, user_id: str):
    """Delete a group with its expenses, splits, settlements and memberships (admin only)"""
    from split_ledger.models.expenses import Expense, ExpenseSplit
    from split_ledger.models.settlements import Settlement

    group = get_group_or_404(db, group_id)

    if not is_group_admin(db, group_id, user_id):
        logger.warning(f"User {user_id} attempted to delete group {group_id} without admin rights")
        raise HTTPException(status_code=403, detail="Only admins can delete group")

    expense_ids = [row.id for row in db.query(Expense.id).filter(Expense.group_id == group_id).all()]
    if expense_ids:
        db.query(ExpenseSplit).filter(ExpenseSplit.expense_id.in_(expense_ids)).delete(synchronize_session=False)
    db.query(Expense).filter(Expense.group_id == group_id).delete(synchronize_session=False)
    db.query(Settlement).filter(Settlement.group_id == group_id).delete(synchronize_session=False)
    db.query(GroupMember).filter(GroupMember.group_id == group_id).delete(synchronize_session=False)

    db.delete(group)
    db.commit()
    logger.info(f"Group {group_id} deleted by {user_id} ({len(expense_ids)} expenses removed)")


def get_group_member(db: Session, group_id: str, user_id: str) -> Optional[GroupMember]:
    return db.query(GroupMember).filter(
        and_(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
    ).first()


def is_group_admin(db: Session, group_id: str, user_id: str) -> bool:
    """Check if user is admin of the group"""
    member = get_group_member(db, group_id, user_id)
    return member is not None and member.role == MemberRole.admin


def is_group_member(db: Session, group_id: str, user_id: str) -> bool:
    """Check if user is member of the group"""
    return get_group_member(db, group_id, user_id) is not None


def require_group_member(db: Session, group_id: str, user_id: str) -> Group:
    """Return the group, or raise 404/403 if it is missing or the user is not in it"""
    group = get_group_or_404(db, group_id)
    if not is_group_member(db, group_id, user_id):
        raise HTTPException(status_code=403, detail="You are not a member of this group")
    return group


def get_group_members(db: Session, group_id: str) -> List[GroupMember]:
    """Get all members of a group in join order"""
    return db.query(GroupMember).filter(GroupMember.group_id == group_id)\
        .order_by(GroupMember.position, GroupMember.joined_at).all()
