import enum
import uuid
from sqlalchemy.sql import func
from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Text, Integer
from split_ledger.db.database import Base


class MemberRole(str, enum.Enum):
    admin = "admin"
    member = "member"


class Group(Base):
    __tablename__ = "groups"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_by = Column(String, nullable=False)  # Reference to user service (no FK constraint)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


class GroupMember(Base):
    __tablename__ = "group_members"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    group_id = Column(String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # Join order within the group
    user_id = Column(String, nullable=False, index=True)  # Reference to user service
    display_name = Column(String(100), nullable=True)
    image_url = Column(String, nullable=True)
    role = Column(Enum(MemberRole), nullable=False, default=MemberRole.member)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
