from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from enum import Enum


class MemberRole(str, Enum):
    admin = "admin"
    member = "member"


class GroupMemberIn(BaseModel):
    user_id: str
    display_name: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = None


class GroupBase(BaseModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = None


class GroupCreate(GroupBase):
    # Creator's own display details; the creator is added as admin automatically
    display_name: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = None
    # The OTHER participants
    members: List[GroupMemberIn] = []


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    # Full list of OTHER participants; omit to leave membership untouched
    members: Optional[List[GroupMemberIn]] = None


class GroupOut(GroupBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_by: str
    created_at: datetime


class GroupSummaryOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    member_count: int


class GroupMemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    display_name: Optional[str] = None
    image_url: Optional[str] = None
    role: MemberRole
    joined_at: datetime


class GroupWithMembers(GroupOut):
    members: List[GroupMemberOut] = []
