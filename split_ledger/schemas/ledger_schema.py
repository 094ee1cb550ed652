from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from decimal import Decimal
from split_ledger.schemas.group_schema import GroupOut, GroupMemberOut
from split_ledger.schemas.expense_schema import ExpenseWithSplits
from split_ledger.schemas.settlement_schema import SettlementOut


class OwesEntry(BaseModel):
    to: str
    amount: Decimal


class OwedByEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_user_id: str = Field(..., alias="from")
    amount: Decimal


class MemberBalance(BaseModel):
    member_id: str
    name: Optional[str] = None
    image_url: Optional[str] = None
    total_balance: Decimal
    owes: List[OwesEntry] = []
    owed_by: List[OwedByEntry] = []


class SuggestedSettlement(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_user_id: str = Field(..., alias="from")
    to_user_id: str = Field(..., alias="to")
    amount: Decimal


class GroupLedgerOut(BaseModel):
    group: GroupOut
    members: List[GroupMemberOut] = []
    expenses: List[ExpenseWithSplits] = []
    settlements: List[SettlementOut] = []
    balances: List[MemberBalance] = []
    suggested_settlements: List[SuggestedSettlement] = []
