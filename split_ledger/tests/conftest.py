"""
Pytest configuration and fixtures for split_ledger tests.
"""
import pytest
from datetime import datetime
from decimal import Decimal
from typing import Dict, List

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from split_ledger.db.database import Base
from split_ledger.models import groups, expenses, settlements  # noqa: F401  register tables
from split_ledger.schemas.group_schema import GroupCreate, GroupMemberIn
from split_ledger.schemas.expense_schema import ExpenseCreate, ExpenseSplitCreate


def expense(payer: str, shares: Dict[str, str], paid: tuple = ()) -> Dict:
    """Build an engine expense record from {member: amount} shares."""
    return {
        "payer": payer,
        "splits": [
            {"member": member, "amount": Decimal(amount), "paid": member in paid}
            for member, amount in shares.items()
        ],
    }


def settlement(payer: str, receiver: str, amount: str) -> Dict:
    return {"payer": payer, "receiver": receiver, "amount": Decimal(amount)}


@pytest.fixture
def abc_members():
    return [
        {"id": "A", "name": "Alice", "image_url": None},
        {"id": "B", "name": "Bob", "image_url": None},
        {"id": "C", "name": "Carol", "image_url": "https://img.example/c.png"},
    ]


@pytest.fixture
def sample_balances():
    """Sample balances for testing."""
    return {
        "A": Decimal("66.67"),
        "B": Decimal("-10.00"),
        "C": Decimal("-43.34"),
        "D": Decimal("-13.33")
    }


def verify_settlements_settle_debts(balances: Dict[str, Decimal], suggestions: List[Dict]) -> None:
    """
    Helper to verify suggested settlements settle all debts.

    Paying money raises the payer's balance toward zero and lowers the
    receiver's; after every suggestion is applied each member must sit
    within one cent of zero.
    """
    final = dict(balances)

    for suggestion in suggestions:
        final[suggestion["from"]] += suggestion["amount"]
        final[suggestion["to"]] -= suggestion["amount"]

    for user, final_balance in final.items():
        assert abs(final_balance) <= Decimal("0.01"), \
            f"User {user} not settled: initial={balances[user]}, final={final_balance}"


@pytest.fixture
def db_session():
    """In-memory SQLite session shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def trip_group(db_session):
    """Group of A (admin), B and C."""
    from split_ledger.services.group_service import create_group

    return create_group(
        db_session,
        GroupCreate(
            name="Trip",
            description="Weekend away",
            display_name="Alice",
            members=[
                GroupMemberIn(user_id="B", display_name="Bob"),
                GroupMemberIn(user_id="C", display_name="Carol"),
            ]
        ),
        "A"
    )


def expense_create(amount: str, shares: Dict[str, str], paid_by: str = None, paid: tuple = ()) -> ExpenseCreate:
    return ExpenseCreate(
        amount=Decimal(amount),
        description="Dinner",
        date=datetime(2024, 5, 1, 19, 30),
        paid_by=paid_by,
        splits=[
            ExpenseSplitCreate(user_id=member, amount=Decimal(value), paid=member in paid)
            for member, value in shares.items()
        ]
    )
