from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime
from database import Base


def _utcnow():
    return datetime.now(timezone.utc)

class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    display_name = Column(String, nullable=False)
    email = Column(String, nullable=True)

class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True)
    default_currency = Column(String, default="USD")

class GroupMember(Base):
    __tablename__ = "group_members"

    # Insertion order (id) is the member display order
    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, index=True)
    member_id = Column(Integer, index=True)

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, index=True)
    title = Column(String)
    amount = Column(Integer) # Stored in cents/smallest unit
    split_method = Column(String, default="EQUAL")
    settled = Column(Boolean, default=False, index=True)
    date = Column(Date)
    created_at = Column(DateTime, default=_utcnow)
    category = Column(String, nullable=True)
    notes = Column(String, nullable=True)

class ExpensePayer(Base):
    __tablename__ = "expense_payers"

    id = Column(Integer, primary_key=True, index=True)
    expense_id = Column(Integer, index=True)
    member_id = Column(Integer)
    amount = Column(Integer) # The amount this member fronted, in cents

class ExpenseSplit(Base):
    __tablename__ = "expense_splits"

    id = Column(Integer, primary_key=True, index=True)
    expense_id = Column(Integer, index=True)
    member_id = Column(Integer)
    amount = Column(Integer) # The amount this member owes, in cents
    percentage = Column(String, nullable=True) # Decimal string, PERCENTAGE splits only
    shares = Column(String, nullable=True) # Decimal string, SHARES splits only
