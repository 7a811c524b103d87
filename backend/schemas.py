from datetime import date as date_type, datetime
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from utils.currency import SUPPORTED_CURRENCIES


class SplitMethod(str, Enum):
    EQUAL = "EQUAL"
    EXACT = "EXACT"
    SHARES = "SHARES"
    PERCENTAGE = "PERCENTAGE"

class MemberCreate(BaseModel):
    display_name: str
    email: Optional[EmailStr] = None

class Member(BaseModel):
    id: int
    display_name: str
    email: Optional[EmailStr] = None

    class Config:
        from_attributes = True

class GroupBase(BaseModel):
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    default_currency: str = "USD"

    @field_validator('default_currency')
    @classmethod
    def validate_currency(cls, v):
        if v not in SUPPORTED_CURRENCIES:
            raise ValueError(f'Currency must be one of {SUPPORTED_CURRENCIES}')
        return v

class GroupCreate(GroupBase):
    member_ids: list[int] = []

class GroupUpdate(GroupBase):
    pass

class Group(GroupBase):
    """A group snapshot. Members are listed in the order they joined."""
    id: int
    members: list[Member] = []

    class Config:
        from_attributes = True

    @property
    def member_ids(self) -> list[int]:
        return [m.id for m in self.members]

class GroupMemberAdd(BaseModel):
    member_id: int

# Expense schemas
class PaidByEntry(BaseModel):
    member_id: int
    amount: Decimal

class SplitEntry(BaseModel):
    member_id: int
    amount: Decimal
    shares: Optional[Decimal] = None
    percentage: Optional[Decimal] = None

class ExpenseCreate(BaseModel):
    title: str
    amount: Decimal
    date: date_type
    split_method: SplitMethod = SplitMethod.EQUAL
    # Either paid_by or payer_id (single payer covering the full amount)
    paid_by: Optional[list[PaidByEntry]] = None
    payer_id: Optional[int] = None
    # Explicit resolved amounts; when omitted they are derived from split_method
    split_between: Optional[list[SplitEntry]] = None
    participant_ids: Optional[list[int]] = None  # EQUAL; defaults to every group member
    exact_amounts: Optional[dict[int, Decimal]] = None  # EXACT
    shares: Optional[dict[int, Decimal]] = None  # SHARES
    percentages: Optional[dict[int, Decimal]] = None  # PERCENTAGE
    category: Optional[str] = None
    notes: Optional[str] = None

class Expense(BaseModel):
    id: int
    group_id: int
    title: str
    amount: Decimal
    paid_by: list[PaidByEntry]
    split_between: list[SplitEntry]
    split_method: SplitMethod = SplitMethod.EQUAL
    settled: bool = False
    date: date_type
    created_at: datetime
    category: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True

# Derived views
class Settlement(BaseModel):
    """A proposed payment. Regenerated on every request, never stored."""
    id: str
    group_id: int
    from_user: int
    to_user: int
    amount: Decimal
    date: datetime
    status: Literal["pending"] = "pending"

class MemberBalance(BaseModel):
    member_id: int
    display_name: str
    amount: Decimal  # Positive means the member is owed, negative means they owe

class GroupBalances(BaseModel):
    group_id: int
    currency: str
    balances: list[MemberBalance]

class SettlePairRequest(BaseModel):
    from_user: int
    to_user: int

class SettleResult(BaseModel):
    settled_expense_ids: list[int] = Field(default_factory=list)

class UserBalance(BaseModel):
    """Totals for one member across every group they belong to."""
    member_id: int
    total_owed: Decimal  # What the member owes others
    total_owed_to_user: Decimal  # What others owe the member
