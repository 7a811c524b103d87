"""Validation utilities: row lookups and group membership checks."""

from sqlalchemy import select
from sqlalchemy.orm import Session
from fastapi import HTTPException

import models


def get_member_or_404(db: Session, member_id: int):
    """Get a member by ID or raise 404 if not found."""
    member = db.query(models.Member).filter(models.Member.id == member_id).first()
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


def get_group_or_404(db: Session, group_id: int):
    """Get a group by ID or raise 404 if not found."""
    group = db.query(models.Group).filter(models.Group.id == group_id).first()
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


def get_expense_or_404(db: Session, expense_id: int):
    """Get an expense by ID or raise 404 if not found."""
    expense = db.query(models.Expense).filter(models.Expense.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


def get_group_membership(db: Session, group_id: int, member_id: int):
    """Return the GroupMember row linking a member to a group, or None."""
    return db.query(models.GroupMember).filter(
        models.GroupMember.group_id == group_id,
        models.GroupMember.member_id == member_id
    ).first()


def verify_group_membership(db: Session, group_id: int, member_id: int):
    """Verify that a member belongs to a group, raise 400 if not."""
    membership = get_group_membership(db, group_id, member_id)
    if not membership:
        raise HTTPException(status_code=400, detail=f"Member {member_id} is not part of this group")
    return membership


def member_has_expenses(db: Session, group_id: int, member_id: int) -> bool:
    """True if the member pays for or owes a share of any expense in the group."""
    expense_ids = select(models.Expense.id).where(models.Expense.group_id == group_id)
    paid = db.query(models.ExpensePayer).filter(
        models.ExpensePayer.expense_id.in_(expense_ids),
        models.ExpensePayer.member_id == member_id
    ).first()
    if paid:
        return True
    owes = db.query(models.ExpenseSplit).filter(
        models.ExpenseSplit.expense_id.in_(expense_ids),
        models.ExpenseSplit.member_id == member_id
    ).first()
    return owes is not None
