"""Expenses router: create, read, delete and settle expenses."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

import models
import schemas
from database import get_db
from utils.balances import find_unknown_members, validate_expense
from utils.currency import to_cents, to_money
from utils.errors import LedgerError, UnknownMember
from utils.snapshots import expense_snapshots, load_group, load_group_expenses, mark_settled
from utils.splits import absorb_rounding, calculate_splits
from utils.validation import get_expense_or_404


logger = logging.getLogger(__name__)

router = APIRouter(tags=["expenses"])


def resolve_expense(expense: schemas.ExpenseCreate, group: schemas.Group) -> schemas.ExpenseCreate:
    """
    Fill in paid_by and split_between on a create request and validate it.

    Raises:
        LedgerError: split inputs cannot be resolved, totals do not match the
            amount, or an entry references someone outside the group.
    """
    if expense.paid_by is None:
        if expense.payer_id is None:
            raise HTTPException(status_code=400, detail="Either paid_by or payer_id is required")
        expense.paid_by = [schemas.PaidByEntry(member_id=expense.payer_id, amount=expense.amount)]

    if expense.split_between is None:
        if expense.split_method == schemas.SplitMethod.EQUAL:
            member_ids = expense.participant_ids or group.member_ids
        else:
            member_ids = group.member_ids
        expense.split_between = calculate_splits(
            expense.amount,
            expense.split_method,
            member_ids,
            exact_amounts=expense.exact_amounts,
            shares=expense.shares,
            percentages=expense.percentages
        )

    # Zero entries carry no money
    expense.paid_by = [p for p in expense.paid_by if p.amount != 0]
    expense.split_between = [s for s in expense.split_between if s.amount != 0]

    validate_expense(expense)

    # Stored totals must match exactly, or cent differences pile up across expenses
    expense.amount = to_money(expense.amount)
    expense.paid_by = absorb_rounding(expense.amount, expense.paid_by)
    expense.split_between = absorb_rounding(expense.amount, expense.split_between)

    unknown = find_unknown_members(group, expense)
    if unknown:
        raise UnknownMember(group.id, unknown)

    return expense


@router.post("/groups/{group_id}/expenses", response_model=schemas.Expense)
def create_expense(
    group_id: int,
    expense: schemas.ExpenseCreate,
    db: Session = Depends(get_db)
):
    group = load_group(db, group_id)

    if not expense.title.strip():
        raise HTTPException(status_code=400, detail="Title cannot be empty")

    try:
        expense = resolve_expense(expense, group)
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    db_expense = models.Expense(
        group_id=group_id,
        title=expense.title.strip(),
        amount=to_cents(expense.amount),
        split_method=expense.split_method.value,
        settled=False,
        date=expense.date,
        category=expense.category,
        notes=expense.notes
    )
    db.add(db_expense)
    db.commit()
    db.refresh(db_expense)

    for payer in expense.paid_by:
        db.add(models.ExpensePayer(
            expense_id=db_expense.id,
            member_id=payer.member_id,
            amount=to_cents(payer.amount)
        ))

    for split in expense.split_between:
        db.add(models.ExpenseSplit(
            expense_id=db_expense.id,
            member_id=split.member_id,
            amount=to_cents(split.amount),
            shares=str(split.shares) if split.shares is not None else None,
            percentage=str(split.percentage) if split.percentage is not None else None
        ))

    db.commit()
    logger.info(f"Created expense {db_expense.id} in group {group_id}")
    return expense_snapshots(db, [db_expense])[0]


@router.get("/groups/{group_id}/expenses", response_model=list[schemas.Expense])
def read_group_expenses(group_id: int, db: Session = Depends(get_db)):
    load_group(db, group_id)
    return load_group_expenses(db, group_id)


@router.get("/expenses/{expense_id}", response_model=schemas.Expense)
def get_expense(expense_id: int, db: Session = Depends(get_db)):
    expense = get_expense_or_404(db, expense_id)
    return expense_snapshots(db, [expense])[0]


@router.delete("/expenses/{expense_id}")
def delete_expense(expense_id: int, db: Session = Depends(get_db)):
    expense = get_expense_or_404(db, expense_id)

    db.query(models.ExpensePayer).filter(models.ExpensePayer.expense_id == expense.id).delete()
    db.query(models.ExpenseSplit).filter(models.ExpenseSplit.expense_id == expense.id).delete()
    db.delete(expense)
    db.commit()

    return {"message": "Expense deleted successfully"}


@router.post("/expenses/{expense_id}/settle", response_model=schemas.Expense)
def settle_expense(expense_id: int, db: Session = Depends(get_db)):
    """Mark a single expense settled so it no longer counts towards balances."""
    expense = get_expense_or_404(db, expense_id)
    mark_settled(db, [expense.id])
    db.refresh(expense)
    return expense_snapshots(db, [expense])[0]
