"""Load point-in-time group and expense snapshots for the ledger, and record settlements.

The balance and settlement functions never touch the database. Routers call
these helpers to build plain schema snapshots, pass them in, and hand
confirmed settlements back to ``mark_settled``.
"""

import logging
from decimal import Decimal
from typing import Iterable, List

from sqlalchemy.orm import Session

import models
import schemas
from utils.currency import from_cents
from utils.validation import get_group_or_404


logger = logging.getLogger(__name__)


def group_snapshot(db: Session, group: models.Group) -> schemas.Group:
    """Build a Group schema with members in the order they joined."""
    rows = db.query(models.Member).join(
        models.GroupMember, models.GroupMember.member_id == models.Member.id
    ).filter(
        models.GroupMember.group_id == group.id
    ).order_by(models.GroupMember.id).all()

    return schemas.Group(
        id=group.id,
        name=group.name,
        description=group.description,
        category=group.category,
        default_currency=group.default_currency or "USD",
        members=[schemas.Member.model_validate(m) for m in rows]
    )


def load_group(db: Session, group_id: int) -> schemas.Group:
    """Group provider: snapshot of a group, 404 if it does not exist."""
    return group_snapshot(db, get_group_or_404(db, group_id))


def expense_snapshots(db: Session, expenses: List[models.Expense]) -> List[schemas.Expense]:
    """Build Expense schemas, loading payers and splits in two queries."""
    expense_ids = [e.id for e in expenses]
    if not expense_ids:
        return []

    payers = {}
    for p in db.query(models.ExpensePayer).filter(
        models.ExpensePayer.expense_id.in_(expense_ids)
    ).order_by(models.ExpensePayer.id).all():
        payers.setdefault(p.expense_id, []).append(
            schemas.PaidByEntry(member_id=p.member_id, amount=from_cents(p.amount))
        )

    splits = {}
    for s in db.query(models.ExpenseSplit).filter(
        models.ExpenseSplit.expense_id.in_(expense_ids)
    ).order_by(models.ExpenseSplit.id).all():
        splits.setdefault(s.expense_id, []).append(schemas.SplitEntry(
            member_id=s.member_id,
            amount=from_cents(s.amount),
            shares=Decimal(s.shares) if s.shares is not None else None,
            percentage=Decimal(s.percentage) if s.percentage is not None else None
        ))

    return [
        schemas.Expense(
            id=e.id,
            group_id=e.group_id,
            title=e.title,
            amount=from_cents(e.amount),
            paid_by=payers.get(e.id, []),
            split_between=splits.get(e.id, []),
            split_method=e.split_method or schemas.SplitMethod.EQUAL,
            settled=bool(e.settled),
            date=e.date,
            created_at=e.created_at,
            category=e.category,
            notes=e.notes
        )
        for e in expenses
    ]


def load_group_expenses(db: Session, group_id: int) -> List[schemas.Expense]:
    """Expense provider: every expense of a group, newest first."""
    expenses = db.query(models.Expense).filter(
        models.Expense.group_id == group_id
    ).order_by(models.Expense.date.desc(), models.Expense.id.desc()).all()
    return expense_snapshots(db, expenses)


def mark_settled(db: Session, expense_ids: Iterable[int]) -> int:
    """Settlement sink: flag expenses settled. Returns how many changed."""
    expense_ids = list(expense_ids)
    if not expense_ids:
        return 0

    updated = db.query(models.Expense).filter(
        models.Expense.id.in_(expense_ids),
        models.Expense.settled == False
    ).update({models.Expense.settled: True}, synchronize_session=False)
    db.commit()

    logger.info(f"Marked {updated} expense(s) settled: {expense_ids}")
    return updated
