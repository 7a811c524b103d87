"""Balances router: net balances, suggested settlements and settle-up."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

import models
import schemas
from database import get_db
from utils.balances import compute_balances, summarize_member
from utils.errors import LedgerError
from utils.settlements import compute_settlements, settle_pair
from utils.snapshots import load_group, load_group_expenses, mark_settled
from utils.validation import get_member_or_404, verify_group_membership


router = APIRouter(tags=["balances"])


def _group_balances(group: schemas.Group, expenses: list[schemas.Expense]):
    try:
        return compute_balances(group, expenses)
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/groups/{group_id}/balances", response_model=schemas.GroupBalances)
def get_group_balances(group_id: int, db: Session = Depends(get_db)):
    group = load_group(db, group_id)
    balances = _group_balances(group, load_group_expenses(db, group_id))

    names = {m.id: m.display_name for m in group.members}
    return schemas.GroupBalances(
        group_id=group.id,
        currency=group.default_currency,
        balances=[
            schemas.MemberBalance(
                member_id=member_id,
                display_name=names.get(member_id, "Unknown Member"),
                amount=amount
            )
            for member_id, amount in balances.items()
        ]
    )


@router.get("/groups/{group_id}/settlements", response_model=list[schemas.Settlement])
def get_group_settlements(group_id: int, db: Session = Depends(get_db)):
    """Suggested payments. Ids are regenerated on every call."""
    group = load_group(db, group_id)
    balances = _group_balances(group, load_group_expenses(db, group_id))
    return compute_settlements(group, balances)


@router.post("/groups/{group_id}/settle", response_model=schemas.SettleResult)
def settle_up(
    group_id: int,
    request: schemas.SettlePairRequest,
    db: Session = Depends(get_db)
):
    """Record that two members settled: every expense between them is marked settled."""
    load_group(db, group_id)
    if request.from_user == request.to_user:
        raise HTTPException(status_code=400, detail="Cannot settle up with yourself")
    verify_group_membership(db, group_id, request.from_user)
    verify_group_membership(db, group_id, request.to_user)

    expense_ids = settle_pair(load_group_expenses(db, group_id), request.from_user, request.to_user)
    if not expense_ids:
        raise HTTPException(status_code=400, detail="Nothing to settle between these members")
    mark_settled(db, expense_ids)
    return schemas.SettleResult(settled_expense_ids=sorted(expense_ids))


@router.get("/members/{member_id}/balance", response_model=schemas.UserBalance)
def get_member_balance(member_id: int, db: Session = Depends(get_db)):
    """What a member owes and is owed, summed over all of their groups."""
    get_member_or_404(db, member_id)

    group_ids = [
        gm.group_id for gm in db.query(models.GroupMember).filter(
            models.GroupMember.member_id == member_id
        ).order_by(models.GroupMember.id).all()
    ]

    per_group = []
    for group_id in group_ids:
        group = load_group(db, group_id)
        per_group.append(_group_balances(group, load_group_expenses(db, group_id)))

    return summarize_member(member_id, per_group)
