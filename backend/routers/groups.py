"""Groups router: create, read, update, delete groups."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import models
import schemas
from database import get_db
from utils.snapshots import group_snapshot, load_group
from utils.validation import get_group_or_404, get_member_or_404


router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("", response_model=schemas.Group)
def create_group(
    group: schemas.GroupCreate,
    db: Session = Depends(get_db)
):
    # Validate all members exist before creating anything
    member_ids = list(dict.fromkeys(group.member_ids))
    for member_id in member_ids:
        get_member_or_404(db, member_id)

    db_group = models.Group(
        name=group.name,
        description=group.description,
        category=group.category,
        default_currency=group.default_currency
    )
    db.add(db_group)
    db.commit()
    db.refresh(db_group)

    # Added one by one so row ids keep the requested order
    for member_id in member_ids:
        db.add(models.GroupMember(group_id=db_group.id, member_id=member_id))
        db.flush()
    db.commit()

    return group_snapshot(db, db_group)


@router.get("", response_model=list[schemas.Group])
def read_groups(db: Session = Depends(get_db)):
    groups = db.query(models.Group).order_by(models.Group.id).all()
    return [group_snapshot(db, g) for g in groups]


@router.get("/{group_id}", response_model=schemas.Group)
def get_group(group_id: int, db: Session = Depends(get_db)):
    return load_group(db, group_id)


@router.put("/{group_id}", response_model=schemas.Group)
def update_group(
    group_id: int,
    group_update: schemas.GroupUpdate,
    db: Session = Depends(get_db)
):
    group = get_group_or_404(db, group_id)
    group.name = group_update.name
    group.description = group_update.description
    group.category = group_update.category
    group.default_currency = group_update.default_currency
    db.commit()
    db.refresh(group)
    return group_snapshot(db, group)


@router.delete("/{group_id}")
def delete_group(group_id: int, db: Session = Depends(get_db)):
    get_group_or_404(db, group_id)

    # Expenses belong to exactly one group, so they go with it
    expense_ids = [e.id for e in db.query(models.Expense.id).filter(models.Expense.group_id == group_id).all()]
    if expense_ids:
        db.query(models.ExpensePayer).filter(models.ExpensePayer.expense_id.in_(expense_ids)).delete(synchronize_session=False)
        db.query(models.ExpenseSplit).filter(models.ExpenseSplit.expense_id.in_(expense_ids)).delete(synchronize_session=False)
        db.query(models.Expense).filter(models.Expense.id.in_(expense_ids)).delete(synchronize_session=False)

    db.query(models.GroupMember).filter(models.GroupMember.group_id == group_id).delete()
    db.query(models.Group).filter(models.Group.id == group_id).delete()
    db.commit()

    return {"message": "Group deleted successfully"}
