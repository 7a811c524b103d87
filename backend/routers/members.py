"""Members router: create members and manage group membership."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

import models
import schemas
from database import get_db
from utils.validation import (
    get_group_or_404,
    get_member_or_404,
    get_group_membership,
    member_has_expenses
)


router = APIRouter(tags=["members"])


@router.post("/members", response_model=schemas.Member)
def create_member(member: schemas.MemberCreate, db: Session = Depends(get_db)):
    if not member.display_name.strip():
        raise HTTPException(status_code=400, detail="Display name cannot be empty")

    db_member = models.Member(display_name=member.display_name.strip(), email=member.email)
    db.add(db_member)
    db.commit()
    db.refresh(db_member)
    return db_member


@router.get("/members/{member_id}", response_model=schemas.Member)
def get_member(member_id: int, db: Session = Depends(get_db)):
    return get_member_or_404(db, member_id)


@router.post("/groups/{group_id}/members", response_model=schemas.Member)
def add_group_member(
    group_id: int,
    member_add: schemas.GroupMemberAdd,
    db: Session = Depends(get_db)
):
    get_group_or_404(db, group_id)
    member = get_member_or_404(db, member_add.member_id)

    # Check if already a member
    if get_group_membership(db, group_id, member.id):
        raise HTTPException(status_code=400, detail="Member is already part of this group")

    db.add(models.GroupMember(group_id=group_id, member_id=member.id))
    db.commit()
    return member


@router.delete("/groups/{group_id}/members/{member_id}")
def remove_group_member(
    group_id: int,
    member_id: int,
    db: Session = Depends(get_db)
):
    get_group_or_404(db, group_id)

    membership = get_group_membership(db, group_id, member_id)
    if not membership:
        raise HTTPException(status_code=404, detail="Member not found in this group")

    # Members referenced by an expense stay, otherwise balances would lose a party
    if member_has_expenses(db, group_id, member_id):
        raise HTTPException(
            status_code=400,
            detail="Member has expenses in this group and cannot be removed"
        )

    db.delete(membership)
    db.commit()

    return {"message": "Member removed successfully"}
