"""Settlement planning: turn net balances into suggested payments, and pick the
expenses a confirmed payment settles."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List

import schemas
from utils.currency import EPSILON, to_money


def _ordered_ids(group: schemas.Group, balances: Dict[int, Decimal]) -> List[int]:
    """Group member order first, then ids only present in the balance map."""
    ordered = list(group.member_ids)
    seen = set(ordered)
    ordered.extend(member_id for member_id in balances if member_id not in seen)
    return ordered


def compute_settlements(
    group: schemas.Group,
    balances: Dict[int, Decimal]
) -> List[schemas.Settlement]:
    """
    Suggest payments that bring every balance in the group to zero.

    Greedy matching in member order: the first remaining debtor always pays the
    first remaining creditor, regardless of size. This is not guaranteed to be
    the minimum number of payments, but it is deterministic for a given member
    order. Balances within one cent of zero are left out, and members missing
    from ``balances`` count as zero.
    """
    debtors = []
    creditors = []

    for member_id in _ordered_ids(group, balances):
        amount = to_money(balances.get(member_id, Decimal("0")))
        if amount < -EPSILON:
            debtors.append([member_id, -amount])
        elif amount > EPSILON:
            creditors.append([member_id, amount])

    now = datetime.now(timezone.utc)
    settlements = []

    while debtors and creditors:
        debtor = debtors[0]
        creditor = creditors[0]

        amount = min(debtor[1], creditor[1])
        if amount > 0:
            settlements.append(schemas.Settlement(
                id=uuid.uuid4().hex,
                group_id=group.id,
                from_user=debtor[0],
                to_user=creditor[0],
                amount=amount,
                date=now
            ))

        debtor[1] -= amount
        creditor[1] -= amount

        if debtor[1] <= 0:
            debtors.pop(0)
        if creditor[1] <= 0:
            creditors.pop(0)

    return settlements


def settle_pair(
    expenses: Iterable[schemas.Expense],
    from_user: int,
    to_user: int
) -> List[int]:
    """
    Find the un-settled expenses that make up the balance between two members.

    An expense counts when one of the pair fronted money for it and the other
    owes a share of it, in either direction. Marking all of them settled is how
    a "settle up" between the pair is recorded.

    The planner can pair members who never shared an expense (A owes B, B owes
    C, so C pays A). When no expense links the pair directly, every un-settled
    expense either of them appears in is returned instead.
    """
    if from_user == to_user:
        return []

    pair = {from_user, to_user}
    open_expenses = [e for e in expenses if not e.settled]
    expense_ids = []

    for expense in open_expenses:
        payers = {p.member_id for p in expense.paid_by}
        debtors = {s.member_id for s in expense.split_between}
        for payer in payers & pair:
            other = (pair - {payer}).pop()
            if other in debtors:
                expense_ids.append(expense.id)
                break

    if expense_ids:
        return expense_ids

    for expense in open_expenses:
        involved = {p.member_id for p in expense.paid_by}
        involved.update(s.member_id for s in expense.split_between)
        if involved & pair:
            expense_ids.append(expense.id)

    return expense_ids
