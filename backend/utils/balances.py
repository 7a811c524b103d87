"""Balance calculation: fold a group's expenses into per-member net balances."""

import logging
from decimal import Decimal
from typing import Dict, Iterable, Set

import schemas
from utils.currency import EPSILON, to_money
from utils.errors import InvalidExpense


logger = logging.getLogger(__name__)


def validate_expense(expense) -> None:
    """
    Check that an expense's payer and split totals both match its amount.

    Accepts anything with ``amount``, ``paid_by`` and ``split_between``
    attributes (a stored expense or a resolved create request).

    Raises:
        InvalidExpense: amount is not positive, an entry is negative, or
            either total is off by more than one cent.
    """
    expense_id = getattr(expense, "id", None)
    amount = to_money(expense.amount)
    if amount <= 0:
        raise InvalidExpense(expense_id, f"Expense amount must be positive, got {amount}")

    for entry in list(expense.paid_by) + list(expense.split_between):
        if entry.amount < 0:
            raise InvalidExpense(
                expense_id,
                f"Amount for member {entry.member_id} cannot be negative, got {entry.amount}"
            )

    total_paid = sum((to_money(p.amount) for p in expense.paid_by), Decimal("0"))
    if abs(total_paid - amount) > EPSILON:
        raise InvalidExpense(
            expense_id,
            f"Paid amounts do not sum to total expense amount. Total: {amount}, Sum: {total_paid}"
        )

    total_split = sum((to_money(s.amount) for s in expense.split_between), Decimal("0"))
    if abs(total_split - amount) > EPSILON:
        raise InvalidExpense(
            expense_id,
            f"Split amounts do not sum to total expense amount. Total: {amount}, Sum: {total_split}"
        )


def find_unknown_members(group: schemas.Group, expense) -> Set[int]:
    """Return member ids referenced by the expense that are not in the group."""
    known = set(group.member_ids)
    referenced = {p.member_id for p in expense.paid_by}
    referenced.update(s.member_id for s in expense.split_between)
    return referenced - known


def compute_balances(
    group: schemas.Group,
    expenses: Iterable[schemas.Expense]
) -> Dict[int, Decimal]:
    """
    Calculate net balances for every member of a group.

    Args:
        group: Group snapshot; every member gets an entry, even with no expenses.
        expenses: Expense snapshot. Expenses of other groups and settled
            expenses are ignored.

    Returns:
        Dictionary mapping member_id to net balance. Positive means the member
        is owed money, negative means they owe.

    Raises:
        InvalidExpense: an un-settled expense breaks the sum invariant. The
            whole computation is aborted rather than returning skewed balances.
    """
    balances = {member_id: Decimal("0.00") for member_id in group.member_ids}

    for expense in expenses:
        if expense.group_id != group.id or expense.settled:
            continue

        validate_expense(expense)

        unknown = find_unknown_members(group, expense)
        if unknown:
            # Kept in the arithmetic so balances still sum to zero
            logger.warning(
                f"Expense {expense.id} in group {group.id} references non-members {sorted(unknown)}"
            )

        # Creditor (payer) increases balance
        for payer in expense.paid_by:
            balances[payer.member_id] = balances.get(payer.member_id, Decimal("0.00")) + to_money(payer.amount)

        # Debtor decreases balance
        for split in expense.split_between:
            balances[split.member_id] = balances.get(split.member_id, Decimal("0.00")) - to_money(split.amount)

    return balances


def summarize_member(member_id: int, group_balances: Iterable[Dict[int, Decimal]]) -> schemas.UserBalance:
    """
    Total a member's position across several groups.

    Negative balances add to what the member owes, positive balances to what
    they are owed. Groups where the member is within a cent of zero count as
    settled.
    """
    total_owed = Decimal("0.00")
    total_owed_to_user = Decimal("0.00")

    for balances in group_balances:
        amount = balances.get(member_id, Decimal("0.00"))
        if amount < -EPSILON:
            total_owed += -amount
        elif amount > EPSILON:
            total_owed_to_user += amount

    return schemas.UserBalance(
        member_id=member_id,
        total_owed=total_owed,
        total_owed_to_user=total_owed_to_user
    )
