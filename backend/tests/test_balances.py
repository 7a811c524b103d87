from datetime import date, datetime
from decimal import Decimal

import pytest

import schemas
from utils.balances import compute_balances, find_unknown_members, summarize_member, validate_expense
from utils.errors import InvalidExpense
from utils.splits import absorb_rounding


A, B, C = 1, 2, 3


def make_group(member_ids=(A, B, C), group_id=10):
    return schemas.Group(
        id=group_id,
        name="Trip",
        members=[schemas.Member(id=m, display_name=f"Member {m}") for m in member_ids]
    )


def make_expense(expense_id, paid_by, split_between, group_id=10, settled=False):
    """paid_by / split_between are {member_id: amount} dicts."""
    return schemas.Expense(
        id=expense_id,
        group_id=group_id,
        title=f"Expense {expense_id}",
        amount=sum(Decimal(str(v)) for v in paid_by.values()),
        paid_by=[schemas.PaidByEntry(member_id=m, amount=Decimal(str(v))) for m, v in paid_by.items()],
        split_between=[schemas.SplitEntry(member_id=m, amount=Decimal(str(v))) for m, v in split_between.items()],
        settled=settled,
        date=date(2024, 5, 1),
        created_at=datetime(2024, 5, 1, 12, 0)
    )


def test_equal_split_scenario():
    group = make_group()
    expense = make_expense(1, {A: "90"}, {A: "30", B: "30", C: "30"})

    balances = compute_balances(group, [expense])

    assert balances == {A: Decimal("60.00"), B: Decimal("-30.00"), C: Decimal("-30.00")}


def test_members_without_expenses_are_zero():
    group = make_group()

    balances = compute_balances(group, [])

    assert balances == {A: Decimal("0"), B: Decimal("0"), C: Decimal("0")}
    assert all(v == 0 for v in balances.values())


def test_single_member_group():
    group = make_group(member_ids=(A,))
    expense = make_expense(1, {A: "25.50"}, {A: "25.50"})

    assert compute_balances(group, [expense]) == {A: Decimal("0.00")}


def test_balances_sum_to_zero():
    group = make_group()
    expenses = [
        make_expense(1, {A: "100.00"}, {A: "33.34", B: "33.33", C: "33.33"}),
        make_expense(2, {B: "40.00", C: "20.00"}, {A: "10.00", B: "25.00", C: "25.00"}),
        make_expense(3, {C: "12.99"}, {B: "12.99"}),
    ]

    balances = compute_balances(group, expenses)

    assert abs(sum(balances.values())) < Decimal("0.01")
    assert balances[A] == Decimal("56.66")


def test_settled_expense_is_same_as_removed():
    group = make_group()
    open_expense = make_expense(1, {A: "90"}, {A: "30", B: "30", C: "30"})
    settled = make_expense(2, {B: "60"}, {A: "20", B: "20", C: "20"}, settled=True)

    with_settled = compute_balances(group, [open_expense, settled])
    without = compute_balances(group, [open_expense])

    assert with_settled == without


def test_other_group_expenses_are_ignored():
    group = make_group()
    mine = make_expense(1, {A: "10"}, {B: "10"})
    other = make_expense(2, {C: "50"}, {A: "50"}, group_id=99)

    balances = compute_balances(group, [mine, other])

    assert balances == {A: Decimal("10.00"), B: Decimal("-10.00"), C: Decimal("0.00")}


def test_multiple_payers():
    group = make_group()
    expense = make_expense(1, {A: "30", B: "30"}, {A: "20", B: "20", C: "20"})

    balances = compute_balances(group, [expense])

    assert balances == {A: Decimal("10.00"), B: Decimal("10.00"), C: Decimal("-20.00")}


def test_invalid_expense_aborts_computation():
    group = make_group()
    good = make_expense(1, {A: "90"}, {A: "30", B: "30", C: "30"})
    bad = make_expense(2, {A: "90"}, {B: "30", C: "30"})

    with pytest.raises(InvalidExpense) as exc_info:
        compute_balances(group, [good, bad])
    assert exc_info.value.expense_id == 2


def test_invalid_settled_expense_is_not_checked():
    group = make_group()
    bad = make_expense(1, {A: "90"}, {B: "30"}, settled=True)

    assert compute_balances(group, [bad]) == {A: 0, B: 0, C: 0}


def test_zero_amount_expense_is_invalid():
    expense = make_expense(1, {A: "0"}, {B: "0"})

    with pytest.raises(InvalidExpense, match="must be positive"):
        validate_expense(expense)


def test_one_cent_gap_is_absorbed_before_storing():
    expense = make_expense(1, {A: "100.00"}, {A: "33.33", B: "33.33", C: "33.33"})
    validate_expense(expense)

    splits = absorb_rounding(expense.amount, expense.split_between)

    assert [s.amount for s in splits] == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(s.amount for s in splits) == expense.amount


def test_negative_entry_is_invalid():
    expense = make_expense(1, {A: "30", B: "-20"}, {C: "10"})

    with pytest.raises(InvalidExpense, match="cannot be negative"):
        validate_expense(expense)


def test_rounding_over_one_cent_is_rejected():
    expense = make_expense(1, {A: "100.00"}, {A: "33.33", B: "33.33", C: "33.32"})

    with pytest.raises(InvalidExpense, match="Split amounts"):
        validate_expense(expense)


def test_unknown_member_still_counts(caplog):
    group = make_group(member_ids=(A, B))
    expense = make_expense(1, {A: "20"}, {B: "10", C: "10"})

    with caplog.at_level("WARNING"):
        balances = compute_balances(group, [expense])

    assert balances == {A: Decimal("20.00"), B: Decimal("-10.00"), C: Decimal("-10.00")}
    assert "non-members [3]" in caplog.text


def test_find_unknown_members():
    group = make_group(member_ids=(A, B))
    expense = make_expense(1, {C: "20"}, {A: "10", 4: "10"})

    assert find_unknown_members(group, expense) == {C, 4}


def test_summarize_member_across_groups():
    summary = summarize_member(A, [
        {A: Decimal("-12.50"), B: Decimal("12.50")},
        {A: Decimal("40.00"), C: Decimal("-40.00")},
        {A: Decimal("-7.50"), B: Decimal("7.50")},
        {B: Decimal("0")},
    ])

    assert summary.member_id == A
    assert summary.total_owed == Decimal("20.00")
    assert summary.total_owed_to_user == Decimal("40.00")
