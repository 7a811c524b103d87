from datetime import date, datetime
from decimal import Decimal

import schemas
from utils.balances import compute_balances
from utils.settlements import compute_settlements, settle_pair


A, B, C, D = 1, 2, 3, 4


def make_group(member_ids=(A, B, C)):
    return schemas.Group(
        id=7,
        name="Flat",
        members=[schemas.Member(id=m, display_name=f"Member {m}") for m in member_ids]
    )


def make_expense(expense_id, paid_by, split_between, settled=False):
    return schemas.Expense(
        id=expense_id,
        group_id=7,
        title="Groceries",
        amount=sum(Decimal(v) for v in paid_by.values()),
        paid_by=[schemas.PaidByEntry(member_id=m, amount=Decimal(v)) for m, v in paid_by.items()],
        split_between=[schemas.SplitEntry(member_id=m, amount=Decimal(v)) for m, v in split_between.items()],
        settled=settled,
        date=date(2024, 1, 1),
        created_at=datetime(2024, 1, 1)
    )


def as_tuples(settlements):
    return [(s.from_user, s.to_user, s.amount) for s in settlements]


def apply(balances, settlements):
    result = dict(balances)
    for s in settlements:
        result[s.from_user] += s.amount
        result[s.to_user] -= s.amount
    return result


def test_equal_split_scenario():
    group = make_group()
    balances = compute_balances(group, [make_expense(1, {A: "90"}, {A: "30", B: "30", C: "30"})])

    settlements = compute_settlements(group, balances)

    assert as_tuples(settlements) == [(B, A, Decimal("30.00")), (C, A, Decimal("30.00"))]
    for s in settlements:
        assert s.group_id == 7
        assert s.status == "pending"


def test_single_member_group_has_no_settlements():
    group = make_group(member_ids=(A,))

    assert compute_settlements(group, {A: Decimal("0")}) == []


def test_follows_member_order_not_size():
    group = make_group(member_ids=(A, B, C, D))
    balances = {A: Decimal("-10"), B: Decimal("5"), C: Decimal("-40"), D: Decimal("45")}

    settlements = compute_settlements(group, balances)

    # A sorted matcher would pair C with D first
    assert as_tuples(settlements) == [
        (A, B, Decimal("5.00")),
        (A, D, Decimal("5.00")),
        (C, D, Decimal("40.00")),
    ]


def test_settlements_zero_every_balance():
    group = make_group(member_ids=(A, B, C, D))
    balances = {A: Decimal("33.34"), B: Decimal("-50.01"), C: Decimal("26.67"), D: Decimal("-10.00")}

    settlements = compute_settlements(group, balances)

    assert all(abs(v) < Decimal("0.01") for v in apply(balances, settlements).values())
    assert len(settlements) <= 3
    for s in settlements:
        assert s.amount > 0
        assert s.from_user != s.to_user


def test_near_zero_balances_are_ignored():
    group = make_group()
    balances = {A: Decimal("0.005"), B: Decimal("-0.005"), C: Decimal("0")}

    assert compute_settlements(group, balances) == []


def test_missing_members_count_as_zero():
    group = make_group()

    settlements = compute_settlements(group, {C: Decimal("-12"), A: Decimal("12")})

    assert as_tuples(settlements) == [(C, A, Decimal("12.00"))]


def test_ids_are_fresh_each_call():
    group = make_group()
    balances = {A: Decimal("20"), B: Decimal("-20"), C: Decimal("0")}

    first = compute_settlements(group, balances)
    second = compute_settlements(group, balances)

    assert as_tuples(first) == as_tuples(second)
    assert first[0].id != second[0].id


def test_settle_pair_finds_expenses_in_both_directions():
    expenses = [
        make_expense(1, {A: "90"}, {A: "30", B: "30", C: "30"}),
        make_expense(2, {B: "20"}, {A: "10", B: "10"}),
        make_expense(3, {C: "15"}, {A: "15"}),
        make_expense(4, {A: "40"}, {B: "40"}, settled=True),
    ]

    assert settle_pair(expenses, B, A) == [1, 2]
    # C and B never shared an expense directly
    assert settle_pair(expenses, C, B) == [1, 2, 3]


def test_settling_pair_clears_their_balance():
    group = make_group()
    expenses = [
        make_expense(1, {A: "60"}, {A: "30", B: "30"}),
        make_expense(2, {C: "20"}, {A: "10", C: "10"}),
    ]

    settled_ids = set(settle_pair(expenses, B, A))
    remaining = [e.model_copy(update={"settled": e.id in settled_ids}) for e in expenses]
    balances = compute_balances(group, remaining)

    assert balances == {A: Decimal("-10.00"), B: Decimal("0.00"), C: Decimal("10.00")}


def test_settle_pair_with_self_is_empty():
    expenses = [make_expense(1, {A: "10"}, {A: "10"})]

    assert settle_pair(expenses, A, A) == []


def test_settle_pair_without_shared_expense_clears_chain():
    group = make_group()
    expenses = [
        make_expense(1, {A: "20"}, {A: "10", B: "10"}),
        make_expense(2, {B: "20"}, {B: "10", C: "10"}),
    ]

    balances = compute_balances(group, expenses)
    assert as_tuples(compute_settlements(group, balances)) == [(C, A, Decimal("10.00"))]

    settled_ids = set(settle_pair(expenses, C, A))
    assert settled_ids == {1, 2}

    remaining = [e.model_copy(update={"settled": e.id in settled_ids}) for e in expenses]
    balances = compute_balances(group, remaining)
    assert all(v == 0 for v in balances.values())
    assert compute_settlements(group, balances) == []


def test_settle_pair_with_no_open_expenses_is_empty():
    expenses = [make_expense(1, {A: "20"}, {A: "10", B: "10"}, settled=True)]

    assert settle_pair(expenses, C, A) == []
