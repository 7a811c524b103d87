"""Split calculation utilities: resolve EQUAL/EXACT/SHARES/PERCENTAGE inputs into amounts."""

from decimal import Decimal, ROUND_DOWN
from typing import Dict, List, Optional

import schemas
from utils.currency import EPSILON, from_cents, to_cents, to_money
from utils.errors import InvalidSplit


def _order(keys, member_ids: List[int]) -> List[int]:
    """Order split keys by group member order, unknown ids last."""
    keys = list(keys)
    ordered = [m for m in member_ids if m in keys]
    ordered.extend(k for k in keys if k not in ordered)
    return ordered


def _distribute(total_cents: int, weights: Dict[int, Decimal], order: List[int]) -> Dict[int, int]:
    """
    Split total_cents proportionally to weights.

    Each share is rounded down to the cent; leftover cents go one each to the
    first members in order, so the parts always add up to the total.
    """
    total_weight = sum(weights.values())
    cents = {}
    for member_id in order:
        raw = Decimal(total_cents) * weights[member_id] / total_weight
        cents[member_id] = int(raw.to_integral_value(rounding=ROUND_DOWN))

    remainder = total_cents - sum(cents.values())
    for member_id in order:
        if remainder <= 0:
            break
        if weights[member_id] > 0:
            cents[member_id] += 1
            remainder -= 1
    return cents


def calculate_splits(
    amount: Decimal,
    method: schemas.SplitMethod,
    member_ids: List[int],
    exact_amounts: Optional[Dict[int, Decimal]] = None,
    shares: Optional[Dict[int, Decimal]] = None,
    percentages: Optional[Dict[int, Decimal]] = None
) -> List[schemas.SplitEntry]:
    """
    Calculate each member's owed amount for an expense.

    Args:
        amount: Total expense amount
        method: How the amounts are derived
        member_ids: Participants for EQUAL, otherwise the group member order
            used to hand out leftover cents
        exact_amounts / shares / percentages: Per-member inputs for the
            EXACT, SHARES and PERCENTAGE methods

    Returns:
        Split entries with non-zero amounts, in member order.

    Raises:
        InvalidSplit: inputs for the chosen method are missing or inconsistent
    """
    total_cents = to_cents(amount)
    if total_cents <= 0:
        raise InvalidSplit("Expense amount must be positive")

    if method == schemas.SplitMethod.EQUAL:
        if not member_ids:
            raise InvalidSplit("EQUAL split needs at least one participant")
        order = list(dict.fromkeys(member_ids))
        cents = _distribute(total_cents, {m: Decimal(1) for m in order}, order)
        splits = [schemas.SplitEntry(member_id=m, amount=from_cents(cents[m])) for m in order]

    elif method == schemas.SplitMethod.EXACT:
        if not exact_amounts:
            raise InvalidSplit("EXACT split needs an amount per member")
        splits = []
        for m in _order(exact_amounts, member_ids):
            value = to_money(exact_amounts[m])
            if value < 0:
                raise InvalidSplit(f"Split amount for member {m} cannot be negative")
            splits.append(schemas.SplitEntry(member_id=m, amount=value))

    elif method == schemas.SplitMethod.SHARES:
        if not shares:
            raise InvalidSplit("SHARES split needs a share count per member")
        if any(s < 0 for s in shares.values()):
            raise InvalidSplit("Shares cannot be negative")
        if sum(shares.values()) <= 0:
            raise InvalidSplit("Total shares must be greater than zero")
        order = _order(shares, member_ids)
        cents = _distribute(total_cents, {m: Decimal(shares[m]) for m in order}, order)
        splits = [
            schemas.SplitEntry(member_id=m, amount=from_cents(cents[m]), shares=shares[m])
            for m in order
        ]

    elif method == schemas.SplitMethod.PERCENTAGE:
        if not percentages:
            raise InvalidSplit("PERCENTAGE split needs a percentage per member")
        if any(p < 0 for p in percentages.values()):
            raise InvalidSplit("Percentages cannot be negative")
        total_pct = sum(percentages.values())
        if abs(total_pct - Decimal(100)) > EPSILON:
            raise InvalidSplit(f"Percentages must add up to 100, got {total_pct}")
        order = _order(percentages, member_ids)
        cents = _distribute(total_cents, {m: Decimal(percentages[m]) for m in order}, order)
        splits = [
            schemas.SplitEntry(member_id=m, amount=from_cents(cents[m]), percentage=percentages[m])
            for m in order
        ]

    else:
        raise InvalidSplit(f"Unknown split method {method}")

    return [s for s in splits if s.amount > 0]


def absorb_rounding(amount: Decimal, entries: list) -> list:
    """
    Round entries to cents and make them add up to amount exactly.

    The difference left after rounding (at most a cent once the expense has
    been validated) goes to the first entry that can take it without going
    negative. Entries that end up at zero are dropped.
    """
    rounded = [e.model_copy(update={"amount": to_money(e.amount)}) for e in entries]

    difference = to_money(amount) - sum((e.amount for e in rounded), Decimal("0"))
    if difference:
        for idx, entry in enumerate(rounded):
            if entry.amount + difference >= 0:
                rounded[idx] = entry.model_copy(update={"amount": entry.amount + difference})
                break

    return [e for e in rounded if e.amount != 0]
