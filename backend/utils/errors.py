"""Errors raised by the ledger core.

None of these know about HTTP. Routers translate them into 400 responses.
"""


class LedgerError(Exception):
    """Base class for ledger computation and validation errors."""
    pass


class InvalidExpense(LedgerError):
    """An expense whose payer or split totals do not match its amount."""

    def __init__(self, expense_id, message: str):
        self.expense_id = expense_id
        super().__init__(message)


class UnknownMember(LedgerError):
    """An expense entry references a member that is not in the group."""

    def __init__(self, group_id, member_ids):
        self.group_id = group_id
        self.member_ids = sorted(member_ids)
        super().__init__(
            f"Members {self.member_ids} are not part of group {group_id}"
        )


class InvalidSplit(LedgerError):
    """Split inputs (shares, percentages, exact amounts) cannot be resolved."""
    pass
