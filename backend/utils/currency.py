"""Currency-related utilities: decimal money handling, cent conversion and formatting."""

from decimal import Decimal, ROUND_HALF_UP


# Tolerance used to treat near-zero sums as zero (one cent)
EPSILON = Decimal("0.01")

CENT = Decimal("0.01")

SUPPORTED_CURRENCIES = ["USD", "EUR", "GBP", "JPY", "CAD"]

# Currency symbols for formatting
CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
}


def to_money(value) -> Decimal:
    """Coerce an int, str or Decimal into a Decimal rounded to cents."""
    if isinstance(value, float):
        # Go through str so 0.1 stays 0.10 instead of its binary expansion
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount: Decimal) -> int:
    """Convert a decimal amount to integer cents for storage."""
    return int(to_money(amount) * 100)


def from_cents(amount_cents: int) -> Decimal:
    """Convert stored integer cents back to a decimal amount."""
    return (Decimal(amount_cents) / 100).quantize(CENT)


def format_currency(amount: Decimal, currency: str) -> str:
    """
    Format a decimal amount as a currency string with symbol.

    Args:
        amount: Amount in currency units (e.g., Decimal("12.34"))
        currency: Currency code (e.g., "USD", "EUR")

    Returns:
        Formatted string with symbol (e.g., "$12.34", "-€12.34")
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    amount = to_money(amount)

    # For currencies like JPY that don't use decimal places
    if currency == "JPY":
        body = f"{abs(amount):.0f}"
    else:
        body = f"{abs(amount):.2f}"

    if amount < 0:
        return f"-{symbol}{body}"
    return f"{symbol}{body}"
