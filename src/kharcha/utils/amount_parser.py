"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENTS = Decimal("0.01")


def parse_amount(amount: str | int | float | Decimal) -> Decimal:
    """Parse an amount into a Decimal.

    Handles various formats:
    - 123.45 (int, float or Decimal)
    - "123.45"
    - "₹1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount: Amount value or string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount cannot be parsed or is not finite
    """
    if isinstance(amount, bool) or amount is None:
        raise ValueError(f"Could not parse amount '{amount}'")

    # str() keeps float amounts like 12.34 exact
    amount_str = str(amount)

    if not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols, thousands separators and inner whitespace
    amount_str = re.sub(r"[₹$€£¥,\s]", "", amount_str)

    try:
        value = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

    if not value.is_finite():
        raise ValueError(f"Amount '{amount_str}' is not a finite number")

    return -value if is_negative else value


def to_cents(amount: Decimal) -> Decimal:
    """Round an amount to two decimal places."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
